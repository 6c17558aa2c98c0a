"""Configuration schema models using Pydantic."""

from typing import Literal

from pydantic import BaseModel, Field

from ytsage.utils.retry import RetryPolicy

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
ProviderName = Literal["gemini", "claude"]


class RetrySettings(BaseModel):
    """Back-off settings handed to each retried call site."""

    max_attempts: int = Field(default=3, ge=1, le=10)
    initial_delay_seconds: float = Field(default=1.0, ge=0)
    max_delay_seconds: float = Field(default=8.0, ge=0)

    def to_policy(self) -> RetryPolicy:
        """Build the RetryPolicy for a call site."""
        return RetryPolicy(
            max_attempts=self.max_attempts,
            initial_delay=self.initial_delay_seconds,
            max_delay=self.max_delay_seconds,
        )


class AIConfig(BaseModel):
    """Text-generation provider configuration."""

    provider: ProviderName = "gemini"
    gemini_model: str = "gemini-flash-latest"
    claude_model: str = "claude-sonnet-4-5"
    gemini_api_key: str | None = None  # If None, will use environment variable
    claude_api_key: str | None = None  # If None, will use environment variable
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)


class AnalysisConfig(BaseModel):
    """Defaults for the analysis commands."""

    summary_max_words: int = Field(default=200, ge=10)
    keyword_count: int = Field(default=15, ge=1, le=100)
    highlight_count: int = Field(default=7, ge=1, le=50)


class TranscriptConfig(BaseModel):
    """Transcript retrieval configuration."""

    preferred_languages: list[str] = Field(default_factory=lambda: ["en"])


class GlobalConfig(BaseModel):
    """Global ytsage configuration."""

    version: str = "1"
    log_level: LogLevel = "INFO"

    ai: AIConfig = Field(default_factory=AIConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    transcripts: TranscriptConfig = Field(default_factory=TranscriptConfig)
    retry: RetrySettings = Field(default_factory=RetrySettings)
