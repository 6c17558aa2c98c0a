"""Data models for AI analysis results.

All records are immutable value objects produced by the extractors.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny, computed_field


class Record(BaseModel):
    """Base class for extracted records."""

    model_config = ConfigDict(frozen=True)


class Summary(Record):
    """Summary of a transcript with its key points."""

    summary: str
    key_points: tuple[str, ...] = Field(default_factory=tuple)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def word_count(self) -> int:
        """Whitespace-token count of the summary text."""
        return len(self.summary.split())


class Chapter(Record):
    """A chapter marker."""

    timestamp: str = Field(..., description="Start time as MM:SS or HH:MM:SS")
    title: str
    description: str = ""
    auto_generated: bool = False


class Keyword(Record):
    """A keyword with its relevance in [0, 1] and frequency >= 1."""

    keyword: str
    relevance: float = Field(..., ge=0.0, le=1.0)
    frequency: int = Field(default=1, ge=1)


class Topic(Record):
    """A detected topic with confidence in [0, 1]."""

    topic: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    category: str = "General"


class Highlight(Record):
    """A highlight moment."""

    timestamp: str
    duration: str
    description: str
    reason: str = ""
    score: float = Field(..., ge=0.0, le=1.0)


R = TypeVar("R", bound=Record)


class ExtractionResult(BaseModel, Generic[R]):
    """Outcome of running the extraction cascade for one content type."""

    model_config = ConfigDict(frozen=True)

    records: tuple[SerializeAsAny[R], ...] = Field(default_factory=tuple)
    degraded: bool = False
    tier: str | None = Field(default=None, description="Name of the winning tier")

    def __len__(self) -> int:
        return len(self.records)
