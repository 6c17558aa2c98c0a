"""Configuration management for ytsage."""

from ytsage.config.manager import ConfigManager
from ytsage.config.schema import (
    AIConfig,
    AnalysisConfig,
    GlobalConfig,
    RetrySettings,
    TranscriptConfig,
)

__all__ = [
    "ConfigManager",
    "GlobalConfig",
    "AIConfig",
    "AnalysisConfig",
    "RetrySettings",
    "TranscriptConfig",
]
