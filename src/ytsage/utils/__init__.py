"""Utility functions and helpers for ytsage."""

from ytsage.utils.classifier import ErrorSurface, classify
from ytsage.utils.errors import (
    APIKeyError,
    ClassifiedError,
    ConfigError,
    ErrorCode,
    ErrorKind,
    InvalidConfigError,
    YTSageError,
    wrap_error,
)
from ytsage.utils.retry import RetryPolicy, is_retryable_error, with_retry

__all__ = [
    # Errors
    "YTSageError",
    "ConfigError",
    "InvalidConfigError",
    "APIKeyError",
    "ClassifiedError",
    "ErrorCode",
    "ErrorKind",
    "wrap_error",
    # Classification
    "ErrorSurface",
    "classify",
    # Retry
    "RetryPolicy",
    "is_retryable_error",
    "with_retry",
]
