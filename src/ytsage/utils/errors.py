"""Custom exceptions and the failure taxonomy for ytsage."""

from enum import Enum
from typing import Any


class YTSageError(Exception):
    """Base exception for all ytsage errors."""

    pass


class ConfigError(YTSageError):
    """Configuration-related errors."""

    pass


class InvalidConfigError(ConfigError):
    """Invalid configuration data."""

    pass


class ErrorKind(str, Enum):
    """Canonical failure kinds.

    Every raw failure maps to exactly one kind. Unmatched failures map to
    ``UNKNOWN``.
    """

    VALIDATION = "validation"
    REMOTE_NOT_FOUND = "remote-not-found"
    ACCESS_RESTRICTED = "access-restricted"
    RATE_LIMITED = "rate-limited"
    TRANSIENT_NETWORK = "transient-network"
    PROCESSING_FAILURE = "processing-failure"
    AI_UNAVAILABLE = "ai-unavailable"
    AI_QUOTA_EXCEEDED = "ai-quota-exceeded"
    AI_CONTENT_TOO_LARGE = "ai-content-too-large"
    UNKNOWN = "unknown"


class ErrorCode(str, Enum):
    """Fine-grained failure codes, each belonging to one ErrorKind."""

    # Input validation
    INVALID_URL = "INVALID_URL"
    INVALID_QUERY = "INVALID_QUERY"
    INVALID_RANGE = "INVALID_RANGE"

    # Remote metadata
    VIDEO_NOT_FOUND = "VIDEO_NOT_FOUND"
    VIDEO_UNAVAILABLE = "VIDEO_UNAVAILABLE"
    PRIVATE_VIDEO = "PRIVATE_VIDEO"
    AGE_RESTRICTED = "AGE_RESTRICTED"
    GEO_BLOCKED = "GEO_BLOCKED"
    RATE_LIMITED = "RATE_LIMITED"
    PLAYLIST_NOT_FOUND = "PLAYLIST_NOT_FOUND"
    CHANNEL_NOT_FOUND = "CHANNEL_NOT_FOUND"
    TRANSCRIPT_UNAVAILABLE = "TRANSCRIPT_UNAVAILABLE"

    # Download / network
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    DOWNLOAD_FAILED = "DOWNLOAD_FAILED"
    INCOMPLETE_DOWNLOAD = "INCOMPLETE_DOWNLOAD"
    DISK_SPACE = "DISK_SPACE"

    # Media processing
    FFMPEG_ERROR = "FFMPEG_ERROR"
    CODEC_ERROR = "CODEC_ERROR"
    CORRUPTED_FILE = "CORRUPTED_FILE"

    # AI service
    AI_API_KEY_INVALID = "AI_API_KEY_INVALID"
    AI_RATE_LIMITED = "AI_RATE_LIMITED"
    AI_SERVICE_UNAVAILABLE = "AI_SERVICE_UNAVAILABLE"
    AI_TOKEN_LIMIT = "AI_TOKEN_LIMIT"

    UNKNOWN_ERROR = "UNKNOWN_ERROR"

    @property
    def kind(self) -> ErrorKind:
        """The canonical kind this code belongs to."""
        return _CODE_KINDS[self]


_CODE_KINDS: dict[ErrorCode, ErrorKind] = {
    ErrorCode.INVALID_URL: ErrorKind.VALIDATION,
    ErrorCode.INVALID_QUERY: ErrorKind.VALIDATION,
    ErrorCode.INVALID_RANGE: ErrorKind.VALIDATION,
    ErrorCode.VIDEO_NOT_FOUND: ErrorKind.REMOTE_NOT_FOUND,
    ErrorCode.PLAYLIST_NOT_FOUND: ErrorKind.REMOTE_NOT_FOUND,
    ErrorCode.CHANNEL_NOT_FOUND: ErrorKind.REMOTE_NOT_FOUND,
    ErrorCode.VIDEO_UNAVAILABLE: ErrorKind.ACCESS_RESTRICTED,
    ErrorCode.PRIVATE_VIDEO: ErrorKind.ACCESS_RESTRICTED,
    ErrorCode.AGE_RESTRICTED: ErrorKind.ACCESS_RESTRICTED,
    ErrorCode.GEO_BLOCKED: ErrorKind.ACCESS_RESTRICTED,
    ErrorCode.TRANSCRIPT_UNAVAILABLE: ErrorKind.ACCESS_RESTRICTED,
    ErrorCode.RATE_LIMITED: ErrorKind.RATE_LIMITED,
    ErrorCode.NETWORK_ERROR: ErrorKind.TRANSIENT_NETWORK,
    ErrorCode.TIMEOUT: ErrorKind.TRANSIENT_NETWORK,
    ErrorCode.DOWNLOAD_FAILED: ErrorKind.PROCESSING_FAILURE,
    ErrorCode.INCOMPLETE_DOWNLOAD: ErrorKind.PROCESSING_FAILURE,
    ErrorCode.DISK_SPACE: ErrorKind.PROCESSING_FAILURE,
    ErrorCode.FFMPEG_ERROR: ErrorKind.PROCESSING_FAILURE,
    ErrorCode.CODEC_ERROR: ErrorKind.PROCESSING_FAILURE,
    ErrorCode.CORRUPTED_FILE: ErrorKind.PROCESSING_FAILURE,
    ErrorCode.AI_API_KEY_INVALID: ErrorKind.AI_UNAVAILABLE,
    ErrorCode.AI_SERVICE_UNAVAILABLE: ErrorKind.AI_UNAVAILABLE,
    ErrorCode.AI_RATE_LIMITED: ErrorKind.AI_QUOTA_EXCEEDED,
    ErrorCode.AI_TOKEN_LIMIT: ErrorKind.AI_CONTENT_TOO_LARGE,
    ErrorCode.UNKNOWN_ERROR: ErrorKind.UNKNOWN,
}


class ClassifiedError(YTSageError):
    """A failure mapped onto the taxonomy.

    Carries the canonical kind, the fine-grained code, a user-facing message,
    the original failure and an ordered tuple of remediation suggestions.
    Instances are immutable once constructed.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        cause: BaseException | None = None,
        remediations: tuple[str, ...] | list[str] = (),
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        object.__setattr__(self, "_code", code)
        object.__setattr__(self, "_message", message)
        object.__setattr__(self, "_cause", cause)
        object.__setattr__(self, "_remediations", tuple(remediations))
        object.__setattr__(self, "_details", dict(details or {}))
        object.__setattr__(self, "_frozen", True)

    def __setattr__(self, name: str, value: Any) -> None:
        # Exception machinery sets these while raising and chaining.
        if name.startswith("__") or not getattr(self, "_frozen", False):
            object.__setattr__(self, name, value)
            return
        raise AttributeError(f"ClassifiedError is immutable (cannot set {name!r})")

    def __reduce__(self):
        return (
            self.__class__,
            (self._code, self._message, self._cause, self._remediations, self._details),
        )

    @property
    def code(self) -> ErrorCode:
        return self._code

    @property
    def kind(self) -> ErrorKind:
        return self._code.kind

    @property
    def message(self) -> str:
        return self._message

    @property
    def cause(self) -> BaseException | None:
        return self._cause

    @property
    def remediations(self) -> tuple[str, ...]:
        return self._remediations

    @property
    def details(self) -> dict[str, Any]:
        return dict(self._details)

    def __repr__(self) -> str:
        return f"ClassifiedError(kind={self.kind.value!r}, code={self.code.value!r}, message={self.message!r})"

    def to_error_response(self) -> dict[str, Any]:
        """Build the error payload handed to the tool-dispatch layer."""
        error: dict[str, Any] = {
            "code": self.code.value,
            "kind": self.kind.value,
            "message": self.message,
        }
        if self._details:
            error["details"] = dict(self._details)
        if self.remediations:
            error["suggestions"] = list(self.remediations)
        return {"success": False, "error": error}


def wrap_error(error: BaseException) -> ClassifiedError:
    """Wrap any failure in a ClassifiedError if it isn't one already."""
    if isinstance(error, ClassifiedError):
        return error
    return ClassifiedError(ErrorCode.UNKNOWN_ERROR, str(error), cause=error)


class APIKeyError(ClassifiedError):
    """Raised when an AI provider API key is missing or malformed."""

    def __init__(self, message: str, remediations: tuple[str, ...] | list[str] = ()) -> None:
        super().__init__(ErrorCode.AI_API_KEY_INVALID, message, remediations=remediations)

    def __reduce__(self):
        return (self.__class__, (self._message, self._remediations))
