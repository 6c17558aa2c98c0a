"""Map raw provider failures onto the ytsage error taxonomy.

Each upstream surface has an ordered table of keyword rules. The failure
message is lowercased and the first rule with a matching keyword wins, so
rule order decides overlaps (an authentication failure that mentions a
"limit" is still an authentication failure).
"""

import logging
from dataclasses import dataclass
from enum import Enum

from ytsage.utils.errors import ClassifiedError, ErrorCode

logger = logging.getLogger(__name__)


class ErrorSurface(str, Enum):
    """Upstream surfaces whose failures can be classified."""

    REMOTE_METADATA = "remote-metadata"
    AI_GENERATION = "ai-generation"
    MEDIA_PROCESSING = "media-processing"
    NETWORK = "network"


@dataclass(frozen=True)
class ClassificationRule:
    """One keyword rule: any keyword present selects this code."""

    keywords: tuple[str, ...]
    code: ErrorCode
    message: str
    remediations: tuple[str, ...]

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


@dataclass(frozen=True)
class FallbackRule:
    """Result used when no keyword rule matches on a surface."""

    code: ErrorCode
    message: str
    remediations: tuple[str, ...]


REMOTE_METADATA_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        keywords=("not found", "does not exist"),
        code=ErrorCode.VIDEO_NOT_FOUND,
        message="Video not found or has been deleted",
        remediations=(
            "Check if the video URL is correct",
            "The video may have been removed by the uploader",
        ),
    ),
    ClassificationRule(
        keywords=("private", "unavailable"),
        code=ErrorCode.PRIVATE_VIDEO,
        message="Video is private or unavailable",
        remediations=("This video is private or restricted", "Try a different video"),
    ),
    ClassificationRule(
        keywords=("age", "restricted"),
        code=ErrorCode.AGE_RESTRICTED,
        message="Video is age-restricted",
        remediations=(
            "This video requires age verification",
            "Authentication may be required",
        ),
    ),
    ClassificationRule(
        keywords=("geo", "region", "country"),
        code=ErrorCode.GEO_BLOCKED,
        message="Video is not available in your region",
        remediations=("This video is geo-blocked in your location",),
    ),
    ClassificationRule(
        keywords=("rate", "quota", "limit"),
        code=ErrorCode.RATE_LIMITED,
        message="Rate limit exceeded",
        remediations=("Too many requests", "Please wait a few minutes and try again"),
    ),
)

AI_GENERATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        keywords=("api key", "authentication"),
        code=ErrorCode.AI_API_KEY_INVALID,
        message="Invalid or missing AI API key",
        remediations=(
            "Check your GEMINI_API_KEY environment variable",
            "Verify the API key is correct",
        ),
    ),
    ClassificationRule(
        keywords=("rate", "quota", "limit"),
        code=ErrorCode.AI_RATE_LIMITED,
        message="AI service rate limit exceeded",
        remediations=(
            "Wait a few minutes before trying again",
            "Consider upgrading your API plan",
        ),
    ),
    ClassificationRule(
        keywords=("token", "length", "too long"),
        code=ErrorCode.AI_TOKEN_LIMIT,
        message="Content exceeds AI token limit",
        remediations=(
            "Try with a shorter video",
            "The transcript may be too long for processing",
        ),
    ),
    ClassificationRule(
        keywords=("unavailable", "service"),
        code=ErrorCode.AI_SERVICE_UNAVAILABLE,
        message="AI service is temporarily unavailable",
        remediations=("Try again later", "The AI service may be experiencing issues"),
    ),
)

NETWORK_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        keywords=("timeout",),
        code=ErrorCode.TIMEOUT,
        message="Operation timed out",
        remediations=("Check your internet connection", "Try again later"),
    ),
    ClassificationRule(
        keywords=("network", "connection"),
        code=ErrorCode.NETWORK_ERROR,
        message="Network connection failed",
        remediations=("Check your internet connection", "Verify network settings"),
    ),
    ClassificationRule(
        keywords=("disk", "space", "enospc"),
        code=ErrorCode.DISK_SPACE,
        message="Insufficient disk space",
        remediations=("Free up disk space", "Choose a different download location"),
    ),
)

MEDIA_PROCESSING_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        keywords=("codec", "encoder", "decoder"),
        code=ErrorCode.CODEC_ERROR,
        message="Codec error during media processing",
        remediations=(
            "Try a different output format",
            "The requested codec may not be supported",
        ),
    ),
    ClassificationRule(
        keywords=("corrupt", "invalid", "damaged"),
        code=ErrorCode.CORRUPTED_FILE,
        message="Media file is corrupted or invalid",
        remediations=(
            "Try downloading the file again",
            "The source file may be damaged",
        ),
    ),
)

_RULES: dict[ErrorSurface, tuple[ClassificationRule, ...]] = {
    ErrorSurface.REMOTE_METADATA: REMOTE_METADATA_RULES,
    ErrorSurface.AI_GENERATION: AI_GENERATION_RULES,
    ErrorSurface.NETWORK: NETWORK_RULES,
    ErrorSurface.MEDIA_PROCESSING: MEDIA_PROCESSING_RULES,
}

# Network and media failures always land in a known processing bucket;
# metadata and AI failures fall through to UNKNOWN.
_FALLBACKS: dict[ErrorSurface, FallbackRule] = {
    ErrorSurface.NETWORK: FallbackRule(
        code=ErrorCode.DOWNLOAD_FAILED,
        message="Download failed",
        remediations=("Try again", "Check your internet connection"),
    ),
    ErrorSurface.MEDIA_PROCESSING: FallbackRule(
        code=ErrorCode.FFMPEG_ERROR,
        message="Media processing failed",
        remediations=("Try again", "Check if FFmpeg is properly installed"),
    ),
}


def classify(surface: ErrorSurface | str, error: BaseException) -> ClassifiedError:
    """Classify a raw failure from the given surface.

    Args:
        surface: Upstream surface the failure came from
        error: The raw failure

    Returns:
        ClassifiedError for the first matching rule. Unmatched failures on
        surfaces without a fallback become ``unknown`` with the raw message
        passed through and no remediations.

    Example:
        >>> err = classify(ErrorSurface.AI_GENERATION, Exception("Quota exceeded"))
        >>> err.code
        <ErrorCode.AI_RATE_LIMITED: 'AI_RATE_LIMITED'>
    """
    if isinstance(error, ClassifiedError):
        return error

    surface = ErrorSurface(surface)
    raw_message = str(error)
    text = raw_message.lower()

    for rule in _RULES[surface]:
        if rule.matches(text):
            logger.debug(f"Classified {surface.value} failure as {rule.code.value}: {raw_message}")
            return ClassifiedError(
                rule.code, rule.message, cause=error, remediations=rule.remediations
            )

    fallback = _FALLBACKS.get(surface)
    if fallback is not None:
        return ClassifiedError(
            fallback.code, fallback.message, cause=error, remediations=fallback.remediations
        )

    return ClassifiedError(ErrorCode.UNKNOWN_ERROR, raw_message, cause=error)


def classify_metadata_error(error: BaseException) -> ClassifiedError:
    """Classify a YouTube metadata failure."""
    return classify(ErrorSurface.REMOTE_METADATA, error)


def classify_ai_error(error: BaseException) -> ClassifiedError:
    """Classify a text-generation failure."""
    return classify(ErrorSurface.AI_GENERATION, error)


def classify_network_error(error: BaseException) -> ClassifiedError:
    """Classify a download or connection failure."""
    return classify(ErrorSurface.NETWORK, error)


def classify_media_error(error: BaseException) -> ClassifiedError:
    """Classify a media-processing failure."""
    return classify(ErrorSurface.MEDIA_PROCESSING, error)
