"""Timestamp formatting and parsing helpers."""

import re

_TIMESTAMP_PATTERN = re.compile(r"^\s*\d+(?::\d{1,2}){0,2}\s*$")


def format_timestamp(seconds: float) -> str:
    """Format seconds as ``MM:SS``, or ``HH:MM:SS`` past the first hour.

    Examples:
        >>> format_timestamp(75)
        '01:15'
        >>> format_timestamp(3725)
        '01:02:05'
    """
    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)

    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def parse_timestamp(timestamp: str) -> int:
    """Parse ``H:M:S``, ``M:S`` or bare seconds into whole seconds.

    Raises:
        ValueError: If the text is not a timestamp
    """
    if not _TIMESTAMP_PATTERN.match(timestamp):
        raise ValueError(f"Invalid timestamp: {timestamp!r}")

    seconds = 0
    for part in timestamp.strip().split(":"):
        seconds = seconds * 60 + int(part)
    return seconds


def parse_duration(duration: str | int | float | None) -> int:
    """Normalise a metadata duration (seconds or timestamp text) to seconds."""
    if duration is None:
        return 0
    if isinstance(duration, (int, float)):
        return max(0, int(duration))
    return parse_timestamp(duration)
