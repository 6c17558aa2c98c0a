"""YouTube URL parsing."""

import re
from urllib.parse import parse_qs, urlparse

from ytsage.utils.errors import ClassifiedError, ErrorCode

VIDEO_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{11}$")


def extract_video_id(url: str) -> str | None:
    """Extract a YouTube video ID from a URL or bare ID.

    Handles:
    - youtube.com/watch?v=ID (www. and m. hosts)
    - youtu.be/ID
    - youtube.com/embed/ID, /v/ID, /shorts/ID, /live/ID
    - a bare 11-character ID

    Returns:
        Video ID or None if not recognised
    """
    url = url.strip()
    if VIDEO_ID_PATTERN.match(url):
        return url

    parsed = urlparse(url if "://" in url else f"https://{url}")
    host = parsed.netloc.lower().removeprefix("www.").removeprefix("m.")

    video_id: str | None = None
    if host in ("youtube.com", "music.youtube.com"):
        if parsed.path == "/watch":
            video_id = parse_qs(parsed.query).get("v", [None])[0]
        else:
            parts = parsed.path.split("/")
            if len(parts) >= 3 and parts[1] in ("embed", "v", "shorts", "live"):
                video_id = parts[2]
    elif host == "youtu.be":
        video_id = parsed.path.lstrip("/").split("/")[0]

    if video_id and VIDEO_ID_PATTERN.match(video_id):
        return video_id
    return None


def require_video_id(url: str) -> str:
    """Like :func:`extract_video_id` but raise for unrecognised input.

    Raises:
        ClassifiedError: INVALID_URL if no video ID can be extracted
    """
    video_id = extract_video_id(url)
    if video_id is None:
        raise ClassifiedError(
            ErrorCode.INVALID_URL,
            "Invalid YouTube video URL",
            remediations=(
                "Use a URL like https://www.youtube.com/watch?v=VIDEO_ID",
                "Short links (youtu.be/VIDEO_ID) and bare video IDs also work",
            ),
            details={"url": url},
        )
    return video_id


def video_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def playlist_url(playlist_id: str) -> str:
    return f"https://www.youtube.com/playlist?list={playlist_id}"


def channel_url(channel: str) -> str:
    """Channel page URL for a channel ID (``UC...``) or ``@handle``."""
    if channel.startswith("@"):
        return f"https://www.youtube.com/{channel}"
    return f"https://www.youtube.com/channel/{channel}"
