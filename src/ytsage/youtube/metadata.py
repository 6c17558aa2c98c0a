"""YouTube metadata access through yt-dlp.

yt-dlp is synchronous, so each extraction runs in the default thread pool.
Every call goes through the retry executor; failures surface as
``ClassifiedError`` on the remote-metadata surface.
"""

import asyncio
import logging
from typing import Any

from yt_dlp import YoutubeDL
from yt_dlp.utils import DownloadError, ExtractorError

from ytsage.utils.classifier import ErrorSurface, classify, classify_metadata_error
from ytsage.utils.errors import ClassifiedError, ErrorCode
from ytsage.utils.retry import RetryPolicy, with_retry
from ytsage.utils.timestamps import format_timestamp

from .models import ChannelInfo, PlaylistInfo, PlaylistVideo, SearchResult, VideoInfo
from .urls import channel_url, playlist_url, require_video_id, video_url

logger = logging.getLogger(__name__)

BASE_OPTIONS: dict[str, Any] = {
    "quiet": True,
    "no_warnings": True,
    "skip_download": True,
}

MAX_SEARCH_RESULTS = 50


def classify_remote_error(error: BaseException) -> ClassifiedError:
    """Classify a yt-dlp failure.

    Transport failures (timeouts, refused or dropped connections) are
    classified as network errors so the retry executor treats them as
    transient. yt-dlp wraps these in messages such as "Unable to download
    webpage", which the remote-metadata keywords would otherwise misread.
    Everything else goes through the remote-metadata rules.
    """
    network = classify(ErrorSurface.NETWORK, error)
    if network.code in (ErrorCode.TIMEOUT, ErrorCode.NETWORK_ERROR):
        return network
    return classify_metadata_error(error)


def _thumbnail(info: dict[str, Any]) -> str:
    if info.get("thumbnail"):
        return str(info["thumbnail"])
    thumbnails = info.get("thumbnails") or []
    if thumbnails:
        return str(thumbnails[-1].get("url", ""))
    return ""


def _count(value: Any) -> int:
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError):
        return 0


def _require_count(name: str, value: int, maximum: int | None = None) -> None:
    if value < 1 or (maximum is not None and value > maximum):
        bound = f"between 1 and {maximum}" if maximum is not None else "at least 1"
        raise ClassifiedError(
            ErrorCode.INVALID_RANGE,
            f"{name} must be {bound}, got {value}",
            remediations=(f"Pass a {name} {bound}",),
            details={name: value},
        )


def _video_from_info(info: dict[str, Any], video_id: str) -> VideoInfo:
    seconds = _count(info.get("duration"))
    categories = info.get("categories") or []
    return VideoInfo(
        video_id=info.get("id") or video_id,
        title=info.get("title") or "Unknown",
        description=info.get("description") or "",
        channel=info.get("channel") or info.get("uploader") or "Unknown",
        channel_id=info.get("channel_id") or "",
        views=_count(info.get("view_count")),
        likes=_count(info.get("like_count")),
        upload_date=info.get("upload_date") or "",
        duration=format_timestamp(seconds),
        duration_seconds=seconds,
        tags=tuple(info.get("tags") or ()),
        thumbnail_url=_thumbnail(info),
        category=categories[0] if categories else "Unknown",
    )


class YouTubeMetadataClient:
    """Fetch video, playlist, channel and search metadata.

    Example:
        >>> client = YouTubeMetadataClient()
        >>> video = await client.fetch_video("https://youtu.be/dQw4w9WgXcQ")
        >>> print(video.title, video.duration)
    """

    def __init__(self, retry_policy: RetryPolicy | None = None):
        self.retry_policy = retry_policy or RetryPolicy()

    def _extract_sync(self, url: str, options: dict[str, Any]) -> dict[str, Any]:
        """Run yt-dlp extraction (blocking)."""
        with YoutubeDL({**BASE_OPTIONS, **options}) as ydl:
            info = ydl.extract_info(url, download=False)
            if not info:
                raise ExtractorError(f"No metadata returned for {url}")
            return ydl.sanitize_info(info)

    async def _extract(self, url: str, options: dict[str, Any] | None = None) -> dict[str, Any]:
        async def attempt() -> dict[str, Any]:
            try:
                loop = asyncio.get_running_loop()
                return await loop.run_in_executor(None, self._extract_sync, url, options or {})
            except (DownloadError, ExtractorError) as e:
                raise classify_remote_error(e) from e
            except OSError as e:
                raise classify(ErrorSurface.NETWORK, e) from e

        logger.debug(f"Fetching metadata for {url}")
        return await with_retry(attempt, self.retry_policy)

    async def fetch_video(self, url_or_id: str) -> VideoInfo:
        """Fetch metadata for a single video.

        Args:
            url_or_id: Video URL or bare 11-character ID

        Returns:
            VideoInfo for the video

        Raises:
            ClassifiedError: INVALID_URL for unrecognised input, or the
                classified yt-dlp failure
        """
        video_id = require_video_id(url_or_id)
        info = await self._extract(video_url(video_id))
        return _video_from_info(info, video_id)

    async def fetch_playlist(self, playlist_id: str, max_videos: int | None = None) -> PlaylistInfo:
        """Fetch a playlist and its entries (without per-video extraction).

        Raises:
            ClassifiedError: INVALID_RANGE if ``max_videos`` is below 1,
                PLAYLIST_NOT_FOUND, or the classified yt-dlp failure
        """
        options: dict[str, Any] = {"extract_flat": "in_playlist"}
        if max_videos is not None:
            _require_count("max_videos", max_videos)
            options["playlistend"] = max_videos

        try:
            info = await self._extract(playlist_url(playlist_id), options)
        except ClassifiedError as e:
            if e.code is ErrorCode.VIDEO_NOT_FOUND:
                raise ClassifiedError(
                    ErrorCode.PLAYLIST_NOT_FOUND,
                    "Playlist not found",
                    cause=e.cause,
                    remediations=("Check the playlist ID", "Make sure the playlist is public"),
                    details={"playlist_id": playlist_id},
                ) from e
            raise

        videos = []
        total_seconds = 0
        for position, entry in enumerate(info.get("entries") or [], start=1):
            if not entry or not entry.get("id"):
                continue
            seconds = _count(entry.get("duration"))
            total_seconds += seconds
            videos.append(
                PlaylistVideo(
                    video_id=entry["id"],
                    title=entry.get("title") or "Unknown",
                    duration=format_timestamp(seconds),
                    position=position,
                )
            )

        return PlaylistInfo(
            playlist_id=info.get("id") or playlist_id,
            title=info.get("title") or "Unknown",
            description=info.get("description") or "",
            channel=info.get("channel") or info.get("uploader") or "Unknown",
            video_count=_count(info.get("playlist_count")) or len(videos),
            total_duration=format_timestamp(total_seconds),
            videos=tuple(videos),
        )

    async def fetch_channel(self, channel: str) -> ChannelInfo:
        """Fetch channel metadata by channel ID (``UC...``) or ``@handle``."""
        try:
            info = await self._extract(
                channel_url(channel), {"extract_flat": True, "playlistend": 1}
            )
        except ClassifiedError as e:
            if e.code is ErrorCode.VIDEO_NOT_FOUND:
                raise ClassifiedError(
                    ErrorCode.CHANNEL_NOT_FOUND,
                    "Channel not found",
                    cause=e.cause,
                    remediations=("Check the channel ID or @handle",),
                    details={"channel": channel},
                ) from e
            raise

        return ChannelInfo(
            channel_id=info.get("channel_id") or info.get("id") or channel,
            name=info.get("channel") or info.get("title") or "Unknown",
            description=info.get("description") or "",
            subscriber_count=_count(info.get("channel_follower_count")),
            video_count=_count(info.get("playlist_count")),
            thumbnail_url=_thumbnail(info),
        )

    async def search(self, query: str, max_results: int = 10) -> list[SearchResult]:
        """Search videos by free-text query.

        Raises:
            ClassifiedError: INVALID_QUERY for an empty query, INVALID_RANGE
                when ``max_results`` is outside 1..MAX_SEARCH_RESULTS
        """
        if not query.strip():
            raise ClassifiedError(
                ErrorCode.INVALID_QUERY,
                "Search query cannot be empty",
                remediations=("Provide one or more search terms",),
            )
        _require_count("max_results", max_results, MAX_SEARCH_RESULTS)

        info = await self._extract(f"ytsearch{max_results}:{query}", {"extract_flat": True})

        results = []
        for entry in info.get("entries") or []:
            if not entry or not entry.get("id"):
                continue
            results.append(
                SearchResult(
                    video_id=entry["id"],
                    title=entry.get("title") or "Unknown",
                    channel=entry.get("channel") or entry.get("uploader") or "Unknown",
                    channel_id=entry.get("channel_id") or "",
                    views=_count(entry.get("view_count")),
                    duration=format_timestamp(_count(entry.get("duration"))),
                    thumbnail_url=_thumbnail(entry),
                )
            )
        return results
