"""YouTube metadata and transcript access."""

from .metadata import YouTubeMetadataClient, classify_remote_error
from .models import (
    ChannelInfo,
    PlaylistInfo,
    PlaylistVideo,
    SearchResult,
    Transcript,
    TranscriptSegment,
    VideoInfo,
)
from .transcripts import TranscriptFetcher
from .urls import extract_video_id, require_video_id

__all__ = [
    "ChannelInfo",
    "PlaylistInfo",
    "PlaylistVideo",
    "SearchResult",
    "Transcript",
    "TranscriptFetcher",
    "TranscriptSegment",
    "VideoInfo",
    "YouTubeMetadataClient",
    "classify_remote_error",
    "extract_video_id",
    "require_video_id",
]
