"""Canonical YouTube metadata models.

Raw yt-dlp and transcript-API payloads are mapped into these at the
boundary; nothing past the accessors sees provider-specific shapes.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class VideoInfo(BaseModel):
    """Metadata for a single video."""

    model_config = ConfigDict(frozen=True)

    video_id: str
    title: str = "Unknown"
    description: str = ""
    channel: str = "Unknown"
    channel_id: str = ""
    views: int = 0
    likes: int = 0
    upload_date: str = ""
    duration: str = "00:00"
    duration_seconds: int = Field(default=0, ge=0)
    tags: tuple[str, ...] = ()
    thumbnail_url: str = ""
    category: str = "Unknown"


class PlaylistVideo(BaseModel):
    """One entry of a playlist."""

    model_config = ConfigDict(frozen=True)

    video_id: str
    title: str = "Unknown"
    duration: str = "00:00"
    position: int = Field(..., ge=1)


class PlaylistInfo(BaseModel):
    """Metadata for a playlist and its videos."""

    model_config = ConfigDict(frozen=True)

    playlist_id: str
    title: str = "Unknown"
    description: str = ""
    channel: str = "Unknown"
    video_count: int = 0
    total_duration: str = "00:00"
    videos: tuple[PlaylistVideo, ...] = ()


class ChannelInfo(BaseModel):
    """Metadata for a channel."""

    model_config = ConfigDict(frozen=True)

    channel_id: str
    name: str = "Unknown"
    description: str = ""
    subscriber_count: int = 0
    video_count: int = 0
    thumbnail_url: str = ""


class SearchResult(BaseModel):
    """A video search hit."""

    model_config = ConfigDict(frozen=True)

    video_id: str
    title: str = "Unknown"
    channel: str = "Unknown"
    channel_id: str = ""
    views: int = 0
    duration: str = "00:00"
    thumbnail_url: str = ""


class TranscriptSegment(BaseModel):
    """A timed piece of transcript text."""

    model_config = ConfigDict(frozen=True)

    text: str
    start: float = Field(..., ge=0)
    duration: float = Field(default=0.0, ge=0)

    @property
    def end(self) -> float:
        return self.start + self.duration


class Transcript(BaseModel):
    """A video transcript."""

    model_config = ConfigDict(frozen=True)

    video_id: str
    language: str
    source: Literal["official", "auto-generated"]
    segments: tuple[TranscriptSegment, ...] = ()

    @property
    def text(self) -> str:
        """Plain transcript text without timestamps."""
        return " ".join(segment.text.strip() for segment in self.segments if segment.text.strip())

    @property
    def duration_seconds(self) -> float:
        """End time of the last segment."""
        return max((segment.end for segment in self.segments), default=0.0)
