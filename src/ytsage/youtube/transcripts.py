"""YouTube transcript retrieval.

Uses youtube-transcript-api: manual transcripts in the preferred languages
first, then auto-generated ones.
"""

import asyncio
import logging

from youtube_transcript_api import YouTubeTranscriptApi
from youtube_transcript_api._errors import (
    CouldNotRetrieveTranscript,
    NoTranscriptFound,
    TranscriptsDisabled,
    VideoUnavailable,
)

from ytsage.utils.errors import ClassifiedError, ErrorCode
from ytsage.utils.retry import RetryPolicy, with_retry

from .metadata import classify_remote_error
from .models import Transcript, TranscriptSegment
from .urls import require_video_id

logger = logging.getLogger(__name__)


class TranscriptFetcher:
    """Fetch transcripts for YouTube videos.

    Usage:
        fetcher = TranscriptFetcher(preferred_languages=["en", "es"])
        transcript = await fetcher.fetch("https://youtu.be/dQw4w9WgXcQ")
        print(transcript.text)
    """

    def __init__(
        self,
        preferred_languages: list[str] | None = None,
        retry_policy: RetryPolicy | None = None,
    ):
        """Initialize transcript fetcher.

        Args:
            preferred_languages: Language codes in preference order (default ["en"])
            retry_policy: Back-off policy for API calls
        """
        self.preferred_languages = preferred_languages or ["en"]
        self.retry_policy = retry_policy or RetryPolicy()
        self.api = YouTubeTranscriptApi()

    def _fetch_sync(self, video_id: str) -> Transcript:
        transcript_list = self.api.list(video_id)

        transcript_obj = None
        for lang in self.preferred_languages:
            try:
                transcript_obj = transcript_list.find_transcript([lang])
                logger.info(f"Found transcript in language: {lang}")
                break
            except NoTranscriptFound:
                continue

        if transcript_obj is None:
            try:
                transcript_obj = transcript_list.find_generated_transcript(
                    self.preferred_languages
                )
                logger.info("Using auto-generated transcript")
            except NoTranscriptFound as e:
                available = ", ".join(t.language_code for t in transcript_list)
                raise ClassifiedError(
                    ErrorCode.TRANSCRIPT_UNAVAILABLE,
                    f"No transcript found in languages: {', '.join(self.preferred_languages)}",
                    cause=e,
                    remediations=(
                        f"Available languages: {available or 'none'}",
                        "Add one of them to transcripts.preferred_languages in the config",
                    ),
                    details={"video_id": video_id},
                ) from e

        segments = tuple(
            TranscriptSegment(
                text=entry["text"],
                start=max(0.0, float(entry["start"])),
                duration=max(0.0, float(entry.get("duration", 0.0))),
            )
            for entry in transcript_obj.fetch().to_raw_data()
        )

        return Transcript(
            video_id=video_id,
            language=transcript_obj.language_code,
            source="auto-generated" if transcript_obj.is_generated else "official",
            segments=segments,
        )

    async def fetch(self, url_or_id: str) -> Transcript:
        """Fetch the transcript for a video.

        Args:
            url_or_id: Video URL or bare video ID

        Returns:
            Transcript with timed segments

        Raises:
            ClassifiedError: INVALID_URL, TRANSCRIPT_UNAVAILABLE,
                VIDEO_UNAVAILABLE or a classified retrieval failure
        """
        video_id = require_video_id(url_or_id)
        logger.info(f"Fetching YouTube transcript for video: {video_id}")

        async def attempt() -> Transcript:
            try:
                loop = asyncio.get_running_loop()
                return await loop.run_in_executor(None, self._fetch_sync, video_id)
            except TranscriptsDisabled as e:
                logger.warning(f"Transcripts disabled for video {video_id}")
                raise ClassifiedError(
                    ErrorCode.TRANSCRIPT_UNAVAILABLE,
                    "Transcripts are disabled for this video",
                    cause=e,
                    remediations=("The video owner has disabled transcript access",),
                    details={"video_id": video_id},
                ) from e
            except VideoUnavailable as e:
                logger.warning(f"Video unavailable: {video_id}")
                raise ClassifiedError(
                    ErrorCode.VIDEO_UNAVAILABLE,
                    "Video is unavailable",
                    cause=e,
                    remediations=("It may be private, deleted, or region-restricted",),
                    details={"video_id": video_id},
                ) from e
            except CouldNotRetrieveTranscript as e:
                # The full message carries library boilerplate; classify on the cause alone
                classified = classify_remote_error(RuntimeError(getattr(e, "cause", "") or str(e)))
                logger.warning(f"Could not retrieve transcript for {video_id}: {classified.message}")
                raise ClassifiedError(
                    classified.code,
                    classified.message,
                    cause=e,
                    remediations=classified.remediations,
                    details={"video_id": video_id},
                ) from e
            except OSError as e:
                raise classify_remote_error(e) from e

        transcript = await with_retry(attempt, self.retry_policy)
        logger.info(f"Fetched transcript: {len(transcript.segments)} segments")
        return transcript
