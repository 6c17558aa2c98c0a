"""Analysis engine: prompt, generate under retry, extract.

Each analysis builds a prompt describing the exact output grammar, calls
the text generator through the retry executor and runs the structured-text
extractor for its content type. Translation returns the generated
text without further parsing.

Failures of the generator call itself propagate as ``ClassifiedError``
after retries are exhausted. Failures to interpret the generated text never
raise; they degrade per content type (empty results, or placeholder
chapters).
"""

import asyncio
import logging
from typing import Any

from ytsage.providers.base import TextGenerator
from ytsage.utils.classifier import classify_ai_error
from ytsage.utils.errors import wrap_error
from ytsage.utils.retry import RetryPolicy, with_retry

from . import prompts
from .models import Chapter, ExtractionResult, Highlight, Keyword, Summary, Topic
from .parsers import (
    extract_chapters,
    extract_highlights,
    extract_keywords,
    extract_topics,
    parse_summary,
)

logger = logging.getLogger(__name__)

# Transcripts shorter than this carry too little signal for keywords
MIN_KEYWORD_TRANSCRIPT_CHARS = 50


class AnalysisEngine:
    """Runs AI analyses over a transcript.

    Example:
        >>> engine = AnalysisEngine(GeminiGenerator(), RetryPolicy())
        >>> summary = await engine.summarize(transcript, max_words=150)
        >>> print(summary.key_points)
    """

    def __init__(
        self,
        generator: TextGenerator,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        """Initialize analysis engine.

        Args:
            generator: Text-generation provider
            retry_policy: Back-off policy for generator calls (defaults to RetryPolicy())
        """
        self.generator = generator
        self.retry_policy = retry_policy or RetryPolicy()

    async def _generate(self, prompt: str, max_tokens: int) -> str:
        async def attempt() -> str:
            try:
                return await self.generator.generate(prompt, max_tokens)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                # Providers should classify already; this catches the ones that don't
                raise classify_ai_error(e) from e

        return await with_retry(attempt, self.retry_policy)

    async def summarize(self, transcript: str, max_words: int = 200) -> Summary:
        """Summarize a transcript.

        Args:
            transcript: Transcript text
            max_words: Word budget for the summary paragraph

        Returns:
            Summary with key points

        Raises:
            ClassifiedError: If text generation fails
        """
        response = await self._generate(prompts.summary_prompt(transcript, max_words), 1024)
        return parse_summary(response)

    async def chapters_result(
        self, transcript: str, total_duration: float
    ) -> ExtractionResult[Chapter]:
        """Chapters with extraction metadata (winning tier, degraded flag)."""
        response = await self._generate(prompts.chapters_prompt(transcript, total_duration), 2048)
        result = extract_chapters(response, total_duration)
        if result.degraded:
            logger.warning("Could not parse chapters from AI output; using evenly spaced chapters")
        return result

    async def chapters(self, transcript: str, total_duration: float) -> list[Chapter]:
        """Generate chapter markers sorted by start time.

        Raises:
            ClassifiedError: If text generation fails
        """
        return list((await self.chapters_result(transcript, total_duration)).records)

    async def keywords_result(self, transcript: str, count: int = 15) -> ExtractionResult[Keyword]:
        """Keywords with extraction metadata."""
        if not transcript or len(transcript.strip()) < MIN_KEYWORD_TRANSCRIPT_CHARS:
            logger.info("Transcript too short for keyword extraction")
            return ExtractionResult(degraded=True)

        response = await self._generate(prompts.keywords_prompt(transcript, count), 1024)
        return extract_keywords(response, count)

    async def keywords(self, transcript: str, count: int = 15) -> list[Keyword]:
        """Extract up to ``count`` keywords.

        Raises:
            ClassifiedError: If text generation fails
        """
        return list((await self.keywords_result(transcript, count)).records)

    async def topics_result(
        self, transcript: str, title: str = "", description: str = ""
    ) -> ExtractionResult[Topic]:
        """Topics with extraction metadata."""
        response = await self._generate(
            prompts.topics_prompt(transcript, title, description), 1024
        )
        return extract_topics(response)

    async def topics(self, transcript: str, title: str = "", description: str = "") -> list[Topic]:
        """Detect topics ordered by confidence.

        Raises:
            ClassifiedError: If text generation fails
        """
        return list((await self.topics_result(transcript, title, description)).records)

    async def highlights_result(
        self, transcript: str, total_duration: float, title: str = "", count: int = 7
    ) -> ExtractionResult[Highlight]:
        """Highlights with extraction metadata."""
        response = await self._generate(
            prompts.highlights_prompt(transcript, total_duration, title, count), 2048
        )
        return extract_highlights(response, total_duration, count)

    async def highlights(
        self, transcript: str, total_duration: float, title: str = "", count: int = 7
    ) -> list[Highlight]:
        """Identify up to ``count`` highlights ordered by score.

        Raises:
            ClassifiedError: If text generation fails
        """
        return list(
            (await self.highlights_result(transcript, total_duration, title, count)).records
        )

    async def translate(self, transcript: str, target_language: str) -> str:
        """Translate transcript text, keeping meaning and tone.

        Args:
            transcript: Transcript text
            target_language: Language name or code to translate into

        Returns:
            Translated text (empty if the model returned nothing)

        Raises:
            ValueError: If the target language is blank
            ClassifiedError: If text generation fails
        """
        if not target_language.strip():
            raise ValueError("Target language cannot be empty")

        response = await self._generate(
            prompts.translation_prompt(transcript, target_language.strip()), 4096
        )
        return response.strip()

    async def analyze_all(
        self,
        transcript: str,
        total_duration: float,
        title: str = "",
        description: str = "",
        max_words: int = 200,
        keyword_count: int = 15,
        highlight_count: int = 7,
    ) -> dict[str, Any]:
        """Run every analysis concurrently.

        Each analysis retries independently. A failing analysis is reported
        as its ClassifiedError in place of a result; the others still
        complete.

        Returns:
            Mapping of analysis name to its result or ClassifiedError
        """
        names = ["summary", "chapters", "keywords", "topics", "highlights"]
        results = await asyncio.gather(
            self.summarize(transcript, max_words),
            self.chapters(transcript, total_duration),
            self.keywords(transcript, keyword_count),
            self.topics(transcript, title, description),
            self.highlights(transcript, total_duration, title, highlight_count),
            return_exceptions=True,
        )

        analysis: dict[str, Any] = {}
        for name, result in zip(names, results):
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result
            if isinstance(result, Exception):
                result = wrap_error(result)
                logger.warning(f"{name} analysis failed: {result.message}")
            analysis[name] = result
        return analysis
