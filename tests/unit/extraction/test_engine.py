"""Tests for the analysis engine."""

import json

import pytest

from ytsage.extraction import AnalysisEngine
from ytsage.extraction.models import Summary
from ytsage.providers.base import TextGenerator
from ytsage.utils.errors import ClassifiedError, ErrorCode

TRANSCRIPT = "Today we talk about retry loops, exponential backoff and cancellation. " * 3

SUMMARY_RESPONSE = "SUMMARY:\nA talk about retries.\n\nKEY POINTS:\n- Backoff\n- Cancellation\n"

KEYWORDS_RESPONSE = json.dumps(
    [
        {"keyword": "retry", "relevance": 0.9, "frequency": 4},
        {"keyword": "backoff", "relevance": 0.8, "frequency": 2},
        {"keyword": "cancellation", "relevance": 0.7, "frequency": 1},
    ]
)

TOPICS_RESPONSE = "TOPIC: Reliability | CONFIDENCE: 0.9 | CATEGORY: Technology\n"


def highlights_response(scores: list[float]) -> str:
    return "\n".join(
        f"HIGHLIGHT {i}:\nTimestamp: {i * 100}\nDuration: 30\n"
        f"Description: Moment {i}\nReason: Because\nScore: {score}\n"
        for i, score in enumerate(scores, 1)
    )


class RoutingGenerator(TextGenerator):
    """Answers each analysis prompt with its own canned response."""

    name = "routing"

    def __init__(self, responses: dict[str, str | BaseException]) -> None:
        self.responses = responses
        self.calls: list[str] = []

    async def generate(self, prompt: str, max_tokens: int = 2048) -> str:
        for marker, response in self.responses.items():
            if marker in prompt:
                self.calls.append(marker)
                if isinstance(response, BaseException):
                    raise response
                return response
        raise AssertionError(f"unexpected prompt: {prompt[:60]}")


class TestAnalyses:
    """Single analyses."""

    @pytest.mark.asyncio
    async def test_summarize(self, scripted_generator, fast_policy):
        generator = scripted_generator(SUMMARY_RESPONSE)
        engine = AnalysisEngine(generator, fast_policy)

        summary = await engine.summarize(TRANSCRIPT, max_words=120)

        assert summary.summary == "A talk about retries."
        assert summary.key_points == ("Backoff", "Cancellation")
        assert "no more than 120 words" in generator.prompts[0]
        assert TRANSCRIPT in generator.prompts[0]

    @pytest.mark.asyncio
    async def test_chapters_degrade_to_placeholders(self, scripted_generator, fast_policy):
        """Test unparseable chapter output degrades instead of raising."""
        engine = AnalysisEngine(scripted_generator("no chapters here"), fast_policy)

        chapters = await engine.chapters(TRANSCRIPT, total_duration=1800)

        assert len(chapters) == 6
        assert all(chapter.auto_generated for chapter in chapters)

    @pytest.mark.asyncio
    async def test_chapters_prompt_mentions_target_count(self, scripted_generator, fast_policy):
        generator = scripted_generator("CHAPTER 1:\nTimestamp: 0\nTitle: Start\nDescription: x\n")
        engine = AnalysisEngine(generator, fast_policy)

        result = await engine.chapters_result(TRANSCRIPT, total_duration=3000)

        assert result.tier == "strict"
        assert "create 10 chapter markers" in generator.prompts[0]

    @pytest.mark.asyncio
    async def test_keywords(self, scripted_generator, fast_policy):
        engine = AnalysisEngine(scripted_generator(KEYWORDS_RESPONSE), fast_policy)

        keywords = await engine.keywords(TRANSCRIPT, count=2)

        assert [k.keyword for k in keywords] == ["retry", "backoff"]

    @pytest.mark.asyncio
    async def test_keywords_short_transcript_skips_generation(self, scripted_generator, fast_policy):
        """Test tiny transcripts return no keywords without calling the provider."""
        generator = scripted_generator(KEYWORDS_RESPONSE)
        engine = AnalysisEngine(generator, fast_policy)

        assert await engine.keywords("too short", count=10) == []
        assert generator.prompts == []

    @pytest.mark.asyncio
    async def test_topics(self, scripted_generator, fast_policy):
        generator = scripted_generator(TOPICS_RESPONSE)
        engine = AnalysisEngine(generator, fast_policy)

        topics = await engine.topics(TRANSCRIPT, title="Retries 101", description="A lecture")

        assert [t.topic for t in topics] == ["Reliability"]
        assert "Video Title: Retries 101" in generator.prompts[0]

    @pytest.mark.asyncio
    async def test_highlights_ranked_and_truncated(self, scripted_generator, fast_policy):
        """Test 5 valid highlights come back as the best 3 by score."""
        engine = AnalysisEngine(
            scripted_generator(highlights_response([0.9, 0.4, 0.95, 0.2, 0.7])), fast_policy
        )

        highlights = await engine.highlights(TRANSCRIPT, total_duration=600, title="X", count=3)

        assert [h.score for h in highlights] == [0.95, 0.9, 0.7]

    @pytest.mark.asyncio
    async def test_unparseable_output_is_not_an_error(self, scripted_generator, fast_policy):
        engine = AnalysisEngine(scripted_generator("¯\\_(ツ)_/¯"), fast_policy)

        assert await engine.topics(TRANSCRIPT) == []
        assert await engine.highlights(TRANSCRIPT, total_duration=600) == []
        assert await engine.keywords(TRANSCRIPT) == []


class TestGenerationFailures:
    """Upstream failures propagate as ClassifiedError."""

    @pytest.mark.asyncio
    async def test_retryable_failure_exhausts_attempts(self, scripted_generator, fast_policy):
        error = ClassifiedError(ErrorCode.AI_RATE_LIMITED, "AI service rate limit exceeded")
        generator = scripted_generator(error)
        engine = AnalysisEngine(generator, fast_policy)

        with pytest.raises(ClassifiedError) as exc_info:
            await engine.summarize(TRANSCRIPT)

        assert exc_info.value is error
        assert len(generator.prompts) == fast_policy.max_attempts

    @pytest.mark.asyncio
    async def test_non_retryable_failure_raises_once(self, scripted_generator, fast_policy):
        generator = scripted_generator(
            ClassifiedError(ErrorCode.AI_API_KEY_INVALID, "Invalid or missing AI API key")
        )
        engine = AnalysisEngine(generator, fast_policy)

        with pytest.raises(ClassifiedError):
            await engine.chapters(TRANSCRIPT, total_duration=600)

        assert len(generator.prompts) == 1

    @pytest.mark.asyncio
    async def test_raw_provider_failures_are_classified(self, scripted_generator, fast_policy):
        """Test unclassified provider exceptions are classified on the AI surface."""
        generator = scripted_generator(RuntimeError("Quota exceeded"))
        engine = AnalysisEngine(generator, fast_policy)

        with pytest.raises(ClassifiedError) as exc_info:
            await engine.topics(TRANSCRIPT)

        assert exc_info.value.code is ErrorCode.AI_RATE_LIMITED
        assert isinstance(exc_info.value.cause, RuntimeError)
        assert len(generator.prompts) == fast_policy.max_attempts

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failure(self, scripted_generator, fast_policy):
        generator = scripted_generator(
            ClassifiedError(ErrorCode.TIMEOUT, "Operation timed out"), TOPICS_RESPONSE
        )
        engine = AnalysisEngine(generator, fast_policy)

        topics = await engine.topics(TRANSCRIPT)

        assert [t.topic for t in topics] == ["Reliability"]
        assert len(generator.prompts) == 2


class TestTranslate:
    """Transcript translation."""

    @pytest.mark.asyncio
    async def test_translate(self, fast_policy):
        """Test the prompt names the target language and the token budget is 4096."""

        class RecordingGenerator(TextGenerator):
            def __init__(self) -> None:
                self.calls: list[tuple[str, int]] = []

            async def generate(self, prompt: str, max_tokens: int = 2048) -> str:
                self.calls.append((prompt, max_tokens))
                return "  Hoy hablamos de reintentos.\n"

        generator = RecordingGenerator()
        engine = AnalysisEngine(generator, fast_policy)

        text = await engine.translate("Today we talk about retries.", "Spanish")

        assert text == "Hoy hablamos de reintentos."
        prompt, max_tokens = generator.calls[0]
        assert max_tokens == 4096
        assert "Translate the following text to Spanish" in prompt
        assert "Today we talk about retries." in prompt

    @pytest.mark.asyncio
    async def test_translate_retries_transient_failures(self, scripted_generator, fast_policy):
        generator = scripted_generator(
            ClassifiedError(ErrorCode.AI_RATE_LIMITED, "Quota exceeded"), "Bonjour"
        )
        engine = AnalysisEngine(generator, fast_policy)

        assert await engine.translate("Hello", "French") == "Bonjour"
        assert len(generator.prompts) == 2

    @pytest.mark.asyncio
    async def test_blank_target_language(self, scripted_generator, fast_policy):
        generator = scripted_generator("unused")

        with pytest.raises(ValueError):
            await AnalysisEngine(generator, fast_policy).translate("Hello", "  ")

        assert generator.prompts == []


class TestAnalyzeAll:
    """Concurrent analyses."""

    @pytest.mark.asyncio
    async def test_failure_is_isolated(self, fast_policy):
        """Test one failing analysis does not sink the others."""
        generator = RoutingGenerator(
            {
                "chapter markers": ClassifiedError(
                    ErrorCode.AI_TOKEN_LIMIT, "Content exceeds AI token limit"
                ),
                "important keywords": KEYWORDS_RESPONSE,
                "significant": highlights_response([0.5, 0.8]),
                "main topics": TOPICS_RESPONSE,
                "Summarize": SUMMARY_RESPONSE,
            }
        )
        engine = AnalysisEngine(generator, fast_policy)

        results = await engine.analyze_all(TRANSCRIPT, total_duration=600, title="T")

        assert set(results) == {"summary", "chapters", "keywords", "topics", "highlights"}
        assert isinstance(results["summary"], Summary)
        assert isinstance(results["chapters"], ClassifiedError)
        assert results["chapters"].code is ErrorCode.AI_TOKEN_LIMIT
        assert [k.keyword for k in results["keywords"]] == ["retry", "backoff", "cancellation"]
        assert [t.topic for t in results["topics"]] == ["Reliability"]
        assert [h.score for h in results["highlights"]] == [0.8, 0.5]
        # Token-limit failures are not retried
        assert generator.calls.count("chapter markers") == 1
