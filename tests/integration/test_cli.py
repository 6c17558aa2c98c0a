"""Integration tests for CLI commands."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
import yaml
from typer.testing import CliRunner

from ytsage.cli import app
from ytsage.config.manager import ConfigManager
from ytsage.providers.base import TextGenerator
from ytsage.utils.errors import ClassifiedError, ErrorCode
from ytsage.youtube.models import Transcript, TranscriptSegment, VideoInfo

runner = CliRunner()

VIDEO_ID = "dQw4w9WgXcQ"
URL = f"https://youtu.be/{VIDEO_ID}"

TRANSCRIPT = Transcript(
    video_id=VIDEO_ID,
    language="en",
    source="official",
    segments=(
        TranscriptSegment(text="Welcome to a talk about retry loops.", start=0.0, duration=300.0),
        TranscriptSegment(text="Exponential backoff keeps services healthy.", start=300.0, duration=300.0),
    ),
)

VIDEO = VideoInfo(
    video_id=VIDEO_ID,
    title="Retry Loops Explained",
    channel="Backoff Channel",
    views=1234,
    duration="10:00",
    duration_seconds=600,
)

SUMMARY_RESPONSE = "SUMMARY:\nA talk about retries.\n\nKEY POINTS:\n- Backoff\n- Cancellation\n"

CHAPTERS_RESPONSE = (
    "CHAPTER 1:\nTimestamp: 0\nTitle: Introduction\nDescription: Opening remarks.\n\n"
    "CHAPTER 2:\nTimestamp: 300\nTitle: Backoff\nDescription: How delays grow.\n"
)


class RoutingGenerator(TextGenerator):
    """Answers each analysis prompt by marker."""

    name = "routing"

    def __init__(self, responses: dict[str, str | BaseException]) -> None:
        self.responses = responses

    async def generate(self, prompt: str, max_tokens: int = 2048) -> str:
        for marker, response in self.responses.items():
            if marker in prompt:
                if isinstance(response, BaseException):
                    raise response
                return response
        return ""


@pytest.fixture
def services():
    """Patch the YouTube services and the AI provider used by the CLI."""
    with patch("ytsage.cli.TranscriptFetcher") as fetcher_class, patch(
        "ytsage.cli.YouTubeMetadataClient"
    ) as client_class, patch("ytsage.cli.create_generator") as create_generator:
        fetcher_class.return_value.fetch = AsyncMock(return_value=TRANSCRIPT)
        client_class.return_value.fetch_video = AsyncMock(return_value=VIDEO)
        client_class.return_value.search = AsyncMock(return_value=[])
        yield SimpleNamespace(
            fetcher_class=fetcher_class,
            fetcher=fetcher_class.return_value,
            client=client_class.return_value,
            create_generator=create_generator,
        )


class TestCLIVersion:
    """Tests for version command."""

    def test_version_command(self) -> None:
        """Test version command displays version."""
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "ytsage" in result.stdout
        assert "0.1.0" in result.stdout


class TestCLIConfig:
    """Tests for config command."""

    def test_config_show(self) -> None:
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "gemini" in result.stdout

    def test_config_set_persists(self) -> None:
        result = runner.invoke(app, ["config", "set", "retry.max_attempts", "5"])

        assert result.exit_code == 0
        manager = ConfigManager()
        with open(manager.config_file) as f:
            assert yaml.safe_load(f)["retry"]["max_attempts"] == 5

    def test_config_set_unknown_key(self) -> None:
        result = runner.invoke(app, ["config", "set", "ai.nonexistent", "x"])

        assert result.exit_code == 1
        assert "Unknown configuration key" in result.stdout

    def test_config_set_invalid_value(self) -> None:
        result = runner.invoke(app, ["config", "set", "ai.provider", "openai"])

        assert result.exit_code == 1

    def test_config_unknown_action(self) -> None:
        result = runner.invoke(app, ["config", "delete"])

        assert result.exit_code == 1
        assert "Unknown action" in result.stdout


class TestCLIInfo:
    """Tests for info and search commands."""

    def test_info_json(self, services) -> None:
        result = runner.invoke(app, ["info", URL, "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["video_id"] == VIDEO_ID
        assert data["duration_seconds"] == 600
        services.client.fetch_video.assert_awaited_once_with(URL)

    def test_info_table(self, services) -> None:
        result = runner.invoke(app, ["info", URL])

        assert result.exit_code == 0
        assert "Backoff Channel" in result.stdout
        assert "1,234" in result.stdout

    def test_search_without_results(self, services) -> None:
        result = runner.invoke(app, ["search", "retry loops", "--limit", "3"])

        assert result.exit_code == 0
        assert "No videos found" in result.stdout
        services.client.search.assert_awaited_once_with("retry loops", 3)


class TestCLITranscript:
    """Tests for the transcript command."""

    def test_transcript_json(self, services) -> None:
        result = runner.invoke(app, ["transcript", URL, "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["language"] == "en"
        assert data["text"] == TRANSCRIPT.text
        assert len(data["segments"]) == 2
        assert "translated_from" not in data
        services.create_generator.assert_not_called()

    def test_language_option_overrides_config(self, services) -> None:
        result = runner.invoke(app, ["transcript", URL, "--language", "de"])

        assert result.exit_code == 0
        kwargs = services.fetcher_class.call_args.kwargs
        assert kwargs["preferred_languages"] == ["de"]

    def test_timestamps(self, services) -> None:
        result = runner.invoke(app, ["transcript", URL, "--timestamps"])

        assert result.exit_code == 0
        assert "05:00" in result.stdout
        assert "Exponential backoff" in result.stdout

    def test_translate_json(self, services) -> None:
        services.create_generator.return_value = RoutingGenerator(
            {"Translate the following text to Spanish": "Bienvenidos a una charla."}
        )

        result = runner.invoke(app, ["transcript", URL, "--translate", "Spanish", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["language"] == "Spanish"
        assert data["translated_from"] == "en"
        assert data["text"] == "Bienvenidos a una charla."

    def test_translate_to_source_language_skips_generation(self, services) -> None:
        result = runner.invoke(app, ["transcript", URL, "--translate", "en", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["text"] == TRANSCRIPT.text
        services.create_generator.assert_not_called()


class TestCLIAnalyses:
    """Tests for the analysis commands."""

    def test_summarize_json(self, services) -> None:
        services.create_generator.return_value = RoutingGenerator({"Summarize": SUMMARY_RESPONSE})

        result = runner.invoke(app, ["summarize", URL, "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["summary"] == "A talk about retries."
        assert data["key_points"] == ["Backoff", "Cancellation"]
        assert data["word_count"] == 4
        services.fetcher.fetch.assert_awaited_once_with(URL)

    def test_chapters_json(self, services) -> None:
        services.create_generator.return_value = RoutingGenerator(
            {"chapter markers": CHAPTERS_RESPONSE}
        )

        result = runner.invoke(app, ["chapters", URL, "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["degraded"] is False
        assert [chapter["title"] for chapter in data["records"]] == ["Introduction", "Backoff"]

    def test_chapters_table(self, services) -> None:
        services.create_generator.return_value = RoutingGenerator(
            {"chapter markers": CHAPTERS_RESPONSE}
        )

        result = runner.invoke(app, ["chapters", URL])

        assert result.exit_code == 0
        assert "Introduction" in result.stdout

    def test_analyze_reports_failed_analysis_in_place(self, services) -> None:
        services.create_generator.return_value = RoutingGenerator(
            {
                "Summarize": SUMMARY_RESPONSE,
                "chapter markers": CHAPTERS_RESPONSE,
                "significant": ClassifiedError(ErrorCode.AI_API_KEY_INVALID, "Key rejected"),
            }
        )

        result = runner.invoke(app, ["analyze", URL])

        assert result.exit_code == 0
        assert "summary: 4 words" in result.stdout
        assert "chapters: 2 found" in result.stdout
        assert "highlights: Key rejected" in result.stdout


class TestCLIErrors:
    """Classified failures print remediations and exit with status 1."""

    def test_transcript_unavailable(self, services) -> None:
        services.fetcher.fetch = AsyncMock(
            side_effect=ClassifiedError(
                ErrorCode.TRANSCRIPT_UNAVAILABLE,
                "Transcripts are disabled",
                remediations=("Try another video",),
            )
        )

        result = runner.invoke(app, ["summarize", URL])

        assert result.exit_code == 1
        assert "TRANSCRIPT_UNAVAILABLE" in result.stdout
        assert "Try another video" in result.stdout

    def test_invalid_url(self, services) -> None:
        services.fetcher.fetch = AsyncMock(
            side_effect=ClassifiedError(ErrorCode.INVALID_URL, "Invalid YouTube video URL")
        )

        result = runner.invoke(app, ["keywords", "not-a-video"])

        assert result.exit_code == 1
        assert "INVALID_URL" in result.stdout

    def test_missing_api_key(self, services) -> None:
        from ytsage.providers import create_generator

        services.create_generator.side_effect = lambda config: create_generator(config)

        result = runner.invoke(app, ["summarize", URL])

        assert result.exit_code == 1
        assert "API key" in result.stdout
