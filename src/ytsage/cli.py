"""CLI entry point for ytsage."""

import asyncio
import json
import sys
from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import Any, NoReturn, TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ytsage.config.logging import setup_logging
from ytsage.config.manager import ConfigManager
from ytsage.config.schema import GlobalConfig
from ytsage.extraction import AnalysisEngine
from ytsage.extraction.models import ExtractionResult, Record
from ytsage.providers import create_generator
from ytsage.utils.errors import ClassifiedError, ConfigError, YTSageError
from ytsage.utils.timestamps import format_timestamp
from ytsage.youtube import TranscriptFetcher, YouTubeMetadataClient
from ytsage.youtube.models import Transcript, VideoInfo

T = TypeVar("T")

app = typer.Typer(
    name="ytsage",
    help="AI analysis of YouTube videos: summaries, chapters, keywords, topics and highlights",
    no_args_is_help=True,
)
console = Console()

JSON_OPTION = typer.Option(False, "--json", help="Print raw records as JSON")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose (DEBUG) logging"
    ),
    log_file: Path | None = typer.Option(None, "--log-file", help="Write logs to file"),
) -> None:
    """ytsage - AI analysis of YouTube videos."""
    setup_logging(verbose=verbose, log_file=log_file)


def _fail(error: Exception) -> NoReturn:
    """Print an error with its remediations and exit with status 1."""
    if isinstance(error, ClassifiedError):
        console.print(f"[red]✗[/red] {error.message} [dim]({error.code.value})[/dim]")
        for remediation in error.remediations:
            console.print(f"[dim]  • {remediation}[/dim]")
    else:
        console.print(f"[red]✗[/red] Error: {error}")
    sys.exit(1)


def _run(factory: Callable[[], Coroutine[Any, Any, T]]) -> T:
    """Run a coroutine to completion, turning ytsage errors into exit codes."""
    try:
        return asyncio.run(factory())
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled by user[/yellow]")
        sys.exit(130)
    except (YTSageError, ValueError) as e:
        _fail(e)


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _records_json(result: ExtractionResult[Any]) -> dict[str, Any]:
    return {
        "degraded": result.degraded,
        "tier": result.tier,
        "records": [record.model_dump(mode="json") for record in result.records],
    }


class _Session:
    """Config, services and analysis engine for one command invocation."""

    def __init__(self, languages: list[str] | None = None) -> None:
        self.config: GlobalConfig = ConfigManager().load_config()
        policy = self.config.retry.to_policy()
        self.metadata = YouTubeMetadataClient(retry_policy=policy)
        self.transcripts = TranscriptFetcher(
            preferred_languages=languages or self.config.transcripts.preferred_languages,
            retry_policy=policy,
        )
        self._policy = policy

    def engine(self) -> AnalysisEngine:
        return AnalysisEngine(create_generator(self.config.ai), self._policy)

    async def load(self, url: str, with_metadata: bool = True) -> tuple[Transcript, VideoInfo | None]:
        if not with_metadata:
            return await self.transcripts.fetch(url), None
        transcript, video = await asyncio.gather(
            self.transcripts.fetch(url), self.metadata.fetch_video(url)
        )
        return transcript, video


def _duration(transcript: Transcript, video: VideoInfo | None) -> float:
    if video is not None and video.duration_seconds > 0:
        return float(video.duration_seconds)
    return transcript.duration_seconds


def _degraded_note(result: ExtractionResult[Any], what: str) -> None:
    if result.degraded:
        console.print(f"[yellow]⚠[/yellow] Could not parse {what} from the AI response")


@app.command("version")
def show_version() -> None:
    """Show version information."""
    from ytsage import __version__

    console.print(f"[bold cyan]ytsage[/bold cyan] v{__version__}")


@app.command("info")
def info_command(
    url: str = typer.Argument(..., help="YouTube video URL or ID"),
    as_json: bool = JSON_OPTION,
) -> None:
    """Show video metadata.

    Examples:
        ytsage info https://youtu.be/dQw4w9WgXcQ
    """

    async def run() -> VideoInfo:
        return await YouTubeMetadataClient(
            retry_policy=ConfigManager().load_config().retry.to_policy()
        ).fetch_video(url)

    video = _run(run)
    if as_json:
        _echo_json(video.model_dump(mode="json"))
        return

    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Title", video.title)
    table.add_row("Channel", video.channel)
    table.add_row("Duration", video.duration)
    table.add_row("Views", f"{video.views:,}")
    table.add_row("Likes", f"{video.likes:,}")
    table.add_row("Uploaded", video.upload_date or "-")
    table.add_row("Category", video.category)
    if video.tags:
        table.add_row("Tags", ", ".join(video.tags[:10]))
    console.print(table)


@app.command("search")
def search_command(
    query: str = typer.Argument(..., help="Search terms"),
    limit: int = typer.Option(10, "--limit", "-n", min=1, max=50, help="Maximum results"),
    as_json: bool = JSON_OPTION,
) -> None:
    """Search YouTube videos."""

    async def run() -> list[Any]:
        return await YouTubeMetadataClient(
            retry_policy=ConfigManager().load_config().retry.to_policy()
        ).search(query, limit)

    results = _run(run)
    if as_json:
        _echo_json([result.model_dump(mode="json") for result in results])
        return

    if not results:
        console.print("[yellow]No videos found[/yellow]")
        return

    table = Table(title=f"Results for '{query}'")
    table.add_column("Video ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Channel", style="dim")
    table.add_column("Duration", justify="right")
    for result in results:
        table.add_row(result.video_id, result.title, result.channel, result.duration)
    console.print(table)


@app.command("transcript")
def transcript_command(
    url: str = typer.Argument(..., help="YouTube video URL or ID"),
    language: str | None = typer.Option(
        None, "--language", "-l", help="Preferred transcript language code"
    ),
    translate: str | None = typer.Option(
        None, "--translate", "-t", help="Translate the transcript into this language"
    ),
    timestamps: bool = typer.Option(
        False, "--timestamps", help="Print each segment with its start time"
    ),
    as_json: bool = JSON_OPTION,
) -> None:
    """Print a video's transcript, optionally translated.

    Examples:
        ytsage transcript https://youtu.be/dQw4w9WgXcQ

        ytsage transcript https://youtu.be/dQw4w9WgXcQ --translate Spanish
    """

    async def run() -> tuple[Transcript, str | None]:
        session = _Session(languages=[language] if language else None)
        transcript, _ = await session.load(url, with_metadata=False)
        if not translate or translate.strip().lower() == transcript.language.lower():
            return transcript, None
        return transcript, await session.engine().translate(transcript.text, translate)

    transcript, translated = _run(run)

    if as_json:
        data: dict[str, Any] = {
            "video_id": transcript.video_id,
            "language": transcript.language,
            "source": transcript.source,
            "text": transcript.text,
            "segments": [segment.model_dump(mode="json") for segment in transcript.segments],
        }
        if translated is not None:
            data.update(
                {"language": translate, "translated_from": transcript.language, "text": translated}
            )
        _echo_json(data)
        return

    if translated is not None:
        console.print(f"[dim]Translated from {transcript.language} to {translate}[/dim]\n")
        console.print(escape(translated))
        return

    console.print(f"[dim]{transcript.language} ({transcript.source})[/dim]\n")
    if timestamps:
        for segment in transcript.segments:
            console.print(f"[cyan]{format_timestamp(segment.start)}[/cyan] {escape(segment.text)}")
    else:
        console.print(escape(transcript.text))


@app.command("summarize")
def summarize_command(
    url: str = typer.Argument(..., help="YouTube video URL or ID"),
    max_words: int | None = typer.Option(
        None, "--max-words", "-w", min=10, help="Word budget for the summary"
    ),
    as_json: bool = JSON_OPTION,
) -> None:
    """Summarize a video's transcript.

    Examples:
        ytsage summarize https://youtu.be/dQw4w9WgXcQ --max-words 100
    """

    async def run():
        session = _Session()
        transcript, _ = await session.load(url, with_metadata=False)
        words = max_words or session.config.analysis.summary_max_words
        return await session.engine().summarize(transcript.text, words)

    summary = _run(run)
    if as_json:
        _echo_json(summary.model_dump(mode="json"))
        return

    console.print("\n[bold]Summary[/bold]\n")
    console.print(summary.summary)
    if summary.key_points:
        console.print("\n[bold]Key points[/bold]")
        for point in summary.key_points:
            console.print(f"  • {point}")
    console.print(f"\n[dim]{summary.word_count} words[/dim]")


@app.command("chapters")
def chapters_command(
    url: str = typer.Argument(..., help="YouTube video URL or ID"),
    as_json: bool = JSON_OPTION,
) -> None:
    """Generate chapter markers."""

    async def run():
        session = _Session()
        transcript, video = await session.load(url)
        return await session.engine().chapters_result(transcript.text, _duration(transcript, video))

    result = _run(run)
    if as_json:
        _echo_json(_records_json(result))
        return

    _degraded_note(result, "chapters")
    table = Table(title="Chapters")
    table.add_column("Time", style="cyan", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Description", style="dim")
    for chapter in result.records:
        table.add_row(chapter.timestamp, chapter.title, chapter.description)
    console.print(table)


@app.command("keywords")
def keywords_command(
    url: str = typer.Argument(..., help="YouTube video URL or ID"),
    count: int | None = typer.Option(None, "--count", "-n", min=1, max=100),
    as_json: bool = JSON_OPTION,
) -> None:
    """Extract keywords ranked by relevance."""

    async def run():
        session = _Session()
        transcript, _ = await session.load(url, with_metadata=False)
        limit = count or session.config.analysis.keyword_count
        return await session.engine().keywords_result(transcript.text, limit)

    result = _run(run)
    if as_json:
        _echo_json(_records_json(result))
        return

    if not result.records:
        console.print("[yellow]No keywords found[/yellow]")
        return

    table = Table(title="Keywords")
    table.add_column("Keyword", style="cyan")
    table.add_column("Relevance", justify="right")
    table.add_column("Frequency", justify="right", style="dim")
    for keyword in result.records:
        table.add_row(keyword.keyword, f"{keyword.relevance:.2f}", str(keyword.frequency))
    console.print(table)


@app.command("topics")
def topics_command(
    url: str = typer.Argument(..., help="YouTube video URL or ID"),
    as_json: bool = JSON_OPTION,
) -> None:
    """Detect the topics a video covers."""

    async def run():
        session = _Session()
        transcript, video = await session.load(url)
        assert video is not None
        return await session.engine().topics_result(transcript.text, video.title, video.description)

    result = _run(run)
    if as_json:
        _echo_json(_records_json(result))
        return

    if not result.records:
        console.print("[yellow]No topics found[/yellow]")
        return

    table = Table(title="Topics")
    table.add_column("Topic", style="cyan")
    table.add_column("Confidence", justify="right")
    table.add_column("Category", style="dim")
    for topic in result.records:
        table.add_row(topic.topic, f"{topic.confidence:.2f}", topic.category)
    console.print(table)


@app.command("highlights")
def highlights_command(
    url: str = typer.Argument(..., help="YouTube video URL or ID"),
    count: int | None = typer.Option(None, "--count", "-n", min=1, max=50),
    as_json: bool = JSON_OPTION,
) -> None:
    """Identify the most significant moments."""

    async def run():
        session = _Session()
        transcript, video = await session.load(url)
        assert video is not None
        return await session.engine().highlights_result(
            transcript.text,
            _duration(transcript, video),
            video.title,
            count or session.config.analysis.highlight_count,
        )

    result = _run(run)
    if as_json:
        _echo_json(_records_json(result))
        return

    if not result.records:
        console.print("[yellow]No highlights found[/yellow]")
        return

    table = Table(title="Highlights")
    table.add_column("Time", style="cyan", no_wrap=True)
    table.add_column("Length", style="dim", no_wrap=True)
    table.add_column("Score", justify="right")
    table.add_column("Description")
    for highlight in result.records:
        table.add_row(
            highlight.timestamp, highlight.duration, f"{highlight.score:.2f}", highlight.description
        )
    console.print(table)


@app.command("analyze")
def analyze_command(
    url: str = typer.Argument(..., help="YouTube video URL or ID"),
    as_json: bool = JSON_OPTION,
) -> None:
    """Run every analysis concurrently.

    A failing analysis is reported in place; the others still complete.
    """

    async def run() -> dict[str, Any]:
        session = _Session()
        transcript, video = await session.load(url)
        assert video is not None
        analysis = session.config.analysis
        return await session.engine().analyze_all(
            transcript.text,
            _duration(transcript, video),
            title=video.title,
            description=video.description,
            max_words=analysis.summary_max_words,
            keyword_count=analysis.keyword_count,
            highlight_count=analysis.highlight_count,
        )

    results = _run(run)

    if as_json:
        payload: dict[str, Any] = {}
        for name, value in results.items():
            if isinstance(value, ClassifiedError):
                payload[name] = value.to_error_response()
            elif isinstance(value, Record):
                payload[name] = value.model_dump(mode="json")
            else:
                payload[name] = [record.model_dump(mode="json") for record in value]
        _echo_json(payload)
        return

    for name, value in results.items():
        if isinstance(value, ClassifiedError):
            console.print(f"[red]✗[/red] {name}: {value.message}")
        elif isinstance(value, Record):
            console.print(f"[green]✓[/green] {name}: {getattr(value, 'word_count', 0)} words")
        else:
            console.print(f"[green]✓[/green] {name}: {len(value)} found")


@app.command("config")
def config_command(
    action: str = typer.Argument(..., help="Action: show, or set <key> <value>"),
    key: str | None = typer.Argument(None, help="Dotted config key (for 'set' action)"),
    value: str | None = typer.Argument(None, help="Config value (for 'set' action)"),
) -> None:
    """Manage ytsage configuration.

    Actions:
        show: Display current configuration
        set:  Set a configuration value

    Examples:
        ytsage config show

        ytsage config set ai.provider claude

        ytsage config set retry.max_attempts 5
    """
    try:
        manager = ConfigManager()

        if action == "show":
            config = manager.load_config()

            console.print("\n[bold]ytsage Configuration[/bold]\n")

            table = Table(show_header=False, box=None)
            table.add_column("Key", style="cyan")
            table.add_column("Value", style="white")

            table.add_row("Config file", str(manager.config_file))
            table.add_row("", "")
            table.add_row("Log level", config.log_level)
            table.add_row("AI provider", config.ai.provider)
            table.add_row("Gemini model", config.ai.gemini_model)
            table.add_row("Claude model", config.ai.claude_model)
            table.add_row("Languages", ", ".join(config.transcripts.preferred_languages))
            table.add_row("Retry attempts", str(config.retry.max_attempts))

            console.print(table)

        elif action == "set":
            if not key or value is None:
                console.print("[red]✗[/red] Usage: ytsage config set <key> <value>")
                sys.exit(1)

            manager.set_value(key, value)
            console.print(f"[green]✓[/green] Set [cyan]{key}[/cyan] = [yellow]{value}[/yellow]")

        else:
            console.print(f"[red]✗[/red] Unknown action: {action}")
            console.print("Valid actions: show, set")
            sys.exit(1)

    except ConfigError as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    app()
