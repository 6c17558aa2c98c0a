"""Content-type descriptors for the extraction cascade.

Each content type declares its tiers from strictest to most lenient. Pattern
tiers follow the same shape: labelled blocks with required line breaks, the
same labels tolerant of mixed whitespace, then a case-insensitive scan that
ignores markdown decoration.

Out-of-range numbers are handled per content type: keyword relevance and
frequency are clamped, while topic confidence, highlight scores and
out-of-bounds timestamps discard the record.
"""

import json
import re
from typing import Any

from ytsage.utils.timestamps import format_timestamp, parse_timestamp

from .cascade import (
    Candidate,
    ContentSpec,
    ExtractionContext,
    ExtractionTier,
    clean_text,
    run_cascade,
    to_finite_float,
    to_int,
)
from .models import Chapter, ExtractionResult, Highlight, Keyword, Summary, Topic

_TS = r"\d+(?::\d{1,2}){0,2}"
_NUM = r"-?\d+(?:\.\d+)?"
# Label separator that never swallows a minus sign
_SEP = r"[^\w\n-]*"


def regex_tier_parser(pattern: re.Pattern[str]):
    """Build a tier parser returning each match's named groups."""

    def parse(text: str) -> list[Candidate]:
        return [match.groupdict() for match in pattern.finditer(text)]

    return parse


def _within_duration(seconds: float, context: ExtractionContext) -> bool:
    if seconds < 0:
        return False
    return context.total_duration is None or seconds <= context.total_duration


def _parse_seconds(value: Any) -> int | None:
    try:
        return parse_timestamp(str(value))
    except ValueError:
        return None


# Chapters

CHAPTER_STRICT = re.compile(
    rf"CHAPTER\s+\d+:[ \t]*\n"
    rf"[ \t]*Timestamp:[ \t]*(?P<timestamp>{_TS})[ \t]*\n"
    rf"[ \t]*Title:[ \t]*(?P<title>[^\n]+?)[ \t]*\n"
    rf"[ \t]*Description:[ \t]*(?P<description>[^\n]+)"
)

CHAPTER_TOLERANT = re.compile(
    rf"CHAPTER\s*\d+\s*:?\s*"
    rf"Timestamp\s*:\s*(?P<timestamp>{_TS})\s*"
    rf"Title\s*:\s*(?P<title>.+?)\s*"
    rf"Description\s*:\s*(?P<description>.+?)\s*(?=CHAPTER\s*\d+|\Z)",
    re.DOTALL,
)

CHAPTER_LENIENT = re.compile(
    rf"\btimestamp\b{_SEP}(?P<timestamp>{_TS})[^\n]*?(?:\n\W*?)?"
    rf"\btitle\b\W*(?P<title>[^\n]+?)[ \t*_]*"
    rf"(?:\n\W*?\bdescription\b\W*(?P<description>[^\n]*?))?[ \t*_]*(?=\n|\Z)",
    re.IGNORECASE,
)

MIN_CHAPTERS = 5
MAX_CHAPTERS = 15
SECONDS_PER_CHAPTER = 300


def target_chapter_count(total_duration: float) -> int:
    """One chapter per five minutes, bounded to 5-15."""
    return max(MIN_CHAPTERS, min(MAX_CHAPTERS, int(total_duration // SECONDS_PER_CHAPTER)))


def validate_chapter(candidate: Candidate, context: ExtractionContext) -> Chapter | None:
    seconds = _parse_seconds(candidate.get("timestamp"))
    if seconds is None or not _within_duration(seconds, context):
        return None

    title = clean_text(candidate.get("title"))
    if not title:
        return None

    return Chapter(
        timestamp=format_timestamp(seconds),
        title=title,
        description=clean_text(candidate.get("description")),
    )


def placeholder_chapters(context: ExtractionContext) -> list[Chapter]:
    """Evenly spaced generic chapters covering the whole media."""
    total = int(context.total_duration or 0)
    count = target_chapter_count(total)
    spacing = total // count

    return [
        Chapter(
            timestamp=format_timestamp(index * spacing),
            title=f"Chapter {index + 1}",
            description="Auto-generated chapter",
            auto_generated=True,
        )
        for index in range(count)
    ]


CHAPTER_SPEC: ContentSpec[Chapter] = ContentSpec(
    name="chapters",
    tiers=(
        ExtractionTier("strict", regex_tier_parser(CHAPTER_STRICT)),
        ExtractionTier("tolerant", regex_tier_parser(CHAPTER_TOLERANT)),
        ExtractionTier("lenient", regex_tier_parser(CHAPTER_LENIENT)),
    ),
    validate=validate_chapter,
    sort_key=lambda chapter: parse_timestamp(chapter.timestamp),
    degrade=placeholder_chapters,
)


# Keywords

_JSON_DECODER = json.JSONDecoder()

KEYWORD_KEY_VALUE = re.compile(
    r"[\"']?keyword[\"']?\s*:\s*[\"'](?P<keyword>[^\"']+)[\"']\s*,\s*"
    rf"[\"']?relevance[\"']?\s*:\s*(?P<relevance>{_NUM})\s*,\s*"
    r"[\"']?frequency[\"']?\s*:\s*(?P<frequency>\d+)",
    re.IGNORECASE,
)

KEYWORD_LINE = re.compile(
    r"KEYWORD:\s*(?P<keyword>[^|\n]+?)\s*\|\s*"
    rf"RELEVANCE:\s*(?P<relevance>{_NUM})\s*\|\s*"
    r"FREQUENCY:\s*(?P<frequency>\d+)",
    re.IGNORECASE,
)


def parse_keyword_json(text: str) -> list[Candidate]:
    """Parse the first JSON array of objects in the text into keyword candidates.

    Decoding is attempted from every ``[`` in turn, so stray brackets in
    surrounding prose do not hide a valid array further on.
    """
    last_error: json.JSONDecodeError | None = None
    position = text.find("[")
    while position != -1:
        try:
            parsed, _ = _JSON_DECODER.raw_decode(text, position)
        except json.JSONDecodeError as e:
            last_error = e
        else:
            items = [item for item in parsed if isinstance(item, dict)]
            if items:
                return items
        position = text.find("[", position + 1)

    if last_error is not None:
        raise ValueError(f"invalid JSON array: {last_error}") from last_error
    return []


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_json_keyword(candidate: Candidate, context: ExtractionContext) -> Keyword | None:
    """Structured keywords: clamp relevance to [0, 1] and frequency to >= 1."""
    keyword = candidate.get("keyword")
    relevance = candidate.get("relevance")
    frequency = candidate.get("frequency")

    if not isinstance(keyword, str) or not keyword.strip():
        return None
    if not _is_number(relevance) or not _is_number(frequency):
        return None

    relevance_value = to_finite_float(relevance)
    frequency_value = to_int(frequency)
    if relevance_value is None or frequency_value is None:
        return None

    return Keyword(
        keyword=keyword.strip(),
        relevance=min(1.0, max(0.0, relevance_value)),
        frequency=max(1, frequency_value),
    )


def validate_keyword(candidate: Candidate, context: ExtractionContext) -> Keyword | None:
    """Pattern-matched keywords: relevance outside [0, 1] discards the record."""
    keyword = clean_text(candidate.get("keyword"))
    relevance = to_finite_float(candidate.get("relevance"))
    frequency = to_int(candidate.get("frequency"))

    if not keyword or relevance is None or frequency is None:
        return None
    if not 0.0 <= relevance <= 1.0:
        return None

    return Keyword(keyword=keyword, relevance=relevance, frequency=max(1, frequency))


def keyword_minimum(context: ExtractionContext) -> int:
    """At least three keywords, or fewer when fewer were requested."""
    return min(3, context.limit) if context.limit is not None else 3


KEYWORD_SPEC: ContentSpec[Keyword] = ContentSpec(
    name="keywords",
    tiers=(
        # The model's own ordering is kept for structured output
        ExtractionTier(
            "json",
            parse_keyword_json,
            min_matches=keyword_minimum,
            validate=validate_json_keyword,
            rank=False,
        ),
        ExtractionTier("key-value", regex_tier_parser(KEYWORD_KEY_VALUE), keyword_minimum),
        ExtractionTier("line", regex_tier_parser(KEYWORD_LINE), keyword_minimum),
    ),
    validate=validate_keyword,
    sort_key=lambda keyword: keyword.relevance,
    descending=True,
)


# Topics

TOPIC_STRICT = re.compile(
    r"^TOPIC:[ \t]*(?P<topic>[^|\n]+?)[ \t]*\|[ \t]*"
    r"CONFIDENCE:[ \t]*(?P<confidence>[^|\s]+)[ \t]*\|[ \t]*"
    r"CATEGORY:[ \t]*(?P<category>[^|\n]+?)[ \t]*$",
    re.MULTILINE,
)

TOPIC_TOLERANT = re.compile(
    r"TOPIC\s*:\s*(?P<topic>.+?)\s*\|\s*"
    rf"CONFIDENCE\s*:\s*(?P<confidence>{_NUM})\s*\|\s*"
    r"CATEGORY\s*:\s*(?P<category>.+?)(?=\n|$)"
)

TOPIC_LENIENT = re.compile(
    r"\btopic\b\W*(?P<topic>[^|\n]+?)[ \t*_]*[|,;][ \t*_]*"
    rf"\bconfidence\b\W*?(?P<confidence>{_NUM})[ \t*_]*[|,;][ \t*_]*"
    r"\bcategory\b\W*(?P<category>[^|\n]+?)[ \t*_]*(?=\n|$)",
    re.IGNORECASE,
)


def validate_topic(candidate: Candidate, context: ExtractionContext) -> Topic | None:
    """Confidence outside [0, 1] marks a hallucinated topic; discard it."""
    topic = clean_text(candidate.get("topic"))
    confidence = to_finite_float(candidate.get("confidence"))

    if not topic or confidence is None:
        return None
    if not 0.0 <= confidence <= 1.0:
        return None

    category = clean_text(candidate.get("category")) or "General"
    return Topic(topic=topic, confidence=confidence, category=category)


TOPIC_SPEC: ContentSpec[Topic] = ContentSpec(
    name="topics",
    tiers=(
        ExtractionTier("strict", regex_tier_parser(TOPIC_STRICT)),
        ExtractionTier("tolerant", regex_tier_parser(TOPIC_TOLERANT)),
        ExtractionTier("lenient", regex_tier_parser(TOPIC_LENIENT)),
    ),
    validate=validate_topic,
    sort_key=lambda topic: topic.confidence,
    descending=True,
)


# Highlights

HIGHLIGHT_STRICT = re.compile(
    rf"HIGHLIGHT\s+\d+:[ \t]*\n"
    rf"[ \t]*Timestamp:[ \t]*(?P<start>{_TS})[ \t]*\n"
    rf"[ \t]*Duration:[ \t]*(?P<duration>{_NUM})[ \t]*\n"
    rf"[ \t]*Description:[ \t]*(?P<description>[^\n]+?)[ \t]*\n"
    rf"[ \t]*Reason:[ \t]*(?P<reason>[^\n]+?)[ \t]*\n"
    rf"[ \t]*Score:[ \t]*(?P<score>{_NUM})"
)

HIGHLIGHT_TOLERANT = re.compile(
    rf"HIGHLIGHT\s*\d+\s*:?\s*"
    rf"Timestamp\s*:\s*(?P<start>{_TS})\s*"
    rf"Duration\s*:\s*(?P<duration>{_NUM})\s*"
    rf"Description\s*:\s*(?P<description>[^\n]+?)\s*"
    rf"Reason\s*:\s*(?P<reason>[^\n]+?)\s*"
    rf"Score\s*:\s*(?P<score>{_NUM})"
)

HIGHLIGHT_LENIENT = re.compile(
    rf"\btimestamp\b{_SEP}(?P<start>{_TS})[^\n]*?\s*\W*?"
    rf"\bduration\b\W*?(?P<duration>{_NUM})[^\n]*?\s*\W*?"
    rf"\bdescription\b\W*(?P<description>[^\n]+?)[ \t*_]*\s*\W*?"
    rf"\breason\b\W*(?P<reason>[^\n]+?)[ \t*_]*\s*\W*?"
    rf"\bscore\b\W*?(?P<score>{_NUM})",
    re.IGNORECASE,
)


def validate_highlight(candidate: Candidate, context: ExtractionContext) -> Highlight | None:
    """Discard highlights outside the media or with an out-of-range score."""
    start = _parse_seconds(candidate.get("start"))
    duration = to_finite_float(candidate.get("duration"))
    score = to_finite_float(candidate.get("score"))

    if start is None or duration is None or score is None:
        return None
    # Durations render at whole-second precision
    if not _within_duration(start, context) or duration < 1:
        return None
    if context.total_duration is not None and start + duration > context.total_duration:
        return None
    if not 0.0 <= score <= 1.0:
        return None

    description = clean_text(candidate.get("description"))
    if not description:
        return None

    return Highlight(
        timestamp=format_timestamp(start),
        duration=format_timestamp(duration),
        description=description,
        reason=clean_text(candidate.get("reason")),
        score=score,
    )


HIGHLIGHT_SPEC: ContentSpec[Highlight] = ContentSpec(
    name="highlights",
    tiers=(
        ExtractionTier("strict", regex_tier_parser(HIGHLIGHT_STRICT)),
        ExtractionTier("tolerant", regex_tier_parser(HIGHLIGHT_TOLERANT)),
        ExtractionTier("lenient", regex_tier_parser(HIGHLIGHT_LENIENT)),
    ),
    validate=validate_highlight,
    sort_key=lambda highlight: highlight.score,
    descending=True,
)


# Summary

SUMMARY_BLOCK = re.compile(r"SUMMARY:\s*(?P<summary>[\s\S]*?)(?=KEY POINTS:|\Z)", re.IGNORECASE)
KEY_POINTS_BLOCK = re.compile(r"KEY POINTS:\s*(?P<points>[\s\S]*)", re.IGNORECASE)
BULLET = re.compile(r"^\s*[-*•]\s*(?P<point>.*)$")


def parse_summary(text: str) -> Summary:
    """Parse a ``SUMMARY:`` block and optional ``KEY POINTS:`` bullets.

    Without a summary block the whole text is the summary. Without bullets
    the summary itself becomes the single key point.
    """
    text = text or ""
    summary_match = SUMMARY_BLOCK.search(text)
    summary = summary_match.group("summary").strip() if summary_match else text.strip()

    key_points: list[str] = []
    points_match = KEY_POINTS_BLOCK.search(text)
    if points_match:
        for line in points_match.group("points").splitlines():
            bullet = BULLET.match(line)
            if bullet and bullet.group("point").strip():
                key_points.append(bullet.group("point").strip())

    if not key_points and summary:
        key_points = [summary]

    return Summary(summary=summary, key_points=tuple(key_points))


# Public extraction entry points


def extract_chapters(text: str, total_duration: float) -> ExtractionResult[Chapter]:
    """Chapters sorted by start time; placeholders when nothing parses."""
    return run_cascade(CHAPTER_SPEC, text, ExtractionContext(total_duration=total_duration))


def extract_keywords(text: str, count: int) -> ExtractionResult[Keyword]:
    """Up to ``count`` keywords; empty when nothing parses."""
    return run_cascade(KEYWORD_SPEC, text, ExtractionContext(limit=count))


def extract_topics(text: str, limit: int | None = None) -> ExtractionResult[Topic]:
    """Topics by confidence descending; empty when nothing parses."""
    return run_cascade(TOPIC_SPEC, text, ExtractionContext(limit=limit))


def extract_highlights(
    text: str, total_duration: float, count: int
) -> ExtractionResult[Highlight]:
    """Up to ``count`` highlights by score descending; empty when nothing parses."""
    return run_cascade(
        HIGHLIGHT_SPEC, text, ExtractionContext(total_duration=total_duration, limit=count)
    )
