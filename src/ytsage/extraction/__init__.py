"""AI analysis and structured-text extraction.

This package turns free-form generated text into validated records:
summaries, chapters, keywords, topics and highlights.
"""

from .cascade import ContentSpec, ExtractionContext, ExtractionTier, run_cascade
from .engine import AnalysisEngine
from .models import (
    Chapter,
    ExtractionResult,
    Highlight,
    Keyword,
    Summary,
    Topic,
)
from .parsers import (
    extract_chapters,
    extract_highlights,
    extract_keywords,
    extract_topics,
    parse_summary,
)

__all__ = [
    "AnalysisEngine",
    "Summary",
    "Chapter",
    "Keyword",
    "Topic",
    "Highlight",
    "ExtractionResult",
    "ContentSpec",
    "ExtractionContext",
    "ExtractionTier",
    "run_cascade",
    "extract_chapters",
    "extract_highlights",
    "extract_keywords",
    "extract_topics",
    "parse_summary",
]
