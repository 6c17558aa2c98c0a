"""Generic tiered extraction engine.

Every content type is described by a :class:`ContentSpec`: an ordered list of
parsing tiers, a record validator, a ranking key and a degrade strategy. The
engine tries tiers strictly in order and the first tier whose validated
records reach its minimum wins; later tiers are never consulted.

Parsing shortfalls are never raised. When no tier wins, the content type's
degrade strategy supplies the result (empty for most content types, synthetic
placeholders for chapters) and the result is flagged as degraded.
"""

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from .models import ExtractionResult, Record

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)

Candidate = dict[str, Any]


@dataclass(frozen=True)
class ExtractionContext:
    """Per-call inputs the tiers and validators may consult.

    Attributes:
        total_duration: Media duration in seconds (chapters, highlights)
        limit: Caller-requested record count, applied after ranking
    """

    total_duration: float | None = None
    limit: int | None = None


@dataclass(frozen=True)
class ExtractionTier(Generic[R]):
    """One parsing strategy in a cascade.

    Attributes:
        name: Tier name, reported on the result
        parse: Turns raw text into candidate field mappings
        min_matches: Minimum validated records for this tier to win; either
            a constant or a function of the context
        validate: Tier-specific validator, overriding the content type's
        rank: Whether the content type's ranking applies to this tier's records
    """

    name: str
    parse: Callable[[str], list[Candidate]]
    min_matches: int | Callable[[ExtractionContext], int] = 1
    validate: Callable[[Candidate, ExtractionContext], R | None] | None = None
    rank: bool = True

    def minimum(self, context: ExtractionContext) -> int:
        if callable(self.min_matches):
            return max(1, self.min_matches(context))
        return max(1, self.min_matches)


def _no_fallback(context: ExtractionContext) -> list[Any]:
    return []


@dataclass(frozen=True)
class ContentSpec(Generic[R]):
    """Descriptor of one content type for :func:`run_cascade`."""

    name: str
    tiers: Sequence[ExtractionTier[R]]
    validate: Callable[[Candidate, ExtractionContext], R | None]
    sort_key: Callable[[R], Any] | None = None
    descending: bool = False
    degrade: Callable[[ExtractionContext], list[R]] = field(default=_no_fallback)


def run_cascade(
    spec: ContentSpec[R],
    text: str,
    context: ExtractionContext | None = None,
) -> ExtractionResult[R]:
    """Extract validated, ranked records from generated text.

    Args:
        spec: Content-type descriptor
        text: Raw generated text
        context: Per-call context (duration, requested count)

    Returns:
        ExtractionResult with the winning tier's records, or the degraded
        fallback when no tier reaches its minimum
    """
    context = context or ExtractionContext()

    for tier in spec.tiers:
        try:
            candidates = tier.parse(text or "")
        except ValueError as e:
            logger.debug(f"{spec.name}: tier '{tier.name}' could not parse output: {e}")
            continue

        validate = tier.validate or spec.validate
        records = [
            record
            for record in (validate(candidate, context) for candidate in candidates)
            if record is not None
        ]

        discarded = len(candidates) - len(records)
        if discarded:
            logger.debug(f"{spec.name}: tier '{tier.name}' discarded {discarded} invalid record(s)")

        minimum = tier.minimum(context)
        if len(records) < minimum:
            logger.debug(
                f"{spec.name}: tier '{tier.name}' produced {len(records)} record(s), "
                f"needs {minimum}"
            )
            continue

        if tier.rank and spec.sort_key is not None:
            # sorted() is stable, so ties keep first-seen order
            records = sorted(records, key=spec.sort_key, reverse=spec.descending)

        if context.limit is not None:
            records = records[: context.limit]

        logger.debug(f"{spec.name}: tier '{tier.name}' won with {len(records)} record(s)")
        return ExtractionResult(records=tuple(records), tier=tier.name)

    fallback = spec.degrade(context)
    logger.info(
        f"{spec.name}: no parsing tier succeeded; degrading to {len(fallback)} fallback record(s)"
    )
    return ExtractionResult(records=tuple(fallback), degraded=True)


# Field coercion helpers shared by validators


def to_finite_float(value: Any) -> float | None:
    """Parse a finite float, returning None for anything else (bools included)."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def to_int(value: Any) -> int | None:
    """Parse an integer from a finite number or numeric text."""
    number = to_finite_float(value)
    if number is None:
        return None
    return int(number)


def clean_text(value: Any) -> str:
    """Strip whitespace and surrounding markdown emphasis from a field."""
    if value is None:
        return ""
    return str(value).strip().strip("*_").strip()
