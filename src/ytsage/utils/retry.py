"""Retry executor for outbound provider calls.

Implements bounded exponential backoff without jitter. Retry eligibility is
decided by a predicate over the raised failure, which by default consults
the failure's classification (see ``ytsage.utils.classifier``).
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from functools import wraps
from typing import ParamSpec, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ytsage.utils.errors import ClassifiedError, ErrorCode

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[None]]


# Codes worth another attempt: transient network, the rate-limit family and
# download failures.
RETRYABLE_CODES: frozenset[ErrorCode] = frozenset(
    {
        ErrorCode.NETWORK_ERROR,
        ErrorCode.TIMEOUT,
        ErrorCode.RATE_LIMITED,
        ErrorCode.AI_RATE_LIMITED,
        ErrorCode.DOWNLOAD_FAILED,
        ErrorCode.INCOMPLETE_DOWNLOAD,
    }
)

RETRYABLE_MESSAGE_PATTERNS: tuple[str, ...] = ("timeout", "network", "rate limit", "temporary")


def is_retryable_error(error: BaseException) -> bool:
    """Default retry predicate.

    Args:
        error: Failure raised by the wrapped operation

    Returns:
        True if another attempt may succeed
    """
    if not isinstance(error, Exception):
        # CancelledError, KeyboardInterrupt and friends always propagate
        return False

    if isinstance(error, ClassifiedError):
        return error.code in RETRYABLE_CODES

    message = str(error).lower()
    return any(pattern in message for pattern in RETRYABLE_MESSAGE_PATTERNS)


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff policy for a single call site.

    Delays are in seconds. The delay before attempt ``n + 1`` is
    ``min(initial_delay * backoff_multiplier ** (n - 1), max_delay)``.
    """

    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 8.0
    backoff_multiplier: float = 2
    retry_predicate: Callable[[BaseException], bool] = field(default=is_retryable_error)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must be non-negative")

    def delay_for(self, attempt: int) -> float:
        """Delay to wait after the given failed attempt (1-based)."""
        return backoff_delay(self, attempt)


DEFAULT_RETRY_POLICY = RetryPolicy()

# Fast policy for tests (minimal delays)
TEST_RETRY_POLICY = RetryPolicy(max_attempts=3, initial_delay=0.001, max_delay=0.004)


def backoff_delay(policy: RetryPolicy, attempt: int) -> float:
    """Compute the delay after a failed attempt.

    Args:
        policy: Retry policy
        attempt: 1-based number of the attempt that just failed

    Returns:
        Delay in seconds, capped at ``policy.max_delay``
    """
    return min(policy.initial_delay * policy.backoff_multiplier ** (attempt - 1), policy.max_delay)


def log_retry_attempt(retry_state: RetryCallState) -> None:
    """Log retry attempts for debugging.

    Args:
        retry_state: Tenacity retry state
    """
    if retry_state.outcome and retry_state.outcome.failed:
        exception = retry_state.outcome.exception()
        wait = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            f"Attempt {retry_state.attempt_number} failed: {type(exception).__name__}: "
            f"{exception}; retrying in {wait:.2f}s"
        )


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    sleep: SleepFunc | None = None,
) -> T:
    """Run an async operation under a retry policy.

    Usage:
        info = await with_retry(lambda: client.fetch(video_id), policy)

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt
        policy: Retry policy (uses DEFAULT_RETRY_POLICY if None)
        sleep: Coroutine used for back-off suspension (defaults to asyncio.sleep)

    Returns:
        The operation's result from the first successful attempt

    Raises:
        The last failure, unchanged, once the predicate rejects it or the
        attempts are exhausted. Cancellation propagates immediately and no
        further attempts are made.
    """
    policy = policy or DEFAULT_RETRY_POLICY

    retryer = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_exponential(
            multiplier=policy.initial_delay,
            exp_base=policy.backoff_multiplier,
            min=0,
            max=policy.max_delay,
        ),
        retry=retry_if_exception(
            # BaseExceptions such as cancellation never retry, whatever the predicate says
            lambda error: isinstance(error, Exception) and policy.retry_predicate(error)
        ),
        before_sleep=log_retry_attempt,
        sleep=sleep or asyncio.sleep,
        reraise=True,
    )

    try:
        async for attempt in retryer:
            with attempt:
                return await operation()
    except asyncio.CancelledError:
        logger.debug("Retry loop cancelled; abandoning remaining attempts")
        raise
    except Exception as e:
        attempts = retryer.statistics.get("attempt_number", policy.max_attempts)
        logger.error(f"Operation failed after {attempts} attempt(s): {type(e).__name__}: {e}")
        raise

    raise AssertionError("unreachable: retry loop exited without result")


def retrying(
    policy: RetryPolicy | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator form of :func:`with_retry` for coroutine functions.

    Usage:
        @retrying(RetryPolicy(max_attempts=5))
        async def fetch(video_id: str) -> dict: ...
    """

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return await with_retry(lambda: func(*args, **kwargs), policy)

        return wrapper

    return decorator
