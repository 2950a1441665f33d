from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from camstudio.errors import RequestTimeoutError
from camstudio.logging import get_logger

logger = get_logger("retry")

T = TypeVar("T")

RETRYABLE_STATUSES = frozenset({429, 503})
RETRYABLE_PATTERNS = ("rate limit", "too many requests", "overloaded", "503", "429")


def error_message(error: object) -> str:
    if error is None:
        return "unknown error"
    if isinstance(error, str):
        return error
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error)


def is_retryable(error: BaseException) -> bool:
    """True for rate limiting and overload signals, by status or message."""
    if isinstance(error, RequestTimeoutError):
        return False
    if getattr(error, "status", None) in RETRYABLE_STATUSES:
        return True
    msg = error_message(error).lower()
    return any(p in msg for p in RETRYABLE_PATTERNS)


@dataclass
class RetryEvent:
    attempt: int
    max_retries: int
    delay: float
    error: BaseException


@dataclass
class RetryState:
    attempt: int = 0
    last_error: BaseException | None = None
    delay: float = 0.0


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    *,
    max_retries: int = 3,
    base_delay: float = 2.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    on_retry: Callable[[RetryEvent], None] | None = None,
) -> T:
    """Run ``operation`` until it succeeds, fails for good, or attempts run out.

    Attempts are strictly sequential. Between retryable failures the caller
    is suspended for ``base_delay * 2**attempt`` seconds.
    """
    if max_retries < 1:
        raise ValueError("max_retries must be >= 1")

    state = RetryState()
    while True:
        try:
            return await operation()
        except Exception as e:
            state.last_error = e
            if not is_retryable(e) or state.attempt >= max_retries - 1:
                raise

            state.delay = base_delay * (2 ** state.attempt)
            logger.warning(
                f"retryable error, waiting {state.delay:.1f}s "
                f"({state.attempt + 1}/{max_retries}): {error_message(e)}"
            )
            if on_retry is not None:
                on_retry(RetryEvent(state.attempt + 1, max_retries, state.delay, e))
            await sleep(state.delay)
            state.attempt += 1
