"""
utils/retry.py — Exponential-backoff retry for async HTTP calls.

Uses tenacity under the hood. Logs each attempt with structlog so failures
are observable without crashing the pipeline.

Provider fetches run with max_attempts=1 unless FETCH_MAX_ATTEMPTS is
raised: a failed fetch is terminal for that series and the pipeline
degrades to an empty series instead.

Usage:
    from econpulse_pipeline.utils.retry import call_with_retry

    payload = await call_with_retry(
        fetch_json, url, max_attempts=settings.fetch_max_attempts,
        retry_on=(httpx.TransportError,),
    )
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

log = structlog.get_logger(__name__)

T = TypeVar("T")


async def call_with_retry(
    fn: Callable[..., Awaitable[T]],
    *args: Any,
    max_attempts: int = 1,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    retry_on: type[Exception] | tuple[type[Exception], ...] = Exception,
    **kwargs: Any,
) -> T:
    """
    Await fn(*args, **kwargs), retrying with exponential backoff.

    Delays: base_delay * 2^(attempt-1), capped at max_delay. The last
    exception is re-raised unchanged once attempts are exhausted.

    Args:
        fn:           Async callable.
        max_attempts: Total attempts before raising (1 = no retry).
        base_delay:   Initial delay in seconds.
        max_delay:    Maximum delay cap in seconds.
        retry_on:     Exception type(s) that trigger a retry.

    Returns:
        Whatever fn returns.
    """
    attempt_log = log.bind(function=getattr(fn, "__qualname__", repr(fn)))
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=base_delay, max=max_delay),
        retry=retry_if_exception_type(retry_on),
        reraise=True,
    ):
        with attempt:
            attempt_num = attempt.retry_state.attempt_number
            if attempt_num > 1:
                attempt_log.warning(
                    "retry_attempt",
                    attempt=attempt_num,
                    max_attempts=max_attempts,
                )
            return await fn(*args, **kwargs)
    raise AssertionError("unreachable")  # pragma: no cover
