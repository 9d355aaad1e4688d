"""Retry with exponential backoff for transient provider failures.

WHY: Rate limits and 5xx responses are routine for hosted speech-to-text.
Retrying them transparently keeps a long multi-chunk job from failing on a
single hiccup, while 400/401 must fail fast so a bad key or request is
reported immediately.

HOW: with_retry() awaits an operation factory, and on failure asks the
is_retryable predicate whether to try again, sleeping base_delay_s * 2**n
between attempts (optionally with jitter).

RULES:
- max_retries counts retries, so the operation runs at most max_retries + 1 times
- The last exception is re-raised unchanged when attempts are exhausted
- Non-retryable exceptions propagate immediately, without sleeping
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx

from auto_subtitles.api.client import OpenAIAPIError
from auto_subtitles.core.errors import TranscribeError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


def is_retryable_error(exc: BaseException) -> bool:
    """True for rate limits, server errors, transport failures, and retryable TranscribeErrors."""
    if isinstance(exc, TranscribeError):
        return exc.retryable
    if isinstance(exc, OpenAIAPIError):
        return exc.status_code in RETRYABLE_STATUS_CODES
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    if isinstance(exc, (httpx.TransportError, ConnectionResetError)):
        return True
    return False


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    is_retryable: Callable[[BaseException], bool] = is_retryable_error,
    max_retries: int = 3,
    base_delay_s: float = 1.0,
    jitter: bool = False,
) -> T:
    """Run ``operation`` until it succeeds or fails permanently.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt.
        is_retryable: Predicate deciding whether an exception is transient.
        max_retries: Retries after the first attempt.
        base_delay_s: Delay before the first retry; doubles each retry.
        jitter: Add up to 100% random extra delay to spread retries out.

    Returns:
        The operation's result.
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as exc:
            if attempt >= max_retries or not is_retryable(exc):
                raise
            delay = base_delay_s * (2 ** attempt)
            if jitter:
                delay += random.uniform(0, delay)
            attempt += 1
            logger.warning("Attempt %d failed (%s); retrying in %.1fs", attempt, exc, delay)
            await asyncio.sleep(delay)
