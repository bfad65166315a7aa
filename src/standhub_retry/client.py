"""Retry engine."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from .exceptions import RetryError
from .models import RetryConfig

T = TypeVar("T")

logger = structlog.get_logger(__name__)


def _always(_: Exception) -> bool:
    return True


async def with_retry(
    config: RetryConfig,
    fn: Callable[[], Awaitable[T]],
    *,
    retry_if: Callable[[Exception], bool] = _always,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``fn`` and retry it with exponential backoff.

    Errors for which ``retry_if`` returns False propagate immediately.
    ``sleep`` is injectable so callers can test without real delays.
    """
    last_error: Exception | None = None
    for attempt in range(config.max_attempts):
        try:
            return await fn()
        except Exception as e:
            if not retry_if(e):
                raise
            last_error = e
            if attempt < config.max_retries:
                delay = config.compute_delay(attempt)
                logger.warning(
                    "retry_scheduled",
                    attempt=attempt + 1,
                    max_attempts=config.max_attempts,
                    delay_seconds=delay,
                    error=str(e),
                )
                await sleep(delay)
    raise RetryError(attempts=config.max_attempts, last_error=last_error)
