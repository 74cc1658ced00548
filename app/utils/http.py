"""HTTP utilities providing retry/backoff semantics for idempotent calls."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)


class RetryConfig:
    def __init__(self, *, attempts: int = 3, backoff_seconds: float = 1.0) -> None:
        self.attempts = attempts
        self.backoff_seconds = backoff_seconds


async def request_with_retry(
    func: Callable[..., Awaitable[httpx.Response]],
    *args,
    retry_config: RetryConfig | None = None,
    **kwargs,
) -> httpx.Response:
    """
    Invoke ``func`` until it yields a non-5xx response or attempts run out.

    Transport errors and 5xx responses are retried with linear backoff. 4xx
    responses are returned immediately; the caller decides what they mean.
    The final 5xx response is returned, the final transport error re-raised.
    """
    config = retry_config or RetryConfig()
    last_exception: httpx.TransportError | None = None
    response: httpx.Response | None = None

    for attempt in range(1, config.attempts + 1):
        try:
            response = await func(*args, **kwargs)
        except httpx.TransportError as exc:
            last_exception = exc
            response = None
            logger.warning("Request attempt %s failed: %s", attempt, exc)
        else:
            if response.status_code < 500:
                return response
            logger.warning(
                "Request attempt %s returned %s", attempt, response.status_code
            )
        if attempt < config.attempts:
            await asyncio.sleep(config.backoff_seconds * attempt)

    if response is not None:
        return response
    if last_exception is not None:
        raise last_exception
    raise RuntimeError("Request failed without raising an exception")


__all__ = ["RetryConfig", "request_with_retry"]
