"""Rate limiting helpers for the render route.

This module wires the rate limiting adapter into the HTTP layer.

Rate limiting strategy:
- Fixed window per client network address, opened by the first request.
- If the address is unavailable, every such client shares the ``"unknown"``
  bucket.
- The check runs after request validation, so malformed submissions do not
  use up a client's budget.
"""

from __future__ import annotations

import logging

from fastapi import Request

from quiz_api.adapters.rate_limit.base import AbstractRateLimiter
from quiz_api.core.errors import RateLimitAppError
from quiz_api.core.timers import RepeatingTimer

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


def client_address(request: Request) -> str:
    """Return the client's network address, or ``"unknown"``."""

    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT


def enforce_rate_limit(limiter: AbstractRateLimiter, address: str) -> int:
    """Count a request against ``address`` or reject it.

    Args:
        limiter: Limiter holding the per-address windows.
        address: Client network address.

    Returns:
        int: Requests still allowed in the current window.

    Raises:
        RateLimitAppError: 429 when the window's budget is exhausted.
    """

    result = limiter.consume(address)
    if result.allowed:
        return result.remaining

    retry_after = result.retry_after_seconds or 0
    logger.warning(
        "Render rate limit exceeded for IP: %s",
        address,
        extra={
            "client_address": address,
            "limit": result.limit,
            "retry_after_s": retry_after,
        },
    )
    raise RateLimitAppError(
        code="error_rate_limited",
        message="Rate limit exceeded",
        details={"address": address, "retry_after": retry_after},
    )


def start_rate_limit_janitor(
    limiter: AbstractRateLimiter,
    *,
    interval_seconds: float,
    grace_seconds: float,
) -> RepeatingTimer:
    """Start a timer that periodically drops stale limiter entries.

    Returns:
        RepeatingTimer: Running timer; the caller owns it and must cancel it.
    """

    def _sweep() -> None:
        removed = limiter.sweep(grace_seconds)
        if removed:
            logger.debug("rate_limit.swept", extra={"removed": removed})

    return RepeatingTimer(interval_seconds, _sweep, name="render-rate-limit-janitor").start()
