"""Rate limiter interfaces.

The render route depends on this abstraction (not the concrete
implementation) so a shared store could replace the in-process one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit consume operation.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        remaining: Remaining requests in the current window (0 when blocked).
        reset_at: Clock time at which the current window expires.
        retry_after_seconds: Whole seconds to wait when blocked, rounded up.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def consume(self, key: str) -> RateLimitResult:
        """Count one request for ``key`` and decide whether it may proceed.

        Args:
            key: Unique identifier (client network address).

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    @abstractmethod
    def sweep(self, grace_seconds: float) -> int:
        """Drop entries whose window ended more than ``grace_seconds`` ago.

        Returns:
            Number of entries removed.
        """
        raise NotImplementedError
