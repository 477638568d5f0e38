"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from quiz_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


@dataclass
class RateLimitEntry:
    count: int
    reset_at: float


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter using a fixed window that opens on a key's first request.

    The first accepted request from a key starts a window of
    ``window_seconds``; at most ``limit`` requests are accepted inside it.
    Blocked requests do not touch the entry. Once the window has passed the
    entry is replaced on the next request, or removed by :meth:`sweep`.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of accepted requests per window.
            window_seconds: Length of a window in seconds.
            clock: Time source returning seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: dict[str, RateLimitEntry] = {}

    @property
    def limit(self) -> int:
        return self._limit

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_entry(self, key: str) -> RateLimitEntry | None:
        """Return a copy of the entry for ``key`` (for diagnostics and tests)."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            return RateLimitEntry(count=entry.count, reset_at=entry.reset_at)

    def consume(self, key: str) -> RateLimitResult:
        """Count one request for ``key``.

        Args:
            key: Client identifier (network address or ``"unknown"``).

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()

        with self._lock:
            entry = self._entries.get(key)

            if entry is None or now > entry.reset_at:
                entry = RateLimitEntry(count=1, reset_at=now + self._window_seconds)
                self._entries[key] = entry
                return self._allowed(entry)

            if entry.count >= self._limit:
                retry_after = max(1, int(math.ceil(entry.reset_at - now)))
                return RateLimitResult(
                    allowed=False,
                    limit=self._limit,
                    remaining=0,
                    reset_at=entry.reset_at,
                    retry_after_seconds=retry_after,
                )

            entry.count += 1
            return self._allowed(entry)

    def sweep(self, grace_seconds: float) -> int:
        now = self._clock()
        with self._lock:
            stale = [
                key
                for key, entry in self._entries.items()
                if entry.reset_at + grace_seconds < now
            ]
            for key in stale:
                del self._entries[key]
        return len(stale)

    def _allowed(self, entry: RateLimitEntry) -> RateLimitResult:
        return RateLimitResult(
            allowed=True,
            limit=self._limit,
            remaining=self._limit - entry.count,
            reset_at=entry.reset_at,
            retry_after_seconds=None,
        )
