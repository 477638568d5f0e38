"""Capabilities the operations router needs from the host application.

The host server owns the real metrics registry, game sessions and socket
batching. The standalone implementations below let the package run on its
own (``quiz_api.main``) and report empty state.
"""

from __future__ import annotations

from typing import Any, Awaitable, Protocol, Sized, runtime_checkable


@runtime_checkable
class MetricsRegistry(Protocol):
    content_type: str

    def metrics(self) -> str | bytes | Awaitable[str | bytes]: ...


@runtime_checkable
class SessionRegistry(Protocol):
    @property
    def games(self) -> Sized: ...


@runtime_checkable
class BatchService(Protocol):
    def get_stats(self) -> dict[str, Any]: ...


class EmptyMetricsRegistry:
    """Metrics registry exposing no series in Prometheus text format."""

    content_type = "text/plain; version=0.0.4; charset=utf-8"

    def metrics(self) -> str:
        return ""


class InMemorySessionRegistry:
    def __init__(self) -> None:
        self.games: dict[str, Any] = {}


class NullBatchService:
    def get_stats(self) -> dict[str, Any]:
        return {"pendingBatches": 0, "totalEvents": 0}
