"""Process memory and uptime snapshot for the monitoring endpoint."""

from __future__ import annotations

import time
from typing import Any

import psutil

_BYTES_PER_MB = 1024 * 1024


def _to_mb(value: int) -> str:
    return f"{round(value / _BYTES_PER_MB)}MB"


def memory_snapshot(process: psutil.Process | None = None) -> dict[str, str]:
    """Memory figures of the current process, in whole megabytes.

    ``heapUsed`` is the private resident memory (rss minus shared pages),
    ``heapTotal`` the virtual size and ``external`` the shared resident
    pages. Platforms without a ``shared`` figure report 0 for it.
    """
    proc = process or psutil.Process()
    info = proc.memory_info()
    shared = getattr(info, "shared", 0)
    return {
        "heapUsed": _to_mb(max(info.rss - shared, 0)),
        "heapTotal": _to_mb(info.vms),
        "rss": _to_mb(info.rss),
        "external": _to_mb(shared),
    }


def process_uptime(process: psutil.Process | None = None, *, now: float | None = None) -> str:
    """Seconds since the process started, rounded, suffixed with ``s``."""
    proc = process or psutil.Process()
    current = time.time() if now is None else now
    return f"{round(max(current - proc.create_time(), 0))}s"


def build_memory_stats(
    *,
    active_games: int,
    batch_stats: Any,
    timestamp: str,
    process: psutil.Process | None = None,
) -> dict[str, Any]:
    proc = process or psutil.Process()
    return {
        **memory_snapshot(proc),
        "activeGames": active_games,
        "batchStats": batch_stats,
        "uptime": process_uptime(proc),
        "timestamp": timestamp,
    }
