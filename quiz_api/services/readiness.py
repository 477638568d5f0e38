"""Readiness probe: are the data directories the server needs in place."""

from __future__ import annotations

import asyncio
import stat
from pathlib import Path
from typing import Callable, Mapping

# check name -> directory relative to the readiness root
READINESS_DIRECTORIES: dict[str, str] = {
    "quizzes": "quizzes",
    "results": "results",
    "uploads": "public/uploads",
}


async def is_directory(path: Path, *, stat_fn: Callable[[Path], object] | None = None) -> bool:
    """Return True when ``path`` is an existing directory; False on any error.

    The ``stat`` call runs in a worker thread so probes don't block the loop.
    """
    probe = stat_fn or Path.stat
    try:
        result = await asyncio.to_thread(probe, path)
    except Exception:
        return False
    return stat.S_ISDIR(result.st_mode)  # type: ignore[attr-defined]


async def check_directories(
    root: Path,
    directories: Mapping[str, str] = READINESS_DIRECTORIES,
    *,
    stat_fn: Callable[[Path], object] | None = None,
) -> dict[str, bool]:
    """Probe every directory concurrently.

    Args:
        root: Base directory relative paths are resolved against.
        directories: Mapping of check name to relative directory.
        stat_fn: Optional replacement for ``Path.stat`` (used by tests).

    Returns:
        dict[str, bool]: Check name to whether the directory exists.
    """
    names = list(directories)
    results = await asyncio.gather(
        *(is_directory(root / directories[name], stat_fn=stat_fn) for name in names)
    )
    return dict(zip(names, results))
