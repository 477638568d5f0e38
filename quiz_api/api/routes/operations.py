"""Operational routes for orchestration probes and monitoring.

- ``/health``: liveness, always 200
- ``/ready``: readiness, 503 until the data directories exist
- ``/metrics``: metrics registry pass-through (trusted scrape target)
- ``/debug/config``: echo of the base path configuration
- ``/api/stats/memory``: process memory, active games and batch stats
"""

from __future__ import annotations

import inspect
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import psutil
from fastapi import APIRouter, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from quiz_api.adapters.collaborators import BatchService, MetricsRegistry, SessionRegistry
from quiz_api.services.memory_stats import build_memory_stats
from quiz_api.services.readiness import READINESS_DIRECTORIES, check_directories

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision, e.g. 2025-01-01T12:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def describe_base_path(base_path: str, *, app_env: str | None, is_production: bool) -> dict[str, Any]:
    return {
        "BASE_PATH": base_path,
        "BASE_PATH_raw": json.dumps(base_path),
        "BASE_PATH_length": len(base_path),
        "BASE_PATH_type": type(base_path).__name__,
        "BASE_PATH_equals_slash": base_path == "/",
        "BASE_PATH_not_equals_slash": base_path != "/",
        "APP_ENV": app_env,
        "isProduction": is_production,
        "staticMountedAt": base_path if base_path != "/" else "/ (root)",
        "timestamp": utc_timestamp(),
    }


def create_operations_router(
    *,
    metrics_registry: MetricsRegistry,
    session_registry: SessionRegistry,
    batch_service: BatchService,
    base_path: str = "/",
    is_production: bool = False,
    app_env: str | None = None,
    readiness_root: str | Path | None = None,
    stat_fn: Callable[[Path], object] | None = None,
    process: psutil.Process | None = None,
) -> APIRouter:
    """Build the operational routes.

    Args:
        metrics_registry: Registry serialized by ``/metrics``.
        session_registry: Source of the active game count.
        batch_service: Source of the socket batching statistics.
        base_path: Base path the host mounts static assets at.
        is_production: Production flag echoed by ``/debug/config``.
        app_env: Environment name echoed by ``/debug/config``.
        readiness_root: Directory readiness checks resolve against (default: cwd).
        stat_fn: Replacement for ``Path.stat`` in readiness probes (tests).
        process: psutil process to report on (default: current process).

    Returns:
        APIRouter: Router with the operational endpoints.
    """
    router = APIRouter(tags=["Operations"])

    @router.get("/health")
    async def health_check() -> dict[str, str]:
        """Liveness probe: the process is up and serving requests."""
        return {"status": "ok", "timestamp": utc_timestamp()}

    @router.get("/metrics")
    async def metrics() -> Response:
        try:
            body = metrics_registry.metrics()
            if inspect.isawaitable(body):
                body = await body
            return Response(content=body, media_type=metrics_registry.content_type)
        except Exception as exc:
            logger.error("metrics.export_failed", extra={"error_msg": str(exc)})
            return PlainTextResponse(str(exc), status_code=500)

    @router.get("/debug/config")
    async def debug_config() -> dict[str, Any]:
        return describe_base_path(base_path, app_env=app_env, is_production=is_production)

    @router.get("/ready")
    async def readiness_check() -> JSONResponse:
        """Readiness probe: the quizzes, results and uploads directories exist."""
        try:
            root = Path(readiness_root) if readiness_root is not None else Path.cwd()
            checks = await check_directories(root, READINESS_DIRECTORIES, stat_fn=stat_fn)
        except Exception as exc:
            logger.error("readiness.check_failed", extra={"error_msg": str(exc)})
            return JSONResponse(
                status_code=503,
                content={"status": "error", "error": str(exc), "timestamp": utc_timestamp()},
            )

        ready = all(checks.values())
        return JSONResponse(
            status_code=200 if ready else 503,
            content={
                "status": "ready" if ready else "not ready",
                "checks": checks,
                "timestamp": utc_timestamp(),
            },
        )

    @router.get("/api/stats/memory")
    async def memory_stats() -> dict[str, Any]:
        return build_memory_stats(
            active_games=len(session_registry.games),
            batch_stats=batch_service.get_stats(),
            timestamp=utc_timestamp(),
            process=process,
        )

    return router
