"""Compose the render and operational routes into one router.

The host passes every collaborator in; nothing here reaches for a
process-wide singleton. Background timers created along the way are
returned so the host can cancel them at shutdown.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from fastapi import APIRouter, FastAPI

from quiz_api.adapters.collaborators import BatchService, MetricsRegistry, SessionRegistry
from quiz_api.adapters.rate_limit.base import AbstractRateLimiter
from quiz_api.adapters.render.base import AbstractRenderService
from quiz_api.api.routes import create_operations_router, create_render_router
from quiz_api.core.config import RenderSettings
from quiz_api.core.exception_handlers import setup_exception_handlers
from quiz_api.core.timers import RepeatingTimer, release_timers


@dataclass
class MountedRouter:
    router: APIRouter
    rate_limiter: AbstractRateLimiter
    timers: list[RepeatingTimer] = field(default_factory=list)

    def release(self) -> None:
        """Cancel every background timer created for this router."""
        release_timers(self.timers)


def create_api_router(
    *,
    render_service: AbstractRenderService,
    metrics_registry: MetricsRegistry,
    session_registry: SessionRegistry,
    batch_service: BatchService,
    base_path: str = "/",
    is_production: bool = False,
    app_env: str | None = None,
    logger: logging.Logger | None = None,
    render_settings: RenderSettings | None = None,
    rate_limiter: AbstractRateLimiter | None = None,
    readiness_root: str | Path | None = None,
    start_janitor: bool = True,
) -> MountedRouter:
    """Build the full router (render + operations).

    The render routes raise ``AppError`` for 400/408/429/500 outcomes and
    rely on the handlers from ``setup_exception_handlers`` to turn them into
    ``{error, messageKey}`` bodies. Without them a host app answers those
    cases with generic 500s; use :func:`mount_api_router` to include the
    router and register the handlers together.

    Returns:
        MountedRouter: The router and the timers the caller owns.
    """
    render = create_render_router(
        render_service=render_service,
        logger=logger,
        rate_limiter=rate_limiter,
        render_settings=render_settings,
        start_janitor=start_janitor,
    )
    operations = create_operations_router(
        metrics_registry=metrics_registry,
        session_registry=session_registry,
        batch_service=batch_service,
        base_path=base_path,
        is_production=is_production,
        app_env=app_env,
        readiness_root=readiness_root,
    )

    router = APIRouter()
    router.include_router(operations)
    router.include_router(render.router)
    return MountedRouter(router=router, rate_limiter=render.rate_limiter, timers=list(render.timers))


def mount_api_router(app: FastAPI, mounted: MountedRouter) -> None:
    """Include ``mounted.router`` in ``app`` along with the error handlers it needs."""
    setup_exception_handlers(app)
    app.include_router(mounted.router)
