from __future__ import annotations

"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated apps with their own collaborators.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from quiz_api.adapters.collaborators import (
    BatchService,
    EmptyMetricsRegistry,
    InMemorySessionRegistry,
    MetricsRegistry,
    NullBatchService,
    SessionRegistry,
)
from quiz_api.adapters.rate_limit.base import AbstractRateLimiter
from quiz_api.adapters.render.base import AbstractRenderService
from quiz_api.adapters.render.factory import create_render_service
from quiz_api.api.router import create_api_router, mount_api_router
from quiz_api.core.config import Settings, settings as default_settings
from quiz_api.core.logging import configure_logging
from quiz_api.core.middleware import request_id_middleware
from quiz_api.core.openapi import apply_openapi_customizations
from quiz_api.core.timers import release_timers


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    release_timers(app.state.timers)


def create_app(
    *,
    render_service: AbstractRenderService | None = None,
    metrics_registry: MetricsRegistry | None = None,
    session_registry: SessionRegistry | None = None,
    batch_service: BatchService | None = None,
    rate_limiter: AbstractRateLimiter | None = None,
    app_settings: Settings | None = None,
    configure_logs: bool = True,
    start_janitor: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Collaborators that are not passed in fall back to standalone defaults
    (render service from settings, empty metrics, no games, no batching).

    Returns:
        Configured FastAPI app. ``app.state.timers`` holds the background
        timers; they are cancelled when the app shuts down.
    """
    cfg = app_settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    if configure_logs:
        configure_logging(cfg.log)

    app = FastAPI(
        title="Quiz API",
        description=(
            "Animation render endpoint (forwards code to the render service and "
            "returns the video path) and operational endpoints for probes and "
            "monitoring."
        ),
        version="0.1.0",
        lifespan=_lifespan,
    )

    app.middleware("http")(request_id_middleware)

    mounted = create_api_router(
        render_service=render_service if render_service is not None else create_render_service(cfg.render),
        metrics_registry=metrics_registry if metrics_registry is not None else EmptyMetricsRegistry(),
        session_registry=session_registry if session_registry is not None else InMemorySessionRegistry(),
        batch_service=batch_service if batch_service is not None else NullBatchService(),
        base_path=cfg.app.base_path,
        is_production=cfg.is_production,
        app_env=cfg.app_env,
        render_settings=cfg.render,
        rate_limiter=rate_limiter,
        readiness_root=cfg.app.readiness_root,
        start_janitor=start_janitor,
    )
    mount_api_router(app, mounted)
    app.state.timers = mounted.timers
    app.state.rate_limiter = mounted.rate_limiter

    apply_openapi_customizations(app)

    return app
