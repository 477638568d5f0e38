"""Factory for creating render service instances."""

import logging

from quiz_api.adapters.render.base import AbstractRenderService
from quiz_api.adapters.render.disabled import DisabledRenderService
from quiz_api.adapters.render.http_client import HttpRenderService
from quiz_api.core.config import RenderSettings, settings

logger = logging.getLogger(__name__)


def create_render_service(render_settings: RenderSettings | None = None) -> AbstractRenderService:
    """Instantiate the render service described by configuration.

    Returns the HTTP adapter when a service URL is configured and rendering
    is enabled; otherwise a service that refuses every render.

    Args:
        render_settings: Optional settings; defaults to the global settings.

    Returns:
        AbstractRenderService: Configured render service.
    """
    cfg = render_settings or settings.render

    if not cfg.enabled:
        logger.info("render.disabled", extra={"reason": "disabled_by_config"})
        return DisabledRenderService()

    if not cfg.service_url:
        logger.warning("render.disabled", extra={"reason": "missing_service_url"})
        return DisabledRenderService()

    logger.info(
        "render.http_service",
        extra={"render_url": cfg.service_url, "timeout_s": cfg.timeout_seconds},
    )
    return HttpRenderService(cfg.service_url, timeout_seconds=cfg.timeout_seconds)
