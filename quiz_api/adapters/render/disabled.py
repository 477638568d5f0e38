"""Render service used when rendering is turned off or not configured."""

from __future__ import annotations

from quiz_api.adapters.render.base import (
    DEFAULT_QUALITY,
    AbstractRenderService,
    AvailabilityReport,
    Quality,
    RenderResult,
)
from quiz_api.adapters.render.errors import RenderServiceError


class DisabledRenderService(AbstractRenderService):
    """Refuses every render and reports itself unavailable."""

    enabled = False

    async def render_animation(self, code: str, *, quality: Quality = DEFAULT_QUALITY) -> RenderResult:
        raise RenderServiceError("Manim rendering is disabled")

    async def check_availability(self) -> AvailabilityReport:
        return AvailabilityReport(available=False, version=None)
