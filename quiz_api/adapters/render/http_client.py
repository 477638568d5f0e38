"""HTTP render service adapter.

Forwards submissions to a remote animation renderer over HTTP and maps its
responses onto the render error hierarchy.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from quiz_api.adapters.render.base import (
    DEFAULT_QUALITY,
    AbstractRenderService,
    AvailabilityReport,
    Quality,
    RenderResult,
)
from quiz_api.adapters.render.errors import (
    RenderServiceError,
    RenderTimeoutError,
    RenderValidationError,
)

logger = logging.getLogger(__name__)

_VALIDATION_STATUSES = {400, 422}
_TIMEOUT_STATUSES = {408, 504}


def _error_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {"error": response.text}
    return body if isinstance(body, dict) else {"error": str(body)}


class HttpRenderService(AbstractRenderService):
    """Client for a remote render service.

    The remote service exposes ``POST /render`` accepting ``{code, quality}``
    and answering ``{videoPath, duration}``, plus ``GET /version``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 60.0,
        enabled: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            base_url: Root URL of the render service.
            timeout_seconds: Timeout for a render request in seconds.
            enabled: Reported through ``enabled``; renders are refused when False.
            transport: Optional httpx transport (used by tests).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.enabled = enabled
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=self._transport,
        )

    async def render_animation(self, code: str, *, quality: Quality = DEFAULT_QUALITY) -> RenderResult:
        if not self.enabled:
            raise RenderServiceError("Manim rendering is disabled")

        try:
            async with self._client(self.timeout_seconds) as client:
                response = await client.post("/render", json={"code": code, "quality": quality})
        except httpx.TimeoutException as exc:
            raise RenderTimeoutError(
                f"Render request timeout after {self.timeout_seconds:g}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise RenderServiceError(f"Render service unreachable: {exc}") from exc

        if response.status_code in _VALIDATION_STATUSES:
            body = _error_body(response)
            raise RenderValidationError(
                str(body.get("error") or body.get("message") or "Invalid animation code"),
                message_key=body.get("messageKey"),
            )
        if response.status_code in _TIMEOUT_STATUSES:
            body = _error_body(response)
            raise RenderTimeoutError(
                str(body.get("error") or "Render timeout"),
                message_key=body.get("messageKey"),
            )
        if response.status_code >= 400:
            body = _error_body(response)
            raise RenderServiceError(
                f"Render service returned {response.status_code}: {body.get('error') or body.get('message')}",
                message_key=body.get("messageKey"),
            )

        try:
            payload = response.json()
            return RenderResult(video_path=payload["videoPath"], duration=payload.get("duration"))
        except (ValueError, KeyError, TypeError) as exc:
            raise RenderServiceError(f"Render service returned an invalid payload: {exc}") from exc

    async def check_availability(self) -> AvailabilityReport:
        if not self.enabled:
            return AvailabilityReport(available=False, version=None)

        try:
            async with self._client(5.0) as client:
                response = await client.get("/version")
                response.raise_for_status()
                version = response.json().get("version")
        except (httpx.HTTPError, ValueError, AttributeError) as exc:
            logger.warning("render.availability_failed", extra={"error_msg": str(exc)})
            return AvailabilityReport(available=False, version=None)

        return AvailabilityReport(available=True, version=version)
