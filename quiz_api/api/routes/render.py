"""Animation render routes.

``POST /manim/render`` validates a submission, charges the client's rate
limit window and forwards the code to the render service.
``GET /manim/status`` reports whether the renderer is usable and never fails.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from fastapi import APIRouter, Request

from quiz_api.adapters.rate_limit.base import AbstractRateLimiter
from quiz_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from quiz_api.adapters.render.base import DEFAULT_QUALITY, VALID_QUALITIES, AbstractRenderService
from quiz_api.adapters.render.errors import RenderErrorKind, classify_render_error
from quiz_api.core.config import RenderSettings, settings
from quiz_api.core.errors import (
    AppError,
    RenderFailedAppError,
    RenderTimeoutAppError,
    ValidationAppError,
)
from quiz_api.core.rate_limit import client_address, enforce_rate_limit, start_rate_limit_janitor
from quiz_api.core.timers import RepeatingTimer, release_timers
from quiz_api.schemas.render import RenderErrorResponse, RenderResponse, RenderStatusResponse
from quiz_api.utils.error_sanitizer import sanitize_error_message

TIMEOUT_MESSAGE = "Animation render timed out. Try simplifying the animation."

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    status: {"model": RenderErrorResponse} for status in (400, 408, 429, 500)
}


@dataclass
class RenderRouter:
    """Render routes plus the background timers they own."""

    router: APIRouter
    rate_limiter: AbstractRateLimiter
    timers: list[RepeatingTimer] = field(default_factory=list)

    def release(self) -> None:
        release_timers(self.timers)


async def _read_payload(request: Request) -> dict[str, Any]:
    """Return the JSON object body, or an empty dict for anything else."""
    try:
        payload = await request.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def validate_render_request(payload: dict[str, Any]) -> tuple[str, str]:
    """Check a render submission.

    Args:
        payload: Decoded request body.

    Returns:
        tuple[str, str]: The code and the quality (``low`` when omitted).

    Raises:
        ValidationAppError: If code is missing/blank or quality is unknown.
    """
    code = payload.get("code")
    if not isinstance(code, str) or not code.strip():
        raise ValidationAppError(
            code="error_manim_code_required",
            message="code is required and must be a non-empty string",
        )

    # Only a missing key defaults; an explicit null is rejected below.
    quality = payload.get("quality", DEFAULT_QUALITY)
    if quality not in VALID_QUALITIES:
        raise ValidationAppError(
            code="error_manim_invalid_quality",
            message=f"quality must be one of: {', '.join(VALID_QUALITIES)}",
        )

    return code, quality


def translate_render_error(exc: Exception, logger: logging.Logger) -> AppError:
    """Map a render service failure to the error returned to the client."""
    classified = classify_render_error(exc)

    if classified.kind is RenderErrorKind.VALIDATION:
        logger.warning("Manim render validation error: %s", classified.message)
        return ValidationAppError(
            code=classified.message_key or "error_manim_invalid_code",
            message=classified.message,
        )

    if classified.kind is RenderErrorKind.TIMEOUT:
        logger.warning("Manim render timed out", extra={"error_msg": classified.message})
        return RenderTimeoutAppError(
            code=classified.message_key or "error_manim_timeout",
            message=TIMEOUT_MESSAGE,
        )

    logger.error(
        "Manim render error: %s",
        classified.message,
        extra={"error_type": type(exc).__name__},
    )
    return RenderFailedAppError(
        code=classified.message_key or "error_manim_render_failed",
        message="Render failed",
        details={
            "original_message": classified.message,
            "extra": {"details": sanitize_error_message(classified.message)},
        },
    )


def create_render_router(
    *,
    render_service: AbstractRenderService,
    logger: logging.Logger | None = None,
    rate_limiter: AbstractRateLimiter | None = None,
    render_settings: RenderSettings | None = None,
    start_janitor: bool = True,
) -> RenderRouter:
    """Build the render routes around their collaborators.

    Args:
        render_service: Service that performs the renders.
        logger: Logger for request/ failure lines; defaults to this module's.
        rate_limiter: Limiter to charge; a fresh in-memory one by default.
        render_settings: Limits and janitor timing; defaults to global settings.
        start_janitor: Start the stale-entry sweeper timer.

    Returns:
        RenderRouter: Router plus the timers the caller must release.
    """
    if render_service is None:
        raise ValueError("render_service is required for render routes")

    log = logger or logging.getLogger(__name__)
    cfg = render_settings or settings.render
    limiter = rate_limiter if rate_limiter is not None else InMemoryFixedWindowRateLimiter(
        limit=cfg.rate_limit_requests,
        window_seconds=cfg.rate_limit_window_seconds,
    )

    router = APIRouter(tags=["Render"])
    timers: list[RepeatingTimer] = []
    if start_janitor:
        timers.append(
            start_rate_limit_janitor(
                limiter,
                interval_seconds=cfg.rate_limit_cleanup_interval_seconds,
                grace_seconds=cfg.rate_limit_cleanup_grace_seconds,
            )
        )

    @router.post("/manim/render", response_model=RenderResponse, responses=_ERROR_RESPONSES)
    async def render_animation(request: Request) -> RenderResponse:
        """Render animation source code to a video.

        Body: ``{"code": "...", "quality": "low" | "medium" | "high"}``.
        """
        payload = await _read_payload(request)
        code, quality = validate_render_request(payload)

        # No await between the check and the decision below.
        address = client_address(request)
        enforce_rate_limit(limiter, address)

        log.info(
            "Manim render request from %s (quality: %s)",
            address,
            quality,
            extra={"client_address": address, "quality": quality, "code_chars": len(code)},
        )

        try:
            result = await render_service.render_animation(code, quality=quality)
        except Exception as exc:
            raise translate_render_error(exc, log) from exc

        return RenderResponse(video_path=result.video_path, duration=result.duration)

    @router.get(
        "/manim/status",
        response_model=RenderStatusResponse,
        response_model_exclude_unset=True,
    )
    async def render_status() -> dict[str, Any]:
        try:
            availability = await render_service.check_availability()
            return {
                "available": availability.available,
                "version": availability.version,
                "enabled": bool(render_service.enabled),
            }
        except Exception as exc:
            log.error("Manim status check failed: %s", exc, extra={"error_type": type(exc).__name__})
            return {
                "available": False,
                "version": None,
                "enabled": False,
                "error": "Status check failed",
            }

    return RenderRouter(router=router, rate_limiter=limiter, timers=timers)
