"""Pydantic schemas for the animation render endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RenderResponse(BaseModel):
    """Reference to the video produced for a render request."""

    model_config = ConfigDict(populate_by_name=True)

    video_path: str = Field(
        ...,
        alias="videoPath",
        description="Public path of the rendered MP4 (e.g. /uploads/manim-ab12.mp4).",
    )
    duration: int | float | None = Field(
        default=None,
        description="Video length in seconds, when the renderer reports it.",
    )


class RenderErrorResponse(BaseModel):
    """Error body shared by every render failure."""

    error: str = Field(..., description="Human-readable, sanitized message.")
    message_key: str = Field(
        ..., alias="messageKey", description="Stable key for client-side localization."
    )
    retry_after: int | None = Field(
        default=None,
        alias="retryAfter",
        description="Seconds until the rate limit window resets (429 only).",
    )
    details: str | None = Field(
        default=None,
        description="Sanitized renderer error (500 only).",
    )


class RenderStatusResponse(BaseModel):
    available: bool
    version: str | None = None
    enabled: bool
    error: str | None = None
