from quiz_api.adapters.render.base import (
    DEFAULT_QUALITY,
    VALID_QUALITIES,
    AbstractRenderService,
    AvailabilityReport,
    RenderResult,
)
from quiz_api.adapters.render.errors import (
    RenderErrorKind,
    RenderServiceError,
    RenderTimeoutError,
    RenderValidationError,
    classify_render_error,
)

__all__ = [
    "DEFAULT_QUALITY",
    "VALID_QUALITIES",
    "AbstractRenderService",
    "AvailabilityReport",
    "RenderResult",
    "RenderErrorKind",
    "RenderServiceError",
    "RenderTimeoutError",
    "RenderValidationError",
    "classify_render_error",
]
