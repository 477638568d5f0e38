"""Render service errors and their classification.

Renderers report failures in loosely typed ways: an exception class name,
a ``code`` attribute, or just a message mentioning a timeout. This module
turns any of them into one of three kinds the HTTP layer understands.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from enum import Enum


class RenderErrorKind(str, Enum):
    VALIDATION = "validation"
    TIMEOUT = "timeout"
    INTERNAL = "internal"


class RenderServiceError(Exception):
    """Base error raised by render service adapters.

    Attributes:
        message: Human-readable message (may contain server details).
        code: Optional machine-readable code, e.g. ``VALIDATION_ERROR``.
        message_key: Optional localization key to pass through to clients.
    """

    default_code: str | None = None

    def __init__(self, message: str, *, code: str | None = None, message_key: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.message_key = message_key


class RenderValidationError(RenderServiceError):
    """The renderer rejected the submitted code."""

    default_code = "VALIDATION_ERROR"


class RenderTimeoutError(RenderServiceError):
    """The renderer did not finish in time."""

    default_code = "TIMEOUT"


@dataclass(frozen=True)
class ClassifiedRenderError:
    kind: RenderErrorKind
    message: str
    message_key: str | None


_TIMEOUT_RE = re.compile(r"timeout", re.IGNORECASE)


def _error_message(exc: BaseException) -> str:
    message = getattr(exc, "message", None)
    if isinstance(message, str):
        return message
    return str(exc)


def _error_name(exc: BaseException) -> str:
    name = getattr(exc, "name", None)
    if isinstance(name, str):
        return name
    return type(exc).__name__


def _message_key(exc: BaseException) -> str | None:
    key = getattr(exc, "message_key", None) or getattr(exc, "messageKey", None)
    return key if isinstance(key, str) and key else None


def classify_render_error(exc: BaseException) -> ClassifiedRenderError:
    """Classify a render failure.

    Precedence: validation, then timeout, then everything else.

    Args:
        exc: Exception raised by the render service.

    Returns:
        ClassifiedRenderError: Kind plus the message and optional key.
    """
    message = _error_message(exc)
    name = _error_name(exc)
    code = getattr(exc, "code", None)
    key = _message_key(exc)

    if isinstance(exc, RenderValidationError) or name == "ValidationError" or code == "VALIDATION_ERROR":
        kind = RenderErrorKind.VALIDATION
    elif (
        isinstance(exc, (RenderTimeoutError, TimeoutError, asyncio.TimeoutError))
        or name == "TimeoutError"
        or code == "TIMEOUT"
        or _TIMEOUT_RE.search(message)
    ):
        kind = RenderErrorKind.TIMEOUT
    else:
        kind = RenderErrorKind.INTERNAL

    return ClassifiedRenderError(kind=kind, message=message, message_key=key)
