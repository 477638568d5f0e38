"""Scrub server-side details from error messages shown to clients."""

from __future__ import annotations

import re
from typing import Any

FALLBACK_MESSAGE = "An unexpected error occurred"

# Absolute path ending in a file extension, e.g. /app/src/runner.js or C:\srv\x.py
_FILE_PATH_RE = re.compile(r"([A-Za-z]:)?[\\/][\w\s.\-/\\]+\.\w+")

# Absolute path of two or more segments without an extension, e.g. /usr/local/bin/manim.
# The lookbehind skips words joined by slashes, such as low/medium/high.
_BARE_PATH_RE = re.compile(r"(?<![\w.:/\\])([A-Za-z]:)?[\\/](?:[\w.\-]+[\\/])+[\w.\-]+")

# "  at Runner.exec (/app/src/runner.js:17:9)"
_STACK_FRAME_RE = re.compile(r"\s+at\s+(?:(?:async|new)\s+)?[A-Za-z_$][\w$.<>]*\s+\([^)]+\)")


def _scrub_once(text: str) -> str:
    text = _FILE_PATH_RE.sub("[file]", text)
    text = _BARE_PATH_RE.sub("[file]", text)
    text = _STACK_FRAME_RE.sub("", text)
    return text.strip()


def sanitize_error_message(message: Any) -> str:
    """Strip filesystem paths and stack frames from an error message.

    Removing a stack frame can bring two fragments of a path together, so
    scrubbing repeats until the text stops changing. That makes the function
    idempotent.

    Args:
        message: Error message; anything that is not a ``str`` yields the
            fallback message.

    Returns:
        str: Scrubbed message, never empty.

    Examples:
        >>> sanitize_error_message("bad input in /srv/app/scene.py")
        'bad input in [file]'
        >>> sanitize_error_message(None)
        'An unexpected error occurred'
    """
    if not isinstance(message, str):
        return FALLBACK_MESSAGE

    text = message
    while True:
        scrubbed = _scrub_once(text)
        if scrubbed == text:
            break
        text = scrubbed

    return text or FALLBACK_MESSAGE
