from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal

Quality = Literal["low", "medium", "high"]

VALID_QUALITIES: tuple[str, ...] = ("low", "medium", "high")
DEFAULT_QUALITY: Quality = "low"


@dataclass(frozen=True)
class RenderResult:
	"""Reference to a rendered video.

	Attributes:
		video_path: Public path of the produced video (e.g. ``/uploads/x.mp4``).
		duration: Length of the video in seconds, when the renderer knows it.
	"""

	video_path: str
	duration: float | None = None


@dataclass(frozen=True)
class AvailabilityReport:
	available: bool
	version: str | None = None


class AbstractRenderService(ABC):
	"""Interface for services that turn animation source code into a video."""

	enabled: bool = True

	@abstractmethod
	async def render_animation(self, code: str, *, quality: Quality = DEFAULT_QUALITY) -> RenderResult:
		"""Render ``code`` and return a reference to the produced video.

		Args:
			code: Animation source code containing a Scene subclass.
			quality: Render quality preset.

		Returns:
			RenderResult: Where the video was written and its duration.

		Raises:
			RenderValidationError: If the renderer rejected the code.
			RenderTimeoutError: If rendering took too long.
			RenderServiceError: For any other renderer failure.
		"""
		...

	@abstractmethod
	async def check_availability(self) -> AvailabilityReport:
		"""Probe whether the renderer can currently accept work."""
		...
