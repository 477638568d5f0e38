"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any ``quiz_api`` import so the
settings object is built for the testing environment.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("RENDER_ENABLED", "true")

from typing import Callable, Iterator
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from quiz_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from quiz_api.adapters.render.base import AbstractRenderService, AvailabilityReport, RenderResult
from quiz_api.core.app_factory import create_app
from quiz_api.core.timers import release_timers


class FakeClock:
    """Controllable time source for the rate limiter."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def render_service() -> Mock:
    """Render service double returning a fixed video."""
    service = Mock(spec=AbstractRenderService)
    service.enabled = True
    service.render_animation = AsyncMock(
        return_value=RenderResult(video_path="/out/s.mp4", duration=3)
    )
    service.check_availability = AsyncMock(
        return_value=AvailabilityReport(available=True, version="0.18.0")
    )
    return service


@pytest.fixture
def rate_limiter(clock: FakeClock) -> InMemoryFixedWindowRateLimiter:
    return InMemoryFixedWindowRateLimiter(limit=2, window_seconds=60, clock=clock)


@pytest.fixture
def make_app(render_service: Mock, rate_limiter: InMemoryFixedWindowRateLimiter) -> Iterator[Callable[..., FastAPI]]:
    """Build apps with test doubles; every timer they start is released afterwards."""
    apps: list[FastAPI] = []

    def _make(**overrides) -> FastAPI:
        kwargs = {
            "render_service": render_service,
            "rate_limiter": rate_limiter,
            "configure_logs": False,
        }
        kwargs.update(overrides)
        app = create_app(**kwargs)
        apps.append(app)
        return app

    yield _make

    for app in apps:
        release_timers(app.state.timers)


@pytest.fixture
def client(make_app: Callable[..., FastAPI]) -> TestClient:
    """Test client whose requests come from 1.2.3.4."""
    return TestClient(make_app(), client=("1.2.3.4", 50000))
