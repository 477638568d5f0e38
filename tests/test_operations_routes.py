"""Tests for the operational routes: probes, metrics and diagnostics."""

from __future__ import annotations

import os
import re
import threading
import time
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from quiz_api.adapters.collaborators import (
    EmptyMetricsRegistry,
    InMemorySessionRegistry,
    NullBatchService,
)
from quiz_api.api.routes.operations import create_operations_router, describe_base_path

ISO_MS = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")
MB = 1024 * 1024


def _client(**overrides) -> TestClient:
    kwargs = {
        "metrics_registry": EmptyMetricsRegistry(),
        "session_registry": InMemorySessionRegistry(),
        "batch_service": NullBatchService(),
    }
    kwargs.update(overrides)
    app = FastAPI()
    app.include_router(create_operations_router(**kwargs))
    return TestClient(app)


def _make_dirs(root: Path, *names: str) -> None:
    for name in names:
        (root / name).mkdir(parents=True)


# ======================== Health ========================


def test_health_is_always_ok(client: TestClient):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert ISO_MS.match(body["timestamp"])


# ======================== Readiness ========================


class TestReadiness:
    def test_ready_when_all_directories_exist(self, tmp_path: Path):
        _make_dirs(tmp_path, "quizzes", "results", "public/uploads")

        response = _client(readiness_root=tmp_path).get("/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert body["checks"] == {"quizzes": True, "results": True, "uploads": True}
        assert ISO_MS.match(body["timestamp"])

    def test_not_ready_when_uploads_missing(self, tmp_path: Path):
        _make_dirs(tmp_path, "quizzes", "results")

        response = _client(readiness_root=tmp_path).get("/ready")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "not ready"
        assert body["checks"] == {"quizzes": True, "results": True, "uploads": False}
        assert ISO_MS.match(body["timestamp"])

    def test_regular_file_is_not_a_directory(self, tmp_path: Path):
        _make_dirs(tmp_path, "quizzes", "public/uploads")
        (tmp_path / "results").write_text("not a dir")

        response = _client(readiness_root=tmp_path).get("/ready")

        assert response.status_code == 503
        assert response.json()["checks"]["results"] is False

    def test_probes_run_concurrently(self, tmp_path: Path):
        _make_dirs(tmp_path, "quizzes", "results", "public/uploads")
        # Each probe blocks until all three are in flight
        barrier = threading.Barrier(3, timeout=5)

        def stat_fn(path: Path):
            barrier.wait()
            return os.stat(path)

        response = _client(readiness_root=tmp_path, stat_fn=stat_fn).get("/ready")

        assert response.status_code == 200
        assert response.json()["checks"] == {"quizzes": True, "results": True, "uploads": True}

    def test_stat_failure_counts_as_missing(self, tmp_path: Path):
        def stat_fn(path: Path):
            raise PermissionError(str(path))

        response = _client(readiness_root=tmp_path, stat_fn=stat_fn).get("/ready")

        assert response.status_code == 503
        assert response.json()["checks"] == {"quizzes": False, "results": False, "uploads": False}

    def test_unexpected_error_returns_503(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(
            "quiz_api.api.routes.operations.check_directories",
            AsyncMock(side_effect=RuntimeError("event loop exploded")),
        )

        response = _client(readiness_root=tmp_path).get("/ready")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "error"
        assert body["error"] == "event loop exploded"
        assert ISO_MS.match(body["timestamp"])


# ======================== Metrics ========================


class TestMetrics:
    def test_exports_registry_with_content_type(self):
        registry = Mock(content_type="text/plain; version=0.0.4; charset=utf-8")
        registry.metrics.return_value = "quiz_active_games 3\n"

        response = _client(metrics_registry=registry).get("/metrics")

        assert response.status_code == 200
        assert response.text == "quiz_active_games 3\n"
        assert response.headers["content-type"] == "text/plain; version=0.0.4; charset=utf-8"

    def test_awaits_async_registry(self):
        registry = Mock(content_type="text/plain; version=0.0.4; charset=utf-8")
        registry.metrics = AsyncMock(return_value=b"quiz_requests_total 7\n")

        response = _client(metrics_registry=registry).get("/metrics")

        assert response.status_code == 200
        assert response.text == "quiz_requests_total 7\n"

    def test_registry_failure_returns_500_with_message(self):
        registry = Mock(content_type="text/plain; version=0.0.4; charset=utf-8")
        registry.metrics.side_effect = RuntimeError("registry collector failed")

        response = _client(metrics_registry=registry).get("/metrics")

        assert response.status_code == 500
        assert response.text == "registry collector failed"

    def test_empty_default_registry(self, client: TestClient):
        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.text == ""


# ======================== Debug config ========================


def test_debug_config_echoes_base_path():
    response = _client(base_path="/quiz/", app_env="staging", is_production=False).get("/debug/config")

    body = response.json()
    assert response.status_code == 200
    assert body["BASE_PATH"] == "/quiz/"
    assert body["BASE_PATH_raw"] == '"/quiz/"'
    assert body["BASE_PATH_length"] == 6
    assert body["BASE_PATH_type"] == "str"
    assert body["BASE_PATH_equals_slash"] is False
    assert body["BASE_PATH_not_equals_slash"] is True
    assert body["APP_ENV"] == "staging"
    assert body["isProduction"] is False
    assert body["staticMountedAt"] == "/quiz/"
    assert ISO_MS.match(body["timestamp"])


def test_root_base_path_is_described_as_root():
    described = describe_base_path("/", app_env="production", is_production=True)

    assert described["BASE_PATH_equals_slash"] is True
    assert described["staticMountedAt"] == "/ (root)"
    assert described["isProduction"] is True


# ======================== Memory stats ========================


def test_memory_stats_report():
    process = Mock()
    process.memory_info.return_value = Mock(rss=200 * MB, vms=500 * MB, shared=50 * MB)
    process.create_time.return_value = time.time() - 42

    sessions = InMemorySessionRegistry()
    sessions.games.update({"g1": object(), "g2": object()})
    batch = Mock()
    batch.get_stats.return_value = {"pendingBatches": 1, "totalEvents": 9}

    response = _client(session_registry=sessions, batch_service=batch, process=process).get(
        "/api/stats/memory"
    )

    assert response.status_code == 200
    body = response.json()
    assert body["heapUsed"] == "150MB"
    assert body["heapTotal"] == "500MB"
    assert body["rss"] == "200MB"
    assert body["external"] == "50MB"
    assert body["activeGames"] == 2
    assert body["batchStats"] == {"pendingBatches": 1, "totalEvents": 9}
    assert re.match(r"^\d+s$", body["uptime"])
    assert 41 <= int(body["uptime"][:-1]) <= 44
    assert ISO_MS.match(body["timestamp"])


def test_memory_stats_for_current_process(client: TestClient):
    body = client.get("/api/stats/memory").json()

    for key in ("heapUsed", "heapTotal", "rss", "external"):
        assert re.match(r"^\d+MB$", body[key])
    assert body["activeGames"] == 0
    assert body["batchStats"] == {"pendingBatches": 0, "totalEvents": 0}
