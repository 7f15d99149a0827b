"""Tests for the access logging middleware."""

import json
import logging

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from fletnix.logging_middleware import AccessLoggingMiddleware, configure_access_logging
from fletnix.streaming import serve_range


@pytest.fixture
def log_file(tmp_path):
    path = tmp_path / "logs" / "access.log"
    configure_access_logging(destination="file", file_path=str(path))
    yield path
    logger = logging.getLogger("fletnix.access")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


@pytest.fixture
def app(tmp_path):
    video = tmp_path / "clip.mp4"
    video.write_bytes(b"0123456789" * 10)

    app = FastAPI()
    app.add_middleware(AccessLoggingMiddleware)

    @app.get("/api/media/{media_id}/stream")
    async def stream(media_id: int, request: Request):
        return serve_range(video, request.headers.get("range"))

    @app.get("/static/page")
    async def page():
        return {"ok": True}

    return app


def _entries(path):
    return [json.loads(line) for line in path.read_text().splitlines() if line]


class TestAccessLogging:
    """Tests for AccessLoggingMiddleware."""

    def test_logs_range_request(self, app, log_file):
        with TestClient(app) as client:
            response = client.get("/api/media/7/stream", headers={"Range": "bytes=10-19"})
        assert response.status_code == 206

        entries = _entries(log_file)
        assert len(entries) == 1
        entry = entries[0]
        assert entry["http"]["response"]["status_code"] == 206
        assert entry["http"]["response"]["content_range"] == "bytes 10-19/100"
        assert entry["http"]["response"]["body"]["bytes"] == 10
        assert entry["media"] == {"id": 7}
        assert entry["event"]["outcome"] == "success"
        assert entry["url"]["path"] == "/api/media/7/stream"

    def test_skips_non_api_paths(self, app, log_file):
        with TestClient(app) as client:
            client.get("/static/page")

        assert not log_file.exists() or _entries(log_file) == []

    def test_none_destination_disables_logger(self):
        configure_access_logging(destination="none")
        assert logging.getLogger("fletnix.access").disabled is True

        configure_access_logging(destination="external")
        logger = logging.getLogger("fletnix.access")
        assert logger.disabled is False
        assert logger.handlers == []
