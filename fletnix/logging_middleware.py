"""Structured access logging middleware for API calls.

Logs API calls in Elasticsearch-compatible JSON format (ECS - Elastic Common Schema).
Designed to be non-blocking using async fire-and-forget pattern.
"""

import asyncio
import contextlib
import json
import logging
import re
from datetime import UTC, datetime
from pathlib import Path

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

access_logger = logging.getLogger("fletnix.access")

# Strong references to pending log tasks so they are not garbage collected
_pending_writes: set[asyncio.Task] = set()


class AccessLoggingMiddleware(BaseHTTPMiddleware):
    """Logs API calls in Elasticsearch-compatible JSON format without blocking requests."""

    # Extracts the catalog id from paths like /api/media/{media_id}/...
    MEDIA_ID_PATTERN = re.compile(r"^/api/media/(\d+)(?:/|$)")

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process request and log access data."""
        # Only log API endpoints
        if not request.url.path.startswith("/api/"):
            return await call_next(request)

        # Skip health checks
        if request.url.path == "/api/health":
            return await call_next(request)

        start_time = datetime.now(UTC)

        response = await call_next(request)

        # For streamed bodies this is the time to the response headers
        end_time = datetime.now(UTC)
        duration_ms = (end_time - start_time).total_seconds() * 1000

        log_entry = {
            "@timestamp": start_time.isoformat(),
            "event": {
                "category": "api",
                "action": request.method.lower(),
                "duration": int(duration_ms * 1_000_000),  # nanoseconds for ECS
                "outcome": "success" if response.status_code < 400 else "failure",
            },
            "http": {
                "request": {
                    "method": request.method,
                    "range": request.headers.get("range"),
                },
                "response": {
                    "status_code": response.status_code,
                    "content_range": response.headers.get("content-range"),
                    "body": {"bytes": _content_length(response)},
                },
            },
            "url": {
                "path": request.url.path,
                "query": str(request.url.query) if request.url.query else None,
            },
            "client": {
                "ip": request.client.host if request.client else None,
            },
            "user_agent": {
                "original": request.headers.get("user-agent"),
            },
        }

        match = self.MEDIA_ID_PATTERN.match(request.url.path)
        if match:
            log_entry["media"] = {"id": int(match.group(1))}

        task = asyncio.create_task(self._write_log(log_entry))
        _pending_writes.add(task)
        task.add_done_callback(_pending_writes.discard)

        return response

    async def _write_log(self, entry: dict) -> None:
        """Write log entry asynchronously (non-blocking)."""
        with contextlib.suppress(Exception):
            access_logger.info(json.dumps(entry, default=str))


def _content_length(response: Response) -> int | None:
    value = response.headers.get("content-length")
    return int(value) if value and value.isdigit() else None


def configure_access_logging(destination: str = "stdout", file_path: str | None = None) -> None:
    """Configure the access logger based on settings.

    Args:
        destination: Where to log - "stdout", "file", "external" or "none"
        file_path: Path to log file (required if destination is "file")
    """
    logger = logging.getLogger("fletnix.access")
    logger.setLevel(logging.INFO)

    # Remove existing handlers
    logger.handlers.clear()

    # Access lines are JSON; keep them out of the application log
    logger.propagate = False

    if destination == "stdout":
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    elif destination == "file" and file_path:
        log_path = Path(file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        handler = logging.FileHandler(file_path)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    # "external" means no local handler - logs go to external service via separate config

    logger.disabled = destination == "none"


def configure_logging(level: str = "INFO") -> None:
    """Configure the application loggers (``fletnix.*`` except access)."""
    logger = logging.getLogger("fletnix")
    logger.setLevel(level.upper())

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )
        logger.addHandler(handler)
