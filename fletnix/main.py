"""Fletnix - self-hosted media library server."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_settings
from .db import init_db
from .errors import MediaError
from .logging_middleware import (
    AccessLoggingMiddleware,
    configure_access_logging,
    configure_logging,
)
from .models_media import ErrorResponse
from .rate_limit import limiter
from .routes.media import router as media_router

# OpenAPI tags for documentation organization
openapi_tags = [
    {"name": "Media", "description": "Browse the catalog and stream media files"},
    {"name": "Health", "description": "Service health"},
]

settings = get_settings()
configure_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the catalog database on application startup."""
    await init_db()
    yield


app = FastAPI(
    title="Fletnix",
    version="1.0.0",
    description="Self-hosted media library with range-aware file streaming",
    openapi_tags=openapi_tags,
    lifespan=lifespan,
)

# Add rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(MediaError)
async def media_error_handler(request: Request, exc: MediaError):
    """Render media errors as the JSON error envelope."""
    body = ErrorResponse(message=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
        headers=exc.headers,
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Render framework HTTP errors (unknown routes, 405s) as the JSON error envelope."""
    body = ErrorResponse(message=str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


@app.get("/api/health", tags=["Health"])
async def health():
    """Liveness probe."""
    return {"status": "success", "message": "ok"}


app.include_router(media_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type", "Range", "Authorization"],
    expose_headers=["Content-Range", "Content-Length", "Accept-Ranges"],
)

if settings.access_logging_enabled:
    configure_access_logging(
        destination=settings.ACCESS_LOG_DESTINATION.value,
        file_path=settings.ACCESS_LOG_FILE_PATH,
    )
    app.add_middleware(AccessLoggingMiddleware)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
