"""Media Library API endpoints."""

from pathlib import Path
from typing import Literal

from fastapi import APIRouter, Query, Request

from ..config import get_settings
from ..db import get_database
from ..errors import InvalidMediaPathError, MediaFileNotFoundError
from ..models_media import (
    ErrorResponse,
    LibraryScanResponse,
    MediaDetailResponse,
    MediaItem,
    MediaListResponse,
    MediaPage,
)
from ..rate_limit import RATE_LIMIT_READ, RATE_LIMIT_SCAN, limiter
from ..storage import get_storage
from ..streaming import serve_image, serve_range

router = APIRouter(prefix="/api/media", tags=["Media"])

# SQLite INTEGER PRIMARY KEY is a signed 64-bit value
MAX_MEDIA_ID = 2**63 - 1

FILE_RESPONSES = {
    200: {"description": "Full file content"},
    206: {"description": "Partial content for a Range request"},
    400: {"model": ErrorResponse, "description": "Invalid media path"},
    403: {"model": ErrorResponse, "description": "Path escapes the media root"},
    404: {"model": ErrorResponse, "description": "File not found"},
    416: {"model": ErrorResponse, "description": "Range not satisfiable"},
}


def _to_media_item(media: dict) -> MediaItem:
    return MediaItem(**media, stream_url=f"/api/media/{media['id']}/stream")


async def _get_media_or_404(media_id: int) -> dict:
    if not 1 <= media_id <= MAX_MEDIA_ID:
        raise MediaFileNotFoundError("Media not found")

    db = get_database()
    media = await db.get_media_by_id(media_id)
    if not media:
        raise MediaFileNotFoundError("Media not found")
    return media


def _serve_catalog_image(media: dict, field: str, label: str):
    if not media.get(field):
        raise MediaFileNotFoundError(f"{label} not found")

    settings = get_settings()
    path = get_storage().resolve(media[field])
    return serve_image(
        path,
        cache_max_age=settings.IMAGE_CACHE_MAX_AGE,
        chunk_size=settings.STREAM_CHUNK_SIZE,
    )


@router.get("", response_model=MediaListResponse)
@limiter.limit(RATE_LIMIT_READ)
async def list_media(
    request: Request,
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    offset: int = Query(0, ge=0, description="Items to skip"),
    media_type: Literal["movie", "tvshow", "episode"] | None = Query(
        None, alias="type", description="Filter by media type"
    ),
):
    """List catalog media, newest first."""
    db = get_database()
    items = await db.get_all_media(limit=limit, offset=offset, media_type=media_type)
    total_count = await db.get_media_count(media_type=media_type)

    return MediaListResponse(
        data=MediaPage(
            items=[_to_media_item(item) for item in items],
            total_count=total_count,
            limit=limit,
            offset=offset,
        )
    )


@router.get("/scan", response_model=LibraryScanResponse)
@limiter.limit(RATE_LIMIT_SCAN)
def scan_local_media(request: Request):
    """Scan the media root for movie files and series folders.

    Declared sync so FastAPI runs the blocking directory walk in its threadpool.
    """
    storage = get_storage()
    return LibraryScanResponse(data=storage.scan_library())


@router.get("/file/{media_type}/{file_path:path}", responses=FILE_RESPONSES)
async def serve_media_file(media_type: str, file_path: str, request: Request):
    """Stream a file from the media root, honouring Range requests.

    The file is looked up under ``{MEDIA_DIR}/{media_type}/{file_path}``.
    """
    if not file_path:
        raise InvalidMediaPathError("Invalid media path")

    settings = get_settings()
    path = get_storage().resolve_library_file(media_type, file_path)
    return serve_range(
        path,
        request.headers.get("range"),
        strict=settings.STRICT_RANGE_REQUESTS,
        chunk_size=settings.STREAM_CHUNK_SIZE,
    )


@router.get(
    "/thumbnail/{media_type}/{file_path:path}",
    responses={
        403: {"model": ErrorResponse, "description": "Path escapes the thumbnails folder"},
        404: {"model": ErrorResponse, "description": "No thumbnail and no placeholder"},
    },
)
async def serve_thumbnail(media_type: str, file_path: str):
    """Serve a library thumbnail, or the placeholder image when it is missing."""
    settings = get_settings()
    storage = get_storage()

    try:
        path = storage.resolve_thumbnail(media_type, file_path)
    except MediaFileNotFoundError:
        placeholder = Path(settings.PLACEHOLDER_IMAGE_PATH or "")
        if not settings.PLACEHOLDER_IMAGE_PATH or not placeholder.is_file():
            raise
        path = placeholder

    return serve_image(
        path,
        cache_max_age=settings.IMAGE_CACHE_MAX_AGE,
        chunk_size=settings.STREAM_CHUNK_SIZE,
    )


@router.get(
    "/{media_id}",
    response_model=MediaDetailResponse,
    responses={404: {"model": ErrorResponse, "description": "Media not found"}},
)
@limiter.limit(RATE_LIMIT_READ)
async def get_media(request: Request, media_id: int):
    """Get details of a catalog media item."""
    media = await _get_media_or_404(media_id)
    return MediaDetailResponse(data=_to_media_item(media))


@router.get("/{media_id}/stream", responses=FILE_RESPONSES)
async def stream_media(media_id: int, request: Request):
    """Stream the video file of a catalog media item, honouring Range requests."""
    media = await _get_media_or_404(media_id)

    settings = get_settings()
    path = get_storage().resolve(media["file_path"])
    return serve_range(
        path,
        request.headers.get("range"),
        strict=settings.STRICT_RANGE_REQUESTS,
        chunk_size=settings.STREAM_CHUNK_SIZE,
    )


@router.get("/{media_id}/poster", responses=FILE_RESPONSES)
async def get_poster(media_id: int):
    """Serve the poster image of a catalog media item."""
    media = await _get_media_or_404(media_id)
    return _serve_catalog_image(media, "poster_path", "Poster")


@router.get("/{media_id}/backdrop", responses=FILE_RESPONSES)
async def get_backdrop(media_id: int):
    """Serve the backdrop image of a catalog media item."""
    media = await _get_media_or_404(media_id)
    return _serve_catalog_image(media, "backdrop_path", "Backdrop")
