"""Pydantic models for media operations."""

from typing import Literal

from pydantic import BaseModel, Field


class MediaItem(BaseModel):
    """Representation of a catalog media item."""

    id: int
    title: str
    description: str | None = None
    type: Literal["movie", "tvshow", "episode"]
    release_year: int | None = None
    duration: int | None = None
    file_path: str
    poster_path: str | None = None
    backdrop_path: str | None = None
    stream_url: str
    created_at: str
    updated_at: str


class MediaDetailResponse(BaseModel):
    """Response for getting a single media item."""

    status: Literal["success"] = "success"
    message: str = "Success"
    data: MediaItem


class MediaPage(BaseModel):
    """A page of catalog items."""

    items: list[MediaItem]
    total_count: int
    limit: int
    offset: int


class MediaListResponse(BaseModel):
    """Response for listing media."""

    status: Literal["success"] = "success"
    message: str = "Success"
    data: MediaPage


class MovieEntry(BaseModel):
    """A movie file found by the local library scan."""

    id: str
    title: str
    type: Literal["movie"] = "movie"
    filename: str
    filepath: str = Field(description="API path that streams the file")
    filesize: int
    thumbnail_path: str


class SeriesEntry(BaseModel):
    """A series folder found by the local library scan."""

    id: str
    title: str
    type: Literal["series"] = "series"
    foldername: str
    folderpath: str
    thumbnail_path: str


class LibraryScan(BaseModel):
    """Movies and series found under the media root."""

    movies: list[MovieEntry]
    series: list[SeriesEntry]


class LibraryScanResponse(BaseModel):
    """Response for scanning the local library."""

    status: Literal["success"] = "success"
    message: str = "Success"
    data: LibraryScan


class ErrorResponse(BaseModel):
    """Error envelope shared by all endpoints."""

    status: Literal["error"] = "error"
    message: str
