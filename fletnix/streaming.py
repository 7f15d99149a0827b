"""Range-aware file streaming for video and image files.

Only the single-range form ``bytes=<start>-[<end>]`` is understood. A missing
or malformed ``Range`` header is served as full content. An unsatisfiable range
raises ``RangeNotSatisfiableError`` in strict mode and falls back to full
content otherwise.
"""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Literal

import aiofiles
from starlette.responses import StreamingResponse

from .errors import RangeNotSatisfiableError

logger = logging.getLogger("fletnix.media")

ContentKind = Literal["video", "image"]

RANGE_PATTERN = re.compile(r"bytes=(\d+)-(\d+)?")

DEFAULT_CHUNK_SIZE = 8 * 1024

VIDEO_TYPES = {
    "mp4": "video/mp4",
    "webm": "video/webm",
    "ogg": "video/ogg",
    "ogv": "video/ogg",
    "mkv": "video/x-matroska",
    "mov": "video/quicktime",
    "avi": "video/x-msvideo",
    "wmv": "video/x-ms-wmv",
    "flv": "video/x-flv",
    "m4v": "video/x-m4v",
    "3gp": "video/3gpp",
}

IMAGE_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}

# Unknown extensions fall back to the most common type of each kind
DEFAULT_VIDEO_TYPE = "video/mp4"
DEFAULT_IMAGE_TYPE = "image/jpeg"


@dataclass(frozen=True)
class ByteRange:
    """Inclusive byte window ``[start, end]`` of a file of ``total`` bytes."""

    start: int
    end: int
    total: int

    def __post_init__(self):
        if not 0 <= self.start <= self.end <= self.total - 1:
            raise ValueError(f"Invalid byte range {self.start}-{self.end}/{self.total}")

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def content_range(self) -> str:
        return f"bytes {self.start}-{self.end}/{self.total}"


@dataclass(frozen=True)
class ContentDescriptor:
    """MIME type and size of a file about to be served."""

    mime_type: str
    size: int


def classify_content_type(path: str | Path, kind: ContentKind = "video") -> str:
    """Map a file extension (case-insensitive) to a MIME type."""
    extension = Path(path).suffix.lower().lstrip(".")
    if extension in VIDEO_TYPES:
        return VIDEO_TYPES[extension]
    if extension in IMAGE_TYPES:
        return IMAGE_TYPES[extension]
    return DEFAULT_IMAGE_TYPE if kind == "image" else DEFAULT_VIDEO_TYPE


def describe_file(path: Path, kind: ContentKind = "video") -> ContentDescriptor:
    """Build the content descriptor for a resolved file."""
    return ContentDescriptor(mime_type=classify_content_type(path, kind), size=path.stat().st_size)


def parse_range_header(
    header_value: str | None, file_size: int, strict: bool = True
) -> ByteRange | None:
    """
    Parse a ``Range`` header against a file size.

    Args:
        header_value: Raw header value, or None when the header is absent
        file_size: Size of the file in bytes
        strict: Raise on unsatisfiable ranges instead of serving full content

    Returns:
        The requested ByteRange, or None for a full-content response

    Raises:
        RangeNotSatisfiableError: strict mode and the range lies outside the file
    """
    if not header_value:
        return None

    match = RANGE_PATTERN.search(header_value)
    if not match:
        logger.debug("Ignoring malformed Range header %r", header_value)
        return None

    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) is not None else file_size - 1
    # A last-byte position past the end means "to the end of the file"
    end = min(end, file_size - 1)

    if start > end or start >= file_size:
        if strict:
            raise RangeNotSatisfiableError(total=file_size)
        logger.debug(
            "Unsatisfiable Range %r for %d bytes, serving full content", header_value, file_size
        )
        return None

    return ByteRange(start=start, end=end, total=file_size)


async def iter_file(
    path: Path, start: int, length: int, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> AsyncIterator[bytes]:
    """Yield ``length`` bytes of ``path`` from offset ``start`` in bounded chunks."""
    remaining = length
    try:
        async with aiofiles.open(path, "rb") as f:
            if start:
                await f.seek(start)
            while remaining > 0:
                chunk = await f.read(min(chunk_size, remaining))
                if not chunk:
                    break
                remaining -= len(chunk)
                yield chunk
    except OSError:
        logger.exception("I/O error while streaming %s", path)
        raise

    if remaining > 0:
        logger.warning("File %s ended %d bytes short of the announced length", path, remaining)


def stream_file(
    path: Path,
    descriptor: ContentDescriptor,
    byte_range: ByteRange | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    headers: dict[str, str] | None = None,
    accept_ranges: bool = True,
) -> StreamingResponse:
    """Build a 200 or 206 streaming response for a resolved file."""
    response_headers = {"Accept-Ranges": "bytes"} if accept_ranges else {}
    if headers:
        response_headers.update(headers)

    if byte_range is not None:
        response_headers["Content-Range"] = byte_range.content_range
        response_headers["Content-Length"] = str(byte_range.length)
        body = iter_file(path, byte_range.start, byte_range.length, chunk_size)
        status_code = 206
    else:
        response_headers["Content-Length"] = str(descriptor.size)
        body = iter_file(path, 0, descriptor.size, chunk_size)
        status_code = 200

    return StreamingResponse(
        body,
        status_code=status_code,
        headers=response_headers,
        media_type=descriptor.mime_type,
    )


def serve_range(
    path: Path,
    range_header: str | None,
    strict: bool = True,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> StreamingResponse:
    """Serve a video file, honouring an optional ``Range`` header."""
    descriptor = describe_file(path, "video")
    byte_range = parse_range_header(range_header, descriptor.size, strict=strict)
    if byte_range is not None:
        logger.debug("Serving %s for %s", byte_range.content_range, os.fspath(path))
    return stream_file(path, descriptor, byte_range, chunk_size)


def serve_image(
    path: Path, cache_max_age: int = 86400, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> StreamingResponse:
    """Serve an image file in full with cache headers."""
    descriptor = describe_file(path, "image")
    return stream_file(
        path,
        descriptor,
        chunk_size=chunk_size,
        headers={"Cache-Control": f"max-age={cache_max_age}"},
        accept_ranges=False,
    )
