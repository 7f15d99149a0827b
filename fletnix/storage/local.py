"""Local filesystem media storage."""

import hashlib
import logging
import os
from pathlib import Path

from ..config import (
    MOVIES_DIR,
    SCANNABLE_VIDEO_EXTENSIONS,
    THUMBNAILS_DIR,
    TV_DIR,
    get_settings,
)
from ..errors import MediaFileNotFoundError, PathTraversalError

logger = logging.getLogger("fletnix.storage")


def resolve_path(media_root: str | Path, relative_path: str) -> Path:
    """
    Resolve a caller-supplied path against a media root.

    The joined path is canonicalized (``..`` segments and symlinks), so a
    symlink inside the root that points elsewhere is rejected as well.

    Args:
        media_root: Base directory no access may escape
        relative_path: Path relative to the root, as supplied by the caller

    Returns:
        Absolute path of an existing regular file inside the root

    Raises:
        PathTraversalError: the canonical path lies outside the root
        MediaFileNotFoundError: the path does not exist, is not a regular file,
            or cannot be resolved (e.g. contains a NUL byte)
    """
    root = Path(media_root).resolve()
    try:
        candidate = (root / relative_path.lstrip("/")).resolve()
    except ValueError:
        # Embedded NUL bytes cannot name a file on any supported platform
        logger.info("Rejected unresolvable path %r", relative_path)
        raise MediaFileNotFoundError(path=relative_path) from None

    if not candidate.is_relative_to(root):
        logger.warning("Blocked path traversal: %r resolved to %s", relative_path, candidate)
        raise PathTraversalError(attempted_path=relative_path)

    if not candidate.is_file():
        logger.info("File not found: %s (resolved to %s)", os.path.join(root, relative_path), candidate)
        raise MediaFileNotFoundError(path=relative_path)

    return candidate


def format_title(name: str) -> str:
    """Turn a file or folder name into a display title."""
    title = name.replace("_", " ").replace(".", " ")
    return " ".join(word[:1].upper() + word[1:] for word in title.split(" "))


def _name_hash(name: str) -> str:
    return hashlib.md5(name.encode("utf-8")).hexdigest()


class LocalMediaStorage:
    """Media files stored under a local directory."""

    def __init__(self, media_dir: str | None = None):
        """
        Initialize local storage.

        Args:
            media_dir: Media root directory, defaults to the MEDIA_DIR setting
        """
        settings = get_settings()
        self.media_dir = Path(media_dir or settings.MEDIA_DIR)

    def resolve(self, relative_path: str) -> Path:
        """Resolve a path relative to the media root."""
        return resolve_path(self.media_dir, relative_path)

    def resolve_library_file(self, media_type: str, file_path: str) -> Path:
        """Resolve ``{media_type}/{file_path}``; containment is checked against the root."""
        return resolve_path(self.media_dir, f"{media_type}/{file_path}")

    def resolve_thumbnail(self, media_type: str, file_path: str) -> Path:
        """Resolve a thumbnail; containment is checked against the thumbnails directory."""
        return resolve_path(self.media_dir / THUMBNAILS_DIR, f"{media_type}/{file_path}")

    def thumbnail_url(self, media_type: str, name: str) -> str:
        """API URL of the thumbnail for a library entry, or a frontend placeholder."""
        thumbnail_name = f"{_name_hash(name)}.jpg"
        if (self.media_dir / THUMBNAILS_DIR / media_type / thumbnail_name).is_file():
            return f"/api/media/thumbnail/{media_type}/{thumbnail_name}"
        return "/placeholder.jpg" if media_type == MOVIES_DIR else "/placeholder-wide.jpg"

    def scan_library(self) -> dict[str, list[dict]]:
        """
        Scan the movies and tv folders of the media root.

        Movies are video files directly under ``movies/``; series are folders
        directly under ``tv/``. Missing or unreadable folders yield empty lists.
        """
        movies = []
        series = []

        movies_dir = self.media_dir / MOVIES_DIR
        if movies_dir.is_dir() and os.access(movies_dir, os.R_OK):
            for entry in sorted(movies_dir.iterdir(), key=lambda p: p.name):
                if not entry.is_file() or entry.suffix.lower() not in SCANNABLE_VIDEO_EXTENSIONS:
                    continue
                movies.append(
                    {
                        "id": f"movie_{_name_hash(entry.name)}",
                        "title": format_title(entry.stem),
                        "type": "movie",
                        "filename": entry.name,
                        "filepath": f"/api/media/file/{MOVIES_DIR}/{entry.name}",
                        "filesize": entry.stat().st_size,
                        "thumbnail_path": self.thumbnail_url(MOVIES_DIR, entry.name),
                    }
                )

        tv_dir = self.media_dir / TV_DIR
        if tv_dir.is_dir() and os.access(tv_dir, os.R_OK):
            for entry in sorted(tv_dir.iterdir(), key=lambda p: p.name):
                if not entry.is_dir():
                    continue
                series.append(
                    {
                        "id": f"series_{_name_hash(entry.name)}",
                        "title": format_title(entry.name),
                        "type": "series",
                        "foldername": entry.name,
                        "folderpath": f"/api/media/file/{TV_DIR}/{entry.name}",
                        "thumbnail_path": self.thumbnail_url(TV_DIR, entry.name),
                    }
                )

        logger.debug("Scanned %d movies and %d series in %s", len(movies), len(series), self.media_dir)
        return {"movies": movies, "series": series}
