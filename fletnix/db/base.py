"""Abstract media catalog interface.

All database backends must implement this interface.
"""

from abc import ABC, abstractmethod

MEDIA_TYPES = ("movie", "tvshow", "episode")


class DatabaseBackend(ABC):
    """Abstract base class for database backends."""

    @abstractmethod
    async def init(self) -> None:
        """Initialize the database (create tables, etc.)."""
        pass

    @abstractmethod
    async def create_media(
        self,
        title: str,
        media_type: str,
        file_path: str,
        description: str | None = None,
        release_year: int | None = None,
        duration: int | None = None,
        poster_path: str | None = None,
        backdrop_path: str | None = None,
    ) -> dict:
        """Create a media record. Returns the stored record."""
        pass

    @abstractmethod
    async def get_media_by_id(self, media_id: int) -> dict | None:
        """Get a media record by its ID."""
        pass

    @abstractmethod
    async def get_all_media(
        self,
        limit: int | None = None,
        offset: int = 0,
        media_type: str | None = None,
    ) -> list[dict]:
        """Get media records, newest first, with optional pagination and type filter."""
        pass

    @abstractmethod
    async def get_media_count(self, media_type: str | None = None) -> int:
        """Get total count of media records."""
        pass
