"""SQLite media catalog backend."""

from datetime import UTC, datetime
from pathlib import Path

import aiosqlite

from ..config import get_settings
from .base import MEDIA_TYPES, DatabaseBackend


class SQLiteBackend(DatabaseBackend):
    """SQLite implementation of the database backend."""

    def __init__(self, db_path: str | None = None):
        self._db_path: Path | None = Path(db_path) if db_path else None

    @property
    def db_path(self) -> Path:
        """Get the database path from config."""
        if self._db_path is None:
            settings = get_settings()
            path = Path(settings.SQLITE_PATH)
            if not path.is_absolute():
                path = Path(__file__).parent.parent.parent / path
            self._db_path = path
        return self._db_path

    async def init(self) -> None:
        """Initialize the database and create tables."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS media (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    description TEXT,
                    type TEXT NOT NULL,
                    release_year INTEGER,
                    duration INTEGER,
                    file_path TEXT NOT NULL,
                    poster_path TEXT,
                    backdrop_path TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            await db.execute("""
                CREATE INDEX IF NOT EXISTS idx_media_type ON media(type)
            """)
            await db.commit()

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
        """Create a media record."""
        if media_type not in MEDIA_TYPES:
            raise ValueError(f"Type must be one of {', '.join(MEDIA_TYPES)}")

        now = datetime.now(UTC).isoformat()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO media (
                    title, description, type, release_year, duration,
                    file_path, poster_path, backdrop_path, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    title,
                    description,
                    media_type,
                    release_year,
                    duration,
                    file_path,
                    poster_path,
                    backdrop_path,
                    now,
                    now,
                ),
            )
            media_id = cursor.lastrowid
            await db.commit()

        return {
            "id": media_id,
            "title": title,
            "description": description,
            "type": media_type,
            "release_year": release_year,
            "duration": duration,
            "file_path": file_path,
            "poster_path": poster_path,
            "backdrop_path": backdrop_path,
            "created_at": now,
            "updated_at": now,
        }

    async def get_media_by_id(self, media_id: int) -> dict | None:
        """Get a media record by its ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute("SELECT * FROM media WHERE id = ?", (media_id,)) as cursor:
                row = await cursor.fetchone()
                return dict(row) if row else None

    async def get_all_media(
        self,
        limit: int | None = None,
        offset: int = 0,
        media_type: str | None = None,
    ) -> list[dict]:
        """Get media records with optional pagination and type filtering."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row

            conditions = []
            params: list = []

            if media_type is not None:
                conditions.append("type = ?")
                params.append(media_type)

            where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""
            query = f"SELECT * FROM media {where_clause} ORDER BY created_at DESC, id DESC"

            if limit:
                query += " LIMIT ? OFFSET ?"
                params.extend([limit, offset])

            async with db.execute(query, params) as cursor:
                rows = await cursor.fetchall()
                return [dict(row) for row in rows]

    async def get_media_count(self, media_type: str | None = None) -> int:
        """Get total count of media records."""
        async with aiosqlite.connect(self.db_path) as db:
            if media_type is not None:
                query = "SELECT COUNT(*) FROM media WHERE type = ?"
                params: tuple = (media_type,)
            else:
                query = "SELECT COUNT(*) FROM media"
                params = ()

            async with db.execute(query, params) as cursor:
                row = await cursor.fetchone()
                return row[0] if row else 0
