"""Database factory for Fletnix."""

from .base import DatabaseBackend

# Created on first use, dropped by reset_database()
_db_instance: DatabaseBackend | None = None


def get_database() -> DatabaseBackend:
    """Get the database backend instance."""
    global _db_instance

    if _db_instance is None:
        from .sqlite import SQLiteBackend

        _db_instance = SQLiteBackend()

    return _db_instance


async def init_db() -> None:
    """Initialize the database (create tables if needed)."""
    db = get_database()
    await db.init()


def reset_database() -> None:
    """Reset the database instance.

    Useful for testing or when configuration changes.
    """
    global _db_instance
    _db_instance = None
