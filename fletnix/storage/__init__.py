"""Media storage module with factory function."""

from functools import lru_cache

from .local import LocalMediaStorage, format_title, resolve_path

__all__ = [
    "LocalMediaStorage",
    "format_title",
    "get_storage",
    "resolve_path",
]


@lru_cache
def get_storage() -> LocalMediaStorage:
    """
    Get the configured media storage.

    Result is cached for the lifetime of the application.
    """
    return LocalMediaStorage()


def clear_storage_cache() -> None:
    """Clear the storage cache. Useful for testing."""
    get_storage.cache_clear()
