"""Media catalog database layer for Fletnix.

Maps media identifiers to files under the media root.
"""

from .factory import get_database, init_db

__all__ = ["get_database", "init_db"]
