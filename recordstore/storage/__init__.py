"""
Local persistent settings storage.

Uses SQLite so flags survive process restarts.
"""

from recordstore.storage.local_settings import (
    InMemoryLocalSettings,
    LocalSettings,
    SQLiteLocalSettings,
    get_local_settings,
)

__all__ = [
    "InMemoryLocalSettings",
    "LocalSettings",
    "SQLiteLocalSettings",
    "get_local_settings",
]
