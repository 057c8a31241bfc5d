"""
Local persistent settings (small key/value flags that survive restarts).

Holds the zone bootstrap flag. SQLite-backed by default; the in-memory
variant lets tests start from a clean slate.
"""

import json
import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class LocalSettings(ABC):
    """Key/value settings store with JSON-serializable values."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value for key, or default if unset."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Forget key. Removing an unset key is a no-op."""

    def get_bool(self, key: str) -> bool:
        """Boolean view of a key; unset reads as False."""
        return bool(self.get(key, False))

    def set_bool(self, key: str, value: bool) -> None:
        self.set(key, bool(value))

    def close(self) -> None:
        return None


class InMemoryLocalSettings(LocalSettings):
    """Process-local settings. Nothing survives the process."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._values: dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


class SQLiteLocalSettings(LocalSettings):
    """
    Settings persisted in a SQLite file.

    Values are stored as JSON text. Writes commit immediately so a flag set
    just before a crash is still there on the next start.
    """

    def __init__(self, db_path: str = "./data/local_settings.db"):
        """
        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.Lock()
        self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        self._conn.commit()
        logger.debug(f"Opened local settings at {self.db_path}")

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM settings WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            return default
        return json.loads(row[0])

    def set(self, key: str, value: Any) -> None:
        now = datetime.now(UTC).isoformat()
        with self._lock:
            self._conn.execute(
                """
                INSERT INTO settings (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                               updated_at = excluded.updated_at
                """,
                (key, json.dumps(value), now),
            )
            self._conn.commit()

    def remove(self, key: str) -> None:
        with self._lock:
            self._conn.execute("DELETE FROM settings WHERE key = ?", (key,))
            self._conn.commit()

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            self._conn.close()


# Global instance
_local_settings: LocalSettings | None = None


def get_local_settings() -> LocalSettings:
    """
    Get global local settings instance at the configured path.

    Returns:
        LocalSettings: SQLite-backed settings
    """
    global _local_settings
    if _local_settings is None:
        from recordstore.config import get_settings

        _local_settings = SQLiteLocalSettings(get_settings().local_settings.path)
    return _local_settings
