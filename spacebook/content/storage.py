"""
SQLite-backed key/value store shared by the foreground client and the
background publisher.

Uses sqlite-utils for the database handle and schema setup. Values are plain
strings; callers JSON-encode structured data (``drafts``, ``in_schedule``).

Both processes open the same file. Every read-modify-write must run inside
``transaction()``, which takes SQLite's write lock up front
(``BEGIN IMMEDIATE``) so concurrent edits are serialized rather than lost.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import sqlite_utils

logger = logging.getLogger(__name__)

# Seconds to wait for the other process to release the write lock
_LOCK_TIMEOUT = 10.0


class KeyValueStore:
    """String-keyed get/set/remove over a single SQLite table."""

    TABLE = "kv"

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)

        # isolation_level=None: transactions are only the ones we open
        conn = sqlite3.connect(
            str(db_path), timeout=_LOCK_TIMEOUT, isolation_level=None
        )
        self._db = sqlite_utils.Database(conn)
        self._depth = 0
        self._ensure_schema()

    # ------------------------------------------------------------------
    # Schema setup
    # ------------------------------------------------------------------

    def _ensure_schema(self) -> None:
        if self.TABLE not in self._db.table_names():
            self._db[self.TABLE].create({"key": str, "value": str}, pk="key")
            logger.debug("Created %s table in %s", self.TABLE, self.db_path)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator["KeyValueStore"]:
        """
        Run the enclosed reads and writes atomically.

        Re-entrant: nested calls join the outermost transaction.
        """
        if self._depth:
            self._depth += 1
            try:
                yield self
            finally:
                self._depth -= 1
            return

        self._db.execute("BEGIN IMMEDIATE")
        self._depth = 1
        try:
            yield self
        except BaseException:
            self._db.execute("ROLLBACK")
            raise
        else:
            self._db.execute("COMMIT")
        finally:
            self._depth = 0

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def get(self, key: str) -> Optional[str]:
        """Return the value stored under ``key``, or None."""
        row = self._db.execute(
            f"SELECT value FROM {self.TABLE} WHERE key = ?", [key]
        ).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with self.transaction():
            self._db.execute(
                f"INSERT OR REPLACE INTO {self.TABLE} (key, value) VALUES (?, ?)",
                [key, value],
            )

    def remove(self, key: str) -> bool:
        """Delete a key. Returns True if it existed."""
        with self.transaction():
            cursor = self._db.execute(
                f"DELETE FROM {self.TABLE} WHERE key = ?", [key]
            )
            return cursor.rowcount > 0

    def keys(self) -> list[str]:
        return [
            row[0]
            for row in self._db.execute(
                f"SELECT key FROM {self.TABLE} ORDER BY key"
            ).fetchall()
        ]

    # ------------------------------------------------------------------
    # Convenience
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._db.close()

    def __enter__(self) -> "KeyValueStore":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_store: Optional[KeyValueStore] = None


def get_store() -> KeyValueStore:
    """Return the application-wide KeyValueStore (lazy init)."""
    global _store
    if _store is None:
        from config.settings import settings  # noqa: PLC0415

        _store = KeyValueStore(settings.store_path)
    return _store
