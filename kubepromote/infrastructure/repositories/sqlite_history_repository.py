"""
SQLite History Repository

Architectural Intent:
- Persistent release history using SQLite (stdlib, zero external deps)
- Implements HistoryLedgerPort: append-only rows, ordered by autoincrement id
- Provides the "what ran before this version" query rollback depends on

Design Decisions:
- Single database file at configurable path (default: data/history.db),
  parent directory created on connect
- Auto-creates the release_history table on first use
- Thread-safe via sqlite3's check_same_thread=False
- Every append is a single-row insert committed immediately
- Timestamps stored as ISO 8601 strings
"""

from __future__ import annotations
import sqlite3
import logging
from datetime import datetime, UTC
from pathlib import Path
from typing import Optional

from kubepromote.domain.entities.history_entry import HistoryEntry
from kubepromote.domain.errors import PersistenceError
from kubepromote.domain.ports.history_port import HistoryLedgerPort

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("namespace", "version", "label", "release_time")


class SQLiteHistoryRepository(HistoryLedgerPort):
    """Release history stored in SQLite."""

    def __init__(self, db_path: str = "data/history.db"):
        self._db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None

    def connect(self) -> None:
        """Open database connection and create tables."""
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            self._conn = sqlite3.connect(
                self._db_path,
                check_same_thread=False,
            )
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.row_factory = sqlite3.Row
            self._create_tables()
        except sqlite3.Error as e:
            raise PersistenceError(f"failed to open release history: {e}") from e
        logger.info("Release history connected: %s", self._db_path)

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def _create_tables(self) -> None:
        assert self._conn is not None
        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS release_history (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                namespace TEXT NOT NULL,
                version TEXT NOT NULL,
                label TEXT NOT NULL,
                release_time TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_release_workload
                ON release_history(namespace, label, id);
        """)

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise PersistenceError("release history is not connected")
        return self._conn

    def verify_schema(self) -> None:
        """Check the release_history table exists with all required columns."""
        conn = self._connection()
        try:
            row = conn.execute(
                "SELECT COUNT(*) FROM sqlite_master "
                "WHERE type='table' AND name='release_history'"
            ).fetchone()
            if row[0] == 0:
                raise PersistenceError("release_history table does not exist")

            columns = {
                r["name"]
                for r in conn.execute("PRAGMA table_info(release_history)").fetchall()
            }
        except sqlite3.Error as e:
            raise PersistenceError(f"error checking release_history table: {e}") from e

        for column in REQUIRED_COLUMNS:
            if column not in columns:
                raise PersistenceError(
                    f"column {column} does not exist in release_history table"
                )

    def append(self, namespace: str, version: str, label: str) -> HistoryEntry:
        """Record a promoted version. Returns the stored entry."""
        conn = self._connection()
        released_at = datetime.now(UTC)
        try:
            cursor = conn.execute(
                """INSERT INTO release_history (namespace, version, label, release_time)
                   VALUES (?, ?, ?, ?)""",
                (namespace, version, label, released_at.isoformat()),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(
                f"failed to add release history to database: {e}", namespace=namespace
            ) from e

        entry = HistoryEntry(
            namespace=namespace,
            version=version,
            label=label,
            sequence=cursor.lastrowid,
            timestamp=released_at,
        )
        logger.debug("Recorded release %s", entry)
        return entry

    def find_previous(
        self, namespace: str, current_version: str, label: str
    ) -> Optional[str]:
        """Version recorded before the latest entry for ``current_version``.

        Only entries of the same (namespace, label) are considered, and the
        current version itself is never returned.
        """
        conn = self._connection()
        try:
            row = conn.execute(
                """SELECT version FROM release_history
                   WHERE namespace = ? AND label = ? AND version != ?
                     AND id < (
                         SELECT MAX(id) FROM release_history
                         WHERE namespace = ? AND label = ? AND version = ?
                     )
                   ORDER BY id DESC LIMIT 1""",
                (namespace, label, current_version,
                 namespace, label, current_version),
            ).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(
                f"failed to get previous version from database: {e}",
                namespace=namespace,
            ) from e
        return row["version"] if row else None

    def entries(
        self, namespace: str, label: str, limit: int = 20
    ) -> list[HistoryEntry]:
        """Most recent entries for (namespace, label), newest first."""
        conn = self._connection()
        try:
            rows = conn.execute(
                """SELECT * FROM release_history
                   WHERE namespace = ? AND label = ?
                   ORDER BY id DESC LIMIT ?""",
                (namespace, label, limit),
            ).fetchall()
        except sqlite3.Error as e:
            raise PersistenceError(f"failed to read release history: {e}") from e
        return [
            HistoryEntry(
                namespace=r["namespace"],
                version=r["version"],
                label=r["label"],
                sequence=r["id"],
                timestamp=datetime.fromisoformat(r["release_time"]),
            )
            for r in rows
        ]
