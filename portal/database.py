"""
Local Database Layer.

Manages the SQLite connection that backs the client's durable storage
(the persisted session token and principal).  The backend REST API is
the authoritative store for every domain record; this module holds only
client-side state and contains no query logic of its own.

Usage (dependency injection at app startup)::

    from portal.database import DatabaseManager
    from portal.logger import StructuredLogger

    db = DatabaseManager(
        sqlite_path=Path("portal_local.db"),
        logger=StructuredLogger(name="database"),
    )
    # Inject `db` into the storage layer.
"""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Union

from portal.logger import StructuredLogger

_MEMORY_PATH: str = ":memory:"


class DatabaseManager:
    """Owns the local SQLite connection and its write lock.

    Fully configured at construction time via dependency injection.

    Parameters
    ----------
    sqlite_path:
        Filesystem path for the local SQLite database file, or
        ``":memory:"`` for an ephemeral database.
    logger:
        A ``StructuredLogger`` instance for structured JSON log output.
    """

    def __init__(
        self,
        sqlite_path: Union[Path, str],
        logger: StructuredLogger,
    ) -> None:
        self._logger: StructuredLogger = logger
        self._write_lock: threading.RLock = threading.RLock()
        self._closed: bool = False
        self._sqlite_conn: sqlite3.Connection = self._connect_sqlite(sqlite_path)

    # ------------------------------------------------------------------
    # Public properties
    # ------------------------------------------------------------------

    @property
    def sqlite(self) -> sqlite3.Connection:
        """Return the initialised SQLite connection."""
        return self._sqlite_conn

    @property
    def write_lock(self) -> threading.RLock:
        """Return the write lock for thread-safe SQLite operations.

        All code that performs SQLite writes should acquire this lock
        first::

            with db.write_lock:
                db.sqlite.execute("INSERT ...")
                db.sqlite.commit()
        """
        return self._write_lock

    # ------------------------------------------------------------------
    # Lifecycle helpers
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the local SQLite connection.

        Safe to call multiple times; subsequent calls are no-ops.
        """
        with self._write_lock:
            if self._closed:
                return
            try:
                self._sqlite_conn.close()
                self._logger.info("SQLite connection closed.")
            except sqlite3.ProgrammingError:
                pass
            self._closed = True

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _connect_sqlite(self, path: Union[Path, str]) -> sqlite3.Connection:
        """Open (or create) the SQLite database.

        Re-raises ``PermissionError`` with a user-friendly message when the
        file or its directory is read-only or locked.

        Returns
        -------
        sqlite3.Connection
            A configured connection with ``row_factory`` set to
            ``sqlite3.Row`` for dict-like row access.
        """
        try:
            conn = sqlite3.connect(str(path), check_same_thread=False)
            conn.row_factory = sqlite3.Row
            if str(path) != _MEMORY_PATH:
                # WAL keeps the poller threads' reads off the writer's back.
                conn.execute("PRAGMA journal_mode=WAL;")
            self._logger.info("SQLite database opened at %s", path)
            return conn
        except PermissionError as exc:
            msg = (
                f"Cannot open the local database at '{path}'. "
                "The file or its directory may be read-only or locked by "
                "another process.  Please check file permissions and try again."
            )
            self._logger.error(msg)
            raise PermissionError(msg) from exc
