"""
Durable Client Storage.

Read/write access to the ``app_settings`` key-value table in the local
SQLite database.  The session lives here as two entries:

- ``token``: the opaque bearer token issued on login;
- ``user``: the principal, serialised as camelCase JSON.

Nothing else is persisted client-side.
"""

from __future__ import annotations

import sqlite3
from typing import Optional

from portal.database import DatabaseManager
from portal.logger import StructuredLogger

KEY_TOKEN: str = "token"
KEY_USER: str = "user"


class DurableStorage:
    """Key-value store surviving application restarts.

    Parameters
    ----------
    db:
        Initialised ``DatabaseManager`` with an active SQLite connection
        whose schema has been initialised.
    logger:
        Structured logger instance.
    """

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        self._db = db
        self._logger = logger

    # ------------------------------------------------------------------
    # Generic key-value access
    # ------------------------------------------------------------------

    def get(self, key: str) -> Optional[str]:
        """Read a value by key.  Returns ``None`` if not found."""
        try:
            with self._db.write_lock:
                row = self._db.sqlite.execute(
                    "SELECT value FROM app_settings WHERE key = ?",
                    (key,),
                ).fetchone()
            return row["value"] if row is not None else None
        except sqlite3.Error as exc:
            self._logger.warning("Failed to read app_settings[%s]: %s", key, exc)
            return None

    def set(self, key: str, value: str) -> bool:
        """Upsert a value.  Returns ``True`` on success."""
        try:
            with self._db.write_lock:
                self._db.sqlite.execute(
                    """
                    INSERT INTO app_settings (key, value)
                    VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value      = excluded.value,
                        updated_at = CURRENT_TIMESTAMP
                    """,
                    (key, value),
                )
                self._db.sqlite.commit()
            self._logger.debug("app_settings[%s] updated.", key)
            return True
        except sqlite3.Error as exc:
            self._logger.error("Failed to write app_settings[%s]: %s", key, exc)
            return False

    def delete(self, *keys: str) -> None:
        """Remove the given keys; missing keys are ignored."""
        try:
            with self._db.write_lock:
                self._db.sqlite.executemany(
                    "DELETE FROM app_settings WHERE key = ?",
                    [(key,) for key in keys],
                )
                self._db.sqlite.commit()
        except sqlite3.Error as exc:
            self._logger.error("Failed to delete app_settings%s: %s", list(keys), exc)

    # ------------------------------------------------------------------
    # Session entries
    # ------------------------------------------------------------------

    def read_session(self) -> tuple[Optional[str], Optional[str]]:
        """Return ``(token, user_json)``; either may be ``None``."""
        return self.get(KEY_TOKEN), self.get(KEY_USER)

    def write_session(self, token: str, user_json: str) -> bool:
        """Persist both session entries in one transaction."""
        try:
            with self._db.write_lock:
                self._db.sqlite.executemany(
                    """
                    INSERT INTO app_settings (key, value)
                    VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value      = excluded.value,
                        updated_at = CURRENT_TIMESTAMP
                    """,
                    [(KEY_TOKEN, token), (KEY_USER, user_json)],
                )
                self._db.sqlite.commit()
            return True
        except sqlite3.Error as exc:
            self._logger.error("Failed to persist session: %s", exc)
            return False

    def clear_session(self) -> None:
        self.delete(KEY_TOKEN, KEY_USER)
