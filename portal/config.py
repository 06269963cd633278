"""
Application Configuration.

Pydantic Settings model for the portal client.
All configuration is loaded from environment variables and .env files.
Inject an AppConfig instance via dependency injection where needed.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import model_validator


class AppConfig(BaseSettings):
    """Central configuration loaded from environment variables and defaults."""

    # --- Backend REST API ---
    API_BASE_URL: str = "http://localhost:8080/api"
    API_TIMEOUT_S: float = 10.0
    UPLOAD_TIMEOUT_S: float = 30.0

    # --- Polling ---
    NOTIFICATION_POLL_INTERVAL_S: float = 30.0
    DASHBOARD_REFRESH_INTERVAL_S: float = 300.0
    POLLER_STOP_TIMEOUT_S: float = 10.0

    # --- Bulk actions (mark-all-as-read, per-application payments) ---
    BULK_ACTION_WORKERS: int = 8

    # --- Local durable storage ---
    SQLITE_PATH: str = "portal_local.db"

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "portal.log"
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _warn_missing_env(self) -> "AppConfig":
        """Emit a startup warning when running on defaults only.

        Pydantic silently falls back to defaults when ``.env`` is missing,
        which for this client means talking to a local backend.
        """
        _log = logging.getLogger("portal.config")

        if not Path(".env").exists():
            _log.warning(
                "No .env file found; all configuration loaded from "
                "environment variables or defaults."
            )

        if self.UPLOAD_TIMEOUT_S < self.API_TIMEOUT_S:
            _log.warning(
                "UPLOAD_TIMEOUT_S (%s) is shorter than API_TIMEOUT_S (%s); "
                "file uploads may time out before ordinary calls.",
                self.UPLOAD_TIMEOUT_S,
                self.API_TIMEOUT_S,
            )

        return self


# ---------------------------------------------------------------------------
# Module-level singleton factory
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Return a cached ``AppConfig`` singleton.

    Uses a check-lock-check pattern to avoid the lock overhead on the fast
    path while remaining thread-safe during first initialisation.

    Prefer direct constructor injection of ``AppConfig`` in new code.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = AppConfig()
    return _config_instance
