"""
Study Portal Client Entry Point.

Bootstraps the dependency graph via constructor injection, initialises
the local SQLite schema that backs the durable session, and launches the
interactive console.  Every subsystem is wired here; there are no
module-level globals.

Usage::

    python main.py
"""

from __future__ import annotations

import atexit
import sys
import traceback

from portal.api_client import ApiClient
from portal.auth import SessionManager
from portal.config import get_config
from portal.console import PortalConsole
from portal.database import DatabaseManager
from portal.logger import get_logger
from portal.routing import build_default_registry
from portal.schema import initialize_schema
from portal.services import create_services
from portal.storage import DurableStorage


def main() -> None:
    """Application entry point: wire dependencies and run the console."""
    logger = get_logger("main")
    logger.info("Starting Study Portal client...")

    # ------------------------------------------------------------------
    # 1. Configuration (from .env / environment variables)
    # ------------------------------------------------------------------
    config = get_config()

    # ------------------------------------------------------------------
    # 2. Local database (durable session storage only)
    # ------------------------------------------------------------------
    db = DatabaseManager(
        sqlite_path=config.SQLITE_PATH,
        logger=get_logger("database"),
    )
    # DatabaseManager.close() is idempotent, so the atexit hook is safe
    # alongside the explicit close below.
    atexit.register(db.close)

    initialize_schema(db.sqlite, get_logger("schema"))

    # ------------------------------------------------------------------
    # 3. Session store, restored from durable storage
    # ------------------------------------------------------------------
    storage = DurableStorage(db=db, logger=get_logger("storage"))
    session = SessionManager(
        storage=storage,
        logger=get_logger("session"),
    )
    session.load()

    # ------------------------------------------------------------------
    # 4. REST client and service container
    # ------------------------------------------------------------------
    api = ApiClient(
        base_url=config.API_BASE_URL,
        token_provider=lambda: session.token,
        logger=get_logger("api"),
        timeout=config.API_TIMEOUT_S,
        upload_timeout=config.UPLOAD_TIMEOUT_S,
    )
    services = create_services(api=api, config=config, session=session)

    # ------------------------------------------------------------------
    # 5. Routing and console (blocks until the user quits)
    # ------------------------------------------------------------------
    console = PortalConsole(
        services=services,
        session=session,
        registry=build_default_registry(get_logger("routing")),
        config=config,
        logger=get_logger("ui"),
    )
    try:
        console.run()
    finally:
        console.close()
        api.close()
        db.close()
        logger.info("Study Portal client shut down.")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        detail = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        sys.stderr.write(f"FATAL: {type(exc).__name__}: {exc}\n{detail}")
        sys.exit(1)
