"""Shared fixtures: in-memory storage, a fake backend and quiet loggers."""

from __future__ import annotations

import httpx
import pytest

from portal.api_client import ApiClient
from portal.auth import SessionManager
from portal.config import AppConfig
from portal.database import DatabaseManager
from portal.logger import StructuredLogger
from portal.schema import initialize_schema
from portal.storage import DurableStorage
from tests.support import BASE_URL, FakeBackend, make_logger


@pytest.fixture
def logger() -> StructuredLogger:
    return make_logger()


@pytest.fixture
def config() -> AppConfig:
    # Long intervals: tests drive polling through poll_once()/refresh().
    return AppConfig(
        NOTIFICATION_POLL_INTERVAL_S=3600,
        DASHBOARD_REFRESH_INTERVAL_S=3600,
        POLLER_STOP_TIMEOUT_S=2,
        BULK_ACTION_WORKERS=4,
        SQLITE_PATH=":memory:",
    )


@pytest.fixture
def db(logger: StructuredLogger):
    manager = DatabaseManager(sqlite_path=":memory:", logger=logger)
    initialize_schema(manager.sqlite, logger)
    yield manager
    manager.close()


@pytest.fixture
def storage(db: DatabaseManager, logger: StructuredLogger) -> DurableStorage:
    return DurableStorage(db=db, logger=logger)


@pytest.fixture
def session(storage: DurableStorage, logger: StructuredLogger) -> SessionManager:
    manager = SessionManager(storage=storage, logger=logger)
    manager.load()
    return manager


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def api(backend: FakeBackend, session: SessionManager, logger: StructuredLogger):
    client = ApiClient(
        base_url=BASE_URL,
        token_provider=lambda: session.token,
        logger=logger,
        transport=httpx.MockTransport(backend),
    )
    yield client
    client.close()
