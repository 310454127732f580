"""
Test configuration and fixtures for the short link service.
This centralizes all test setup, making individual tests clean.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from main import app
from shortlink_app.database.connection import Base
from shortlink_app.dependencies import get_link_service
from shortlink_app.remote_log.logger import RemoteLogger
from shortlink_app.remote_log.models import LogEntry
from shortlink_app.remote_log.strategies import LogSink
from shortlink_app.services.link_service import LinkService
from shortlink_app.store.strategies import InMemoryTableStore

# Test database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeClock:
    """Callable clock that only moves when a test tells it to"""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingLogSink(LogSink):
    """Sink that keeps every accepted event for assertions"""

    def __init__(self):
        self.entries = []

    async def send(self, entry: LogEntry) -> bool:
        self.entries.append(entry)
        return True


@pytest.fixture(scope="function")
def session_factory():
    """
    Fresh SQLite schema for each test.
    Tables are dropped afterwards so tests stay isolated.
    """
    Base.metadata.create_all(bind=engine)
    try:
        yield TestingSessionLocal
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def store():
    return InMemoryTableStore()


@pytest.fixture
def log_sink():
    return RecordingLogSink()


@pytest.fixture
def link_service(store, log_sink, clock):
    return LinkService(store=store, remote_logger=RemoteLogger(log_sink), clock=clock)


@pytest.fixture(scope="function")
def client(link_service):
    """
    Create a test client with the link service overridden.
    This is the main fixture that API tests will use.
    """
    app.dependency_overrides[get_link_service] = lambda: link_service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
