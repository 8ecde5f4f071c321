"""Shared fixtures: in-memory database, test client, event bus and storage overrides."""

import os
import tempfile

# 설정은 import 시점에 읽으므로 앱보다 먼저
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-fornelli-0123456789abcdef")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="fornelli-logs-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_event_bus, get_photo_storage
from app.config import settings
from app.core.events import RecordingEventBus
from app.database import Base, get_db
from main import app
from tests.helpers import FakeStorage


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def events():
    return RecordingEventBus()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def rating_model(monkeypatch):
    monkeypatch.setattr(settings, "voting_model", "rating")


@pytest.fixture
def vote_model(monkeypatch):
    monkeypatch.setattr(settings, "voting_model", "vote")


@pytest.fixture
def client(engine, events, storage, rating_model):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_bus] = lambda: events
    app.dependency_overrides[get_photo_storage] = lambda: storage

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
