"""Pytest configuration and fixtures."""

import json
import logging
from unittest.mock import Mock

import pytest
import requests
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from clientbook.database.schema import Base
from clientbook.registry.client_registry import ClientRegistry
from clientbook.retrieval.remote_client import RemoteClient
from clientbook.store.local_store import LocalStore

BASE_URL = "https://api.example.test"


def make_response(status_code, body=b""):
    """Build a real requests.Response carrying the given status and body."""
    response = requests.Response()
    response.status_code = status_code
    if isinstance(body, (bytes, str)):
        response._content = body.encode("utf-8") if isinstance(body, str) else body
    else:
        response._content = json.dumps(body).encode("utf-8")
    response.encoding = "utf-8"
    return response


@pytest.fixture
def session():
    """Create a temporary in-memory database session for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)

    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(tmp_path):
    """File-backed store in a temp directory."""
    store = LocalStore.open(str(tmp_path / "clients.db"))
    try:
        yield store
    finally:
        store.close()


@pytest.fixture
def http_session():
    """Mock requests session; set http_session.request.return_value per test."""
    session = Mock(spec=requests.Session)
    session.request.return_value = make_response(200, [])
    return session


@pytest.fixture
def remote(http_session):
    return RemoteClient(BASE_URL, timeout_seconds=5, user_agent="clientbook-tests", session=http_session)


@pytest.fixture
def registry(store, remote):
    registry = ClientRegistry(store, remote)
    try:
        yield registry
    finally:
        registry.close()


@pytest.fixture(autouse=True)
def reset_clientbook_logging():
    """Drop handlers configure_logging attached, since they hold the test's stderr."""
    yield
    root = logging.getLogger("clientbook")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.NOTSET)
