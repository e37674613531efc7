"""
Pytest configuration and shared fixtures.
"""

from datetime import date
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from api.config import APIConfig
from api.handlers import BookHandlers
from api.main import create_app
from store.database import MongoBookStore
from store.memory import InMemoryBookStore
from store.models import Author, Book, WriteResult
from utilities.logger import RequestLogger

ERROR_MESSAGE = "Something Went Wrong. Please Try Again Later."


@pytest.fixture
def sample_author():
    """Create a sample author."""
    return Author(id=1, first_name="Frank", last_name="Herbert")


@pytest.fixture
def sample_book(sample_author):
    """Create a stored book with its author resolved."""
    return Book(
        id=7,
        title="Dune",
        isbn="123",
        publish_date=date(1965, 8, 1),
        summary="Desert planet politics.",
        image="dune.jpg",
        author_id=1,
        version=1,
        author=sample_author,
    )


@pytest.fixture
def memory_store(sample_author):
    """In-memory store seeded with two authors."""
    return InMemoryBookStore(
        authors=[sample_author, Author(id=2, first_name="Ursula", last_name="Le Guin")]
    )


@pytest.fixture
def mock_store():
    """Create a mock store for handler tests."""
    store = AsyncMock(spec=MongoBookStore)
    store.list.return_value = []
    store.get.return_value = None
    store.exists.return_value = False
    store.update_if_unchanged.return_value = WriteResult.SUCCESS
    store.delete.return_value = WriteResult.SUCCESS
    return store


@pytest.fixture
def request_logger():
    """Request logger whose calls can be inspected."""
    return Mock(spec=RequestLogger)


@pytest.fixture
def handlers(mock_store, request_logger):
    """Handlers wired to the mock store."""
    return BookHandlers(mock_store, request_logger, ERROR_MESSAGE)


@pytest.fixture
def test_config():
    """API settings for tests."""
    return APIConfig(store_backend="memory", log_format="console", error_500_message=ERROR_MESSAGE)


@pytest.fixture
def client(memory_store, test_config):
    """Test client serving from the in-memory store."""
    with TestClient(create_app(store=memory_store, app_config=test_config)) as test_client:
        yield test_client
