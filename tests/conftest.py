"""Shared fixtures for MongoDB document store tests."""

import os
import uuid

import pytest
from unittest.mock import MagicMock

from mongodb_document_store.mongodb_connection import MongoDBConnection
from mongodb_document_store.mongodb_document_repository import (
    MongoDBDocumentRepository,
)
from mongodb_document_store.mongodb_index_manager import MongoDBIndexManager
from mongodb_document_store.transaction_tracker import TransactionTracker


# ---------------------------------------------------------------------------
# Unit-test fixtures (no MongoDB required)
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_mongo_collection():
    """MagicMock MongoDB collection with common operations."""
    collection = MagicMock()
    collection.find_one.return_value = {"_id": "doc-1", "name": "first"}
    collection.insert_one.return_value = MagicMock(inserted_id="doc-1")
    collection.replace_one.return_value = MagicMock(matched_count=1, modified_count=1)
    collection.update_one.return_value = MagicMock(matched_count=1, modified_count=1)
    collection.create_index.return_value = "TTL"
    collection.create_indexes.return_value = ["index_name"]
    return collection


@pytest.fixture
def mock_mongo_client(mock_mongo_collection):
    """MagicMock MongoClient with db/collection hierarchy."""
    client = MagicMock()
    db = MagicMock()
    db.__getitem__ = MagicMock(return_value=mock_mongo_collection)
    client.__getitem__ = MagicMock(return_value=db)
    return client


@pytest.fixture
def connection(mock_mongo_client):
    """MongoDBConnection holding the mocked client."""
    conn = MongoDBConnection(
        "mongodb://localhost:27017/",
        3600,
        database_name="test_db",
        collection_name="test_tasks",
    )
    conn._client = mock_mongo_client
    return conn


@pytest.fixture
def mock_session():
    """MagicMock ClientSession."""
    return MagicMock()


@pytest.fixture
def tracker(connection, mock_mongo_client, mock_session):
    """TransactionTracker whose connection hands out ``mock_session``."""
    mock_mongo_client.start_session.return_value = mock_session
    return TransactionTracker(connection)


@pytest.fixture
def index_manager(connection):
    return MongoDBIndexManager(connection)


@pytest.fixture
def repository(connection, tracker):
    return MongoDBDocumentRepository(connection, tracker)


# ---------------------------------------------------------------------------
# Integration-test fixtures (require MongoDB)
# ---------------------------------------------------------------------------


@pytest.fixture
def mongodb_connection():
    """Get MongoDB connection string from environment, skip if unavailable."""
    conn_str = os.environ.get("MONGODB_CONNECTION_STRING")
    if not conn_str:
        pytest.skip("MONGODB_CONNECTION_STRING not set")
    return conn_str


@pytest.fixture
def unique_collection_name():
    """Generate a unique collection name per test."""
    return f"test-{uuid.uuid4().hex[:12]}"
