"""Unit tests for MongoDBConnection."""

from unittest.mock import MagicMock, patch

import pytest
from pymongo import ReadPreference
from pymongo.errors import ConfigurationError, PyMongoError, ServerSelectionTimeoutError

from mongodb_document_store.exceptions import StoreConnectionError
from mongodb_document_store.mongodb_connection import (
    MongoDBConnection,
    operation_timeout,
)


# ---------------------------------------------------------------------------
# Init
# ---------------------------------------------------------------------------


class TestConnectionInit:
    def test_stores_configuration(self):
        conn = MongoDBConnection(
            "mongodb://localhost/",
            3600,
            database_name="db",
            collection_name="coll",
            ttl_field="inserted_at",
        )
        assert conn.address == "mongodb://localhost/"
        assert conn.ttl_seconds == 3600
        assert conn.database_name == "db"
        assert conn.collection_name == "coll"
        assert conn.ttl_field == "inserted_at"
        assert conn.is_connected is False

    def test_default_bindings(self):
        conn = MongoDBConnection("mongodb://localhost/", 60)
        assert conn.database_name == "cogman"
        assert conn.collection_name == "tasks"
        assert conn.ttl_field == "created_at"

    def test_collection_requires_connection(self):
        conn = MongoDBConnection("mongodb://localhost/", 60)
        with pytest.raises(StoreConnectionError, match="not established"):
            conn.collection


# ---------------------------------------------------------------------------
# connect
# ---------------------------------------------------------------------------


class TestConnect:
    @patch("mongodb_document_store.mongodb_connection.MongoClient")
    def test_creates_client_with_defaults(self, mock_client_cls):
        mock_client = MagicMock()
        mock_client_cls.return_value = mock_client

        conn = MongoDBConnection("mongodb://localhost:27017/", 60)
        result = conn.connect()

        assert result is mock_client
        assert conn.is_connected is True
        call_kwargs = mock_client_cls.call_args[1]
        assert call_kwargs["serverSelectionTimeoutMS"] == 5000
        assert call_kwargs["retryWrites"] is True

    @patch("mongodb_document_store.mongodb_connection.MongoClient")
    def test_kwargs_override_defaults(self, mock_client_cls):
        mock_client_cls.return_value = MagicMock()

        conn = MongoDBConnection(
            "mongodb://localhost/", 60, serverSelectionTimeoutMS=100
        )
        conn.connect()
        assert mock_client_cls.call_args[1]["serverSelectionTimeoutMS"] == 100

    @patch("mongodb_document_store.mongodb_connection.MongoClient")
    def test_pings_admin(self, mock_client_cls):
        mock_client = MagicMock()
        mock_client_cls.return_value = mock_client

        MongoDBConnection("mongodb://localhost/", 60).connect()
        mock_client.admin.command.assert_called_once_with("ping")

    @patch("mongodb_document_store.mongodb_connection.MongoClient")
    def test_reuses_existing_client(self, mock_client_cls):
        mock_client_cls.return_value = MagicMock()

        conn = MongoDBConnection("mongodb://localhost/", 60)
        assert conn.connect() is conn.connect()
        assert mock_client_cls.call_count == 1

    @patch("mongodb_document_store.mongodb_connection.MongoClient")
    def test_malformed_address(self, mock_client_cls):
        mock_client_cls.side_effect = ConfigurationError("bad uri")

        conn = MongoDBConnection("not-a-uri", 60)
        with pytest.raises(StoreConnectionError, match="Invalid MongoDB address"):
            conn.connect()
        assert conn.is_connected is False

    @patch("mongodb_document_store.mongodb_connection.MongoClient")
    def test_unreachable_server_closes_client(self, mock_client_cls):
        mock_client = MagicMock()
        mock_client.admin.command.side_effect = ServerSelectionTimeoutError("timeout")
        mock_client_cls.return_value = mock_client

        conn = MongoDBConnection("mongodb://unreachable/", 60)
        with pytest.raises(StoreConnectionError, match="unreachable") as exc_info:
            conn.connect()

        mock_client.close.assert_called_once()
        assert conn.is_connected is False
        assert isinstance(exc_info.value.__cause__, ServerSelectionTimeoutError)


# ---------------------------------------------------------------------------
# ping
# ---------------------------------------------------------------------------


class TestPing:
    def test_pings_primary(self, connection, mock_mongo_client):
        assert connection.ping() is True
        mock_mongo_client.get_database.assert_called_once_with(
            "admin", read_preference=ReadPreference.PRIMARY
        )
        mock_mongo_client.get_database.return_value.command.assert_called_once_with(
            "ping"
        )

    def test_raises_when_unreachable(self, connection, mock_mongo_client):
        mock_mongo_client.get_database.return_value.command.side_effect = (
            PyMongoError("down")
        )
        with pytest.raises(StoreConnectionError, match="ping failed"):
            connection.ping()

    def test_raises_when_not_connected(self):
        conn = MongoDBConnection("mongodb://localhost/", 60)
        with pytest.raises(StoreConnectionError):
            conn.ping()


# ---------------------------------------------------------------------------
# close
# ---------------------------------------------------------------------------


class TestClose:
    def test_closes_client(self, connection, mock_mongo_client):
        connection.close()
        mock_mongo_client.close.assert_called_once()
        assert connection.is_connected is False

    def test_second_close_raises(self, connection):
        connection.close()
        with pytest.raises(StoreConnectionError, match="already closed"):
            connection.close()

    def test_close_error_is_wrapped(self, connection, mock_mongo_client):
        mock_mongo_client.close.side_effect = PyMongoError("boom")
        with pytest.raises(StoreConnectionError):
            connection.close()
        assert connection.is_connected is False


# ---------------------------------------------------------------------------
# operation_timeout
# ---------------------------------------------------------------------------


class TestOperationTimeout:
    @patch("mongodb_document_store.mongodb_connection.pymongo.timeout")
    def test_no_timeout_uses_driver_defaults(self, mock_timeout):
        with operation_timeout(None):
            pass
        mock_timeout.assert_not_called()

    @patch("mongodb_document_store.mongodb_connection.pymongo.timeout")
    def test_timeout_is_scoped(self, mock_timeout):
        with operation_timeout(2.5):
            pass
        mock_timeout.assert_called_once_with(2.5)
