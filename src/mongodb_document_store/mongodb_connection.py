"""MongoDB connection handling for the document store."""

from __future__ import annotations

import logging
from contextlib import nullcontext
from typing import Any, ContextManager, Dict, Optional

import pymongo
from pymongo import MongoClient, ReadPreference
from pymongo.client_session import ClientSession
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConfigurationError, InvalidURI, PyMongoError

from .exceptions import StoreConnectionError

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_NAME = "cogman"
DEFAULT_COLLECTION_NAME = "tasks"
DEFAULT_TTL_FIELD = "created_at"


def operation_timeout(timeout: Optional[float]) -> ContextManager[Any]:
    """Scope a client-side deadline (seconds) to the enclosed operations.

    With no timeout the driver's configured defaults apply.
    """
    if timeout is None:
        return nullcontext()
    return pymongo.timeout(timeout)


class MongoDBConnection:
    """Owns the single MongoClient used by the document store.

    The connection is bound to one database/collection pair at construction
    time and keeps the TTL configuration used by the index manager.
    """

    def __init__(
        self,
        address: str,
        ttl_seconds: int,
        database_name: str = DEFAULT_DATABASE_NAME,
        collection_name: str = DEFAULT_COLLECTION_NAME,
        ttl_field: str = DEFAULT_TTL_FIELD,
        **client_kwargs: Any,
    ) -> None:
        """Initialize the connection handle without connecting.

        Args:
            address: MongoDB connection string
            ttl_seconds: Expiry window used for the TTL index
            database_name: Name of the database
            collection_name: Name of the collection
            ttl_field: Creation-timestamp field the TTL index is built on
            **client_kwargs: Additional arguments for MongoClient (override defaults)
        """
        self.address = address
        self.ttl_seconds = int(ttl_seconds)
        self.database_name = database_name
        self.collection_name = collection_name
        self.ttl_field = ttl_field
        self._client_kwargs = client_kwargs
        self._client: Optional[MongoClient] = None

    def _build_client_kwargs(self) -> Dict[str, Any]:
        default_kwargs = {
            "serverSelectionTimeoutMS": 5000,  # Server selection timeout
            "connectTimeoutMS": 10000,  # Initial connection timeout
            "retryWrites": True,
            "retryReads": True,
        }
        # User kwargs take precedence
        return {**default_kwargs, **self._client_kwargs}

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> MongoClient:
        if self._client is None:
            raise StoreConnectionError(
                "MongoDB connection is not established",
                context={"address": self.address},
            )
        return self._client

    @property
    def database(self) -> Database:
        return self.client[self.database_name]

    @property
    def collection(self) -> Collection:
        return self.database[self.collection_name]

    def connect(self) -> MongoClient:
        """Create the MongoClient and verify the server answers a ping.

        Returns:
            The connected MongoClient

        Raises:
            StoreConnectionError: If the address is malformed or unreachable
        """
        if self._client is not None:
            logger.debug("MongoDB connection already established")
            return self._client

        try:
            client = MongoClient(self.address, **self._build_client_kwargs())
        except (ConfigurationError, InvalidURI, ValueError) as e:
            logger.error(f"Invalid MongoDB address: {e}")
            raise StoreConnectionError(
                f"Invalid MongoDB address: {e}", context={"address": self.address}
            ) from e
        except PyMongoError as e:
            logger.error(f"Failed to create MongoDB client: {e}")
            raise StoreConnectionError(
                f"Failed to create MongoDB client: {e}",
                context={"address": self.address},
            ) from e

        try:
            client.admin.command("ping")
        except PyMongoError as e:
            logger.error(f"MongoDB server unreachable: {e}")
            client.close()
            raise StoreConnectionError(
                f"MongoDB server unreachable: {e}", context={"address": self.address}
            ) from e

        self._client = client
        logger.info(
            f"Connected to MongoDB - "
            f"Database: {self.database_name}, Collection: {self.collection_name}"
        )
        return client

    def ping(self) -> bool:
        """Verify liveness against the primary node.

        Raises:
            StoreConnectionError: If not connected or the primary is unreachable
        """
        client = self.client
        try:
            client.get_database(
                "admin", read_preference=ReadPreference.PRIMARY
            ).command("ping")
        except PyMongoError as e:
            logger.error(f"MongoDB ping failed: {e}")
            raise StoreConnectionError(
                f"MongoDB ping failed: {e}", context={"address": self.address}
            ) from e
        logger.debug("MongoDB ping succeeded")
        return True

    def start_session(self) -> ClientSession:
        return self.client.start_session()

    def close(self) -> None:
        """Close the MongoDB connection.

        Not idempotent: closing a connection that is not open raises.
        """
        if self._client is None:
            raise StoreConnectionError(
                "MongoDB connection already closed", context={"address": self.address}
            )
        client, self._client = self._client, None
        try:
            client.close()
        except PyMongoError as e:
            logger.error(f"Error closing MongoDB connection: {e}")
            raise StoreConnectionError(
                f"Error closing MongoDB connection: {e}",
                context={"address": self.address},
            ) from e
        logger.info("MongoDB connection closed")
