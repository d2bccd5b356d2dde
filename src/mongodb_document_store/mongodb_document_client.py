"""Document store client bound to a single MongoDB collection."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from pymongo.client_session import ClientSession

from .document_cursor import DocumentCursor
from .mongodb_connection import (
    DEFAULT_COLLECTION_NAME,
    DEFAULT_DATABASE_NAME,
    DEFAULT_TTL_FIELD,
    MongoDBConnection,
)
from .mongodb_document_repository import MongoDBDocumentRepository
from .mongodb_index_manager import IndexDescriptor, MongoDBIndexManager
from .transaction_tracker import TransactionTracker

logger = logging.getLogger(__name__)


def _ttl_seconds(ttl: Union[timedelta, int, float]) -> int:
    if isinstance(ttl, timedelta):
        return int(ttl.total_seconds())
    return int(ttl)


class MongoDBDocumentClient:
    """Single entry point over one MongoDB collection.

    Combines connection lifecycle, index administration (including the TTL
    index), transaction tracking keyed by caller-chosen identifiers, and
    CRUD/query operations.

    Example:
        ```python
        client = new_client("mongodb://localhost:27017/", timedelta(hours=1))
        client.set_ttl()

        client.start_transaction("job-42")
        client.create({"name": "job-42", "created_at": datetime.now(UTC)},
                      transaction_id="job-42")
        client.commit_transaction("job-42")

        with client.list({}, skip=0, limit=10) as cursor:
            for doc in cursor:
                ...

        client.close()
        ```
    """

    def __init__(
        self,
        address: str,
        ttl: Union[timedelta, int, float],
        database_name: str = DEFAULT_DATABASE_NAME,
        collection_name: str = DEFAULT_COLLECTION_NAME,
        ttl_field: str = DEFAULT_TTL_FIELD,
        **client_kwargs: Any,
    ) -> None:
        """Initialize the client without connecting.

        Args:
            address: MongoDB connection string
            ttl: TTL index expiry window (timedelta or seconds)
            database_name: Name of the database
            collection_name: Name of the collection
            ttl_field: Creation-timestamp field used by the TTL index
            **client_kwargs: Additional arguments for MongoClient
        """
        self.connection = MongoDBConnection(
            address,
            _ttl_seconds(ttl),
            database_name=database_name,
            collection_name=collection_name,
            ttl_field=ttl_field,
            **client_kwargs,
        )
        self.indexes = MongoDBIndexManager(self.connection)
        self.transactions = TransactionTracker(self.connection)
        self.repository = MongoDBDocumentRepository(self.connection, self.transactions)

    @property
    def ttl_seconds(self) -> int:
        return self.connection.ttl_seconds

    def __enter__(self) -> MongoDBDocumentClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # Connection
    def connect(self) -> None:
        self.connection.connect()

    def ping(self) -> bool:
        return self.connection.ping()

    def close(self) -> None:
        """Abort any still-active transactions and close the connection."""
        active = self.transactions.active_transactions()
        if active:
            logger.warning(f"Closing with active transactions: {active}")
            self.transactions.abort_all()
        self.connection.close()

    # Indexes
    def set_ttl(self) -> str:
        return self.indexes.set_ttl()

    def ensure_indices(
        self, indices: Iterable[Union[IndexDescriptor, Mapping[str, Any]]]
    ) -> List[str]:
        return self.indexes.ensure_indices(indices)

    def drop_indices(self) -> None:
        self.indexes.drop_indices()

    def list_indices(self) -> Dict[str, Any]:
        return self.indexes.list_indices()

    # Transactions
    def start_transaction(self, transaction_id: str) -> ClientSession:
        return self.transactions.start_transaction(transaction_id)

    def commit_transaction(
        self, transaction_id: str, timeout: Optional[float] = None
    ) -> None:
        self.transactions.commit_transaction(transaction_id, timeout=timeout)

    def abort_transaction(
        self, transaction_id: str, timeout: Optional[float] = None
    ) -> None:
        self.transactions.abort_transaction(transaction_id, timeout=timeout)

    # Documents
    def get(self, query: Mapping[str, Any], **kwargs: Any) -> Dict[str, Any]:
        return self.repository.get(query, **kwargs)

    def create(self, document: Mapping[str, Any], **kwargs: Any) -> Any:
        return self.repository.create(document, **kwargs)

    def update(
        self, query: Mapping[str, Any], replacement: Mapping[str, Any], **kwargs: Any
    ) -> None:
        self.repository.update(query, replacement, **kwargs)

    def update_partial(
        self, query: Mapping[str, Any], patch: Mapping[str, Any], **kwargs: Any
    ) -> None:
        self.repository.update_partial(query, patch, **kwargs)

    def list(
        self, query: Mapping[str, Any], skip: int = 0, limit: int = 0, **kwargs: Any
    ) -> DocumentCursor:
        return self.repository.list(query, skip, limit, **kwargs)

    def aggregate(
        self, pipeline: Sequence[Mapping[str, Any]], **kwargs: Any
    ) -> DocumentCursor:
        return self.repository.aggregate(pipeline, **kwargs)


def new_client(
    address: str,
    ttl: Union[timedelta, int, float],
    **kwargs: Any,
) -> MongoDBDocumentClient:
    """Create and connect a document store client.

    Args:
        address: MongoDB connection string
        ttl: TTL index expiry window (timedelta or seconds)
        **kwargs: database_name, collection_name, ttl_field and MongoClient options

    Raises:
        StoreConnectionError: If the address is malformed or unreachable
    """
    client = MongoDBDocumentClient(address, ttl, **kwargs)
    client.connect()
    return client
