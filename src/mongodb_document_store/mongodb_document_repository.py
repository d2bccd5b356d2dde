"""CRUD and query operations against the document store collection."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pymongo.client_session import ClientSession
from pymongo.errors import PyMongoError

from .document_cursor import DocumentCursor
from .exceptions import NotFoundError, StoreQueryError, StoreWriteError
from .mongodb_connection import MongoDBConnection, operation_timeout
from .transaction_tracker import TransactionTracker

logger = logging.getLogger(__name__)


class MongoDBDocumentRepository:
    """Get/create/replace/update/list/aggregate on a single collection.

    Every operation accepts ``transaction_id`` to run inside a transaction
    opened through the tracker, and ``timeout`` (seconds) to bound that one
    call. Without a timeout the driver defaults apply.
    """

    def __init__(
        self, connection: MongoDBConnection, transactions: TransactionTracker
    ) -> None:
        self.connection = connection
        self.transactions = transactions

    def _session(self, transaction_id: Optional[str]) -> Optional[ClientSession]:
        if transaction_id is None:
            return None
        return self.transactions.get_session(transaction_id)

    def get(
        self,
        query: Mapping[str, Any],
        *,
        transaction_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Return the first document matching the query.

        Raises:
            NotFoundError: If no document matches
            StoreQueryError: For any other failure
        """
        session = self._session(transaction_id)
        collection = self.connection.collection
        try:
            with operation_timeout(timeout):
                doc = collection.find_one(query, session=session)
        except PyMongoError as e:
            logger.error(f"Failed to get document for {query}: {e}")
            raise StoreQueryError(
                f"Failed to get document: {e}", context={"query": query}
            ) from e

        if doc is None:
            logger.debug(f"Document not found: {query}")
            raise NotFoundError("Document not found", context={"query": query})
        return doc

    def create(
        self,
        document: Mapping[str, Any],
        *,
        transaction_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Insert one document and return its ``_id``."""
        session = self._session(transaction_id)
        collection = self.connection.collection
        try:
            with operation_timeout(timeout):
                result = collection.insert_one(document, session=session)
        except PyMongoError as e:
            logger.error(f"Failed to create document: {e}")
            raise StoreWriteError(f"Failed to create document: {e}") from e

        logger.debug(f"Created document {result.inserted_id}")
        return result.inserted_id

    def update(
        self,
        query: Mapping[str, Any],
        replacement: Mapping[str, Any],
        *,
        transaction_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """Replace the first document matching the query wholesale.

        Raises:
            NotFoundError: If no document matches
            StoreWriteError: For any other failure
        """
        session = self._session(transaction_id)
        collection = self.connection.collection
        try:
            with operation_timeout(timeout):
                result = collection.replace_one(query, replacement, session=session)
        except PyMongoError as e:
            logger.error(f"Failed to replace document for {query}: {e}")
            raise StoreWriteError(
                f"Failed to replace document: {e}", context={"query": query}
            ) from e

        if result.matched_count == 0:
            raise NotFoundError("Document not found", context={"query": query})
        logger.debug(f"Replaced document matching {query}")

    def update_partial(
        self,
        query: Mapping[str, Any],
        patch: Mapping[str, Any],
        *,
        transaction_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """Apply update operators (``$set``, ``$inc``, ...) to the first match.

        Same error contract as :meth:`update`.
        """
        session = self._session(transaction_id)
        collection = self.connection.collection
        try:
            with operation_timeout(timeout):
                result = collection.update_one(query, patch, session=session)
        except PyMongoError as e:
            logger.error(f"Failed to update document for {query}: {e}")
            raise StoreWriteError(
                f"Failed to update document: {e}", context={"query": query}
            ) from e

        if result.matched_count == 0:
            raise NotFoundError("Document not found", context={"query": query})
        logger.debug(f"Updated document matching {query}")

    def list(
        self,
        query: Mapping[str, Any],
        skip: int = 0,
        limit: int = 0,
        *,
        transaction_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> DocumentCursor:
        """Return a cursor over matching documents.

        ``skip`` and ``limit`` are passed to the driver unchanged; a limit of
        0 means no limit. Negative values are rejected by the driver with a
        ValueError, which is not translated to StoreQueryError.

        The query runs when the cursor is first iterated; ``timeout`` bounds
        each fetch made while iterating.
        """
        session = self._session(transaction_id)
        collection = self.connection.collection
        try:
            with operation_timeout(timeout):
                cursor = collection.find(query, skip=skip, limit=limit, session=session)
        except PyMongoError as e:
            logger.error(f"Failed to list documents for {query}: {e}")
            raise StoreQueryError(
                f"Failed to list documents: {e}", context={"query": query}
            ) from e
        return DocumentCursor(cursor, timeout=timeout)

    def aggregate(
        self,
        pipeline: Sequence[Mapping[str, Any]],
        *,
        transaction_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> DocumentCursor:
        """Run an aggregation pipeline and return a cursor over its results.

        ``timeout`` bounds the initial command and each later batch fetch.
        """
        session = self._session(transaction_id)
        collection = self.connection.collection
        stages: List[Mapping[str, Any]] = list(pipeline)
        try:
            with operation_timeout(timeout):
                cursor = collection.aggregate(stages, session=session)
        except PyMongoError as e:
            logger.error(f"Failed to aggregate: {e}")
            raise StoreQueryError(
                f"Failed to aggregate: {e}", context={"stages": len(stages)}
            ) from e
        return DocumentCursor(cursor, timeout=timeout)
