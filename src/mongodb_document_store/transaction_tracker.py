"""Tracking of MongoDB transactions keyed by caller-supplied identifiers."""

from __future__ import annotations

import logging
from threading import Lock
from typing import Dict, List, Optional

from pymongo.client_session import ClientSession
from pymongo.errors import PyMongoError

from .exceptions import SessionError, StoreConnectionError
from .mongodb_connection import MongoDBConnection, operation_timeout

logger = logging.getLogger(__name__)


class TransactionTracker:
    """Thread-safe map from transaction identifier to an open ClientSession.

    Each identifier moves from absent to active on ``start_transaction`` and
    back to absent on a successful ``commit_transaction`` or on
    ``abort_transaction``. At most one session is active per identifier.

    The map itself is lock-guarded, but a ClientSession is not thread-safe:
    callers must not use the same identifier from several threads at once.
    """

    def __init__(self, connection: MongoDBConnection) -> None:
        self.connection = connection
        self._sessions: Dict[str, ClientSession] = {}
        self._lock = Lock()

    def start_transaction(self, transaction_id: str) -> ClientSession:
        """Open a session, start a transaction on it and track it.

        Raises:
            SessionError: If the identifier is already active, or the session or
                transaction cannot be started. The map is left unchanged.
        """
        with self._lock:
            if transaction_id in self._sessions:
                raise SessionError("Transaction already active", transaction_id)

        try:
            session = self.connection.start_session()
        except (PyMongoError, StoreConnectionError) as e:
            logger.error(f"Failed to start session for transaction {transaction_id}: {e}")
            raise SessionError(
                f"Failed to start session: {e}", transaction_id
            ) from e

        try:
            session.start_transaction()
        except PyMongoError as e:
            logger.error(f"Failed to start transaction {transaction_id}: {e}")
            session.end_session()
            raise SessionError(
                f"Failed to start transaction: {e}", transaction_id
            ) from e

        with self._lock:
            if transaction_id in self._sessions:
                registered = False
            else:
                self._sessions[transaction_id] = session
                registered = True

        if not registered:
            # Lost a race with another start for the same identifier
            try:
                session.abort_transaction()
            except PyMongoError as e:
                logger.warning(f"Error aborting duplicate transaction {transaction_id}: {e}")
            finally:
                session.end_session()
            raise SessionError("Transaction already active", transaction_id)

        logger.info(f"Started transaction {transaction_id}")
        return session

    def commit_transaction(
        self, transaction_id: str, timeout: Optional[float] = None
    ) -> None:
        """Commit the transaction, end its session and stop tracking it.

        Args:
            transaction_id: Identifier passed to ``start_transaction``
            timeout: Optional deadline in seconds for the commit

        Raises:
            SessionError: If the identifier is unknown, or the commit fails. On
                commit failure the session stays open and tracked so the caller
                can retry or abort.
        """
        session = self.get_session(transaction_id)

        try:
            with operation_timeout(timeout):
                session.commit_transaction()
        except PyMongoError as e:
            logger.error(f"Failed to commit transaction {transaction_id}: {e}")
            raise SessionError(
                f"Failed to commit transaction: {e}", transaction_id
            ) from e

        try:
            session.end_session()
        finally:
            with self._lock:
                self._sessions.pop(transaction_id, None)
        logger.info(f"Committed transaction {transaction_id}")

    def abort_transaction(
        self, transaction_id: str, timeout: Optional[float] = None
    ) -> None:
        """Abort the transaction, end its session and stop tracking it.

        The session is released even when the abort itself fails.
        """
        session = self.get_session(transaction_id)

        try:
            with operation_timeout(timeout):
                session.abort_transaction()
        except PyMongoError as e:
            logger.error(f"Failed to abort transaction {transaction_id}: {e}")
            raise SessionError(
                f"Failed to abort transaction: {e}", transaction_id
            ) from e
        finally:
            session.end_session()
            with self._lock:
                self._sessions.pop(transaction_id, None)
        logger.info(f"Aborted transaction {transaction_id}")

    def get_session(self, transaction_id: str) -> ClientSession:
        """Return the session tracked for an identifier.

        Raises:
            SessionError: If the identifier has no active transaction
        """
        with self._lock:
            session = self._sessions.get(transaction_id)
        if session is None:
            raise SessionError("Unknown transaction", transaction_id)
        return session

    def is_active(self, transaction_id: str) -> bool:
        with self._lock:
            return transaction_id in self._sessions

    def active_transactions(self) -> List[str]:
        with self._lock:
            return list(self._sessions)

    def abort_all(self) -> None:
        """Abort every tracked transaction. Failures are logged, not raised."""
        for transaction_id in self.active_transactions():
            try:
                self.abort_transaction(transaction_id)
            except SessionError as e:
                logger.warning(f"Error aborting transaction {transaction_id}: {e}")
