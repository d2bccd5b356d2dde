"""Exceptions raised by the MongoDB document store."""

from __future__ import annotations

from typing import Any, Dict, Optional


class DocumentStoreError(RuntimeError):
    """Base exception for document store errors.

    Attributes:
        message: Error message
        context: Optional dictionary with additional context (collection, index, ...)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class StoreConnectionError(DocumentStoreError):
    """Raised when connecting, pinging or disconnecting fails."""


class StoreIndexError(DocumentStoreError):
    """Raised when an index cannot be created, dropped or listed."""


class SessionError(DocumentStoreError):
    """Raised when a tracked transaction cannot be started, committed or aborted.

    Also raised for lookups against an unknown transaction identifier and for
    attempts to start a transaction whose identifier is already active.
    """

    def __init__(
        self,
        message: str,
        transaction_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if transaction_id is not None:
            context["transaction_id"] = transaction_id
        super().__init__(message, context=context)
        self.transaction_id = transaction_id


class NotFoundError(DocumentStoreError):
    """Raised when a query matched zero documents."""


class StoreWriteError(DocumentStoreError):
    """Raised when an insert, replace or update fails."""


class StoreQueryError(DocumentStoreError):
    """Raised when a find or aggregate fails."""
