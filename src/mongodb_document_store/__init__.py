"""MongoDB data-access layer for a single document collection."""

from .config import Settings
from .document_cursor import DocumentCursor
from .exceptions import (
    DocumentStoreError,
    NotFoundError,
    SessionError,
    StoreConnectionError,
    StoreIndexError,
    StoreQueryError,
    StoreWriteError,
)
from .mongodb_client_factory import (
    close_global_client,
    create_client_from_settings,
    get_global_client,
    initialize_global_client,
)
from .mongodb_connection import MongoDBConnection
from .mongodb_document_client import MongoDBDocumentClient, new_client
from .mongodb_document_repository import MongoDBDocumentRepository
from .mongodb_index_manager import (
    TTL_INDEX_NAME,
    IndexDescriptor,
    IndexKey,
    MongoDBIndexManager,
)
from .transaction_tracker import TransactionTracker

__all__ = [
    # Core classes
    "MongoDBDocumentClient",
    "MongoDBConnection",
    "MongoDBIndexManager",
    "MongoDBDocumentRepository",
    "TransactionTracker",
    "DocumentCursor",
    "IndexDescriptor",
    "IndexKey",
    "TTL_INDEX_NAME",
    "Settings",
    # Factory functions
    "new_client",
    "create_client_from_settings",
    "initialize_global_client",
    "get_global_client",
    "close_global_client",
    # Exceptions
    "DocumentStoreError",
    "StoreConnectionError",
    "StoreIndexError",
    "SessionError",
    "NotFoundError",
    "StoreWriteError",
    "StoreQueryError",
]

__version__ = "0.1.0"
