"""Process-wide document store client built from settings."""

from __future__ import annotations

import logging
from typing import Any, Optional

from .config import Settings
from .mongodb_document_client import MongoDBDocumentClient, new_client

logger = logging.getLogger(__name__)


def create_client_from_settings(
    settings: Optional[Settings] = None, **client_kwargs: Any
) -> MongoDBDocumentClient:
    """Create and connect a client configured from environment settings.

    Args:
        settings: Settings to use (loaded from the environment if omitted)
        **client_kwargs: Additional MongoClient configuration

    Returns:
        The connected client
    """
    settings = settings or Settings()
    kwargs = {
        "serverSelectionTimeoutMS": settings.server_selection_timeout_ms,
        "connectTimeoutMS": settings.connect_timeout_ms,
        **client_kwargs,
    }
    return new_client(
        settings.mongodb_connection_string,
        settings.ttl_seconds,
        database_name=settings.database_name,
        collection_name=settings.collection_name,
        ttl_field=settings.ttl_field,
        **kwargs,
    )


# Global client instance shared by the whole process
_global_client: Optional[MongoDBDocumentClient] = None


def initialize_global_client(
    settings: Optional[Settings] = None, **client_kwargs: Any
) -> MongoDBDocumentClient:
    """Initialize the global client instance.

    This should be called once during application startup.

    Args:
        settings: Settings to use (loaded from the environment if omitted)
        **client_kwargs: Additional MongoClient configuration

    Returns:
        The initialized global client
    """
    global _global_client

    if _global_client is not None:
        logger.warning("Global client already initialized, closing existing one")
        _global_client.close()
        _global_client = None

    _global_client = create_client_from_settings(settings, **client_kwargs)

    logger.info("Global document store client initialized")
    return _global_client


def get_global_client() -> MongoDBDocumentClient:
    """Get the global client instance.

    Raises:
        RuntimeError: If the client is not initialized
    """
    if _global_client is None:
        raise RuntimeError(
            "Global client not initialized. "
            "Call initialize_global_client() during startup."
        )
    return _global_client


def close_global_client() -> None:
    """Close the global client and clean up resources.

    This should be called during application shutdown.
    """
    global _global_client

    if _global_client is not None:
        client, _global_client = _global_client, None
        client.close()
        logger.info("Global client closed")
