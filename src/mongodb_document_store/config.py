"""Configuration management for the MongoDB document store.

All settings are read from environment variables prefixed with
``DOCUMENT_STORE_`` (or a ``.env`` file), with defaults suitable for a
local development server.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Document store settings loaded from environment variables."""

    # MongoDB Configuration
    mongodb_connection_string: str = "mongodb://localhost:27017/"
    database_name: str = "cogman"
    collection_name: str = "tasks"

    # TTL index
    ttl_seconds: int = 3600
    ttl_field: str = "created_at"

    # Driver timeouts
    server_selection_timeout_ms: int = 5000
    connect_timeout_ms: int = 10000

    # Logging Configuration
    log_level: str = "INFO"

    class Config:
        """Pydantic configuration."""
        env_prefix = "DOCUMENT_STORE_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
