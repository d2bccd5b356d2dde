"""Index management for the document store collection."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pymongo import ASCENDING, DESCENDING, IndexModel
from pymongo.errors import PyMongoError

from .exceptions import StoreIndexError
from .mongodb_connection import MongoDBConnection

logger = logging.getLogger(__name__)

TTL_INDEX_NAME = "TTL"


@dataclass
class IndexKey:
    """A single indexed field and its sort direction."""

    field: str
    descending: bool = False

    @property
    def direction(self) -> int:
        return DESCENDING if self.descending else ASCENDING


@dataclass
class IndexDescriptor:
    """Declaration of a secondary index on the collection."""

    keys: List[IndexKey] = field(default_factory=list)
    name: Optional[str] = None
    unique: bool = False
    sparse: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> IndexDescriptor:
        """Build a descriptor from its wire shape.

        ``{"keys": [{"field": ..., "descending": ...}], "name": ..., "unique": ..., "sparse": ...}``
        """
        keys = [
            IndexKey(field=k["field"], descending=bool(k.get("descending", False)))
            for k in data.get("keys", [])
        ]
        return cls(
            keys=keys,
            name=data.get("name") or None,
            unique=bool(data.get("unique", False)),
            sparse=bool(data.get("sparse", False)),
        )

    def to_model(self) -> IndexModel:
        if not self.keys:
            raise StoreIndexError(
                "Index descriptor has no keys", context={"index_name": self.name}
            )
        options: Dict[str, Any] = {"unique": self.unique, "sparse": self.sparse}
        if self.name:
            options["name"] = self.name
        return IndexModel([(k.field, k.direction) for k in self.keys], **options)


class MongoDBIndexManager:
    """Creates, drops and lists indices on the bound collection."""

    def __init__(self, connection: MongoDBConnection) -> None:
        self.connection = connection

    def set_ttl(self) -> str:
        """(Re)create the TTL index with the connection's expiry window.

        Any existing index named "TTL" is dropped first; failures to drop are
        ignored so the operation can be re-applied.

        Returns:
            The name of the created index
        """
        collection = self.connection.collection
        try:
            collection.drop_index(TTL_INDEX_NAME)
        except PyMongoError as e:
            logger.debug(f"No previous TTL index dropped: {e}")

        try:
            name = collection.create_index(
                [(self.connection.ttl_field, ASCENDING)],
                name=TTL_INDEX_NAME,
                expireAfterSeconds=self.connection.ttl_seconds,
            )
        except PyMongoError as e:
            logger.error(f"Failed to create TTL index: {e}")
            raise StoreIndexError(
                f"Failed to create TTL index: {e}",
                context={
                    "collection": self.connection.collection_name,
                    "index_name": TTL_INDEX_NAME,
                },
            ) from e

        logger.info(
            f"TTL index set on '{self.connection.ttl_field}' "
            f"(expireAfterSeconds={self.connection.ttl_seconds})"
        )
        return name

    def ensure_indices(
        self, indices: Iterable[Union[IndexDescriptor, Mapping[str, Any]]]
    ) -> List[str]:
        """Create all given indices in a single batch.

        Args:
            indices: Index descriptors, or dictionaries in the descriptor wire shape

        Returns:
            Names of the created indices

        Raises:
            StoreIndexError: If any index is rejected; the batch is not partially reported
        """
        descriptors = [
            ind if isinstance(ind, IndexDescriptor) else IndexDescriptor.from_dict(ind)
            for ind in indices
        ]
        models = [ind.to_model() for ind in descriptors]
        if not models:
            return []

        collection = self.connection.collection
        try:
            names = collection.create_indexes(models)
        except PyMongoError as e:
            logger.error(f"Failed to create indexes: {e}")
            raise StoreIndexError(
                f"Failed to create indexes: {e}",
                context={"collection": self.connection.collection_name},
            ) from e

        logger.info(f"MongoDB indexes created successfully: {names}")
        return names

    def drop_indices(self) -> None:
        """Drop every index on the collection except the default _id index."""
        collection = self.connection.collection
        try:
            collection.drop_indexes()
        except PyMongoError as e:
            logger.error(f"Failed to drop indexes: {e}")
            raise StoreIndexError(
                f"Failed to drop indexes: {e}",
                context={"collection": self.connection.collection_name},
            ) from e
        logger.info(f"Dropped indexes on {self.connection.collection_name}")

    def list_indices(self) -> Dict[str, Any]:
        try:
            return self.connection.collection.index_information()
        except PyMongoError as e:
            logger.error(f"Failed to list indexes: {e}")
            raise StoreIndexError(
                f"Failed to list indexes: {e}",
                context={"collection": self.connection.collection_name},
            ) from e
