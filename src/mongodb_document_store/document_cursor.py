"""Forward-only cursor over documents returned by list and aggregate."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional, Union

from pymongo.command_cursor import CommandCursor
from pymongo.cursor import Cursor
from pymongo.errors import PyMongoError

from .exceptions import StoreQueryError
from .mongodb_connection import operation_timeout

logger = logging.getLogger(__name__)


class DocumentCursor:
    """Wraps a pymongo cursor, translating driver errors to StoreQueryError.

    The cursor is lazy and cannot be restarted. Callers must drain or close
    it; using it as a context manager closes it on exit.

    When a timeout (seconds) is given, every fetch made while iterating runs
    under it, so getMore round trips are bounded as well as the first batch.
    """

    def __init__(
        self, cursor: Union[Cursor, CommandCursor], timeout: Optional[float] = None
    ) -> None:
        self._cursor = cursor
        self.timeout = timeout

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        return self

    def __next__(self) -> Dict[str, Any]:
        try:
            with operation_timeout(self.timeout):
                return next(self._cursor)
        except PyMongoError as e:
            logger.error(f"Cursor iteration failed: {e}")
            raise StoreQueryError(f"Cursor iteration failed: {e}") from e

    def __enter__(self) -> DocumentCursor:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def alive(self) -> bool:
        return self._cursor.alive

    def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        """Drain up to ``length`` documents (all when None) into a list."""
        documents: List[Dict[str, Any]] = []
        for doc in self:
            documents.append(doc)
            if length is not None and len(documents) >= length:
                break
        return documents

    def close(self) -> None:
        self._cursor.close()
