"""
Collection write/read surface.

A ``Collection`` wraps one instance of the client's storage engine and
enforces ``_id`` uniqueness before anything reaches the engine: within an
``insert_many()`` batch, and against documents already stored.

Argument and connection checks run synchronously, before the returned
awaitable is first scheduled, so a rejected call never mutates anything.
Errors raised by the engine itself are passed through unchanged.

This module is part of MONGOISH.
"""

import logging
from collections.abc import Awaitable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from ..constants import ID_FIELD
from ..exceptions import DuplicateKeyError, NotConnectedError
from ..observability import get_logger as get_contextual_logger
from ..observability import namespace, timed_operation
from ..utils.validation import has_id, validate_record, validate_records

if TYPE_CHECKING:
    from ..core.binding import EngineCursor
    from .database import Database

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)


def _batch_key(value: Any) -> Any:
    """
    Key used to spot repeated ``_id`` values in a batch; tolerates unhashable ids.

    Booleans are kept apart from the numbers they compare equal to, matching
    how stored documents are matched (``True`` is not ``1``).
    """
    try:
        hash(value)
    except TypeError:
        return (type(value).__name__, repr(value))
    return (isinstance(value, bool), value)


class Collection:
    """
    A MongoDB-style collection backed by its own storage engine instance.

    Example:
        frogs = client.get_database("animals").get_collection("frogs")
        await frogs.insert_many([{"_id": "0", "fact": "..."}])
        docs = await frogs.find({"fact": {"$gte": "T", "$lt": "U"}}).to_list()
    """

    def __init__(self, database: "Database", name: str) -> None:
        """
        Create a collection and the engine instance that stores its documents.

        Args:
            database: The database that owns this collection
            name: Collection name, already validated by the database
        """
        self.database = database
        self.name = name
        self._engine = database.client._create_engine()

    @property
    def client(self):
        return self.database.client

    @property
    def full_name(self) -> str:
        return f"{self.database.name}.{self.name}"

    def _require_connected(self, context_name: str) -> None:
        # Read at call time, never cached: close() must take effect immediately.
        if not self.client.is_connected:
            raise NotConnectedError(context_name)

    def _duplicate_key_error(
        self,
        context_name: str,
        key: Any,
        index: int | None = None,
        duplicate_of: int | None = None,
    ) -> DuplicateKeyError:
        message = (
            f"{context_name}: E11000 duplicate key error collection: "
            f"{self.name}.documents index: _id_ dup key: {{ _id: \"{key}\" }}"
        )
        if index is not None and duplicate_of is not None:
            message += f" (`documents[{index}]` duplicates `documents[{duplicate_of}]`)"
        with namespace(self.database.name, self.name):
            contextual_logger.warning("Rejected duplicate key", extra={"key_value": repr(key)})
        return DuplicateKeyError(
            message,
            collection_name=self.name,
            key_value=key,
            index=index,
            duplicate_of=duplicate_of,
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert_one(self, document: Mapping[str, Any]) -> Awaitable[dict[str, Any]]:
        """
        Insert a single document.

        Args:
            document: The document to insert. If it has no ``_id`` (or an
                empty one) the engine generates one.

        Returns:
            Awaitable resolving to ``{"acknowledged": True, "inserted_id": id}``

        Raises:
            ValidationError: If ``document`` is not a mapping
            NotConnectedError: If the client is not connected
            DuplicateKeyError: (when awaited) if ``_id`` is already stored
        """
        context_name = "insert_one()"
        validate_record(document, "document", context_name)
        self._require_connected(context_name)
        return self._insert_one(document)

    @timed_operation("collection.insert_one", namespace_attr="full_name")
    async def _insert_one(self, document: Mapping[str, Any]) -> dict[str, Any]:
        if has_id(document):
            key = document[ID_FIELD]
            if await self._engine.count({ID_FIELD: {"$eq": key}}):
                raise self._duplicate_key_error("insert_one()", key)

        inserted = await self._engine.insert_one(document)
        inserted_id = inserted[0][ID_FIELD]
        logger.debug(f"Inserted one document into '{self.full_name}'")
        return {"acknowledged": True, "inserted_id": inserted_id}

    def insert_many(self, documents: Sequence[Mapping[str, Any]]) -> Awaitable[dict[str, Any]]:
        """
        Insert a batch of documents.

        Duplicate ``_id`` values are checked in two phases: first within the
        batch, in input order, where the first repeat wins; then against
        stored documents, with a single engine query. Only if both pass is
        the batch handed to the engine, in one call.

        Args:
            documents: List or tuple of documents

        Returns:
            Awaitable resolving to ``{"acknowledged": True, "inserted_count": n,
            "inserted_ids": {index: id}}`` with one entry per input document

        Raises:
            ValidationError: If ``documents`` is not a sequence of mappings
            NotConnectedError: If the client is not connected
            DuplicateKeyError: If two documents of the batch share an ``_id``,
                or (when awaited) if any ``_id`` is already stored
        """
        context_name = "insert_many()"
        validate_records(documents, "documents", context_name)
        self._require_connected(context_name)

        seen: dict[Any, int] = {}
        ids: list[Any] = []
        for index, document in enumerate(documents):
            if not has_id(document):
                continue
            key = document[ID_FIELD]
            batch_key = _batch_key(key)
            if batch_key in seen:
                raise self._duplicate_key_error(
                    context_name, key, index=index, duplicate_of=seen[batch_key]
                )
            seen[batch_key] = index
            ids.append(key)

        return self._insert_many(list(documents), ids)

    @timed_operation("collection.insert_many", namespace_attr="full_name")
    async def _insert_many(self, documents: list[Mapping[str, Any]], ids: list[Any]) -> dict[str, Any]:
        if ids:
            # The engine decides the order; the first document it returns is reported.
            existing = await self._engine.find({ID_FIELD: {"$in": ids}}).to_list()
            if existing:
                raise self._duplicate_key_error("insert_many()", existing[0][ID_FIELD])

        inserted = await self._engine.insert_many(documents)
        inserted_ids = {index: document[ID_FIELD] for index, document in enumerate(inserted)}
        logger.debug(f"Inserted {len(inserted)} documents into '{self.full_name}'")
        return {
            "acknowledged": True,
            "inserted_count": len(inserted),
            "inserted_ids": inserted_ids,
        }

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find(self, filter: Mapping[str, Any] | None = None) -> "EngineCursor":
        """
        Create a cursor over documents matching ``filter``.

        Filter operators are evaluated by the engine. A malformed operator
        raises the engine's own error when the cursor is consumed.

        Args:
            filter: Query filter (defaults to ``{}``, all documents)

        Returns:
            The engine's cursor; drain it with ``await cursor.to_list()``

        Raises:
            ValidationError: If ``filter`` is not a mapping
            NotConnectedError: If the client is not connected
        """
        context_name = "find()"
        filter = {} if filter is None else validate_record(filter, "filter", context_name)
        self._require_connected(context_name)
        return self._engine.find(filter)

    def count_documents(self, filter: Mapping[str, Any] | None = None) -> Awaitable[int]:
        """
        Count documents matching ``filter``.

        Raises:
            ValidationError: If ``filter`` is not a mapping
            NotConnectedError: If the client is not connected
        """
        context_name = "count_documents()"
        filter = {} if filter is None else validate_record(filter, "filter", context_name)
        self._require_connected(context_name)
        return self._engine.count(filter)

    def __repr__(self) -> str:
        return f"Collection(name={self.full_name!r})"
