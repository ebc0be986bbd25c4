"""
In-memory storage engine.

``MemoryEngine`` is the engine bundled with MONGOISH. One instance stores
the documents of one collection in insertion order and evaluates filters
with ``compile_filter()``.

It knows nothing about ``_id`` uniqueness; ``Collection`` checks that before
any write reaches the engine.
"""

import copy
import logging
import secrets
from collections.abc import Mapping
from typing import Any, AsyncIterator, ClassVar

from .. import __version__
from ..constants import DEFAULT_ID_LENGTH, EMPTY_ID_VALUES, ID_ALPHABET, ID_FIELD, MAX_ID_LENGTH
from .query import compile_filter

logger = logging.getLogger(__name__)


class MemoryCursor:
    """
    Lazy cursor over a ``MemoryEngine``.

    The filter is compiled and evaluated only when the cursor is consumed,
    so a malformed operator raises from ``to_list()`` or iteration, not from
    ``find()``.
    """

    def __init__(self, engine: "MemoryEngine", filter: Mapping[str, Any]) -> None:
        self._engine = engine
        self._filter = filter

    def _matching(self) -> list[dict[str, Any]]:
        predicate = compile_filter(self._filter)
        return [copy.deepcopy(doc) for doc in self._engine._documents if predicate(doc)]

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        """
        Drain the cursor.

        Args:
            length: Optional maximum number of documents to return

        Returns:
            Matching documents in insertion order
        """
        documents = self._matching()
        if length is not None:
            documents = documents[:length]
        return documents

    async def __aiter__(self) -> AsyncIterator[dict[str, Any]]:
        for document in self._matching():
            yield document


class MemoryEngine:
    """
    Stores documents in a list; one instance per collection.

    Documents are deep-copied on the way in and on the way out, so callers
    never share state with the store. A document without an ``_id`` (or with
    an empty one) is stored with a generated lowercase alphanumeric id,
    placed first.
    """

    NAME: ClassVar[str] = "memory"
    VERSION: ClassVar[str] = __version__

    def __init__(self, id_length: int = DEFAULT_ID_LENGTH) -> None:
        if not 1 <= id_length <= MAX_ID_LENGTH:
            raise ValueError(f"id_length must be between 1 and {MAX_ID_LENGTH}, got {id_length}")
        self.id_length = id_length
        self._documents: list[dict[str, Any]] = []
        self._generated: set[str] = set()

    def _generate_id(self) -> str:
        while True:
            token = "".join(secrets.choice(ID_ALPHABET) for _ in range(self.id_length))
            if token not in self._generated:
                self._generated.add(token)
                return token

    def _prepare(self, document: Mapping[str, Any]) -> dict[str, Any]:
        stored = copy.deepcopy(dict(document))
        if stored.get(ID_FIELD) in EMPTY_ID_VALUES:
            stored.pop(ID_FIELD, None)
            stored = {ID_FIELD: self._generate_id(), **stored}
        return stored

    async def insert_one(self, document: Mapping[str, Any]) -> list[dict[str, Any]]:
        """Store one document; returns a one-element list holding the stored copy."""
        stored = self._prepare(document)
        self._documents.append(stored)
        return [copy.deepcopy(stored)]

    async def insert_many(self, documents: list[Mapping[str, Any]]) -> list[dict[str, Any]]:
        """Store a batch of documents, in order; returns the stored copies."""
        stored = [self._prepare(document) for document in documents]
        self._documents.extend(stored)
        return copy.deepcopy(stored)

    def find(self, filter: Mapping[str, Any]) -> MemoryCursor:
        return MemoryCursor(self, filter)

    async def count(self, filter: Mapping[str, Any]) -> int:
        predicate = compile_filter(filter)
        return sum(1 for document in self._documents if predicate(document))

    def __len__(self) -> int:
        return len(self._documents)
