"""
Database namespace.

A ``Database`` is a named handle owned by a ``MongoishClient``. It lazily
creates one ``Collection`` per name and returns that same instance on every
later request until the database is dropped.

This module is part of MONGOISH.
"""

import logging
from typing import TYPE_CHECKING

from ..exceptions import NotConnectedError
from ..utils.validation import validate_name
from .collection import Collection

if TYPE_CHECKING:
    from ..core.client import MongoishClient

logger = logging.getLogger(__name__)


class Database:
    """
    A MongoDB-style database backed by per-collection engine instances.

    Example:
        db = client.get_database("animals")
        frogs = db.get_collection("frogs")  # or db["frogs"], or db.frogs
        assert db.get_collection("frogs") is frogs
    """

    def __init__(self, client: "MongoishClient", name: str) -> None:
        """
        Args:
            client: The client that created this database
            name: Database name, already validated by the client
        """
        self.client = client
        self.name = name
        self._collections: dict[str, Collection] = {}

    def get_collection(self, name: str) -> Collection:
        """
        Get a collection by name, creating it on first access.

        Args:
            name: Collection name (same policy as database names)

        Returns:
            The cached Collection for ``name``

        Raises:
            ValidationError: If ``name`` is malformed
            NotConnectedError: If the client is not connected
        """
        context_name = "get_collection()"
        validate_name(name, "name", context_name)
        if not self.client.is_connected:
            raise NotConnectedError(context_name)

        if name in self._collections:
            return self._collections[name]

        collection = Collection(self, name)
        self._collections[name] = collection
        logger.debug(f"Created collection '{self.name}.{name}'")
        return collection

    def __getitem__(self, name: str) -> Collection:
        return self.get_collection(name)

    def __getattr__(self, name: str) -> Collection:
        """
        Allow direct access to collections as attributes.

        Example:
            db.frogs.insert_one({...})  # same as db.get_collection("frogs")

        Only private names raise ``AttributeError``. Any other name goes
        through ``get_collection()``, so ``hasattr(db, "Frogs")`` or
        ``getattr(db, "frogs", None)`` raise ``ValidationError`` for an invalid
        name and ``NotConnectedError`` while the client is disconnected.
        Use ``db["name"]`` or ``get_collection()`` when that matters.
        """
        # Only proxy collection names, not internal attributes
        if name.startswith("_") or name in ("client", "name"):
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")
        return self.get_collection(name)

    async def drop_database(self) -> bool:
        """
        Drop every collection of this database.

        Later ``get_collection()`` calls create fresh, empty collections.

        Returns:
            True
        """
        dropped = len(self._collections)
        self._collections = {}
        logger.info(f"Dropped database '{self.name}' ({dropped} collections)")
        return True

    def list_collection_names(self) -> list[str]:
        """Return the names of all collections, in order of first access."""
        return list(self._collections)

    def __repr__(self) -> str:
        return f"Database(name={self.name!r}, collections={self.list_collection_names()!r})"
