"""
In-memory MongoDB-style client.

``MongoishClient`` behaves like motor's ``AsyncIOMotorClient`` as far as the
basics go, but instead of talking to a server it hands every collection its
own instance of an injected storage engine.

Using a real MongoDB::

    client = AsyncIOMotorClient("mongodb://localhost:27017")

Using mongoish::

    client = MongoishClient("mongodb://localhost:27017")
    client.bind_engine(MemoryEngine)
    await client.connect()

This module is part of MONGOISH.
"""

import asyncio
import functools
import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, Optional

from ..exceptions import AlreadyBoundError, EngineNotBoundError, NotConnectedError
from ..observability import get_logger as get_contextual_logger
from ..observability import timed_operation
from ..utils.validation import validate_name, validate_url
from .binding import EngineBinding, make_binding, unbound

if TYPE_CHECKING:
    from ..config import ClientConfig
    from ..database import Database

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)


async def _next_tick() -> None:
    """Suspend for one event-loop iteration, standing in for a network round-trip."""
    await asyncio.sleep(0)


class MongoishClient:
    """
    Owns connection state and exactly one storage-engine binding.

    States: unbound, bound and disconnected, bound and connected. Nothing but
    construction and ``bind_engine()`` works until an engine is bound, and
    nothing touching data works until ``connect()`` has completed.

    ``connect()`` and ``close()`` raise binding errors immediately and return
    an awaitable for the rest, so code that forgets to await them sees the
    same race it would see against a real server.
    """

    def __init__(self, url: str) -> None:
        """
        Create a client.

        Args:
            url: Connection url. Not used for anything, but validated so a
                later switch to a real driver does not hide a bad url.

        Raises:
            ValidationError: If ``url`` is not a valid Mongo-style url
        """
        self.url = validate_url(url, "MongoishClient()")
        self._binding: EngineBinding = unbound()
        self._is_connected: bool = False

    @classmethod
    def from_config(cls, config: Optional["ClientConfig"] = None) -> "MongoishClient":
        """
        Build a client from configuration and bind the engine it names.

        Args:
            config: Optional ClientConfig (defaults to ``ClientConfig.from_env()``)

        Returns:
            A bound, disconnected client
        """
        from ..config import ClientConfig
        from ..engines import get_engine

        config = config or ClientConfig.from_env()
        engine_cls = get_engine(config.engine)
        client = cls(config.url)
        client.bind_engine(
            functools.partial(engine_cls, id_length=config.id_length),
            engine_cls.NAME,
            engine_cls.VERSION,
        )
        return client

    # ------------------------------------------------------------------
    # Engine binding
    # ------------------------------------------------------------------

    def bind_engine(
        self, factory: Any, name: str | None = None, version: str | None = None
    ) -> None:
        """
        Bind a storage engine factory to this client. Can only be done once.

        Args:
            factory: Zero-argument callable (usually a class) producing engines
            name: Engine name (defaults to ``factory.NAME``)
            version: Engine version (defaults to ``factory.VERSION``)

        Raises:
            AlreadyBoundError: If an engine is already bound
            InvalidEngineError: If the factory, name or version is unusable
        """
        if self._binding.is_bound:
            raise AlreadyBoundError(self._binding.name, self._binding.version)

        self._binding = make_binding(factory, name, version)
        contextual_logger.info(
            "Storage engine bound",
            extra={"engine_name": self._binding.name, "engine_version": self._binding.version},
        )

    @property
    def engine_name(self) -> str:
        return self._binding.name

    @property
    def engine_version(self) -> str:
        return self._binding.version

    @property
    def is_connected(self) -> bool:
        return self._is_connected

    def _require_engine(self, context_name: str) -> EngineBinding:
        if not self._binding.is_bound:
            raise EngineNotBoundError(context_name)
        return self._binding

    def _create_engine(self) -> Any:
        """Instantiate a fresh engine from the bound factory, for a new collection."""
        engine = self._require_engine("get_collection()").create_engine()
        logger.debug(f"Created {self._binding.name} {self._binding.version} engine instance")
        return engine

    def _require_connected(self, context_name: str) -> None:
        if not self._is_connected:
            raise NotConnectedError(context_name)

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> Awaitable[None]:
        """
        Connect the client.

        The client only counts as connected once the returned awaitable has
        completed, at least one event-loop iteration later.

        Raises:
            EngineNotBoundError: If no engine has been bound
        """
        self._require_engine("connect()")
        return self._connect()

    @timed_operation("client.connect")
    async def _connect(self) -> None:
        await _next_tick()
        self._is_connected = True
        contextual_logger.info("Client connected", extra={"engine_name": self._binding.name})

    def close(self) -> Awaitable[None]:
        """
        Disconnect the client.

        The client counts as disconnected immediately; the returned awaitable
        still suspends once, mirroring ``connect()``.

        Raises:
            EngineNotBoundError: If no engine has been bound
        """
        self._require_engine("close()")
        self._is_connected = False
        return self._close()

    @timed_operation("client.close")
    async def _close(self) -> None:
        await _next_tick()
        contextual_logger.info("Client closed", extra={"engine_name": self._binding.name})

    async def __aenter__(self) -> "MongoishClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Databases
    # ------------------------------------------------------------------

    def get_database(self, name: str) -> "Database":
        """
        Return a new ``Database`` handle.

        Handles are not cached: two calls with the same name return two
        different objects, each with its own collections.

        Args:
            name: Database name (lowercase letter, then lowercase letters,
                digits or underscores; at most 64 characters)

        Raises:
            EngineNotBoundError: If no engine has been bound
            ValidationError: If ``name`` is malformed
            NotConnectedError: If the client is not connected
        """
        from ..database import Database

        context_name = "get_database()"
        self._require_engine(context_name)
        validate_name(name, "name", context_name)
        self._require_connected(context_name)
        logger.debug(f"Opening database handle '{name}'")
        return Database(self, name)

    def __getitem__(self, name: str) -> "Database":
        return self.get_database(name)

    def __repr__(self) -> str:
        return (
            f"MongoishClient(url={self.url!r}, engine={self._binding.name or None!r}, "
            f"connected={self._is_connected})"
        )
