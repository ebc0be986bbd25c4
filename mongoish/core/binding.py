"""
Storage engine binding.

A storage engine is any zero-argument factory (usually a class) whose
instances provide ``insert_one``, ``insert_many``, ``find`` and ``count``,
and which carries two non-empty strings, ``NAME`` and ``VERSION``, on the
factory itself.

Binding validates only those three facts. The instance surface is not
inspected: an engine missing a method fails the first time a ``Collection``
calls it, with whatever error Python raises.

This module is part of MONGOISH.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, ClassVar, Protocol, runtime_checkable

from ..exceptions import InvalidEngineError


@runtime_checkable
class EngineCursor(Protocol):
    """Lazy handle to a query's matching documents."""

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        ...


@runtime_checkable
class StorageEngine(Protocol):
    """
    Capability interface for an injectable in-memory storage engine.

    One instance backs exactly one ``Collection``. Engine-generated ids must
    be short lowercase alphanumeric tokens (1-12 characters).
    """

    NAME: ClassVar[str]
    VERSION: ClassVar[str]

    async def insert_one(self, document: Mapping[str, Any]) -> list[dict[str, Any]]:
        ...

    async def insert_many(self, documents: list[Mapping[str, Any]]) -> list[dict[str, Any]]:
        ...

    def find(self, filter: Mapping[str, Any]) -> EngineCursor:
        ...

    async def count(self, filter: Mapping[str, Any]) -> int:
        ...


@dataclass(frozen=True)
class EngineBinding:
    """
    A validated engine factory and its identifiers.

    A binding with empty identifiers is not bound, whatever its factory.
    """

    factory: Callable[[], Any] | None
    name: str
    version: str

    @property
    def is_bound(self) -> bool:
        return bool(self.name) and bool(self.version)

    def create_engine(self) -> Any:
        """Instantiate a fresh engine for a new collection."""
        return self.factory()


# Placeholder used before bind_engine(); stateless, recognised by its empty identifiers.
_NO_ENGINE = EngineBinding(factory=None, name="", version="")


def unbound() -> EngineBinding:
    """Return the placeholder binding every new client starts with."""
    return _NO_ENGINE


def make_binding(
    factory: Any, name: str | None = None, version: str | None = None
) -> EngineBinding:
    """
    Validate an engine factory and build its binding.

    Args:
        factory: Zero-argument callable producing engine instances
        name: Engine name (defaults to ``factory.NAME``)
        version: Engine version (defaults to ``factory.VERSION``)

    Returns:
        EngineBinding for the factory

    Raises:
        InvalidEngineError: If the factory is not callable, or the name or
            version is missing, not a string, or empty
    """
    context_name = "bind_engine()"

    if factory is None:
        raise InvalidEngineError(
            f"{context_name}: `factory` is None not type 'callable'",
            context_name=context_name,
            argument="factory",
        )
    if not callable(factory):
        raise InvalidEngineError(
            f"{context_name}: `factory` is type '{type(factory).__name__}' not 'callable'",
            context_name=context_name,
            argument="factory",
        )

    resolved = {
        "NAME": name if name is not None else getattr(factory, "NAME", None),
        "VERSION": version if version is not None else getattr(factory, "VERSION", None),
    }
    for attribute, value in resolved.items():
        argument = f"factory.{attribute}"
        if not isinstance(value, str):
            detail = (
                "is None not type 'str'"
                if value is None
                else f"is type '{type(value).__name__}' not 'str'"
            )
            raise InvalidEngineError(
                f"{context_name}: `{argument}` {detail}",
                context_name=context_name,
                argument=argument,
            )
        if not value:
            raise InvalidEngineError(
                f"{context_name}: `{argument}` '' is not min 1",
                context_name=context_name,
                argument=argument,
            )

    return EngineBinding(factory=factory, name=resolved["NAME"], version=resolved["VERSION"])
