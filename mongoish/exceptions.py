"""
Custom exceptions for MONGOISH.

Every failure the client, database and collection layers detect is raised as
one of these types. Errors raised by an injected storage engine are passed
through unchanged and are not part of this hierarchy.
"""

from typing import Any, Dict, Optional

from pymongo import errors as pymongo_errors

from .constants import DUPLICATE_KEY_CODE


class MongoishError(RuntimeError):
    """
    Base exception for MONGOISH errors.

    Attributes:
        message: Error message, without the context suffix
        context: Extra key/value details (engine name, collection, ...),
            rendered after the message by ``str()``
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} (context: {details})"


class ValidationError(MongoishError, ValueError):
    """
    Raised when an argument has the wrong shape, type, length or pattern.

    The message is part of the public contract: it names the calling
    context, the argument and the nature of the violation, e.g.
    ``get_database(): `name` '1_db' fails /^[a-z][_a-z0-9]*$/``.

    Attributes:
        context_name: Calling context, e.g. ``"get_database()"``
        argument: Argument name, e.g. ``"name"``
    """

    def __init__(
        self,
        message: str,
        context_name: Optional[str] = None,
        argument: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.context_name = context_name
        self.argument = argument


class InvalidEngineError(ValidationError):
    """Raised when ``bind_engine()`` is given an unusable factory, name or version."""


class NotConnectedError(MongoishError):
    """Raised when an operation runs while the owning client is disconnected."""

    def __init__(self, context_name: str) -> None:
        super().__init__(f"{context_name}: Client must be connected before running operations")
        self.context_name = context_name


class EngineNotBoundError(MongoishError):
    """Raised when ``connect()``, ``close()`` or ``get_database()`` run before ``bind_engine()``."""

    def __init__(self, context_name: str) -> None:
        super().__init__(
            f"{context_name}: A real database engine must be bound, using `bind_engine()`"
        )
        self.context_name = context_name


class AlreadyBoundError(MongoishError):
    """Raised on a second ``bind_engine()`` call for the same client."""

    def __init__(self, name: str, version: str) -> None:
        super().__init__(
            "bind_engine(): A database engine has already been bound, "
            "`bind_engine()` can only be called once per client"
        )
        self.bound_name = name
        self.bound_version = version


class DuplicateKeyError(MongoishError, pymongo_errors.DuplicateKeyError):
    """
    Raised when a write would introduce a second document with the same ``_id``.

    Subclasses pymongo's ``DuplicateKeyError`` so application code written
    against a real server catches it unchanged. ``code`` is always 11000.

    Attributes:
        collection_name: Collection the write targeted
        key_value: The offending ``_id``
        index: Position of the colliding document in an ``insert_many()`` batch
        duplicate_of: Earlier position it collided with (intra-batch only)
    """

    def __init__(
        self,
        message: str,
        collection_name: str,
        key_value: Any,
        index: Optional[int] = None,
        duplicate_of: Optional[int] = None,
    ) -> None:
        MongoishError.__init__(self, message)
        pymongo_errors.DuplicateKeyError.__init__(self, message, code=DUPLICATE_KEY_CODE)
        self.collection_name = collection_name
        self.key_value = key_value
        self.index = index
        self.duplicate_of = duplicate_of

    def __str__(self) -> str:
        return self.message


class ConfigurationError(MongoishError):
    """
    Raised when ``ClientConfig`` values are invalid or name an unknown engine.

    Attributes:
        config_key: Offending field (``"url"``, ``"engine"``, ``"id_length"``), if known
        config_value: Offending value, if known
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = dict(context or {})
        if config_key:
            details["config_key"] = config_key
        if config_value is not None:
            details["config_value"] = config_value
        super().__init__(message, context=details)
        self.config_key = config_key
        self.config_value = config_value
