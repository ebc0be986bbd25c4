"""
Contextual logging for MONGOISH.

Log records emitted through ``get_logger()`` carry the current correlation
id (one per unit of application work, e.g. a request or a test) and the
database/collection namespace the operation runs in.

    set_correlation_id("req-42")
    with namespace("animals", "frogs"):
        logger.warning("Rejected duplicate key")  # record.db_name == "animals"
"""

import contextvars
import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "mongoish_correlation_id", default=None
)
_namespace: contextvars.ContextVar[dict[str, str]] = contextvars.ContextVar(
    "mongoish_namespace", default={}
)


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set (or generate) the correlation id for the current context and return it."""
    correlation_id = correlation_id or uuid.uuid4().hex
    _correlation_id.set(correlation_id)
    return correlation_id


def clear_correlation_id() -> None:
    _correlation_id.set(None)


@contextmanager
def namespace(db_name: str, collection_name: str | None = None) -> Iterator[None]:
    """
    Tag log records inside the block with a database (and collection) name.

    Nested blocks override the outer namespace and restore it on exit.
    """
    current = {"db_name": db_name}
    if collection_name is not None:
        current["collection_name"] = collection_name
    token = _namespace.set(current)
    try:
        yield
    finally:
        _namespace.reset(token)


def get_logging_context() -> dict[str, Any]:
    """Return the fields ``get_logger()`` adds to each record."""
    context: dict[str, Any] = dict(_namespace.get())
    correlation_id = _correlation_id.get()
    if correlation_id is not None:
        context["correlation_id"] = correlation_id
    return context


class ContextualLoggerAdapter(logging.LoggerAdapter):
    """Merges the logging context into ``extra``; explicit ``extra`` keys win."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**get_logging_context(), **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(name: str) -> ContextualLoggerAdapter:
    return ContextualLoggerAdapter(logging.getLogger(name), {})
