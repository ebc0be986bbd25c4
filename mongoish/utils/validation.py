"""
Argument validation helpers for MONGOISH.

Each helper raises ``ValidationError`` with a message naming the calling
context, the argument and the violation, for example::

    get_database(): `name` 'myDb' fails /^[a-z][_a-z0-9]*$/

These messages are part of the public API, so callers can assert on them the
same way they would against a real driver.
"""

import re
from collections.abc import Mapping, Sequence
from typing import Any

from ..constants import (
    EMPTY_ID_VALUES,
    ID_FIELD,
    MAX_NAME_LENGTH,
    MAX_URL_LENGTH,
    MIN_NAME_LENGTH,
    MIN_URL_LENGTH,
    NAME_PATTERN,
    TRUNCATE_HEAD,
    TRUNCATE_OVER,
    TRUNCATE_TAIL,
    URL_PATTERN,
)
from ..exceptions import ValidationError


def _describe(value: str) -> str:
    """Shorten long values for display in error messages."""
    if len(value) > TRUNCATE_OVER:
        return f"{value[:TRUNCATE_HEAD]}...{value[-TRUNCATE_TAIL:]}"
    return value


def _type_error(value: Any, argument: str, context_name: str, expected: str) -> ValidationError:
    if value is None:
        detail = f"is None not type '{expected}'"
    else:
        detail = f"is type '{type(value).__name__}' not '{expected}'"
    return ValidationError(
        f"{context_name}: `{argument}` {detail}", context_name=context_name, argument=argument
    )


def validate_string(
    value: Any,
    argument: str,
    context_name: str,
    min_length: int | None = None,
    max_length: int | None = None,
    pattern: str | None = None,
) -> str:
    """
    Validate a string argument against length bounds and a pattern.

    Args:
        value: Value to validate
        argument: Argument name used in the error message
        context_name: Calling context used in the error message, e.g. ``"db()"``
        min_length: Optional minimum length
        max_length: Optional maximum length
        pattern: Optional regular expression the whole value must match

    Returns:
        The validated string

    Raises:
        ValidationError: If any check fails
    """
    if not isinstance(value, str):
        raise _type_error(value, argument, context_name, "str")

    def fail(detail: str) -> ValidationError:
        return ValidationError(
            f"{context_name}: `{argument}` '{_describe(value)}' {detail}",
            context_name=context_name,
            argument=argument,
        )

    if min_length is not None and len(value) < min_length:
        raise fail(f"is not min {min_length}")
    if max_length is not None and len(value) > max_length:
        raise fail(f"is not max {max_length}")
    if pattern is not None and not re.fullmatch(pattern, value):
        raise fail(f"fails /{pattern}/")
    return value


def validate_name(value: Any, argument: str, context_name: str) -> str:
    """Validate a database or collection name."""
    return validate_string(
        value,
        argument,
        context_name,
        min_length=MIN_NAME_LENGTH,
        max_length=MAX_NAME_LENGTH,
        pattern=NAME_PATTERN,
    )


def validate_url(value: Any, context_name: str) -> str:
    """Validate a Mongo-style connection url."""
    return validate_string(
        value,
        "url",
        context_name,
        min_length=MIN_URL_LENGTH,
        max_length=MAX_URL_LENGTH,
        pattern=URL_PATTERN,
    )


def validate_record(value: Any, argument: str, context_name: str) -> Mapping:
    """
    Validate that an argument is a record (a mapping).

    Strings, numbers, sequences and ``None`` are all rejected.
    """
    if isinstance(value, Mapping):
        return value
    if isinstance(value, (list, tuple)):
        raise ValidationError(
            f"{context_name}: `{argument}` is a {type(value).__name__} not a mapping",
            context_name=context_name,
            argument=argument,
        )
    raise _type_error(value, argument, context_name, "dict")


def validate_records(value: Any, argument: str, context_name: str) -> Sequence[Mapping]:
    """Validate that an argument is a list or tuple of records."""
    if not isinstance(value, (list, tuple)):
        raise _type_error(value, argument, context_name, "list")
    for i, item in enumerate(value):
        validate_record(item, f"{argument}[{i}]", context_name)
    return value


def has_id(document: Mapping) -> bool:
    """Return True if ``document`` carries a non-empty ``_id``."""
    return document.get(ID_FIELD) not in EMPTY_ID_VALUES
