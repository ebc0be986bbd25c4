"""
Filter evaluation for the in-memory engine.

``compile_filter()`` turns a MongoDB-style filter into a predicate over
documents. Supported:

- equality on (dotted) field paths, including array membership
- ``$eq``, ``$ne``, ``$gt``, ``$gte``, ``$lt``, ``$lte``, ``$in``, ``$nin``, ``$exists``
- top-level ``$and``, ``$or``, ``$nor``

Ordering comparisons only match values of the same type bracket (numbers
with numbers, strings with strings, ...), as on a real server. Unknown or
malformed operators raise pymongo's ``OperationFailure`` at compile time.
"""

import operator
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from pymongo.errors import OperationFailure

# Server error code for a malformed query
BAD_VALUE = 2

Predicate = Callable[[Mapping[str, Any]], bool]

_ORDERING = {
    "$gt": operator.gt,
    "$gte": operator.ge,
    "$lt": operator.lt,
    "$lte": operator.le,
}

_ORDERED_BRACKETS = {"number", "string", "date", "bytes"}


def _bracket(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, datetime):
        return "date"
    if isinstance(value, bytes):
        return "bytes"
    return type(value).__name__


def _resolve(document: Any, path: list[str]) -> list[Any]:
    """Return every value reachable at ``path``; arrays fan out over their elements."""
    if not path:
        return [document]
    head, rest = path[0], path[1:]
    if isinstance(document, Mapping):
        if head not in document:
            return []
        return _resolve(document[head], rest)
    if isinstance(document, list):
        if head.isdigit():
            index = int(head)
            return _resolve(document[index], rest) if index < len(document) else []
        values: list[Any] = []
        for item in document:
            if isinstance(item, (Mapping, list)):
                values.extend(_resolve(item, path))
        return values
    return []


def _candidates(values: list[Any]) -> list[Any]:
    """Field values plus the elements of any array value."""
    expanded = list(values)
    for value in values:
        if isinstance(value, list):
            expanded.extend(value)
    return expanded


def _equals(values: list[Any], expected: Any) -> bool:
    if not values:
        # {field: None} matches documents without the field
        return expected is None
    for candidate in _candidates(values):
        if _bracket(candidate) == _bracket(expected) and candidate == expected:
            return True
    return False


def _compare(values: list[Any], expected: Any, op: Callable[[Any, Any], bool]) -> bool:
    bracket = _bracket(expected)
    if bracket not in _ORDERED_BRACKETS:
        return False
    for candidate in _candidates(values):
        if _bracket(candidate) != bracket:
            continue
        try:
            if op(candidate, expected):
                return True
        except TypeError:
            continue
    return False


def _require_list(op: str, argument: Any) -> list[Any]:
    if not isinstance(argument, (list, tuple)):
        raise OperationFailure(f"{op} needs an array", code=BAD_VALUE)
    return list(argument)


def _compile_operator(op: str, argument: Any) -> Callable[[list[Any]], bool]:
    if op == "$eq":
        return lambda values: _equals(values, argument)
    if op == "$ne":
        return lambda values: not _equals(values, argument)
    if op in _ORDERING:
        compare = _ORDERING[op]
        return lambda values: _compare(values, argument, compare)
    if op == "$in":
        options = _require_list(op, argument)
        return lambda values: any(_equals(values, option) for option in options)
    if op == "$nin":
        options = _require_list(op, argument)
        return lambda values: not any(_equals(values, option) for option in options)
    if op == "$exists":
        wanted = bool(argument)
        return lambda values: bool(values) == wanted
    raise OperationFailure(f"unknown operator: {op}", code=BAD_VALUE)


def _is_operator_document(condition: Any) -> bool:
    return (
        isinstance(condition, Mapping)
        and bool(condition)
        and all(isinstance(key, str) and key.startswith("$") for key in condition)
    )


def _compile_field(field: str, condition: Any) -> Predicate:
    path = field.split(".")
    if _is_operator_document(condition):
        checks = [_compile_operator(op, argument) for op, argument in condition.items()]
    else:
        checks = [lambda values: _equals(values, condition)]

    def predicate(document: Mapping[str, Any]) -> bool:
        values = _resolve(document, path)
        return all(check(values) for check in checks)

    return predicate


def _compile_logical(op: str, argument: Any) -> Predicate:
    if not isinstance(argument, (list, tuple)) or not argument:
        raise OperationFailure(f"{op} must be a nonempty array", code=BAD_VALUE)
    clauses = []
    for clause in argument:
        if not isinstance(clause, Mapping):
            raise OperationFailure(f"{op} argument's entries must be objects", code=BAD_VALUE)
        clauses.append(compile_filter(clause))

    if op == "$and":
        return lambda document: all(clause(document) for clause in clauses)
    if op == "$or":
        return lambda document: any(clause(document) for clause in clauses)
    return lambda document: not any(clause(document) for clause in clauses)


def compile_filter(filter: Mapping[str, Any]) -> Predicate:
    """
    Compile a filter into a document predicate.

    Args:
        filter: MongoDB-style query filter

    Returns:
        Callable returning True for matching documents

    Raises:
        OperationFailure: If the filter uses an unknown or malformed operator
    """
    predicates: list[Predicate] = []
    for key, condition in filter.items():
        if key in ("$and", "$or", "$nor"):
            predicates.append(_compile_logical(key, condition))
        elif key.startswith("$"):
            raise OperationFailure(f"unknown top level operator: {key}", code=BAD_VALUE)
        else:
            predicates.append(_compile_field(key, condition))

    return lambda document: all(predicate(document) for predicate in predicates)
