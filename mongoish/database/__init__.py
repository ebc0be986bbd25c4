"""
Database layer.

Provides the MongoDB-style ``Database`` namespace and the ``Collection``
write/read surface over an injected storage engine.
"""

from .collection import Collection
from .database import Database

__all__ = [
    "Collection",
    "Database",
]
