"""
Core MONGOISH components.

This module contains the client state machine and the storage engine
binding it owns.
"""

from .binding import (EngineBinding, EngineCursor, StorageEngine,
                      make_binding, unbound)
from .client import MongoishClient

__all__ = [
    "MongoishClient",
    "EngineBinding",
    "EngineCursor",
    "StorageEngine",
    "make_binding",
    "unbound",
]
