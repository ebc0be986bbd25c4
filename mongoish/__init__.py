"""
MONGOISH - in-memory MongoDB-style client

Lets application code develop and test against a motor-style async API
without a live server. Storage is delegated to a pluggable engine, bound
once per client.

    client = MongoishClient("mongodb://localhost:27017")
    client.bind_engine(MemoryEngine)
    await client.connect()
    frogs = client.get_database("animals").get_collection("frogs")
"""

__version__ = "0.1.0"

# Configuration
from .config import ClientConfig
# Core client and engine binding
from .core import EngineBinding, MongoishClient, StorageEngine
# Database layer
from .database import Collection, Database
# Engines
from .engines import ENGINES, MemoryEngine, get_engine
# Errors
from .exceptions import (AlreadyBoundError, ConfigurationError,
                         DuplicateKeyError, EngineNotBoundError,
                         InvalidEngineError, MongoishError, NotConnectedError,
                         ValidationError)

__all__ = [
    # Core
    "MongoishClient",
    "EngineBinding",
    "StorageEngine",
    # Database
    "Database",
    "Collection",
    # Engines
    "ENGINES",
    "MemoryEngine",
    "get_engine",
    # Config
    "ClientConfig",
    # Errors
    "MongoishError",
    "ValidationError",
    "InvalidEngineError",
    "NotConnectedError",
    "EngineNotBoundError",
    "AlreadyBoundError",
    "DuplicateKeyError",
    "ConfigurationError",
]
