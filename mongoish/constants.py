"""
Constants for MONGOISH.

This module contains the naming, url and identifier policies shared by the
client, database and collection layers, and by the bundled engines.
"""

from typing import Final

# ============================================================================
# NAMING CONSTANTS
# ============================================================================

MIN_NAME_LENGTH: Final[int] = 1
"""Minimum length for database and collection names."""

MAX_NAME_LENGTH: Final[int] = 64
"""Maximum length for database and collection names."""

NAME_PATTERN: Final[str] = r"^[a-z][_a-z0-9]*$"
"""Database and collection names start with a lowercase letter."""

# ============================================================================
# CONNECTION URL CONSTANTS
# ============================================================================

MIN_URL_LENGTH: Final[int] = 11
"""Minimum length for a connection url (``mongodb://`` plus one character)."""

MAX_URL_LENGTH: Final[int] = 1024
"""Maximum length for a connection url."""

URL_PATTERN: Final[str] = r"^mongodb://[!-\[\]-~]+$"
"""Mongo-style scheme followed by printable, non-whitespace characters (no backslash)."""

DEFAULT_URL: Final[str] = "mongodb://localhost:27017"
"""Url used by ``ClientConfig`` when ``MONGOISH_URL`` is not set."""

# ============================================================================
# DOCUMENT CONSTANTS
# ============================================================================

ID_FIELD: Final[str] = "_id"
"""Reserved document identifier key."""

EMPTY_ID_VALUES: Final[tuple[object, ...]] = (None, "")
"""``_id`` values treated as absent; the engine generates an id instead."""

DUPLICATE_KEY_CODE: Final[int] = 11000
"""Server error code for duplicate key violations."""

ID_ALPHABET: Final[str] = "0123456789abcdefghijklmnopqrstuvwxyz"
"""Characters used for engine-generated ids."""

MAX_ID_LENGTH: Final[int] = 12
"""Upper bound on engine-generated id length."""

DEFAULT_ID_LENGTH: Final[int] = 12
"""Default engine-generated id length."""

# ============================================================================
# ENGINE CONSTANTS
# ============================================================================

DEFAULT_ENGINE: Final[str] = "memory"
"""Registry name of the engine bound by ``MongoishClient.from_config()``."""

# Error message display
TRUNCATE_OVER: Final[int] = 32
TRUNCATE_HEAD: Final[int] = 21
TRUNCATE_TAIL: Final[int] = 8
