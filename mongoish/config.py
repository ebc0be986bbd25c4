"""
Configuration management for MONGOISH.

Configuration is optional: a ``MongoishClient`` can always be built with a
url and an explicit ``bind_engine()`` call. ``ClientConfig`` covers the
environment-driven path used by ``MongoishClient.from_config()``.

Environment variables:
    MONGOISH_URL: Connection url (default ``mongodb://localhost:27017``)
    MONGOISH_ENGINE: Registered engine name (default ``memory``)
    MONGOISH_ID_LENGTH: Length of engine-generated ids, 1-12 (default 12)
"""

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .constants import (
    DEFAULT_ENGINE,
    DEFAULT_ID_LENGTH,
    DEFAULT_URL,
    MAX_ID_LENGTH,
    MAX_URL_LENGTH,
    MIN_URL_LENGTH,
    URL_PATTERN,
)
from .exceptions import ConfigurationError

_ENV_KEYS = {
    "url": "MONGOISH_URL",
    "engine": "MONGOISH_ENGINE",
    "id_length": "MONGOISH_ID_LENGTH",
}


class ClientConfig(BaseModel):
    """
    Client configuration with automatic validation.

    Example:
        # Using environment variables
        client = MongoishClient.from_config(ClientConfig.from_env())

        # Or using direct values
        config = ClientConfig(url="mongodb://localhost", id_length=8)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str = Field(
        DEFAULT_URL,
        min_length=MIN_URL_LENGTH,
        max_length=MAX_URL_LENGTH,
        pattern=URL_PATTERN,
        description="Connection url (validated, never dialled)",
    )
    engine: str = Field(DEFAULT_ENGINE, min_length=1, description="Registered engine name")
    id_length: int = Field(
        DEFAULT_ID_LENGTH,
        ge=1,
        le=MAX_ID_LENGTH,
        description="Length of engine-generated ids",
    )

    @classmethod
    def from_mapping(cls, values: Mapping[str, object]) -> "ClientConfig":
        """
        Build a config, converting pydantic errors to ``ConfigurationError``.

        Raises:
            ConfigurationError: If any value is invalid
        """
        try:
            return cls.model_validate(dict(values))
        except PydanticValidationError as e:
            first = e.errors()[0]
            key = ".".join(str(part) for part in first["loc"]) or None
            raise ConfigurationError(
                f"Invalid configuration: {first['msg']}",
                config_key=key,
                config_value=first.get("input") if key else None,
                context={"error_count": e.error_count()},
            ) from e

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ClientConfig":
        """
        Load configuration from environment variables.

        Args:
            environ: Optional mapping to read instead of ``os.environ``

        Raises:
            ConfigurationError: If any variable holds an invalid value
        """
        environ = os.environ if environ is None else environ
        values = {field: environ[key] for field, key in _ENV_KEYS.items() if key in environ}
        return cls.from_mapping(values)
