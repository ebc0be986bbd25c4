"""
Storage engines.

``ENGINES`` maps registry names to engine classes, so a client can be bound
from configuration (``MONGOISH_ENGINE=memory``). Any other class satisfying
``mongoish.core.StorageEngine`` can be bound directly with
``client.bind_engine()``.
"""

from ..exceptions import ConfigurationError
from .memory import MemoryCursor, MemoryEngine
from .query import compile_filter

ENGINES: dict[str, type] = {
    MemoryEngine.NAME: MemoryEngine,
}


def get_engine(name: str) -> type:
    """
    Look up a registered engine class by name.

    Raises:
        ConfigurationError: If no engine is registered under ``name``
    """
    try:
        return ENGINES[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown storage engine '{name}'",
            config_key="engine",
            config_value=name,
            context={"available": ", ".join(sorted(ENGINES))},
        ) from None


__all__ = [
    "ENGINES",
    "MemoryCursor",
    "MemoryEngine",
    "compile_filter",
    "get_engine",
]
