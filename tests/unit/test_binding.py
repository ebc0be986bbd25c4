"""
Unit tests for storage engine binding.

Tests factory validation and the unbound placeholder.
"""

import pytest

from mongoish import MemoryEngine
from mongoish.core.binding import (EngineBinding, StorageEngine, make_binding,
                                   unbound)
from mongoish.exceptions import InvalidEngineError


class NamedEngine:
    NAME = "named"
    VERSION = "2.0"


class TestMakeBinding:
    """Test make_binding() validation."""

    def test_binds_class_attributes(self):
        binding = make_binding(NamedEngine)
        assert binding == EngineBinding(factory=NamedEngine, name="named", version="2.0")
        assert binding.is_bound

    def test_explicit_identifiers_override_class_attributes(self):
        binding = make_binding(NamedEngine, "other", "9")
        assert (binding.name, binding.version) == ("other", "9")

    def test_plain_callable_with_explicit_identifiers(self):
        binding = make_binding(lambda: MemoryEngine(id_length=4), "memory", "x")
        engine = binding.create_engine()
        assert isinstance(engine, MemoryEngine)
        assert engine.id_length == 4

    def test_create_engine_returns_fresh_instances(self):
        binding = make_binding(MemoryEngine)
        assert binding.create_engine() is not binding.create_engine()

    @pytest.mark.parametrize(
        "factory,message",
        [
            (None, "bind_engine(): `factory` is None not type 'callable'"),
            ("memory", "bind_engine(): `factory` is type 'str' not 'callable'"),
            (42, "bind_engine(): `factory` is type 'int' not 'callable'"),
        ],
    )
    def test_rejects_non_callable(self, factory, message):
        with pytest.raises(InvalidEngineError) as exc_info:
            make_binding(factory)
        assert str(exc_info.value) == message
        assert exc_info.value.argument == "factory"

    def test_rejects_missing_name(self):
        class NoName:
            VERSION = "1"

        with pytest.raises(InvalidEngineError) as exc_info:
            make_binding(NoName)
        assert str(exc_info.value) == "bind_engine(): `factory.NAME` is None not type 'str'"

    def test_rejects_non_string_version(self):
        class IntVersion:
            NAME = "x"
            VERSION = 1

        with pytest.raises(InvalidEngineError) as exc_info:
            make_binding(IntVersion)
        assert str(exc_info.value) == "bind_engine(): `factory.VERSION` is type 'int' not 'str'"

    @pytest.mark.parametrize(
        "name,version,message",
        [
            ("", "1", "bind_engine(): `factory.NAME` '' is not min 1"),
            ("x", "", "bind_engine(): `factory.VERSION` '' is not min 1"),
        ],
    )
    def test_rejects_empty_identifiers(self, name, version, message):
        with pytest.raises(InvalidEngineError) as exc_info:
            make_binding(NamedEngine, name, version)
        assert str(exc_info.value) == message


class TestUnbound:
    """Test the placeholder binding."""

    def test_unbound_is_not_bound(self):
        assert not unbound().is_bound
        assert unbound().name == ""

    def test_bound_check_uses_identifiers(self):
        """A binding with a factory but empty identifiers still counts as unbound."""
        assert not EngineBinding(factory=NamedEngine, name="", version="1").is_bound


class TestStorageEngineProtocol:
    def test_memory_engine_satisfies_protocol(self):
        assert isinstance(MemoryEngine(), StorageEngine)
