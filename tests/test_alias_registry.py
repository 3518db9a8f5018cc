"""Tests for AliasRegistry."""

import json

import pytest

from vermgr.core.alias_registry import AliasRegistry
from vermgr.core.errors import VersionNotInstalledError
from vermgr.core.runtime_profile import RuntimeType
from vermgr.utils.input_validator import InputValidationError


@pytest.fixture
def registry(config_manager, store):
    return AliasRegistry(config_manager.base_dir, store)


class TestAliasRegistry:
    """Test alias creation and resolution."""

    def test_create_and_resolve(self, registry, installed):
        installed(RuntimeType.NODE, "18.17.0")

        registry.create(RuntimeType.NODE, "work", "18.17.0")

        assert registry.resolve(RuntimeType.NODE, "work") == "18.17.0"

    def test_file_format(self, registry, installed, config_manager):
        installed(RuntimeType.GO, "1.21.0")
        registry.create(RuntimeType.GO, "stable", "1.21.0")

        data = json.loads((config_manager.base_dir / "aliases-Go.json").read_text(encoding="utf-8"))
        assert data == {"aliases": {"stable": "1.21.0"}}

    def test_create_requires_installed_target(self, registry):
        with pytest.raises(VersionNotInstalledError):
            registry.create(RuntimeType.NODE, "work", "18.17.0")

    def test_create_overwrites(self, registry, installed):
        installed(RuntimeType.NODE, "18.17.0")
        installed(RuntimeType.NODE, "20.5.0")

        registry.create(RuntimeType.NODE, "work", "18.17.0")
        registry.create(RuntimeType.NODE, "work", "20.5.0")

        assert registry.resolve(RuntimeType.NODE, "work") == "20.5.0"

    def test_unknown_alias(self, registry):
        assert registry.resolve(RuntimeType.NODE, "nope") is None

    def test_stale_alias(self, registry, installed, store):
        installed(RuntimeType.NODE, "18.17.0")
        registry.create(RuntimeType.NODE, "work", "18.17.0")
        store.remove(RuntimeType.NODE, "18.17.0")

        with pytest.raises(VersionNotInstalledError):
            registry.resolve(RuntimeType.NODE, "work")

    def test_list_sorted_per_runtime(self, registry, installed):
        installed(RuntimeType.NODE, "18.17.0")
        installed(RuntimeType.PYTHON, "3.11.4")
        registry.create(RuntimeType.NODE, "zeta", "18.17.0")
        registry.create(RuntimeType.NODE, "alpha", "18.17.0")
        registry.create(RuntimeType.PYTHON, "py", "3.11.4")

        assert registry.list(RuntimeType.NODE) == [("alpha", "18.17.0"), ("zeta", "18.17.0")]
        assert registry.list(RuntimeType.PYTHON) == [("py", "3.11.4")]
        assert registry.list(RuntimeType.GO) == []

    def test_invalid_alias_name(self, registry, installed):
        installed(RuntimeType.NODE, "18.17.0")
        with pytest.raises(InputValidationError):
            registry.create(RuntimeType.NODE, "../bad", "18.17.0")
