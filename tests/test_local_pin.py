"""Tests for LocalPinResolver."""

import pytest

from vermgr.core.errors import VersionNotInstalledError
from vermgr.core.local_pin import LocalPinResolver
from vermgr.core.runtime_profile import RuntimeType


@pytest.fixture
def resolver(store):
    return LocalPinResolver(store)


class TestLocalPin:
    """Test pin file round trips."""

    def test_round_trip(self, resolver, installed, tmp_path):
        installed(RuntimeType.PYTHON, "3.11.4")

        pin_file = resolver.set_pin(RuntimeType.PYTHON, "3.11.4", tmp_path)

        assert pin_file == tmp_path / ".python-version"
        assert resolver.get_pin(RuntimeType.PYTHON, tmp_path) == "3.11.4"

    def test_requires_installed_version(self, resolver, tmp_path):
        with pytest.raises(VersionNotInstalledError):
            resolver.set_pin(RuntimeType.NODE, "18.17.0", tmp_path)
        assert not (tmp_path / ".node-version").exists()

    def test_missing_pin(self, resolver, tmp_path):
        assert resolver.get_pin(RuntimeType.GO, tmp_path) is None

    def test_content_is_stripped(self, resolver, tmp_path):
        (tmp_path / ".rust-version").write_text("  1.70.0\n")
        assert resolver.get_pin(RuntimeType.RUST, tmp_path) == "1.70.0"

    def test_defaults_to_working_directory(self, resolver, installed, tmp_path, monkeypatch):
        installed(RuntimeType.GO, "1.21.0")
        monkeypatch.chdir(tmp_path)

        resolver.set_pin(RuntimeType.GO, "1.21.0")

        assert (tmp_path / ".go-version").read_text() == "1.21.0"
        assert resolver.get_pin(RuntimeType.GO) == "1.21.0"
