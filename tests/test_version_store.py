"""Tests for VersionStore."""

import stat
import sys

import pytest

from vermgr.core.errors import StoreIOError, VersionCurrentlyActiveError, VersionNotFoundError
from vermgr.core.runtime_profile import RuntimeType
from vermgr.utils.input_validator import InputValidationError


def _write_go_bin(root):
    bin_dir = root / "bin"
    bin_dir.mkdir(parents=True)
    tool = bin_dir / "go"
    tool.write_text("#!/bin/sh\n")
    tool.chmod(0o644)


class TestInstall:
    """Test idempotent staged installs."""

    def test_install_creates_version_dir(self, store):
        calls = []

        def installer(root):
            calls.append(root)
            _write_go_bin(root)

        assert store.install(RuntimeType.GO, "1.21.0", installer) is True
        assert len(calls) == 1
        assert store.is_installed(RuntimeType.GO, "1.21.0")
        assert (store.version_dir(RuntimeType.GO, "1.21.0") / "bin" / "go").is_file()

    def test_second_install_is_noop(self, store):
        store.install(RuntimeType.GO, "1.21.0", _write_go_bin)

        def must_not_run(root):
            raise AssertionError("installer called for an installed version")

        assert store.install(RuntimeType.GO, "1.21.0", must_not_run) is False

    def test_installer_runs_in_hidden_staging_dir(self, store):
        seen = []

        def installer(root):
            seen.append(root)
            _write_go_bin(root)

        store.install(RuntimeType.GO, "1.21.0", installer)
        assert seen[0].name.startswith(".staging-")
        assert not seen[0].exists()

    def test_failed_install_leaves_nothing(self, store):
        def broken(root):
            (root / "partial").write_text("x")
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            store.install(RuntimeType.GO, "1.21.0", broken)

        assert not store.is_installed(RuntimeType.GO, "1.21.0")
        assert list(store.versions_root(RuntimeType.GO).iterdir()) == []

    def test_os_error_is_wrapped(self, store):
        def broken(root):
            raise PermissionError("denied")

        with pytest.raises(StoreIOError):
            store.install(RuntimeType.GO, "1.21.0", broken)
        assert not store.is_installed(RuntimeType.GO, "1.21.0")

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_binaries_become_executable(self, store):
        store.install(RuntimeType.GO, "1.21.0", _write_go_bin)
        mode = (store.binary_directory(RuntimeType.GO, "1.21.0") / "go").stat().st_mode
        assert stat.S_IMODE(mode) == 0o755

    def test_versions_are_namespaced_by_runtime(self, store):
        store.install(RuntimeType.GO, "1.0.0", _write_go_bin)
        assert not store.is_installed(RuntimeType.PYTHON, "1.0.0")
        assert store.version_dir(RuntimeType.GO, "1.0.0").parent.name == "Go"

    def test_rejects_path_like_versions(self, store):
        with pytest.raises(InputValidationError):
            store.install(RuntimeType.GO, "../escape", _write_go_bin)


class TestRemove:
    """Test version removal."""

    def test_remove_installed(self, store):
        store.install(RuntimeType.GO, "1.21.0", _write_go_bin)
        store.remove(RuntimeType.GO, "1.21.0", active_version="1.20.0")
        assert not store.is_installed(RuntimeType.GO, "1.21.0")

    def test_remove_active_version(self, store):
        store.install(RuntimeType.GO, "1.21.0", _write_go_bin)
        with pytest.raises(VersionCurrentlyActiveError, match="切换"):
            store.remove(RuntimeType.GO, "1.21.0", active_version="1.21.0")
        assert store.is_installed(RuntimeType.GO, "1.21.0")

    def test_remove_missing_version(self, store):
        with pytest.raises(VersionNotFoundError):
            store.remove(RuntimeType.GO, "9.9.9")


class TestListAndCleanup:
    """Test listing and staging cleanup."""

    def test_list_versions(self, store):
        store.install(RuntimeType.GO, "1.21.0", _write_go_bin)
        store.install(RuntimeType.GO, "1.20.5", _write_go_bin)
        (store.versions_root(RuntimeType.GO) / ".staging-abandoned").mkdir()

        versions = store.list_versions(RuntimeType.GO, current="1.21.0")

        assert [v["version"] for v in versions] == ["1.20.5", "1.21.0"]
        assert [v["current"] for v in versions] == [False, True]
        assert all(v["install_date"] for v in versions)

    def test_list_empty_runtime(self, store):
        assert store.list_versions(RuntimeType.NODE) == []

    def test_clear_staging(self, store):
        store.install(RuntimeType.GO, "1.21.0", _write_go_bin)
        (store.versions_root(RuntimeType.GO) / ".staging-1.22.0-abc").mkdir()

        assert store.clear_staging() == 1
        assert [p.name for p in store.versions_root(RuntimeType.GO).iterdir()] == ["1.21.0"]
