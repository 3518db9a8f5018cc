"""Pytest configuration and shared fixtures."""

import os
import tempfile
from pathlib import Path
from typing import Iterable

import pytest

# Keep the module-level logger out of the real home directory.
os.environ.setdefault("VERMGR_HOME", tempfile.mkdtemp(prefix="vermgr-test-home-"))

from vermgr.core.config_manager import ConfigManager  # noqa: E402
from vermgr.core.env_manager import EnvManager  # noqa: E402
from vermgr.core.runtime_profile import ArchType, HostPlatform, OsType, RuntimeType, get_profile  # noqa: E402
from vermgr.core.version_manager import VersionManager  # noqa: E402
from vermgr.core.version_store import VersionStore  # noqa: E402

from tests.helpers import FakeServer  # noqa: E402


@pytest.fixture
def base_dir(tmp_path: Path) -> Path:
    return tmp_path / "store"


@pytest.fixture
def home_dir(tmp_path: Path) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def config_manager(base_dir: Path) -> ConfigManager:
    return ConfigManager(base_dir)


@pytest.fixture
def linux_host() -> HostPlatform:
    return HostPlatform(OsType.LINUX, ArchType.X64)


@pytest.fixture
def windows_host() -> HostPlatform:
    return HostPlatform(OsType.WINDOWS, ArchType.X64)


@pytest.fixture
def env_manager(home_dir: Path) -> EnvManager:
    return EnvManager(home=home_dir, shell="/bin/bash", is_windows=False)


@pytest.fixture
def store(config_manager: ConfigManager, linux_host: HostPlatform) -> VersionStore:
    return VersionStore(config_manager.versions_dir, linux_host)


@pytest.fixture
def fake_server(monkeypatch) -> FakeServer:
    """Replace requests.get used by the archive installer with an in-memory server."""
    server = FakeServer()
    monkeypatch.setattr("vermgr.core.archive_installer.requests.get", server.get)
    return server


@pytest.fixture
def manager(config_manager, linux_host, env_manager) -> VersionManager:
    return VersionManager(config_manager, host=linux_host, env_manager=env_manager)


def install_fake_version(
    store: VersionStore,
    runtime: RuntimeType,
    version: str,
    binaries: Iterable[str] = (),
) -> Path:
    """Install a version whose binary directory holds small shell scripts."""
    profile = get_profile(runtime, store.host)
    names = list(binaries) or [runtime.value.lower()]

    def populate(root: Path) -> None:
        bin_dir = profile.binary_directory(root, version)
        bin_dir.mkdir(parents=True, exist_ok=True)
        for name in names:
            (bin_dir / name).write_text(f"#!/bin/sh\necho {name} {version}\n")

    store.install(runtime, version, populate)
    return store.binary_directory(runtime, version)


@pytest.fixture
def installed(store):
    """Factory fixture: installed(runtime, version, binaries=()) -> binary dir."""

    def _install(runtime: RuntimeType, version: str, binaries: Iterable[str] = ()) -> Path:
        return install_fake_version(store, runtime, version, binaries)

    return _install
