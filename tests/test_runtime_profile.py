"""Tests for runtime types, host detection and per-runtime profiles."""

import os
import sys

import pytest

from vermgr.core.errors import LayoutMismatchError, UnsupportedPlatformError, VersionManagerError
from vermgr.core.runtime_profile import (
    ArchType,
    GoProfile,
    HostPlatform,
    NodeProfile,
    OsType,
    PythonProfile,
    RuntimeType,
    get_profile,
)


class TestRuntimeType:
    """Test RuntimeType parsing and derived names."""

    @pytest.mark.parametrize("name, expected", [
        ("node", RuntimeType.NODE),
        ("Node.js", RuntimeType.NODE),
        ("RUST", RuntimeType.RUST),
        ("python", RuntimeType.PYTHON),
        (" go ", RuntimeType.GO),
    ])
    def test_parse(self, name, expected):
        assert RuntimeType.parse(name) is expected

    def test_parse_unknown(self):
        with pytest.raises(VersionManagerError):
            RuntimeType.parse("java")

    def test_pin_file_names(self):
        assert RuntimeType.NODE.pin_file_name == ".node-version"
        assert RuntimeType.RUST.pin_file_name == ".rust-version"
        assert RuntimeType.PYTHON.pin_file_name == ".python-version"
        assert RuntimeType.GO.pin_file_name == ".go-version"

    def test_display_name_and_str(self):
        assert RuntimeType.NODE.display_name == "Node.js"
        assert str(RuntimeType.GO) == "Go"


class TestHostPlatform:
    """Test host detection."""

    def test_detect_linux_x64(self, monkeypatch):
        monkeypatch.setattr("vermgr.core.runtime_profile.platform.system", lambda: "Linux")
        monkeypatch.setattr("vermgr.core.runtime_profile.platform.machine", lambda: "x86_64")
        host = HostPlatform.detect()
        assert host == HostPlatform(OsType.LINUX, ArchType.X64)
        assert not host.is_windows

    def test_detect_windows_amd64(self, monkeypatch):
        monkeypatch.setattr("vermgr.core.runtime_profile.platform.system", lambda: "Windows")
        monkeypatch.setattr("vermgr.core.runtime_profile.platform.machine", lambda: "AMD64")
        host = HostPlatform.detect()
        assert host.is_windows
        assert host.arch_type is ArchType.X64

    def test_detect_unknown_os(self, monkeypatch):
        monkeypatch.setattr("vermgr.core.runtime_profile.platform.system", lambda: "SunOS")
        monkeypatch.setattr("vermgr.core.runtime_profile.platform.machine", lambda: "x86_64")
        with pytest.raises(UnsupportedPlatformError):
            HostPlatform.detect()


class TestDownloadUrls:
    """Test URL construction for each runtime."""

    def test_linux_x64_urls(self, linux_host):
        assert get_profile(RuntimeType.NODE, linux_host).download_url("18.17.0") == (
            "https://nodejs.org/dist/v18.17.0/node-v18.17.0-linux-x64.tar.gz"
        )
        assert get_profile(RuntimeType.RUST, linux_host).download_url("1.70.0") == (
            "https://static.rust-lang.org/dist/rust-1.70.0-x86_64-unknown-linux-gnu.tar.gz"
        )
        assert get_profile(RuntimeType.PYTHON, linux_host).download_url("3.11.4") == (
            "https://www.python.org/ftp/python/3.11.4/Python-3.11.4-x86_64.tar.gz"
        )
        assert get_profile(RuntimeType.GO, linux_host).download_url("1.21.0") == (
            "https://go.dev/dl/go1.21.0.linux-amd64.tar.gz"
        )

    def test_windows_uses_zip(self, windows_host):
        profile = get_profile(RuntimeType.NODE, windows_host)
        assert profile.archive_extension() == ".zip"
        assert profile.download_url("18.17.0") == (
            "https://nodejs.org/dist/v18.17.0/node-v18.17.0-win-x64.zip"
        )

    def test_mirror_gets_trailing_slash(self, linux_host):
        profile = get_profile(RuntimeType.GO, linux_host)
        url = profile.download_url("1.21.0", "https://mirror.example.com/golang")
        assert url == "https://mirror.example.com/golang/go1.21.0.linux-amd64.tar.gz"

    def test_rust_linux_arm_suffix(self):
        profile = get_profile(RuntimeType.RUST, HostPlatform(OsType.LINUX, ArchType.ARM))
        assert profile.platform_suffix() == "armv7-unknown-linux-gnueabihf"

    @pytest.mark.parametrize("runtime", list(RuntimeType))
    def test_unsupported_pair_raises(self, runtime):
        profile = get_profile(runtime, HostPlatform(OsType.WINDOWS, ArchType.ARM64))
        with pytest.raises(UnsupportedPlatformError):
            profile.platform_suffix()
        with pytest.raises(UnsupportedPlatformError):
            profile.download_url("1.0.0")


class TestBinaryDirectory:
    """Test binary directory conventions."""

    def test_node_posix(self, tmp_path, linux_host):
        profile = NodeProfile(linux_host)
        assert profile.binary_directory(tmp_path, "18.17.0") == tmp_path / "node-v18.17.0-linux-x64" / "bin"

    def test_node_windows(self, tmp_path, windows_host):
        profile = NodeProfile(windows_host)
        assert profile.binary_directory(tmp_path, "18.17.0") == tmp_path / "node-v18.17.0-win-x64"

    @pytest.mark.parametrize("runtime", [RuntimeType.RUST, RuntimeType.PYTHON, RuntimeType.GO])
    def test_others_use_root_bin(self, tmp_path, linux_host, runtime):
        assert get_profile(runtime, linux_host).binary_directory(tmp_path, "1.0.0") == tmp_path / "bin"

    def test_only_rust_requires_install_script(self, linux_host):
        flags = {rt: get_profile(rt, linux_host).requires_install_script for rt in RuntimeType}
        assert flags == {
            RuntimeType.NODE: False,
            RuntimeType.RUST: True,
            RuntimeType.PYTHON: False,
            RuntimeType.GO: False,
        }


class TestRepairLayout:
    """Test post-extraction layout repair."""

    def test_python_copies_interpreter(self, tmp_path, linux_host):
        profile = PythonProfile(linux_host)
        source = tmp_path / "Python-3.11.4-x86_64" / "bin" / "python"
        source.parent.mkdir(parents=True)
        source.write_bytes(b"interpreter")

        profile.repair_layout(tmp_path, "3.11.4")

        target = tmp_path / "bin" / "python"
        assert target.read_bytes() == b"interpreter"
        if sys.platform != "win32":
            assert os.access(target, os.X_OK)

    def test_python_missing_interpreter(self, tmp_path, linux_host):
        with pytest.raises(LayoutMismatchError):
            PythonProfile(linux_host).repair_layout(tmp_path, "3.11.4")

    def test_go_copies_bin_contents(self, tmp_path, linux_host):
        go_bin = tmp_path / "go" / "bin"
        go_bin.mkdir(parents=True)
        (go_bin / "go").write_text("go")
        (go_bin / "gofmt").write_text("gofmt")

        GoProfile(linux_host).repair_layout(tmp_path, "1.21.0")

        assert sorted(p.name for p in (tmp_path / "bin").iterdir()) == ["go", "gofmt"]

    def test_node_is_noop(self, tmp_path, linux_host):
        NodeProfile(linux_host).repair_layout(tmp_path, "18.17.0")
        assert list(tmp_path.iterdir()) == []
