"""
运行时配置模块。

定义四种受管理的运行时类型，以及每种运行时在不同操作系统和架构下的
下载地址、平台后缀、可执行文件目录结构和解压后的布局修复规则。
"""

import platform
import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Tuple

from vermgr.core.errors import (
    InstallScriptError,
    LayoutMismatchError,
    UnsupportedPlatformError,
    VersionManagerError,
)
from vermgr.utils.fs_utils import copy_binaries, make_executable
from vermgr.utils.logger import get_logger

logger = get_logger()


class RuntimeType(str, Enum):
    """受管理的运行时类型，值同时作为磁盘上的目录和文件名键。"""

    NODE = "Node"
    RUST = "Rust"
    PYTHON = "Python"
    GO = "Go"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def pin_file_name(self) -> str:
        """本地版本文件名，如 .node-version。"""
        return f".{self.value.lower()}-version"

    @classmethod
    def parse(cls, name: str) -> "RuntimeType":
        """
        按名称（不区分大小写）解析运行时类型。

        参数:
            name: 运行时名称，如 node、Node.js、rust

        返回:
            对应的 RuntimeType

        抛出:
            VersionManagerError: 名称无法识别时抛出
        """
        key = (name or "").strip().lower()
        for runtime in cls:
            if key in (runtime.value.lower(), runtime.display_name.lower()):
                return runtime
        raise VersionManagerError(f"未知运行时: {name}")

    def __str__(self) -> str:
        return self.value


_DISPLAY_NAMES = {
    RuntimeType.NODE: "Node.js",
    RuntimeType.RUST: "Rust",
    RuntimeType.PYTHON: "Python",
    RuntimeType.GO: "Go",
}


class OsType(str, Enum):
    DARWIN = "darwin"
    LINUX = "linux"
    WINDOWS = "windows"


class ArchType(str, Enum):
    X64 = "x64"
    ARM64 = "arm64"
    ARM = "arm"
    X86 = "x86"


_OS_ALIASES = {
    "darwin": OsType.DARWIN,
    "macos": OsType.DARWIN,
    "linux": OsType.LINUX,
    "windows": OsType.WINDOWS,
}

_ARCH_ALIASES = {
    "x86_64": ArchType.X64,
    "amd64": ArchType.X64,
    "aarch64": ArchType.ARM64,
    "arm64": ArchType.ARM64,
    "arm": ArchType.ARM,
    "armv7l": ArchType.ARM,
    "armv6l": ArchType.ARM,
    "x86": ArchType.X86,
    "i386": ArchType.X86,
    "i686": ArchType.X86,
}


@dataclass(frozen=True)
class HostPlatform:
    """当前主机的操作系统和架构。"""

    os_type: OsType
    arch_type: ArchType

    @property
    def is_windows(self) -> bool:
        return self.os_type == OsType.WINDOWS

    @classmethod
    def detect(cls) -> "HostPlatform":
        """
        检测当前主机平台。

        返回:
            HostPlatform 实例

        抛出:
            UnsupportedPlatformError: 操作系统或架构不受支持时抛出
        """
        os_name = platform.system().lower()
        arch_name = platform.machine().lower()
        os_type = _OS_ALIASES.get(os_name)
        arch_type = _ARCH_ALIASES.get(arch_name)
        if os_type is None or arch_type is None:
            raise UnsupportedPlatformError(None, os_name, arch_name)
        return cls(os_type, arch_type)


class RuntimeProfile(ABC):
    """
    运行时配置抽象基类。

    每种运行时实现一次，供 VersionStore、ArchiveInstaller 和
    ActiveVersionSwitcher 统一使用，避免在各调用点按运行时类型分支。
    """

    runtime: RuntimeType
    default_mirror: str
    url_template: str
    suffix_table: Dict[Tuple[OsType, ArchType], str]
    requires_install_script = False
    has_lts_alias = False

    def __init__(self, host: HostPlatform):
        self.host = host

    def platform_suffix(self) -> str:
        """
        获取当前平台对应的下载文件后缀。

        返回:
            平台后缀字符串

        抛出:
            UnsupportedPlatformError: 当前平台无对应后缀时抛出
        """
        suffix = self.suffix_table.get((self.host.os_type, self.host.arch_type))
        if suffix is None:
            raise UnsupportedPlatformError(
                self.runtime, self.host.os_type.value, self.host.arch_type.value
            )
        return suffix

    def archive_extension(self) -> str:
        return ".zip" if self.host.is_windows else ".tar.gz"

    def executable_name(self, name: str) -> str:
        return f"{name}.exe" if self.host.is_windows else name

    def download_url(self, version: str, mirror: Optional[str] = None) -> str:
        """
        构建下载 URL。

        参数:
            version: 版本号
            mirror: 镜像地址前缀，为空时使用默认地址

        返回:
            下载 URL
        """
        base = mirror or self.default_mirror
        if not base.endswith("/"):
            base += "/"
        return self.url_template.format(
            mirror=base,
            version=version,
            suffix=self.platform_suffix(),
            ext=self.archive_extension(),
        )

    @abstractmethod
    def distribution_dirname(self, version: str) -> str:
        """压缩包解压后的顶层目录名。"""
        pass

    def binary_directory(self, version_root: Path, version: str) -> Path:
        """
        获取版本的可执行文件目录。

        参数:
            version_root: 版本根目录
            version: 版本号

        返回:
            可执行文件目录路径
        """
        return version_root / "bin"

    @abstractmethod
    def repair_layout(self, version_root: Path, version: str) -> None:
        """解压后修复目录布局，使 binary_directory 指向可用的可执行文件。"""
        pass


class NodeProfile(RuntimeProfile):
    runtime = RuntimeType.NODE
    default_mirror = "https://nodejs.org/dist/"
    url_template = "{mirror}v{version}/node-v{version}-{suffix}{ext}"
    has_lts_alias = True
    suffix_table = {
        (OsType.DARWIN, ArchType.X64): "darwin-x64",
        (OsType.DARWIN, ArchType.ARM64): "darwin-arm64",
        (OsType.LINUX, ArchType.X64): "linux-x64",
        (OsType.LINUX, ArchType.ARM64): "linux-arm64",
        (OsType.LINUX, ArchType.ARM): "linux-armv7l",
        (OsType.WINDOWS, ArchType.X64): "win-x64",
        (OsType.WINDOWS, ArchType.X86): "win-x86",
    }

    def distribution_dirname(self, version: str) -> str:
        return f"node-v{version}-{self.platform_suffix()}"

    def binary_directory(self, version_root: Path, version: str) -> Path:
        # Windows 发行包的 node.exe 直接位于顶层目录
        dist_dir = version_root / self.distribution_dirname(version)
        if self.host.is_windows:
            return dist_dir
        return dist_dir / "bin"

    def repair_layout(self, version_root: Path, version: str) -> None:
        pass


class RustProfile(RuntimeProfile):
    runtime = RuntimeType.RUST
    default_mirror = "https://static.rust-lang.org/dist/"
    url_template = "{mirror}rust-{version}-{suffix}{ext}"
    requires_install_script = True
    suffix_table = {
        (OsType.DARWIN, ArchType.X64): "x86_64-apple-darwin",
        (OsType.DARWIN, ArchType.ARM64): "aarch64-apple-darwin",
        (OsType.LINUX, ArchType.X64): "x86_64-unknown-linux-gnu",
        (OsType.LINUX, ArchType.ARM64): "aarch64-unknown-linux-gnu",
        (OsType.LINUX, ArchType.ARM): "armv7-unknown-linux-gnueabihf",
        (OsType.WINDOWS, ArchType.X64): "x86_64-pc-windows-msvc",
        (OsType.WINDOWS, ArchType.X86): "i686-pc-windows-msvc",
    }
    fallback_components = ("rustc", "cargo")

    def distribution_dirname(self, version: str) -> str:
        return f"rust-{version}-{self.platform_suffix()}"

    def install_script(self, version_root: Path, version: str) -> Path:
        script = "install.bat" if self.host.is_windows else "install.sh"
        return version_root / self.distribution_dirname(version) / script

    def repair_layout(self, version_root: Path, version: str) -> None:
        """
        运行发行包自带的安装脚本；脚本不存在时手动合并 rustc 和 cargo 的 bin 目录。

        参数:
            version_root: 版本根目录
            version: 版本号

        抛出:
            InstallScriptError: 安装脚本返回非零退出码时抛出
        """
        script = self.install_script(version_root, version).resolve()
        if script.exists():
            logger.info(f"正在运行 Rust 安装脚本: {script}")
            if self.host.is_windows:
                command = ["cmd", "/C", str(script)]
            else:
                command = ["sh", str(script)]
            command += ["--prefix", str(version_root.resolve()), "--without=rust-docs"]
            result = subprocess.run(command, cwd=str(script.parent))
            if result.returncode != 0:
                raise InstallScriptError(self.runtime, version, result.returncode)
            return

        logger.info("未找到安装脚本，尝试手动设置 bin 目录")
        dist_dir = version_root / self.distribution_dirname(version)
        bin_dir = self.binary_directory(version_root, version)
        for component in self.fallback_components:
            copy_binaries(dist_dir / component / "bin", bin_dir)


class PythonProfile(RuntimeProfile):
    runtime = RuntimeType.PYTHON
    default_mirror = "https://www.python.org/ftp/python/"
    url_template = "{mirror}{version}/Python-{version}-{suffix}{ext}"
    suffix_table = {
        (OsType.DARWIN, ArchType.X64): "macosx10.9.x86_64",
        (OsType.DARWIN, ArchType.ARM64): "macos11.0.arm64",
        (OsType.LINUX, ArchType.X64): "x86_64",
        (OsType.LINUX, ArchType.ARM64): "aarch64",
        (OsType.LINUX, ArchType.ARM): "armv7l",
        (OsType.WINDOWS, ArchType.X64): "amd64",
        (OsType.WINDOWS, ArchType.X86): "win32",
    }

    def distribution_dirname(self, version: str) -> str:
        return f"Python-{version}-{self.platform_suffix()}"

    def interpreter_path(self, version_root: Path, version: str) -> Path:
        dist_dir = version_root / self.distribution_dirname(version)
        if self.host.is_windows:
            return dist_dir / "python.exe"
        return dist_dir / "bin" / "python"

    def repair_layout(self, version_root: Path, version: str) -> None:
        """将解释器复制为 bin/python（Windows 上为 bin/python.exe）。"""
        source = self.interpreter_path(version_root, version)
        if not source.is_file():
            raise LayoutMismatchError(self.runtime, version, source)
        bin_dir = self.binary_directory(version_root, version)
        bin_dir.mkdir(parents=True, exist_ok=True)
        target = bin_dir / self.executable_name("python")
        shutil.copy2(source, target)
        make_executable(target)


class GoProfile(RuntimeProfile):
    runtime = RuntimeType.GO
    default_mirror = "https://go.dev/dl/"
    url_template = "{mirror}go{version}.{suffix}{ext}"
    suffix_table = {
        (OsType.DARWIN, ArchType.X64): "darwin-amd64",
        (OsType.DARWIN, ArchType.ARM64): "darwin-arm64",
        (OsType.LINUX, ArchType.X64): "linux-amd64",
        (OsType.LINUX, ArchType.ARM64): "linux-arm64",
        (OsType.LINUX, ArchType.ARM): "linux-armv6l",
        (OsType.WINDOWS, ArchType.X64): "windows-amd64",
        (OsType.WINDOWS, ArchType.X86): "windows-386",
    }

    def distribution_dirname(self, version: str) -> str:
        return "go"

    def repair_layout(self, version_root: Path, version: str) -> None:
        copy_binaries(version_root / self.distribution_dirname(version) / "bin",
                      self.binary_directory(version_root, version))


_PROFILE_CLASSES = {
    RuntimeType.NODE: NodeProfile,
    RuntimeType.RUST: RustProfile,
    RuntimeType.PYTHON: PythonProfile,
    RuntimeType.GO: GoProfile,
}


def get_profile(runtime: RuntimeType, host: Optional[HostPlatform] = None) -> RuntimeProfile:
    """
    获取指定运行时在指定主机上的配置。

    参数:
        runtime: 运行时类型
        host: 主机平台，为空时自动检测

    返回:
        RuntimeProfile 实例
    """
    return _PROFILE_CLASSES[runtime](host or HostPlatform.detect())
