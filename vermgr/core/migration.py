"""
版本迁移模块。

从 nvm、n、rustup、pyenv、gvm 等其他版本管理器导入已安装的版本。
所有版本都通过 VersionStore.install 写入，与正常安装的版本没有区别。
"""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple, Type

from vermgr.core.errors import MigrationSourceNotFoundError, UnsupportedSourceManagerError
from vermgr.core.runtime_profile import HostPlatform, RuntimeType, get_profile
from vermgr.core.version_store import VersionStore
from vermgr.utils.fs_utils import copy_binaries, copy_tree
from vermgr.utils.input_validator import InputValidationError, InputValidator
from vermgr.utils.logger import get_logger

logger = get_logger()


class MigrationAdapter(ABC):
    """
    迁移适配器抽象基类。

    子类定义源目录位置、目录名到版本号的映射和版本内容的复制方式。
    """

    source: str
    runtime: RuntimeType
    root_env_var: str
    missing_root_is_error = True

    def __init__(
        self,
        store: VersionStore,
        host: HostPlatform,
        policy: str = "default",
        environ: Optional[Mapping[str, str]] = None,
        home: Optional[Path] = None,
    ):
        """
        初始化迁移适配器。

        参数:
            store: 版本存储实例
            host: 主机平台
            policy: 源目录缺失时的处理策略（default、error、skip）
            environ: 环境变量映射，默认为 os.environ
            home: 用户主目录，默认为 Path.home()
        """
        self.store = store
        self.host = host
        self.policy = policy
        self.environ = environ if environ is not None else os.environ
        self.home = Path(home) if home else Path.home()

    @abstractmethod
    def default_root(self) -> Path:
        """未设置环境变量时的源管理器根目录。"""
        pass

    @abstractmethod
    def versions_subpath(self) -> Tuple[str, ...]:
        pass

    @abstractmethod
    def map_version(self, name: str) -> Optional[str]:
        """将源目录名映射为版本号，无关条目返回 None。"""
        pass

    @abstractmethod
    def populate(self, source_dir: Path, version_root: Path, version: str) -> None:
        """将源版本内容复制到版本根目录。"""
        pass

    def source_root(self) -> Path:
        value = self.environ.get(self.root_env_var)
        return Path(value) if value else self.default_root()

    def versions_dir(self) -> Path:
        return self.source_root().joinpath(*self.versions_subpath())

    def _missing_root_is_error(self) -> bool:
        if self.policy == "error":
            return True
        if self.policy == "skip":
            return False
        return self.missing_root_is_error

    def discover(self) -> List[Tuple[str, Path]]:
        """
        枚举源目录中的版本。

        返回:
            (版本号, 源目录) 列表，按目录名排序

        抛出:
            MigrationSourceNotFoundError: 源目录不存在且策略要求报错时抛出
        """
        versions_dir = self.versions_dir()
        if not versions_dir.is_dir():
            if self._missing_root_is_error():
                raise MigrationSourceNotFoundError(self.source, self.runtime, versions_dir)
            logger.info(f"未找到 {self.source} 版本目录 {versions_dir}，跳过迁移")
            return []

        found = []
        for entry in sorted(versions_dir.iterdir(), key=lambda p: p.name):
            if not entry.is_dir() or entry.name.startswith("."):
                continue
            version = self.map_version(entry.name)
            if not version:
                continue
            try:
                InputValidator.validate_version_string(version)
            except InputValidationError:
                logger.warning(f"跳过无法识别的 {self.source} 目录: {entry.name}")
                continue
            found.append((version, entry))
        return found

    def migrate(self) -> int:
        """
        执行迁移。

        返回:
            迁移的版本数量，已存在的版本不计入
        """
        count = 0
        for version, source_dir in self.discover():
            if self.store.is_installed(self.runtime, version):
                logger.debug(f"{self.runtime.display_name} 版本 {version} 已存在，跳过")
                continue
            logger.info(f"正在从 {self.source} 迁移 {self.runtime.display_name} 版本 {version}...")
            installed = self.store.install(
                self.runtime,
                version,
                lambda root, src=source_dir, ver=version: self.populate(src, root, ver),
            )
            if installed:
                count += 1
        logger.info(f"从 {self.source} 迁移了 {count} 个 {self.runtime.display_name} 版本")
        return count


class _NodeTreeAdapter(MigrationAdapter):
    runtime = RuntimeType.NODE

    def populate(self, source_dir: Path, version_root: Path, version: str) -> None:
        # 复制到发行包目录名下，使可执行文件目录与下载安装的布局一致
        dist_name = get_profile(self.runtime, self.host).distribution_dirname(version)
        copy_tree(source_dir, version_root / dist_name)


class NvmAdapter(_NodeTreeAdapter):
    source = "nvm"
    root_env_var = "NVM_DIR"

    def default_root(self) -> Path:
        return self.home / ".nvm"

    def versions_subpath(self) -> Tuple[str, ...]:
        return ("versions", "node")

    def map_version(self, name: str) -> Optional[str]:
        return name[1:] if name.startswith("v") else name


class NAdapter(_NodeTreeAdapter):
    source = "n"
    root_env_var = "N_PREFIX"

    def default_root(self) -> Path:
        return Path("/usr/local")

    def versions_subpath(self) -> Tuple[str, ...]:
        return ("n", "versions", "node")

    def map_version(self, name: str) -> Optional[str]:
        return name


class RustupAdapter(MigrationAdapter):
    source = "rustup"
    runtime = RuntimeType.RUST
    root_env_var = "RUSTUP_HOME"

    def default_root(self) -> Path:
        return self.home / ".rustup"

    def versions_subpath(self) -> Tuple[str, ...]:
        return ("toolchains",)

    def map_version(self, name: str) -> Optional[str]:
        """只迁移 stable 工具链，取第一个 "-" 之前的部分，如 stable-x86_64-... 映射为 stable。"""
        if "stable" not in name:
            return None
        return name.split("-", 1)[0]

    def populate(self, source_dir: Path, version_root: Path, version: str) -> None:
        # 工具链的 bin 目录随整棵树一起复制，可执行权限由 VersionStore 统一设置
        copy_tree(source_dir, version_root)


class _BinOnlyAdapter(MigrationAdapter):
    missing_root_is_error = False

    def discover(self) -> List[Tuple[str, Path]]:
        # 没有 bin 目录的条目不是可用的安装
        return [(v, d) for v, d in super().discover() if (d / "bin").is_dir()]

    def populate(self, source_dir: Path, version_root: Path, version: str) -> None:
        copy_binaries(source_dir / "bin", version_root / "bin")


class PyenvAdapter(_BinOnlyAdapter):
    source = "pyenv"
    runtime = RuntimeType.PYTHON
    root_env_var = "PYENV_ROOT"

    def default_root(self) -> Path:
        return self.home / ".pyenv"

    def versions_subpath(self) -> Tuple[str, ...]:
        return ("versions",)

    def map_version(self, name: str) -> Optional[str]:
        return name


class GvmAdapter(_BinOnlyAdapter):
    source = "gvm"
    runtime = RuntimeType.GO
    root_env_var = "GVM_ROOT"

    def default_root(self) -> Path:
        return self.home / ".gvm"

    def versions_subpath(self) -> Tuple[str, ...]:
        return ("gos",)

    def map_version(self, name: str) -> Optional[str]:
        if not name.startswith("go"):
            return None
        return name[2:]


_ADAPTERS: Dict[Tuple[str, RuntimeType], Type[MigrationAdapter]] = {
    (adapter.source, adapter.runtime): adapter
    for adapter in (NvmAdapter, NAdapter, RustupAdapter, PyenvAdapter, GvmAdapter)
}


def supported_sources(runtime: RuntimeType) -> List[str]:
    return sorted(source for source, rt in _ADAPTERS if rt == runtime)


def get_adapter(
    source: str,
    runtime: RuntimeType,
    store: VersionStore,
    host: HostPlatform,
    policy: str = "default",
    environ: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> MigrationAdapter:
    """
    获取迁移适配器。

    参数:
        source: 源版本管理器名称（不区分大小写）
        runtime: 运行时类型

    返回:
        MigrationAdapter 实例

    抛出:
        UnsupportedSourceManagerError: 不支持的 (源, 运行时) 组合时抛出
    """
    adapter_class = _ADAPTERS.get((source.lower(), runtime))
    if adapter_class is None:
        raise UnsupportedSourceManagerError(source, runtime)
    return adapter_class(store, host, policy=policy, environ=environ, home=home)
