"""
版本管理器模块。

提供运行时版本的安装、切换、删除、别名、本地版本、迁移和清理功能。
"""

import os
import subprocess
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from vermgr.core.active_switcher import ActiveVersionSwitcher
from vermgr.core.alias_registry import AliasRegistry
from vermgr.core.archive_installer import ArchiveInstaller
from vermgr.core.config_manager import ConfigManager
from vermgr.core.env_manager import EnvManager
from vermgr.core.errors import (
    CatalogUnavailableError,
    VersionManagerError,
    VersionNotInstalledError,
)
from vermgr.core.interfaces import IEnvManager, IRemoteCatalog
from vermgr.core.local_pin import LocalPinResolver
from vermgr.core.migration import get_adapter
from vermgr.core.runtime_profile import HostPlatform, RuntimeType, get_profile
from vermgr.core.store_lock import StoreLock
from vermgr.core.version_store import VersionStore
from vermgr.core import version_utils
from vermgr.utils.fs_utils import remove_path
from vermgr.utils.input_validator import InputValidator
from vermgr.utils.logger import get_logger

logger = get_logger()

LATEST = "latest"
LTS = "lts"
TEMP_PREFIX = "temp-"


class VersionManager:
    """
    版本管理器类。

    本类作为协调者，将具体工作委托给版本存储、归档安装器、活动版本切换器、
    别名注册表、本地版本文件解析器和迁移适配器。所有修改存储的操作都持有存储锁。
    """

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        host: Optional[HostPlatform] = None,
        env_manager: Optional[IEnvManager] = None,
        catalog: Optional[IRemoteCatalog] = None,
    ):
        """
        初始化版本管理器。

        参数:
            config_manager: 配置管理器实例，默认使用默认存储根目录
            host: 主机平台，默认自动检测
            env_manager: 环境变量管理器实例
            catalog: 远程版本目录，用于解析 latest 和 lts
        """
        self.config_manager = config_manager or ConfigManager()
        self.host = host or HostPlatform.detect()
        self.env_manager = env_manager or EnvManager(is_windows=self.host.is_windows)
        self.catalog = catalog

        self.lock = StoreLock(self.config_manager.base_dir)
        self.store = VersionStore(self.config_manager.versions_dir, self.host)
        self.installer = ArchiveInstaller(self.config_manager, self.host)
        self.switcher = ActiveVersionSwitcher(self.config_manager, self.store, self.env_manager, self.host)
        self.aliases = AliasRegistry(self.config_manager.base_dir, self.store)
        self.pins = LocalPinResolver(self.store)

    def resolve_latest(self, runtime: RuntimeType, lts_only: bool = False) -> str:
        """
        通过远程版本目录解析最新版本。

        参数:
            runtime: 运行时类型
            lts_only: 是否只考虑 LTS / 稳定版本

        返回:
            版本号

        抛出:
            CatalogUnavailableError: 未配置远程版本目录或没有可用版本时抛出
        """
        if self.catalog is None:
            raise CatalogUnavailableError(f"无法解析 {runtime.display_name} 最新版本: 未配置远程版本目录", runtime)
        records = self.catalog.list_versions(runtime)
        version = version_utils.select_latest(records, stable_only=lts_only)
        if version is None:
            kind = "LTS " if lts_only else ""
            raise CatalogUnavailableError(f"未找到可用的 {runtime.display_name} {kind}版本", runtime)
        logger.info(f"{runtime.display_name} 最新{'LTS ' if lts_only else ''}版本: {version}")
        return version

    def _resolve_install_target(self, runtime: RuntimeType, version: str) -> str:
        name = InputValidator.sanitize_version_string(version)
        if name.lower() == LATEST:
            return self.resolve_latest(runtime)
        if name.lower() == LTS:
            if not get_profile(runtime, self.host).has_lts_alias:
                raise VersionManagerError(f"{runtime.display_name} 没有 LTS 版本", runtime)
            return self.resolve_latest(runtime, lts_only=True)
        return name.lstrip("v") if runtime == RuntimeType.NODE else name

    def install_version(
        self,
        runtime: RuntimeType,
        version: str,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> bool:
        """
        安装指定版本。

        参数:
            runtime: 运行时类型
            version: 版本号，或 latest / lts（仅 Node.js）
            progress_callback: 下载进度回调函数

        返回:
            新安装返回 True，已安装返回 False
        """
        version = self._resolve_install_target(runtime, version)
        with self.lock:
            return self.store.install(
                runtime,
                version,
                lambda root: self.installer.install(runtime, version, root, progress_callback),
            )

    def resolve_name(self, runtime: RuntimeType, name: str) -> str:
        """别名优先解析，非别名按版本号返回。"""
        return self.aliases.resolve(runtime, name) or name

    def switch_version(self, runtime: RuntimeType, name: str) -> str:
        """
        切换到指定版本或别名。

        返回:
            实际切换到的版本号
        """
        with self.lock:
            version = self.resolve_name(runtime, name)
            self.switcher.use(runtime, version)
        return version

    def get_current_version(self, runtime: RuntimeType) -> Optional[str]:
        return self.switcher.current(runtime)

    def delete_version(self, runtime: RuntimeType, version: str) -> None:
        with self.lock:
            self.store.remove(runtime, version, self.switcher.current(runtime))

    def list_installed(self, runtime: RuntimeType) -> List[str]:
        """
        列出已安装版本，活动版本带 (current) 标记。

        返回:
            版本标签列表，如 ["18.17.0 (current)", "20.5.0"]
        """
        entries = self.store.list_versions(runtime, self.switcher.current(runtime))
        return [
            f"{entry['version']} (current)" if entry["current"] else entry["version"]
            for entry in entries
        ]

    def create_alias(self, runtime: RuntimeType, alias: str, version: str) -> None:
        self.aliases.create(runtime, alias, version)

    def resolve_alias(self, runtime: RuntimeType, alias: str) -> Optional[str]:
        return self.aliases.resolve(runtime, alias)

    def list_aliases(self, runtime: RuntimeType) -> List[Tuple[str, str]]:
        return self.aliases.list(runtime)

    def set_local_version(self, runtime: RuntimeType, version: str, directory: Optional[Path] = None) -> Path:
        return self.pins.set_pin(runtime, version, directory)

    def get_local_version(self, runtime: RuntimeType, directory: Optional[Path] = None) -> Optional[str]:
        return self.pins.get_pin(runtime, directory)

    def exec_with_version(
        self,
        runtime: RuntimeType,
        version: str,
        command: str,
        args: Optional[List[str]] = None,
    ) -> int:
        """
        使用指定版本执行命令，版本未安装时先自动安装。

        参数:
            runtime: 运行时类型
            version: 版本号或别名
            command: 要执行的命令
            args: 命令参数

        返回:
            命令退出码
        """
        version = self._resolve_install_target(runtime, self.resolve_name(runtime, version))
        if not self.store.is_installed(runtime, version):
            logger.info(f"{runtime.display_name} 版本 {version} 未安装，正在安装...")
            self.install_version(runtime, version)
            if not self.store.is_installed(runtime, version):
                raise VersionNotInstalledError(runtime, version)

        bin_dir = self.store.binary_directory(runtime, version)
        env = dict(os.environ)
        env["PATH"] = f"{bin_dir}{os.pathsep}{env.get('PATH', '')}"

        logger.debug(f"使用 {runtime.display_name} {version} 执行: {command} {args or []}")
        try:
            result = subprocess.run([command, *(args or [])], env=env)
        except OSError as e:
            raise VersionManagerError(f"无法执行命令 {command}: {e}", runtime, version) from e
        return result.returncode

    def clean(self) -> int:
        """
        清理下载缓存、临时文件和未完成的安装目录。

        返回:
            清理的条目数量
        """
        base_dir = self.config_manager.base_dir
        count = 0
        with self.lock:
            cache_dir = self.config_manager.cache_dir
            if cache_dir.is_dir():
                for entry in cache_dir.iterdir():
                    remove_path(entry)
                    count += 1
            for entry in base_dir.iterdir():
                if entry.name.startswith(TEMP_PREFIX):
                    remove_path(entry)
                    count += 1
            count += self.store.clear_staging()
        logger.info(f"清理完成，共删除 {count} 项")
        return count

    def migrate_from(self, source: str, runtime: RuntimeType) -> int:
        """
        从其他版本管理器迁移版本。

        参数:
            source: 源版本管理器名称，如 nvm、rustup
            runtime: 运行时类型

        返回:
            迁移的版本数量
        """
        adapter = get_adapter(
            source,
            runtime,
            self.store,
            self.host,
            policy=self.config_manager.get_migration_policy(),
        )
        with self.lock:
            return adapter.migrate()

    def status(self) -> Dict[RuntimeType, Optional[str]]:
        """获取所有运行时的活动版本。"""
        return {runtime: self.switcher.current(runtime) for runtime in RuntimeType}
