"""
活动版本切换模块。

维护每种运行时的活动版本，并重新生成 bin 目录下的可执行文件链接。
"""

import os
import shutil
from pathlib import Path
from typing import Dict, List, Optional

from vermgr.core.config_manager import ConfigManager
from vermgr.core.errors import (
    LayoutMismatchError,
    StoreIOError,
    VersionNotInstalledError,
)
from vermgr.core.interfaces import IActiveVersionSwitcher, IEnvManager
from vermgr.core.runtime_profile import HostPlatform, RuntimeType
from vermgr.core.version_store import VersionStore
from vermgr.utils.fs_utils import list_files, remove_path
from vermgr.utils.logger import get_logger

logger = get_logger()

MARKER_PREFIX = ".current-"
SHIM_MARKER = "REM vermgr shim"


class ActiveVersionSwitcher(IActiveVersionSwitcher):
    """
    活动版本切换器类。

    bin 目录包含所有运行时活动版本的可执行文件链接。每次切换都在
    bin.staging 中完整重建，再通过重命名替换旧目录。
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        store: VersionStore,
        env_manager: IEnvManager,
        host: HostPlatform,
    ):
        """
        初始化活动版本切换器并加载所有运行时的活动版本标记。

        参数:
            config_manager: 配置管理器实例
            store: 版本存储实例
            env_manager: 环境变量管理器实例
            host: 主机平台
        """
        self.base_dir = config_manager.base_dir
        self.bin_dir = config_manager.bin_dir
        self.store = store
        self.env_manager = env_manager
        self.host = host
        self._active: Dict[RuntimeType, str] = {}
        self.load()

    def marker_file(self, runtime: RuntimeType) -> Path:
        return self.base_dir / f"{MARKER_PREFIX}{runtime.value}"

    def load(self) -> Dict[RuntimeType, str]:
        """
        从标记文件加载全部运行时的活动版本。

        返回:
            运行时类型到活动版本的映射
        """
        self._active = {}
        for runtime in RuntimeType:
            marker = self.marker_file(runtime)
            if not marker.is_file():
                continue
            version = marker.read_text(encoding="utf-8").strip()
            if version:
                self._active[runtime] = version
        logger.debug(f"已加载活动版本: {self._active}")
        return dict(self._active)

    def current(self, runtime: RuntimeType) -> Optional[str]:
        return self._active.get(runtime)

    def active_versions(self) -> Dict[RuntimeType, str]:
        return dict(self._active)

    def use(self, runtime: RuntimeType, version: str) -> None:
        """
        切换运行时到指定版本。

        参数:
            runtime: 运行时类型
            version: 版本号

        抛出:
            VersionNotInstalledError: 版本未安装时抛出
            LayoutMismatchError: 版本缺少可执行文件目录时抛出
            StoreIOError: 重建 bin 目录或写入标记文件失败时抛出
        """
        if not self.store.is_installed(runtime, version):
            raise VersionNotInstalledError(runtime, version)

        binary_dir = self.store.binary_directory(runtime, version)
        if not binary_dir.is_dir():
            raise LayoutMismatchError(runtime, version, binary_dir)

        sources = self._collect_sources(runtime)
        sources.append(binary_dir)
        self._rebuild_farm(sources)

        self.env_manager.add_to_path(str(self.bin_dir))

        try:
            self.marker_file(runtime).write_text(version, encoding="utf-8")
        except OSError as e:
            raise StoreIOError(f"写入活动版本标记失败: {e}", runtime, version) from e

        self._active[runtime] = version
        logger.info(f"已切换 {runtime.display_name} 到版本 {version}")

    def _collect_sources(self, switched: RuntimeType) -> List[Path]:
        """收集其他运行时活动版本的可执行文件目录。"""
        sources = []
        for runtime, version in self._active.items():
            if runtime == switched:
                continue
            if not self.store.is_installed(runtime, version):
                logger.warning(f"{runtime.display_name} 活动版本 {version} 已不存在，跳过")
                continue
            binary_dir = self.store.binary_directory(runtime, version)
            if binary_dir.is_dir():
                sources.append(binary_dir)
        return sources

    def _is_shim(self, path: Path) -> bool:
        if path.suffix.lower() != ".cmd" or not path.is_file():
            return False
        try:
            return SHIM_MARKER in path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            return False

    def _link(self, binary: Path, farm: Path) -> None:
        """在 bin 目录中为可执行文件创建符号链接或 .cmd 转发脚本。"""
        target = binary.absolute()
        if self.host.is_windows:
            shim = farm / f"{binary.stem}.cmd"
            content = f'@echo off\r\n{SHIM_MARKER}\r\n"{target}" %*\r\n'
            shim.write_bytes(content.encode("utf-8"))
        else:
            link = farm / binary.name
            if link.is_symlink() or link.exists():
                link.unlink()
            os.symlink(target, link)

    def _rebuild_farm(self, sources: List[Path]) -> None:
        """
        在 bin.staging 中重建 bin 目录并替换旧目录。

        旧目录中用户自行放入的普通文件会被保留。后处理的来源目录优先，
        同名文件覆盖先前的链接。
        """
        staging = self.bin_dir.with_name(self.bin_dir.name + ".staging")
        old = self.bin_dir.with_name(self.bin_dir.name + ".old")
        try:
            for leftover in (staging, old):
                remove_path(leftover)
            staging.mkdir(parents=True)

            if self.bin_dir.is_dir():
                for entry in self.bin_dir.iterdir():
                    if entry.is_symlink() or not entry.is_file() or self._is_shim(entry):
                        continue
                    shutil.copy2(entry, staging / entry.name)

            count = 0
            for source in sources:
                for binary in list_files(source):
                    self._link(binary, staging)
                    count += 1

            if self.bin_dir.exists():
                os.rename(self.bin_dir, old)
            os.rename(staging, self.bin_dir)
            remove_path(old)
        except OSError as e:
            shutil.rmtree(staging, ignore_errors=True)
            raise StoreIOError(f"重建 {self.bin_dir} 失败: {e}") from e
        logger.debug(f"已在 {self.bin_dir} 中创建 {count} 个链接")
