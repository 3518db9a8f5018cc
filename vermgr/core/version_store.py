"""
版本存储模块。

管理 versions/<运行时>/<版本号>/ 目录树的安装、删除和列举。
版本目录存在即表示已完整安装，安装过程在隐藏的临时目录中进行，成功后再重命名。
"""

import os
import shutil
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from vermgr.core.errors import (
    StoreIOError,
    VersionCurrentlyActiveError,
    VersionNotFoundError,
)
from vermgr.core.interfaces import IVersionStore
from vermgr.core.runtime_profile import HostPlatform, RuntimeType, get_profile
from vermgr.utils.fs_utils import normalize_permissions
from vermgr.utils.input_validator import InputValidator
from vermgr.utils.logger import get_logger

logger = get_logger()

STAGING_PREFIX = ".staging-"


class VersionStore(IVersionStore):
    """
    版本存储类。

    独占 versions 目录，只负责目录的增删查，不关心文件如何下载。
    """

    def __init__(self, versions_dir: Path, host: HostPlatform):
        """
        初始化版本存储。

        参数:
            versions_dir: 版本根目录
            host: 主机平台
        """
        self.versions_dir = Path(versions_dir)
        self.host = host

    def versions_root(self, runtime: RuntimeType) -> Path:
        return self.versions_dir / runtime.value

    def version_dir(self, runtime: RuntimeType, version: str) -> Path:
        InputValidator.validate_version_string(version)
        return self.versions_root(runtime) / version

    def is_installed(self, runtime: RuntimeType, version: str) -> bool:
        return self.version_dir(runtime, version).is_dir()

    def binary_directory(self, runtime: RuntimeType, version: str) -> Path:
        """获取已安装版本的可执行文件目录。"""
        profile = get_profile(runtime, self.host)
        return profile.binary_directory(self.version_dir(runtime, version), version)

    def install(self, runtime: RuntimeType, version: str, installer: Callable[[Path], None]) -> bool:
        """
        安装指定版本。

        版本目录已存在时直接返回 False，不调用 installer。否则在临时目录中调用
        installer 填充内容，设置可执行权限后重命名为正式版本目录。

        参数:
            runtime: 运行时类型
            version: 版本号
            installer: 接收临时版本根目录并填充内容的回调

        返回:
            新安装返回 True，已安装返回 False
        """
        target = self.version_dir(runtime, version)
        if target.exists():
            logger.info(f"{runtime.display_name} 版本 {version} 已安装")
            return False

        root = self.versions_root(runtime)
        staging = root / f"{STAGING_PREFIX}{version}-{uuid.uuid4().hex[:8]}"
        try:
            staging.mkdir(parents=True)
        except OSError as e:
            raise StoreIOError(f"无法创建安装目录 {staging}: {e}", runtime, version) from e

        try:
            installer(staging)
            profile = get_profile(runtime, self.host)
            normalize_permissions(profile.binary_directory(staging, version))
            os.rename(staging, target)
        except OSError as e:
            shutil.rmtree(staging, ignore_errors=True)
            raise StoreIOError(f"安装 {runtime.display_name} {version} 失败: {e}", runtime, version) from e
        except BaseException:
            shutil.rmtree(staging, ignore_errors=True)
            raise

        logger.info(f"已安装 {runtime.display_name} 版本 {version} 到 {target}")
        return True

    def remove(self, runtime: RuntimeType, version: str, active_version: Optional[str] = None) -> None:
        """
        删除指定版本。

        参数:
            runtime: 运行时类型
            version: 版本号
            active_version: 该运行时当前活动版本

        抛出:
            VersionCurrentlyActiveError: 试图删除活动版本时抛出
            VersionNotFoundError: 版本目录不存在时抛出
            StoreIOError: 删除失败时抛出
        """
        if active_version is not None and version == active_version:
            raise VersionCurrentlyActiveError(runtime, version)

        target = self.version_dir(runtime, version)
        if not target.is_dir():
            raise VersionNotFoundError(runtime, version)

        try:
            shutil.rmtree(target)
        except OSError as e:
            raise StoreIOError(f"删除 {runtime.display_name} 版本 {version} 失败: {e}", runtime, version) from e
        logger.info(f"成功删除 {runtime.display_name} 版本 {version}")

    def list_versions(self, runtime: RuntimeType, current: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        列出已安装的版本。

        参数:
            runtime: 运行时类型
            current: 当前活动版本，匹配的条目标记为 current

        返回:
            版本信息列表，每个元素包含 version、path、install_date、current
        """
        root = self.versions_root(runtime)
        if not root.is_dir():
            return []

        versions = []
        for entry in sorted(root.iterdir(), key=lambda p: p.name):
            if not entry.is_dir() or entry.name.startswith("."):
                continue
            versions.append({
                "version": entry.name,
                "path": str(entry),
                "install_date": datetime.fromtimestamp(entry.stat().st_mtime).isoformat(),
                "current": entry.name == current,
            })
        return versions

    def clear_staging(self, runtime: Optional[RuntimeType] = None) -> int:
        """
        清理中断安装留下的临时目录。

        参数:
            runtime: 运行时类型，为空时清理全部

        返回:
            清理的目录数量
        """
        runtimes = [runtime] if runtime else list(RuntimeType)
        count = 0
        for rt in runtimes:
            root = self.versions_root(rt)
            if not root.is_dir():
                continue
            for entry in root.iterdir():
                if entry.is_dir() and entry.name.startswith(STAGING_PREFIX):
                    shutil.rmtree(entry, ignore_errors=True)
                    count += 1
        if count:
            logger.info(f"已清理 {count} 个未完成的安装目录")
        return count
