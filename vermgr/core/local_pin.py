"""
本地版本文件模块。

读写项目目录下的 .node-version、.rust-version、.python-version、.go-version。
"""

from pathlib import Path
from typing import Optional

from vermgr.core.errors import StoreIOError, VersionNotInstalledError
from vermgr.core.interfaces import ILocalPinResolver
from vermgr.core.runtime_profile import RuntimeType
from vermgr.core.version_store import VersionStore
from vermgr.utils.logger import get_logger

logger = get_logger()


class LocalPinResolver(ILocalPinResolver):
    """本地版本文件解析器类。"""

    def __init__(self, store: VersionStore):
        self.store = store

    def pin_file(self, runtime: RuntimeType, directory: Optional[Path] = None) -> Path:
        return Path(directory or Path.cwd()) / runtime.pin_file_name

    def set_pin(self, runtime: RuntimeType, version: str, directory: Optional[Path] = None) -> Path:
        """
        在目录中写入本地版本文件。

        参数:
            runtime: 运行时类型
            version: 版本号
            directory: 目标目录，默认为当前工作目录

        返回:
            写入的文件路径

        抛出:
            VersionNotInstalledError: 版本未安装时抛出
        """
        if not self.store.is_installed(runtime, version):
            raise VersionNotInstalledError(runtime, version)

        pin_file = self.pin_file(runtime, directory)
        try:
            pin_file.write_text(version, encoding="utf-8")
        except OSError as e:
            raise StoreIOError(f"写入 {pin_file} 失败: {e}", runtime, version) from e
        logger.info(f"已将 {runtime.display_name} 本地版本设为 {version} ({pin_file})")
        return pin_file

    def get_pin(self, runtime: RuntimeType, directory: Optional[Path] = None) -> Optional[str]:
        """读取本地版本文件，不存在或为空时返回 None。"""
        pin_file = self.pin_file(runtime, directory)
        if not pin_file.is_file():
            return None
        version = pin_file.read_text(encoding="utf-8").strip()
        return version or None
