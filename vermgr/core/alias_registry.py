"""
别名注册表模块。

每种运行时的别名保存在存储根目录下的 aliases-<运行时>.json 中，
格式为 {"aliases": {别名: 版本号}}。
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from vermgr.core.config_manager import atomic_save_json
from vermgr.core.errors import StoreIOError, VersionNotInstalledError
from vermgr.core.interfaces import IAliasRegistry
from vermgr.core.runtime_profile import RuntimeType
from vermgr.core.version_store import VersionStore
from vermgr.utils.input_validator import InputValidator
from vermgr.utils.logger import get_logger

logger = get_logger()


class AliasRegistry(IAliasRegistry):
    """别名注册表类。别名只能指向具体版本，不支持别名链。"""

    def __init__(self, base_dir: Path, store: VersionStore):
        self.base_dir = Path(base_dir)
        self.store = store

    def alias_file(self, runtime: RuntimeType) -> Path:
        return self.base_dir / f"aliases-{runtime.value}.json"

    def _load(self, runtime: RuntimeType) -> Dict[str, str]:
        alias_file = self.alias_file(runtime)
        if not alias_file.exists():
            return {}
        try:
            with open(alias_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreIOError(f"读取别名文件 {alias_file} 失败: {e}", runtime) from e
        aliases = data.get("aliases", {}) if isinstance(data, dict) else {}
        return dict(aliases) if isinstance(aliases, dict) else {}

    def _save(self, runtime: RuntimeType, aliases: Dict[str, str]) -> None:
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            atomic_save_json(self.alias_file(runtime), {"aliases": aliases})
        except OSError as e:
            raise StoreIOError(f"保存别名文件失败: {e}", runtime) from e

    def create(self, runtime: RuntimeType, alias: str, version: str) -> None:
        """
        创建或覆盖别名。

        参数:
            runtime: 运行时类型
            alias: 别名
            version: 目标版本号

        抛出:
            VersionNotInstalledError: 目标版本未安装时抛出
        """
        InputValidator.validate_alias_name(alias)
        if not self.store.is_installed(runtime, version):
            raise VersionNotInstalledError(runtime, version)

        aliases = self._load(runtime)
        aliases[alias] = version
        self._save(runtime, aliases)
        logger.info(f"已创建 {runtime.display_name} 别名 {alias} -> {version}")

    def resolve(self, runtime: RuntimeType, alias: str) -> Optional[str]:
        """
        解析别名。

        参数:
            runtime: 运行时类型
            alias: 别名

        返回:
            别名指向的版本号，别名不存在时返回 None

        抛出:
            VersionNotInstalledError: 别名指向的版本已被删除时抛出
        """
        version = self._load(runtime).get(alias)
        if version is None:
            return None
        if not self.store.is_installed(runtime, version):
            raise VersionNotInstalledError(runtime, version)
        return version

    def list(self, runtime: RuntimeType) -> List[Tuple[str, str]]:
        return sorted(self._load(runtime).items())
