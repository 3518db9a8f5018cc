"""
配置管理器模块。

提供存储根目录下 config.json 的加载、保存和验证功能。
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Optional

from vermgr.core.interfaces import IConfigManager
from vermgr.core.runtime_profile import RuntimeType
from vermgr.utils.logger import get_base_dir, get_logger

logger = get_logger()

MIGRATION_POLICIES = ("default", "error", "skip")


class ConfigValidationError(Exception):
    """配置验证错误异常。"""
    pass


class ConfigLoadError(Exception):
    """配置加载错误异常。"""
    pass


class ConfigSaveError(Exception):
    """配置保存错误异常。"""
    pass


def atomic_save_json(file_path: Path, data: Any, indent: int = 2) -> None:
    """
    原子保存 JSON 数据到文件，防止写入中断导致文件损坏。

    参数:
        file_path: 目标文件路径
        data: 要保存的数据
        indent: JSON 缩进
    """
    temp_path = file_path.with_suffix(file_path.suffix + ".tmp")
    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)
        os.replace(temp_path, file_path)
    except BaseException:
        if temp_path.exists():
            temp_path.unlink()
        raise


class ConfigManager(IConfigManager):
    """
    配置管理器类。

    负责管理 vermgr 配置的加载、保存、验证和访问。
    实现 IConfigManager 抽象接口。
    """

    CONFIG_FILE_NAME = "config.json"

    REQUIRED_FIELDS = {
        "settings": dict,
    }

    SETTINGS_FIELDS = {
        "mirrors": dict,
        "download_timeout": int,
        "download_chunk_size": int,
        "migration_missing_source_policy": str,
        "log_level": str,
    }

    def __init__(self, base_dir: Optional[Path] = None):
        """
        初始化配置管理器。

        参数:
            base_dir: 存储根目录，默认为 VERMGR_HOME 或 ~/.version-manager
        """
        self.base_dir = Path(base_dir).expanduser().resolve() if base_dir else get_base_dir()
        self.config_file = self.base_dir / self.CONFIG_FILE_NAME
        self._config: dict[str, Any] = {}
        self.base_dir.mkdir(parents=True, exist_ok=True)

    @property
    def versions_dir(self) -> Path:
        return self.base_dir / "versions"

    @property
    def bin_dir(self) -> Path:
        return self.base_dir / "bin"

    @property
    def cache_dir(self) -> Path:
        return self.base_dir / "cache"

    def _get_builtin_default_config(self) -> dict[str, Any]:
        """获取内置默认配置。"""
        return {
            "settings": {
                "mirrors": {runtime.value: "" for runtime in RuntimeType},
                "download_timeout": 300,
                "download_chunk_size": 8192,
                "migration_missing_source_policy": "default",
                "log_level": "INFO",
            },
        }

    def load_config(self) -> dict[str, Any]:
        """
        加载配置文件。

        如果配置文件不存在，则创建默认配置文件；文件损坏或验证失败时使用默认配置。

        返回:
            配置字典
        """
        try:
            if not self.config_file.exists():
                logger.info(f"配置文件不存在，创建默认配置: {self.config_file}")
                self._config = self._get_builtin_default_config()
                self.save_config()
                return self._config

            logger.debug(f"从文件加载配置: {self.config_file}")
            with open(self.config_file, "r", encoding="utf-8") as f:
                self._config = json.load(f)

            self._ensure_backward_compatibility()
            self.validate_config(self._config)
            logger.debug("配置加载成功")
            return self._config
        except (IOError, OSError, json.JSONDecodeError) as e:
            logger.error(f"加载配置文件失败，使用默认配置: {e}")
            self._config = self._get_builtin_default_config()
            return self._config
        except ConfigValidationError as e:
            logger.error(f"配置验证失败，使用默认配置: {e}")
            self._config = self._get_builtin_default_config()
            return self._config

    def _ensure_backward_compatibility(self) -> None:
        """为旧版本配置补全缺失字段。"""
        if not isinstance(self._config, dict):
            raise ConfigValidationError("配置必须是字典类型")

        default_settings = self._get_builtin_default_config()["settings"]
        settings = self._config.setdefault("settings", {})
        if not isinstance(settings, dict):
            return

        for field, value in default_settings.items():
            if field not in settings:
                settings[field] = copy.deepcopy(value)

        mirrors = settings.get("mirrors")
        if isinstance(mirrors, dict):
            for runtime in RuntimeType:
                mirrors.setdefault(runtime.value, "")

    def save_config(self, config: dict[str, Any] | None = None) -> None:
        """
        保存配置到文件。

        参数:
            config: 要保存的配置字典，如果为 None 则保存当前配置
        """
        try:
            if config is not None:
                self._config = config

            self.validate_config(self._config)

            logger.debug(f"保存配置到 {self.config_file}")
            atomic_save_json(self.config_file, self._config, indent=2)
            logger.debug("配置保存成功")
        except ConfigValidationError as e:
            logger.error(f"配置验证失败，无法保存: {e}")
            raise
        except (IOError, OSError) as e:
            logger.error(f"保存配置失败: {e}")
            raise ConfigSaveError(f"无法保存配置到 {self.config_file}: {e}") from e

    def validate_config(self, config: dict[str, Any]) -> bool:
        """
        验证配置的有效性。

        参数:
            config: 要验证的配置字典

        返回:
            验证通过返回 True

        抛出:
            ConfigValidationError: 配置验证失败时抛出
        """
        for field, expected_type in self.REQUIRED_FIELDS.items():
            if field not in config:
                raise ConfigValidationError(f"缺少必需字段: {field}")
            if not isinstance(config[field], expected_type):
                raise ConfigValidationError(
                    f"字段 '{field}' 必须是 {expected_type.__name__} 类型，"
                    f"实际为 {type(config[field]).__name__}"
                )

        settings = config["settings"]
        for field, expected_type in self.SETTINGS_FIELDS.items():
            if field not in settings:
                raise ConfigValidationError(f"settings 中缺少必需字段: {field}")
            if not isinstance(settings[field], expected_type):
                raise ConfigValidationError(
                    f"字段 'settings.{field}' 必须是 {expected_type.__name__} 类型，"
                    f"实际为 {type(settings[field]).__name__}"
                )

        if settings["migration_missing_source_policy"] not in MIGRATION_POLICIES:
            raise ConfigValidationError(
                f"migration_missing_source_policy 必须是 {', '.join(MIGRATION_POLICIES)} 之一"
            )
        if settings["download_timeout"] <= 0 or settings["download_chunk_size"] <= 0:
            raise ConfigValidationError("download_timeout 和 download_chunk_size 必须为正数")

        logger.debug("配置验证通过")
        return True

    @property
    def config(self) -> dict[str, Any]:
        """
        获取配置字典（延迟加载）。

        返回:
            配置字典
        """
        if not self._config:
            self.load_config()
        return self._config

    def get_config(self) -> dict[str, Any]:
        return self.config

    def get_settings(self) -> dict[str, Any]:
        return self.config.get("settings", {})

    def get_mirror(self, runtime: RuntimeType) -> str:
        """
        获取指定运行时的下载镜像地址。

        参数:
            runtime: 运行时类型

        返回:
            镜像地址，未配置时返回空字符串（使用默认地址）
        """
        return self.get_settings().get("mirrors", {}).get(runtime.value, "")

    def set_mirror(self, runtime: RuntimeType, mirror: str) -> None:
        """设置指定运行时的下载镜像地址并保存。"""
        config = self.get_config()
        config["settings"].setdefault("mirrors", {})[runtime.value] = mirror
        self.save_config(config)

    def get_download_timeout(self) -> int:
        return self.get_settings().get("download_timeout", 300)

    def get_download_chunk_size(self) -> int:
        return self.get_settings().get("download_chunk_size", 8192)

    def get_migration_policy(self) -> str:
        return self.get_settings().get("migration_missing_source_policy", "default")

    def get_log_level(self) -> str:
        return self.get_settings().get("log_level", "INFO")

    def reset_to_default(self) -> dict[str, Any]:
        """
        重置配置为内置默认配置。

        返回:
            更新后的配置字典
        """
        self._config = self._get_builtin_default_config()
        self.save_config()
        return self._config
