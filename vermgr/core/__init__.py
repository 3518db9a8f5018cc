"""
vermgr 核心模块。

提供版本存储、归档安装、活动版本切换、别名、本地版本文件和迁移功能。
"""

from .errors import (
    VersionManagerError, UnsupportedPlatformError, VersionNotInstalledError, VersionNotFoundError,
    VersionCurrentlyActiveError, InstallScriptError, UnsupportedArchiveFormatError, ExtractionError,
    UnsupportedSourceManagerError, MigrationSourceNotFoundError, DownloadError, StoreIOError,
    LayoutMismatchError, CatalogUnavailableError,
)
from .interfaces import (
    IConfigManager, IEnvManager, IVersionStore, IActiveVersionSwitcher, IAliasRegistry,
    ILocalPinResolver, IRemoteCatalog,
)
from .runtime_profile import (
    RuntimeType, OsType, ArchType, HostPlatform, RuntimeProfile,
    NodeProfile, RustProfile, PythonProfile, GoProfile, get_profile,
)
from .config_manager import ConfigManager, ConfigValidationError, ConfigLoadError, ConfigSaveError
from .store_lock import StoreLock
from .version_store import VersionStore
from .archive_installer import ArchiveInstaller
from .env_manager import EnvManager
from .active_switcher import ActiveVersionSwitcher
from .alias_registry import AliasRegistry
from .local_pin import LocalPinResolver
from .migration import MigrationAdapter, get_adapter, supported_sources
from .version_manager import VersionManager
from . import version_utils

__all__ = [
    "VersionManagerError", "UnsupportedPlatformError", "VersionNotInstalledError", "VersionNotFoundError",
    "VersionCurrentlyActiveError", "InstallScriptError", "UnsupportedArchiveFormatError", "ExtractionError",
    "UnsupportedSourceManagerError", "MigrationSourceNotFoundError", "DownloadError", "StoreIOError",
    "LayoutMismatchError", "CatalogUnavailableError",
    "IConfigManager", "IEnvManager", "IVersionStore", "IActiveVersionSwitcher", "IAliasRegistry",
    "ILocalPinResolver", "IRemoteCatalog",
    "RuntimeType", "OsType", "ArchType", "HostPlatform", "RuntimeProfile",
    "NodeProfile", "RustProfile", "PythonProfile", "GoProfile", "get_profile",
    "ConfigManager", "ConfigValidationError", "ConfigLoadError", "ConfigSaveError",
    "StoreLock", "VersionStore", "ArchiveInstaller", "EnvManager", "ActiveVersionSwitcher",
    "AliasRegistry", "LocalPinResolver", "MigrationAdapter", "get_adapter", "supported_sources",
    "VersionManager",
    "version_utils",
]
