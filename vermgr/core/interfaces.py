"""
核心模块抽象接口定义。

定义配置管理、版本存储、版本切换、别名、本地版本文件和远程版本目录的抽象接口。
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple


class IConfigManager(ABC):
    """配置管理器抽象接口。"""

    @abstractmethod
    def get_config(self) -> dict[str, Any]:
        """获取配置字典。"""
        pass

    @abstractmethod
    def save_config(self, config: dict[str, Any] | None = None) -> None:
        """保存配置到文件。"""
        pass

    @abstractmethod
    def get_settings(self) -> dict[str, Any]:
        """获取 settings 配置部分。"""
        pass

    @abstractmethod
    def get_mirror(self, runtime: Any) -> str:
        """获取指定运行时的下载镜像地址。"""
        pass

    @abstractmethod
    def get_download_timeout(self) -> int:
        """获取下载超时配置（秒）。"""
        pass

    @abstractmethod
    def get_migration_policy(self) -> str:
        """获取迁移源目录缺失时的处理策略。"""
        pass


class IEnvManager(ABC):
    """环境变量管理器抽象接口。"""

    @abstractmethod
    def add_to_path(self, entry: str) -> bool:
        """向 PATH 添加条目。"""
        pass

    @abstractmethod
    def path_contains(self, entry: str) -> bool:
        """检查 PATH 是否包含条目。"""
        pass


class IVersionStore(ABC):
    """版本存储抽象接口。"""

    @abstractmethod
    def is_installed(self, runtime: Any, version: str) -> bool:
        """判断版本是否已安装。"""
        pass

    @abstractmethod
    def install(self, runtime: Any, version: str, installer: Callable[[Path], None]) -> bool:
        """安装版本，已安装时直接返回 False。"""
        pass

    @abstractmethod
    def remove(self, runtime: Any, version: str, active_version: Optional[str] = None) -> None:
        """删除版本。"""
        pass

    @abstractmethod
    def list_versions(self, runtime: Any, current: Optional[str] = None) -> List[Dict[str, Any]]:
        """列出已安装版本。"""
        pass


class IActiveVersionSwitcher(ABC):
    """活动版本切换器抽象接口。"""

    @abstractmethod
    def use(self, runtime: Any, version: str) -> None:
        """切换到指定版本。"""
        pass

    @abstractmethod
    def current(self, runtime: Any) -> Optional[str]:
        """获取当前活动版本。"""
        pass


class IAliasRegistry(ABC):
    """别名注册表抽象接口。"""

    @abstractmethod
    def create(self, runtime: Any, alias: str, version: str) -> None:
        """创建别名。"""
        pass

    @abstractmethod
    def resolve(self, runtime: Any, alias: str) -> Optional[str]:
        """解析别名。"""
        pass

    @abstractmethod
    def list(self, runtime: Any) -> List[Tuple[str, str]]:
        """列出全部别名。"""
        pass


class ILocalPinResolver(ABC):
    """本地版本文件抽象接口。"""

    @abstractmethod
    def set_pin(self, runtime: Any, version: str, directory: Optional[Path] = None) -> Path:
        """写入本地版本文件。"""
        pass

    @abstractmethod
    def get_pin(self, runtime: Any, directory: Optional[Path] = None) -> Optional[str]:
        """读取本地版本文件。"""
        pass


class IRemoteCatalog(ABC):
    """
    远程版本目录抽象接口。

    由外部实现（如访问各运行时发布服务器），引擎只依赖返回记录的结构：
    {"version": str, "is_stable": bool, "release_date": str}
    """

    @abstractmethod
    def list_versions(self, runtime: Any) -> List[Dict[str, Any]]:
        """获取远程可用版本记录。"""
        pass
