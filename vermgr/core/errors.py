"""
错误类型模块。

定义版本存储与切换引擎的全部异常类型。所有异常都继承自
VersionManagerError，并在可用时携带运行时类型和版本号上下文。
"""

from typing import Optional, Any


class VersionManagerError(Exception):
    """版本管理错误异常。"""

    def __init__(self, message: str, runtime: Optional[Any] = None, version: Optional[str] = None):
        super().__init__(message)
        self.runtime = runtime
        self.version = version


def _label(runtime: Any) -> str:
    return getattr(runtime, "display_name", None) or str(runtime)


class UnsupportedPlatformError(VersionManagerError):
    """当前操作系统和架构组合不受支持。"""

    def __init__(self, runtime: Optional[Any], os_name: str, arch_name: str):
        if runtime is None:
            message = f"不支持的平台: {os_name}/{arch_name}"
        else:
            message = f"{_label(runtime)} 不支持平台: {os_name}/{arch_name}"
        super().__init__(message, runtime=runtime)
        self.os_name = os_name
        self.arch_name = arch_name


class VersionNotInstalledError(VersionManagerError):
    """版本未安装。"""

    def __init__(self, runtime: Any, version: str):
        super().__init__(f"{_label(runtime)} 版本 {version} 未安装", runtime, version)


class VersionNotFoundError(VersionManagerError):
    """要删除的版本不存在。"""

    def __init__(self, runtime: Any, version: str):
        super().__init__(f"找不到 {_label(runtime)} 版本 {version}", runtime, version)


class VersionCurrentlyActiveError(VersionManagerError):
    """试图删除当前活动版本。"""

    def __init__(self, runtime: Any, version: str):
        super().__init__(
            f"无法删除当前活动的 {_label(runtime)} 版本 {version}。请先切换到其他版本。",
            runtime,
            version,
        )


class InstallScriptError(VersionManagerError):
    """安装脚本执行失败。"""

    def __init__(self, runtime: Any, version: str, returncode: int):
        super().__init__(
            f"{_label(runtime)} {version} 安装脚本执行失败，退出码: {returncode}",
            runtime,
            version,
        )
        self.returncode = returncode


class UnsupportedArchiveFormatError(VersionManagerError):
    """不支持的压缩文件格式。"""

    def __init__(self, extension: str, runtime: Optional[Any] = None, version: Optional[str] = None):
        super().__init__(f"不支持的压缩文件格式: {extension}", runtime, version)
        self.extension = extension


class ExtractionError(VersionManagerError):
    """解压错误异常。"""
    pass


class UnsupportedSourceManagerError(VersionManagerError):
    """不支持的源版本管理器。"""

    def __init__(self, source: str, runtime: Any):
        super().__init__(f"不支持的源版本管理器: {source} for {_label(runtime)}", runtime)
        self.source = source


class MigrationSourceNotFoundError(VersionManagerError):
    """迁移源目录不存在。"""

    def __init__(self, source: str, runtime: Any, path: Any):
        super().__init__(f"找不到 {source} 版本目录: {path}", runtime)
        self.source = source
        self.path = path


class DownloadError(VersionManagerError):
    """下载错误异常。"""

    def __init__(
        self,
        message: str,
        url: str,
        runtime: Optional[Any] = None,
        version: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, runtime, version)
        self.url = url
        self.status_code = status_code


class StoreIOError(VersionManagerError):
    """文件系统操作失败。"""
    pass


class LayoutMismatchError(VersionManagerError):
    """解压或修复后未找到预期的可执行文件。"""

    def __init__(self, runtime: Any, version: str, expected: Any):
        super().__init__(
            f"{_label(runtime)} {version} 安装布局不符合预期，缺少: {expected}",
            runtime,
            version,
        )
        self.expected = expected


class CatalogUnavailableError(VersionManagerError):
    """无法获取远程版本目录。"""
    pass
