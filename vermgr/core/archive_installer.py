"""
归档安装模块。

下载运行时发行包，解压到版本根目录并修复目录布局。
"""

import shutil
import tarfile
import zipfile
from pathlib import Path
from typing import Callable, Optional

import requests

from vermgr.core.config_manager import ConfigManager
from vermgr.core.errors import (
    DownloadError,
    ExtractionError,
    LayoutMismatchError,
    UnsupportedArchiveFormatError,
)
from vermgr.core.runtime_profile import HostPlatform, RuntimeType, get_profile
from vermgr.utils.fs_utils import list_files
from vermgr.utils.input_validator import InputValidationError, InputValidator
from vermgr.utils.logger import get_logger

logger = get_logger()

ProgressCallback = Callable[[int, int], None]


def _safe_join(base: Path, name: str) -> Path:
    """
    拼接压缩包成员路径，防止路径遍历漏洞。

    抛出:
        ExtractionError: 成员路径超出目标目录时抛出
    """
    try:
        return Path(InputValidator.safe_join_path(str(base), name))
    except InputValidationError as e:
        raise ExtractionError(f"压缩包包含非法路径: {name}") from e


class ArchiveInstaller:
    """
    归档安装器类。

    负责单个版本的下载、解压和布局修复，不处理重试和多镜像切换。
    """

    def __init__(self, config_manager: ConfigManager, host: HostPlatform):
        """
        初始化归档安装器。

        参数:
            config_manager: 配置管理器实例
            host: 主机平台
        """
        self.config_manager = config_manager
        self.host = host

    def _archive_path(self, runtime: RuntimeType, version: str, extension: str) -> Path:
        cache_dir = self.config_manager.cache_dir
        cache_dir.mkdir(parents=True, exist_ok=True)
        return cache_dir / f"{runtime.value}-{version}{extension}.part"

    def download(
        self,
        url: str,
        target: Path,
        runtime: Optional[RuntimeType] = None,
        version: Optional[str] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> None:
        """
        流式下载文件。

        参数:
            url: 下载地址
            target: 保存路径
            runtime: 运行时类型，用于错误信息
            version: 版本号，用于错误信息
            progress_callback: 下载进度回调函数 (已下载字节数, 总字节数)

        抛出:
            DownloadError: 网络错误或服务器返回非 2xx 状态码时抛出
        """
        timeout = self.config_manager.get_download_timeout()
        chunk_size = self.config_manager.get_download_chunk_size()
        logger.info(f"正在从 {url} 下载")

        try:
            response = requests.get(url, stream=True, timeout=timeout)
        except requests.RequestException as e:
            raise DownloadError(f"下载失败: {url}: {e}", url, runtime, version) from e

        try:
            if not 200 <= response.status_code < 300:
                raise DownloadError(
                    f"下载失败: {url} 返回状态码 {response.status_code}",
                    url,
                    runtime,
                    version,
                    status_code=response.status_code,
                )

            total_size = int(response.headers.get("content-length", 0))
            downloaded = 0
            with open(target, "wb") as f:
                for chunk in response.iter_content(chunk_size=chunk_size):
                    if chunk:
                        f.write(chunk)
                        downloaded += len(chunk)
                        if progress_callback:
                            progress_callback(downloaded, total_size)
        except requests.RequestException as e:
            raise DownloadError(f"下载中断: {url}: {e}", url, runtime, version) from e
        finally:
            response.close()

        logger.info(f"下载完成，共 {downloaded} 字节")

    def extract(self, archive_path: Path, target_dir: Path, extension: str) -> None:
        """
        解压安装包到目标目录，保留原有目录结构。

        参数:
            archive_path: 压缩包路径
            target_dir: 目标目录
            extension: 压缩包扩展名，决定解压方式

        抛出:
            UnsupportedArchiveFormatError: 扩展名不受支持时抛出
            ExtractionError: 压缩包损坏或包含非法路径时抛出
        """
        target_dir.mkdir(parents=True, exist_ok=True)
        if extension == ".tar.gz":
            self._extract_tar(archive_path, target_dir)
        elif extension == ".zip":
            self._extract_zip(archive_path, target_dir)
        else:
            raise UnsupportedArchiveFormatError(extension)

    def _extract_tar(self, archive_path: Path, target_dir: Path) -> None:
        try:
            with tarfile.open(archive_path, "r:gz") as tf:
                members = tf.getmembers()
                for member in members:
                    _safe_join(target_dir, member.name)
                if hasattr(tarfile, "data_filter"):
                    tf.extractall(target_dir, members=members, filter="data")
                else:
                    tf.extractall(target_dir, members=members)
        except (tarfile.TarError, EOFError) as e:
            raise ExtractionError(f"解压失败: {archive_path}: {e}") from e

    def _extract_zip(self, archive_path: Path, target_dir: Path) -> None:
        try:
            with zipfile.ZipFile(archive_path, "r") as zf:
                for member in zf.infolist():
                    member_path = _safe_join(target_dir, member.filename)
                    if member.is_dir():
                        member_path.mkdir(parents=True, exist_ok=True)
                    else:
                        member_path.parent.mkdir(parents=True, exist_ok=True)
                        with zf.open(member) as src, open(member_path, "wb") as dst:
                            shutil.copyfileobj(src, dst)
        except zipfile.BadZipFile as e:
            raise ExtractionError(f"解压失败: {archive_path}: {e}") from e

    def install(
        self,
        runtime: RuntimeType,
        version: str,
        version_root: Path,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> None:
        """
        下载并安装指定版本到版本根目录。

        参数:
            runtime: 运行时类型
            version: 版本号
            version_root: 版本根目录（通常是 VersionStore 提供的临时目录）
            progress_callback: 下载进度回调函数

        抛出:
            UnsupportedPlatformError: 当前平台不受支持时抛出，此时不会发起网络请求
            DownloadError: 下载失败时抛出
            InstallScriptError: Rust 安装脚本失败时抛出
            LayoutMismatchError: 安装后未找到可执行文件时抛出
        """
        profile = get_profile(runtime, self.host)
        profile.platform_suffix()

        extension = profile.archive_extension()
        url = profile.download_url(version, self.config_manager.get_mirror(runtime))
        archive_path = self._archive_path(runtime, version, extension)

        try:
            self.download(url, archive_path, runtime, version, progress_callback)
            logger.info(f"正在解压 {runtime.display_name} {version} 到 {version_root}")
            try:
                self.extract(archive_path, version_root, extension)
            except (UnsupportedArchiveFormatError, ExtractionError) as e:
                e.runtime = runtime
                e.version = version
                raise

            profile.repair_layout(version_root, version)

            bin_dir = profile.binary_directory(version_root, version)
            if not bin_dir.is_dir() or not list_files(bin_dir):
                raise LayoutMismatchError(runtime, version, bin_dir)
        finally:
            if archive_path.exists():
                archive_path.unlink()

        logger.info(f"成功安装 {runtime.display_name} {version}")
