"""
文件系统工具模块。

提供可执行权限设置、可执行文件复制和目录树递归复制功能。
"""

import os
import shutil
from pathlib import Path
from typing import List

from vermgr.utils.logger import get_logger

logger = get_logger()

EXECUTABLE_MODE = 0o755


def is_posix() -> bool:
    """
    判断当前系统是否为 POSIX 系统。

    返回:
        非 Windows 系统返回 True
    """
    return os.name != "nt"


def make_executable(path: Path) -> None:
    """
    将文件权限设置为 rwxr-xr-x。Windows 上不做任何处理。

    参数:
        path: 文件路径
    """
    if not is_posix():
        return
    os.chmod(path, EXECUTABLE_MODE)


def normalize_permissions(directory: Path) -> int:
    """
    将目录下（不递归）所有普通文件设为可执行。

    参数:
        directory: 可执行文件目录

    返回:
        处理的文件数量
    """
    if not is_posix() or not directory.is_dir():
        return 0
    count = 0
    for entry in directory.iterdir():
        if entry.is_file() and not entry.is_symlink():
            os.chmod(entry, EXECUTABLE_MODE)
            count += 1
    logger.debug(f"已为 {directory} 下 {count} 个文件设置执行权限")
    return count


def list_files(directory: Path) -> List[Path]:
    """
    列出目录下的文件（包括指向文件的符号链接），按名称排序。

    参数:
        directory: 目录路径

    返回:
        文件路径列表，目录不存在时返回空列表
    """
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.iterdir() if p.is_file())


def copy_binaries(source_dir: Path, target_dir: Path) -> List[Path]:
    """
    将源目录中的文件复制到目标目录并设置执行权限。

    参数:
        source_dir: 源目录
        target_dir: 目标目录，不存在时自动创建

    返回:
        复制后的文件路径列表
    """
    target_dir.mkdir(parents=True, exist_ok=True)
    copied = []
    for entry in list_files(source_dir):
        target = target_dir / entry.name
        shutil.copy2(entry, target)
        make_executable(target)
        copied.append(target)
    return copied


def copy_tree(source: Path, target: Path) -> None:
    """
    递归复制目录树，符号链接按原样复制。

    参数:
        source: 源目录
        target: 目标目录
    """
    shutil.copytree(source, target, symlinks=True, dirs_exist_ok=True)


def remove_path(path: Path) -> None:
    """删除文件、符号链接或目录树。"""
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)
