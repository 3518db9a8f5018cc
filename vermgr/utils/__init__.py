"""
vermgr 工具模块。

提供日志记录、输入验证和文件系统操作等工具功能。
"""

from .logger import get_logger, setup_logger, set_log_level, get_base_dir
from .input_validator import InputValidator, InputValidationError
from .fs_utils import make_executable, normalize_permissions, copy_binaries, copy_tree

__all__ = [
    "get_logger",
    "setup_logger",
    "set_log_level",
    "get_base_dir",
    "InputValidator",
    "InputValidationError",
    "make_executable",
    "normalize_permissions",
    "copy_binaries",
    "copy_tree",
]
