"""
输入验证模块。

提供运行时名称、版本号、别名的验证，以及防止路径遍历的安全路径连接。
"""

import os
import re

from vermgr.utils.logger import get_logger

logger = get_logger()


class InputValidationError(ValueError):
    """输入验证错误异常。"""
    pass


class InputValidator:
    """
    输入验证器类。

    版本号和别名会直接作为目录名或文件名使用，因此必须拒绝路径分隔符和 ".."。
    """

    NAME_PATTERN = re.compile(r'^[a-zA-Z0-9][a-zA-Z0-9._+-]*$')
    MAX_VERSION_LENGTH = 100
    MAX_ALIAS_LENGTH = 64

    @classmethod
    def validate_version_string(cls, version: str) -> bool:
        """
        验证版本号字符串的有效性。

        参数:
            version: 版本号字符串

        返回:
            验证通过返回 True，否则抛出 InputValidationError
        """
        if not version or not version.strip():
            raise InputValidationError("版本号不能为空")

        version = version.strip()
        if len(version) > cls.MAX_VERSION_LENGTH:
            raise InputValidationError(f"版本号不能超过 {cls.MAX_VERSION_LENGTH} 个字符")

        if ".." in version or not cls.NAME_PATTERN.match(version):
            raise InputValidationError(f"版本号格式无效: {version}")

        return True

    @classmethod
    def validate_alias_name(cls, alias: str) -> bool:
        """
        验证别名的有效性。

        参数:
            alias: 别名

        返回:
            验证通过返回 True，否则抛出 InputValidationError
        """
        if not alias or not alias.strip():
            raise InputValidationError("别名不能为空")

        if len(alias) > cls.MAX_ALIAS_LENGTH:
            raise InputValidationError(f"别名不能超过 {cls.MAX_ALIAS_LENGTH} 个字符")

        if not cls.NAME_PATTERN.match(alias):
            raise InputValidationError(f"别名格式无效: {alias}")

        return True

    @classmethod
    def sanitize_version_string(cls, version: str) -> str:
        """去除版本号首尾空白。"""
        if not version:
            return ""
        return version.strip()

    @classmethod
    def safe_join_path(cls, base_path: str, *paths: str) -> str:
        """
        安全连接路径，防止路径遍历。

        参数:
            base_path: 基础路径
            *paths: 要连接的路径部分

        返回:
            安全连接后的路径

        抛出:
            InputValidationError: 如果结果路径位于 base_path 之外
        """
        base = os.path.abspath(base_path)
        joined = os.path.abspath(os.path.join(base, *paths))
        if joined != base and not joined.startswith(base + os.sep):
            raise InputValidationError(f"路径遍历检测: {joined}")
        return joined
