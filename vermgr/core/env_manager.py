"""
环境变量管理器模块。

负责把可执行文件目录注册到用户 shell 的 PATH 中。
"""

import os
from pathlib import Path
from typing import Optional

from vermgr.core.errors import StoreIOError
from vermgr.core.interfaces import IEnvManager
from vermgr.utils.logger import get_logger

logger = get_logger()


class EnvManager(IEnvManager):
    """
    环境变量管理器类。

    POSIX 系统上向 ~/.zshrc 或 ~/.bashrc 追加一行 export PATH；
    Windows 上只输出手动设置说明，不修改注册表。
    """

    def __init__(self, home: Optional[Path] = None, shell: Optional[str] = None, is_windows: Optional[bool] = None):
        """
        初始化环境变量管理器。

        参数:
            home: 用户主目录，默认为 Path.home()
            shell: shell 路径，默认读取 $SHELL
            is_windows: 是否按 Windows 处理，默认根据 os.name 判断
        """
        self.home = Path(home) if home else Path.home()
        self.shell = shell if shell is not None else os.environ.get("SHELL", "")
        self.is_windows = (os.name == "nt") if is_windows is None else is_windows

    def get_shell_config_file(self) -> Path:
        """
        获取 shell 配置文件路径。

        返回:
            $SHELL 以 zsh 结尾时返回 ~/.zshrc，否则返回 ~/.bashrc
        """
        if self.shell.endswith("zsh"):
            return self.home / ".zshrc"
        return self.home / ".bashrc"

    def path_contains(self, entry: str) -> bool:
        """
        检查 shell 配置文件是否已包含指定路径。

        参数:
            entry: 路径条目

        返回:
            包含返回 True，否则返回 False
        """
        config_file = self.get_shell_config_file()
        if not config_file.is_file():
            return False
        try:
            content = config_file.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise StoreIOError(f"读取 {config_file} 失败: {e}") from e
        return str(entry) in content

    def add_to_path(self, entry: str) -> bool:
        """
        将路径添加到 PATH。

        参数:
            entry: 要添加的路径条目

        返回:
            写入了配置文件返回 True，已存在或需要手动设置时返回 False

        抛出:
            StoreIOError: 写入配置文件失败时抛出
        """
        entry = str(entry)
        if self.is_windows:
            logger.info(f"请将 {entry} 手动添加到系统 PATH 环境变量中")
            return False

        if self.path_contains(entry):
            logger.debug(f"PATH 已包含 {entry}")
            return False

        config_file = self.get_shell_config_file()
        try:
            with open(config_file, "a", encoding="utf-8") as f:
                f.write(f'\nexport PATH="{entry}:$PATH"\n')
        except OSError as e:
            raise StoreIOError(f"写入 {config_file} 失败: {e}") from e

        logger.info(f"已添加 {entry} 到 {config_file}，请重新打开终端或执行 source {config_file}")
        return True
