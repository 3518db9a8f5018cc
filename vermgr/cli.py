"""
vermgr 命令行接口模块。
"""

import argparse
import json
import logging
from pathlib import Path
from typing import Optional

from vermgr import __version__
from vermgr.core.config_manager import ConfigManager, ConfigSaveError, ConfigValidationError
from vermgr.core.errors import VersionManagerError
from vermgr.core.migration import supported_sources
from vermgr.core.runtime_profile import RuntimeType
from vermgr.core.version_manager import VersionManager
from vermgr.utils.input_validator import InputValidationError
from vermgr.utils.logger import get_logger, set_log_level

logger = get_logger()

RUNTIME_HELP = "运行时名称 (node, rust, python, go)"


def create_parser() -> argparse.ArgumentParser:
    """
    创建并配置命令行参数解析器。

    返回:
        配置好的 ArgumentParser 实例
    """
    parser = argparse.ArgumentParser(
        prog="vermgr",
        description="vermgr - 多运行时版本管理器",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  vermgr install node 18.17.0     安装 Node.js 18.17.0
  vermgr use node 18.17.0         切换到 Node.js 18.17.0
  vermgr list node                列出已安装的 Node.js 版本
  vermgr alias node work 18.17.0  创建别名
  vermgr local python 3.11.4      在当前目录写入 .python-version
  vermgr exec go 1.21.0 go version
  vermgr migrate nvm node         从 nvm 迁移 Node.js 版本
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="启用详细输出",
    )

    parser.add_argument(
        "--home",
        type=str,
        default=None,
        help="存储根目录（默认为 VERMGR_HOME 或 ~/.version-manager）",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="命令",
        description="可用的 CLI 命令",
    )

    install_parser = subparsers.add_parser("install", help="下载并安装指定版本")
    install_parser.add_argument("runtime", help=RUNTIME_HELP)
    install_parser.add_argument("version", help="要安装的版本（可使用 latest，Node.js 可使用 lts）")

    use_parser = subparsers.add_parser("use", help="切换到指定版本或别名")
    use_parser.add_argument("runtime", help=RUNTIME_HELP)
    use_parser.add_argument("version", help="要切换到的版本或别名")

    list_parser = subparsers.add_parser("list", help="列出已安装的版本")
    list_parser.add_argument("runtime", nargs="?", default=None, help=RUNTIME_HELP)
    list_parser.add_argument(
        "--format",
        "-f",
        choices=["json", "simple"],
        default="simple",
        help="输出格式",
    )

    remove_parser = subparsers.add_parser("remove", aliases=["uninstall"], help="删除指定版本")
    remove_parser.add_argument("runtime", help=RUNTIME_HELP)
    remove_parser.add_argument("version", help="要删除的版本")

    current_parser = subparsers.add_parser("current", help="显示当前活动版本")
    current_parser.add_argument("runtime", nargs="?", default=None, help=RUNTIME_HELP)

    alias_parser = subparsers.add_parser("alias", help="创建版本别名")
    alias_parser.add_argument("runtime", help=RUNTIME_HELP)
    alias_parser.add_argument("name", help="别名")
    alias_parser.add_argument("version", help="别名指向的版本")

    aliases_parser = subparsers.add_parser("aliases", help="列出版本别名")
    aliases_parser.add_argument("runtime", help=RUNTIME_HELP)

    local_parser = subparsers.add_parser("local", help="设置或显示当前目录的本地版本")
    local_parser.add_argument("runtime", help=RUNTIME_HELP)
    local_parser.add_argument("version", nargs="?", default=None, help="版本号（省略则显示当前设置）")

    exec_parser = subparsers.add_parser("exec", help="使用指定版本执行命令")
    exec_parser.add_argument("runtime", help=RUNTIME_HELP)
    exec_parser.add_argument("version", help="版本号或别名")
    exec_parser.add_argument("exec_command", metavar="command", help="要执行的命令")
    exec_parser.add_argument("exec_args", metavar="args", nargs=argparse.REMAINDER, help="命令参数")

    subparsers.add_parser("clean", help="清理下载缓存和临时文件")

    migrate_parser = subparsers.add_parser("migrate", help="从其他版本管理器迁移版本")
    migrate_parser.add_argument("source", help="源版本管理器 (nvm, n, rustup, pyenv, gvm)")
    migrate_parser.add_argument("runtime", help=RUNTIME_HELP)

    config_parser = subparsers.add_parser("config", help="显示或编辑配置")
    config_parser.add_argument(
        "--set",
        "-s",
        type=str,
        help="设置配置值（格式：key=value，如 settings.mirrors.Node=https://...）",
    )
    config_parser.add_argument(
        "--reset",
        action="store_true",
        help="重置为默认配置",
    )

    return parser


def run_cli(args: argparse.Namespace) -> int:
    """
    运行命令行接口。

    参数:
        args: 解析后的命令行参数

    返回:
        退出码（0 表示成功）
    """
    if args.command is None:
        print("未指定命令。使用 --help 查看帮助信息。")
        return 1

    command_handlers = {
        "install": handle_install,
        "use": handle_use,
        "list": handle_list,
        "remove": handle_remove,
        "uninstall": handle_remove,
        "current": handle_current,
        "alias": handle_alias,
        "aliases": handle_aliases,
        "local": handle_local,
        "exec": handle_exec,
        "clean": handle_clean,
        "migrate": handle_migrate,
        "config": handle_config,
    }

    handler = command_handlers.get(args.command)
    if handler is None:
        print(f"未知命令: {args.command}")
        return 1

    config_manager = ConfigManager(Path(args.home) if args.home else None)
    if args.verbose:
        set_log_level(logging.DEBUG)
    else:
        level = logging.getLevelName(config_manager.get_log_level().upper())
        set_log_level(level if isinstance(level, int) else logging.INFO)

    try:
        return handler(args, config_manager)
    except (VersionManagerError, InputValidationError, ConfigValidationError, ConfigSaveError) as e:
        logger.error(str(e))
        print(f"错误: {e}")
        return 1


def _get_manager(config_manager: ConfigManager) -> VersionManager:
    return VersionManager(config_manager)


def _runtime(name: str) -> RuntimeType:
    return RuntimeType.parse(name)


def _progress(downloaded: int, total: int) -> None:
    if total > 0:
        percent = int(downloaded / total * 100)
        bar_len = 40
        filled = int(bar_len * percent / 100)
        bar = "=" * filled + "-" * (bar_len - filled)
        print(f"\r[{bar}] {percent}% ({downloaded}/{total} 字节)", end="", flush=True)
    else:
        print(f"\r已下载 {downloaded} 字节", end="", flush=True)


def handle_install(args: argparse.Namespace, config_manager: ConfigManager) -> int:
    """
    处理 install 命令：下载并安装指定版本。

    参数:
        args: 解析后的命令行参数
        config_manager: 配置管理器实例

    返回:
        退出码
    """
    runtime = _runtime(args.runtime)
    version_manager = _get_manager(config_manager)

    print(f"正在安装 {runtime.display_name} {args.version}...")
    if version_manager.install_version(runtime, args.version, _progress):
        print(f"\n成功安装 {runtime.display_name} {args.version}")
    else:
        print(f"{runtime.display_name} {args.version} 已安装")
    return 0


def handle_use(args: argparse.Namespace, config_manager: ConfigManager) -> int:
    runtime = _runtime(args.runtime)
    version_manager = _get_manager(config_manager)

    version = version_manager.switch_version(runtime, args.version)
    print(f"成功切换 {runtime.display_name} 到 {version}")
    print("注意：可能需要重启终端才能使更改生效。")
    return 0


def handle_list(args: argparse.Namespace, config_manager: ConfigManager) -> int:
    """
    处理 list 命令：列出已安装的版本。

    未指定运行时时列出全部运行时。
    """
    version_manager = _get_manager(config_manager)
    runtimes = [_runtime(args.runtime)] if args.runtime else list(RuntimeType)

    if args.format == "json":
        result = {
            runtime.value: {
                "current": version_manager.get_current_version(runtime),
                "versions": version_manager.store.list_versions(
                    runtime, version_manager.get_current_version(runtime)
                ),
            }
            for runtime in runtimes
        }
        print(json.dumps(result, indent=2, ensure_ascii=False))
        return 0

    for runtime in runtimes:
        labels = version_manager.list_installed(runtime)
        if not labels:
            print(f"未找到 {runtime.display_name} 的已安装版本")
            continue
        print(f"{runtime.display_name} 已安装版本:")
        for label in labels:
            print(f"  {label}")
    return 0


def handle_remove(args: argparse.Namespace, config_manager: ConfigManager) -> int:
    runtime = _runtime(args.runtime)
    version_manager = _get_manager(config_manager)

    print(f"正在删除 {runtime.display_name} {args.version}...")
    version_manager.delete_version(runtime, args.version)
    print(f"成功删除 {runtime.display_name} {args.version}")
    return 0


def handle_current(args: argparse.Namespace, config_manager: ConfigManager) -> int:
    version_manager = _get_manager(config_manager)
    runtimes = [_runtime(args.runtime)] if args.runtime else list(RuntimeType)
    for runtime in runtimes:
        current = version_manager.get_current_version(runtime)
        print(f"{runtime.display_name}: {current or '未设置'}")
    return 0


def handle_alias(args: argparse.Namespace, config_manager: ConfigManager) -> int:
    runtime = _runtime(args.runtime)
    version_manager = _get_manager(config_manager)
    version_manager.create_alias(runtime, args.name, args.version)
    print(f"已创建别名 {args.name} -> {runtime.display_name} {args.version}")
    return 0


def handle_aliases(args: argparse.Namespace, config_manager: ConfigManager) -> int:
    runtime = _runtime(args.runtime)
    version_manager = _get_manager(config_manager)
    aliases = version_manager.list_aliases(runtime)
    if not aliases:
        print(f"未设置 {runtime.display_name} 别名")
        return 0
    print(f"{runtime.display_name} 别名:")
    for name, version in aliases:
        print(f"  {name} -> {version}")
    return 0


def handle_local(args: argparse.Namespace, config_manager: ConfigManager) -> int:
    """
    处理 local 命令：设置或显示当前目录的本地版本。
    """
    runtime = _runtime(args.runtime)
    version_manager = _get_manager(config_manager)

    if args.version:
        pin_file = version_manager.set_local_version(runtime, args.version)
        print(f"已在 {pin_file} 中设置 {runtime.display_name} 版本 {args.version}")
    else:
        version = version_manager.get_local_version(runtime)
        print(f"{runtime.display_name} 本地版本: {version or '未设置'}")
    return 0


def handle_exec(args: argparse.Namespace, config_manager: ConfigManager) -> int:
    runtime = _runtime(args.runtime)
    version_manager = _get_manager(config_manager)
    return version_manager.exec_with_version(runtime, args.version, args.exec_command, args.exec_args)


def handle_clean(args: argparse.Namespace, config_manager: ConfigManager) -> int:
    version_manager = _get_manager(config_manager)
    count = version_manager.clean()
    print(f"清理完成，共删除 {count} 项")
    return 0


def handle_migrate(args: argparse.Namespace, config_manager: ConfigManager) -> int:
    """
    处理 migrate 命令：从其他版本管理器迁移版本。
    """
    runtime = _runtime(args.runtime)
    version_manager = _get_manager(config_manager)

    sources = supported_sources(runtime)
    if args.source.lower() not in sources:
        print(f"{runtime.display_name} 支持的迁移来源: {', '.join(sources)}")

    count = version_manager.migrate_from(args.source, runtime)
    print(f"从 {args.source} 迁移了 {count} 个 {runtime.display_name} 版本")
    return 0


def handle_config(args: argparse.Namespace, config_manager: ConfigManager) -> int:
    """
    处理 config 命令：显示或编辑配置。

    参数:
        args: 解析后的命令行参数
        config_manager: 配置管理器实例

    返回:
        退出码
    """
    if args.reset:
        config_manager.reset_to_default()
        print("已重置为默认配置")
        return 0

    config = config_manager.get_config()

    if args.set:
        key, _, value = args.set.partition("=")
        if not key or not value:
            print("格式无效。请使用: key=value")
            return 1

        keys = key.split(".")
        obj = config
        for k in keys[:-1]:
            if k not in obj:
                obj[k] = {}
            obj = obj[k]

        parsed: Optional[object]
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            parsed = value

        obj[keys[-1]] = parsed
        config_manager.save_config(config)
        print(f"已设置 {key} = {parsed}")
    else:
        print(json.dumps(config, indent=2, ensure_ascii=False))

    return 0
