"""
vermgr: 多运行时版本管理器。

管理 Node.js、Rust、Python、Go 的多版本安装与切换。
"""

__version__ = "0.1.0"
