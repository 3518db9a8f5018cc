"""
版本工具模块。

提供版本号解析、排序以及从远程版本记录中选择最新版本的工具函数。
"""

import re
from typing import Any, Dict, List, Optional

PRERELEASE_MARKERS = ("alpha", "beta", "rc", "nightly")


def _parse_version(version_str: str) -> tuple:
    """
    解析版本字符串为可比较的元组。

    参数:
        version_str: 版本字符串，允许带 v 前缀

    返回:
        版本元组 (major, minor, patch, ...)
    """
    parts = re.findall(r'\d+', version_str.lstrip("v"))
    return tuple(int(p) for p in parts) if parts else (0,)


def is_prerelease(version_str: str) -> bool:
    lowered = version_str.lower()
    return any(marker in lowered for marker in PRERELEASE_MARKERS)


def sort_versions_desc(versions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    按版本号降序排列版本列表。

    参数:
        versions: 版本信息列表

    返回:
        排序后的版本列表
    """
    return sorted(
        versions,
        key=lambda v: _parse_version(v.get("version", "0")),
        reverse=True
    )


def select_latest(records: List[Dict[str, Any]], stable_only: bool = False) -> Optional[str]:
    """
    从远程版本记录中选择最新版本。

    参数:
        records: 版本记录列表，每条包含 version、is_stable、release_date
        stable_only: 是否只考虑稳定版本（Node.js 为 LTS 版本）

    返回:
        最新版本号（去掉 v 前缀），无候选时返回 None
    """
    candidates = [r for r in records if r.get("version")]
    if stable_only:
        candidates = [r for r in candidates if r.get("is_stable")]
    else:
        candidates = [r for r in candidates if not is_prerelease(r["version"])] or candidates
    if not candidates:
        return None
    return sort_versions_desc(candidates)[0]["version"].lstrip("v")
