"""
提取 -> 过滤 -> 输出 的流程编排。

签名权限只在过滤完整成功后才会写出；任一步骤失败都不会创建输出文件。
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .codesign import CODESIGN, extract_entitlements, write_entitlements
from .entitlements import list_provisioned_entitlements, strip_provisioned_entitlements

logger = logging.getLogger(__name__)


def strip_app_entitlements(
    app_path: str,
    output_path: str,
    *,
    codesign_path: str = CODESIGN,
    timeout: float | None = None,
) -> list[str]:
    """提取应用签名权限、移除托管权限并写出结果，返回被移除的键。"""
    logger.info("Reading entitlements from %s", app_path)
    ent = extract_entitlements(app_path, codesign_path=codesign_path, timeout=timeout)

    removed = list_provisioned_entitlements(ent)
    strip_provisioned_entitlements(ent)
    for key in removed:
        logger.debug("Removed %s", key)
    logger.info("Removed %d provisioned entitlement(s), %d kept", len(removed), len(ent))

    write_entitlements(ent, output_path)
    if output_path != "-":
        logger.info("Wrote stripped entitlements to %s", output_path)
    return removed


def list_app_entitlements(
    app_path: str,
    *,
    codesign_path: str = CODESIGN,
    timeout: float | None = None,
) -> list[str]:
    """提取应用签名权限并返回其中的托管权限键（不修改任何内容）。"""
    logger.info("Reading entitlements from %s", app_path)
    ent = extract_entitlements(app_path, codesign_path=codesign_path, timeout=timeout)
    return list_provisioned_entitlements(ent)


def print_provisioned_entitlements(keys: Sequence[str]) -> None:
    """打印 dry-run 结果。"""
    if not keys:
        print("No provisioned entitlements found.")
        return
    print("Provisioned entitlements found:")
    for key in keys:
        print(f"  - {key}")
