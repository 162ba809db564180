"""
描述文件托管的签名权限（provisioned entitlements）过滤模块。

这些权限由签名描述文件注入，换用 ad-hoc 或其他证书重签名前必须移除。
"""

from __future__ import annotations

from typing import Any

from .errors import NotADictionary

# 须保持字典序且无重复，`list_provisioned_entitlements` 的输出顺序依赖于此。
PROVISIONED_ENTITLEMENTS: tuple[str, ...] = (
    "com.apple.application-identifier",
    "com.apple.developer.aps-environment",
    "com.apple.developer.associated-domains",
    "com.apple.developer.icloud-container-environment",
    "com.apple.developer.icloud-container-identifiers",
    "com.apple.developer.icloud-services",
    "com.apple.developer.team-identifier",
    "com.apple.developer.ubiquity-container-identifiers",
    "com.apple.developer.ubiquity-kvstore-identifier",
    "com.apple.security.application-groups",
)


def _check_key_set(keys: tuple[str, ...]) -> None:
    """校验权限键列表有序且无重复，不满足时抛出异常。"""
    if list(keys) != sorted(set(keys)):
        raise RuntimeError("PROVISIONED_ENTITLEMENTS must be sorted and unique")


_check_key_set(PROVISIONED_ENTITLEMENTS)


def _as_dict(ent: Any) -> dict[str, Any]:
    if not isinstance(ent, dict):
        raise NotADictionary(
            f"Entitlements is not a dictionary (got {type(ent).__name__})"
        )
    return ent


def is_provisioned_entitlement(key: str) -> bool:
    return key in PROVISIONED_ENTITLEMENTS


def strip_provisioned_entitlements(ent: Any) -> None:
    """原地删除所有描述文件托管的权限键；键不存在时忽略，其余键的顺序保持不变。"""
    d = _as_dict(ent)
    for key in PROVISIONED_ENTITLEMENTS:
        d.pop(key, None)


def list_provisioned_entitlements(ent: Any) -> list[str]:
    """返回字典中出现的托管权限键，按 `PROVISIONED_ENTITLEMENTS` 的固定顺序排列。"""
    d = _as_dict(ent)
    return [key for key in PROVISIONED_ENTITLEMENTS if key in d]
