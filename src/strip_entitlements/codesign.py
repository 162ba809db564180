"""
对 macOS `/usr/bin/codesign` 的轻量封装。

只负责“读取签名权限”与“写出 plist”两件事，便于过滤逻辑脱离外部进程单独测试。
"""

from __future__ import annotations

import logging
import plistlib
import subprocess
import sys
from typing import Any

from .errors import (
    InspectionFailed,
    InspectorUnavailable,
    InvalidProcessOutput,
    MalformedEntitlements,
)

logger = logging.getLogger(__name__)

CODESIGN = "/usr/bin/codesign"


def _run(cmd: list[str], *, timeout: float | None = None) -> subprocess.CompletedProcess[bytes]:
    """执行系统命令并返回 `subprocess` 结果对象（不检查退出码）。"""
    logger.debug("+ %s", " ".join(cmd))
    try:
        return subprocess.run(cmd, capture_output=True, check=False, timeout=timeout)
    except subprocess.TimeoutExpired as e:
        raise InspectorUnavailable(f"{cmd[0]} timed out after {timeout} seconds") from e
    except OSError as e:
        raise InspectorUnavailable(f"Failed to execute {cmd[0]}: {e}") from e


def _decode(data: bytes | None, stream: str) -> str:
    # 严格解码：诊断信息不做有损替换。
    try:
        return (data or b"").decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidProcessOutput(stream) from e


def extract_entitlements(
    app_path: str,
    *,
    codesign_path: str = CODESIGN,
    timeout: float | None = None,
) -> dict[str, Any]:
    """从应用包或已签名二进制的现有签名中提取签名权限（`entitlements`）。"""
    # `--xml --entitlements -` 会把 XML plist 输出到 stdout。
    p = _run(
        [codesign_path, "--display", "--xml", "--entitlements", "-", app_path],
        timeout=timeout,
    )
    if p.returncode != 0:
        stdout = _decode(p.stdout, "stdout")
        stderr = _decode(p.stderr, "stderr")
        raise InspectionFailed(p.returncode, stdout, stderr)

    if not p.stdout:
        raise MalformedEntitlements(f"codesign printed no entitlements for {app_path}")
    try:
        obj = plistlib.loads(p.stdout)
    except Exception as e:
        raise MalformedEntitlements(
            "Failed to parse entitlements plist from codesign output"
        ) from e
    if not isinstance(obj, dict):
        raise MalformedEntitlements(
            f"Entitlements root is not a dictionary (got {type(obj).__name__})"
        )
    return obj


def write_entitlements(entitlements: dict[str, Any], output_path: str) -> None:
    """将签名权限字典写为 XML plist；`-` 表示写到标准输出。"""
    # 先完成序列化再打开目标文件，序列化失败时不会留下空文件。
    try:
        data = plistlib.dumps(entitlements, fmt=plistlib.FMT_XML, sort_keys=False)
    except (TypeError, OverflowError) as e:
        raise MalformedEntitlements(f"Entitlements cannot be written as a plist: {e}") from e
    if output_path == "-":
        sys.stdout.buffer.write(data)
        sys.stdout.flush()
        return
    with open(output_path, "wb") as f:
        f.write(data)
