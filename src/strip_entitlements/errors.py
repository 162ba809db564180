"""
签名权限（`entitlements`）提取与过滤流程的异常类型。

全部继承自 `RuntimeError`，命令行入口统一捕获后转换为 `SystemExit`。
"""

from __future__ import annotations


class EntitlementsError(RuntimeError):
    """所有签名权限相关错误的基类。"""


class InspectionFailed(EntitlementsError):
    """`codesign` 以非零状态退出。"""

    def __init__(self, returncode: int, stdout: str, stderr: str) -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            f"codesign failed with status {returncode}, stdout: {stdout}, stderr: {stderr}"
        )


class InvalidProcessOutput(EntitlementsError):
    """`codesign` 的输出流不是合法的 UTF-8 文本。"""

    def __init__(self, stream: str) -> None:
        self.stream = stream
        super().__init__(f"codesign {stream} is not valid UTF-8")


class MalformedEntitlements(EntitlementsError):
    """`codesign` 成功退出，但输出不是以字典为根的 plist。"""


class NotADictionary(EntitlementsError):
    """签名权限的根节点不是字典。"""


class InspectorUnavailable(EntitlementsError):
    """无法启动 `codesign`，或其运行超时。"""
