"""
命令行解析结果的轻量类型定义。

每个子命令对应一个不可变数据类，`Command` 为三者的联合类型。
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class StripCommand:
    """移除托管权限并把剩余权限写入文件。"""

    app_path: str
    # `-` 表示写到标准输出。
    output_path: str


@dataclass(frozen=True)
class ListCommand:
    """只列出找到的托管权限，不写任何文件（dry-run）。"""

    app_path: str


@dataclass(frozen=True)
class CompletionsCommand:
    """生成 shell 补全脚本。"""

    # `bash` / `zsh` / `fish`
    shell: str


Command = StripCommand | ListCommand | CompletionsCommand
