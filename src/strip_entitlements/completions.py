"""
根据 argparse 解析器生成 shell 补全脚本（bash / zsh / fish）。

只补全子命令名、选项名与带 `choices` 的位置参数；其余位置参数与选项取值按文件路径补全。

注意：argparse 没有公开遍历解析器结构的接口，这里依赖 `_actions`、
`_SubParsersAction` 与 `_get_subactions()` 等私有属性，升级 Python 时需留意。
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field

SHELLS = ("bash", "zsh", "fish")


@dataclass
class _Completable:
    """单个（子）解析器的可补全内容。"""

    options: list[str] = field(default_factory=list)
    # 需要取值的选项，如 `--timeout`、`-o`。
    value_options: list[str] = field(default_factory=list)
    # `(短选项, 长选项, 说明, 是否需要取值)`，供 fish 使用。
    option_details: list[tuple[str, str, str, bool]] = field(default_factory=list)
    choices: list[str] = field(default_factory=list)


def _describe(parser: argparse.ArgumentParser) -> _Completable:
    comp = _Completable()
    for action in parser._actions:
        if isinstance(action, argparse._SubParsersAction):
            continue
        if action.option_strings:
            comp.options.extend(action.option_strings)
            if action.nargs != 0:
                comp.value_options.extend(action.option_strings)
            short = next((o[1:] for o in action.option_strings if len(o) == 2), "")
            long = next((o[2:] for o in action.option_strings if o.startswith("--")), "")
            help_text = "" if action.help in (None, argparse.SUPPRESS) else str(action.help)
            comp.option_details.append((short, long, help_text, action.nargs != 0))
        elif action.choices:
            comp.choices.extend(str(c) for c in action.choices)
    return comp


def _subcommands(
    parser: argparse.ArgumentParser,
) -> list[tuple[str, str, argparse.ArgumentParser]]:
    """返回 `(名称, 说明, 子解析器)`，别名与主名称各占一项。"""
    for action in parser._actions:
        if not isinstance(action, argparse._SubParsersAction):
            continue
        help_by_parser = {
            id(action.choices[sub.dest]): sub.help or "" for sub in action._get_subactions()
        }
        return [
            (name, help_by_parser.get(id(sub), ""), sub) for name, sub in action.choices.items()
        ]
    return []


def _func_name(prog: str) -> str:
    return "_" + "".join(c if c.isalnum() else "_" for c in prog)


def _quote(text: str) -> str:
    return "'" + text.replace("'", "'\\''") + "'"


def _bash(parser: argparse.ArgumentParser) -> str:
    prog = parser.prog
    func = _func_name(prog)
    subs = _subcommands(parser)
    top = _describe(parser)
    names = [name for name, _help, _sub in subs]
    value_options = list(top.value_options)
    for _name, _help, sub in subs:
        for option in _describe(sub).value_options:
            if option not in value_options:
                value_options.append(option)

    lines = [
        f"# bash completion for {prog}",
        f"{func}() {{",
        '    local cur="${COMP_WORDS[COMP_CWORD]}"',
        '    local prev="${COMP_WORDS[COMP_CWORD-1]}"',
        '    case "$prev" in',
        f'        {"|".join(value_options)}) COMPREPLY=( $(compgen -f -- "$cur") ); return ;;',
        "    esac",
        '    local cmd="" w',
        '    for w in "${COMP_WORDS[@]:1:COMP_CWORD-1}"; do',
        "        case \"$w\" in",
        f"            {'|'.join(names)}) cmd=\"$w\"; break ;;",
        "        esac",
        "    done",
        '    local opts="" words=""',
        '    case "$cmd" in',
        f'        "") opts="{" ".join(top.options)}"; words="{" ".join(names)}" ;;',
    ]
    for name, _help, sub in subs:
        comp = _describe(sub)
        lines.append(
            f'        {name}) opts="{" ".join(comp.options)}"; words="{" ".join(comp.choices)}" ;;'
        )
    lines += [
        "    esac",
        '    if [[ "$cur" == -* ]]; then',
        '        COMPREPLY=( $(compgen -W "$opts" -- "$cur") )',
        '    elif [[ -n "$words" ]]; then',
        '        COMPREPLY=( $(compgen -W "$words" -- "$cur") )',
        "    else",
        '        COMPREPLY=( $(compgen -f -- "$cur") )',
        "    fi",
        "}",
        f"complete -o filenames -F {func} {prog}",
        "",
    ]
    return "\n".join(lines)


def _zsh(parser: argparse.ArgumentParser) -> str:
    prog = parser.prog
    func = _func_name(prog)
    subs = _subcommands(parser)
    top = _describe(parser)
    names = [name for name, _help, _sub in subs]

    lines = [
        f"#compdef {prog}",
        "",
        f"{func}() {{",
        "    local -a commands",
        "    commands=(",
    ]
    for name, help_text, _sub in subs:
        escaped = help_text.replace(":", "\\:")
        lines.append(f"        {_quote(name + ':' + escaped)}")
    lines += [
        "    )",
        '    local i cmd=""',
        "    for (( i = 2; i < CURRENT; i++ )); do",
        "        case ${words[i]} in",
        f"            {'|'.join(names)}) cmd=${{words[i]}}; break ;;",
        "        esac",
        "    done",
        "    case $cmd in",
        '        "")',
        "            if [[ $PREFIX == -* ]]; then",
        f"                compadd -- {' '.join(top.options)}",
        "            else",
        "                _describe 'command' commands",
        "            fi",
        "            ;;",
    ]
    for name, _help, sub in subs:
        comp = _describe(sub)
        fallback = f"compadd -- {' '.join(comp.choices)}" if comp.choices else "_files"
        lines += [
            f"        {name})",
            "            if [[ $PREFIX == -* ]]; then",
            f"                compadd -- {' '.join(comp.options)}",
            "            else",
            f"                {fallback}",
            "            fi",
            "            ;;",
        ]
    lines += [
        "    esac",
        "}",
        "",
        f'if [ "$funcstack[1]" = "{func}" ]; then',
        f'    {func} "$@"',
        "else",
        f"    compdef {func} {prog}",
        "fi",
        "",
    ]
    return "\n".join(lines)


def _fish_option(prog: str, condition: str, detail: tuple[str, str, str, bool]) -> str:
    short, long, help_text, takes_value = detail
    parts = [f"complete -c {prog} -n {_quote(condition)}"]
    if short:
        parts.append(f"-s {short}")
    if long:
        parts.append(f"-l {long}")
    if takes_value:
        parts.append("-r -F")
    if help_text:
        parts.append(f"-d {_quote(help_text)}")
    return " ".join(parts)


def _fish(parser: argparse.ArgumentParser) -> str:
    prog = parser.prog
    subs = _subcommands(parser)
    top = _describe(parser)

    lines = [f"# fish completion for {prog}", f"complete -c {prog} -f"]
    for detail in top.option_details:
        lines.append(_fish_option(prog, "__fish_use_subcommand", detail))
    for name, help_text, _sub in subs:
        line = f"complete -c {prog} -n '__fish_use_subcommand' -a {name}"
        if help_text:
            line += f" -d {_quote(help_text)}"
        lines.append(line)
    for name, _help, sub in subs:
        comp = _describe(sub)
        condition = f"__fish_seen_subcommand_from {name}"
        for detail in comp.option_details:
            lines.append(_fish_option(prog, condition, detail))
        if comp.choices:
            lines.append(
                f"complete -c {prog} -n {_quote(condition)} -a {_quote(' '.join(comp.choices))}"
            )
        else:
            lines.append(f"complete -c {prog} -n {_quote(condition)} -F")
    lines.append("")
    return "\n".join(lines)


def generate_completions(parser: argparse.ArgumentParser, shell: str) -> str:
    """为指定 shell 生成补全脚本文本。"""
    if shell == "bash":
        return _bash(parser)
    if shell == "zsh":
        return _zsh(parser)
    if shell == "fish":
        return _fish(parser)
    raise ValueError(f"unsupported shell: {shell} (expected one of: {', '.join(SHELLS)})")
