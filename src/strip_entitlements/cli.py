"""
`strip-entitlements` 的命令行入口模块。

负责解析子命令、配置日志，并把流程中的异常转换为带上下文的 `SystemExit`。
"""

import argparse
import logging
import math
import os
import sys
from collections.abc import Sequence
from importlib.metadata import PackageNotFoundError, version as package_version

from .codesign import CODESIGN
from .completions import SHELLS, generate_completions
from .errors import EntitlementsError
from .pipeline import list_app_entitlements, print_provisioned_entitlements, strip_app_entitlements
from .types import Command, CompletionsCommand, ListCommand, StripCommand

PROG = "strip-entitlements"

logger = logging.getLogger(__name__)


def _resolve_version() -> str:
    try:
        return package_version(PROG)
    except PackageNotFoundError:
        return "0.0.0.dev0"


def _configure_logging(verbose: bool) -> None:
    """日志统一输出到 stderr，stdout 留给 plist 与列表结果。"""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_strip_entitlements", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(f"[{PROG}] %(levelname)s: %(message)s"))
    handler._strip_entitlements = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _positive_float(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {raw}") from None
    if not math.isfinite(value) or value <= 0:
        raise argparse.ArgumentTypeError(f"must be a finite number greater than 0: {raw}")
    return value


def build_parser() -> argparse.ArgumentParser:
    """构建并返回 `strip-entitlements` 命令行参数解析器。"""
    p = argparse.ArgumentParser(
        prog=PROG,
        formatter_class=argparse.RawTextHelpFormatter,
        description=(
            "Extract an app's code-signing entitlements and remove the ones managed by\n"
            "provisioning profiles, so the app can be re-signed with another identity."
        ),
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {_resolve_version()}")
    p.add_argument(
        "--codesign",
        default=CODESIGN,
        metavar="PATH",
        help=f"codesign executable to use (default: {CODESIGN})",
    )
    p.add_argument(
        "--timeout",
        type=_positive_float,
        default=None,
        metavar="SECONDS",
        help="Give up when codesign runs longer than this (default: no limit)",
    )
    p.add_argument("--verbose", action="store_true", help="Verbose logging")

    sub = p.add_subparsers(dest="command", metavar="COMMAND", required=True)

    strip = sub.add_parser(
        "strip",
        help="Generate an entitlements.xml for an app with provisioned entitlements removed",
    )
    strip.add_argument("app_path", metavar="APP_PATH", help="The app to strip entitlements from")
    strip.add_argument(
        "-o",
        "--output",
        dest="output_path",
        required=True,
        metavar="OUTPUT",
        help="File to write the stripped entitlements to (- for stdout)",
    )

    dry = sub.add_parser(
        "list",
        aliases=["dry-run"],
        help="List the provisioned entitlements an app has, without writing anything",
    )
    dry.add_argument("app_path", metavar="APP_PATH", help="The app to inspect")

    completions = sub.add_parser("completions", help="Generate shell completions")
    completions.add_argument(
        "shell", choices=SHELLS, help="The shell to generate the completions for"
    )

    return p


def parse_command(ns: argparse.Namespace) -> Command:
    """把 argparse 命名空间转换为对应的命令对象。"""
    if ns.command == "strip":
        return StripCommand(app_path=ns.app_path, output_path=ns.output_path)
    if ns.command in ("list", "dry-run"):
        return ListCommand(app_path=ns.app_path)
    if ns.command == "completions":
        return CompletionsCommand(shell=ns.shell)
    raise SystemExit(f"Error: unknown command: {ns.command}")


def _abs(p: str) -> str:
    """将输入路径展开为绝对路径；`-` 原样保留。"""
    if p == "-":
        return p
    return os.path.abspath(os.path.expanduser(p))


def main(argv: Sequence[str] | None = None) -> int:
    """CLI 入口：解析参数并执行对应子命令。"""
    parser = build_parser()
    ns = parser.parse_args(argv)
    _configure_logging(bool(ns.verbose))
    cmd = parse_command(ns)
    logger.debug("Command: %s", cmd)

    if isinstance(cmd, CompletionsCommand):
        sys.stdout.write(generate_completions(parser, cmd.shell))
        return 0

    app_path = _abs(cmd.app_path)
    if not os.path.exists(app_path):
        raise SystemExit(f"Error: app not found: {app_path}")

    if isinstance(cmd, ListCommand):
        try:
            keys = list_app_entitlements(app_path, codesign_path=ns.codesign, timeout=ns.timeout)
        except EntitlementsError as e:
            raise SystemExit(
                f"Error: failed to get entitlements from app\nDetail: {e}"
            ) from e
        print_provisioned_entitlements(keys)
        return 0

    output_path = _abs(cmd.output_path)
    try:
        strip_app_entitlements(
            app_path,
            output_path,
            codesign_path=ns.codesign,
            timeout=ns.timeout,
        )
    except EntitlementsError as e:
        raise SystemExit(
            f"Error: failed to strip entitlements from app\nDetail: {e}"
        ) from e
    except OSError as e:
        raise SystemExit(
            f"Error: failed to write stripped entitlements to {output_path}\nDetail: {e}"
        ) from e
    return 0
