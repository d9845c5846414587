"""kokaq-repl CLI entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List

from .client import DEFAULT_ADDRESS, KokaqError
from .commands import build_registry
from .context import ShellContext
from .repl import KokaqREPL

LOG = logging.getLogger("kokaq_repl.cli")

BANNER = r"""
██╗  ██╗ ██████╗ ██╗  ██╗ █████╗  ██████╗
██║ ██╔╝██╔═══██╗██║ ██╔╝██╔══██╗██╔═══██╗
█████╔╝ ██║   ██║█████╔╝ ███████║██║   ██║
██╔═██╗ ██║   ██║██╔═██╗ ██╔══██║██║▄▄ ██║
██║  ██╗╚██████╔╝██║  ██╗██║  ██║╚██████╔╝
╚═╝  ╚═╝ ╚═════╝ ╚═╝  ╚═╝╚═╝  ╚═╝ ╚══▀▀═╝
Welcome to Kokaq REPL - Type 'help' for commands. Type 'exit' to quit.
"""


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kokaq-repl", description="Interactive shell for the kokaq priority queue")
    parser.add_argument(
        "--address",
        default=os.environ.get("KOKAQ_ADDRESS") or DEFAULT_ADDRESS,
        help=f"Server address host:port (default $KOKAQ_ADDRESS or {DEFAULT_ADDRESS})",
    )
    parser.add_argument("--json", action="store_true", help="Emit JSON output")
    parser.add_argument("--log-level", default=os.environ.get("KOKAQ_LOG", "WARNING"), help="Logging level (default WARNING)")
    parser.add_argument("--dial-timeout", type=float, default=5.0, help="Connect timeout in seconds")
    parser.add_argument("--request-timeout", type=float, default=10.0, help="Per-request timeout in seconds")
    parser.add_argument(
        "-c",
        "--command",
        help="Execute a single command non-interactively (quote the command string)",
    )
    parser.add_argument(
        "--history",
        type=Path,
        default=Path.home() / ".kokaq-history",
        help="Path to command history file (interactive mode)",
    )
    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)
    ctx = ShellContext(
        address=args.address,
        json_output=args.json,
        dial_timeout=args.dial_timeout,
        request_timeout=args.request_timeout,
    )
    registry = build_registry()
    repl = KokaqREPL(ctx, registry, history_path=args.history)
    if not args.command and not args.json:
        print(BANNER)
    try:
        ctx.connect()
    except (KokaqError, ValueError) as exc:
        LOG.debug("connect to %s failed", args.address, exc_info=True)
        print(f"Failed to connect to server: {exc}")
        return 1
    if args.command:
        return _run_single_command(ctx, repl, args.command)
    return repl.run()


def _run_single_command(ctx: ShellContext, repl: KokaqREPL, command_line: str) -> int:
    try:
        return repl.dispatch(command_line)
    except SystemExit as exc:
        return int(exc.code or 0)
    finally:
        ctx.disconnect()


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
