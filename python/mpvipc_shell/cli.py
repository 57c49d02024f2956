"""mpvipc-shell entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from mpvipc import MPVError
from mpvipc.transport import DEFAULT_SOCKET_PATH

from .commands import CommandRegistry, build_registry, execute_line
from .context import ShellContext
from .output import emit_error
from .repl import ShellREPL

LOG = logging.getLogger("mpvipc_shell.cli")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _timeout(value: str) -> Optional[float]:
    seconds = float(value)
    return None if seconds <= 0 else seconds


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Talk to mpv over its JSON IPC socket")
    parser.add_argument(
        "--socket",
        default=os.environ.get("MPV_SOCKET", DEFAULT_SOCKET_PATH),
        help="Path of mpv's --input-ipc-server socket",
    )
    parser.add_argument(
        "--timeout",
        type=_timeout,
        default=5.0,
        help="Seconds to wait for each reply (0 waits forever)",
    )
    parser.add_argument("--json", action="store_true", help="Emit JSON output")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("MPVIPC_LOG", "WARNING"),
        help="Logging level (default WARNING)",
    )
    parser.add_argument(
        "-c",
        "--command",
        help="Execute a single command non-interactively (quote the command string)",
    )
    parser.add_argument(
        "--history",
        type=Path,
        default=Path.home() / ".mpvipc-shell-history",
        help="Path to command history file",
    )
    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)
    ctx = ShellContext(socket_path=args.socket, timeout=args.timeout, json_output=args.json)
    registry = build_registry()
    if args.command:
        return _run_single_command(ctx, registry, args.command)
    repl = ShellREPL(ctx, registry, history_path=args.history)
    return repl.run()


def _run_single_command(ctx: ShellContext, registry: CommandRegistry, command_line: str) -> int:
    try:
        return execute_line(ctx, registry, command_line)
    except SystemExit as exc:
        return int(exc.code or 0)
    except (MPVError, OSError) as exc:
        LOG.debug("command failed", exc_info=True)
        emit_error(ctx, str(exc))
        return 1
    finally:
        ctx.disconnect()


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
