"""inline-chat CLI (package entrypoint).

This package wires argument parsing to action handlers kept in small, focused
modules for testability. It performs no streaming logic directly.

Public API re-exports:
- ``main``: CLI entrypoint callable
"""

from __future__ import annotations

import sys
from typing import Optional

from ...base.logging import configure_logger
from .cli_actions import handle_config, handle_models, handle_stream
from .cli_parser import build_parser
from .cli_utils import parse_verbosity


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entrypoint.

    Parameters
    ----------
    argv: Optional[list[str]]
        Argument vector; when ``None`` uses ``sys.argv[1:]``.

    Returns
    -------
    int
        Process exit code (0 success, non-zero on error).
    """
    p = build_parser()
    args = p.parse_args(list(sys.argv[1:] if argv is None else argv))
    if args.cmd is None:
        p.print_help()
        return 2

    level = None
    if args.log_level:
        level = parse_verbosity(args.log_level)
        if level is None:
            p.error(f"invalid --log-level: {args.log_level}")
    if level is not None or args.log_file:
        configure_logger(level=level, file_path=args.log_file)

    if args.cmd == "models":
        return handle_models(args)
    if args.cmd == "config":
        return handle_config(args)
    return handle_stream(args)


__all__ = ["main"]
