"""CLI parser construction for inline-chat.

This module wires subparsers but contains no execution logic. Subcommand
handlers live in ``cli_actions`` to keep files small and testable.
"""

from __future__ import annotations

import argparse
from typing import Tuple


def parse_selection(value: str) -> Tuple[int, int]:
    """Parse ``START:END`` character offsets for ``--selection``.

    Raises
    ------
    argparse.ArgumentTypeError
        When the value is not two non-negative integers with ``START <= END``.
    """
    start_s, sep, end_s = value.partition(":")
    if not sep:
        raise argparse.ArgumentTypeError("selection must look like START:END")
    try:
        start, end = int(start_s), int(end_s)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("selection offsets must be integers") from exc
    if start < 0 or end < start:
        raise argparse.ArgumentTypeError("selection must satisfy 0 <= START <= END")
    return start, end


def build_parser() -> argparse.ArgumentParser:
    """Construct the top-level CLI parser and subcommands.

    Returns
    -------
    argparse.ArgumentParser
        Configured parser with ``stream``, ``models`` and ``config``
        subcommands.

    Design
    ------
    This function performs no side effects and wires only argument shapes.
    No I/O or network calls occur here.
    """
    p = argparse.ArgumentParser(
        prog="inline-chat", description="Stream a chat-completion response into a text file"
    )
    p.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR (or synonyms)")
    p.add_argument("--log-file", default=None, help="Also write JSON logs to this file")
    sub = p.add_subparsers(dest="cmd")

    # stream
    p_stream = sub.add_parser("stream", help="Stream a response to the file's content into the file")
    p_stream.add_argument("file", help="Text file used as context and as output target")
    p_stream.add_argument("--selection", type=parse_selection, default=None, metavar="START:END")
    p_stream.add_argument("--model", default=None, help="Model for this run only (not persisted)")
    p_stream.add_argument("--no-retry", action="store_true", help="Do not count down and retry on rate limits")

    # models
    p_models = sub.add_parser("models", help="Manage the model list")
    models_sub = p_models.add_subparsers(dest="models_cmd")
    models_sub.add_parser("list", help="List available models and the selected one")
    for name, help_text in (
        ("add", "Add a model id"),
        ("remove", "Remove a model id (the last model cannot be removed)"),
        ("use", "Select a model id (added if missing)"),
    ):
        sp = models_sub.add_parser(name, help=help_text)
        sp.add_argument("model")

    # config
    p_config = sub.add_parser("config", help="Show or edit persisted settings")
    config_sub = p_config.add_subparsers(dest="config_cmd")
    config_sub.add_parser("show", help="Print settings (API key redacted)")
    p_set = config_sub.add_parser("set", help="Set one setting")
    p_set.add_argument("key", choices=["api_key", "system_prompt", "base_url", "model_id"])
    p_set.add_argument("value")

    return p


__all__ = ["build_parser", "parse_selection"]
