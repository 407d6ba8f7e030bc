"""CLI command dispatch wiring extracted from runbook_cli."""

from __future__ import annotations

import argparse
from typing import Any, Callable

from cli import handlers
from runbook.errors import RunbookError


def _mode(args: Any) -> str:
    if getattr(args, "init", False):
        return "init"
    if getattr(args, "list", False):
        return "list"
    if getattr(args, "show", None):
        return "show"
    return "run"


def dispatch_command(parser: argparse.ArgumentParser, args: Any) -> int:
    """Dispatch parsed CLI args to the matching handler; map runbook errors to exit codes."""
    from runbook.logging import configure_cli_logging

    configure_cli_logging(quiet=getattr(args, "quiet", False), verbose=getattr(args, "verbose", False))

    dispatch: dict[str, Callable[[], int]] = {
        "init": lambda: handlers.handle_init(args),
        "list": lambda: handlers.handle_list(args),
        "show": lambda: handlers.handle_show(args),
        "run": lambda: handlers.handle_run(args),
    }
    try:
        return dispatch[_mode(args)]()
    except RunbookError as e:
        handlers._err(str(e))
        return e.exit_code
