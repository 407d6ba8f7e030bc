"""Centralized logging helpers for the CLI and runtime paths."""

from __future__ import annotations

import logging
import os
import sys

_configured = False


class _StderrHandler(logging.StreamHandler):
    """StreamHandler bound to whatever sys.stderr is at emit time."""

    def emit(self, record: logging.LogRecord) -> None:
        self.stream = sys.stderr
        super().emit(record)


def _resolve_level() -> int:
    raw = os.environ.get("RUNBOOK_LOG_LEVEL", "").strip().upper()
    if raw:
        return getattr(logging, raw, logging.INFO)
    return logging.INFO


def _ensure_handler(root: logging.Logger) -> None:
    if not root.handlers:
        h = _StderrHandler()
        h.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(h)
        root.propagate = False


def configure_cli_logging(*, quiet: bool = False, verbose: bool = False) -> None:
    """Set runbook.* logger level from CLI flags. --quiet/--verbose override env."""
    global _configured
    env_level = _resolve_level()
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = env_level
    root = logging.getLogger("runbook")
    root.setLevel(level)
    _ensure_handler(root)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return configured logger writing plain messages to stderr."""
    root = logging.getLogger("runbook")
    _ensure_handler(root)
    if not _configured:
        root.setLevel(_resolve_level())
    return logging.getLogger(f"runbook.{name}")
