"""Shared helpers for core CLI handlers."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from runbook.config import RunbookSettings, resolve_declaration_path, resolve_settings
from runbook.recipes import Declaration, load_declaration


def _err(msg: str) -> None:
    """Log unified error message (via logger, respects --quiet)."""
    _clog().error("runbook: %s", msg)


def _clog() -> Any:
    from runbook.logging import get_logger

    return get_logger("cli")


def _cli_overrides(args: Any) -> dict[str, Any]:
    """Settings given explicitly on the command line; None means 'not given'."""
    return {
        "dotenv_path": getattr(args, "dotenv_path", None),
        "dotenv_filename": getattr(args, "dotenv_filename", None),
        "dotenv_override": True if getattr(args, "dotenv_override", None) else None,
        "dotenv_load": False if getattr(args, "no_dotenv", False) else None,
        "working_directory": getattr(args, "working_directory", None),
    }


def _load(args: Any) -> tuple[Declaration, RunbookSettings]:
    """Locate and parse the declaration file, then resolve effective settings."""
    path = resolve_declaration_path(getattr(args, "file", None), Path.cwd())
    declaration = load_declaration(path)
    settings = resolve_settings(declaration.settings, cli=_cli_overrides(args), cwd=Path.cwd())
    _clog().debug("declaration %s, settings %s", declaration.path, settings)
    return declaration, settings
