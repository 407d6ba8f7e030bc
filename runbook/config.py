"""Effective runtime settings.

Resolution order per option: CLI flag > RUNBOOK_* env var >
pyproject.toml [tool.runbook] > declaration ``set`` statement > default.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

from runbook.logging import get_logger
from runbook.recipes.models import DeclarationSettings
from runbook.recipes.parser import find_declaration

logger = get_logger("config")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(slots=True)
class RunbookSettings:
    dotenv_load: bool = False
    dotenv_required: bool = False
    dotenv_override: bool = False
    dotenv_filename: str | None = None
    dotenv_path: str | None = None
    working_directory: Path | None = None


def _env_name(field_name: str) -> str:
    return "RUNBOOK_" + field_name.upper()


def _coerce(source: str, value: Any, kind: type) -> Any:
    """Convert a configured value to kind; warn and return None when it does not fit."""
    if kind is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            if value.strip().lower() in _TRUE:
                return True
            if value.strip().lower() in _FALSE:
                return False
        logger.warning("ignoring %s=%r: expected a boolean", source, value)
        return None
    if not isinstance(value, (str, Path)):
        logger.warning("ignoring %s=%r: expected a string", source, value)
        return None
    return Path(value) if kind is Path else str(value)


def _env_value(name: str, kind: type) -> Any:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    return _coerce(name, raw, kind)


def read_pyproject_options(root: Path) -> dict[str, Any]:
    """Return [tool.runbook] from root/pyproject.toml with '-' keys normalised to '_'."""
    pyproject = Path(root) / "pyproject.toml"
    if not pyproject.is_file():
        return {}
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        logger.warning("ignoring %s: %s", pyproject, e)
        return {}
    section = (data.get("tool") or {}).get("runbook") or {}
    if not isinstance(section, dict):
        return {}
    return {str(k).replace("-", "_"): v for k, v in section.items()}


def resolve_declaration_path(cli_file: Path | None, cwd: Path | None = None) -> Path:
    cwd = Path(cwd or Path.cwd())
    if cli_file is not None:
        return Path(cli_file)
    env_file = os.environ.get("RUNBOOK_FILE", "").strip()
    if env_file:
        return Path(env_file)
    configured = _project_value(read_pyproject_options(cwd), "file", str)
    if configured:
        return cwd / str(configured)
    return find_declaration(cwd)


_KINDS: dict[str, type] = {
    "dotenv_load": bool,
    "dotenv_required": bool,
    "dotenv_override": bool,
    "dotenv_filename": str,
    "dotenv_path": str,
    "working_directory": Path,
}


def _project_value(project: Mapping[str, Any], name: str, kind: type) -> Any:
    if project.get(name) is None:
        return None
    return _coerce(f"[tool.runbook] {name.replace('_', '-')}", project[name], kind)


def resolve_settings(
    declared: DeclarationSettings,
    *,
    cli: Mapping[str, Any] | None = None,
    cwd: Path | None = None,
) -> RunbookSettings:
    cli = cli or {}
    project = read_pyproject_options(Path(cwd or Path.cwd()))
    resolved: dict[str, Any] = {}
    for f in fields(RunbookSettings):
        kind = _KINDS[f.name]
        candidates = (
            cli.get(f.name),
            _env_value(_env_name(f.name), kind),
            _project_value(project, f.name, kind),
            getattr(declared, f.name, None),
        )
        value = next((c for c in candidates if c is not None), None)
        if value is not None:
            resolved[f.name] = value
    settings = RunbookSettings(**resolved)
    # Asking for a specific env file implies loading one.
    if (settings.dotenv_path or settings.dotenv_filename or settings.dotenv_required) and cli.get("dotenv_load") is not False:
        settings.dotenv_load = True
    return settings
