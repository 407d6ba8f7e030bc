"""Core CLI handlers: run, list, show, init."""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Any

from runbook.dispatch import InvocationRequest, dispatch
from runbook.env import EnvironmentOverlay, load_for
from runbook.errors import DispatchError
from runbook.process import execute
from runbook.recipes import DECLARATION_NAMES, cargo_declaration_text

from .core_handlers_common import _clog, _err, _load


def handle_run(args: Any) -> int:
    """Resolve the requested recipe and run it (or print it with --dry-run)."""
    declaration, settings = _load(args)
    name = getattr(args, "recipe", None)
    if name is None:
        first = declaration.table.default()
        if first is None:
            raise DispatchError(f"{declaration.path} declares no recipes")
        name = first.name
    overlay = EnvironmentOverlay(override=settings.dotenv_override)
    if settings.dotenv_load:
        overlay = load_for(
            declaration.directory,
            path=settings.dotenv_path,
            filename=settings.dotenv_filename,
            required=settings.dotenv_required,
            override=settings.dotenv_override,
        )
        if overlay.source is not None:
            _clog().debug("loaded %d variable(s) from %s", len(overlay), overlay.source)
    request = InvocationRequest.from_argv(name, getattr(args, "arguments", None) or [])
    cwd = settings.working_directory or declaration.directory
    cmd = dispatch(request, declaration.table, overlay=overlay, cwd=cwd)
    if getattr(args, "dry_run", False):
        print(shlex.join(cmd.argv))
        return 0
    return execute(cmd)


def handle_list(args: Any) -> int:
    """Print recipes in declaration order with their parameters and doc comments."""
    declaration, _ = _load(args)
    recipes = list(declaration.table)
    print("Available recipes:")
    if not recipes:
        return 0
    width = max(len(r.signature()) for r in recipes)
    for r in recipes:
        line = f"    {r.signature():<{width}}"
        if r.doc:
            line += f" # {r.doc}"
        print(line.rstrip())
    return 0


def handle_show(args: Any) -> int:
    declaration, _ = _load(args)
    print(declaration.table.lookup(args.show).render())
    return 0


def handle_init(args: Any) -> int:
    """Write the cargo preset to ./Runbook unless a declaration file is already there."""
    cwd = Path.cwd()
    existing = [cwd / n for n in DECLARATION_NAMES if (cwd / n).exists()]
    if existing:
        _err(f"declaration file already exists: {existing[0]}")
        return 1
    target = cwd / DECLARATION_NAMES[0]
    target.write_text(cargo_declaration_text(), encoding="utf-8")
    _clog().info("Wrote %s", target)
    return 0
