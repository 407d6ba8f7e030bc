"""Pytest configuration. Ensures project root is in sys.path for top-level modules (runbook_cli, cli, runbook)."""
import json
import os
import shutil
import stat
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

FIXTURES = Path(__file__).resolve().parent / "fixtures"


class FakeTool:
    """Handle on a fake executable installed on PATH; reads back its call log."""

    def __init__(self, log: Path) -> None:
        self.log = log

    def calls(self) -> list[dict]:
        if not self.log.exists():
            return []
        return [json.loads(line) for line in self.log.read_text(encoding="utf-8").splitlines() if line]


@pytest.fixture(autouse=True)
def _clean_runbook_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("RUNBOOK_") or key.startswith("RB_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def fake_cargo(tmp_path: Path, monkeypatch) -> FakeTool:
    """Put a 'cargo' on PATH that records its argv instead of building anything."""
    if os.name != "posix":
        pytest.skip("fake executables rely on POSIX shebang scripts")
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    script = bin_dir / "cargo"
    script.write_text(
        f'#!/bin/sh\nexec "{sys.executable}" "{FIXTURES / "fake_tool.py"}" "$@"\n',
        encoding="utf-8",
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    log = tmp_path / "calls.jsonl"
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    monkeypatch.setenv("FAKE_TOOL_LOG", str(log))
    monkeypatch.delenv("FAKE_TOOL_EXIT", raising=False)
    return FakeTool(log)


@pytest.fixture
def cargo_project(tmp_path: Path, monkeypatch) -> Path:
    """A project directory holding the cargo Runbook, set as cwd."""
    project = tmp_path / "project"
    project.mkdir()
    shutil.copy(FIXTURES / "Runbook", project / "Runbook")
    monkeypatch.chdir(project)
    return project
