"""Spawn a resolved command with inherited stdio and forward its exit status."""

from __future__ import annotations

import os
import shlex
import signal
import subprocess
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Mapping

from runbook.dispatch import ResolvedCommand
from runbook.errors import SpawnFailed
from runbook.logging import get_logger

logger = get_logger("process")

_FORWARDED = tuple(getattr(signal, n) for n in ("SIGINT", "SIGTERM", "SIGHUP") if hasattr(signal, n))


@dataclass(slots=True)
class _Child:
    proc: subprocess.Popen | None = None
    pending: list[int] = field(default_factory=list)

    def relay(self, signum: int, _frame: object) -> None:
        proc = self.proc
        if proc is None:
            self.pending.append(signum)
            return
        if proc.poll() is not None:
            return
        try:
            proc.send_signal(signum)
        except ProcessLookupError:
            pass

    def attach(self, proc: subprocess.Popen) -> None:
        """Adopt the spawned child and hand it any signal received while it was starting."""
        self.proc = proc
        while self.pending:
            self.relay(self.pending.pop(0), None)


@contextmanager
def forward_signals() -> Iterator[_Child]:
    """Relay SIGINT/SIGTERM/SIGHUP received by this process to the child.

    Handlers go in before the child is spawned so no interrupt can kill the
    parent and orphan it. They can only be installed from the main thread;
    elsewhere this is a no-op.
    """
    child = _Child()
    if threading.current_thread() is not threading.main_thread():
        yield child
        return
    previous = {}
    for sig in _FORWARDED:
        previous[sig] = signal.signal(sig, child.relay)
    try:
        yield child
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler if handler is not None else signal.SIG_DFL)


def exit_status(returncode: int) -> int:
    """Map Popen.returncode to a shell-style status (killed by signal N -> 128 + N)."""
    if returncode < 0:
        return 128 + (-returncode)
    return returncode


def _spawn(cmd: ResolvedCommand, env: dict[str, str]) -> subprocess.Popen:
    if cmd.cwd is not None and not Path(cmd.cwd).is_dir():
        raise SpawnFailed(cmd.program, f"working directory {cmd.cwd} does not exist")
    try:
        return subprocess.Popen(list(cmd.argv), cwd=cmd.cwd, env=env)
    except FileNotFoundError as e:
        raise SpawnFailed(cmd.program, e.strerror or "executable not found") from e
    except PermissionError as e:
        raise SpawnFailed(cmd.program, e.strerror or "permission denied") from e
    except OSError as e:
        raise SpawnFailed(cmd.program, str(e)) from e


def execute(cmd: ResolvedCommand, *, ambient: Mapping[str, str] | None = None) -> int:
    """Run cmd to completion and return its exit status."""
    env = cmd.overlay.apply(os.environ if ambient is None else ambient)
    if not cmd.quiet:
        logger.info(shlex.join(cmd.argv))
    with forward_signals() as child:
        child.attach(_spawn(cmd, env))
        returncode = child.proc.wait()
    status = exit_status(returncode)
    logger.debug("%s exited with %d", cmd.program, status)
    return status
