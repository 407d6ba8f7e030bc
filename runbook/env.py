"""Environment file loading.

Loading never touches ``os.environ``: it returns an ``EnvironmentOverlay``
that the process runner applies to the ambient environment of the child.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from dotenv.main import DotEnv
from dotenv.parser import parse_stream

from runbook.errors import LoadError
from runbook.logging import get_logger

DEFAULT_DOTENV_FILENAME = ".env"

logger = get_logger("env")


@dataclass(frozen=True, slots=True)
class EnvironmentOverlay:
    """Variables loaded from an env file plus the precedence policy.

    By default the ambient environment wins; ``override`` lets the file win.
    """

    values: Mapping[str, str] = field(default_factory=dict)
    source: Path | None = None
    override: bool = False

    def apply(self, ambient: Mapping[str, str]) -> dict[str, str]:
        env = dict(ambient)
        for key, value in self.values.items():
            if self.override or key not in env:
                env[key] = value
        return env

    def __len__(self) -> int:
        return len(self.values)


def _validate(path: Path) -> None:
    with path.open(encoding="utf-8") as stream:
        for binding in parse_stream(stream):
            if binding.error:
                raise LoadError(
                    f"{path}:{binding.original.line}: malformed line: {binding.original.string.strip()!r}"
                )
            if binding.key is not None and binding.value is None:
                raise LoadError(
                    f"{path}:{binding.original.line}: expected KEY=value, got {binding.original.string.strip()!r}"
                )


def load(path: Path, *, override: bool = False) -> EnvironmentOverlay:
    """Read KEY=value pairs from path. A missing file yields an empty overlay."""
    path = Path(path)
    if not path.exists():
        logger.debug("env file %s not found; no overlay", path)
        return EnvironmentOverlay(override=override)
    try:
        _validate(path)
        # ${VAR} resolves against os.environ with the same precedence as the overlay.
        raw = DotEnv(path, encoding="utf-8", interpolate=True, override=override).dict()
    except (OSError, UnicodeDecodeError) as e:
        raise LoadError(f"cannot read {path}: {e}") from e
    values = {k: v for k, v in raw.items() if v is not None}
    logger.debug("loaded %d variable(s) from %s", len(values), path)
    return EnvironmentOverlay(values=values, source=path, override=override)


def discover(start: Path, filename: str = DEFAULT_DOTENV_FILENAME) -> Path | None:
    """Return the first ``filename`` found in start or one of its parents."""
    here = Path(start).resolve()
    for directory in (here, *here.parents):
        candidate = directory / filename
        if candidate.is_file():
            return candidate
    return None


def load_for(
    directory: Path,
    *,
    path: str | Path | None = None,
    filename: str | None = None,
    required: bool = False,
    override: bool = False,
) -> EnvironmentOverlay:
    """Resolve and load the env file for a declaration living in directory.

    An explicit path is taken relative to directory; otherwise filename
    (default ``.env``) is searched from directory upwards.
    """
    if path is not None:
        target: Path | None = Path(directory) / Path(path)
        if not target.exists():
            target = None
    else:
        target = discover(directory, filename or DEFAULT_DOTENV_FILENAME)
    if target is None:
        if required:
            wanted = path or filename or DEFAULT_DOTENV_FILENAME
            raise LoadError(f"required env file '{wanted}' not found from {directory}")
        return EnvironmentOverlay(override=override)
    return load(target, override=override)
