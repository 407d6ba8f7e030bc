"""Error hierarchy for declaration parsing, env loading, dispatch and spawning.

Every error carries the exit code the CLI reports for it. Codes come from
sysexits.h so they stay apart from the codes build tools return themselves.
"""

from __future__ import annotations

EX_USAGE = 64
EX_DATAERR = 65
EX_UNAVAILABLE = 69
EX_CONFIG = 78


class RunbookError(Exception):
    """Base class for failures raised before or while spawning a recipe."""

    exit_code: int = 1


class ParseError(RunbookError):
    """Malformed declaration file."""

    exit_code = EX_DATAERR

    def __init__(self, message: str, *, line: int | None = None, text: str | None = None) -> None:
        self.message = message
        self.line = line
        self.text = text
        super().__init__(self._format())

    def _format(self) -> str:
        if self.line is None:
            return self.message
        out = f"line {self.line}: {self.message}"
        if self.text is not None:
            out += f"\n    {self.text.strip()}"
        return out


class DeclarationNotFound(ParseError):
    """No declaration file in the search path."""


class LoadError(RunbookError):
    """Environment file present but unusable."""

    exit_code = EX_CONFIG


class DispatchError(RunbookError):
    exit_code = EX_USAGE


class UnknownRecipe(DispatchError):
    def __init__(self, name: str, suggestions: list[str] | None = None) -> None:
        self.name = name
        self.suggestions = list(suggestions or [])
        msg = f"unknown recipe '{name}'"
        if self.suggestions:
            msg += f" (did you mean: {', '.join(self.suggestions)}?)"
        super().__init__(msg)


class MissingArgument(DispatchError):
    def __init__(self, recipe: str, param: str) -> None:
        self.recipe = recipe
        self.param = param
        super().__init__(f"recipe '{recipe}' is missing argument '{param}'")


class ProcessError(RunbookError):
    exit_code = EX_UNAVAILABLE


class SpawnFailed(ProcessError):
    def __init__(self, program: str, reason: str) -> None:
        self.program = program
        self.reason = reason
        super().__init__(f"could not start '{program}': {reason}")
