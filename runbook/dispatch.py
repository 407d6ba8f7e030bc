"""Resolve an invocation against the recipe table into a ready-to-spawn command."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence, Union

from runbook.env import EnvironmentOverlay
from runbook.errors import DispatchError, MissingArgument
from runbook.logging import get_logger
from runbook.recipes.models import (
    AllPositional,
    Interpolated,
    Literal,
    ParamRef,
    Positional,
    Recipe,
    Token,
)
from runbook.recipes.table import RecipeTable

logger = get_logger("dispatch")

Bound = Union[str, tuple[str, ...]]


@dataclass(frozen=True, slots=True)
class InvocationRequest:
    name: str
    arguments: tuple[str, ...] = ()

    @classmethod
    def from_argv(cls, name: str, arguments: Sequence[str]) -> "InvocationRequest":
        return cls(name=name, arguments=tuple(arguments))


@dataclass(frozen=True, slots=True)
class ResolvedCommand:
    """Executable plus final argument vector; argv[0] is the program."""

    argv: tuple[str, ...]
    recipe: str = ""
    overlay: EnvironmentOverlay = field(default_factory=EnvironmentOverlay)
    cwd: Path | None = None
    quiet: bool = False

    @property
    def program(self) -> str:
        return self.argv[0]

    @property
    def arguments(self) -> tuple[str, ...]:
        return self.argv[1:]


def bind_arguments(recipe: Recipe, arguments: Sequence[str]) -> list[tuple[str, Bound]]:
    """Bind arguments to parameters left to right; a variadic tail takes the rest."""
    bound: list[tuple[str, Bound]] = []
    args = list(arguments)
    i = 0
    for param in recipe.parameters:
        if param.variadic:
            rest = tuple(args[i:])
            if param.kind == "plus" and not rest:
                raise MissingArgument(recipe.name, param.name)
            bound.append((param.name, rest))
            i = len(args)
            break
        if i < len(args):
            bound.append((param.name, args[i]))
            i += 1
        elif param.kind == "defaulted":
            bound.append((param.name, param.default or ""))
        else:
            raise MissingArgument(recipe.name, param.name)
    if i < len(args):
        logger.warning(
            "recipe '%s' takes no further arguments; ignoring: %s",
            recipe.name,
            " ".join(args[i:]),
        )
    return bound


def _flatten(bound: list[tuple[str, Bound]]) -> list[str]:
    out: list[str] = []
    for _, value in bound:
        if isinstance(value, tuple):
            out.extend(value)
        else:
            out.append(value)
    return out


def _as_text(value: Bound) -> str:
    return " ".join(value) if isinstance(value, tuple) else value


def _expand(token: Token, values: dict[str, Bound], positional: list[str]) -> list[str]:
    if isinstance(token, Literal):
        return [token.text]
    if isinstance(token, ParamRef):
        value = values[token.name]
        return list(value) if isinstance(value, tuple) else [value]
    if isinstance(token, AllPositional):
        return list(positional)
    if isinstance(token, Positional):
        if token.index <= len(positional):
            return [positional[token.index - 1]]
        return []
    if isinstance(token, Interpolated):
        pieces: list[str] = []
        for part in token.parts:
            if isinstance(part, Literal):
                pieces.append(part.text)
            elif isinstance(part, ParamRef):
                pieces.append(_as_text(values[part.name]))
            elif isinstance(part, AllPositional):
                pieces.append(" ".join(positional))
            elif isinstance(part, Positional):
                if part.index <= len(positional):
                    pieces.append(positional[part.index - 1])
        return ["".join(pieces)]
    raise TypeError(f"unexpected template token: {token!r}")


def substitute(recipe: Recipe, bound: list[tuple[str, Bound]]) -> tuple[str, ...]:
    values = dict(bound)
    positional = _flatten(bound)
    argv: list[str] = []
    for token in recipe.template:
        argv.extend(_expand(token, values, positional))
    return tuple(argv)


def dispatch(
    request: InvocationRequest,
    table: RecipeTable,
    *,
    overlay: EnvironmentOverlay | None = None,
    cwd: Path | None = None,
) -> ResolvedCommand:
    """Look up the recipe, bind arguments and build the final argv."""
    recipe = table.lookup(request.name)
    bound = bind_arguments(recipe, request.arguments)
    argv = substitute(recipe, bound)
    if not argv or not argv[0]:
        raise DispatchError(f"recipe '{recipe.name}' resolved to an empty command")
    return ResolvedCommand(
        argv=argv,
        recipe=recipe.name,
        overlay=overlay if overlay is not None else EnvironmentOverlay(),
        cwd=cwd,
        quiet=recipe.quiet,
    )
