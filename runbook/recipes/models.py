"""Typed models for declared recipes and their command templates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal as _Lit
from typing import Union

ParamKind = _Lit["required", "defaulted", "star", "plus"]


@dataclass(frozen=True, slots=True)
class Parameter:
    """One declared recipe parameter.

    ``star`` captures zero or more trailing arguments, ``plus`` one or more.
    """

    name: str
    kind: ParamKind = "required"
    default: str | None = None

    @property
    def variadic(self) -> bool:
        return self.kind in ("star", "plus")

    @property
    def required(self) -> bool:
        return self.kind in ("required", "plus")

    def render(self) -> str:
        if self.kind == "star":
            return f"*{self.name}"
        if self.kind == "plus":
            return f"+{self.name}"
        if self.kind == "defaulted":
            escaped = (self.default or "").replace("\\", "\\\\").replace('"', '\\"')
            return f'{self.name}="{escaped}"'
        return self.name


@dataclass(frozen=True, slots=True)
class Literal:
    text: str


@dataclass(frozen=True, slots=True)
class ParamRef:
    """``{{name}}``"""

    name: str


@dataclass(frozen=True, slots=True)
class AllPositional:
    """``$@``: every bound argument, one token each."""


@dataclass(frozen=True, slots=True)
class Positional:
    """``$1`` .. ``$9``"""

    index: int


Part = Union[Literal, ParamRef, AllPositional, Positional]


@dataclass(frozen=True, slots=True)
class Interpolated:
    """A single word mixing literal text and references, e.g. ``--out={{dir}}``."""

    parts: tuple[Part, ...]


Token = Union[Literal, ParamRef, AllPositional, Positional, Interpolated]


def token_refs(token: Token) -> list[Part]:
    if isinstance(token, Interpolated):
        return [p for p in token.parts if not isinstance(p, Literal)]
    if isinstance(token, Literal):
        return []
    return [token]


@dataclass(frozen=True, slots=True)
class Recipe:
    """A named command template. Immutable once defined."""

    name: str
    parameters: tuple[Parameter, ...] = ()
    template: tuple[Token, ...] = ()
    body: str = ""
    doc: str = ""
    quiet: bool = False
    line: int = 0

    @property
    def variadic(self) -> bool:
        return bool(self.parameters) and self.parameters[-1].variadic

    def parameter(self, name: str) -> Parameter | None:
        for p in self.parameters:
            if p.name == name:
                return p
        return None

    def signature(self) -> str:
        return " ".join([self.name, *(p.render() for p in self.parameters)])

    def render(self) -> str:
        """Declaration text for this recipe, as shown by ``--show``."""
        lines = []
        if self.doc:
            lines.append(f"# {self.doc}")
        lines.append(f"{self.signature()}:")
        lines.append(f"    {'@' if self.quiet else ''}{self.body}")
        return "\n".join(lines)


@dataclass(frozen=True, slots=True)
class DeclarationSettings:
    """``set`` statements found in a declaration file."""

    dotenv_load: bool = False
    dotenv_required: bool = False
    dotenv_override: bool = False
    positional_arguments: bool = False
    dotenv_filename: str | None = None
    dotenv_path: str | None = None
