"""Declaration file parser.

Grammar (a subset of just's)::

    # doc comment
    set dotenv-load
    set dotenv-filename := ".env.local"
    name PARAM PARAM="default" *ARGS:
        [@]command line

Body words are split with POSIX shell quoting and never expanded. ``{{name}}``
references a parameter; with ``set positional-arguments`` the body may also use
``$@`` and ``$1``..``$9``. Quotes only group words: references inside single
or double quotes are still substituted. Write ``{{{{`` for a literal ``{{``.
"""

from __future__ import annotations

import re
import shlex
from dataclasses import dataclass, field, replace
from pathlib import Path

from runbook.errors import DeclarationNotFound, ParseError
from runbook.logging import get_logger

from .models import (
    AllPositional,
    DeclarationSettings,
    Interpolated,
    Literal,
    Parameter,
    ParamRef,
    Part,
    Positional,
    Token,
    token_refs,
)
from .table import RecipeTable

DECLARATION_NAMES: tuple[str, ...] = ("Runbook", "runbook", "Justfile", "justfile", ".justfile")

_BOOL_SETTINGS = {
    "dotenv-load": "dotenv_load",
    "dotenv-required": "dotenv_required",
    "dotenv-override": "dotenv_override",
    "positional-arguments": "positional_arguments",
}
_STR_SETTINGS = {
    "dotenv-filename": "dotenv_filename",
    "dotenv-path": "dotenv_path",
}

_SET_RE = re.compile(r"^set\s+([A-Za-z][A-Za-z0-9-]*)\s*(?::=\s*(.*?))?\s*$")
_NAME_RE = re.compile(r"(@?)([A-Za-z_][A-Za-z0-9_-]*)")
_PARAM_RE = re.compile(
    r"""\s+([*+]?)([A-Za-z_][A-Za-z0-9_]*)"""
    r"""(?:=('[^']*'|"(?:[^"\\]|\\.)*"|[^\s:'"]+))?"""
)
_HEADER_END_RE = re.compile(r"\s*:\s*(?:#.*)?$")
_REF_RE = re.compile(r"\{\{\{\{|\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}|\$([1-9])|\$@")

logger = get_logger("recipes")


@dataclass(frozen=True, slots=True)
class Declaration:
    """Parsed declaration file: settings plus a frozen recipe table."""

    settings: DeclarationSettings
    table: RecipeTable
    path: Path | None = None

    @property
    def directory(self) -> Path:
        return self.path.parent if self.path is not None else Path.cwd()


@dataclass(slots=True)
class _Block:
    name: str
    params: list[Parameter]
    line: int
    header: str
    doc: str = ""
    quiet: bool = False
    body: str | None = None
    body_line: int = 0
    body_text: str = ""
    extra: list[tuple[int, str]] = field(default_factory=list)


def _unquote(raw: str) -> str:
    if raw.startswith("'") and raw.endswith("'"):
        return raw[1:-1]
    if raw.startswith('"') and raw.endswith('"'):
        return re.sub(r"\\(.)", r"\1", raw[1:-1])
    return raw


def _parse_setting(m: re.Match, settings: DeclarationSettings, lineno: int, text: str) -> DeclarationSettings:
    key, value = m.group(1), m.group(2)
    if key in _BOOL_SETTINGS:
        if value is None or value == "true":
            flag = True
        elif value == "false":
            flag = False
        else:
            raise ParseError(f"setting '{key}' expects true or false", line=lineno, text=text)
        return replace(settings, **{_BOOL_SETTINGS[key]: flag})
    if key in _STR_SETTINGS:
        if not value or value[0] not in "'\"" or value[-1] != value[0] or len(value) < 2:
            raise ParseError(f"setting '{key}' expects a quoted string", line=lineno, text=text)
        return replace(settings, **{_STR_SETTINGS[key]: _unquote(value)})
    raise ParseError(f"unknown setting '{key}'", line=lineno, text=text)


def _parse_header(text: str, lineno: int) -> tuple[str, list[Parameter], bool]:
    m = _NAME_RE.match(text)
    if not m:
        raise ParseError("expected a recipe header", line=lineno, text=text)
    quiet, name = bool(m.group(1)), m.group(2)
    pos = m.end()
    params: list[Parameter] = []
    while True:
        pm = _PARAM_RE.match(text, pos)
        if not pm:
            break
        sigil, pname, default = pm.groups()
        if sigil:
            if default is not None:
                raise ParseError(f"variadic parameter '{pname}' cannot have a default", line=lineno, text=text)
            params.append(Parameter(pname, "star" if sigil == "*" else "plus"))
        elif default is not None:
            params.append(Parameter(pname, "defaulted", _unquote(default)))
        else:
            params.append(Parameter(pname))
        pos = pm.end()
    if not _HEADER_END_RE.match(text, pos):
        raise ParseError("expected ':' after recipe parameters", line=lineno, text=text)
    return name, params, quiet


def _parse_word(word: str) -> Token:
    if word == "$@":
        return AllPositional()
    parts: list[Part] = []
    pos = 0
    for m in _REF_RE.finditer(word):
        if m.start() > pos:
            parts.append(Literal(word[pos : m.start()]))
        whole = m.group(0)
        if whole == "{{{{":
            parts.append(Literal("{{"))
        elif m.group(1):
            parts.append(ParamRef(m.group(1)))
        elif m.group(2):
            parts.append(Positional(int(m.group(2))))
        else:
            parts.append(AllPositional())
        pos = m.end()
    if pos < len(word):
        parts.append(Literal(word[pos:]))
    literal_only = all(isinstance(p, Literal) for p in parts)
    if literal_only:
        return Literal("".join(p.text for p in parts))  # type: ignore[union-attr]
    if len(parts) == 1:
        return parts[0]
    return Interpolated(tuple(parts))


def parse_template(body: str) -> tuple[Token, ...]:
    """Split a body line into template tokens. Raises ValueError on bad quoting."""
    return tuple(_parse_word(w) for w in shlex.split(body, posix=True))


def _uses_positional(template: tuple[Token, ...]) -> bool:
    return any(isinstance(r, (AllPositional, Positional)) for t in template for r in token_refs(t))


def parse_declaration(text: str, path: Path | None = None) -> Declaration:
    settings = DeclarationSettings()
    blocks: list[_Block] = []
    current: _Block | None = None
    doc = ""

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.rstrip()
        if not line.strip():
            doc = ""
            continue
        if line[0] in " \t":
            stripped = line.strip()
            if stripped.startswith("#"):
                continue
            if current is None:
                raise ParseError("indented line outside of a recipe", line=lineno, text=raw)
            if current.body is not None:
                current.extra.append((lineno, raw))
                continue
            quiet = stripped.startswith("@")
            current.body = stripped[1:].lstrip() if quiet else stripped
            current.quiet = current.quiet or quiet
            current.body_line = lineno
            current.body_text = raw
            continue
        current = None
        if line.startswith("#"):
            doc = "" if line.startswith("#!") else line[1:].strip()
            continue
        sm = _SET_RE.match(line)
        if sm:
            settings = _parse_setting(sm, settings, lineno, raw)
            doc = ""
            continue
        name, params, quiet = _parse_header(line, lineno)
        current = _Block(name=name, params=params, line=lineno, header=raw, doc=doc, quiet=quiet)
        blocks.append(current)
        doc = ""

    table = RecipeTable()
    for b in blocks:
        if b.body is None:
            raise ParseError(f"recipe '{b.name}' has no command line", line=b.line, text=b.header)
        if b.extra:
            extra_line, extra_text = b.extra[0]
            raise ParseError(
                f"recipe '{b.name}' has more than one command line", line=extra_line, text=extra_text
            )
        try:
            template = parse_template(b.body)
        except ValueError as e:
            raise ParseError(f"cannot split command line: {e}", line=b.body_line, text=b.body_text) from e
        if not template:
            raise ParseError(f"recipe '{b.name}' has an empty command line", line=b.body_line, text=b.body_text)
        if _uses_positional(template) and not settings.positional_arguments:
            raise ParseError(
                "positional references ($@, $1..$9) need 'set positional-arguments'",
                line=b.body_line,
                text=b.body_text,
            )
        try:
            table.define(
                b.name,
                b.params,
                template=template,
                body=b.body,
                doc=b.doc,
                quiet=b.quiet,
                line=b.line,
            )
        except ParseError as e:
            raise ParseError(e.message, line=b.line, text=b.header) from e
    logger.debug("parsed %d recipe(s) from %s", len(table), path or "<text>")
    return Declaration(settings=settings, table=table.freeze(), path=path)


def load_declaration(path: Path) -> Declaration:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise DeclarationNotFound(f"declaration file not found: {path}") from None
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(f"cannot read {path}: {e}") from e
    return parse_declaration(text, path=path.resolve())


def find_declaration(start: Path | None = None) -> Path:
    """Walk from start (default cwd) to the filesystem root; return the first declaration file."""
    here = Path(start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        for name in DECLARATION_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
    raise DeclarationNotFound(f"no {' / '.join(DECLARATION_NAMES[:3])} found in {here} or its parents")
