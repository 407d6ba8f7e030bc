"""Built-in cargo preset: the five recipes a Rust crate's Runbook usually carries."""

from __future__ import annotations

from enum import Enum

from .parser import Declaration, parse_declaration

_HEADER = "set dotenv-load\nset positional-arguments\n"


class CargoRecipe(str, Enum):
    """Closed set of preset recipes; each member knows its declaration block."""

    RUN = "run"
    TEST = "test"
    BUILD = "build"
    INSTALL = "install"
    CHECK = "check"

    @property
    def signature(self) -> str:
        return _SIGNATURES[self]

    @property
    def body(self) -> str:
        return _BODIES[self]

    def block(self) -> str:
        return f"{self.signature}:\n    {self.body}\n"


_SIGNATURES: dict[CargoRecipe, str] = {
    CargoRecipe.RUN: "run *ARGS",
    CargoRecipe.TEST: "test *ARGS",
    CargoRecipe.BUILD: "build",
    CargoRecipe.INSTALL: "install",
    CargoRecipe.CHECK: "check",
}

_BODIES: dict[CargoRecipe, str] = {
    CargoRecipe.RUN: 'cargo run -- "$@"',
    CargoRecipe.TEST: 'cargo test -- --nocapture "$@"',
    CargoRecipe.BUILD: "cargo build",
    CargoRecipe.INSTALL: "cargo install --path . --locked",
    CargoRecipe.CHECK: "cargo check",
}


def cargo_declaration_text() -> str:
    return _HEADER + "\n" + "\n".join(r.block() for r in CargoRecipe)


def cargo_declaration() -> Declaration:
    return parse_declaration(cargo_declaration_text())
