"""Parser wiring extracted from runbook_cli entrypoint."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence


def build_parser(*, version: str) -> argparse.ArgumentParser:
    """Configure the top-level CLI parser.

    ``recipe`` and ``arguments`` are declared for usage and help only; the
    entry point fills them from ``split_invocation`` so argparse never touches
    the recipe's own arguments.
    """
    parser = argparse.ArgumentParser(
        prog="runbook",
        allow_abbrev=False,
        description="runbook: run named recipes from a Runbook/Justfile",
        epilog="Example: runbook run --flag value. Without RECIPE the first recipe runs.",
    )
    parser.add_argument("--version", "-V", action="version", version=f"%(prog)s {version}")
    _add_file_options(parser)
    _add_dotenv_options(parser)
    _add_mode_options(parser)
    parser.add_argument("--quiet", "-q", action="store_true", help="Only warnings and errors on stderr; no command echo")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging on stderr")
    parser.add_argument("recipe", nargs="?", default=None, help="Recipe to run (default: first recipe)")
    parser.add_argument("arguments", nargs=argparse.REMAINDER, help="Arguments passed to the recipe verbatim")
    return parser


def _add_file_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--file", "-f", type=Path, default=None, metavar="PATH", help="Declaration file (default: search cwd and parents)")
    parser.add_argument("--working-directory", "-d", type=Path, default=None, metavar="DIR", help="Run the command in DIR (default: declaration file directory)")


def _add_dotenv_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--dotenv-path", type=str, default=None, metavar="PATH", help="Load this env file")
    parser.add_argument("--dotenv-filename", type=str, default=None, metavar="NAME", help="Env file name to search for (default: .env)")
    parser.add_argument("--dotenv-override", action="store_true", default=None, help="Env file values win over variables already set")
    parser.add_argument("--no-dotenv", action="store_true", help="Do not load any env file")


def _add_mode_options(parser: argparse.ArgumentParser) -> None:
    modes = parser.add_mutually_exclusive_group()
    modes.add_argument("--list", "-l", action="store_true", help="List recipes and exit")
    modes.add_argument("--show", "-s", type=str, default=None, metavar="RECIPE", help="Print a recipe's declaration and exit")
    modes.add_argument("--dry-run", "-n", action="store_true", help="Print the resolved command instead of running it")
    modes.add_argument("--init", action="store_true", help="Write the cargo preset to ./Runbook")


# Options that consume the following token as their value.
_VALUE_OPTIONS = frozenset(
    {"--file", "-f", "--working-directory", "-d", "--dotenv-path", "--dotenv-filename", "--show", "-s"}
)
_VALUE_SHORT = frozenset(o[1] for o in _VALUE_OPTIONS if len(o) == 2)


def _takes_next(token: str) -> bool:
    if token.startswith("--"):
        return "=" not in token and token in _VALUE_OPTIONS
    for i, ch in enumerate(token[1:], start=1):
        if ch in _VALUE_SHORT:
            return i == len(token) - 1
    return False


def split_invocation(argv: Sequence[str]) -> tuple[list[str], list[str]]:
    """Split argv into runbook options and the invocation (recipe name, then its arguments).

    The first token that is not an option (or the token after a leading ``--``)
    is the recipe name; everything after it is returned untouched so argparse
    never sees, and never strips, the recipe's own arguments.
    """
    tokens = list(argv)
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token == "--":
            return tokens[:i], tokens[i + 1 :]
        if token == "-" or not token.startswith("-"):
            return tokens[:i], tokens[i:]
        i += 2 if _takes_next(token) else 1
    return tokens, []
