"""Tests for the declaration file parser."""
from pathlib import Path

import pytest

from runbook.errors import DeclarationNotFound, ParseError
from runbook.recipes import (
    AllPositional,
    Interpolated,
    Literal,
    ParamRef,
    Positional,
    find_declaration,
    load_declaration,
    parse_declaration,
    parse_template,
)

FIXTURES = Path(__file__).resolve().parent / "fixtures"


def test_cargo_fixture_parses_all_recipes_in_order() -> None:
    decl = load_declaration(FIXTURES / "Runbook")
    assert decl.table.names() == ["run", "test", "build", "install", "check"]
    assert decl.settings.dotenv_load is True
    assert decl.settings.positional_arguments is True
    run = decl.table.lookup("run")
    assert run.variadic
    assert run.parameters[0].name == "ARGS"
    assert run.template == (Literal("cargo"), Literal("run"), Literal("--"), AllPositional())
    install = decl.table.lookup("install")
    assert install.parameters == ()
    assert not install.variadic


def test_parse_template_removes_quotes_without_expanding() -> None:
    tokens = parse_template("""echo 'a b' "$HOME" \\$x""")
    assert tokens == (Literal("echo"), Literal("a b"), Literal("$HOME"), Literal("$x"))


def test_parse_template_references() -> None:
    tokens = parse_template("tool {{name}} --out={{dir}}/x $2 {{{{literal}}")
    assert tokens[1] == ParamRef("name")
    assert tokens[2] == Interpolated((Literal("--out="), ParamRef("dir"), Literal("/x")))
    assert tokens[3] == Positional(2)
    assert tokens[4] == Literal("{{literal}}")


def test_doc_comment_and_quiet_marker() -> None:
    decl = parse_declaration("# Build everything\nbuild:\n    @cargo build\n\n# stray\n\ncheck:\n    cargo check\n")
    build = decl.table.lookup("build")
    assert build.doc == "Build everything"
    assert build.quiet is True
    assert build.body == "cargo build"
    assert decl.table.lookup("check").doc == ""


def test_quiet_recipe_name_prefix() -> None:
    decl = parse_declaration("@fmt:\n    cargo fmt\n")
    assert decl.table.lookup("fmt").quiet is True


def test_parameters_with_defaults_and_plus() -> None:
    decl = parse_declaration("deploy env region='eu-west-1' +TARGETS:\n    tool {{env}} {{region}} {{TARGETS}}\n")
    params = decl.table.lookup("deploy").parameters
    assert [(p.name, p.kind, p.default) for p in params] == [
        ("env", "required", None),
        ("region", "defaulted", "eu-west-1"),
        ("TARGETS", "plus", None),
    ]


def test_string_and_boolean_settings() -> None:
    text = 'set dotenv-filename := ".env.local"\nset dotenv-override := false\nset dotenv-required\nb:\n    x\n'
    settings = parse_declaration(text).settings
    assert settings.dotenv_filename == ".env.local"
    assert settings.dotenv_override is False
    assert settings.dotenv_required is True


@pytest.mark.parametrize(
    "text,line,fragment",
    [
        ("a:\n    x\na:\n    y\n", 3, "more than once"),
        ("a *ARGS B:\n    x\n", 1, "must be last"),
        ("a X X:\n    x\n", 1, "twice"),
        ("a:\n    echo {{missing}}\n", 1, "undeclared parameter 'missing'"),
        ("a:\n", 1, "no command line"),
        ("a:\n    one\n    two\n", 3, "more than one command line"),
        ("set shell := 'bash'\n", 1, "unknown setting"),
        ("a *ARGS:\n    echo \"$@\"\n", 2, "positional-arguments"),
        ("a b='x' c:\n    x\n", 1, "follows a parameter with a default"),
        ("    stray\n", 1, "outside of a recipe"),
        ("a b c\n", 1, "expected ':'"),
        ("a:\n    echo 'unterminated\n", 2, "cannot split"),
    ],
)
def test_malformed_declarations_report_line(text: str, line: int, fragment: str) -> None:
    with pytest.raises(ParseError) as exc:
        parse_declaration(text)
    assert exc.value.line == line
    assert fragment in str(exc.value)


def test_parse_error_message_includes_offending_text() -> None:
    with pytest.raises(ParseError) as exc:
        parse_declaration("ok:\n    x\nbad X X:\n    y\n")
    assert "line 3" in str(exc.value)
    assert "bad X X:" in str(exc.value)


def test_find_declaration_walks_up(tmp_path: Path) -> None:
    (tmp_path / "justfile").write_text("a:\n    x\n", encoding="utf-8")
    nested = tmp_path / "src" / "deep"
    nested.mkdir(parents=True)
    assert find_declaration(nested) == tmp_path.resolve() / "justfile"


def test_find_declaration_prefers_runbook(tmp_path: Path) -> None:
    (tmp_path / "Justfile").write_text("a:\n    x\n", encoding="utf-8")
    (tmp_path / "Runbook").write_text("a:\n    x\n", encoding="utf-8")
    assert find_declaration(tmp_path).name == "Runbook"


def test_load_declaration_missing_file(tmp_path: Path) -> None:
    with pytest.raises(DeclarationNotFound):
        load_declaration(tmp_path / "Runbook")


def test_quotes_group_words_but_do_not_stop_substitution() -> None:
    tokens = parse_template("""tool '{{name}}' "$@" '{{{{name}}'""")
    assert tokens == (Literal("tool"), ParamRef("name"), AllPositional(), Literal("{{name}}"))
