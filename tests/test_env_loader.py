"""Tests for env file loading and overlay precedence (python-dotenv backed)."""
import os
from pathlib import Path

import pytest

from runbook.env import EnvironmentOverlay, discover, load, load_for
from runbook.errors import LoadError


def test_missing_file_is_empty_overlay_and_environment_untouched(tmp_path: Path) -> None:
    before = dict(os.environ)
    overlay = load(tmp_path / ".env")
    assert len(overlay) == 0
    assert overlay.source is None
    assert dict(os.environ) == before


def test_load_reads_pairs_without_touching_os_environ(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# comment\nRB_A=1\nexport RB_B='two words'\nRB_C=\"${RB_A}-x\"\n\n",
        encoding="utf-8",
    )
    overlay = load(env_file)
    assert overlay.values == {"RB_A": "1", "RB_B": "two words", "RB_C": "1-x"}
    assert overlay.source == env_file
    assert "RB_A" not in os.environ


@pytest.mark.parametrize("bad_line", ["this is not valid", "RB_BARE", "RB_Q='unterminated"])
def test_malformed_line_raises_load_error(tmp_path: Path, bad_line: str) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(f"RB_OK=1\n{bad_line}\n", encoding="utf-8")
    with pytest.raises(LoadError) as exc:
        load(env_file)
    assert ":2:" in str(exc.value)


def test_ambient_wins_by_default() -> None:
    overlay = EnvironmentOverlay(values={"RB_X": "file", "RB_Y": "file"})
    env = overlay.apply({"RB_X": "shell"})
    assert env == {"RB_X": "shell", "RB_Y": "file"}


def test_override_lets_file_win() -> None:
    overlay = EnvironmentOverlay(values={"RB_X": "file"}, override=True)
    assert overlay.apply({"RB_X": "shell"})["RB_X"] == "file"


def test_discover_walks_parents(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("RB_A=1\n", encoding="utf-8")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    assert discover(nested) == tmp_path.resolve() / ".env"
    assert discover(nested, ".env.local") is None


def test_load_for_explicit_path_is_relative_to_directory(tmp_path: Path) -> None:
    (tmp_path / "conf").mkdir()
    (tmp_path / "conf" / "dev.env").write_text("RB_A=dev\n", encoding="utf-8")
    overlay = load_for(tmp_path, path="conf/dev.env", override=True)
    assert overlay.values == {"RB_A": "dev"}
    assert overlay.override is True


def test_load_for_required_missing_raises(tmp_path: Path) -> None:
    assert len(load_for(tmp_path, filename=".env.none")) == 0
    with pytest.raises(LoadError):
        load_for(tmp_path, filename=".env.none", required=True)


def test_interpolation_follows_ambient_wins(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("RB_HOST", "shell")
    env_file = tmp_path / ".env"
    env_file.write_text('RB_HOST=file\nRB_URL="http://${RB_HOST}/x"\n', encoding="utf-8")
    child_env = load(env_file).apply(os.environ)
    assert child_env["RB_HOST"] == "shell"
    assert child_env["RB_URL"] == "http://shell/x"


def test_interpolation_follows_override(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("RB_HOST", "shell")
    env_file = tmp_path / ".env"
    env_file.write_text('RB_HOST=file\nRB_URL="http://${RB_HOST}/x"\n', encoding="utf-8")
    child_env = load(env_file, override=True).apply(os.environ)
    assert child_env["RB_HOST"] == "file"
    assert child_env["RB_URL"] == "http://file/x"
