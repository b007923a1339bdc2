"""Tests for CLI commands."""

import json
import tempfile
from pathlib import Path

import pytest

from ghostpath import __version__
from ghostpath.cli import main


@pytest.fixture
def vault():
    """Create a temporary vault with a config file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        vault_path = Path(tmpdir) / "vault"
        (vault_path / "areas" / "work").mkdir(parents=True)
        (vault_path / "areas" / "work" / "Project.md").write_text("# Project\n")
        (vault_path / "Today.md").write_text("See [[Project]] for details.\n")
        config = Path(tmpdir) / "ghostpath.toml"
        config.write_text("")
        yield vault_path, config


def run(vault, *argv):
    vault_path, config = vault
    with pytest.raises(SystemExit) as exc:
        main(["--vault", str(vault_path), "--config", str(config), *argv])
    return exc.value.code


def test_version(capsys):
    """Test that --version reports the package version."""
    with pytest.raises(SystemExit) as exc:
        main(["--version"])
    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert f"ghostpath {__version__}" in out
    assert "python" in out


def test_rewrite_dry_run(vault, capsys):
    """Test that a dry run prints a diff and leaves the file alone."""
    vault_path, _ = vault
    assert run(vault, "rewrite", "Today.md", "--dry-run") == 0

    out = capsys.readouterr().out
    assert "+See [[areas/work/Project]] for details." in out
    assert (vault_path / "Today.md").read_text() == "See [[Project]] for details.\n"


def test_rewrite_writes(vault, capsys):
    """Test rewriting a note in place."""
    vault_path, _ = vault
    assert run(vault, "rewrite", str(vault_path / "Today.md")) == 0

    assert (vault_path / "Today.md").read_text() == "See [[areas/work/Project]] for details.\n"
    assert "Rewrote 1 link(s) in Today.md" in capsys.readouterr().out


def test_rewrite_json_cursor(vault, capsys):
    """Test machine-readable output with a remapped cursor."""
    assert run(vault, "--json", "rewrite", "Today.md", "--cursor", "20", "--dry-run") == 0
    data = json.loads(capsys.readouterr().out)
    assert data == {"path": "Today.md", "changed": True, "links": 1, "cursor": 31}


def test_rewrite_missing_note(vault, capsys):
    """Test rewriting a note that does not exist."""
    assert run(vault, "rewrite", "Nope.md") == 1
    assert "not found" in capsys.readouterr().err


def test_rewrite_all(vault, capsys):
    """Test rewriting the whole vault."""
    vault_path, _ = vault
    (vault_path / "Other.md").write_text("[[Project]] [[Today]]\n")

    assert run(vault, "rewrite-all") == 0
    assert "Rewrote 2 link(s) in 2 note(s)" in capsys.readouterr().out
    assert (vault_path / "Other.md").read_text() == "[[areas/work/Project]] [[Today]]\n"


def test_conceal_text_and_json(vault, capsys):
    """Test displayed and JSON concealment output."""
    vault_path, _ = vault
    (vault_path / "Link.md").write_text("Link: [[areas/work/Project]]")

    assert run(vault, "conceal", "Link.md") == 0
    assert capsys.readouterr().out == "Link: [[Project]]"

    assert run(vault, "conceal", "Link.md", "--format", "json") == 0
    data = json.loads(capsys.readouterr().out)
    assert data["ranges"] == [{"start": 8, "end": 19, "text": "areas/work/"}]

    assert run(vault, "conceal", "Link.md", "--enabled", "off") == 0
    assert capsys.readouterr().out == "Link: [[areas/work/Project]]"


def test_conceal_bad_window(vault, capsys):
    """Test rejecting a window outside the note."""
    assert run(vault, "conceal", "Today.md", "--start", "5", "--end", "500") == 1


def test_resolve(vault, capsys):
    """Test resolving names from the command line."""
    assert run(vault, "resolve", "Project") == 0
    assert capsys.readouterr().out.strip() == "areas/work/Project"

    assert run(vault, "resolve", "Nope") == 2


def test_settings_toggle(vault, capsys):
    """Test persisting the conceal toggle."""
    vault_path, _ = vault
    (vault_path / "Link.md").write_text("[[a/B]]")

    assert run(vault, "settings", "set", "conceal", "off") == 0
    assert (vault_path / ".ghostpath" / "settings.yaml").exists()
    capsys.readouterr()

    assert run(vault, "--json", "settings", "show") == 0
    assert json.loads(capsys.readouterr().out) == {"conceal_enabled": False}

    assert run(vault, "conceal", "Link.md") == 0
    assert capsys.readouterr().out == "[[a/B]]"


def test_rewrite_all_uses_configured_extensions(vault, capsys):
    """Test that [vault].extensions reaches both note discovery and resolution."""
    vault_path, config = vault
    config.write_text('[vault]\nextensions = [".md", "markdown"]\n')
    (vault_path / "areas" / "Foo.markdown").write_text("# Foo\n")
    (vault_path / "Later.markdown").write_text("See [[Foo]]\n")

    assert run(vault, "rewrite-all") == 0

    assert (vault_path / "Later.markdown").read_text() == "See [[areas/Foo]]\n"
    assert (vault_path / "Today.md").read_text() == "See [[areas/work/Project]] for details.\n"
