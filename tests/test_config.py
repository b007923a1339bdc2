"""Tests for configuration loading."""

import os
import tempfile
from pathlib import Path

from ghostpath.config import load_config


def test_load_config_defaults():
    """Test loading config with defaults when no file exists."""
    with tempfile.TemporaryDirectory() as tmpdir:
        orig_cwd = os.getcwd()
        try:
            os.chdir(tmpdir)
            config = load_config()
        finally:
            os.chdir(orig_cwd)

    assert config.vault.root == Path("./vault")
    assert config.vault.extensions == (".md",)
    assert config.rewrite.debounce_ms == 220
    assert config.conceal.enabled is True
    assert config.log.level == "WARNING"


def test_load_config_from_file():
    """Test loading config from a file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "ghostpath.toml"
        config_path.write_text("""
[vault]
root = "my-vault"
extensions = ["md", ".markdown"]

[rewrite]
debounce_ms = 500

[conceal]
enabled = false

[log]
level = "debug"
""")

        config = load_config(config_path=config_path)

        assert config.vault.root == Path("my-vault")
        assert config.vault.extensions == (".md", ".markdown")
        assert config.vault.settings_path == Path("my-vault") / ".ghostpath" / "settings.yaml"
        assert config.rewrite.debounce_ms == 500
        assert config.conceal.enabled is False
        assert config.log.level == "DEBUG"


def test_load_config_search_cwd():
    """Test config search in current working directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        orig_cwd = os.getcwd()
        try:
            os.chdir(tmpdir)
            config_path = Path(tmpdir) / "ghostpath.toml"
            config_path.write_text("""
[rewrite]
debounce_ms = 100
""")

            config = load_config()
            assert config.rewrite.debounce_ms == 100
        finally:
            os.chdir(orig_cwd)


def test_load_config_search_vault():
    """Test config search in vault directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        orig_cwd = os.getcwd()
        vault_path = Path(tmpdir) / "vault"
        vault_path.mkdir()
        (vault_path / "ghostpath.toml").write_text("""
[conceal]
enabled = false
""")
        try:
            os.chdir(tmpdir)
            config = load_config(vault_path=vault_path)
        finally:
            os.chdir(orig_cwd)

        assert config.conceal.enabled is False
        assert config.vault.root == vault_path
