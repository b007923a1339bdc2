"""Tests for persisted settings."""

import tempfile
from pathlib import Path

from ghostpath.adapters.settings_store import YamlSettingsStore
from ghostpath.core.model import Settings


def test_defaults_when_missing():
    """Test that a missing file yields the defaults."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = YamlSettingsStore(Path(tmpdir) / ".ghostpath" / "settings.yaml")
        assert store.load().conceal_enabled is True

        store = YamlSettingsStore(
            Path(tmpdir) / "other.yaml", defaults=Settings(conceal_enabled=False)
        )
        assert store.load().conceal_enabled is False


def test_save_and_load_roundtrip():
    """Test that a toggle survives a new store instance."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / ".ghostpath" / "settings.yaml"
        YamlSettingsStore(path).save(Settings(conceal_enabled=False))

        assert path.exists()
        assert "conceal_enabled: false" in path.read_text()
        assert YamlSettingsStore(path).load().conceal_enabled is False


def test_saved_value_beats_default():
    """Test that a persisted value wins over the configured default."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "settings.yaml"
        path.write_text("conceal_enabled: true\n")
        store = YamlSettingsStore(path, defaults=Settings(conceal_enabled=False))
        assert store.load().conceal_enabled is True


def test_unreadable_file_falls_back():
    """Test that broken YAML does not break loading."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "settings.yaml"
        path.write_text("conceal_enabled: [unclosed\n")
        assert YamlSettingsStore(path).load().conceal_enabled is True

        path.write_text("- just\n- a list\n")
        assert YamlSettingsStore(path).load().conceal_enabled is True
