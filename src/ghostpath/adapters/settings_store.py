import io
import logging
from pathlib import Path
from typing import Any

import yaml

from ..core.model import Settings
from ..core.ports import SettingsStore

logger = logging.getLogger(__name__)


class YamlSettingsStore(SettingsStore):
    """
    Persist user settings as a small YAML mapping, e.g.

        conceal_enabled: true

    A missing or unreadable file yields the defaults.
    """

    def __init__(self, path: Path, defaults: Settings | None = None):
        self.path = path
        self.defaults = defaults or Settings()

    def load(self) -> Settings:
        if not self.path.exists():
            return Settings(conceal_enabled=self.defaults.conceal_enabled)
        try:
            data: Any = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError:
            logger.warning("Ignoring unreadable settings file %s", self.path, exc_info=True)
            data = {}
        if not isinstance(data, dict):
            data = {}
        enabled = data.get("conceal_enabled", self.defaults.conceal_enabled)
        return Settings(conceal_enabled=bool(enabled))

    def save(self, settings: Settings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        buf = io.StringIO()
        yaml.safe_dump({"conceal_enabled": settings.conceal_enabled}, buf, sort_keys=False)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(buf.getvalue(), encoding="utf-8")
        tmp.replace(self.path)


class MemorySettingsStore(SettingsStore):
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or Settings()
        self.saves = 0

    def load(self) -> Settings:
        return Settings(conceal_enabled=self.settings.conceal_enabled)

    def save(self, settings: Settings) -> None:
        self.settings = Settings(conceal_enabled=settings.conceal_enabled)
        self.saves += 1
