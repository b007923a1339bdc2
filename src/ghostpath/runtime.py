"""Runtime wiring helper for CLI applications."""

from dataclasses import dataclass
from pathlib import Path

from .adapters.fs_storage import FsStorage
from .adapters.settings_store import YamlSettingsStore
from .adapters.vault_index import VaultLinkIndex
from .config import GhostpathConfig, load_config
from .core.model import Settings


@dataclass
class Runtime:
    """Container for all wired components."""
    storage: FsStorage
    index: VaultLinkIndex
    settings: YamlSettingsStore
    config: GhostpathConfig


def build_runtime(
    vault_path: Path | None = None,
    config_path: Path | None = None,
) -> Runtime:
    """Build and wire all components for a vault."""
    config = load_config(config_path=config_path, vault_path=vault_path)
    root = config.vault.root

    storage = FsStorage(root, extensions=config.vault.extensions)
    index = VaultLinkIndex(root, extensions=config.vault.extensions)
    settings = YamlSettingsStore(
        config.vault.settings_path,
        defaults=Settings(conceal_enabled=config.conceal.enabled),
    )

    return Runtime(
        storage=storage,
        index=index,
        settings=settings,
        config=config,
    )
