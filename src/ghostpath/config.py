"""Configuration loader for ghostpath.toml."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore


@dataclass
class VaultConfig:
    """Vault-specific configuration."""
    root: Path
    extensions: tuple[str, ...] = (".md",)

    @property
    def settings_path(self) -> Path:
        return self.root / ".ghostpath" / "settings.yaml"


@dataclass
class RewriteConfig:
    """Link rewriting configuration."""
    debounce_ms: int = 220


@dataclass
class ConcealConfig:
    """Default for the conceal setting until the user toggles it."""
    enabled: bool = True


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "WARNING"


@dataclass
class GhostpathConfig:
    """Complete ghostpath configuration."""
    vault: VaultConfig
    rewrite: RewriteConfig = field(default_factory=RewriteConfig)
    conceal: ConcealConfig = field(default_factory=ConcealConfig)
    log: LogConfig = field(default_factory=LogConfig)


def load_config(config_path: Path | None = None, vault_path: Path | None = None) -> GhostpathConfig:
    """
    Load configuration from ghostpath.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/ghostpath.toml
    3. vault_path/ghostpath.toml

    Args:
        config_path: Explicit path to config file
        vault_path: Vault root path for fallback search

    Returns:
        GhostpathConfig with resolved settings
    """
    toml_data: dict[str, Any] = {}

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / "ghostpath.toml")
    if vault_path:
        search_paths.append(vault_path / "ghostpath.toml")

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            break

    vault_data = toml_data.get("vault", {})
    extensions = vault_data.get("extensions", [".md"])
    vault_config = VaultConfig(
        root=Path(vault_path or vault_data.get("root", "./vault")),
        extensions=tuple(e if e.startswith(".") else f".{e}" for e in extensions),
    )

    rewrite_data = toml_data.get("rewrite", {})
    rewrite_config = RewriteConfig(
        debounce_ms=int(rewrite_data.get("debounce_ms", 220))
    )

    conceal_data = toml_data.get("conceal", {})
    conceal_config = ConcealConfig(
        enabled=bool(conceal_data.get("enabled", True))
    )

    log_data = toml_data.get("log", {})
    log_config = LogConfig(
        level=str(log_data.get("level", "WARNING")).upper()
    )

    return GhostpathConfig(
        vault=vault_config,
        rewrite=rewrite_config,
        conceal=conceal_config,
        log=log_config,
    )
