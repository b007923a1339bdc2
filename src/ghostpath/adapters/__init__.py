"""Concrete implementations of the core ports."""

from .memory_document import SpanViewport, TextDocument
from .settings_store import MemorySettingsStore, YamlSettingsStore
from .vault_index import VaultLinkIndex

__all__ = [
    "MemorySettingsStore",
    "SpanViewport",
    "TextDocument",
    "VaultLinkIndex",
    "YamlSettingsStore",
]
