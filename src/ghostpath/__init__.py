"""ghostpath - store full-path wiki links, display short names."""

__version__ = "0.1.0"

from .adapters.memory_document import SpanViewport, TextDocument
from .adapters.vault_index import VaultLinkIndex
from .session import (
    CONFIG_CHANGED,
    TEXT_CHANGED,
    VIEWPORT_CHANGED,
    Debouncer,
    EditorSession,
)

__all__ = [
    "__version__",
    "CONFIG_CHANGED",
    "TEXT_CHANGED",
    "VIEWPORT_CHANGED",
    "Debouncer",
    "EditorSession",
    "SpanViewport",
    "TextDocument",
    "VaultLinkIndex",
]
