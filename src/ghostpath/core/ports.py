from typing import Protocol, Sequence
from .model import CanonicalPath, Settings, VisibleWindow


class LinkIndex(Protocol):
    """
    Pure lookup from a short name to the canonical path of a note.
    `context_path` is the referring note's own path, used to break ties.
    """

    def resolve(self, name: str, context_path: str) -> CanonicalPath | None:
        pass


class Document(Protocol):
    """
    Live editable text. Only the caller of the rewriter writes to it.
    """

    def get_text(self) -> str:
        pass

    def get_cursor(self) -> int:
        pass

    def set_text(self, text: str) -> None:
        pass

    def set_cursor(self, offset: int) -> None:
        pass


class Viewport(Protocol):
    """
    Ordered, disjoint slices of the document currently on screen.
    """

    def visible_windows(self) -> Sequence[VisibleWindow]:
        pass


class SettingsStore(Protocol):
    def load(self) -> Settings:
        pass

    def save(self, settings: Settings) -> None:
        pass
