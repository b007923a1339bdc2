from collections.abc import Sequence

from ..core.model import VisibleWindow
from ..core.ports import Document, Viewport


class TextDocument(Document):
    """A document held in memory, with a single primary cursor."""

    def __init__(self, text: str = "", cursor: int = 0, path: str = ""):
        self.path = path
        self._text = text
        self._cursor = cursor
        self.writes = 0

    def get_text(self) -> str:
        return self._text

    def get_cursor(self) -> int:
        return self._cursor

    def set_text(self, text: str) -> None:
        self._text = text
        self.writes += 1
        self._cursor = min(self._cursor, len(text))

    def set_cursor(self, offset: int) -> None:
        self._cursor = min(max(offset, 0), len(self._text))


class SpanViewport(Viewport):
    """
    Viewport over a document given as (start, end) spans.

    With no spans the whole document counts as visible.
    """

    def __init__(self, document: Document, spans: Sequence[tuple[int, int]] | None = None):
        self.document = document
        self.spans = list(spans) if spans else []

    def scroll_to(self, spans: Sequence[tuple[int, int]]) -> None:
        self.spans = list(spans)

    def visible_windows(self) -> list[VisibleWindow]:
        text = self.document.get_text()
        spans = self.spans or [(0, len(text))]
        windows = []
        for start, end in spans:
            start = min(max(start, 0), len(text))
            end = min(max(end, start), len(text))
            windows.append(VisibleWindow.of(text, start, end))
        return windows
