from __future__ import annotations
from dataclasses import dataclass, field

CanonicalPath = str

SEPARATOR = "/"


@dataclass(frozen=True)
class ReferenceOccurrence:
    start: int  # offset of the opening "[["
    end: int  # offset just past the closing "]]"
    inner: str  # text between the delimiters

    @property
    def inner_start(self) -> int:
        return self.start + 2

    @property
    def literal(self) -> str:
        return f"[[{self.inner}]]"

    @property
    def is_full_path(self) -> bool:
        return SEPARATOR in self.inner

    @property
    def has_alias_or_anchor(self) -> bool:
        return "|" in self.inner or "#" in self.inner


@dataclass(frozen=True)
class Replacement:
    start: int  # offsets into the original text
    end: int
    text: str

    @property
    def delta(self) -> int:
        return len(self.text) - (self.end - self.start)


@dataclass
class RewriteResult:
    text: str
    cursor: int
    changed: bool
    replacements: list[Replacement] = field(default_factory=list)


@dataclass(frozen=True)
class ConcealRange:
    """
    Half-open [start, end) slice of the current text hidden from display.

    Hosts render it as a zero-width placeholder that produces no text and
    ignores pointer events; keyboard navigation still steps over the
    original characters.
    """

    start: int
    end: int


@dataclass(frozen=True)
class VisibleWindow:
    start: int  # absolute offset of text[0] in the document
    end: int
    text: str

    @classmethod
    def of(cls, document_text: str, start: int, end: int) -> "VisibleWindow":
        return cls(start=start, end=end, text=document_text[start:end])


@dataclass(frozen=True)
class ConcealmentBuild:
    ranges: tuple[ConcealRange, ...]
    enabled: bool  # flag value this build was made with

    @classmethod
    def empty(cls, enabled: bool = False) -> "ConcealmentBuild":
        return cls(ranges=(), enabled=enabled)


@dataclass
class Settings:
    conceal_enabled: bool = True
