"""Locate [[...]] references in note text."""

import re
from collections.abc import Iterator

from .model import ReferenceOccurrence

# Non-greedy and no "]" inside, so adjacent references stay separate.
REFERENCE_RE = re.compile(r"\[\[([^\]]+?)\]\]")


def find_references(text: str, base: int = 0) -> Iterator[ReferenceOccurrence]:
    """
    Yield every reference in `text`, left to right.

    Offsets are shifted by `base` so a slice of a larger document reports
    absolute positions. An unterminated "[[" never matches.
    """
    for m in REFERENCE_RE.finditer(text):
        yield ReferenceOccurrence(
            start=base + m.start(),
            end=base + m.end(),
            inner=m.group(1),
        )
