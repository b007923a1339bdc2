"""Rewrite short links in note files on disk."""

import difflib
import logging
from dataclasses import dataclass

from .adapters.fs_storage import FsStorage
from .core.ports import LinkIndex
from .core.rewriter import safe_rewrite

logger = logging.getLogger(__name__)


@dataclass
class NoteRewriteResult:
    """Result of rewriting links in one note."""

    path: str
    original: str
    rewritten: str
    changes: int
    cursor: int = 0

    @property
    def changed(self) -> bool:
        return self.rewritten != self.original


def rewrite_note(
    storage: FsStorage,
    index: LinkIndex,
    rel_path: str,
    cursor: int = 0,
) -> NoteRewriteResult | None:
    """
    Compute the rewritten contents of a note without writing it.

    Returns:
        NoteRewriteResult, or None if the note does not exist
    """
    original = storage.read_raw(rel_path)
    if original is None:
        return None

    result = safe_rewrite(original, cursor, rel_path, index.resolve)
    return NoteRewriteResult(
        path=rel_path,
        original=original,
        rewritten=result.text,
        changes=len(result.replacements) if result.changed else 0,
        cursor=result.cursor,
    )


def diff_rewrite(result: NoteRewriteResult) -> str:
    """Unified diff between the stored and rewritten note."""
    diff = difflib.unified_diff(
        result.original.splitlines(keepends=True),
        result.rewritten.splitlines(keepends=True),
        fromfile=result.path,
        tofile=result.path,
    )
    return "".join(diff)


def apply_rewrite(storage: FsStorage, result: NoteRewriteResult) -> bool:
    """
    Write a rewrite result back to disk.

    Nothing is written if the result is a no-op or the file changed since
    it was read; the next change event will rewrite the newer contents.

    Returns:
        True if the file was written
    """
    if not result.changed:
        return False

    current = storage.read_raw(result.path)
    if current != result.original:
        logger.info("Skipping %s: modified while rewriting", result.path)
        return False

    storage.write_raw(result.path, result.rewritten)
    logger.info("Rewrote %d link(s) in %s", result.changes, result.path)
    return True
