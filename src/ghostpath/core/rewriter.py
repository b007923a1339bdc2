"""Rewrite short [[Name]] references into full-path [[folder/Name]] references."""

import logging
from collections.abc import Callable, Iterable

from .model import CanonicalPath, Replacement, RewriteResult
from .references import find_references

logger = logging.getLogger(__name__)

Resolve = Callable[[str, str], CanonicalPath | None]


def plan_replacements(text: str, context_path: str, resolve: Resolve) -> list[Replacement]:
    """
    Collect replacements for every short reference that resolves to a
    different full path.

    Full-path references and references carrying an alias (`|`) or an
    anchor (`#`) are left alone. A resolver error only skips the reference
    it was raised for.

    Returns:
        Replacements in scan order, with offsets into `text`
    """
    replacements: list[Replacement] = []
    for occ in find_references(text):
        if occ.is_full_path or occ.has_alias_or_anchor:
            continue

        try:
            path = resolve(occ.inner, context_path)
        except Exception:
            logger.warning("Resolver failed for %r in %s", occ.inner, context_path, exc_info=True)
            continue
        if not path:
            continue

        replacement = f"[[{path}]]"
        if replacement != occ.literal:
            replacements.append(Replacement(occ.start, occ.end, replacement))
    return replacements


def apply_replacements(text: str, replacements: Iterable[Replacement]) -> str:
    """Splice replacements into `text`, rightmost first so offsets stay valid."""
    out = text
    for r in sorted(replacements, key=lambda r: r.start, reverse=True):
        out = out[: r.start] + r.text + out[r.end :]
    return out


def remap_offset(replacements: Iterable[Replacement], offset: int, new_length: int) -> int:
    """
    Map an offset in the original text to the same logical position in the
    rewritten text.

    Only replacements starting strictly before `offset` move it. The result
    is clamped to [0, new_length]; if the mapping itself fails the offset
    falls back to the end of the document.
    """
    try:
        mapped = offset + sum(r.delta for r in replacements if r.start < offset)
    except Exception:
        logger.warning("Cursor remap failed, moving cursor to end", exc_info=True)
        return new_length
    return min(max(mapped, 0), new_length)


def remap_offsets(
    replacements: Iterable[Replacement], offsets: Iterable[int], new_length: int
) -> list[int]:
    """Remap several offsets at once, e.g. secondary cursors or selection anchors."""
    ops = list(replacements)
    return [remap_offset(ops, o, new_length) for o in offsets]


def rewrite(text: str, cursor: int, context_path: str, resolve: Resolve) -> RewriteResult:
    """
    Rewrite every resolvable short reference in `text` to its full path.

    Args:
        text: Document snapshot
        cursor: Cursor offset into `text`
        context_path: Path of the document being edited
        resolve: Link index lookup, `resolve(name, context_path)`

    Returns:
        RewriteResult with the new text, the remapped cursor and whether
        anything changed. The input is never mutated.
    """
    replacements = plan_replacements(text, context_path, resolve)
    if not replacements:
        return RewriteResult(text=text, cursor=cursor, changed=False)

    new_text = apply_replacements(text, replacements)
    new_cursor = remap_offset(replacements, cursor, len(new_text))
    return RewriteResult(
        text=new_text,
        cursor=new_cursor,
        changed=new_text != text,
        replacements=replacements,
    )


def safe_rewrite(text: str, cursor: int, context_path: str, resolve: Resolve) -> RewriteResult:
    """Like `rewrite`, but any failure is logged and leaves the text untouched."""
    try:
        return rewrite(text, cursor, context_path, resolve)
    except Exception:
        logger.exception("Rewrite failed for %s; leaving document unchanged", context_path)
        return RewriteResult(text=text, cursor=cursor, changed=False)
