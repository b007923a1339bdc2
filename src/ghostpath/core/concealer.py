"""Compute which parts of full-path references are hidden in the editor."""

import logging
from collections.abc import Iterable, Sequence

from .model import SEPARATOR, ConcealmentBuild, ConcealRange, VisibleWindow
from .references import find_references

logger = logging.getLogger(__name__)


def build_concealment(windows: Iterable[VisibleWindow], enabled: bool) -> list[ConcealRange]:
    """
    Build concealment ranges for the visible windows.

    For `[[areas/work/Project]]` the range covers `areas/work/`, from just
    after the opening brackets through the last separator, so only the
    terminal name stays visible. Links carrying an alias or an anchor
    (`[[a/b|Label]]`, `[[a/b#Heading]]`) get no range and stay fully
    visible, since their last separator may sit inside the label or
    heading.

    Args:
        windows: Ordered, disjoint visible slices of the document
        enabled: Current value of the conceal setting

    Returns:
        Non-overlapping ranges ordered by start; empty when disabled
    """
    if not enabled:
        return []

    ranges: list[ConcealRange] = []
    for window in windows:
        for occ in find_references(window.text, base=window.start):
            if not occ.is_full_path or occ.has_alias_or_anchor:
                continue
            prefix_end = occ.inner_start + occ.inner.rfind(SEPARATOR) + 1
            ranges.append(ConcealRange(occ.inner_start, prefix_end))
    return ranges


def needs_rebuild(
    enabled: bool,
    previous: ConcealmentBuild | None,
    text_changed: bool = False,
    viewport_changed: bool = False,
) -> bool:
    """Rebuild on text or viewport changes, on the first build, and when the setting toggled."""
    if previous is None:
        return True
    return text_changed or viewport_changed or previous.enabled != enabled


def refresh_concealment(
    windows: Sequence[VisibleWindow],
    enabled: bool,
    previous: ConcealmentBuild | None,
    text_changed: bool = False,
    viewport_changed: bool = False,
) -> ConcealmentBuild:
    """
    Return the concealment for the current state.

    `previous` is the build currently on screen; it is returned as-is when
    nothing relevant changed. The returned build records the flag it was
    made with and becomes `previous` for the next call.
    """
    if previous is not None and not needs_rebuild(
        enabled, previous, text_changed, viewport_changed
    ):
        return previous
    return ConcealmentBuild(ranges=tuple(build_concealment(windows, enabled)), enabled=enabled)


def safe_refresh(
    windows: Sequence[VisibleWindow],
    enabled: bool,
    previous: ConcealmentBuild | None,
    text_changed: bool = False,
    viewport_changed: bool = False,
) -> ConcealmentBuild:
    """Like `refresh_concealment`, but a failure keeps the previous build on screen."""
    try:
        return refresh_concealment(windows, enabled, previous, text_changed, viewport_changed)
    except Exception:
        logger.exception("Concealment build failed; keeping previous decorations")
        return previous if previous is not None else ConcealmentBuild.empty(enabled)


def render_displayed(text: str, ranges: Iterable[ConcealRange]) -> str:
    """Return `text` as the editor shows it, with concealed slices removed."""
    parts = []
    pos = 0
    for r in sorted(ranges, key=lambda r: r.start):
        if r.start < pos:
            continue
        parts.append(text[pos : r.start])
        pos = r.end
    parts.append(text[pos:])
    return "".join(parts)
