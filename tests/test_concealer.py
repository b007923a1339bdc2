"""Tests for prefix concealment."""

from ghostpath.core.concealer import (
    build_concealment,
    needs_rebuild,
    refresh_concealment,
    render_displayed,
    safe_refresh,
)
from ghostpath.core.model import ConcealmentBuild, ConcealRange, VisibleWindow


def window(text, start=0):
    return VisibleWindow(start=start, end=start + len(text), text=text)


def test_conceal_example_c():
    """Test that the folder prefix of a full-path link is concealed."""
    text = "Link: [[areas/work/Project]]"
    ranges = build_concealment([window(text)], True)

    assert ranges == [ConcealRange(8, 19)]
    assert text[8:19] == "areas/work/"
    assert render_displayed(text, ranges) == "Link: [[Project]]"


def test_conceal_example_d_disabled():
    """Test that nothing is concealed when the setting is off."""
    text = "Link: [[areas/work/Project]]"
    assert build_concealment([window(text)], False) == []


def test_conceal_short_links_ignored():
    """Test that short links produce no range."""
    assert build_concealment([window("[[Project]] [[Inbox]]")], True) == []


def test_conceal_range_within_delimiters():
    """Test that ranges stay inside the brackets and end on the last separator."""
    text = "a [[x/Note]] b [[one/two/three/Leaf]] c"
    for r in build_concealment([window(text)], True):
        assert text[r.start - 2:r.start] == "[["
        assert text[r.end - 1] == "/"
        close = text.index("]]", r.start)
        assert r.end <= close
        assert "/" not in text[r.end:close]


def test_conceal_absolute_offsets_across_windows():
    """Test window offsets and ordering across several windows."""
    doc = "[[a/B]]\n" + "filler\n" * 5 + "[[c/d/E]]\n"
    first = VisibleWindow.of(doc, 0, 8)
    second_start = doc.index("[[c/d/E]]")
    second = VisibleWindow.of(doc, second_start, len(doc))

    ranges = build_concealment([first, second], True)
    assert [doc[r.start:r.end] for r in ranges] == ["a/", "c/d/"]
    assert ranges[0].end <= ranges[1].start


def test_conceal_skips_alias_and_anchor():
    """Test that alias and anchor references are not concealed."""
    text = "[[a/B|Alias/Text]] [[a/B#Sec/tion]] [[a/C]]"
    ranges = build_concealment([window(text)], True)
    assert [text[r.start:r.end] for r in ranges] == ["a/"]
    assert ranges[0].start == text.index("[[a/C]]") + 2


def test_conceal_partial_link_at_window_edge():
    """Test that a link cut by the window edge is not concealed."""
    doc = "xx [[a/b/C]]"
    ranges = build_concealment([VisibleWindow.of(doc, 0, 8)], True)
    assert ranges == []


def test_needs_rebuild_rules():
    """Test the rebuild decision."""
    prev = ConcealmentBuild.empty(enabled=True)
    assert needs_rebuild(True, None) is True
    assert needs_rebuild(True, prev) is False
    assert needs_rebuild(False, prev) is True
    assert needs_rebuild(True, prev, text_changed=True) is True
    assert needs_rebuild(True, prev, viewport_changed=True) is True


def test_refresh_keeps_previous_when_nothing_changed():
    """Test that an unchanged state returns the same build."""
    windows = [window("[[a/B]]")]
    first = refresh_concealment(windows, True, None)
    again = refresh_concealment(windows, True, first)
    assert again is first
    assert first.ranges == (ConcealRange(2, 4),)


def test_refresh_toggle_clears_and_restores():
    """Test that toggling the setting clears and then rebuilds ranges."""
    windows = [window("[[a/B]]")]
    on = refresh_concealment(windows, True, None)
    off = refresh_concealment(windows, False, on)
    back = refresh_concealment(windows, True, off)

    assert off.ranges == ()
    assert off.enabled is False
    assert back.ranges == on.ranges


def test_safe_refresh_keeps_previous_on_error(caplog):
    """Test that a failing build leaves the previous decorations."""

    class BadWindow:
        start = 0

        @property
        def text(self):
            raise RuntimeError("viewport gone")

    prev = ConcealmentBuild(ranges=(ConcealRange(2, 4),), enabled=True)
    with caplog.at_level("ERROR"):
        result = safe_refresh([BadWindow()], True, prev, viewport_changed=True)

    assert result is prev
    assert "Concealment build failed" in caplog.text


def test_safe_refresh_without_previous_is_empty():
    """Test the first build failing degrades to no concealment."""

    class BadWindow:
        start = 0

        @property
        def text(self):
            raise RuntimeError("viewport gone")

    result = safe_refresh([BadWindow()], True, None)
    assert result.ranges == ()


def test_render_displayed_multiple():
    """Test the displayed form with several links."""
    text = "[[a/B]] and [[c/d/E]]"
    ranges = build_concealment([window(text)], True)
    assert render_displayed(text, ranges) == "[[B]] and [[E]]"
