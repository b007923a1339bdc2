"""Editor session: routes editor events to the rewriter and the concealer."""

import logging
import time
from collections.abc import Callable
from typing import Any

from .core.concealer import safe_refresh
from .core.model import ConcealmentBuild, RewriteResult, Settings
from .core.ports import Document, LinkIndex, SettingsStore, Viewport
from .core.rewriter import safe_rewrite

logger = logging.getLogger(__name__)

TEXT_CHANGED = "text-changed"
VIEWPORT_CHANGED = "viewport-changed"
CONFIG_CHANGED = "config-changed"

DEFAULT_DEBOUNCE_MS = 220


class Debouncer:
    """
    Trailing-edge debounce holding at most one pending call.

    Each `trigger` replaces the pending call and restarts the quiet period;
    `check_and_flush` fires it once the period has elapsed.
    """

    def __init__(self, debounce_ms: int = DEFAULT_DEBOUNCE_MS, clock: Callable[[], float] = time.monotonic):
        self.debounce_ms = debounce_ms
        self.clock = clock
        self._pending: Callable[[], Any] | None = None
        self.last_event_time = 0.0

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def trigger(self, fn: Callable[[], Any]) -> None:
        self._pending = fn
        self.last_event_time = self.clock()

    def cancel(self) -> None:
        self._pending = None

    def check_and_flush(self) -> bool:
        """Fire the pending call if the quiet period has elapsed."""
        if self._pending is None:
            return False
        elapsed = (self.clock() - self.last_event_time) * 1000
        if elapsed >= self.debounce_ms:
            return self.flush()
        return False

    def flush(self) -> bool:
        """Fire the pending call now, if any."""
        fn, self._pending = self._pending, None
        if fn is None:
            return False
        fn()
        return True


class EditorSession:
    """
    One open note in an editor.

    Text changes schedule a debounced rewrite and rebuild concealment at
    once; viewport and config changes only rebuild concealment. Events are
    expected one at a time from the host.
    """

    def __init__(
        self,
        document: Document,
        viewport: Viewport,
        index: LinkIndex,
        settings: SettingsStore,
        path: str = "",
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.document = document
        self.viewport = viewport
        self.index = index
        self.settings_store = settings
        self.path = path
        self.debouncer = Debouncer(debounce_ms, clock)
        self.settings: Settings = settings.load()
        self.concealment: ConcealmentBuild | None = None
        self.last_rewrite: RewriteResult | None = None

        self._actions: dict[str, Callable[[], None]] = {
            TEXT_CHANGED: self._on_text_changed,
            VIEWPORT_CHANGED: self._on_viewport_changed,
            CONFIG_CHANGED: self._on_config_changed,
        }
        self.refresh_concealment()

    def handle(self, event: str) -> None:
        action = self._actions.get(event)
        if action is None:
            raise ValueError(f"Unknown editor event: {event}")
        action()

    def tick(self) -> bool:
        """Poll the debounce timer; returns True if a rewrite ran."""
        return self.debouncer.check_and_flush()

    def set_conceal_enabled(self, enabled: bool) -> None:
        """Persist the conceal setting and redraw."""
        self.settings = Settings(conceal_enabled=enabled)
        self.settings_store.save(self.settings)
        self.handle(CONFIG_CHANGED)

    def _on_text_changed(self) -> None:
        self.debouncer.trigger(self.rewrite_now)
        self.refresh_concealment(text_changed=True)

    def _on_viewport_changed(self) -> None:
        self.refresh_concealment(viewport_changed=True)

    def _on_config_changed(self) -> None:
        self.settings = self.settings_store.load()
        self.refresh_concealment()

    def refresh_concealment(self, text_changed: bool = False, viewport_changed: bool = False) -> ConcealmentBuild:
        self.concealment = safe_refresh(
            self.viewport.visible_windows(),
            self.settings.conceal_enabled,
            self.concealment,
            text_changed=text_changed,
            viewport_changed=viewport_changed,
        )
        return self.concealment

    def rewrite_now(self) -> RewriteResult:
        """
        Rewrite the document from a snapshot and apply the result.

        The result is dropped if the document no longer matches the
        snapshot by the time it is ready.
        """
        snapshot = self.document.get_text()
        cursor = self.document.get_cursor()
        result = safe_rewrite(snapshot, cursor, self.path, self.index.resolve)
        self.last_rewrite = result
        if not result.changed:
            return result

        if self.document.get_text() != snapshot:
            logger.debug("Document changed during rewrite of %s; discarding result", self.path)
            return RewriteResult(text=self.document.get_text(), cursor=self.document.get_cursor(), changed=False)

        self.document.set_text(result.text)
        self.document.set_cursor(result.cursor)
        logger.info("Rewrote %d link(s) in %s", len(result.replacements), self.path or "<untitled>")
        self.refresh_concealment(text_changed=True)
        return result
