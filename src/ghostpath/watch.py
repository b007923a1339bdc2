"""Watch mode for ghostpath - rewrite short links as notes are saved."""

import json
import logging
import signal
import sys
import threading
import time
from pathlib import Path
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .adapters.fs_storage import FsStorage
from .adapters.vault_index import VaultLinkIndex
from .session import Debouncer
from .vault_rewrite import apply_rewrite, rewrite_note

logger = logging.getLogger(__name__)


class DebounceHandler(FileSystemEventHandler):
    """
    File system event handler with debouncing.

    Observer callbacks only record what happened. Index updates and the
    batch callback run in flush(), on the thread that polls the handler.
    """

    def __init__(
        self,
        storage: FsStorage,
        index: VaultLinkIndex,
        on_batch: Any,
        debounce_ms: int = 220,
    ):
        super().__init__()
        self.storage = storage
        self.index = index
        self.on_batch = on_batch
        self.debouncer = Debouncer(debounce_ms)
        self._lock = threading.Lock()

        # Pending changes by vault-relative path
        self.changed: set[str] = set()
        self.deleted: set[str] = set()

        # Pending index updates, applied in order at flush time
        self.index_ops: list[tuple[str, str]] = []
        self.rescan = False

    def _rel(self, raw_path: Any) -> str | None:
        """Vault-relative path of a note, or None for files we ignore."""
        path = Path(str(raw_path))
        try:
            rel = self.storage.relative(path)
        except ValueError:
            return None
        if any(part.startswith(".") for part in Path(rel).parts):
            return None
        return rel

    def _note(self, raw_path: Any) -> str | None:
        rel = self._rel(raw_path)
        if rel is None or not self.storage.is_note(Path(rel)):
            return None
        return rel

    def _queue_index(self, op: str, rel: str | None) -> None:
        if rel is None:
            return
        with self._lock:
            self.index_ops.append((op, rel))
            self.debouncer.trigger(self.flush)

    def _mark_changed(self, rel: str) -> None:
        with self._lock:
            self.deleted.discard(rel)
            self.changed.add(rel)
            self.debouncer.trigger(self.flush)

    def _mark_deleted(self, rel: str) -> None:
        with self._lock:
            self.changed.discard(rel)
            self.deleted.add(rel)
            self.debouncer.trigger(self.flush)

    def on_created(self, event: FileSystemEvent) -> None:
        """Handle file creation."""
        if event.is_directory:
            return
        self._queue_index("add", self._rel(event.src_path))
        note = self._note(event.src_path)
        if note:
            self._mark_changed(note)

    def on_modified(self, event: FileSystemEvent) -> None:
        """Handle file modification."""
        if event.is_directory:
            return
        note = self._note(event.src_path)
        if note:
            self._mark_changed(note)

    def on_deleted(self, event: FileSystemEvent) -> None:
        """Handle file deletion."""
        if event.is_directory:
            return
        self._queue_index("discard", self._rel(event.src_path))
        note = self._note(event.src_path)
        if note:
            self._mark_deleted(note)

    def on_moved(self, event: FileSystemEvent) -> None:
        """Handle rename: old path is gone, new path is a fresh note."""
        if event.is_directory:
            with self._lock:
                self.rescan = True
                self.debouncer.trigger(self.flush)
            return
        self._queue_index("discard", self._rel(event.src_path))
        self._queue_index("add", self._rel(getattr(event, "dest_path", "")))
        note = self._note(getattr(event, "dest_path", ""))
        if note:
            self._mark_changed(note)

    def check_and_flush(self) -> None:
        """Check if debounce period has elapsed and flush if so."""
        self.debouncer.check_and_flush()

    def flush(self) -> None:
        """Apply pending index updates, then process accumulated events."""
        with self._lock:
            self.debouncer.cancel()
            ops = list(self.index_ops)
            rescan = self.rescan
            changed = set(self.changed)
            deleted = set(self.deleted)
            self.index_ops.clear()
            self.rescan = False
            self.changed.clear()
            self.deleted.clear()

        if rescan:
            self.index.rebuild()
        else:
            for op, rel in ops:
                if op == "add":
                    self.index.add(rel)
                else:
                    self.index.discard(rel)

        if not (changed or deleted):
            return
        if self.on_batch:
            self.on_batch(changed, deleted)


def rewrite_batch(storage: FsStorage, index: VaultLinkIndex, changed: set[str]) -> dict[str, int]:
    """
    Rewrite the changed notes.

    Returns:
        Counts: scanned, rewritten, links
    """
    counts = {"scanned": 0, "rewritten": 0, "links": 0}
    for rel in sorted(changed):
        result = rewrite_note(storage, index, rel)
        if result is None:
            continue
        counts["scanned"] += 1
        if apply_rewrite(storage, result):
            counts["rewritten"] += 1
            counts["links"] += result.changes
    return counts


def watch_vault(
    storage: FsStorage,
    index: VaultLinkIndex,
    debounce_ms: int = 220,
    quiet: bool = False,
    json_output: bool = False,
) -> int:
    """
    Watch vault directory for changes and rewrite short links.

    Args:
        storage: Note storage rooted at the vault
        index: Link index for the vault
        debounce_ms: Debounce window in milliseconds
        quiet: Suppress output
        json_output: Output JSON events instead of human-readable

    Returns:
        Exit code
    """
    vault_path = storage.root
    if not vault_path.exists():
        print(f"Error: Vault not found: {vault_path}", file=sys.stderr)
        return 1

    index.rebuild()
    running = True

    def handle_batch(changed: set[str], deleted: set[str]) -> None:
        """Handle a batch of changes."""
        start_time = time.time()

        try:
            counts = rewrite_batch(storage, index, changed)
            duration_ms = int((time.time() - start_time) * 1000)

            if json_output:
                event = {
                    "type": "batch",
                    "changed": sorted(changed),
                    "deleted": sorted(deleted),
                    "rewritten": counts["rewritten"],
                    "links": counts["links"],
                    "duration_ms": duration_ms,
                }
                print(json.dumps(event), flush=True)
            elif not quiet and counts["rewritten"]:
                print(
                    f"Rewrote {counts['links']} link(s) in {counts['rewritten']} note(s) ({duration_ms}ms)",
                    flush=True,
                )
        except Exception as e:
            logger.exception("Batch failed")
            if json_output:
                print(json.dumps({"type": "error", "message": str(e)}), flush=True)
            else:
                print(f"Error: {e}", file=sys.stderr, flush=True)

    def signal_handler(signum: int, frame: Any) -> None:
        nonlocal running
        running = False
        if not quiet and not json_output:
            print("\nShutting down...", flush=True)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    handler = DebounceHandler(storage, index, handle_batch, debounce_ms)
    observer = Observer()
    observer.schedule(handler, str(vault_path), recursive=True)

    if not quiet and not json_output:
        print(f"Watching {vault_path} (debounce: {debounce_ms}ms)", flush=True)
        print("Press Ctrl+C to stop", flush=True)

    observer.start()

    try:
        while running:
            time.sleep(0.05)
            handler.check_and_flush()
    finally:
        handler.flush()
        observer.stop()
        observer.join()

    if not quiet and not json_output:
        print("Watch stopped", flush=True)

    return 0
