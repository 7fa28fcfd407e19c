"""File watcher that feeds tracked-file changes to the tracker."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from pathlib import Path

from watchfiles import Change, watch

from .config import CounterConfig
from .file_ops import is_excluded
from .tracker import FileTracker

logger = logging.getLogger(__name__)


class FileWatcher:
    """Watches workspace folders and dispatches one tracker task per change.

    Uses ``watchfiles`` (Rust-backed) in a background thread. Each
    change is handed to the tracker's pool, so a slow read never blocks
    the watch loop.
    """

    def __init__(
        self,
        folders: Iterable[str | Path],
        tracker: FileTracker,
        config: CounterConfig,
    ) -> None:
        self.folders = [str(Path(f).resolve()) for f in folders]
        self.tracker = tracker
        self.config = config

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Start the watcher thread."""
        self._thread = threading.Thread(
            target=self._watch_loop,
            name="fncount-watcher",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the watcher to stop."""
        logger.debug("Stopping watcher thread...")
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            if self._thread.is_alive():
                logger.warning("Watcher thread did not exit cleanly within 5 seconds")
            else:
                logger.debug("Watcher thread stopped successfully")

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def dispatch(self, changes: Iterable[tuple[Change, str]]) -> int:
        """Hand each change to the tracker; returns how many were dispatched.

        Changes that arrive after the tracker's pool has shut down are dropped.
        """
        dispatched = 0
        for change, path in changes:
            try:
                if change == Change.deleted:
                    self.tracker.submit_removal(path)
                else:
                    self.tracker.submit(path)
            except RuntimeError:
                logger.debug("Tracker closed; dropping remaining changes")
                break
            dispatched += 1
        return dispatched

    def _watch_loop(self) -> None:
        """Background thread: watch folders, dispatch changes."""
        if not self.folders:
            logger.info("No workspace folders to watch")
            return

        logger.info(
            "Watching %s for %s changes",
            ", ".join(self.folders),
            self.config.tracked_extension,
        )

        for changes in watch(
            *self.folders,
            watch_filter=TrackedFileFilter(self.config, self.folders),
            debounce=self.config.debounce_ms,
            stop_event=self._stop_event,
            rust_timeout=5000,
            yield_on_timeout=False,
        ):
            if self._stop_event.is_set():
                break
            logger.debug("Detected %d change(s)", len(changes))
            self.dispatch(changes)


class TrackedFileFilter:
    """watchfiles filter: only files with the tracked extension, no noise dirs."""

    def __init__(self, config: CounterConfig, roots: Iterable[str]) -> None:
        self.config = config
        self.roots = [Path(r) for r in roots]

    def __call__(self, change: Change, path: str) -> bool:
        p = Path(path)
        if not self.config.is_tracked(p):
            return False
        root = next((r for r in self.roots if _is_under(p, r)), None)
        return not is_excluded(p, root or p.parent, self.config.exclude_dirs)


def _is_under(path: Path, root: Path) -> bool:
    try:
        path.relative_to(root)
        return True
    except ValueError:
        return False
