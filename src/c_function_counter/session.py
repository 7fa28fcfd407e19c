"""Session lifecycle: initialize tracking for a workspace, tear it down on exit.

A session owns the count table, the tracker and the optional watcher. The
table lives exactly as long as the session; ``finalize`` clears it.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import Optional

from .config import CounterConfig
from .table import FileCountTable
from .tracker import FileTracker
from .watcher import FileWatcher

logger = logging.getLogger(__name__)


class CounterSession:
    """Wires table, tracker and watcher together for a set of folders.

    ``finalize`` is safe to call multiple times, from a signal handler or
    a ``finally`` block alike.
    """

    def __init__(
        self,
        folders: Iterable[str | Path],
        config: Optional[CounterConfig] = None,
    ) -> None:
        self.config = config or CounterConfig()
        self.folders = [Path(f).resolve() for f in folders]
        self.table = FileCountTable(self.config.tracked_extension)
        self.tracker = FileTracker(self.table, self.config)
        self.watcher: FileWatcher | None = None

        self._shutdown_lock = threading.Lock()
        self._finalized = False

    def initialize(self, watch: bool = True, wait: bool = False) -> int:
        """Populate the table from the folders and optionally start watching.

        Args:
            watch: Start a file watcher over the folders
            wait: Block until the initial population finishes

        Returns:
            Number of files queued by the initial scan
        """
        logger.info("c-function-counter is now active")
        queued = self.tracker.scan_workspace(self.folders, wait=wait)
        if watch:
            self.watcher = FileWatcher(self.folders, self.tracker, self.config)
            self.watcher.start()
        return queued

    def finalize(self) -> list[str]:
        """Stop watching, drain pending work and drop all state.

        Returns:
            Human-readable shutdown steps (empty on repeated calls)
        """
        with self._shutdown_lock:
            if self._finalized:
                return []
            self._finalized = True

        steps = []

        if self.watcher is not None:
            self.watcher.stop()
            steps.append("Stopped file watcher")

        self.tracker.close(wait=True)
        steps.append("Drained pending count updates")

        listeners = self.table.remove_all_listeners()
        if listeners:
            steps.append(f"Detached {listeners} listener{'s' if listeners != 1 else ''}")

        entries = len(self.table)
        self.table.clear()
        steps.append(f"Cleared {entries} count{'s' if entries != 1 else ''}")

        for step in steps:
            logger.debug(step)
        return steps

    @property
    def finalized(self) -> bool:
        return self._finalized

    def __enter__(self) -> CounterSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.finalize()
