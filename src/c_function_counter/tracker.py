"""Keeps the file count table in step with file events.

Each event becomes one independent read-and-recompute operation. Work for
different files may run concurrently on the tracker's thread pool; two
operations on the same file race and the later write wins.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Optional, Union

from .config import CounterConfig
from .estimator import estimate_function_count
from .exceptions import ContentUnreadableError, InvalidConfigError
from .file_ops import find_tracked_files, read_source
from .table import FileCountTable, file_identity

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class FileTracker:
    """Turns host events into table updates and staleness signals."""

    def __init__(self, table: FileCountTable, config: Optional[CounterConfig] = None) -> None:
        self.table = table
        self.config = config or CounterConfig(tracked_extension=table.tracked_extension)
        if self.config.tracked_extension != table.tracked_extension:
            raise InvalidConfigError(
                "tracked_extension",
                self.config.tracked_extension,
                f"table tracks {table.tracked_extension}",
            )
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.workers,
            thread_name_prefix="fncount-worker",
        )
        self._active_lock = threading.Lock()
        self._active: str | None = None

    # ── Events ────────────────────────────────────────────────────

    def update_file(self, path: PathLike) -> int | None:
        """Recompute the count for *path* (changed, created or opened).

        Returns the new count, or None if the file is not tracked or its
        content could not be read. Never raises.
        """
        identity = file_identity(path)
        if not self.config.is_tracked(identity):
            self._evict(identity)
            return None

        try:
            text = read_source(identity)
        except ContentUnreadableError as exc:
            logger.warning("Error updating decoration for %s: %s", identity, exc.reason)
            self._evict(identity)
            return None

        count = estimate_function_count(text)
        self.table.set(identity, count)
        logger.debug("%s: %d function(s)", identity, count)
        self.table.notify_stale(identity)
        return count

    def remove_file(self, path: PathLike) -> None:
        """Forget *path* (deleted)."""
        self._evict(file_identity(path))

    def switch_active(self, path: PathLike | None) -> int | None:
        """Record *path* as the active file and recompute it if it is C source."""
        identity = file_identity(path) if path is not None else None
        with self._active_lock:
            self._active = identity
        if identity is None or not self.config.is_c_language(identity):
            return None
        return self.update_file(identity)

    @property
    def active_file(self) -> str | None:
        with self._active_lock:
            return self._active

    def refresh_active(self) -> int | None:
        """Manual trigger: recompute the active file as if it had changed."""
        active = self.active_file
        if active is None:
            logger.debug("Manual refresh requested with no active file")
            return None
        return self.update_file(active)

    # ── Scheduling ────────────────────────────────────────────────

    def submit(self, path: PathLike) -> Future:
        """Schedule :meth:`update_file` for *path* on the worker pool."""
        return self._executor.submit(self.update_file, path)

    def submit_removal(self, path: PathLike) -> Future:
        return self._executor.submit(self.remove_file, path)

    def scan_workspace(self, folders: Iterable[PathLike], wait: bool = False) -> int:
        """Queue an update for every tracked file under *folders*.

        Args:
            folders: Workspace folders to scan
            wait: Block until every queued update has finished

        Returns:
            Number of files queued
        """
        futures: list[Future] = []
        for folder in folders:
            try:
                for path in find_tracked_files(
                    folder,
                    self.config.tracked_extension,
                    exclude_dirs=self.config.exclude_dirs,
                    follow_symlinks=self.config.follow_symlinks,
                ):
                    futures.append(self.submit(path))
            except ContentUnreadableError as exc:
                logger.warning("Cannot scan %s: %s", folder, exc.reason)

        logger.info("Queued %d file(s) for counting", len(futures))
        if wait:
            for future in as_completed(futures):
                future.result()
        return len(futures)

    def close(self, wait: bool = True) -> None:
        """Stop accepting work; in-flight updates still complete."""
        self._executor.shutdown(wait=wait)

    def _evict(self, identity: str) -> None:
        self.table.discard(identity)
        self.table.notify_stale(identity)
