"""Thread-safe table of function counts keyed by file identity."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Union

logger = logging.getLogger(__name__)

StaleListener = Callable[[str], None]


def file_identity(path: Union[str, Path]) -> str:
    """Stable lookup key for *path*: its normalized absolute form.

    Symlinks are not followed, so a link and its target are separate files.
    """
    return os.path.abspath(os.fspath(path))


@dataclass(frozen=True)
class Decoration:
    """Badge and tooltip shown next to a file in a file browser."""

    badge: str
    tooltip: str

    @classmethod
    def for_count(cls, count: int) -> Decoration:
        return cls(badge=f"{count}", tooltip=f"{count} function(s)")

    def to_dict(self) -> dict[str, str]:
        return {"badge": self.badge, "tooltip": self.tooltip}


class FileCountTable:
    """Holds the latest function count per tracked file.

    Thread-safe: tracker workers upsert and evict single keys, the query
    server reads. No operation spans more than one key.

    Every change is announced through :meth:`notify_stale`, which calls
    the registered listeners with the affected identity.
    """

    def __init__(self, tracked_extension: str = ".c") -> None:
        self.tracked_extension = tracked_extension
        self._lock = threading.RLock()
        self._counts: dict[str, int] = {}
        self._listeners: list[StaleListener] = []

    def set(self, path: Union[str, Path], count: int) -> str:
        """Store *count* for *path* and return the identity used."""
        identity = file_identity(path)
        if Path(identity).suffix != self.tracked_extension:
            raise ValueError(
                f"{identity} does not carry the tracked extension {self.tracked_extension}"
            )
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count}")
        with self._lock:
            self._counts[identity] = count
        return identity

    def discard(self, path: Union[str, Path]) -> bool:
        """Remove the entry for *path*; True if one existed."""
        identity = file_identity(path)
        with self._lock:
            return self._counts.pop(identity, None) is not None

    def get(self, path: Union[str, Path]) -> int | None:
        with self._lock:
            return self._counts.get(file_identity(path))

    def decoration_for(self, path: Union[str, Path]) -> Decoration | None:
        """Return the decoration for *path*, or None when it has no count."""
        count = self.get(path)
        if count is None:
            return None
        return Decoration.for_count(count)

    def snapshot(self) -> dict[str, int]:
        """Return a copy of all entries."""
        with self._lock:
            return dict(self._counts)

    def clear(self) -> None:
        with self._lock:
            self._counts.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._counts)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        with self._lock:
            return file_identity(path) in self._counts

    # ── Staleness signal ──────────────────────────────────────────

    def add_listener(self, listener: StaleListener) -> None:
        """Register a callback receiving identities whose decoration is stale."""
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: StaleListener) -> None:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

    def remove_all_listeners(self) -> int:
        """Drop every listener and return how many there were."""
        with self._lock:
            count = len(self._listeners)
            self._listeners.clear()
        return count

    def notify_stale(self, path: Union[str, Path]) -> None:
        """Tell every listener that *path*'s decoration must be re-queried."""
        identity = file_identity(path)
        # Copy listeners list to avoid mutation during iteration
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(identity)
            except Exception:
                logger.exception("Stale listener failed for %s", identity)
