"""The one runtime failure the tracker recognizes: unreadable content."""

from pathlib import Path
from typing import Union

from .base import FunctionCounterError


class ContentUnreadableError(FunctionCounterError):
    """Raised when a source file's text cannot be obtained.

    Covers a missing file, permission denial, a decode failure and any
    other I/O error. The tracker always recovers from it locally.
    """

    def __init__(self, filepath: Union[str, Path], reason: str):
        super().__init__(
            f"Cannot read file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason
