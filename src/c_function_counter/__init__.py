"""
C Function Counter - function-definition badges for C source files

Watches C sources, estimates how many functions each file defines with a
staged text-stripping heuristic, and serves the counts as file-browser
decorations (badge + tooltip).
"""

__version__ = "0.1.0"

from .estimator import estimate_function_count
from .session import CounterSession
from .table import Decoration, FileCountTable
from .tracker import FileTracker

__all__ = [
    "estimate_function_count",  # The heuristic itself
    "CounterSession",  # Lifecycle: initialize / finalize
    "FileCountTable",
    "FileTracker",
    "Decoration",
]
