"""Exception hierarchy for C Function Counter."""

from .base import FunctionCounterError
from .config import ConfigurationError, InvalidConfigError
from .content import ContentUnreadableError

__all__ = [
    "FunctionCounterError",
    "ContentUnreadableError",
    "ConfigurationError",
    "InvalidConfigError",
]
