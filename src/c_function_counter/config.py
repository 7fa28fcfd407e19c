"""Configuration loading and management for C Function Counter.

Configuration sources are merged in priority order:
    1. Defaults (defined in CounterConfig)
    2. Global config (~/.c-function-counter.toml)
    3. Project config (./c-function-counter.toml)
    4. Explicit config file
    5. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(tracked_extension=".c", port=9000)
    >>> config.port
    9000
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

from .exceptions import FunctionCounterError, InvalidConfigError

GLOBAL_CONFIG_NAME = ".c-function-counter.toml"
PROJECT_CONFIG_NAME = "c-function-counter.toml"

DEFAULT_EXCLUDE_DIRS = (
    "node_modules",
    "__pycache__",
    "venv",
    "env",
    "dist",
    "build",
)


@dataclass(frozen=True)
class CounterConfig:
    """Settings for tracking and serving function counts.

    Attributes:
        Tracking:
            tracked_extension: The one suffix whose files get counts
            language_extensions: Suffixes treated as the C language when a
                file becomes the active one
            exclude_dirs: Directory names skipped by scans and the watcher
                (hidden directories are always skipped)
            follow_symlinks: Follow symbolic links during workspace scans

        Performance:
            workers: Thread pool size for per-file work (None = default)
            debounce_ms: watchfiles debounce window

        Serving:
            host: Address the query server binds to
            port: Port the query server listens on
    """

    # Tracking
    tracked_extension: str = ".c"
    language_extensions: tuple[str, ...] = (".c", ".h")
    exclude_dirs: tuple[str, ...] = field(default_factory=lambda: DEFAULT_EXCLUDE_DIRS)
    follow_symlinks: bool = False

    # Performance
    workers: Optional[int] = None
    debounce_ms: int = 50

    # Serving
    host: str = "127.0.0.1"
    port: int = 8766

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        ext = self.tracked_extension
        if not isinstance(ext, str) or not ext.startswith(".") or len(ext) < 2:
            raise InvalidConfigError(
                "tracked_extension", ext, "must be a suffix such as '.c'"
            )
        for lang_ext in self.language_extensions:
            if not isinstance(lang_ext, str) or not lang_ext.startswith("."):
                raise InvalidConfigError(
                    "language_extensions", lang_ext, "each entry must start with '.'"
                )
        if self.workers is not None and self.workers < 1:
            raise InvalidConfigError("workers", self.workers, "must be at least 1")
        if self.debounce_ms < 0:
            raise InvalidConfigError("debounce_ms", self.debounce_ms, "must be non-negative")
        if not 0 < self.port < 65536:
            raise InvalidConfigError("port", self.port, "must be between 1 and 65535")

    def is_tracked(self, path: str | Path) -> bool:
        """True if *path* carries the tracked extension."""
        return Path(path).suffix == self.tracked_extension

    def is_c_language(self, path: str | Path) -> bool:
        """True if *path* would be opened as a C document."""
        return Path(path).suffix in self.language_extensions


# Keys whose TOML arrays become tuples
_TUPLE_FIELDS = ("language_extensions", "exclude_dirs")


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> CounterConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags); ``None``
            values are ignored so unset CLI options keep file values

    Returns:
        Validated CounterConfig instance

    Raises:
        FunctionCounterError: If a config file is invalid or missing
        InvalidConfigError: If a value fails validation
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / GLOBAL_CONFIG_NAME
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except FunctionCounterError:
            raise
        except Exception as e:
            raise FunctionCounterError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / PROJECT_CONFIG_NAME
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except FunctionCounterError:
            raise
        except Exception as e:
            raise FunctionCounterError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise FunctionCounterError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except FunctionCounterError:
            raise
        except Exception as e:
            raise FunctionCounterError(f"Invalid config file '{config_file}': {e}")

    merged.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(CounterConfig)}
    unknown = sorted(set(merged) - known)
    if unknown:
        raise FunctionCounterError(f"Unknown configuration keys: {', '.join(unknown)}")

    for key in _TUPLE_FIELDS:
        if key in merged and isinstance(merged[key], list):
            merged[key] = tuple(merged[key])

    return CounterConfig(**merged)


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        FunctionCounterError: If tomllib/tomli not available
        Exception: If TOML parsing fails
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise FunctionCounterError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
