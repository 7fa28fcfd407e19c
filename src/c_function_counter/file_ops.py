"""
File operations for C Function Counter.

Reading source text and finding tracked files under a workspace folder.
"""

from collections.abc import Generator, Iterable
from pathlib import Path
from typing import Union

from .exceptions import ContentUnreadableError


def read_source(filepath: Union[str, Path], encoding: str = "utf-8") -> str:
    """
    Read the full text of a source file.

    Bytes that are not valid *encoding* decode to U+FFFD, so only I/O
    failures make a file unreadable.

    Args:
        filepath: File to read
        encoding: Text encoding

    Returns:
        File contents as string

    Raises:
        ContentUnreadableError: If the file is missing, not permitted,
            or any other I/O error occurs
    """
    try:
        with open(filepath, encoding=encoding, errors="replace") as f:
            return f.read()
    except FileNotFoundError:
        raise ContentUnreadableError(filepath, "File not found")
    except PermissionError:
        raise ContentUnreadableError(filepath, "Permission denied")
    except OSError as e:
        raise ContentUnreadableError(filepath, f"OS error: {e}")


def is_excluded(path: Path, root_dir: Path, exclude_dirs: Iterable[str]) -> bool:
    """
    Check if a path sits under a hidden or excluded directory.

    Only the parts below *root_dir* are considered, so a workspace that
    itself lives under a hidden directory is still scanned.
    """
    try:
        parts = path.relative_to(root_dir).parts[:-1]
    except ValueError:
        parts = path.parts[:-1]
    excluded = set(exclude_dirs)
    for part in parts:
        if part.startswith(".") or part in excluded:
            return True
    return False


def find_tracked_files(
    root_dir: Union[str, Path],
    extension: str,
    exclude_dirs: Iterable[str] = (),
    follow_symlinks: bool = False,
) -> Generator[Path, None, None]:
    """
    Find every file under *root_dir* whose suffix is *extension*.

    Args:
        root_dir: Workspace folder to scan
        extension: Tracked suffix, e.g. ``.c``
        exclude_dirs: Directory names to skip
        follow_symlinks: Whether to yield symbolic links

    Yields:
        Matching file paths

    Raises:
        ContentUnreadableError: If the directory itself cannot be scanned
    """
    root = Path(root_dir)
    exclude = tuple(exclude_dirs)
    try:
        for path in root.rglob(f"*{extension}"):
            if path.suffix != extension:
                continue
            if path.is_symlink() and not follow_symlinks:
                continue
            if not path.is_file():
                continue
            if is_excluded(path, root, exclude):
                continue
            yield path
    except OSError as e:
        raise ContentUnreadableError(root, f"Directory scan failed: {e}")
