"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ..config import CounterConfig, load_config
from ..exceptions import FunctionCounterError

console = Console()


def resolve_config(
    config: Optional[Path] = None,
    extension: Optional[str] = None,
    workers: Optional[int] = None,
    **overrides: object,
) -> CounterConfig:
    """Build config from CLI options, exiting with code 1 if it is invalid."""
    try:
        return load_config(
            config_file=config,
            tracked_extension=extension,
            workers=workers,
            **overrides,
        )
    except FunctionCounterError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}", soft_wrap=True)
        raise typer.Exit(1)


def counts_table(counts: dict[str, int], root: Optional[Path] = None) -> Table:
    """Render path -> count as a rich table, paths relative to *root*."""
    table = Table(show_edge=False, box=None, padding=(0, 1))
    table.add_column("Functions", justify="right", style="bold cyan")
    table.add_column("File")
    for path in sorted(counts):
        shown = path
        if root is not None:
            try:
                shown = str(Path(path).relative_to(root))
            except ValueError:
                pass
        table.add_row(str(counts[path]), shown)
    return table
