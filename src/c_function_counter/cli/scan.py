"""``c-function-counter scan``: count every tracked file in a folder."""

import json
from pathlib import Path
from typing import Optional

import typer

from ..logging_config import setup_logging
from ..session import CounterSession
from . import app
from ._common import console, counts_table, resolve_config


@app.command()
def scan(
    path: Path = typer.Argument(
        Path("."), exists=True, file_okay=False, help="Workspace folder to scan"
    ),
    extension: Optional[str] = typer.Option(
        None, "-e", "--extension", help="Tracked extension (default .c)"
    ),
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Config file"),
    workers: Optional[int] = typer.Option(None, "-w", "--workers", help="Parallel workers"),
    json_output: bool = typer.Option(False, "--json", help="Machine-readable JSON output"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging"),
) -> None:
    """Scan a workspace once and print the function count of each tracked file."""
    setup_logging(verbose=verbose)
    settings = resolve_config(config=config, extension=extension, workers=workers)

    root = path.resolve()
    with CounterSession([root], settings) as session:
        session.initialize(watch=False, wait=True)
        counts = session.table.snapshot()

    if json_output:
        typer.echo(json.dumps(counts, indent=2, sort_keys=True))
        return

    if not counts:
        console.print(f"[yellow]No {settings.tracked_extension} files found[/yellow]")
        return
    console.print(counts_table(counts, root=root))
    total = sum(counts.values())
    console.print(f"[dim]{len(counts)} file(s), {total} function(s)[/dim]")
