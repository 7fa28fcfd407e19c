"""``c-function-counter count``: one-shot counts for individual files."""

import json
from pathlib import Path
from typing import List

import typer

from ..estimator import estimate_function_count
from ..exceptions import ContentUnreadableError
from ..file_ops import read_source
from ..logging_config import setup_logging
from . import app
from ._common import console, counts_table


@app.command()
def count(
    files: List[Path] = typer.Argument(..., help="Source files to count"),
    json_output: bool = typer.Option(False, "--json", help="Machine-readable JSON output"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging"),
) -> None:
    """
    Estimate the number of function definitions in each file.

    Files are counted regardless of extension. Unreadable files are
    reported and make the command exit with code 1.

    [bold cyan]Examples:[/bold cyan]

      c-function-counter count main.c util.c
    """
    setup_logging(verbose=verbose)

    counts: dict[str, int] = {}
    failed: list[str] = []
    for path in files:
        try:
            counts[str(path)] = estimate_function_count(read_source(path))
        except ContentUnreadableError as exc:
            failed.append(str(path))
            console.print(f"[red]{path}[/red]: {exc.reason}", highlight=False, soft_wrap=True)

    if json_output:
        typer.echo(json.dumps(counts, indent=2))
    else:
        console.print(counts_table(counts))

    if failed:
        raise typer.Exit(1)
