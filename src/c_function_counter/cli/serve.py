"""``c-function-counter serve``: watch a workspace and answer decoration queries."""

import logging
from pathlib import Path
from typing import Optional

import typer

from ..logging_config import setup_logging
from ..session import CounterSession
from . import app
from ._common import console, resolve_config

logger = logging.getLogger(__name__)


@app.command()
def serve(
    path: Path = typer.Argument(
        Path("."), exists=True, file_okay=False, help="Workspace folder to watch"
    ),
    port: Optional[int] = typer.Option(None, help="Port to listen on"),
    host: Optional[str] = typer.Option(None, help="Host to bind to"),
    extension: Optional[str] = typer.Option(
        None, "-e", "--extension", help="Tracked extension (default .c)"
    ),
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Config file"),
    workers: Optional[int] = typer.Option(None, "-w", "--workers", help="Parallel workers"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also log to this file"),
) -> None:
    """Watch a workspace and serve live function-count decorations."""
    import uvicorn

    from ..server.app import create_app

    setup_logging(verbose=verbose, log_file=log_file)
    settings = resolve_config(
        config=config, extension=extension, workers=workers, host=host, port=port
    )

    root = path.resolve()
    session = CounterSession([root], settings)

    console.print(f"[bold]Counting[/bold] {settings.tracked_extension} files in {root}")
    with console.status("[cyan]Running initial scan..."):
        queued = session.initialize(watch=True, wait=True)
    console.print(f"[green]Ready[/green]: {queued} file(s) tracked")

    url = f"http://{settings.host}:{settings.port}"
    console.print(f"[bold]Decorations[/bold] → [link={url}/api/decorations]{url}[/link]")
    console.print("[dim]Press Ctrl+C to stop[/dim]")

    asgi_app = create_app(session.table, session.tracker)
    try:
        uvicorn.run(
            asgi_app,
            host=settings.host,
            port=settings.port,
            log_level="info" if verbose else "warning",
        )
    except KeyboardInterrupt:
        pass
    finally:
        for step in session.finalize():
            console.print(f"  [green]OK[/green] {step}")
        console.print("\n[dim]Stopped.[/dim]")
