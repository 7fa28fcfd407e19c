"""CLI entry point: registers all subcommands."""

import typer

app = typer.Typer(
    name="c-function-counter",
    help="C Function Counter - function-definition badges for C source files",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import subcommands to register them
from .count import count as _count  # noqa: F401, E402
from .scan import scan as _scan  # noqa: F401, E402
from .serve import serve as _serve  # noqa: F401, E402


def main() -> None:
    app()
