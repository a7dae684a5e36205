"""Command-line interface for coverage-treemap."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="coverage-treemap",
    help="coverage-treemap - Test coverage as a drillable squarified treemap",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"coverage-treemap {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """Summarize coverage facts and compute treemap layouts."""


# Import subcommands to register them
from .summary import summary as _summary  # noqa: F401, E402
from .tree import tree as _tree  # noqa: F401, E402
from .layout import depth as _depth, layout as _layout  # noqa: F401, E402
