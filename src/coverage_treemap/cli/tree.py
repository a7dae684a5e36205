"""Tree command: dump the aggregated coverage tree as JSON."""

from pathlib import Path
from typing import Optional

import typer

from ..coverage import dumps_tree
from ..exceptions import CoverageTreemapError
from . import app
from ._common import FACTS_HELP, fail, load_tree, resolve_config


@app.command()
def tree(
    facts: Path = typer.Argument(..., help=FACTS_HELP, exists=True, dir_okay=False),
    project_root: Optional[Path] = typer.Option(
        None,
        "--project-root",
        "-r",
        help="Directory source roots are relative to",
        file_okay=False,
    ),
    default_namespace: Optional[str] = typer.Option(
        None,
        "--default-namespace",
        help="Namespace for files directly in a source root",
    ),
    scan: bool = typer.Option(
        True,
        "--scan/--no-scan",
        help="Include source files without coverage data",
    ),
    compact: bool = typer.Option(False, "--compact", help="Emit JSON on a single line"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
):
    """
    Print the namespace -> file -> method tree as JSON on stdout.

    [bold cyan]Examples:[/bold cyan]

      coverage-treemap tree coverage-facts.json --no-scan
    """

    try:
        cfg = resolve_config(config, project_root, default_namespace, verbose)
        namespaces = load_tree(facts, cfg, scan)
    except CoverageTreemapError as e:
        fail(e)

    typer.echo(dumps_tree(namespaces, indent=None if compact else 2))
