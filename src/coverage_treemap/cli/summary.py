"""Summary command: coverage table for the project or one namespace."""

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..exceptions import CoverageTreemapError
from ..visualization import resolve_view, totals
from . import app
from ._common import FACTS_HELP, console, fail, load_tree, resolve_config


def _percent_style(percent: int) -> str:
    if percent >= 80:
        return "green"
    if percent >= 50:
        return "yellow"
    return "red"


@app.command()
def summary(
    facts: Path = typer.Argument(..., help=FACTS_HELP, exists=True, dir_okay=False),
    namespace: Optional[str] = typer.Option(
        None,
        "--namespace",
        "-n",
        help="Show the contents of this namespace (slash-joined full name)",
    ),
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
    Print covered/coverable line counts per namespace and file.

    [bold cyan]Examples:[/bold cyan]

      coverage-treemap summary coverage-facts.json

      coverage-treemap summary coverage-facts.json --namespace app/services
    """

    try:
        cfg = resolve_config(config, project_root, default_namespace, verbose)
        tree = load_tree(facts, cfg, scan)
    except CoverageTreemapError as e:
        fail(e)

    view = resolve_view(tree, namespace)
    if view.file is not None:
        rows = [("method", m.name, m.covered, m.coverable, m.percent) for m in view.file.methods]
        title = view.file.full_path
        covered, coverable, percent = view.file.covered, view.file.coverable, view.file.percent
    elif view.namespace is not None:
        rows = [("namespace", ns.full_name, ns.covered, ns.coverable, ns.percent) for ns in view.namespace.namespaces]
        rows += [("file", f.name, f.covered, f.coverable, f.percent) for f in view.namespace.files]
        title = view.namespace.full_name
        covered, coverable, percent = view.namespace.covered, view.namespace.coverable, view.namespace.percent
    else:
        rows = [("namespace", ns.full_name, ns.covered, ns.coverable, ns.percent) for ns in tree]
        title = "Project"
        covered, coverable, percent = totals(tree)

    table = Table(title=title)
    table.add_column("Kind", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Covered", justify="right")
    table.add_column("Coverable", justify="right")
    table.add_column("%", justify="right")

    for kind, name, row_covered, row_coverable, row_percent in rows:
        table.add_row(
            kind,
            name,
            str(row_covered),
            str(row_coverable),
            f"[{_percent_style(row_percent)}]{row_percent}%[/]",
        )

    console.print(table)
    console.print(f"Total Coverage: {covered}/{coverable} ({percent}%)")
