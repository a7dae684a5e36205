"""Layout commands: placed rectangles and depth limits for a view."""

import json
from pathlib import Path
from typing import Optional

import typer

from ..exceptions import CoverageTreemapError
from ..visualization import HierarchyProjector, ViewState, render_view, resolve_view
from . import app
from ._common import FACTS_HELP, console, fail, load_tree, resolve_config


@app.command()
def layout(
    facts: Path = typer.Argument(..., help=FACTS_HELP, exists=True, dir_okay=False),
    width: float = typer.Option(1200.0, "--width", "-W", help="Container width", min=0),
    height: float = typer.Option(800.0, "--height", "-H", help="Container height", min=0),
    path: Optional[str] = typer.Option(
        None,
        "--path",
        "-p",
        help="Namespace or namespace/file to lay out (default: project)",
    ),
    depth: Optional[int] = typer.Option(
        None, "--depth", "-d", help="Levels to expand (default: default_depth from config)", min=0
    ),
    aspect_ratio: int = typer.Option(
        100,
        "--aspect-ratio",
        "-a",
        help="Aspect ratio slider position, 1..99 (log scale 1..1000), 100 = no limit",
        min=1,
        max=100,
    ),
    view_hash: Optional[str] = typer.Option(
        None,
        "--hash",
        help="View state as a URL fragment, e.g. '#app%2Fservices?depth=2'; overrides --path/--depth/--aspect-ratio",
    ),
    project_root: Optional[Path] = typer.Option(
        None,
        "--project-root",
        "-r",
        help="Directory source roots are relative to",
        file_okay=False,
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
    Print the placed rectangles for one view as JSON on stdout.

    [bold cyan]Examples:[/bold cyan]

      coverage-treemap layout coverage-facts.json --depth 2

      coverage-treemap layout coverage-facts.json --hash '#app?depth=1&aspectRatio=50'
    """

    try:
        cfg = resolve_config(config, project_root, None, verbose)
        tree = load_tree(facts, cfg, scan)
    except CoverageTreemapError as e:
        fail(e)

    if view_hash is not None:
        state = ViewState.from_hash(view_hash)
    else:
        state = ViewState(
            path=path,
            depth=cfg.default_depth if depth is None else depth,
            aspect_slider=aspect_ratio,
        )

    result = render_view(tree, state, width, height, cfg)
    typer.echo(json.dumps(result.to_dict(), indent=2))


@app.command()
def depth(
    facts: Path = typer.Argument(..., help=FACTS_HELP, exists=True, dir_okay=False),
    path: Optional[str] = typer.Option(
        None,
        "--path",
        "-p",
        help="Namespace or namespace/file to inspect (default: project)",
    ),
    project_root: Optional[Path] = typer.Option(
        None,
        "--project-root",
        "-r",
        help="Directory source roots are relative to",
        file_okay=False,
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
    Print the deepest depth that still reveals something for a view.
    """

    try:
        cfg = resolve_config(config, project_root, None, verbose)
        tree = load_tree(facts, cfg, scan)
    except CoverageTreemapError as e:
        fail(e)

    view = resolve_view(tree, path)
    console.print(HierarchyProjector.max_depth(view.target))
