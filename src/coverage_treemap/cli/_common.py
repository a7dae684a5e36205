"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ..config import TreemapConfig, load_config
from ..coverage import CoverageAccumulator, CoverageAggregator, NamespaceNode
from ..exceptions import CoverageTreemapError
from ..logging_config import setup_logging

console = Console()
err_console = Console(stderr=True)

FACTS_HELP = "Coverage facts JSON ({'coverable': ..., 'tests': ..., 'methods': ...})"


def resolve_config(
    config: Optional[Path] = None,
    project_root: Optional[Path] = None,
    default_namespace: Optional[str] = None,
    verbose: bool = False,
) -> TreemapConfig:
    """Build config from CLI options and configure logging to match it."""
    overrides = {}
    if project_root is not None:
        overrides["project_root"] = str(project_root)
    if default_namespace is not None:
        overrides["default_namespace"] = default_namespace
    if verbose:
        overrides["verbose"] = True
    cfg = load_config(config_file=config, **overrides)
    setup_logging(cfg.verbosity, cfg.log_file)
    return cfg


def load_tree(facts: Path, config: TreemapConfig, scan: bool) -> list[NamespaceNode]:
    """Read a facts document and aggregate it into a tree."""
    accumulator = CoverageAccumulator.load(facts)
    return CoverageAggregator(config).build_from(accumulator, scan_sources=scan)


def fail(error: CoverageTreemapError) -> None:
    """Report a user-facing error and exit non-zero."""
    err_console.print(f"[red]Error:[/red] {error}")
    raise typer.Exit(1)
