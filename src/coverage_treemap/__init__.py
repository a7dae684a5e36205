"""
coverage-treemap - Test coverage as a drillable squarified treemap

Folds per-test line coverage and method spans into a namespace -> file ->
method tree with consistent totals, projects it to any depth, and lays it
out with the squarified treemap algorithm.
"""

__version__ = "0.1.0"

from .coverage import CoverageAccumulator, CoverageAggregator, NamespaceNode, build_tree
from .visualization import HierarchyProjector, LayoutItem, PlacedRect, ViewState, render_view, squarify

__all__ = [
    "CoverageAccumulator",
    "CoverageAggregator",
    "build_tree",
    "NamespaceNode",
    "HierarchyProjector",
    "LayoutItem",
    "PlacedRect",
    "ViewState",
    "render_view",
    "squarify",
]
