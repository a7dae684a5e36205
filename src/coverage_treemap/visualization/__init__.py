"""Visualization layer: squarified layout, tree projection and rendering."""

from .models import LayoutItem, PlacedRect
from .normalize import normalize_weights
from .projector import HierarchyProjector, count_items, subtree_depth
from .render import (
    RenderResult,
    ResolvedView,
    ViewState,
    find_file,
    find_namespace,
    find_namespace_for_file,
    render,
    render_view,
    resolve_view,
    totals,
)
from .squarify import squarify, worst_aspect_ratio, worst_ratio

__all__ = [
    "LayoutItem",
    "PlacedRect",
    "normalize_weights",
    "squarify",
    "worst_ratio",
    "worst_aspect_ratio",
    "HierarchyProjector",
    "subtree_depth",
    "count_items",
    "ViewState",
    "ResolvedView",
    "RenderResult",
    "render",
    "render_view",
    "resolve_view",
    "find_namespace",
    "find_file",
    "find_namespace_for_file",
    "totals",
]
