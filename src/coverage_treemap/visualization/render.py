"""Compose projection and layout into one render pass.

The shell describes what to show with a :class:`ViewState` (the same state
it keeps in the URL hash). :func:`render_view` resolves that state against
the tree, projects it to the requested depth and lays the result out,
recursing into each parent's rectangle for nested children.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Optional, Sequence
from urllib.parse import parse_qs, quote, unquote

from ..config import DEFAULT_THRESHOLDS, LayoutThresholds, TreemapConfig
from ..coverage.models import FileNode, NamespaceNode, coverage_percent
from ..logging_config import get_logger
from .models import LayoutItem, PlacedRect
from .projector import HierarchyProjector, ViewTarget
from .squarify import squarify, worst_aspect_ratio

logger = get_logger(__name__)

NO_LIMIT_SLIDER = 100
MAX_SLIDER_RATIO = 1000.0


# ── Tree lookups ───────────────────────────────────────────────


def find_namespace(namespaces: Sequence[NamespaceNode], full_name: str) -> Optional[NamespaceNode]:
    """Namespace with the given slash-joined full name, anywhere in the tree."""
    for root in namespaces:
        for ns in root.walk():
            if ns.full_name == full_name:
                return ns
    return None


def find_file(namespaces: Sequence[NamespaceNode], path: str) -> Optional[FileNode]:
    """File by its full path, falling back to its base name."""
    fallback = None
    for root in namespaces:
        for file_node in root.iter_files():
            if file_node.full_path == path:
                return file_node
            if fallback is None and file_node.name == path:
                fallback = file_node
    return fallback


def find_namespace_for_file(namespaces: Sequence[NamespaceNode], path: str) -> Optional[NamespaceNode]:
    """Namespace directly containing the file with the given path or name."""
    for root in namespaces:
        for ns in root.walk():
            if any(f.full_path == path or f.name == path for f in ns.files):
                return ns
    return None


def totals(nodes: Sequence) -> tuple[int, int, int]:
    """(covered, coverable, percent) summed over *nodes*."""
    covered = sum(n.covered for n in nodes)
    coverable = sum(n.coverable for n in nodes)
    return covered, coverable, coverage_percent(covered, coverable)


# ── Aspect-ratio slider ────────────────────────────────────────


def slider_to_aspect_ratio(slider: float) -> Optional[float]:
    """Slider 1..99 maps log-scale onto ratios 1..1000; 100 means no limit."""
    if slider >= NO_LIMIT_SLIDER:
        return None
    if slider <= 1:
        return 1.0
    if slider >= 99:
        return MAX_SLIDER_RATIO
    return 10 ** (((slider - 1) / 98) * 3)


def aspect_ratio_to_slider(ratio: Optional[float]) -> float:
    if ratio is None:
        return float(NO_LIMIT_SLIDER)
    if ratio <= 1:
        return 1.0
    if ratio >= MAX_SLIDER_RATIO:
        return 99.0
    return 1 + (math.log10(ratio) / 3) * 98


# ── View state ─────────────────────────────────────────────────


_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def _leading_int(raw: str) -> Optional[int]:
    """Integer prefix of *raw* (``"50.5"`` -> 50), or None when there is none."""
    match = _LEADING_INT.match(raw)
    return int(match.group(1)) if match else None


@dataclass(frozen=True)
class ViewState:
    """What the shell is showing: a path into the tree, a depth and a ratio cap.

    Hash format: ``#<namespace>[/<file>][?depth=N&aspectRatio=S]`` where the
    path is URI-encoded and S is the slider position (1..99; 100 = no limit).
    """

    path: Optional[str] = None
    depth: int = 0
    aspect_slider: int = NO_LIMIT_SLIDER

    @property
    def max_aspect_ratio(self) -> Optional[float]:
        return slider_to_aspect_ratio(self.aspect_slider)

    @classmethod
    def from_hash(cls, fragment: str) -> "ViewState":
        """Parse a URL fragment; anything malformed falls back to defaults."""
        decoded = unquote(fragment.lstrip("#")) if fragment else ""
        path_part, _, query = decoded.partition("?")
        params = parse_qs(query)

        depth = 0
        raw_depth = _leading_int(params.get("depth", [""])[0])
        if raw_depth is not None and raw_depth >= 0:
            depth = raw_depth

        slider = NO_LIMIT_SLIDER
        raw_slider = _leading_int(params.get("aspectRatio", [""])[0])
        if raw_slider is not None and 1 <= raw_slider <= NO_LIMIT_SLIDER:
            slider = raw_slider

        return cls(path=path_part or None, depth=depth, aspect_slider=slider)

    def to_hash(self) -> str:
        fragment = quote(self.path, safe="") if self.path else ""
        params = []
        if self.depth > 0:
            params.append(f"depth={self.depth}")
        if self.aspect_slider < NO_LIMIT_SLIDER:
            params.append(f"aspectRatio={self.aspect_slider}")
        if params:
            fragment += "?" + "&".join(params)
        return "#" + fragment


@dataclass(frozen=True)
class ResolvedView:
    """The tree node a view state points at."""

    target: ViewTarget
    namespace: Optional[NamespaceNode] = None
    file: Optional[FileNode] = None

    @property
    def kind(self) -> str:
        if self.file is not None:
            return "methods"
        if self.namespace is not None:
            return "files"
        return "namespaces"


def resolve_view(namespaces: Sequence[NamespaceNode], path: Optional[str]) -> ResolvedView:
    """Resolve ``namespace`` or ``namespace/file`` against the tree.

    The longest prefix naming a namespace wins; a trailing segment that names
    one of its files selects that file. Unknown paths fall back to the
    nearest namespace found, or the project view.
    """
    roots = list(namespaces)
    if not path:
        return ResolvedView(target=roots)

    exact = find_namespace(roots, path)
    if exact is not None:
        return ResolvedView(target=exact, namespace=exact)

    parts = path.split("/")
    for cut in range(len(parts) - 1, 0, -1):
        ns = find_namespace(roots, "/".join(parts[:cut]))
        if ns is None:
            continue
        remainder = "/".join(parts[cut:])
        for f in ns.files:
            if remainder in (f.name, f.full_path) or f.name == parts[-1]:
                return ResolvedView(target=f, namespace=ns, file=f)
        logger.debug(f"File {remainder!r} not found in namespace {ns.full_name!r}")
        return ResolvedView(target=ns, namespace=ns)

    logger.debug(f"Unknown view path {path!r}, showing project view")
    return ResolvedView(target=roots)


# ── Rendering ──────────────────────────────────────────────────


def render(
    items: Sequence[LayoutItem],
    width: float,
    height: float,
    max_aspect_ratio: Optional[float] = None,
    padding: float = 2.0,
    thresholds: LayoutThresholds = DEFAULT_THRESHOLDS,
    x: float = 0.0,
    y: float = 0.0,
) -> list[PlacedRect]:
    """Lay out *items*, then each item's children inside its rect inset by *padding*.

    All coordinates in the result are absolute (relative to the outermost
    container's origin).
    """
    placed = squarify(items, width, height, max_aspect_ratio, thresholds)
    result = []
    for rect in placed:
        rect = rect.offset(x, y)
        if rect.item.children:
            rect.children = render(
                rect.item.children,
                rect.w - 2 * padding,
                rect.h - 2 * padding,
                max_aspect_ratio,
                padding,
                thresholds,
                x=rect.x + padding,
                y=rect.y + padding,
            )
        result.append(rect)
    return result


@dataclass
class RenderResult:
    """Rects for one view plus what was actually drawn."""

    view: ResolvedView
    requested_depth: int
    depth: int
    max_depth: int
    rects: list[PlacedRect] = field(default_factory=list)

    @property
    def worst_aspect_ratio(self) -> float:
        return worst_aspect_ratio(self.rects)

    def to_dict(self) -> dict:
        return {
            "view": self.view.kind,
            "requestedDepth": self.requested_depth,
            "depth": self.depth,
            "maxDepth": self.max_depth,
            "rects": [r.to_dict() for r in self.rects],
        }


def render_view(
    namespaces: Sequence[NamespaceNode],
    state: ViewState,
    width: float,
    height: float,
    config: Optional[TreemapConfig] = None,
) -> RenderResult:
    """Render what *state* points at into a ``width`` x ``height`` container.

    The requested depth is clamped to the view's maximum. With an aspect
    ratio cap the depth is then lowered one level at a time until every
    rect, nested ones included, is within the cap; depth 0 is drawn even if
    it still exceeds the cap.
    """
    config = config or TreemapConfig()
    projector = HierarchyProjector(zero_weight=config.zero_weight)
    view = resolve_view(namespaces, state.path)

    max_depth = projector.max_depth(view.target)
    depth = projector.clamp_depth(view.target, state.depth)
    cap = state.max_aspect_ratio

    while True:
        items = projector.project(view.target, depth)
        rects = render(items, width, height, cap, config.nested_padding, config.layout)
        if cap is None or depth == 0 or worst_aspect_ratio(rects) <= cap:
            break
        logger.debug(f"Depth {depth} exceeds aspect ratio cap {cap:.2f}, flattening")
        depth -= 1

    return RenderResult(
        view=view,
        requested_depth=state.depth,
        depth=depth,
        max_depth=max_depth,
        rects=rects,
    )
