"""Squarified treemap layout.

Bruls, Huizing & van Wijk (2000), "Squarified Treemaps". Items are sorted
by weight descending and packed into strips ("rows") along the shorter side
of the space that remains. An item joins the current row while that does not
make the row's worst aspect ratio any worse:

    worst(R, w) = max(w² · r⁺ / s², s² / (w² · r⁻))

where r⁺ and r⁻ are the largest and smallest weights in R and s is their
sum. Weights are first normalized so they sum to the container area, which
makes a row's thickness simply s / w.

Degenerate input never raises: items that cannot be given a valid rectangle
are left out of the result.
"""

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..config import DEFAULT_THRESHOLDS, LayoutThresholds
from ..logging_config import get_logger
from .models import LayoutItem, PlacedRect
from .normalize import normalize_weights

logger = get_logger(__name__)


def worst_ratio(row: Sequence[float], w: float) -> float:
    """Worst aspect ratio of *row* laid along a side of length *w*.

    Lower is better; 1.0 means every rect in the row is square.
    """
    if not row or w <= 0:
        return math.inf
    s = sum(row)
    r_min = min(row)
    if s <= 0 or r_min <= 0:
        return math.inf
    w2 = w * w
    return max((w2 * max(row)) / (s * s), (s * s) / (w2 * r_min))


def distribute(weights: Sequence[float], length: float, min_share: float) -> list[float]:
    """Split *length* among *weights* proportionally, with a floor per item.

    Each piece gets at least ``min_share * length``. When the floors push the
    total past *length* all pieces are scaled down so they fit exactly.
    """
    total = sum(weights)
    if total <= 0 or length <= 0:
        return [0.0] * len(weights)
    floor = length * min_share
    pieces = [max(length * wt / total, floor) for wt in weights]
    spanned = sum(pieces)
    if spanned > length:
        scale = length / spanned
        pieces = [p * scale for p in pieces]
    return pieces


@dataclass
class _LayoutState:
    """Remaining free rectangle plus rects placed so far, for one layout call."""

    x: float
    y: float
    w: float
    h: float
    placed: list[PlacedRect] = field(default_factory=list)

    def shortest_side(self) -> float:
        return min(self.w, self.h)

    def is_exhausted(self) -> bool:
        return not (self.w > 0 and self.h > 0)


def _place_row(
    state: _LayoutState,
    row: list[LayoutItem],
    w: float,
    thresholds: LayoutThresholds,
) -> None:
    """Lay *row* along the shorter side of the free space and shrink it.

    Rows too thin to see, or too thick to fit what is left, are dropped.
    """
    s = sum(item.weight for item in row)
    if not row or w <= 0 or s <= 0 or state.is_exhausted():
        return

    thickness = s / w
    horizontal = state.w <= state.h
    room = state.h if horizontal else state.w

    if not math.isfinite(thickness) or thickness < thresholds.min_thickness:
        logger.debug(f"Dropping row of {len(row)} items: thickness {thickness:.4g} too small")
        return
    if thickness > room + thresholds.fit_tolerance:
        logger.debug(f"Dropping row of {len(row)} items: thickness {thickness:.4g} > {room:.4g}")
        return

    lengths = distribute([item.weight for item in row], w, thresholds.min_share(len(row)))

    cursor = state.x if horizontal else state.y
    for item, length in zip(row, lengths):
        if not (math.isfinite(length) and length > 0):
            continue
        if horizontal:
            state.placed.append(PlacedRect(cursor, state.y, length, thickness, item))
        else:
            state.placed.append(PlacedRect(state.x, cursor, thickness, length, item))
        cursor += length

    # Clamp so tolerance overshoot never leaves a negative remainder
    if horizontal:
        state.y += thickness
        state.h = max(0.0, state.h - thickness)
    else:
        state.x += thickness
        state.w = max(0.0, state.w - thickness)


def _squarify_rows(items: list[LayoutItem], state: _LayoutState, thresholds: LayoutThresholds) -> None:
    row: list[LayoutItem] = []
    index = 0

    while index < len(items):
        if state.is_exhausted():
            logger.debug(f"No space left for {len(items) - index} items")
            return

        w = state.shortest_side()
        candidate = items[index]
        row_weights = [item.weight for item in row]

        if not row or worst_ratio(row_weights, w) >= worst_ratio(row_weights + [candidate.weight], w):
            row.append(candidate)
            index += 1
        else:
            _place_row(state, row, w, thresholds)
            row = []

    if row and not state.is_exhausted():
        _place_row(state, row, state.shortest_side(), thresholds)


def _split_pair(
    pair: list[LayoutItem], width: float, height: float, thresholds: LayoutThresholds
) -> list[PlacedRect]:
    """Two items: cut the container across its longer axis in proportion to weight."""
    first, second = pair
    along_width = width >= height
    length = width if along_width else height
    a, b = distribute([first.weight, second.weight], length, thresholds.min_share(2))

    if along_width:
        return [
            PlacedRect(0.0, 0.0, a, height, first),
            PlacedRect(a, 0.0, b, height, second),
        ]
    return [
        PlacedRect(0.0, 0.0, width, a, first),
        PlacedRect(0.0, a, width, b, second),
    ]


def _is_drawable(rect: PlacedRect, min_dimension: float) -> bool:
    return (
        all(math.isfinite(v) for v in (rect.x, rect.y, rect.w, rect.h))
        and rect.w >= min_dimension
        and rect.h >= min_dimension
    )


def squarify(
    items: Sequence[LayoutItem],
    width: float,
    height: float,
    max_aspect_ratio: Optional[float] = None,
    thresholds: LayoutThresholds = DEFAULT_THRESHOLDS,
) -> list[PlacedRect]:
    """Lay out *items* inside a ``width`` x ``height`` rectangle at the origin.

    Args:
        items: Items to place; weights need not be normalized
        width: Container width
        height: Container height
        max_aspect_ratio: Advisory cap, accepted for signature parity with
            the renderer. It never causes items to be dropped; callers honour
            it by choosing how many levels to flatten
            (see :func:`~coverage_treemap.visualization.render.render_view`).
        thresholds: Guards against degenerate rectangles

    Returns:
        One rect per surviving item, largest first. Rects never overlap and
        together cover the container, less whatever was filtered out.
    """
    if not items:
        return []
    if not (math.isfinite(width) and math.isfinite(height)) or width <= 0 or height <= 0:
        return []

    usable = [item for item in items if math.isfinite(item.weight) and item.weight >= 0]
    normalized = normalize_weights(usable, width * height)
    valid = [
        item
        for item in normalized
        if math.isfinite(item.weight) and item.weight >= thresholds.min_area
    ]
    if len(valid) < len(items):
        logger.debug(f"Dropped {len(items) - len(valid)} of {len(items)} items below minimum area")
    if not valid:
        return []

    # Descending weight is required by the algorithm; the id tiebreak makes
    # the result independent of input order.
    ordered = sorted(valid, key=lambda item: (-item.weight, str(item.id)))

    if len(ordered) == 1:
        placed = [PlacedRect(0.0, 0.0, width, height, ordered[0])]
    elif len(ordered) == 2:
        placed = _split_pair(ordered, width, height, thresholds)
    else:
        state = _LayoutState(0.0, 0.0, width, height)
        _squarify_rows(ordered, state, thresholds)
        placed = state.placed

    return [rect for rect in placed if _is_drawable(rect, thresholds.min_dimension)]


def worst_aspect_ratio(rects: Sequence[PlacedRect]) -> float:
    """Largest aspect ratio among *rects* and all their nested rects (1.0 if none)."""
    worst = 1.0
    for rect in rects:
        for r in rect.iter_all():
            worst = max(worst, r.aspect_ratio)
    return worst
