"""Rescale item weights so they sum to a target area."""

from dataclasses import replace
from typing import Sequence

import numpy as np

from .models import LayoutItem


def normalize_weights(items: Sequence[LayoutItem], total_area: float) -> list[LayoutItem]:
    """Scale every weight by ``total_area / sum(weights)``.

    Relative proportions are preserved. When the weights sum to zero (or
    are unusable) every output weight is zero and the caller should treat
    the layout as empty. Inputs are not modified.
    """
    if not items:
        return []

    weights = np.array([item.weight for item in items], dtype=float)
    total = float(weights.sum())

    if total == 0 or not np.isfinite(total):
        scaled = np.zeros_like(weights)
    else:
        scaled = weights * (total_area / total)

    return [replace(item, weight=float(w)) for item, w in zip(items, scaled)]
