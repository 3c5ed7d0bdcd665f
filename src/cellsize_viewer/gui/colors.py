"""Color utility functions."""

from __future__ import annotations

import colorsys
from typing import Tuple

# Golden-ratio hue stepping keeps neighbouring indices visually distinct.
_HUE_STEP = 0.618033988749895
_SATURATION = 0.65
_VALUE = 0.85


def category_color(index: int, alpha: int = 255) -> Tuple[int, int, int, int]:
    """Return an RGBA tuple for the ``index``-th category (cell or lineage)."""
    hue = (0.55 + index * _HUE_STEP) % 1.0
    r, g, b = colorsys.hsv_to_rgb(hue, _SATURATION, _VALUE)
    return int(r * 255), int(g * 255), int(b * 255), alpha
