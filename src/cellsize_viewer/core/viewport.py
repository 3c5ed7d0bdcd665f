"""Zoom/pan state over the time axis of one selected series.

The X window is bounded by the padded time extent of the series (the base
extent). Pan and drag-resize keep the window inside that extent; zoom-out
scales around the window centre without clamping, so the window may grow past
the base extent until the next pan or reset. The Y window is derived from the
points inside the current X window after every change.
"""

from __future__ import annotations

import logging
import math
from typing import List, Sequence

import numpy as np

from .domain import Domain, compute_domain
from .normalize import TrajectoryPoint

logger = logging.getLogger(__name__)

DEFAULT_MIN_SPAN_FRACTION = 1e-3


def _min_sample_spacing(times: np.ndarray) -> float:
    unique = np.unique(times[np.isfinite(times)])
    if unique.size < 2:
        return 0.0
    return float(np.diff(unique).min())


class Viewport:
    """Viewport state for the currently selected series."""

    def __init__(self, min_span_fraction: float = DEFAULT_MIN_SPAN_FRACTION) -> None:
        if min_span_fraction <= 0 or min_span_fraction > 1:
            raise ValueError("min_span_fraction must be in (0, 1]")
        self._min_span_fraction = min_span_fraction
        self._points: List[TrajectoryPoint] = []
        self._times = np.empty(0, dtype=np.float64)
        self._sizes = np.empty(0, dtype=np.float64)
        self._min_spacing = 0.0
        self.base_x = Domain(0.0, 1.0)
        self.x = Domain(0.0, 1.0)
        self.y = Domain(0.0, 1.0)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def points(self) -> List[TrajectoryPoint]:
        return list(self._points)

    @property
    def min_span(self) -> float:
        """Smallest X span a zoom-in or drag-resize may produce."""
        base_span = self.base_x.span
        floor = max(self._min_span_fraction * base_span, self._min_spacing)
        return min(floor, base_span)

    def visible_points(self) -> List[TrajectoryPoint]:
        return [point for point in self._points if self.x.min <= point.time <= self.x.max]

    def visible_fraction(self) -> float:
        base_span = self.base_x.span
        if base_span <= 0:
            return 1.0
        return self.x.span / base_span

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def select(self, points: Sequence[TrajectoryPoint]) -> None:
        self._points = list(points)
        self._times = np.asarray([point.time for point in self._points], dtype=np.float64)
        self._sizes = np.asarray([point.size for point in self._points], dtype=np.float64)
        self._min_spacing = _min_sample_spacing(self._times)
        self.base_x = compute_domain(self._times)
        self.reset()

    def reset(self) -> None:
        self.x = Domain(self.base_x.min, self.base_x.max)
        self._update_y()

    def zoom(self, factor: float) -> bool:
        """Scale the X window around its centre.

        ``factor`` < 1 zooms in, > 1 zooms out. Returns ``False`` when a
        zoom-in is refused because the span would fall below :attr:`min_span`.
        """
        if not math.isfinite(factor) or factor <= 0:
            raise ValueError(f"Zoom factor must be a positive finite number, got {factor!r}")
        center = self.x.center
        half = self.x.span * factor / 2.0
        if factor < 1 and 2.0 * half < self.min_span:
            logger.debug("Zoom refused: span %.6g below floor %.6g", 2.0 * half, self.min_span)
            return False
        self.x = Domain(center - half, center + half)
        self._update_y()
        return True

    def pan(self, delta_pixels: float, inner_pixel_width: float) -> bool:
        """Translate the X window by a pixel delta, clamped to the base extent."""
        base_span = self.base_x.span
        if not math.isfinite(delta_pixels) or inner_pixel_width <= 0 or base_span <= 0:
            return False

        span = self.x.span
        shift = delta_pixels / inner_pixel_width * span
        next_min = self.x.min + shift
        next_max = self.x.max + shift

        if next_min < self.base_x.min:
            next_min = self.base_x.min
            next_max = next_min + span
        if next_max > self.base_x.max:
            next_max = self.base_x.max
            next_min = next_max - span

        changed = (next_min, next_max) != tuple(self.x)
        self.x = Domain(next_min, next_max)
        self._update_y()
        return changed

    def set_window(self, x_min: float, x_max: float) -> bool:
        """Set the X window directly, as a drag handle does.

        The window is ordered and clipped to the base extent. Returns ``False``
        (state unchanged) when the result would be narrower than
        :attr:`min_span`.
        """
        if not (math.isfinite(x_min) and math.isfinite(x_max)):
            return False
        low, high = sorted((x_min, x_max))
        low = max(low, self.base_x.min)
        high = min(high, self.base_x.max)
        if high - low < self.min_span:
            return False
        self.x = Domain(low, high)
        self._update_y()
        return True

    # ------------------------------------------------------------------
    def _update_y(self) -> None:
        if self._times.size == 0:
            self.y = compute_domain(self._sizes)
            return
        visible = (self._times >= self.x.min) & (self._times <= self.x.max)
        if visible.any():
            self.y = compute_domain(self._sizes[visible])
        else:
            self.y = compute_domain(self._sizes)
