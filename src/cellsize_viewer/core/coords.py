"""Data-space to pixel-space mapping for the trajectory plot."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np

from .domain import Domain
from .normalize import TrajectoryPoint
from .viewport import Viewport

Number = Union[float, np.ndarray]


@dataclass(frozen=True)
class PlotArea:
    """Fixed drawing surface with margins around the inner plot region."""

    width: float = 900.0
    height: float = 380.0
    margin_top: float = 20.0
    margin_right: float = 28.0
    margin_bottom: float = 44.0
    margin_left: float = 58.0

    @property
    def inner_width(self) -> float:
        return self.width - self.margin_left - self.margin_right

    @property
    def inner_height(self) -> float:
        return self.height - self.margin_top - self.margin_bottom

    @property
    def x_range(self) -> Tuple[float, float]:
        return (self.margin_left, self.margin_left + self.inner_width)

    @property
    def y_range(self) -> Tuple[float, float]:
        # Inverted: larger data values sit closer to the top edge.
        return (self.margin_top + self.inner_height, self.margin_top)


def to_pixel(value: Number, domain: Sequence[float], pixel_range: Sequence[float]) -> Number:
    """Linearly map ``value`` from ``domain`` onto ``pixel_range``."""
    d0, d1 = domain[0], domain[1]
    r0, r1 = pixel_range[0], pixel_range[1]
    return r0 + (value - d0) / (d1 - d0) * (r1 - r0)


def to_value(pixel: Number, domain: Sequence[float], pixel_range: Sequence[float]) -> Number:
    """Inverse of :func:`to_pixel`."""
    d0, d1 = domain[0], domain[1]
    r0, r1 = pixel_range[0], pixel_range[1]
    return d0 + (pixel - r0) / (r1 - r0) * (d1 - d0)


class CoordinateMapper:
    """Maps (time, size) values through the current viewport onto a plot area."""

    def __init__(self, area: PlotArea, viewport: Viewport) -> None:
        self.area = area
        self.viewport = viewport

    def x_to_pixel(self, value: Number) -> Number:
        return to_pixel(value, self.viewport.x, self.area.x_range)

    def y_to_pixel(self, value: Number) -> Number:
        return to_pixel(value, self.viewport.y, self.area.y_range)

    def pixel_to_x(self, pixel: Number) -> Number:
        return to_value(pixel, self.viewport.x, self.area.x_range)

    def pixel_to_y(self, pixel: Number) -> Number:
        return to_value(pixel, self.viewport.y, self.area.y_range)

    def domain(self, axis: str) -> Domain:
        if axis == "x":
            return self.viewport.x
        if axis == "y":
            return self.viewport.y
        raise ValueError(f"Unknown axis: {axis!r} (expected 'x' or 'y')")

    def polyline(self, points: Sequence[TrajectoryPoint]) -> np.ndarray:
        """Return an ``(n, 2)`` array of pixel coordinates for ``points``."""
        if not points:
            return np.empty((0, 2), dtype=np.float64)
        times = np.fromiter((point.time for point in points), dtype=np.float64, count=len(points))
        sizes = np.fromiter((point.size for point in points), dtype=np.float64, count=len(points))
        return np.column_stack((self.x_to_pixel(times), self.y_to_pixel(sizes)))
