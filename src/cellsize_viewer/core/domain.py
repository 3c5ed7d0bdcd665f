"""Axis extents and tick generation."""

from __future__ import annotations

import math
from typing import Any, Iterable, List, NamedTuple, Optional

import numpy as np

DOMAIN_PADDING_FRACTION = 0.05
DEFAULT_DOMAIN = (0.0, 1.0)


class Domain(NamedTuple):
    min: float
    max: float

    @property
    def span(self) -> float:
        return self.max - self.min

    @property
    def center(self) -> float:
        return (self.min + self.max) / 2.0

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


def _extract(values: Iterable[Any], key: Optional[str]) -> np.ndarray:
    if key is None:
        raw = list(values)
    else:
        raw = [getattr(item, key) if not isinstance(item, dict) else item.get(key) for item in values]
    array = np.asarray([np.nan if value is None else value for value in raw], dtype=np.float64)
    return array[np.isfinite(array)]


def compute_domain(values: Iterable[Any], key: Optional[str] = None) -> Domain:
    """
    Compute a padded ``[min, max]`` extent of finite values.

    Parameters
    ----------
    values:
        Plain numbers, or objects/dicts carrying the value under ``key``.
    key:
        Attribute (or dict key) to read from each item. ``None`` treats
        ``values`` as numbers.

    Returns
    -------
    Domain
        ``(0, 1)`` when no finite value exists, ``(v - 1, v + 1)`` when all
        values are equal, otherwise the raw extent padded by 5% of its span
        on both ends.
    """
    finite = _extract(values, key)
    if finite.size == 0:
        return Domain(*DEFAULT_DOMAIN)
    low = float(finite.min())
    high = float(finite.max())
    if low == high:
        return Domain(low - 1.0, high + 1.0)
    pad = (high - low) * DOMAIN_PADDING_FRACTION
    return Domain(low - pad, high + pad)


def make_ticks(domain: Domain, count: int = 5) -> List[float]:
    """Return ``count`` evenly spaced values from ``domain.min`` to ``domain.max``."""
    low, high = float(domain[0]), float(domain[1])
    if not (math.isfinite(low) and math.isfinite(high)):
        return []
    if low == high or count < 2:
        return [low]
    step = (high - low) / (count - 1)
    return [low + step * idx for idx in range(count)]


def format_tick(value: float) -> str:
    if not math.isfinite(value):
        return ""
    return f"{value:.0f}" if abs(value) >= 100 else f"{value:.2f}"
