"""Grouping of trajectory points into selectable series and per-cell traces."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, NamedTuple, Sequence, Tuple

from .normalize import TrajectoryPoint


class SeriesKey(NamedTuple):
    experiment: str
    lineage: str


@dataclass(frozen=True)
class SeriesEntry:
    """A selectable (experiment, lineage) combination."""

    key: SeriesKey
    representative: TrajectoryPoint
    point_count: int

    @property
    def label(self) -> str:
        return f"{self.key.experiment} | lineage {self.key.lineage}"


def lineage_sort_key(lineage: str) -> Tuple[int, float]:
    """Numeric lineages first, in ascending order; everything else after.

    Only plain finite decimals count as numeric: ``"inf"``, ``"nan"`` and
    digit-grouped values such as ``"1_0"`` sort with the non-numeric ids.
    """
    text = str(lineage).strip()
    if "_" in text:
        return (1, 0.0)
    try:
        value = float(text)
    except ValueError:
        return (1, 0.0)
    if not math.isfinite(value):
        return (1, 0.0)
    return (0, value)


def lineage_display_key(lineage: str) -> Tuple[int, float, str]:
    """:func:`lineage_sort_key` with the id itself as the final tie-break."""
    return lineage_sort_key(lineage) + (str(lineage),)


def enumerate_series(points: Iterable[TrajectoryPoint]) -> List[SeriesEntry]:
    """Return the distinct series ordered by experiment, then lineage.

    Ties (equal experiment and equal numeric lineage value, or two non-numeric
    lineages) keep the order in which the series were first seen.
    """
    first_seen: Dict[SeriesKey, int] = {}
    representatives: Dict[SeriesKey, TrajectoryPoint] = {}
    counts: Dict[SeriesKey, int] = {}
    for point in points:
        key = SeriesKey(point.experiment, point.lineage)
        if key not in first_seen:
            first_seen[key] = len(first_seen)
            representatives[key] = point
            counts[key] = 0
        counts[key] += 1

    ordered = sorted(
        first_seen,
        key=lambda key: (key.experiment, lineage_sort_key(key.lineage), first_seen[key]),
    )
    return [SeriesEntry(key, representatives[key], counts[key]) for key in ordered]


def experiments(points: Iterable[TrajectoryPoint]) -> List[str]:
    return sorted({point.experiment for point in points})


def series_points(points: Iterable[TrajectoryPoint], key: SeriesKey) -> List[TrajectoryPoint]:
    return [
        point
        for point in points
        if point.experiment == key.experiment and point.lineage == key.lineage
    ]


def experiment_points(points: Iterable[TrajectoryPoint], experiment: str) -> List[TrajectoryPoint]:
    return [point for point in points if point.experiment == experiment]


def sort_by_time(points: Sequence[TrajectoryPoint]) -> List[TrajectoryPoint]:
    # sorted() is stable: equal times keep input order.
    return sorted(points, key=lambda point: point.time)


def group_by_cell(points: Iterable[TrajectoryPoint]) -> Dict[str, List[TrajectoryPoint]]:
    """Group points by cell id, each group sorted by time.

    Cells appear in the order of their first point in ``points``.
    """
    groups: Dict[str, List[TrajectoryPoint]] = {}
    for point in points:
        groups.setdefault(point.cell, []).append(point)
    return {cell: sort_by_time(cell_points) for cell, cell_points in groups.items()}
