"""Per-cell growth summaries (generation time, log-size change, growth rate)."""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List

import numpy as np

from .grouping import group_by_cell
from .normalize import TrajectoryPoint

logger = logging.getLogger(__name__)

STATISTIC_LABELS: Dict[str, str] = {
    "tau": "τ (Generation time)",
    "phi": "φ (Log size change)",
    "lambda": "λ (Growth rate)",
}


@dataclass(frozen=True)
class CellSummary:
    """Summary of one cell's trajectory.

    ``initial_size`` and ``final_size`` are log sizes. ``lambda_`` is NaN when
    ``tau`` is not positive.
    """

    cell: str
    lineage: str
    tau: float
    phi: float
    lambda_: float
    initial_size: float
    final_size: float

    @property
    def is_valid(self) -> bool:
        return math.isfinite(self.lambda_)

    def value(self, name: str) -> float:
        if name == "lambda":
            return self.lambda_
        if name in ("tau", "phi", "initial_size", "final_size"):
            return getattr(self, name)
        raise KeyError(name)


@dataclass(frozen=True)
class StatisticsResult:
    summaries: List[CellSummary]
    skipped: int


def summarize_cell(cell: str, points: List[TrajectoryPoint]) -> CellSummary:
    """Summarize a time-sorted point sequence of at least two points."""
    first, last = points[0], points[-1]
    tau = last.time - first.time
    phi = last.log_size - first.log_size
    lambda_ = phi / tau if tau > 0 else math.nan
    return CellSummary(
        cell=cell,
        lineage=first.lineage,
        tau=tau,
        phi=phi,
        lambda_=lambda_,
        initial_size=first.log_size,
        final_size=last.log_size,
    )


def derive_cell_summaries(points: Iterable[TrajectoryPoint]) -> StatisticsResult:
    """Summarize every cell of ``points``.

    Cells are identified by (lineage, cell) so that cell ids reused across
    lineages are not merged. Cells with fewer than two points are skipped.
    """
    by_lineage: Dict[str, List[TrajectoryPoint]] = {}
    for point in points:
        by_lineage.setdefault(point.lineage, []).append(point)

    summaries: List[CellSummary] = []
    skipped = 0
    for lineage, lineage_points in by_lineage.items():
        for cell, cell_points in group_by_cell(lineage_points).items():
            if len(cell_points) < 2:
                skipped += 1
                continue
            summary = summarize_cell(cell, cell_points)
            if summary.tau <= 0:
                logger.debug(
                    "Cell %s (lineage %s) has non-positive generation time %.6g", cell, lineage, summary.tau
                )
            summaries.append(summary)

    logger.debug("Computed statistics for %d cells, skipped %d", len(summaries), skipped)
    return StatisticsResult(summaries=summaries, skipped=skipped)


def summary_values(summaries: Iterable[CellSummary], name: str) -> np.ndarray:
    return np.asarray([summary.value(name) for summary in summaries], dtype=np.float64)


def lineage_counts(summaries: Iterable[CellSummary]) -> Dict[str, int]:
    return dict(Counter(summary.lineage for summary in summaries))
