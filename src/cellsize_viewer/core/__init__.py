"""Trajectory viewport engine building blocks."""

from .coords import CoordinateMapper, PlotArea, to_pixel, to_value
from .domain import Domain, compute_domain, format_tick, make_ticks
from .grouping import (
    SeriesEntry,
    SeriesKey,
    enumerate_series,
    group_by_cell,
    lineage_display_key,
    lineage_sort_key,
    series_points,
)
from .normalize import (
    EmptyDatasetError,
    FIELD_ALIASES,
    NormalizationResult,
    TrajectoryPoint,
    normalize_rows,
    parse_csv_text,
)
from .statistics import CellSummary, StatisticsResult, derive_cell_summaries
from .viewport import Viewport

__all__ = [
    "CoordinateMapper",
    "PlotArea",
    "to_pixel",
    "to_value",
    "Domain",
    "compute_domain",
    "format_tick",
    "make_ticks",
    "SeriesEntry",
    "SeriesKey",
    "enumerate_series",
    "group_by_cell",
    "lineage_display_key",
    "lineage_sort_key",
    "series_points",
    "EmptyDatasetError",
    "FIELD_ALIASES",
    "NormalizationResult",
    "TrajectoryPoint",
    "normalize_rows",
    "parse_csv_text",
    "CellSummary",
    "StatisticsResult",
    "derive_cell_summaries",
    "Viewport",
]
