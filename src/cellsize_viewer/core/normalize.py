"""Row normalization for single-cell size trajectory tables.

Raw CSV records arrive as string-keyed mappings whose column names vary from
one published dataset to the next. This module resolves each logical field
through an ordered alias table, coerces numeric columns and drops records
whose time or size is not a finite number.
"""

from __future__ import annotations

import csv
import io
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)


class EmptyDatasetError(ValueError):
    """Raised when no record of a dataset survives normalization."""


# Ordered aliases per logical field; the first present, non-empty column wins.
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "time": ("time_units", "time", "Time", "minutes"),
    "size": ("size", "Size", "cell_size", "volume"),
    "cell": ("cell", "Cell", "cell_id"),
    "lineage": ("lineage", "Lineage", "lineage_id"),
    "experiment": ("experiment", "Experiment"),
}

DEFAULT_CELL = "1"
DEFAULT_LINEAGE = "1"
DEFAULT_EXPERIMENT = "default"
DATASET_SUFFIXES = (".csv", ".tsv", ".txt")


@dataclass(frozen=True)
class TrajectoryPoint:
    """One size measurement of one cell at one time."""

    experiment: str
    lineage: str
    cell: str
    time: float
    size: float
    log_size: float = math.nan

    @classmethod
    def create(cls, experiment: str, lineage: str, cell: str, time: float, size: float) -> "TrajectoryPoint":
        return cls(experiment, lineage, cell, time, size, _safe_log(size))


@dataclass(frozen=True)
class NormalizationResult:
    points: List[TrajectoryPoint]
    rejected: int

    @property
    def total(self) -> int:
        return len(self.points) + self.rejected


Record = Union[Mapping[str, Any], TrajectoryPoint]


def _safe_log(size: float) -> float:
    if size > 0 and math.isfinite(size):
        return math.log(size)
    return math.nan


def coerce_number(value: Any) -> float:
    """Convert a loosely typed cell value to float; failures become NaN."""
    if value is None or isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return math.nan
    try:
        return float(text)
    except ValueError:
        return math.nan


def strip_dataset_suffix(name: str) -> str:
    lowered = name.lower()
    for suffix in DATASET_SUFFIXES:
        if lowered.endswith(suffix) and len(name) > len(suffix):
            return name[: -len(suffix)]
    return name


def _lookup(record: Record, aliases: Sequence[str]) -> Optional[Any]:
    for alias in aliases:
        value = record.get(alias)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _identifier(record: Record, field: str, default: str) -> str:
    value = _lookup(record, FIELD_ALIASES[field])
    if value is None:
        return default
    return str(value).strip()


def normalize_record(record: Record) -> Optional[TrajectoryPoint]:
    """Normalize one record, returning ``None`` when it must be rejected."""
    if isinstance(record, TrajectoryPoint):
        if math.isfinite(record.time) and math.isfinite(record.size):
            return record
        return None

    time = coerce_number(_lookup(record, FIELD_ALIASES["time"]))
    size = coerce_number(_lookup(record, FIELD_ALIASES["size"]))
    if not (math.isfinite(time) and math.isfinite(size)):
        return None

    experiment = strip_dataset_suffix(_identifier(record, "experiment", DEFAULT_EXPERIMENT))
    return TrajectoryPoint.create(
        experiment=experiment,
        lineage=_identifier(record, "lineage", DEFAULT_LINEAGE),
        cell=_identifier(record, "cell", DEFAULT_CELL),
        time=time,
        size=size,
    )


def normalize_rows(records: Iterable[Record]) -> NormalizationResult:
    """Normalize a record set into trajectory points.

    Rejected records are only counted. Raises :class:`EmptyDatasetError` when
    none of the records survive.
    """
    points: List[TrajectoryPoint] = []
    rejected = 0
    for record in records:
        point = normalize_record(record)
        if point is None:
            rejected += 1
            continue
        points.append(point)

    if not points:
        raise EmptyDatasetError("No valid size trajectory rows found in dataset.")

    if rejected:
        logger.debug("Rejected %d of %d records with invalid time or size", rejected, rejected + len(points))
    return NormalizationResult(points=points, rejected=rejected)


def parse_csv_text(text: str) -> List[Dict[str, str]]:
    """Parse comma-delimited text with a header line into string records.

    Short rows are padded with empty strings, surplus values are ignored and
    blank lines are skipped.
    """
    stripped = text.lstrip("\ufeff").strip()
    if not stripped:
        return []
    reader = csv.reader(io.StringIO(stripped, newline=""))
    try:
        headers = [header.strip() for header in next(reader)]
    except StopIteration:
        return []

    records: List[Dict[str, str]] = []
    for values in reader:
        if not values or all(not value.strip() for value in values):
            continue
        records.append(
            {header: (values[idx] if idx < len(values) else "") for idx, header in enumerate(headers)}
        )
    return records
