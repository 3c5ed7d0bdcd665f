"""Viewer session: loaded dataset, selected series and viewport.

One :class:`ViewerEngine` owns all mutable state of a viewer. Renderers read
it through the query methods and subscribe to change notifications; user
interaction reaches it through the mutation methods. Every load replaces the
dataset, the series list and the viewport in one step before listeners run.

Loads may complete out of order when the fetch runs elsewhere (a worker
thread in the GUI). Each load is tagged with a token from
:meth:`ViewerEngine.request_load`; results carrying an older token are
discarded.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np

from .config import PlotConfig
from .core.coords import CoordinateMapper, PlotArea
from .core.domain import Domain, make_ticks
from .core.grouping import (
    SeriesEntry,
    SeriesKey,
    enumerate_series,
    experiment_points,
    group_by_cell,
    series_points,
)
from .core.normalize import EmptyDatasetError, TrajectoryPoint, normalize_rows, parse_csv_text
from .core.statistics import StatisticsResult, derive_cell_summaries
from .core.viewport import Viewport
from .fetch import FetchError, load_text

logger = logging.getLogger(__name__)

LoadFunction = Callable[[str], str]
Listener = Callable[["ViewerEngine"], None]

MIN_POLYLINE_POINTS = 2
INITIAL_STATUS = "Select a dataset to begin visualization"


@dataclass(frozen=True)
class CellTrace:
    """Visible, time-sorted points of one cell and their pixel coordinates."""

    cell: str
    points: List[TrajectoryPoint]
    pixels: np.ndarray


@dataclass(frozen=True)
class VisibleSeries:
    key: SeriesKey
    x: Domain
    y: Domain
    cells: List[CellTrace]
    point_count: int
    visible_point_count: int


@dataclass(frozen=True)
class LoadedDataset:
    source: str
    points: List[TrajectoryPoint]
    series: List[SeriesEntry]
    rejected: int


@dataclass
class _Selection:
    index: int
    entry: SeriesEntry
    points: List[TrajectoryPoint] = field(default_factory=list)


class ViewerEngine:
    """Interactive trajectory viewport engine."""

    def __init__(self, plot: Optional[PlotConfig] = None, loader: Optional[LoadFunction] = None) -> None:
        self.plot = plot or PlotConfig()
        self.area: PlotArea = self.plot.plot_area()
        self._loader: LoadFunction = loader or load_text
        self._viewport = Viewport(min_span_fraction=self.plot.min_span_fraction)
        self._mapper = CoordinateMapper(self.area, self._viewport)
        self._dataset: Optional[LoadedDataset] = None
        self._selection: Optional[_Selection] = None
        self._status = INITIAL_STATUS
        self._load_token = 0
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def dataset(self) -> Optional[LoadedDataset]:
        return self._dataset

    @property
    def has_data(self) -> bool:
        return self._dataset is not None

    @property
    def series(self) -> List[SeriesEntry]:
        return list(self._dataset.series) if self._dataset else []

    @property
    def selected_index(self) -> Optional[int]:
        return self._selection.index if self._selection else None

    @property
    def selected_key(self) -> Optional[SeriesKey]:
        return self._selection.entry.key if self._selection else None

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def mapper(self) -> CoordinateMapper:
        return self._mapper

    @property
    def load_function(self) -> LoadFunction:
        """The text loader used by :meth:`load_series` (callable from any thread)."""
        return self._loader

    def get_status_message(self) -> str:
        return self._status

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def request_load(self, source: str) -> int:
        """Start a load of ``source`` and return the token identifying it."""
        self._load_token += 1
        self._status = "Loading trajectories..."
        logger.debug("Load %d requested: %s", self._load_token, source)
        self._notify()
        return self._load_token

    def is_current(self, token: int) -> bool:
        return token == self._load_token

    def complete_load(self, token: int, text: str, source: str = "") -> bool:
        """Install the dataset parsed from ``text`` if ``token`` is still current."""
        if not self.is_current(token):
            logger.debug("Discarding stale load %d (current %d)", token, self._load_token)
            return False

        try:
            result = normalize_rows(parse_csv_text(text))
        except (EmptyDatasetError, csv.Error) as exc:
            logger.warning("Dataset %s rejected: %s", source or "<text>", exc)
            self._status = str(exc)
            self._notify()
            return False

        series = enumerate_series(result.points)
        self._dataset = LoadedDataset(
            source=source,
            points=result.points,
            series=series,
            rejected=result.rejected,
        )
        self._apply_selection(0)
        self._status = (
            f"Loaded {len(result.points)} data points "
            f"({result.rejected} invalid rows filtered out)"
        )
        if result.rejected:
            logger.warning("%d rows with invalid time or size dropped from %s", result.rejected, source or "<text>")
        logger.info("Loaded %d points in %d series from %s", len(result.points), len(series), source or "<text>")
        self._notify()
        return True

    def fail_load(self, token: int, error: BaseException) -> bool:
        """Report a failed fetch; state from the previous load is kept."""
        if not self.is_current(token):
            logger.debug("Ignoring failure of stale load %d: %s", token, error)
            return False
        logger.error("Failed to load dataset: %s", error)
        self._status = f"Failed to load dataset: {error}"
        self._notify()
        return False

    def load_series(self, source: str) -> bool:
        """Fetch, normalize and install ``source``. Returns ``True`` on success."""
        token = self.request_load(source)
        try:
            text = self._loader(source)
        except Exception as exc:  # noqa: BLE001
            # Any loader failure leaves the previous dataset in place.
            if not isinstance(exc, FetchError):
                logger.debug("Loader raised %s for %s", type(exc).__name__, source)
            return self.fail_load(token, exc)
        return self.complete_load(token, text, source=source)

    # ------------------------------------------------------------------
    # Selection and viewport interaction
    # ------------------------------------------------------------------
    def select_series(self, index: int) -> None:
        if self._dataset is None:
            raise IndexError("No dataset loaded")
        self._apply_selection(index)
        self._status = self._series_status()
        self._notify()

    def _apply_selection(self, index: int) -> None:
        series = self._dataset.series if self._dataset else []
        if not 0 <= index < len(series):
            raise IndexError(f"Series index {index} out of range (0..{len(series) - 1})")
        entry = series[index]
        points = series_points(self._dataset.points, entry.key)
        self._selection = _Selection(index=index, entry=entry, points=points)
        self._viewport.select(points)

    def _series_status(self) -> str:
        if self._selection is None:
            return "No lineages available for this dataset."
        key = self._selection.entry.key
        return f"{key.experiment} | lineage {key.lineage} | {len(self._selection.points)} points"

    def _after_view_change(self, changed: bool) -> bool:
        if changed:
            self._notify()
        return changed

    def zoom(self, factor: float) -> bool:
        if self._selection is None:
            return False
        return self._after_view_change(self._viewport.zoom(factor))

    def zoom_in(self) -> bool:
        return self.zoom(self.plot.zoom_in_factor)

    def zoom_out(self) -> bool:
        return self.zoom(self.plot.zoom_out_factor)

    def pan(self, delta_pixels: float) -> bool:
        if self._selection is None:
            return False
        return self._after_view_change(self._viewport.pan(delta_pixels, self.area.inner_width))

    def scroll(self, delta_x: float, delta_y: float, shift: bool = False) -> bool:
        """Wheel gesture: horizontal (or shifted) scrolling pans, vertical zooms."""
        horizontal = abs(delta_x) > abs(delta_y)
        if horizontal or shift:
            return self.pan(delta_x if horizontal else delta_y)
        if delta_y == 0:
            return False
        return self.zoom(self.plot.wheel_zoom_in if delta_y < 0 else self.plot.wheel_zoom_out)

    def reset_zoom(self) -> None:
        if self._selection is None:
            return
        self._viewport.reset()
        self._status = self._series_status()
        self._notify()

    def set_viewport(self, x_min: float, x_max: float) -> bool:
        if self._selection is None:
            return False
        return self._after_view_change(self._viewport.set_window(x_min, x_max))

    # ------------------------------------------------------------------
    # Queries for renderers
    # ------------------------------------------------------------------
    def get_ticks(self, axis: str) -> List[float]:
        domain = self._mapper.domain(axis)
        if self._selection is None:
            return []
        return make_ticks(domain, self.plot.tick_count)

    def to_pixel(self, value, axis: str):
        if axis == "x":
            return self._mapper.x_to_pixel(value)
        if axis == "y":
            return self._mapper.y_to_pixel(value)
        raise ValueError(f"Unknown axis: {axis!r} (expected 'x' or 'y')")

    def to_value(self, pixel, axis: str):
        if axis == "x":
            return self._mapper.pixel_to_x(pixel)
        if axis == "y":
            return self._mapper.pixel_to_y(pixel)
        raise ValueError(f"Unknown axis: {axis!r} (expected 'x' or 'y')")

    def get_visible_series(self) -> Optional[VisibleSeries]:
        """Per-cell polylines of the points inside the current X window."""
        if self._selection is None:
            return None
        x_window = self._viewport.x
        traces: List[CellTrace] = []
        visible_count = 0
        for cell, cell_points in group_by_cell(self._selection.points).items():
            visible = [point for point in cell_points if x_window.min <= point.time <= x_window.max]
            visible_count += len(visible)
            if len(visible) < MIN_POLYLINE_POINTS:
                continue
            traces.append(CellTrace(cell=cell, points=visible, pixels=self._mapper.polyline(visible)))
        return VisibleSeries(
            key=self._selection.entry.key,
            x=self._viewport.x,
            y=self._viewport.y,
            cells=traces,
            point_count=len(self._selection.points),
            visible_point_count=visible_count,
        )

    def cell_statistics(self, experiment: Optional[str] = None) -> StatisticsResult:
        """Cell summaries for ``experiment`` (default: the selected series' experiment)."""
        if self._dataset is None:
            return StatisticsResult(summaries=[], skipped=0)
        if experiment is None:
            if self._selection is None:
                return StatisticsResult(summaries=[], skipped=0)
            experiment = self._selection.entry.key.experiment
        return derive_cell_summaries(experiment_points(self._dataset.points, experiment))

    def zoom_info(self) -> str:
        if self._selection is None:
            return ""
        x_window = self._viewport.x
        percentage = self._viewport.visible_fraction() * 100.0
        return f"Showing {percentage:.1f}% of time range ({x_window.min:.2f} - {x_window.max:.2f})"
