"""Trajectory and statistics plot widgets."""

from __future__ import annotations

from typing import List, Optional

import numpy as np
import pyqtgraph as pg
from PySide6.QtCore import Qt

from ..core.domain import format_tick
from ..core.grouping import lineage_display_key
from ..core.statistics import STATISTIC_LABELS, CellSummary, summary_values
from ..engine import ViewerEngine
from .colors import category_color

AXIS_COLOR = (88, 115, 112)
HANDLE_COLOR = (200, 200, 200)
TICK_LENGTH = 6
KEY_PAN_PIXELS = 40.0


class TrajectoryPlotWidget(pg.PlotWidget):
    """Draws the engine's visible series in plot-area pixel space.

    The view box is pinned to the configured plot area, so every item is
    positioned with the engine's own coordinate mapping. pyqtgraph's mouse
    zoom/pan is disabled; wheel and keyboard gestures are forwarded to the
    engine instead.
    """

    def __init__(self, engine: ViewerEngine, time_units: str = "units", size_units: str = "units"):
        super().__init__()
        self.engine = engine
        self.time_units = time_units
        self.size_units = size_units
        self.setBackground(None)

        area = engine.area
        plot_item = self.getPlotItem()
        plot_item.hideAxis("left")
        plot_item.hideAxis("bottom")
        plot_item.setMouseEnabled(x=False, y=False)
        plot_item.hideButtons()
        self._view_box = plot_item.getViewBox()
        self._view_box.invertY(True)
        self._view_box.setRange(xRange=(0, area.width), yRange=(0, area.height), padding=0)
        self._view_box.setMenuEnabled(False)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

        self._items: List = []  # Track all drawn items for cleanup
        self._handles: List[pg.InfiniteLine] = []

    # ------------------------------------------------------------------
    def set_units(self, time_units: str, size_units: str) -> None:
        self.time_units = time_units
        self.size_units = size_units

    def update_from_engine(self, engine: Optional[ViewerEngine] = None) -> None:
        engine = engine or self.engine
        plot = self.getPlotItem()
        for item in self._items:
            plot.removeItem(item)
        self._items.clear()
        for handle in self._handles:
            plot.removeItem(handle)
        self._handles.clear()

        visible = engine.get_visible_series()
        if visible is None:
            return

        self._draw_axes(engine)
        for idx, trace in enumerate(visible.cells):
            curve = pg.PlotCurveItem(
                trace.pixels[:, 0],
                trace.pixels[:, 1],
                pen=pg.mkPen(color=category_color(idx), width=2),
            )
            curve.setToolTip(f"Cell {trace.cell} ({len(trace.points)} points)")
            self._add(curve)
        self._create_handles(engine)

    def _add(self, item) -> None:
        self.getPlotItem().addItem(item)
        self._items.append(item)

    def _draw_axes(self, engine: ViewerEngine) -> None:
        area = engine.area
        left, right = area.x_range
        bottom, top = area.y_range
        pen = pg.mkPen(color=AXIS_COLOR, width=1)

        self._add(pg.PlotCurveItem([left, right], [bottom, bottom], pen=pen))
        self._add(pg.PlotCurveItem([left, left], [top, bottom], pen=pen))

        for tick in engine.get_ticks("x"):
            px = float(engine.to_pixel(tick, "x"))
            self._add(pg.PlotCurveItem([px, px], [bottom, bottom + TICK_LENGTH], pen=pen))
            label = pg.TextItem(format_tick(tick), color=AXIS_COLOR, anchor=(0.5, 0.0))
            label.setPos(px, bottom + TICK_LENGTH + 2)
            self._add(label)

        for tick in engine.get_ticks("y"):
            py = float(engine.to_pixel(tick, "y"))
            self._add(pg.PlotCurveItem([left - TICK_LENGTH, left], [py, py], pen=pen))
            label = pg.TextItem(format_tick(tick), color=AXIS_COLOR, anchor=(1.0, 0.5))
            label.setPos(left - TICK_LENGTH - 2, py)
            self._add(label)

        x_label = pg.TextItem(f"Time ({self.time_units})", color=AXIS_COLOR, anchor=(0.5, 1.0))
        x_label.setPos(left + area.inner_width / 2, area.height)
        self._add(x_label)
        y_label = pg.TextItem(f"Size ({self.size_units})", color=AXIS_COLOR, anchor=(0.5, 0.0), angle=90)
        y_label.setPos(0, area.margin_top + area.inner_height / 2)
        self._add(y_label)

    def _create_handles(self, engine: ViewerEngine) -> None:
        """Two draggable lines; releasing one zooms to the region between them."""
        left, right = engine.area.x_range
        inset = (right - left) * 0.1
        for pos in (left + inset, right - inset):
            handle = pg.InfiniteLine(
                pos=pos,
                angle=90,
                movable=True,
                bounds=[left, right],
                pen=pg.mkPen(color=HANDLE_COLOR, width=2, style=Qt.PenStyle.DashLine),
            )
            handle.setZValue(100)
            handle.sigPositionChangeFinished.connect(self._on_handle_released)
            self.getPlotItem().addItem(handle)
            self._handles.append(handle)

    def _on_handle_released(self, _line=None) -> None:
        if len(self._handles) != 2:
            return
        left_px, right_px = sorted(handle.value() for handle in self._handles)
        x_min = float(self.engine.to_value(left_px, "x"))
        x_max = float(self.engine.to_value(right_px, "x"))
        if not self.engine.set_viewport(x_min, x_max):
            # Refused (window too narrow): redraw to put the handles back.
            self.update_from_engine()

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------
    def wheelEvent(self, event) -> None:  # type: ignore[override]
        angle = event.angleDelta()
        shift = bool(event.modifiers() & Qt.KeyboardModifier.ShiftModifier)
        # Qt reports positive deltas when scrolling away from the user.
        self.engine.scroll(-float(angle.x()), -float(angle.y()), shift=shift)
        event.accept()

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        key = event.key()
        if key == Qt.Key.Key_Left:
            self.engine.pan(-KEY_PAN_PIXELS)
        elif key == Qt.Key.Key_Right:
            self.engine.pan(KEY_PAN_PIXELS)
        elif key in (Qt.Key.Key_Plus, Qt.Key.Key_Equal):
            self.engine.zoom_in()
        elif key == Qt.Key.Key_Minus:
            self.engine.zoom_out()
        elif key == Qt.Key.Key_0:
            self.engine.reset_zoom()
        else:
            super().keyPressEvent(event)
            return
        event.accept()


class StatisticsPlotWidget(pg.PlotWidget):
    """Scatter plot of per-cell summaries, colored by lineage."""

    def __init__(self):
        super().__init__()
        self.setBackground(None)
        self._scatter = pg.ScatterPlotItem(size=8, pen=None)
        self.getPlotItem().addItem(self._scatter)
        self.getPlotItem().showGrid(x=True, y=True, alpha=0.2)

    def update_summaries(self, summaries: List[CellSummary], x_name: str, y_name: str) -> int:
        """Plot the finite (x, y) pairs; returns how many points were drawn."""
        plot = self.getPlotItem()
        plot.setLabel("bottom", STATISTIC_LABELS.get(x_name, x_name))
        plot.setLabel("left", STATISTIC_LABELS.get(y_name, y_name))
        if not summaries:
            self._scatter.setData([])
            return 0

        xs = summary_values(summaries, x_name)
        ys = summary_values(summaries, y_name)
        finite = np.isfinite(xs) & np.isfinite(ys)
        lineages = sorted({summary.lineage for summary in summaries}, key=lineage_display_key)
        color_index = {lineage: idx for idx, lineage in enumerate(lineages)}

        spots = [
            {
                "pos": (float(xs[idx]), float(ys[idx])),
                "brush": pg.mkBrush(*category_color(color_index[summary.lineage], alpha=180)),
                "data": f"Cell {summary.cell} (Lineage {summary.lineage})",
            }
            for idx, summary in enumerate(summaries)
            if finite[idx]
        ]
        self._scatter.setData(spots)
        plot.autoRange()
        return len(spots)
