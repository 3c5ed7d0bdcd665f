"""PySide6/PyQtGraph GUI for browsing size trajectories."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional

from PySide6.QtCore import QThreadPool
from PySide6.QtGui import QAction, QColor, QKeySequence, QPalette
from PySide6.QtWidgets import (
    QApplication,
    QComboBox,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from ..catalog import list_datasets, load_default_catalog
from ..config import DatasetEntry, ViewerConfig
from ..core.statistics import STATISTIC_LABELS
from ..engine import ViewerEngine
from ..exporters import default_statistics_path, export_cell_statistics_csv, export_viewport_png
from ..fetch import resolve_dataset_location
from .loader import LoadSignals, LoadWorker
from .plot_widgets import StatisticsPlotWidget, TrajectoryPlotWidget

logger = logging.getLogger(__name__)

OPEN_FILE_LABEL = "Open CSV…"
DEFAULT_STATS_X = "tau"
DEFAULT_STATS_Y = "lambda"


class ViewerWindow(QMainWindow):
    def __init__(self, config: Optional[ViewerConfig] = None, initial_source: Optional[str] = None):
        super().__init__()
        self.setWindowTitle("Single-Cell Size Trajectories")
        self.resize(1100, 680)

        self.config = config or ViewerConfig()
        self.engine = ViewerEngine(self.config.plot)
        self._datasets: List[DatasetEntry] = self._collect_datasets()
        self._current_entry: Optional[DatasetEntry] = None
        self._series_updating = False

        self._pool = QThreadPool.globalInstance()
        self._load_signals = LoadSignals()
        self._load_signals.finished.connect(self._on_load_finished)
        self._load_signals.failed.connect(self._on_load_failed)

        self._setup_ui()
        self._unsubscribe: Callable[[], None] = self.engine.subscribe(self._on_engine_changed)
        self._on_engine_changed(self.engine)

        if initial_source:
            self.start_load(initial_source)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------
    def _collect_datasets(self) -> List[DatasetEntry]:
        entries = list_datasets(self.config.catalog)
        if entries:
            return entries
        try:
            return list_datasets(load_default_catalog())
        except (ValueError, OSError) as exc:
            logger.warning("Could not load the default dataset catalog: %s", exc)
            return []

    def _setup_ui(self) -> None:
        central = QWidget(self)
        layout = QVBoxLayout(central)

        controls = QHBoxLayout()
        controls.addWidget(QLabel("Dataset:"))
        self.dataset_combo = QComboBox()
        self.dataset_combo.addItem("Select a dataset…", None)
        for entry in self._datasets:
            self.dataset_combo.addItem(entry.display_name, entry.id)
        self.dataset_combo.addItem(OPEN_FILE_LABEL, OPEN_FILE_LABEL)
        self.dataset_combo.activated.connect(self._on_dataset_activated)
        controls.addWidget(self.dataset_combo, 2)

        controls.addWidget(QLabel("Lineage:"))
        self.series_combo = QComboBox()
        self.series_combo.currentIndexChanged.connect(self._on_series_changed)
        controls.addWidget(self.series_combo, 2)

        self.zoom_in_button = QPushButton("Zoom In")
        self.zoom_in_button.clicked.connect(self.engine.zoom_in)
        self.zoom_out_button = QPushButton("Zoom Out")
        self.zoom_out_button.clicked.connect(self.engine.zoom_out)
        self.reset_button = QPushButton("Reset")
        self.reset_button.clicked.connect(self.engine.reset_zoom)
        for button in (self.zoom_in_button, self.zoom_out_button, self.reset_button):
            controls.addWidget(button)
        layout.addLayout(controls)

        self.info_label = QLabel("")
        self.info_label.setWordWrap(True)
        layout.addWidget(self.info_label)

        self.tabs = QTabWidget()
        self.trajectory_plot = TrajectoryPlotWidget(self.engine)
        self.tabs.addTab(self.trajectory_plot, "Trajectories")

        stats_page = QWidget()
        stats_layout = QVBoxLayout(stats_page)
        axis_row = QHBoxLayout()
        self.stats_x_combo = QComboBox()
        self.stats_y_combo = QComboBox()
        for combo, default in ((self.stats_x_combo, DEFAULT_STATS_X), (self.stats_y_combo, DEFAULT_STATS_Y)):
            for name, label in STATISTIC_LABELS.items():
                combo.addItem(label, name)
            combo.setCurrentIndex(combo.findData(default))
            combo.currentIndexChanged.connect(self._refresh_statistics)
        axis_row.addWidget(QLabel("X:"))
        axis_row.addWidget(self.stats_x_combo)
        axis_row.addWidget(QLabel("Y:"))
        axis_row.addWidget(self.stats_y_combo)
        axis_row.addStretch(1)
        stats_layout.addLayout(axis_row)
        self.statistics_plot = StatisticsPlotWidget()
        stats_layout.addWidget(self.statistics_plot, 1)
        self.stats_summary_label = QLabel("")
        stats_layout.addWidget(self.stats_summary_label)
        self.tabs.addTab(stats_page, "Statistics")
        self.tabs.currentChanged.connect(self._refresh_statistics)
        layout.addWidget(self.tabs, 1)

        self.zoom_info_label = QLabel("")
        layout.addWidget(self.zoom_info_label)

        self.setCentralWidget(central)
        self._build_menu()

    def _build_menu(self) -> None:
        file_menu = self.menuBar().addMenu("&File")
        open_action = QAction("Open CSV…", self)
        open_action.setShortcut(QKeySequence.StandardKey.Open)
        open_action.triggered.connect(self._open_file)
        file_menu.addAction(open_action)

        self.export_image_action = QAction("Export Image…", self)
        self.export_image_action.triggered.connect(self._export_image)
        file_menu.addAction(self.export_image_action)

        self.export_stats_action = QAction("Export Cell Statistics…", self)
        self.export_stats_action.triggered.connect(self._export_statistics)
        file_menu.addAction(self.export_stats_action)

        file_menu.addSeparator()
        quit_action = QAction("Quit", self)
        quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def start_load(self, source: str) -> None:
        location = resolve_dataset_location(source)
        token = self.engine.request_load(location)
        worker = LoadWorker(token, location, self.engine.load_function, self._load_signals)
        self._pool.start(worker)

    def _on_load_finished(self, token: int, text: str, source: str) -> None:
        self.engine.complete_load(token, text, source=source)

    def _on_load_failed(self, token: int, message: str) -> None:
        self.engine.fail_load(token, RuntimeError(message))

    def _on_dataset_activated(self, index: int) -> None:
        data = self.dataset_combo.itemData(index)
        if data is None:
            return
        if data == OPEN_FILE_LABEL:
            self._open_file()
            return
        entry = next((item for item in self._datasets if item.id == data), None)
        if entry is None:
            return
        self._current_entry = entry
        self.trajectory_plot.set_units(entry.time_units, entry.size_units)
        self.start_load(entry.primary_file)

    def _open_file(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            "Open Size Trajectory CSV",
            str(Path.cwd()),
            "CSV Files (*.csv *.tsv *.txt);;All Files (*)",
        )
        if not file_path:
            return
        self._current_entry = None
        self.trajectory_plot.set_units("units", "units")
        self.start_load(file_path)

    # ------------------------------------------------------------------
    # Engine -> widgets
    # ------------------------------------------------------------------
    def _on_engine_changed(self, engine: ViewerEngine) -> None:
        self.statusBar().showMessage(engine.get_status_message())
        self._sync_series_combo(engine)
        has_selection = engine.selected_index is not None
        for widget in (self.zoom_in_button, self.zoom_out_button, self.reset_button, self.series_combo):
            widget.setEnabled(has_selection)
        self.export_image_action.setEnabled(has_selection)
        self.export_stats_action.setEnabled(has_selection)
        self.zoom_info_label.setText(engine.zoom_info())
        self.info_label.setText(self._dataset_info())
        self.trajectory_plot.update_from_engine(engine)
        self._refresh_statistics()

    def _sync_series_combo(self, engine: ViewerEngine) -> None:
        labels = [entry.label for entry in engine.series]
        current = [self.series_combo.itemText(i) for i in range(self.series_combo.count())]
        self._series_updating = True
        try:
            if labels != current:
                self.series_combo.clear()
                self.series_combo.addItems(labels)
            if engine.selected_index is not None:
                self.series_combo.setCurrentIndex(engine.selected_index)
        finally:
            self._series_updating = False

    def _on_series_changed(self, index: int) -> None:
        if self._series_updating or index < 0 or index == self.engine.selected_index:
            return
        self.engine.select_series(index)

    def _dataset_info(self) -> str:
        entry = self._current_entry
        if entry is None:
            return ""
        parts = [part for part in (entry.organism, entry.system, entry.method) if part]
        if entry.paper is not None:
            parts.append(entry.paper.citation())
        if entry.notes:
            parts.append(entry.notes)
        return " | ".join(parts)

    def _refresh_statistics(self, *_args) -> None:
        if self.tabs.currentIndex() != 1:
            return
        result = self.engine.cell_statistics()
        drawn = self.statistics_plot.update_summaries(
            result.summaries,
            self.stats_x_combo.currentData(),
            self.stats_y_combo.currentData(),
        )
        if not result.summaries:
            self.stats_summary_label.setText("No cells with at least two measurements.")
            return
        self.stats_summary_label.setText(
            f"{drawn} of {len(result.summaries)} cells plotted ({result.skipped} skipped with < 2 points)"
        )

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def _export_image(self) -> None:
        file_path, _ = QFileDialog.getSaveFileName(self, "Export Image", "trajectories.png", "PNG Images (*.png)")
        if not file_path:
            return
        entry = self._current_entry
        try:
            export_viewport_png(
                self.engine,
                Path(file_path),
                time_units=entry.time_units if entry else "units",
                size_units=entry.size_units if entry else "units",
            )
        except (ValueError, OSError) as exc:
            QMessageBox.critical(self, "Export Image", str(exc))
            return
        self.statusBar().showMessage(f"Image saved to {file_path}")

    def _export_statistics(self) -> None:
        dataset = self.engine.dataset
        if dataset is None:
            return
        suggested = default_statistics_path(dataset.source)
        file_path, _ = QFileDialog.getSaveFileName(
            self, "Export Cell Statistics", str(suggested), "CSV Files (*.csv)"
        )
        if not file_path:
            return
        try:
            export_cell_statistics_csv(self.engine.cell_statistics().summaries, Path(file_path))
        except OSError as exc:
            QMessageBox.critical(self, "Export Cell Statistics", str(exc))
            return
        self.statusBar().showMessage(f"Statistics saved to {file_path}")

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._unsubscribe()
        super().closeEvent(event)


def run(config: Optional[ViewerConfig] = None, initial_source: Optional[str] = None) -> None:
    app = QApplication.instance() or QApplication([])

    app.setStyle("Fusion")
    palette = QPalette()
    palette.setColor(QPalette.ColorRole.Window, QColor(53, 53, 53))
    palette.setColor(QPalette.ColorRole.WindowText, QColor(255, 255, 255))
    palette.setColor(QPalette.ColorRole.Base, QColor(35, 35, 35))
    palette.setColor(QPalette.ColorRole.AlternateBase, QColor(53, 53, 53))
    palette.setColor(QPalette.ColorRole.Text, QColor(255, 255, 255))
    palette.setColor(QPalette.ColorRole.Button, QColor(53, 53, 53))
    palette.setColor(QPalette.ColorRole.ButtonText, QColor(255, 255, 255))
    palette.setColor(QPalette.ColorRole.Highlight, QColor(42, 130, 218))
    palette.setColor(QPalette.ColorRole.HighlightedText, QColor(35, 35, 35))
    app.setPalette(palette)

    window = ViewerWindow(config, initial_source=initial_source)
    window.show()
    app.exec()
