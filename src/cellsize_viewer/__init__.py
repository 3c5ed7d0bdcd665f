"""
Interactive viewer for single-cell size trajectory datasets.

The package exposes the headless viewport engine, configuration loaders,
the dataset catalog and exporters. The Qt front end lives in
:mod:`cellsize_viewer.gui` and is imported only when launched.
"""

from .config import (
    DatasetCatalog,
    DatasetEntry,
    PlotConfig,
    ViewerConfig,
    load_dataset_catalog,
    load_viewer_config,
)
from .catalog import find_dataset, list_datasets, list_organisms, load_default_catalog
from .engine import CellTrace, LoadedDataset, ViewerEngine, VisibleSeries
from .fetch import FetchError, load_text, resolve_dataset_location
from .settings import catalog_path, data_root, reset_settings_cache, resolve_data_path
from .exporters import (
    default_statistics_path,
    export_cell_statistics_csv,
    export_viewport_png,
)

__all__ = [
    "DatasetCatalog",
    "DatasetEntry",
    "PlotConfig",
    "ViewerConfig",
    "load_dataset_catalog",
    "load_viewer_config",
    "find_dataset",
    "list_datasets",
    "list_organisms",
    "load_default_catalog",
    "CellTrace",
    "LoadedDataset",
    "ViewerEngine",
    "VisibleSeries",
    "FetchError",
    "load_text",
    "resolve_dataset_location",
    "catalog_path",
    "data_root",
    "reset_settings_cache",
    "resolve_data_path",
    "default_statistics_path",
    "export_cell_statistics_csv",
    "export_viewport_png",
]
