"""Dataset catalog utilities for the viewer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from .config import DatasetCatalog, DatasetEntry, load_dataset_catalog
from .settings import catalog_path

logger = logging.getLogger(__name__)

SUMMARY_KIND = "summary"


def load_default_catalog(path: Optional[Path] = None) -> DatasetCatalog:
    """Load the configured catalog, or an empty one when the file is missing."""
    target = Path(path) if path is not None else catalog_path()
    if not target.exists():
        logger.warning("Dataset catalog not found: %s", target)
        return DatasetCatalog()
    return load_dataset_catalog(target)


def list_datasets(catalog: DatasetCatalog, organism: Optional[str] = None) -> List[DatasetEntry]:
    """Trajectory datasets, optionally restricted to one organism."""
    primary = [entry for entry in catalog.datasets if entry.kind != SUMMARY_KIND]
    if organism is None or organism == "all":
        return primary
    return [entry for entry in primary if entry.organism == organism]


def list_organisms(catalog: DatasetCatalog) -> List[str]:
    return sorted({entry.organism for entry in list_datasets(catalog) if entry.organism})


def find_dataset(catalog: DatasetCatalog, dataset_id: str) -> DatasetEntry:
    for entry in catalog.datasets:
        if entry.id == dataset_id:
            return entry
    raise KeyError(f"Dataset not found: {dataset_id}")
