"""
Configuration models and loader for the viewer.

Plot geometry, interaction factors and the dataset catalog live in a YAML
file. Every section is optional; missing values fall back to the defaults
declared on the models.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .core.coords import PlotArea
from .settings import resolve_data_path


class PlotConfig(BaseModel):
    """Drawing surface and interaction parameters for the trajectory plot."""

    width: float = Field(default=900.0, gt=0, description="Plot width in pixels")
    height: float = Field(default=380.0, gt=0, description="Plot height in pixels")
    margin_top: float = Field(default=20.0, ge=0)
    margin_right: float = Field(default=28.0, ge=0)
    margin_bottom: float = Field(default=44.0, ge=0)
    margin_left: float = Field(default=58.0, ge=0)
    tick_count: int = Field(default=6, ge=2, description="Ticks per axis, including both ends")
    zoom_in_factor: float = Field(default=0.8, gt=0, lt=1)
    zoom_out_factor: float = Field(default=1.25, gt=1)
    wheel_zoom_in: float = Field(default=0.9, gt=0, lt=1)
    wheel_zoom_out: float = Field(default=1.1, gt=1)
    min_span_fraction: float = Field(
        default=1e-3, gt=0, le=1, description="Smallest zoom window as a fraction of the base extent"
    )

    @model_validator(mode="after")
    def _require_inner_area(self) -> "PlotConfig":
        if self.width - self.margin_left - self.margin_right <= 0:
            raise ValueError("Horizontal margins leave no room for the plot")
        if self.height - self.margin_top - self.margin_bottom <= 0:
            raise ValueError("Vertical margins leave no room for the plot")
        return self

    def plot_area(self) -> PlotArea:
        return PlotArea(
            width=self.width,
            height=self.height,
            margin_top=self.margin_top,
            margin_right=self.margin_right,
            margin_bottom=self.margin_bottom,
            margin_left=self.margin_left,
        )


class PaperReference(BaseModel):
    title: Optional[str] = None
    year: Optional[int] = None
    url: Optional[str] = None
    doi: Optional[str] = None

    def citation(self) -> str:
        title = self.title or "Unavailable"
        return f"{title} ({self.year})" if self.year else title


class DatasetEntry(BaseModel):
    """One published dataset the viewer can load."""

    id: str = Field(..., min_length=1)
    display_name: str
    primary_file: str = Field(..., description="Local path or http(s) URL of the CSV file")
    organism: str = ""
    system: str = ""
    method: str = ""
    kind: str = Field(default="trajectory", description="'trajectory' or 'summary'")
    size_units: str = "units"
    time_units: str = "units"
    notes: str = ""
    paper: Optional[PaperReference] = None

    @property
    def is_remote(self) -> bool:
        return self.primary_file.startswith(("http://", "https://"))


class DatasetCatalog(BaseModel):
    datasets: List[DatasetEntry] = Field(default_factory=list)

    @field_validator("datasets")
    @classmethod
    def _unique_ids(cls, value: List[DatasetEntry]) -> List[DatasetEntry]:
        seen = set()
        for entry in value:
            if entry.id in seen:
                raise ValueError(f"Duplicate dataset id: {entry.id}")
            seen.add(entry.id)
        return value


class ViewerConfig(BaseModel):
    """Top-level configuration object."""

    plot: PlotConfig = Field(default_factory=PlotConfig)
    catalog: DatasetCatalog = Field(default_factory=DatasetCatalog)


def _resolve_relative_files(data: Dict[str, Any], base_path: Path) -> Dict[str, Any]:
    """
    Replace relative ``primary_file`` entries with absolute paths.

    Candidates are tried next to the YAML file first, then under the data
    root. The dictionary is mutated in place.
    """
    for entry in data.get("datasets", []) or []:
        if not isinstance(entry, dict):
            continue
        value = entry.get("primary_file")
        if not isinstance(value, str) or value.startswith(("http://", "https://")):
            continue
        path_obj = Path(value)
        if path_obj.is_absolute():
            continue
        candidates = [(base_path / path_obj).resolve(), resolve_data_path(path_obj)]
        chosen = next((candidate for candidate in candidates if candidate.exists()), candidates[0])
        entry["primary_file"] = str(chosen)
    return data


def _read_yaml(path: Union[str, Path]) -> tuple:
    config_path = Path(path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    with config_path.open("r", encoding="utf-8") as handle:
        raw_data = yaml.safe_load(handle) or {}
    if not isinstance(raw_data, dict):
        raise ValueError(f"Expected a mapping at the top level of {config_path}")
    return config_path, raw_data


def load_dataset_catalog(path: Union[str, Path]) -> DatasetCatalog:
    """
    Load and validate a dataset catalog from a YAML file.

    The file holds a top-level ``datasets`` list.
    """
    config_path, raw_data = _read_yaml(path)
    processed = _resolve_relative_files(raw_data, config_path.parent)
    return DatasetCatalog.model_validate(processed)


def load_viewer_config(path: Union[str, Path]) -> ViewerConfig:
    """
    Load and validate a viewer configuration from a YAML file.

    Parameters
    ----------
    path:
        Path to a YAML file with optional ``plot`` and ``datasets`` sections.

    Returns
    -------
    ViewerConfig
        Parsed and validated configuration object.
    """
    config_path, raw_data = _read_yaml(path)
    processed = _resolve_relative_files(raw_data, config_path.parent)
    return ViewerConfig.model_validate(
        {
            "plot": processed.get("plot") or {},
            "catalog": {"datasets": processed.get("datasets") or []},
        }
    )
