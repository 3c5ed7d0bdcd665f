"""Environment settings for dataset locations and network timeouts (.env aware)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)


class ViewerSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        validate_default=True,
    )

    data_root: Path = Field(default=Path("data"), validation_alias="CELLSIZE_DATA")
    catalog_path: Path = Field(
        default=Path("metadata/datasets.yaml"), validation_alias="CELLSIZE_CATALOG"
    )
    request_timeout_s: float = Field(default=30.0, gt=0, validation_alias="CELLSIZE_TIMEOUT")

    @field_validator("data_root", "catalog_path", mode="before")
    @classmethod
    def _expand_path(cls, value: Path) -> Path:
        return Path(value).expanduser().resolve()


_settings: Optional[ViewerSettings] = None


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def get_settings() -> ViewerSettings:
    global _settings
    if _settings is None:
        env_path = _project_root() / ".env"
        if not env_path.exists():
            logger.debug(
                "No .env file found at %s; using defaults. Create one with:\n"
                "CELLSIZE_DATA=/absolute/path/to/csv/files\n"
                "CELLSIZE_CATALOG=/absolute/path/to/datasets.yaml",
                env_path,
            )
        _settings = ViewerSettings()
    return _settings


def data_root() -> Path:
    return get_settings().data_root


def catalog_path() -> Path:
    return get_settings().catalog_path


def request_timeout() -> float:
    return get_settings().request_timeout_s


def resolve_data_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    return (data_root() / path).resolve()


def reset_settings_cache() -> None:
    global _settings
    _settings = None
