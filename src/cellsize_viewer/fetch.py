"""Dataset text loading from local files or HTTP(S) URLs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

import requests

from .settings import data_root, request_timeout

logger = logging.getLogger(__name__)

RAW_GITHUB_PREFIX = "https://raw.githubusercontent.com/"


class FetchError(RuntimeError):
    """Raised when a dataset cannot be retrieved."""


def is_remote(location: Union[str, Path]) -> bool:
    return str(location).startswith(("http://", "https://"))


def resolve_dataset_location(location: Union[str, Path], local_root: Optional[Path] = None) -> str:
    """Prefer a local copy of a raw GitHub file when one exists under the data root."""
    text = str(location)
    if not text.startswith(RAW_GITHUB_PREFIX):
        return text
    root = local_root if local_root is not None else data_root()
    candidate = Path(root) / text.rsplit("/", 1)[-1]
    if candidate.exists():
        logger.debug("Using local copy %s for %s", candidate, text)
        return str(candidate)
    return text


def load_text(location: Union[str, Path], timeout: Optional[float] = None) -> str:
    """
    Return the text content of a dataset.

    Raises
    ------
    FetchError
        On network errors, non-success HTTP status codes or unreadable files.
    """
    if is_remote(location):
        url = str(location)
        logger.debug("Fetching %s", url)
        try:
            response = requests.get(url, timeout=timeout if timeout is not None else request_timeout())
            response.raise_for_status()
        except requests.exceptions.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else "unknown"
            raise FetchError(f"Could not load CSV ({status})") from exc
        except requests.exceptions.RequestException as exc:
            raise FetchError(f"Could not load CSV: {exc}") from exc
        response.encoding = response.encoding or "utf-8"
        return response.text

    path = Path(location).expanduser()
    if not path.exists():
        raise FetchError(f"Dataset file not found: {path}")
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise FetchError(f"Could not read {path}: {exc}") from exc
