"""Background dataset fetching for the GUI."""

from __future__ import annotations

import logging

from PySide6.QtCore import QObject, QRunnable, Signal

from ..engine import LoadFunction

logger = logging.getLogger(__name__)


class LoadSignals(QObject):
    finished = Signal(int, str, str)  # (token, text, source)
    failed = Signal(int, str)  # (token, message)


class LoadWorker(QRunnable):
    """Fetch one dataset off the GUI thread and report back with its token."""

    def __init__(self, token: int, source: str, loader: LoadFunction, signals: LoadSignals) -> None:
        super().__init__()
        self.token = token
        self.source = source
        self.loader = loader
        self.signals = signals

    def run(self) -> None:
        try:
            text = self.loader(self.source)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Load %d failed in worker: %s", self.token, exc)
            self.signals.failed.emit(self.token, str(exc))
            return
        self.signals.finished.emit(self.token, text, self.source)
