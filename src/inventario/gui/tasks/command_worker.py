"""Background worker that runs one inventory command off the GUI thread."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from PySide6.QtCore import QObject, QRunnable, Signal

from ...commands import InventoryCommands

LOGGER = logging.getLogger(__name__)


class CommandSignals(QObject):
    """Signals emitted by :class:`CommandWorker`."""

    finished = Signal(int, object)
    """Emitted with the request id and the command's return value."""

    error = Signal(int, str)
    """Emitted with the request id and a message the UI can display."""

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)


class CommandWorker(QRunnable):
    """Invoke a single command in a :class:`QThreadPool` worker."""

    def __init__(
        self,
        commands: InventoryCommands,
        command: str,
        args: Optional[Mapping[str, Any]],
        *,
        request_id: int,
        signals: CommandSignals,
    ) -> None:
        super().__init__()
        self.setAutoDelete(True)
        self._commands = commands
        self._command = command
        self._args = dict(args or {})
        self._request_id = request_id
        self._signals = signals

    def run(self) -> None:  # type: ignore[override]
        result = self._commands.invoke(self._command, self._args)
        if result.ok:
            self._signals.finished.emit(self._request_id, result.value)
        else:
            LOGGER.debug("Request %d (%s) failed: %s", self._request_id, self._command, result.error)
            self._signals.error.emit(self._request_id, result.error or "")


__all__ = ["CommandSignals", "CommandWorker"]
