"""Qt-facing entry point for the inventory command table."""

from __future__ import annotations

import itertools
from typing import Any, Mapping, Optional

from PySide6.QtCore import QObject, QThreadPool, Signal

from ..commands import InventoryCommands
from .tasks.command_worker import CommandSignals, CommandWorker


class InventoryBridge(QObject):
    """Queue commands on a single worker thread and report their outcome.

    The pool is limited to one thread, so commands reach the repository in
    submission order and the GUI thread never waits on the database.
    """

    commandFinished = Signal(int, str, object)  # request_id, command, value
    commandFailed = Signal(int, str, str)  # request_id, command, message

    def __init__(self, commands: InventoryCommands, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._commands = commands
        self._pool = QThreadPool(self)
        self._pool.setMaxThreadCount(1)
        self._ids = itertools.count(1)
        self._pending: dict[int, str] = {}
        self._signals = CommandSignals(self)
        self._signals.finished.connect(self._handle_finished)
        self._signals.error.connect(self._handle_error)

    def submit(self, command: str, args: Optional[Mapping[str, Any]] = None) -> int:
        """Schedule *command* and return the request id used in the signals."""

        request_id = next(self._ids)
        self._pending[request_id] = command
        worker = CommandWorker(
            self._commands,
            command,
            args,
            request_id=request_id,
            signals=self._signals,
        )
        self._pool.start(worker)
        return request_id

    def pending(self) -> int:
        return len(self._pending)

    def wait_for_done(self, msecs: int = -1) -> bool:
        """Block until queued commands have run; used at shutdown."""

        return self._pool.waitForDone(msecs)

    # ------------------------------------------------------------------
    # Signal handlers
    # ------------------------------------------------------------------
    def _handle_finished(self, request_id: int, value: object) -> None:
        command = self._pending.pop(request_id, "")
        self.commandFinished.emit(request_id, command, value)

    def _handle_error(self, request_id: int, message: str) -> None:
        command = self._pending.pop(request_id, "")
        self.commandFailed.emit(request_id, command, message)


__all__ = ["InventoryBridge"]
