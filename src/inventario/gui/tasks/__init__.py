"""Background worker helpers for GUI tasks."""

from .command_worker import CommandSignals, CommandWorker

__all__ = ["CommandSignals", "CommandWorker"]
