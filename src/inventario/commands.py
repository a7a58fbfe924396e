"""Command table called by the desktop front-end.

Each command takes plain values and returns plain values.  :meth:`invoke`
never raises: failures come back as a :class:`CommandResult` carrying a
human-readable message, which is all the front-end shows to the user.
"""

from __future__ import annotations

import inspect
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

from .backup import export_database, import_database
from .errors import InventarioError
from .store.repository import InventoryRepository

LOGGER = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one command: a value on success, a message on failure."""

    ok: bool
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: Any) -> "CommandResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, message: str) -> "CommandResult":
        return cls(ok=False, error=message)


def _snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


class InventoryCommands:
    """Bind the command names to an :class:`InventoryRepository`."""

    def __init__(self, repository: InventoryRepository) -> None:
        self._repository = repository
        self._handlers: Dict[str, Callable[..., Any]] = {
            "get_all_items": self.get_all_items,
            "add_item": self.add_item,
            "update_item": self.update_item,
            "delete_item": self.delete_item,
            "get_db_path": self.get_db_path,
            "fix_image_paths": self.fix_image_paths,
            "export_database": self.export_database,
            "import_database": self.import_database,
        }

    @property
    def names(self) -> List[str]:
        return list(self._handlers)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def get_all_items(self) -> List[Dict[str, Any]]:
        return [item.to_dict() for item in self._repository.list_all()]

    def add_item(
        self,
        name: str,
        image_base64: Optional[str] = None,
        cantidad_necesaria: int = 0,
        cantidad_disponible: int = 0,
    ) -> Dict[str, Any]:
        item = self._repository.add(name, image_base64, cantidad_necesaria, cantidad_disponible)
        return item.to_dict()

    def update_item(
        self,
        id: int,
        name: str,
        image_base64: Optional[str] = None,
        cantidad_necesaria: int = 0,
        cantidad_disponible: int = 0,
    ) -> Dict[str, Any]:
        item = self._repository.update(id, name, image_base64, cantidad_necesaria, cantidad_disponible)
        return item.to_dict()

    def delete_item(self, id: int) -> None:
        self._repository.delete(id)

    def get_db_path(self) -> str:
        return self._repository.get_storage_path()

    def fix_image_paths(self) -> int:
        return self._repository.fix_image_paths()

    def export_database(self, destination: str) -> Dict[str, Any]:
        return export_database(self._repository, destination).to_dict()

    def import_database(self, source: str) -> Dict[str, Any]:
        return import_database(self._repository, source).to_dict()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def invoke(self, command: str, args: Optional[Mapping[str, Any]] = None) -> CommandResult:
        """Run *command* with keyword *args* and wrap the outcome."""

        handler = self._handlers.get(command)
        if handler is None:
            return CommandResult.failure(f"Unknown command: {command}")

        kwargs = {_snake_case(key): value for key, value in (args or {}).items()}
        try:
            bound = inspect.signature(handler).bind(**kwargs)
        except TypeError as exc:
            LOGGER.error("Command %s called with invalid arguments %s: %s", command, sorted(kwargs), exc)
            return CommandResult.failure(f"Invalid arguments for {command}: {exc}")

        try:
            value = handler(*bound.args, **bound.kwargs)
        except InventarioError as exc:
            LOGGER.error("Command %s failed: %s", command, exc)
            return CommandResult.failure(str(exc))
        except Exception as exc:
            LOGGER.exception("Command %s crashed", command)
            return CommandResult.failure(str(exc) or exc.__class__.__name__)
        return CommandResult.success(value)


__all__ = ["CommandResult", "InventoryCommands"]
