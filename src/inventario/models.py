"""Value types exchanged between the store and its callers."""

from __future__ import annotations

import sqlite3
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from .errors import InvalidItemError

COLUMNS = (
    "id",
    "name",
    "image_path",
    "cantidad_necesaria",
    "cantidad_disponible",
    "created_at",
)


@dataclass(frozen=True)
class InventoryItem:
    """One inventory record."""

    name: str
    cantidad_necesaria: int = 0
    cantidad_disponible: int = 0
    image_path: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "InventoryItem":
        return cls(
            id=row["id"],
            name=row["name"],
            image_path=row["image_path"],
            cantidad_necesaria=row["cantidad_necesaria"],
            cantidad_disponible=row["cantidad_disponible"],
            created_at=row["created_at"],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the plain mapping sent across the command boundary."""

        data = asdict(self)
        return {key: data[key] for key in COLUMNS}


def clean_name(name: object) -> str:
    """Return *name* stripped, rejecting blanks and non-strings."""

    if not isinstance(name, str):
        raise InvalidItemError(f"Item name must be a string, got {type(name).__name__}")
    stripped = name.strip()
    if not stripped:
        raise InvalidItemError("Item name must not be empty")
    return stripped


def clean_quantity(value: object, field: str) -> int:
    """Coerce *value* to ``int``; ``None`` means 0."""

    if value is None:
        return 0
    # ``bool`` is an ``int`` subclass but never a meaningful quantity.
    if isinstance(value, bool):
        raise InvalidItemError(f"{field} must be an integer, got a boolean")
    if isinstance(value, float) and not value.is_integer():
        raise InvalidItemError(f"{field} must be an integer, got {value!r}")
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError) as exc:
        raise InvalidItemError(f"{field} must be an integer, got {value!r}") from exc


__all__ = ["COLUMNS", "InventoryItem", "clean_name", "clean_quantity"]
