"""Helpers for reading JSON settings files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..errors import SettingsInvalidError


def read_json(path: Path) -> dict[str, Any]:
    """Read JSON from *path* and return a dictionary."""

    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError as exc:
        raise SettingsInvalidError(f"JSON file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise SettingsInvalidError(f"Invalid JSON data in {path}") from exc
    except OSError as exc:
        raise SettingsInvalidError(f"Unable to read {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SettingsInvalidError(f"Expected a JSON object in {path}")
    return data
