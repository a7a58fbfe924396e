"""Image storage helpers for inventory pictures.

Images reach the backend as base64 text produced by the front-end file
picker, optionally wrapped in a data URL such as
``data:image/png;base64,iVBORw0...``.  They are written to the image
directory as ``img_<unix-millis>.png`` and referenced by absolute path.
"""

from __future__ import annotations

import base64
import binascii
import logging
import time
from pathlib import Path
from typing import Callable, Optional

from ..errors import ImageDecodeError, ImageDeleteError, ImageWriteError

LOGGER = logging.getLogger(__name__)

DATA_URL_MARKER = "base64,"


def decode_image(payload: str) -> bytes:
    """Return the bytes encoded in *payload*.

    Everything up to and including the first ``base64,`` marker is discarded
    so data URLs are accepted unchanged.  Decoding is strict: characters
    outside the base64 alphabet or bad padding raise
    :class:`ImageDecodeError`.
    """

    if not isinstance(payload, str):
        raise ImageDecodeError(f"Image data must be text, got {type(payload).__name__}")
    _, marker, tail = payload.partition(DATA_URL_MARKER)
    encoded = tail if marker else payload
    # Clipboard and file readers sometimes wrap long base64 lines.
    encoded = "".join(encoded.split())
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImageDecodeError(f"Invalid base64 image data: {exc}") from exc


def _unique_image_path(images_dir: Path, clock: Callable[[], float]) -> Path:
    millis = int(clock() * 1000)
    candidate = images_dir / f"img_{millis}.png"
    # Two imports in the same millisecond would otherwise overwrite each other.
    while candidate.exists():
        millis += 1
        candidate = images_dir / f"img_{millis}.png"
    return candidate


def write_image(
    data: bytes,
    images_dir: Path,
    *,
    clock: Callable[[], float] = time.time,
) -> Path:
    """Write *data* into *images_dir* under a fresh name and return its path."""

    try:
        images_dir.mkdir(parents=True, exist_ok=True)
        target = _unique_image_path(images_dir, clock)
        target.write_bytes(data)
    except OSError as exc:
        raise ImageWriteError(f"Failed to write image into {images_dir}: {exc}") from exc
    return target.resolve()


def save_image(
    payload: str,
    images_dir: Path,
    *,
    clock: Callable[[], float] = time.time,
) -> Path:
    """Decode *payload* and store it in *images_dir*."""

    return write_image(decode_image(payload), images_dir, clock=clock)


def remove_image(path: Optional[str | Path]) -> bool:
    """Delete the image at *path*; failures are logged, never raised.

    Returns ``True`` when a file was removed.
    """

    if not path:
        return False
    try:
        _unlink(Path(path))
    except ImageDeleteError as exc:
        LOGGER.warning("%s", exc)
        return False
    return True


def _unlink(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError as exc:
        raise ImageDeleteError(f"Image already missing: {path}") from exc
    except OSError as exc:
        raise ImageDeleteError(f"Failed to delete image {path}: {exc}") from exc


__all__ = ["decode_image", "remove_image", "save_image", "write_image"]
