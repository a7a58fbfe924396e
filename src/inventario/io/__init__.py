"""Filesystem helpers for stored item images."""

from .images import decode_image, remove_image, save_image, write_image

__all__ = ["decode_image", "remove_image", "save_image", "write_image"]
