"""Helpers for global tile ids (GIDs) as stored in Tiled map layers.

The upper bits of a GID carry flip flags; they must be cleared before the id
can be used to look up a tile in its tileset.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

FLIPPED_HORIZONTALLY = 0x80000000
FLIPPED_VERTICALLY = 0x40000000
FLIPPED_DIAGONALLY = 0x20000000
ROTATED_HEXAGONAL_120 = 0x10000000

FLAG_MASK = FLIPPED_HORIZONTALLY | FLIPPED_VERTICALLY | FLIPPED_DIAGONALLY | ROTATED_HEXAGONAL_120


@dataclass(frozen=True)
class GidFlags:
    horizontal: bool = False
    vertical: bool = False
    diagonal: bool = False
    hexagonal_120: bool = False


def split_gid(gid: int) -> Tuple[int, GidFlags]:
    """Return ``(gid without flags, flags)``."""
    if gid < 0:
        raise ValueError(f"GID must be non-negative, got {gid}")
    flags = GidFlags(
        horizontal=bool(gid & FLIPPED_HORIZONTALLY),
        vertical=bool(gid & FLIPPED_VERTICALLY),
        diagonal=bool(gid & FLIPPED_DIAGONALLY),
        hexagonal_120=bool(gid & ROTATED_HEXAGONAL_120),
    )
    return gid & ~FLAG_MASK, flags


def local_id(gid: int, first_gid: int = 1) -> Optional[int]:
    """Convert a map GID to a tile id local to the tileset starting at ``first_gid``.

    Returns None for the empty cell (GID 0) and for GIDs below ``first_gid``.
    """
    if first_gid < 1:
        raise ValueError(f"first_gid must be >= 1, got {first_gid}")
    bare, _ = split_gid(gid)
    if bare == 0 or bare < first_gid:
        return None
    return bare - first_gid


__all__ = [
    "FLIPPED_HORIZONTALLY",
    "FLIPPED_VERTICALLY",
    "FLIPPED_DIAGONALLY",
    "ROTATED_HEXAGONAL_120",
    "FLAG_MASK",
    "GidFlags",
    "split_gid",
    "local_id",
]
