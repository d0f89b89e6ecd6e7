"""Tiled tileset descriptor loading.

This package provides:
- tsx.load / tsx.dump: the XML (.tsx) tileset format.
- tsj.load / tsj.dump: the JSON (.tsj) tileset format, schema validated.
- load_tileset: extension based dispatch over both formats.
- Tileset: immutable lookup of tile rects, animations and typed properties.
"""

from .config import LoaderConfig
from .errors import (
    DuplicateTileID,
    MalformedDescriptor,
    TilesetError,
    UnresolvedImageReference,
    UnsupportedPropertyType,
)
from .gid import local_id, split_gid
from .loader import load_tileset, resolve_image_path
from .models import Animation, Frame, PropertyValue, Tile, Tileset, TilesetImage
from .tsx import dump, load

__all__ = [
    "load",
    "dump",
    "load_tileset",
    "resolve_image_path",
    "LoaderConfig",
    "Tileset",
    "Tile",
    "TilesetImage",
    "Animation",
    "Frame",
    "PropertyValue",
    "split_gid",
    "local_id",
    "TilesetError",
    "MalformedDescriptor",
    "DuplicateTileID",
    "UnsupportedPropertyType",
    "UnresolvedImageReference",
]
