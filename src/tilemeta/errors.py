from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class TilesetError(Exception):
    """Base error for tileset loading failures."""


class MalformedDescriptor(TilesetError):
    """Raised when a descriptor is structurally invalid.

    ``location`` points at the offending element (``tileset/tile[3]/animation``)
    or, for syntax errors, at the line and column reported by the parser.
    """

    def __init__(self, message: str, location: Optional[str] = None):
        self.message = message
        self.location = location
        where = f" at {location}" if location else ""
        super().__init__(f"Malformed tileset descriptor{where}: {message}")


class DuplicateTileID(TilesetError):
    def __init__(self, tile_id: int, location: Optional[str] = None):
        self.tile_id = tile_id
        self.location = location
        where = f" at {location}" if location else ""
        super().__init__(f"Duplicate tile id {tile_id}{where}")


class UnsupportedPropertyType(TilesetError):
    def __init__(self, type_name: str, property_name: str, location: Optional[str] = None):
        self.type_name = type_name
        self.property_name = property_name
        self.location = location
        where = f" at {location}" if location else ""
        super().__init__(f"Unsupported type {type_name!r} for property {property_name!r}{where}")


class UnresolvedImageReference(TilesetError):
    """Raised when the tileset image cannot be found on disk."""

    def __init__(self, source: str, path: Union[str, Path]):
        self.source = source
        self.path = Path(path)
        super().__init__(f"Tileset image {source!r} not found: {self.path}")


__all__ = [
    "TilesetError",
    "MalformedDescriptor",
    "DuplicateTileID",
    "UnsupportedPropertyType",
    "UnresolvedImageReference",
]
