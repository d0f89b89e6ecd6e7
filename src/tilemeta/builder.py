"""Format-independent validation shared by the XML and JSON loaders."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .config import DEFAULT_CONFIG, WARN, LoaderConfig
from .errors import DuplicateTileID, MalformedDescriptor, UnsupportedPropertyType
from .models import Animation, Frame, PropertyValue, Tile
from .properties import parse_property

logger = logging.getLogger(__name__)

# (name, type, raw value, location)
RawProperty = Tuple[str, Optional[str], Any, str]


def build_animation(frames: Sequence[Tuple[int, int]], location: str) -> Animation:
    if not frames:
        raise MalformedDescriptor("animation has no frames", location)
    return Animation(tuple(Frame(tile_id, duration) for tile_id, duration in frames))


def build_properties(entries: Iterable[RawProperty], config: LoaderConfig = DEFAULT_CONFIG) -> Dict[str, PropertyValue]:
    out: Dict[str, PropertyValue] = {}
    for name, type_name, raw, location in entries:
        if not name:
            raise MalformedDescriptor("property has no name", location)
        if name in out:
            raise MalformedDescriptor(f"property {name!r} declared twice", location)
        try:
            out[name] = parse_property(name, type_name, raw, location)
        except UnsupportedPropertyType as e:
            if config.unknown_property_types != WARN:
                raise
            logger.warning("Skipping property %r with unsupported type %r at %s", name, e.type_name, location)
    return out


class TileTable:
    """Collects tiles while rejecting duplicate ids."""

    def __init__(self) -> None:
        self._tiles: Dict[int, Tile] = {}

    def add(self, tile: Tile, location: str) -> None:
        if tile.id in self._tiles:
            raise DuplicateTileID(tile.id, location)
        self._tiles[tile.id] = tile

    def tiles(self) -> Dict[int, Tile]:
        return dict(self._tiles)


def check_frame_range(tiles: Dict[int, Tile], tile_count: int, config: LoaderConfig, source_name: str) -> List[Tuple[int, int]]:
    """Return (tile id, frame tile id) pairs whose frame points past ``tile_count``.

    Such frames are kept: the image may still contain the referenced tile.
    """
    out_of_range: List[Tuple[int, int]] = []
    for tile_id in sorted(tiles):
        animation = tiles[tile_id].animation
        if animation is None:
            continue
        for frame in animation:
            if frame.tile_id >= tile_count:
                out_of_range.append((tile_id, frame.tile_id))
    if out_of_range and config.warn_out_of_range_frames:
        for tile_id, frame_id in out_of_range:
            logger.warning(
                "Tile %d in %s animates to tile %d beyond tile count %d",
                tile_id,
                source_name,
                frame_id,
                tile_count,
            )
    return out_of_range


def derive_tile_count(
    columns: int,
    tile_height: int,
    image_height: Optional[int],
    spacing: int,
    margin: int,
    location: str,
) -> int:
    if image_height is None:
        raise MalformedDescriptor("missing 'tilecount' and image height to derive it", location)
    rows = (image_height - 2 * margin + spacing) // (tile_height + spacing)
    return max(0, rows) * columns
