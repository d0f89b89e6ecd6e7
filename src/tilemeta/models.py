from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, List, Mapping, NamedTuple, Optional, Tuple

_MISSING = object()


class Frame(NamedTuple):
    """One step of a tile animation."""

    tile_id: int
    duration_ms: int


@dataclass(frozen=True)
class Animation:
    """Ordered, cyclic frame sequence attached to a tile.

    Frames play in declaration order and wrap back to the first frame after
    the last one. Tile IDs may repeat (ping-pong sequences are common).
    """

    frames: Tuple[Frame, ...]

    def __post_init__(self) -> None:
        frames = tuple(Frame(int(f[0]), int(f[1])) for f in self.frames)
        if not frames:
            raise ValueError("Animation requires at least one frame")
        for f in frames:
            if f.tile_id < 0:
                raise ValueError(f"Frame tile id must be non-negative, got {f.tile_id}")
            if f.duration_ms <= 0:
                raise ValueError(f"Frame duration must be positive, got {f.duration_ms}")
        object.__setattr__(self, "frames", frames)

    def __iter__(self) -> Iterator[Frame]:
        return iter(self.frames)

    def __len__(self) -> int:
        return len(self.frames)

    def __getitem__(self, index: int) -> Frame:
        return self.frames[index]

    @property
    def tile_ids(self) -> Tuple[int, ...]:
        return tuple(f.tile_id for f in self.frames)

    @property
    def total_duration(self) -> int:
        return sum(f.duration_ms for f in self.frames)

    def frame_at(self, elapsed_ms: int) -> Frame:
        """Return the frame shown ``elapsed_ms`` after playback started.

        Uses cumulative frame durations modulo the total animation length.
        """
        t = elapsed_ms % self.total_duration
        for f in self.frames:
            if t < f.duration_ms:
                return f
            t -= f.duration_ms
        return self.frames[-1]  # pragma: no cover - unreachable while durations are positive


@dataclass(frozen=True)
class PropertyValue:
    """A typed property value.

    ``type`` is the Tiled type tag (``bool``, ``int``, ``float``, ``string``,
    ``color``, ``file``, ``object``); ``value`` is the decoded Python value.
    """

    type: str
    value: Any


@dataclass(frozen=True)
class TilesetImage:
    source: str
    width: Optional[int] = None
    height: Optional[int] = None


@dataclass(frozen=True)
class Tile:
    """Metadata for a single tile. Only tiles carrying metadata are stored."""

    id: int
    animation: Optional[Animation] = None
    properties: Mapping[str, PropertyValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.id < 0:
            raise ValueError(f"Tile id must be non-negative, got {self.id}")
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    def __hash__(self) -> int:
        return hash((self.id, self.animation, frozenset(self.properties.items())))

    def __reduce__(self):
        # mappingproxy cannot be pickled; rebuild from a plain dict
        return (Tile, (self.id, self.animation, dict(self.properties)))


@dataclass(frozen=True)
class Tileset:
    """Immutable, read-only index of a tileset descriptor.

    Attributes:
        name: Tileset name.
        tile_width: Width of one tile in pixels.
        tile_height: Height of one tile in pixels.
        tile_count: Number of tiles in the sheet.
        columns: Number of tile columns in the source image.
        image: Source image reference.
        tiles: Sparse mapping of tile id -> Tile for tiles with metadata.
        spacing: Pixels between adjacent tiles.
        margin: Pixels around the outer edge of the sheet.
    """

    name: str
    tile_width: int
    tile_height: int
    tile_count: int
    columns: int
    image: TilesetImage
    tiles: Mapping[int, Tile] = field(default_factory=dict)
    spacing: int = 0
    margin: int = 0

    def __post_init__(self) -> None:
        if self.tile_width <= 0 or self.tile_height <= 0:
            raise ValueError("Tile width and height must be positive")
        if self.columns <= 0:
            raise ValueError("Tileset columns must be positive")
        if self.tile_count < 0:
            raise ValueError("Tileset tile count must be non-negative")
        object.__setattr__(self, "tiles", MappingProxyType(dict(self.tiles)))

    def __hash__(self) -> int:
        return hash(
            (
                self.name,
                self.tile_width,
                self.tile_height,
                self.tile_count,
                self.columns,
                self.image,
                frozenset(self.tiles.items()),
                self.spacing,
                self.margin,
            )
        )

    def __reduce__(self):
        return (
            Tileset,
            (
                self.name,
                self.tile_width,
                self.tile_height,
                self.tile_count,
                self.columns,
                self.image,
                dict(self.tiles),
                self.spacing,
                self.margin,
            ),
        )

    @property
    def rows(self) -> int:
        return -(-self.tile_count // self.columns)

    def tile(self, tile_id: int) -> Optional[Tile]:
        return self.tiles.get(tile_id)

    def tile_rect(self, tile_id: int) -> Tuple[int, int, int, int]:
        """Return the ``(x, y, w, h)`` pixel rectangle of a tile in the source image."""
        if tile_id < 0:
            raise ValueError(f"Tile id must be non-negative, got {tile_id}")
        row, column = divmod(tile_id, self.columns)
        x = self.margin + column * (self.tile_width + self.spacing)
        y = self.margin + row * (self.tile_height + self.spacing)
        return x, y, self.tile_width, self.tile_height

    def animation_for(self, tile_id: int) -> Optional[Animation]:
        tile = self.tiles.get(tile_id)
        return tile.animation if tile is not None else None

    def property_value(self, tile_id: int, name: str) -> Optional[PropertyValue]:
        tile = self.tiles.get(tile_id)
        if tile is None:
            return None
        return tile.properties.get(name)

    def property(self, tile_id: int, name: str) -> Any:
        """Return the decoded value of a tile property, or None if absent."""
        pv = self.property_value(tile_id, name)
        return pv.value if pv is not None else None

    def tiles_with_property(self, name: str, value: Any = _MISSING) -> List[int]:
        """Sorted ids of tiles carrying ``name`` (optionally equal to ``value``)."""
        out: List[int] = []
        for tile_id, tile in self.tiles.items():
            pv = tile.properties.get(name)
            if pv is None:
                continue
            if value is not _MISSING and pv.value != value:
                continue
            out.append(tile_id)
        return sorted(out)

    def animated_tile_ids(self) -> List[int]:
        return sorted(tid for tid, tile in self.tiles.items() if tile.animation is not None)


__all__ = [
    "Frame",
    "Animation",
    "PropertyValue",
    "TilesetImage",
    "Tile",
    "Tileset",
]
