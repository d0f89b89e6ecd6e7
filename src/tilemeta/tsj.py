"""Tiled JSON tileset (``.tsj``) support.

Documents are validated against the bundled JSON Schema before any tile is
built, so structural problems surface as :class:`MalformedDescriptor` with the
JSON path of the first offending value.
"""
from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import IO, Any, Dict, List, Optional, Tuple, Union

from jsonschema import Draft7Validator

from .builder import RawProperty, TileTable, build_animation, build_properties, check_frame_range, derive_tile_count
from .config import DEFAULT_CONFIG, LoaderConfig
from .errors import MalformedDescriptor
from .models import Tile, Tileset, TilesetImage
from .properties import DEFAULT_TYPE, json_value
from .tsx import FORMAT_VERSION, TILED_VERSION

logger = logging.getLogger(__name__)

_SCHEMA_PKG = "tilemeta.schemas"
_SCHEMA_FILE = "tileset.schema.json"

Source = Union[str, bytes, "os.PathLike[str]", IO[Any]]


@lru_cache(maxsize=1)
def _validator() -> Draft7Validator:
    with resources.files(_SCHEMA_PKG).joinpath(_SCHEMA_FILE).open("rb") as fh:
        schema = json.load(fh)
    return Draft7Validator(schema)


def _read_document(source: Source) -> Tuple[Any, str]:
    try:
        if isinstance(source, bytes):
            return json.loads(source), "<bytes>"
        if isinstance(source, str):
            text = source.lstrip("\ufeff")
            if text.lstrip()[:1] in ("{", "[", '"') or "\n" in text:
                return json.loads(text), "<string>"
        if hasattr(source, "read"):
            name = os.path.basename(str(getattr(source, "name", "<stream>")))
            return json.loads(source.read()), name
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Tileset descriptor not found: {path}")
        logger.debug("Loading JSON tileset from %s", path)
        with path.open("r", encoding="utf-8-sig") as f:
            return json.load(f), path.name
    except json.JSONDecodeError as e:
        raise MalformedDescriptor(f"invalid JSON: {e.msg}", f"line {e.lineno}, column {e.colno}") from e


def _validate(data: Any, source_name: str) -> None:
    # array indices stay ints so tiles.2 sorts before tiles.10
    errors = sorted(
        _validator().iter_errors(data),
        key=lambda e: [(isinstance(p, str), p) for p in e.absolute_path],
    )
    if not errors:
        return
    first = errors[0]
    where = ".".join(str(p) for p in first.absolute_path) or "$"
    extra = f" (and {len(errors) - 1} more)" if len(errors) > 1 else ""
    raise MalformedDescriptor(f"{first.message}{extra}", f"{source_name}:{where}")


def load(source: Source, config: Optional[LoaderConfig] = None) -> Tileset:
    """Load a Tiled JSON tileset; same semantics and errors as :func:`tilemeta.tsx.load`."""
    config = config or DEFAULT_CONFIG
    data, source_name = _read_document(source)
    _validate(data, source_name)

    spacing = int(data.get("spacing", 0))
    margin = int(data.get("margin", 0))
    image = TilesetImage(
        source=data["image"],
        width=data.get("imagewidth"),
        height=data.get("imageheight"),
    )
    if "tilecount" in data:
        tile_count = int(data["tilecount"])
    else:
        tile_count = derive_tile_count(
            data["columns"], data["tileheight"], image.height, spacing, margin, source_name
        )

    table = TileTable()
    for pos, entry in enumerate(data.get("tiles", [])):
        tile_id = int(entry["id"])
        location = f"{source_name}:tiles.{pos}"
        animation = None
        if "animation" in entry:
            frames = [(int(f["tileid"]), int(f["duration"])) for f in entry["animation"]]
            animation = build_animation(frames, f"{location}.animation")
        raw_props: List[RawProperty] = [
            (p["name"], p.get("type"), p["value"], f"{location}.properties.{i}")
            for i, p in enumerate(entry.get("properties", []))
        ]
        tile = Tile(id=tile_id, animation=animation, properties=build_properties(raw_props, config))
        table.add(tile, location)

    tiles = table.tiles()
    check_frame_range(tiles, tile_count, config, source_name)
    tileset = Tileset(
        name=data.get("name", ""),
        tile_width=int(data["tilewidth"]),
        tile_height=int(data["tileheight"]),
        tile_count=tile_count,
        columns=int(data["columns"]),
        image=image,
        tiles=tiles,
        spacing=spacing,
        margin=margin,
    )
    logger.info("Loaded JSON tileset %r from %s: %d tiles with metadata", tileset.name, source_name, len(tiles))
    return tileset


def to_dict(tileset: Tileset) -> Dict[str, Any]:
    doc: Dict[str, Any] = {
        "type": "tileset",
        "version": FORMAT_VERSION,
        "tiledversion": TILED_VERSION,
        "name": tileset.name,
        "tilewidth": tileset.tile_width,
        "tileheight": tileset.tile_height,
        "spacing": tileset.spacing,
        "margin": tileset.margin,
        "tilecount": tileset.tile_count,
        "columns": tileset.columns,
        "image": tileset.image.source,
    }
    if tileset.image.width is not None:
        doc["imagewidth"] = tileset.image.width
    if tileset.image.height is not None:
        doc["imageheight"] = tileset.image.height

    tiles: List[Dict[str, Any]] = []
    for tile_id in sorted(tileset.tiles):
        tile = tileset.tiles[tile_id]
        entry: Dict[str, Any] = {"id": tile_id}
        if tile.animation is not None:
            entry["animation"] = [{"tileid": f.tile_id, "duration": f.duration_ms} for f in tile.animation]
        if tile.properties:
            entry["properties"] = [
                {"name": name, "type": pv.type or DEFAULT_TYPE, "value": json_value(pv)}
                for name, pv in tile.properties.items()
            ]
        tiles.append(entry)
    if tiles:
        doc["tiles"] = tiles
    return doc


def dump(tileset: Tileset, indent: Optional[int] = 1) -> str:
    return json.dumps(to_dict(tileset), indent=indent)


def dump_file(tileset: Tileset, path: Union[str, Path]) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(dump(tileset), encoding="utf-8")
    logger.debug("Wrote JSON tileset %r to %s", tileset.name, p)
    return p


__all__ = ["load", "dump", "dump_file", "to_dict"]
