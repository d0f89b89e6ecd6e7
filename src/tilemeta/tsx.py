from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import IO, Any, List, Optional, Tuple, Union

from .builder import RawProperty, TileTable, build_animation, build_properties, check_frame_range, derive_tile_count
from .config import DEFAULT_CONFIG, LoaderConfig
from .errors import MalformedDescriptor
from .models import Tile, Tileset, TilesetImage
from .properties import DEFAULT_TYPE, format_value

logger = logging.getLogger(__name__)

FORMAT_VERSION = "1.4"
TILED_VERSION = "1.4.2"

Source = Union[str, bytes, "os.PathLike[str]", IO[Any]]


def _int_attr(
    el: ET.Element,
    name: str,
    location: str,
    *,
    default: Optional[int] = None,
    minimum: Optional[int] = None,
) -> int:
    raw = el.attrib.get(name)
    if raw is None:
        if default is None:
            raise MalformedDescriptor(f"missing required attribute {name!r}", location)
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise MalformedDescriptor(f"attribute {name!r} is not an integer: {raw!r}", location) from None
    if minimum is not None and value < minimum:
        raise MalformedDescriptor(f"attribute {name!r} must be >= {minimum}, got {value}", location)
    return value


def _opt_int_attr(el: ET.Element, name: str, location: str, minimum: int = 0) -> Optional[int]:
    if name not in el.attrib:
        return None
    return _int_attr(el, name, location, minimum=minimum)


def _read_root(source: Source) -> Tuple[ET.Element, str]:
    """Parse ``source`` and return its root element plus a display name."""
    try:
        if isinstance(source, bytes):
            return ET.fromstring(source), "<bytes>"
        if isinstance(source, str):
            text = source.lstrip("\ufeff")
            if text.lstrip().startswith("<") or "\n" in text:
                return ET.fromstring(text), "<string>"
        if hasattr(source, "read"):
            name = os.path.basename(str(getattr(source, "name", "<stream>")))
            data = source.read()
            return ET.fromstring(data), name
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Tileset descriptor not found: {path}")
        logger.debug("Loading tileset descriptor from %s", path)
        return ET.parse(path).getroot(), path.name
    except ET.ParseError as e:
        line, column = e.position
        raise MalformedDescriptor(f"invalid XML: {e}", f"line {line}, column {column}") from e


def _parse_properties(props_el: ET.Element, location: str) -> List[RawProperty]:
    entries: List[RawProperty] = []
    for pos, prop_el in enumerate(props_el.findall("property"), start=1):
        name = prop_el.attrib.get("name", "")
        ploc = f"{location}/property[{pos}]"
        raw = prop_el.attrib.get("value")
        if raw is None:
            # Multi-line strings are stored as element text
            raw = prop_el.text or ""
        entries.append((name, prop_el.attrib.get("type"), raw, ploc))
    return entries


def _parse_tile(tile_el: ET.Element, base: str, pos: int, config: LoaderConfig) -> Tile:
    tile_id = _int_attr(tile_el, "id", f"{base}/tile[{pos}]", minimum=0)
    location = f"{base}/tile[id={tile_id}]"

    anim_els = tile_el.findall("animation")
    if len(anim_els) > 1:
        raise MalformedDescriptor("more than one <animation> block", location)
    animation = None
    if anim_els:
        aloc = f"{location}/animation"
        frames = []
        for pos, frame_el in enumerate(anim_els[0].findall("frame"), start=1):
            floc = f"{aloc}/frame[{pos}]"
            frames.append(
                (
                    _int_attr(frame_el, "tileid", floc, minimum=0),
                    _int_attr(frame_el, "duration", floc, minimum=1),
                )
            )
        animation = build_animation(frames, aloc)

    props_els = tile_el.findall("properties")
    if len(props_els) > 1:
        raise MalformedDescriptor("more than one <properties> block", location)
    properties = {}
    if props_els:
        properties = build_properties(_parse_properties(props_els[0], f"{location}/properties"), config)

    return Tile(id=tile_id, animation=animation, properties=properties)


def load(source: Source, config: Optional[LoaderConfig] = None) -> Tileset:
    """Load a ``.tsx`` tileset descriptor.

    Args:
        source: Path to a file, XML text, raw bytes, or an open file object.
        config: Loader policies; defaults to strict loading.

    Returns:
        The loaded Tileset.

    Raises:
        MalformedDescriptor: structural or attribute violations.
        DuplicateTileID: a tile id is declared more than once.
        UnsupportedPropertyType: an unknown property type under the strict policy.
        FileNotFoundError: ``source`` is a path that does not exist.
    """
    config = config or DEFAULT_CONFIG
    root, source_name = _read_root(source)
    base = f"{source_name}:tileset"

    if root.tag != "tileset":
        raise MalformedDescriptor(f"root element is <{root.tag}>, expected <tileset>", source_name)

    tile_width = _int_attr(root, "tilewidth", base, minimum=1)
    tile_height = _int_attr(root, "tileheight", base, minimum=1)
    columns = _int_attr(root, "columns", base, minimum=1)
    spacing = _int_attr(root, "spacing", base, default=0, minimum=0)
    margin = _int_attr(root, "margin", base, default=0, minimum=0)

    image_el = root.find("image")
    iloc = f"{base}/image"
    if image_el is None:
        raise MalformedDescriptor("missing <image> element", base)
    image_source = image_el.attrib.get("source")
    if not image_source:
        raise MalformedDescriptor("missing required attribute 'source'", iloc)
    image = TilesetImage(
        source=image_source,
        width=_opt_int_attr(image_el, "width", iloc),
        height=_opt_int_attr(image_el, "height", iloc),
    )

    if "tilecount" in root.attrib:
        tile_count = _int_attr(root, "tilecount", base, minimum=0)
    else:
        tile_count = derive_tile_count(columns, tile_height, image.height, spacing, margin, base)

    table = TileTable()
    for pos, tile_el in enumerate(root.findall("tile"), start=1):
        tile = _parse_tile(tile_el, base, pos, config)
        table.add(tile, f"{base}/tile[{pos}]")

    tiles = table.tiles()
    check_frame_range(tiles, tile_count, config, source_name)

    tileset = Tileset(
        name=root.attrib.get("name", ""),
        tile_width=tile_width,
        tile_height=tile_height,
        tile_count=tile_count,
        columns=columns,
        image=image,
        tiles=tiles,
        spacing=spacing,
        margin=margin,
    )
    logger.info(
        "Loaded tileset %r from %s: %d tiles, %d with metadata, %d animated",
        tileset.name,
        source_name,
        tile_count,
        len(tiles),
        len(tileset.animated_tile_ids()),
    )
    return tileset


def to_element(tileset: Tileset) -> ET.Element:
    root = ET.Element("tileset")
    root.set("version", FORMAT_VERSION)
    root.set("tiledversion", TILED_VERSION)
    root.set("name", tileset.name)
    root.set("tilewidth", str(tileset.tile_width))
    root.set("tileheight", str(tileset.tile_height))
    if tileset.spacing:
        root.set("spacing", str(tileset.spacing))
    if tileset.margin:
        root.set("margin", str(tileset.margin))
    root.set("tilecount", str(tileset.tile_count))
    root.set("columns", str(tileset.columns))

    image_el = ET.SubElement(root, "image", {"source": tileset.image.source})
    if tileset.image.width is not None:
        image_el.set("width", str(tileset.image.width))
    if tileset.image.height is not None:
        image_el.set("height", str(tileset.image.height))

    for tile_id in sorted(tileset.tiles):
        tile = tileset.tiles[tile_id]
        tile_el = ET.SubElement(root, "tile", {"id": str(tile_id)})
        if tile.properties:
            props_el = ET.SubElement(tile_el, "properties")
            for name, pv in tile.properties.items():
                prop_el = ET.SubElement(props_el, "property", {"name": name})
                if pv.type != DEFAULT_TYPE:
                    prop_el.set("type", pv.type)
                # attribute escaping keeps \r, \n and \t intact
                prop_el.set("value", format_value(pv))
        if tile.animation is not None:
            anim_el = ET.SubElement(tile_el, "animation")
            for frame in tile.animation:
                ET.SubElement(
                    anim_el,
                    "frame",
                    {"tileid": str(frame.tile_id), "duration": str(frame.duration_ms)},
                )
    return root


def dump(tileset: Tileset) -> str:
    """Serialize a Tileset back to ``.tsx`` XML text."""
    root = to_element(tileset)
    ET.indent(root, space=" ")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(root, encoding="unicode") + "\n"


def dump_file(tileset: Tileset, path: Union[str, Path]) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(dump(tileset), encoding="utf-8")
    logger.debug("Wrote tileset %r to %s", tileset.name, p)
    return p


__all__ = ["load", "dump", "dump_file", "to_element"]
