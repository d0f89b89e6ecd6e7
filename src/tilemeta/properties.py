"""Typed tile property codec.

Property values are stored in descriptors as strings together with a type
tag. This module decodes them into :class:`~tilemeta.models.PropertyValue`
instances and encodes them back to their descriptor form.
"""
from __future__ import annotations

import re
from typing import Any, Callable, Dict, Optional

from .errors import MalformedDescriptor, UnsupportedPropertyType
from .models import PropertyValue


DEFAULT_TYPE = "string"

_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


def _parse_bool(raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in ("true", "1"):
        return True
    if lowered in ("false", "0"):
        return False
    raise ValueError(f"invalid boolean {raw!r}")


def _parse_color(raw: str) -> str:
    # Tiled writes #AARRGGBB; an empty string means "no color"
    if raw == "" or _COLOR_RE.match(raw):
        return raw
    raise ValueError(f"invalid color {raw!r}")


def _parse_object(raw: str) -> int:
    value = int(raw)
    if value < 0:
        raise ValueError(f"object reference must be non-negative, got {value}")
    return value


_PARSERS: Dict[str, Callable[[str], Any]] = {
    "string": str,
    "file": str,
    "int": int,
    "float": float,
    "bool": _parse_bool,
    "color": _parse_color,
    "object": _parse_object,
}


def supported_types() -> list[str]:
    return sorted(_PARSERS)


def is_supported(type_name: str) -> bool:
    return type_name in _PARSERS


def parse_property(name: str, type_name: Optional[str], raw: Any, location: Optional[str] = None) -> PropertyValue:
    """Decode a raw property value according to its type tag.

    Raises:
        UnsupportedPropertyType: the type tag is not one we know how to decode.
        MalformedDescriptor: the raw value does not match its declared type.
    """
    type_name = type_name or DEFAULT_TYPE
    parser = _PARSERS.get(type_name)
    if parser is None:
        raise UnsupportedPropertyType(type_name, name, location)
    if raw is None:
        raw = ""
    # JSON descriptors carry already-typed values
    if type_name == "bool" and isinstance(raw, bool):
        return PropertyValue(type_name, raw)
    if type_name == "float" and isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return PropertyValue(type_name, float(raw))
    try:
        value = parser(raw if isinstance(raw, str) else str(raw))
    except ValueError as e:
        raise MalformedDescriptor(f"property {name!r} of type {type_name!r}: {e}", location) from e
    return PropertyValue(type_name, value)


def format_value(pv: PropertyValue) -> str:
    """Encode a property value in the string form used by ``.tsx`` files."""
    if pv.type == "bool":
        return "true" if pv.value else "false"
    if pv.type == "float":
        value = float(pv.value)
        return str(int(value)) if value.is_integer() else repr(value)
    return str(pv.value)


def json_value(pv: PropertyValue) -> Any:
    """Encode a property value in the native form used by ``.tsj`` files."""
    if pv.type in ("bool", "int", "float", "object"):
        return pv.value
    return str(pv.value)


__all__ = [
    "DEFAULT_TYPE",
    "parse_property",
    "format_value",
    "json_value",
    "supported_types",
    "is_supported",
]
