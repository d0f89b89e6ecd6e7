from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from . import tsj, tsx
from .config import LoaderConfig
from .errors import UnresolvedImageReference
from .models import Tileset

logger = logging.getLogger(__name__)

XML_SUFFIXES = (".tsx", ".xml")
JSON_SUFFIXES = (".tsj", ".json")


def resolve_image_path(tileset: Tileset, base_dir: Union[str, Path]) -> Path:
    """Resolve the tileset image relative to the descriptor's directory.

    Raises:
        UnresolvedImageReference: the image file does not exist.
    """
    path = (Path(base_dir) / tileset.image.source).resolve()
    if not path.is_file():
        raise UnresolvedImageReference(tileset.image.source, path)
    return path


def load_tileset(
    path: Union[str, Path],
    config: Optional[LoaderConfig] = None,
    *,
    check_image: bool = False,
) -> Tileset:
    """Load a tileset file, picking the format from its extension.

    Args:
        path: ``.tsx``/``.xml`` or ``.tsj``/``.json`` descriptor.
        config: Loader policies.
        check_image: Also require the referenced image to exist next to the descriptor.
    """
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix in XML_SUFFIXES:
        tileset = tsx.load(p, config)
    elif suffix in JSON_SUFFIXES:
        tileset = tsj.load(p, config)
    else:
        raise ValueError(f"Unsupported tileset file extension {p.suffix!r}: {p}")

    if check_image:
        image_path = resolve_image_path(tileset, p.parent)
        logger.debug("Resolved tileset image for %r: %s", tileset.name, image_path)
    return tileset


__all__ = ["load_tileset", "resolve_image_path", "XML_SUFFIXES", "JSON_SUFFIXES"]
