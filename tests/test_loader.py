from pathlib import Path

import pytest

from tilemeta import load_tileset, resolve_image_path, tsj, tsx
from tilemeta.errors import UnresolvedImageReference


def test_dispatch_on_extension(city, tmp_path: Path):
    xml_path = tsx.dump_file(city, tmp_path / "city.tsx")
    json_path = tsj.dump_file(city, tmp_path / "city.json")
    assert load_tileset(xml_path) == load_tileset(json_path) == city


def test_unsupported_extension(tmp_path: Path):
    p = tmp_path / "city.png"
    p.write_bytes(b"")
    with pytest.raises(ValueError):
        load_tileset(p)


def test_image_check_passes_when_image_exists(city, tmp_path: Path):
    path = tsx.dump_file(city, tmp_path / "city.tsx")
    (tmp_path / "city.png").write_bytes(b"\x89PNG")
    assert load_tileset(path, check_image=True) == city
    assert resolve_image_path(city, tmp_path) == (tmp_path / "city.png").resolve()


def test_image_check_fails_when_image_missing(city, tmp_path: Path):
    path = tsx.dump_file(city, tmp_path / "city.tsx")
    with pytest.raises(UnresolvedImageReference) as ei:
        load_tileset(path, check_image=True)
    assert ei.value.source == "city.png"


def test_loading_does_not_require_image(city_path):
    # the sample ships without its png
    assert load_tileset(city_path).name == "city"
