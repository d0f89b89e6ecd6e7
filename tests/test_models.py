import dataclasses

import pytest

from tilemeta.models import Animation, Frame, PropertyValue, Tile, Tileset, TilesetImage


def make_tileset(**kwargs) -> Tileset:
    params = dict(
        name="t",
        tile_width=16,
        tile_height=8,
        tile_count=30,
        columns=7,
        image=TilesetImage("t.png", 112, 40),
    )
    params.update(kwargs)
    return Tileset(**params)


def test_tile_rect_matches_grid_formula():
    ts = make_tileset()
    for i in range(100):
        assert ts.tile_rect(i) == ((i % 7) * 16, (i // 7) * 8, 16, 8)


def test_tile_rect_is_independent_of_tile_entries():
    bare = make_tileset()
    rich = make_tileset(tiles={3: Tile(3, properties={"solid": PropertyValue("bool", True)})})
    assert bare.tile_rect(3) == rich.tile_rect(3)


def test_tile_rect_rejects_negative_ids():
    with pytest.raises(ValueError):
        make_tileset().tile_rect(-1)


def test_tileset_is_immutable():
    ts = make_tileset(tiles={1: Tile(1)})
    with pytest.raises(dataclasses.FrozenInstanceError):
        ts.columns = 3  # type: ignore[misc]
    with pytest.raises(TypeError):
        ts.tiles[2] = Tile(2)  # type: ignore[index]


def test_tile_properties_are_read_only_copies():
    props = {"climbable": PropertyValue("bool", True)}
    tile = Tile(5, properties=props)
    props["climbable"] = PropertyValue("bool", False)
    assert tile.properties["climbable"].value is True
    with pytest.raises(TypeError):
        tile.properties["x"] = PropertyValue("int", 1)  # type: ignore[index]


@pytest.mark.parametrize(
    "kwargs",
    [dict(tile_width=0), dict(tile_height=-1), dict(columns=0), dict(tile_count=-5)],
)
def test_invalid_geometry_rejected(kwargs):
    with pytest.raises(ValueError):
        make_tileset(**kwargs)


def test_animation_requires_frames():
    with pytest.raises(ValueError):
        Animation(())


def test_animation_rejects_non_positive_duration():
    with pytest.raises(ValueError):
        Animation((Frame(1, 0),))


def test_animation_frame_at_wraps():
    anim = Animation((Frame(10, 100), Frame(11, 50), Frame(10, 100)))
    assert anim.total_duration == 250
    assert anim.frame_at(0) == Frame(10, 100)
    assert anim.frame_at(99).tile_id == 10
    assert anim.frame_at(100).tile_id == 11
    assert anim.frame_at(149).tile_id == 11
    assert anim.frame_at(150).tile_id == 10
    assert anim.frame_at(250).tile_id == 10
    assert anim.frame_at(360).tile_id == 11


def test_animation_accepts_plain_pairs():
    anim = Animation(((1, 100), (2, 100)))
    assert anim.frames == (Frame(1, 100), Frame(2, 100))
    assert anim[1].tile_id == 2
    assert len(anim) == 2


def test_property_and_query_helpers():
    tiles = {
        4: Tile(4, properties={"solid_above": PropertyValue("bool", True)}),
        2: Tile(2, properties={"solid_above": PropertyValue("bool", False)}),
        9: Tile(9, animation=Animation(((9, 100), (10, 100)))),
    }
    ts = make_tileset(tiles=tiles)
    assert ts.property(4, "solid_above") is True
    assert ts.property(2, "solid_above") is False
    assert ts.property(9, "solid_above") is None
    assert ts.tiles_with_property("solid_above") == [2, 4]
    assert ts.tiles_with_property("solid_above", True) == [4]
    assert ts.animated_tile_ids() == [9]
    assert ts.tile(4) is tiles[4]
    assert ts.tile(5) is None


def test_loaded_tilesets_are_hashable(city, city_path):
    from tilemeta import tsx

    again = tsx.load(city_path)
    assert hash(city) == hash(again)
    assert len({city, again}) == 1
    assert hash(city.tile(200)) == hash(again.tile(200))


def test_tileset_survives_pickle_and_deepcopy(city):
    import copy
    import pickle

    restored = pickle.loads(pickle.dumps(city))
    assert restored == city
    assert restored.property(200, "climbable") is True
    with pytest.raises(TypeError):
        restored.tiles[1] = Tile(1)  # type: ignore[index]

    cloned = copy.deepcopy(city)
    assert cloned == city
    assert cloned.animation_for(23).tile_ids == (23, 24, 25, 26, 25, 24)
