import numpy as np
import numpy.testing as npt
from pytest import raises

from spritetext import SpriteAtlas, Sprite
from spritetext.resources._atlas import (
    SIZES,
    SkylinePacker,
    as_rgba,
    get_suitable_size,
)


def square(size, value=255):
    return np.full((size, size, 4), value, np.uint8)


def test_sizes():
    # Test that the predefined atlas sizes are multiples of 8,
    # and that the areas are about doubled at each step.
    prev_area = 128
    for size, area, _ in SIZES:
        assert size % 8 == 0
        assert size * size == area
        assert 1.7 * prev_area <= area < 2.3 * prev_area
        prev_area = area

    for i in range(1, len(SIZES)):
        size1 = SIZES[i - 1][0]
        size2 = SIZES[i][0]
        assert get_suitable_size(size1 * size1 * 2) == size2
        assert get_suitable_size(size2 * size2 / 2) == size1


def test_as_rgba():
    gray = np.full((2, 3), 100, np.uint8)
    rgba = as_rgba(gray)
    assert rgba.shape == (2, 3, 4)
    npt.assert_equal(rgba[..., :3], 100)
    npt.assert_equal(rgba[..., 3], 255)

    rgb = np.zeros((2, 2, 3), np.float32)
    rgb[..., 0] = 1.0
    rgba = as_rgba(rgb)
    assert rgba.dtype == np.uint8
    npt.assert_equal(rgba[..., 0], 255)
    npt.assert_equal(rgba[..., 1], 0)

    gray_alpha = np.zeros((2, 2, 2), np.uint8)
    gray_alpha[..., 1] = 7
    npt.assert_equal(as_rgba(gray_alpha)[..., 3], 7)

    with raises(ValueError):
        as_rgba(np.zeros((2, 2, 5), np.uint8))
    with raises(ValueError):
        as_rgba(np.zeros((0, 2, 4), np.uint8))
    with raises(ValueError):
        as_rgba(np.zeros((2, 2), np.int32))

    # 16-bit images are scaled down
    deep = np.full((2, 2, 4), 0xABCD, np.uint16)
    rgba = as_rgba(deep)
    assert rgba.dtype == np.uint8
    npt.assert_equal(rgba, 0xAB)


def test_add_and_get_sprite():
    atlas = SpriteAtlas("icons")
    rev = atlas.rev
    sprite = atlas.add_sprite("star", square(8, 42))
    assert atlas.rev > rev

    assert isinstance(sprite, Sprite)
    assert sprite.name == "star"
    assert sprite.atlas is atlas
    assert sprite.packable == "default"
    assert sprite.size == (8, 8)
    npt.assert_equal(sprite.get_region(), 42)
    x, y = sprite.origin
    npt.assert_equal(atlas.array[y : y + 8, x : x + 8], 42)

    assert len(atlas) == 1
    assert "star" in atlas
    assert "Star" not in atlas
    assert atlas.get_sprite("star") is sprite
    assert atlas.get_sprite("Star") is None
    assert atlas.get_sprite("moon") is None
    assert atlas.allocated_area == 64


def test_duplicate_names():
    atlas = SpriteAtlas()
    atlas.add_sprite("star", square(4))
    with raises(ValueError):
        atlas.add_sprite("star", square(4), "other")
    assert len(atlas) == 1


def test_remove_sprite():
    atlas = SpriteAtlas()
    atlas.add_sprite("a", square(4), "one")
    atlas.add_sprite("b", square(4), "two")
    rev = atlas.rev

    atlas.remove_sprite("a")
    assert atlas.rev > rev
    assert "a" not in atlas
    assert atlas.packables == ("two",)
    assert atlas.allocated_area == 16
    with raises(KeyError):
        atlas.remove_sprite("a")

    # The freed slot can be reused
    c = atlas.add_sprite("c", square(4, 9))
    npt.assert_equal(c.get_region(), 9)
    npt.assert_equal(atlas.get_sprite("b").get_region(), 255)


def test_removed_sprite_handle():
    atlas = SpriteAtlas()
    old = atlas.add_sprite("old", square(8, 1))
    index = old.index
    atlas.remove_sprite("old")
    assert old.removed
    assert old.index is None
    assert old.size == (0, 0)
    assert old.origin == (0, 0)
    assert old.get_region() is None
    assert "removed" in repr(old)

    # The slot is reused by a new sprite, the old handle does not follow
    new = atlas.add_sprite("new", np.full((20, 30, 4), 5, np.uint8))
    assert new.index == index
    assert not new.removed
    assert new.size == (30, 20)
    assert old.size == (0, 0)


def test_find_sprites():
    atlas = SpriteAtlas()
    atlas.add_sprite("StarGold", square(4), "stars")
    atlas.add_sprite("star", square(4), "stars")
    atlas.add_sprite("starfish", square(4), "animals")

    names = [s.name for s in atlas.find_sprites("star")]
    assert names == ["StarGold", "star", "starfish"]
    names = [s.name for s in atlas.find_sprites("STAR", "stars")]
    assert names == ["StarGold", "star"]
    assert atlas.find_sprites("star", "nope") == []
    assert atlas.find_sprites("moon") == []


def test_atlas_grows_and_keeps_data():
    atlas = SpriteAtlas(initial_size=16)
    initial_area = atlas.total_area
    sprites = []
    for i in range(40):
        sprites.append(atlas.add_sprite(f"s{i}", square(8, i)))

    assert atlas.total_area > initial_area
    assert atlas.allocated_area == 40 * 64
    for i, sprite in enumerate(sprites):
        npt.assert_equal(sprite.get_region(), i)

    # Regions do not overlap
    mask = np.zeros(atlas.array.shape[:2], int)
    for sprite in sprites:
        x, y = sprite.origin
        mask[y : y + 8, x : x + 8] += 1
    assert mask.max() == 1


def test_sprite_larger_than_atlas():
    atlas = SpriteAtlas(initial_size=16)
    sprite = atlas.add_sprite("big", square(40, 3))
    assert atlas.array.shape[0] >= 40
    npt.assert_equal(sprite.get_region(), 3)


def test_array_is_read_only():
    atlas = SpriteAtlas()
    with raises(ValueError):
        atlas.array[0, 0, 0] = 1


def test_skyline_packer():
    packer = SkylinePacker(16, 16)
    assert packer.pack(8, 4) == (0, 0)
    assert packer.pack(8, 8) == (8, 0)
    # Lowest top wins
    assert packer.pack(8, 4) == (0, 4)
    assert packer.pack(16, 8) == (0, 8)
    assert packer.pack(1, 1) is None
    assert packer.pack(20, 1) is None

    packer.reset(4, 4)
    assert packer.pack(4, 4) == (0, 0)
