import logging

import numpy as np
import pytest

from spritetext import (
    Group,
    MonospaceShaper,
    ReconcileState,
    Scene,
    SearchResolver,
    SpriteAnchor,
    SpriteText,
    Ticker,
)


def make_text(text="", **kwargs):
    kwargs.setdefault("shaper", MonospaceShaper(0.5))
    kwargs.setdefault("font_size", 10)
    kwargs.setdefault("line_height", 1)
    return SpriteText(text, **kwargs)


def make_scene(*objects):
    scene = Scene()
    scene.add(*objects)
    return scene, Ticker(scene)


def test_inline_sprite(atlas):
    text = make_text("Hi <sprite=star x=1 y=2 size=0.5/> there", atlas=atlas)
    assert text.display_text == "Hi  there"
    assert text.anchors == ()  # deferred to the next tick

    scene, ticker = make_scene(text)
    ticker.tick()

    assert text.layout.text == "Hi  there"
    (anchor,) = text.anchors
    assert isinstance(anchor, SpriteAnchor)
    assert anchor.parent is text
    assert anchor.sprite is atlas.get_sprite("star")
    assert anchor.enabled
    assert anchor.size == (8.0, 8.0)
    # Cursor at (15, 0), offset (1, 2), centered on the 10-unit line
    assert tuple(anchor.local.position) == pytest.approx((16, -3, 0))
    assert tuple(anchor.local.scale) == pytest.approx((0.5, 0.5, 0.5))


def test_sprite_at_end_of_text(atlas):
    text = make_text("Hello <sprite=star/>", atlas=atlas)
    scene, ticker = make_scene(text)
    ticker.tick()
    assert text.display_text == "Hello "
    (anchor,) = text.anchors
    assert anchor.enabled
    assert anchor.sprite is atlas.get_sprite("star")
    # The pen after "Hello ", centered on the line
    assert tuple(anchor.local.position) == pytest.approx((30, -5, 0))

    # Also after a trailing newline, at the start of the empty last line
    text.text = "Hi\n<sprite=star/>"
    ticker.tick()
    assert text.anchors == (anchor,)
    assert anchor.enabled
    assert tuple(anchor.local.position) == pytest.approx((0, -15, 0))


def test_pixels_per_unit(atlas):
    text = make_text("Hi <sprite=star x=1 y=2/> there", atlas=atlas, pixels_per_unit=2)
    scene, ticker = make_scene(text)
    ticker.tick()
    (anchor,) = text.anchors
    assert tuple(anchor.local.position) == pytest.approx((8, -1.5, 0))


def test_unknown_sprite(atlas):
    text = make_text("<sprite=ghost/>", atlas=atlas)
    scene, ticker = make_scene(text)
    ticker.tick()
    assert text.display_text == "<sprite=ghost/>"
    assert text.layout.text == "<sprite=ghost/>"
    assert text.anchors == ()


def test_mixed_tokens(atlas):
    raw = "<sprite=star/> <sprite=ghost/> <sprite=heart/>!"
    text = make_text(raw, atlas=atlas)
    scene, ticker = make_scene(text)
    ticker.tick()
    assert text.display_text == " <sprite=ghost/> !"
    assert [a.sprite.name for a in text.anchors] == ["star", "heart"]
    # Characters that remain: the tokens only
    assert len(text.display_text) == len(raw) - len("<sprite=star/>") - len(
        "<sprite=heart/>"
    )


def test_shrink_destroys_extra_anchors(atlas):
    text = make_text("<sprite=star/>a<sprite=heart/>b<sprite=coin/>c", atlas=atlas)
    scene, ticker = make_scene(text)
    ticker.tick()
    old = text.anchors
    assert len(old) == 3

    text.text = "x<sprite=coin/>y"
    ticker.tick()
    assert text.anchors == old[:1]
    assert old[0].sprite is atlas.get_sprite("coin")
    for anchor in old[1:]:
        assert anchor.destroyed
        assert anchor.parent is None


def test_grow_reuses_anchors(atlas):
    text = make_text("<sprite=star/>a", atlas=atlas)
    scene, ticker = make_scene(text)
    ticker.tick()
    (first,) = text.anchors

    text.text = "<sprite=heart/>a<sprite=star/>b"
    ticker.tick()
    anchors = text.anchors
    assert len(anchors) == 2
    assert anchors[0] is first
    assert first.sprite is atlas.get_sprite("heart")


def test_idempotent(atlas):
    raw = "a<sprite=star x=2/>b\nc<sprite=heart size=3/>d"
    text = make_text(raw, atlas=atlas)
    scene, ticker = make_scene(text)
    ticker.tick()

    def snapshot():
        return [
            (a, a.sprite, tuple(a.local.position), tuple(a.local.scale), a.enabled)
            for a in text.anchors
        ]

    before = snapshot()
    ticker.tick()
    assert snapshot() == before

    text.text = raw
    assert text.state == ReconcileState.pending
    ticker.tick()
    assert snapshot() == before


def test_last_write_wins(atlas):
    text = make_text("<sprite=star/>a", atlas=atlas)
    text.text = "<sprite=heart/>a<sprite=coin/>b"
    assert text.pending.display_text == "ab"
    assert len(text.pending) == 2

    scene, ticker = make_scene(text)
    ticker.tick()
    assert [a.sprite.name for a in text.anchors] == ["heart", "coin"]
    assert text.pending is None


def test_invisible_text_is_not_reconciled(atlas):
    text = make_text("a", atlas=atlas, visible=False)
    scene, ticker = make_scene(text)
    ticker.tick()

    text.text = "a<sprite=star/>b"
    # Scanning happens right away
    assert text.display_text == "ab"
    ticker.tick()
    assert text.anchors == ()
    assert text.state == ReconcileState.pending
    assert text.pending is not None

    text.visible = True
    ticker.tick()
    assert len(text.anchors) == 1
    assert text.state == ReconcileState.idle
    assert text.pending is None


def test_hidden_parent_defers_reconcile(atlas):
    group = Group(visible=False)
    text = make_text("a<sprite=star/>b", atlas=atlas)
    group.add(text)
    scene, ticker = make_scene(group)
    ticker.tick()
    assert text.anchors == ()
    # Also when called directly
    text._update_object()
    assert text.anchors == ()

    group.visible = True
    ticker.tick()
    assert len(text.anchors) == 1


def test_state_transitions(atlas):
    text = make_text("plain", atlas=atlas)
    assert text.state == ReconcileState.pending

    states = []
    reconcile = text._reconciler.reconcile

    def spy(*args, **kwargs):
        states.append(text.state)
        return reconcile(*args, **kwargs)

    text._reconciler.reconcile = spy

    scene, ticker = make_scene(text)
    ticker.tick()
    assert states == [ReconcileState.reconciling]
    assert text.state == ReconcileState.idle

    # Nothing pending, nothing to reconcile
    ticker.tick()
    assert states == [ReconcileState.reconciling]

    text.font_size = 20
    assert text.state == ReconcileState.pending
    ticker.tick()
    assert len(states) == 2
    assert str(text.state) == "idle"


def test_no_atlas_is_plain_text(caplog):
    text = make_text("Hi <sprite=star/>")
    assert text.atlas is None
    assert text.resolver is None
    assert text.display_text == "Hi <sprite=star/>"
    assert text.pending is None
    assert text.state == ReconcileState.idle

    scene, ticker = make_scene(text)
    with caplog.at_level(logging.ERROR, logger="spritetext"):
        ticker.tick()
    assert "no sprite atlas" in caplog.text
    assert text.layout.text == "Hi <sprite=star/>"
    assert text.anchors == ()
    assert text.state == ReconcileState.idle


def test_set_atlas_later(atlas):
    text = make_text("a<sprite=star/>b")
    scene, ticker = make_scene(text)
    ticker.tick()
    assert text.anchors == ()

    text.atlas = atlas
    assert text.atlas is atlas
    assert text.display_text == "ab"
    ticker.tick()
    assert len(text.anchors) == 1

    # Removing the atlas leaves the anchors alone, the text is shown as-is
    text.atlas = None
    assert text.display_text == "a<sprite=star/>b"
    assert text.pending is None
    ticker.tick()
    assert text.layout.text == "a<sprite=star/>b"


def test_atlas_changes_are_picked_up(atlas):
    text = make_text("a<sprite=ghost/>b", atlas=atlas)
    scene, ticker = make_scene(text)
    ticker.tick()
    assert text.anchors == ()

    ghost = atlas.add_sprite("ghost", np.zeros((2, 2), np.uint8))
    ticker.tick()
    assert text.display_text == "ab"
    assert [a.sprite for a in text.anchors] == [ghost]

    atlas.remove_sprite("ghost")
    ticker.tick()
    assert text.display_text == "a<sprite=ghost/>b"
    assert text.anchors == ()


def test_resolver(atlas):
    resolver = SearchResolver(atlas)
    text = make_text("<sprite=heart/>x", resolver=resolver)
    assert text.resolver is resolver
    assert text.atlas is atlas
    scene, ticker = make_scene(text)
    ticker.tick()
    assert [a.sprite.name for a in text.anchors] == ["heart"]


def test_invalid_arguments(atlas):
    with pytest.raises(TypeError):
        make_text("", atlas=atlas, resolver=SearchResolver(atlas))
    with pytest.raises(TypeError):
        make_text("", atlas="icons")
    with pytest.raises(TypeError):
        make_text("", resolver=atlas)
    with pytest.raises(TypeError):
        make_text(42, atlas=atlas)


def test_other_children_are_kept(atlas):
    text = make_text("<sprite=star/>a<sprite=heart/>b", atlas=atlas)
    label = Group(name="label")
    text.add(label)
    scene, ticker = make_scene(text)
    ticker.tick()
    assert len(text.anchors) == 2

    text.text = "nothing"
    ticker.tick()
    assert text.anchors == ()
    assert text.children == (label,)


def test_truncated_anchor_is_hidden(atlas):
    text = make_text(
        "<sprite=star/>a\nb<sprite=heart/>c", atlas=atlas, max_height=15
    )
    scene, ticker = make_scene(text)
    ticker.tick()
    first, second = text.anchors
    assert first.enabled
    assert not second.enabled

    text.max_height = 0
    ticker.tick()
    assert text.anchors == (first, second)
    assert second.enabled
    assert tuple(second.local.position) == pytest.approx((5, -15, 0))


def test_destroy(atlas):
    text = make_text("<sprite=star/>a", atlas=atlas)
    scene, ticker = make_scene(text)
    ticker.tick()
    (anchor,) = text.anchors
    text.text = "<sprite=heart/>"

    text.destroy()
    assert text.destroyed
    assert anchor.destroyed
    assert text.pending is None
    assert text.state == ReconcileState.idle
    assert scene.children == ()
    ticker.tick()
