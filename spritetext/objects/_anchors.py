"""
Reconciliation of the anchors of a SpriteText.

The anchors are the SpriteAnchor children of the text object. The anchor at
index i (in child order) shows the sprite of the i-th resolved token of the
latest scan. Anchors are reused by position, not by sprite name: when the
text changes, existing anchors are repositioned and get a new sprite;
missing anchors are created, and superfluous anchors are destroyed.
"""

from ..utils import logger
from ._more import SpriteAnchor


def plan_anchor_sync(current, desired):
    """Get the number of anchors to (create, destroy) to go from current to desired."""
    return max(desired - current, 0), max(current - desired, 0)


def split_anchors(anchors, desired):
    """Split the anchors in the ones to keep and the stale ones."""
    anchors = tuple(anchors)
    return anchors[:desired], anchors[desired:]


def compute_anchor_position(layout, resolution, pixels_per_unit=1.0):
    """Get the local (x, y) position of the anchor for the given resolution.

    The position is the cursor position of the character at the token's
    display offset, shifted by the token's offset, and moved down by half
    the height of the first line so that the image is centered on the line.
    A token at the end of the text sits on the end cursor of the layout.
    Returns None if the character at that offset was not laid out, because
    the layout was truncated.
    """
    offset = resolution.display_offset
    if offset > layout.character_count:
        return None
    if offset == layout.character_count and layout.end_cursor is None:
        return None
    x, y = layout.get_cursor_position(offset)
    token = resolution.token
    x += token.offset_x
    y += token.offset_y
    y -= layout.lines[0].height * 0.5
    return x / pixels_per_unit, y / pixels_per_unit


class AnchorReconciler:
    """Keeps the anchors of a text object in sync with its resolved tokens.

    Parameters
    ----------
    owner : WorldObject
        The object that the anchors are children of.

    """

    def __init__(self, owner):
        self._owner = owner

    @property
    def anchors(self):
        """The current anchors, in child order."""
        return tuple(c for c in self._owner.children if isinstance(c, SpriteAnchor))

    def grow(self, desired):
        """Create anchors until there are at least ``desired``. Returns all anchors."""
        anchors = self.anchors
        n_create, _ = plan_anchor_sync(len(anchors), desired)
        for _ in range(n_create):
            anchor = SpriteAnchor()
            anchor.local.scale = 1
            self._owner.add(anchor)
        return self.anchors

    def shrink(self, desired):
        """Destroy anchors until there are at most ``desired``. Returns the number destroyed."""
        _, stale = split_anchors(self.anchors, desired)
        for anchor in reversed(stale):
            anchor.destroy()
        return len(stale)

    def reconcile(self, batch, get_layout, pixels_per_unit=1.0):
        """Apply a PendingBatch to the anchors.

        Parameters
        ----------
        batch : PendingBatch
            The display text and the resolved tokens.
        get_layout : callable
            Called with the display text, must return a fresh TextLayout.
        pixels_per_unit : float
            The pixel density of the owner; positions are divided by it.

        Returns
        -------
        stats : dict
            The number of anchors "created", "hidden" and "destroyed".
        """
        resolutions = batch.resolutions
        count = len(resolutions)
        n_before = len(self.anchors)

        anchors = self.grow(count)
        layout = get_layout(batch.display_text)

        hidden = 0
        for anchor, resolution in zip(anchors, resolutions):
            position = compute_anchor_position(layout, resolution, pixels_per_unit)
            if position is None:
                anchor.enabled = False
                hidden += 1
                continue
            anchor.enabled = True
            anchor.sprite = resolution.sprite
            anchor.set_native_size()
            anchor.local.scale = resolution.token.scale
            anchor.local.position = position

        destroyed = self.shrink(count)

        stats = {
            "created": max(count - n_before, 0),
            "hidden": hidden,
            "destroyed": destroyed,
        }
        logger.debug(f"Reconciled {count} anchors of {self._owner!r}: {stats}")
        return stats
