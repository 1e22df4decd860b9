"""
This module implements the SpriteText object: a Text that shows inline
sprites in place of markup like ``<sprite=NAME x=DX y=DY size=S/>``.

On every change of the text (or of anything that affects the layout), the
markup is scanned and the resolvable tokens are removed from the text. This
happens right away, because the resulting display text is what gets laid
out. The anchors (the images that show the sprites) can only be positioned
once the display text has been laid out, so that part is deferred to the
next tick, in the form of a pending batch. A newer change replaces the
pending batch, so only the latest text is ever reconciled.

Without an atlas, the SpriteText behaves like a plain Text.
"""

from ..resources import SpriteAtlas, SpriteResolver, AtlasResolver
from ..utils import logger
from ..utils.enums import ReconcileState
from ..utils.text import PendingBatch, rewrite_text, scan_sprite_tokens
from ._anchors import AnchorReconciler
from ._text import Text


class SpriteText(Text):
    """A piece of text with inline sprites.

    Parameters
    ----------
    text : str
        The text to show, which may contain sprite markup.
    atlas : SpriteAtlas | None
        The atlas to look sprites up in (by exact name).
    resolver : SpriteResolver | None
        An alternative to ``atlas``, to control how names are resolved.
    kwargs : Any
        Additional kwargs are forwarded to :class:`Text`.

    """

    def __init__(self, text="", *, atlas=None, resolver=None, **kwargs):
        self._resolver = None
        self._display_text = ""
        self._pending = None
        self._scanned_rev = None
        self._state = ReconcileState.idle
        self._reconciler = AnchorReconciler(self)

        super().__init__(text, **kwargs)

        if atlas is not None and resolver is not None:
            raise TypeError("Either atlas or resolver can be given, not both.")
        if resolver is not None:
            self.resolver = resolver
        elif atlas is not None:
            self.atlas = atlas

    # --- properties

    @property
    def atlas(self):
        """The SpriteAtlas that sprite names are resolved in, or None."""
        return None if self._resolver is None else self._resolver.atlas

    @atlas.setter
    def atlas(self, atlas):
        if atlas is None:
            self._resolver = None
        elif isinstance(atlas, SpriteAtlas):
            self._resolver = AtlasResolver(atlas)
        else:
            raise TypeError(f"SpriteText.atlas must be a SpriteAtlas, not {atlas!r}")
        self.mark_layout_dirty()

    @property
    def resolver(self):
        """The SpriteResolver that maps sprite names to sprites, or None."""
        return self._resolver

    @resolver.setter
    def resolver(self, resolver):
        if not (resolver is None or isinstance(resolver, SpriteResolver)):
            raise TypeError(
                f"SpriteText.resolver must be a SpriteResolver, not {resolver!r}"
            )
        self._resolver = resolver
        self.mark_layout_dirty()

    @property
    def display_text(self):
        """The text with the markup of all resolved sprites removed."""
        if self._resolver is None:
            return self._text
        return self._display_text

    @property
    def pending(self):
        """The PendingBatch that waits for the next tick, or None."""
        return self._pending

    @property
    def state(self):
        """The ReconcileState of this object."""
        return self._state

    @property
    def anchors(self):
        """A tuple with the current anchors (SpriteAnchor objects), in child order."""
        return self._reconciler.anchors

    # --- scanning

    def mark_layout_dirty(self):
        """Mark the layout as dirty, and rescan the sprite markup.

        The anchors are updated on the next tick.
        """
        super().mark_layout_dirty()
        if self._resolver is None:
            self._pending = None
            self._state = ReconcileState.idle
            return
        self._changed()

    def _changed(self):
        self._state = ReconcileState.text_changing
        tokens = scan_sprite_tokens(self._text)
        display_text, resolutions = rewrite_text(self._text, tokens, self._resolver)
        self._display_text = display_text
        self._scanned_rev = self._resolver.atlas.rev
        # Replaces any batch that did not get reconciled yet
        self._pending = PendingBatch(display_text, resolutions)
        self._state = ReconcileState.pending
        logger.debug(
            f"Scanned {len(tokens)} sprite tokens in {self!r}, {len(resolutions)} resolved."
        )

    def _get_render_text(self):
        return self.display_text

    # --- host hooks

    def _update_object(self):
        # Sprites may have been added to (or removed from) the atlas
        if self._resolver is not None and self._resolver.atlas.rev != self._scanned_rev:
            self.mark_layout_dirty()
        super()._update_object()
        self._reconcile()

    def _reconcile(self):
        """Apply the pending batch to the anchors. Returns whether it did."""
        batch = self._pending
        if batch is None or not self.active_in_hierarchy:
            return False

        self._state = ReconcileState.reconciling
        self._reconciler.reconcile(batch, self._layout_for, self.pixels_per_unit)
        if self._pending is batch:
            self._pending = None
            self._state = ReconcileState.idle
        return True

    def _layout_for(self, display_text):
        # Always a fresh layout: the offsets are only valid for this display text
        return self.shaper.layout(display_text, self.get_layout_settings())

    def _on_enable(self):
        super()._on_enable()
        if self._resolver is None:
            logger.error(f"{self!r} has no sprite atlas, showing plain text.")
        else:
            self.mark_layout_dirty()

    def destroy(self):
        """Destroy this object and its anchors, immediately."""
        self._pending = None
        self._state = ReconcileState.idle
        super().destroy()
