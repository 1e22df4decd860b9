"""
This module implements the Text object: a label that lays out a piece of
plain text with a shaper.

Layout is lazy. Changing the text or any of the layout properties marks
the layout dirty; the layout is recomputed in ``_update_object()``, which
the host calls once per tick for active objects.
"""

from ..utils.enums import TextAlign
from ..utils.text import LayoutSettings, TextShaper, get_default_shaper
from ._base import WorldObject


class Text(WorldObject):
    """A piece of (possibly multi-line) plain text.

    Parameters
    ----------
    text : str
        The text to show.
    font_size : float
        The size of the font, in local units. Default 12.
    max_width : float
        The maximum width of the text. Words are wrapped if necessary.
        Default zero (no wrapping).
    max_height : float
        The maximum height of the text. Lines that do not fit are dropped.
        Default zero (no truncation).
    line_height : float
        A factor to scale the distance between lines. A value of 1 means the
        "native" font's line distance. Default 1.2.
    text_align : str | TextAlign
        The horizontal alignment of lines when ``max_width`` is set. Can be
        "left", "center" or "right". Default "left".
    pixels_per_unit : float
        The number of pixels per local unit. Default 1.
    shaper : TextShaper | None
        The object that lays out the text. If omitted, ``get_default_shaper()``
        is used.
    visible : bool
        Whether the object is visible.
    name : str
        The name of the object.

    """

    def __init__(
        self,
        text="",
        *,
        font_size=12,
        max_width=0,
        max_height=0,
        line_height=1.2,
        text_align="left",
        pixels_per_unit=1,
        shaper=None,
        visible=True,
        name="",
    ):
        super().__init__(visible=visible, name=name)

        self._layout = None
        self._layout_dirty = True
        self._shaper = None
        self._text = ""

        self.font_size = font_size
        self.max_width = max_width
        self.max_height = max_height
        self.line_height = line_height
        self.text_align = text_align
        self.pixels_per_unit = pixels_per_unit
        if shaper is not None:
            self.shaper = shaper
        self.text = text

    # --- text

    @property
    def text(self):
        """The text to show."""
        return self._text

    @text.setter
    def text(self, text):
        if text is None:
            text = ""
        if not isinstance(text, str):
            raise TypeError(f"Text must be str, not {type(text).__name__}")
        self._text = text
        self.mark_layout_dirty()

    def _get_render_text(self):
        """The text that is actually laid out."""
        return self._text

    # --- layout properties

    @property
    def font_size(self):
        """The font size, in local units."""
        return self._font_size

    @font_size.setter
    def font_size(self, value):
        value = float(value)
        if value <= 0:
            raise ValueError("font_size must be larger than zero.")
        self._font_size = value
        self.mark_layout_dirty()

    @property
    def max_width(self):
        """The maximum width of the text. Words are wrapped if necessary.
        Zero means no wrapping.
        """
        return self._max_width

    @max_width.setter
    def max_width(self, value):
        value = float(value or 0)
        if value < 0:
            raise ValueError("max_width cannot be negative.")
        self._max_width = value
        self.mark_layout_dirty()

    @property
    def max_height(self):
        """The maximum height of the text. Lines that do not fit are
        dropped. Zero means no truncation.
        """
        return self._max_height

    @max_height.setter
    def max_height(self, value):
        value = float(value or 0)
        if value < 0:
            raise ValueError("max_height cannot be negative.")
        self._max_height = value
        self.mark_layout_dirty()

    @property
    def line_height(self):
        """A factor to scale the distance between lines."""
        return self._line_height

    @line_height.setter
    def line_height(self, value):
        self._line_height = float(value)
        self.mark_layout_dirty()

    @property
    def text_align(self):
        """The horizontal alignment of the lines: "left", "center" or "right"."""
        return self._text_align

    @text_align.setter
    def text_align(self, value):
        if not isinstance(value, str):
            raise TypeError("Text align must be a str.")
        align = value.lower()
        if align not in TextAlign.__fields__:
            raise ValueError(f"Text align must be one of {TextAlign}. Got {value!r}.")
        self._text_align = TextAlign[align]
        self.mark_layout_dirty()

    @property
    def pixels_per_unit(self):
        """The number of pixels per local unit. Positions computed from the
        layout are divided by this value.
        """
        return self._pixels_per_unit

    @pixels_per_unit.setter
    def pixels_per_unit(self, value):
        value = float(value)
        if value <= 0:
            raise ValueError("pixels_per_unit must be larger than zero.")
        self._pixels_per_unit = value
        self.mark_layout_dirty()

    @property
    def shaper(self):
        """The TextShaper used to lay out the text."""
        if self._shaper is None:
            self._shaper = get_default_shaper()
        return self._shaper

    @shaper.setter
    def shaper(self, shaper):
        if not isinstance(shaper, TextShaper):
            raise TypeError(f"Text.shaper must be a TextShaper, not {shaper!r}")
        self._shaper = shaper
        self.mark_layout_dirty()

    def get_layout_settings(self):
        """Get a LayoutSettings object for the current properties."""
        return LayoutSettings(
            self._font_size,
            max_width=self._max_width,
            max_height=self._max_height,
            line_height=self._line_height,
            text_align=self._text_align,
        )

    # --- layout

    @property
    def layout(self):
        """The TextLayout from the most recent layout pass, or None."""
        return self._layout

    def mark_layout_dirty(self):
        """Mark the layout as dirty, so that it is recomputed on the next tick."""
        self._layout_dirty = True

    def _update_object(self):
        super()._update_object()
        if self._layout_dirty:
            self._layout_dirty = False
            self._layout = self.shaper.layout(
                self._get_render_text(), self.get_layout_settings()
            )
