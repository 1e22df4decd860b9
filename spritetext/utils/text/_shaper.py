"""
Text shaping and layout.

A shaper turns a plain string and a set of layout settings into a
``TextLayout``: one cursor position per laid-out character, plus line
metrics. The shaping of individual words is done with Harfbuzz (or
FreeType), and the line layout (wrapping, alignment and truncation) is
shared by all shapers.

Coordinates are y-up. The top of the first line is at y=0 and subsequent
lines go down. The cursor position of a character is its pen position on
the top of its line.

Relevant links:
* https://harfbuzz.github.io/
* https://freetype.org/freetype2/docs/glyphs/glyphs-3.html

"""

import os
import time

import freetype
import uharfbuzz
import numpy as np

from .. import logger
from ..enums import TextAlign
from ._tokenizers import tokenize_text
from ._fontfinder import find_font_file


# Determine reference size. Shaping results are divided by this size.
REF_GLYPH_SIZE = 48  # 48px == 64pt

ALIGN_FACTORS = {TextAlign.left: 0.0, TextAlign.center: 0.5, TextAlign.right: 1.0}


class TemporalCache:
    """A simple cache that drops items that were not used for a while."""

    def __init__(self, lifetime, *, getter, minimum_items=0):
        self._ref_lifetime = lifetime
        self._minimum_items = minimum_items
        self._cache = {}
        self._lifetimes = {}
        self._getter = getter

    def __getitem__(self, key):
        """Get the object for the given key, creating it if needed.

        Getting resets the item's lifetime, and drops expired items.
        """
        try:
            res = self._cache[key]
        except KeyError:
            res = self._cache[key] = self._getter(key)

        self._lifetimes[key] = time.time()
        self.check_lifetimes()
        return res

    def __contains__(self, key):
        return key in self._cache

    def __len__(self):
        return len(self._cache)

    def check_lifetimes(self):
        """Drop the oldest expired items, keeping at least ``minimum_items``."""
        expired_before = time.time() - self._ref_lifetime
        expired = sorted(
            (lt, key) for key, lt in self._lifetimes.items() if lt < expired_before
        )
        max_items_to_remove = max(len(self._cache) - self._minimum_items, 0)
        for _, key in expired[:max_items_to_remove]:
            self._lifetimes.pop(key, None)
            self._cache.pop(key, None)


def get_hb_font(font_filename):
    blob = uharfbuzz.Blob.from_file_path(font_filename)
    face = uharfbuzz.Face(blob)
    font = uharfbuzz.Font(face)
    font.scale = REF_GLYPH_SIZE, REF_GLYPH_SIZE
    return blob, face, font


def get_ft_face(font_filename):
    face = freetype.Face(font_filename)
    face.set_pixel_sizes(REF_GLYPH_SIZE, REF_GLYPH_SIZE)
    return face


# Harfbuzz fonts are small, FreeType faces can be large (e.g. CJK fonts).
# Unused items are dropped after 10s, but a handful of fonts is always kept.
CACHE_HB = TemporalCache(10, getter=get_hb_font, minimum_items=20)
CACHE_FT = TemporalCache(10, getter=get_ft_face, minimum_items=20)


def shape_text_hb(text, font_filename, direction=None):
    """Shape text with Harfbuzz.

    Returns:
        positions (ndarray): the (x, y) position of each glyph.
        clusters (ndarray): for each glyph, the index of the first character it represents.
        meta (dict): the "extent", "ascender", "descender" and "direction".

    All returned distances are measured in unit font_size.
    """
    ref_size = REF_GLYPH_SIZE

    # Adding codepoints makes the clusters match Python string indices
    buf = uharfbuzz.Buffer()
    buf.add_codepoints([ord(c) for c in text])
    buf.guess_segment_properties()

    is_horizontal = True
    if direction is not None:
        buf.direction = direction
        is_horizontal = direction in ("ltr", "rtl")

    blob, face, font = CACHE_HB[font_filename]
    uharfbuzz.shape(font, buf)

    glyph_infos = buf.glyph_infos
    glyph_positions = buf.glyph_positions
    n_glyphs = len(glyph_infos)

    positions = np.zeros((n_glyphs, 2), np.float32)
    clusters = np.zeros((n_glyphs,), np.int64)
    pen_x = pen_y = 0
    for i in range(n_glyphs):
        clusters[i] = glyph_infos[i].cluster
        pos = glyph_positions[i]
        positions[i] = (
            (pen_x + pos.x_offset) / ref_size,
            (pen_y + pos.y_offset) / ref_size,
        )
        pen_x += pos.x_advance
        pen_y += pos.y_advance

    font_ext = font.get_font_extents(buf.direction)

    meta = {
        "extent": abs(pen_x if is_horizontal else pen_y) / ref_size,
        "ascender": font_ext.ascender / ref_size,
        "descender": font_ext.descender / ref_size,
        "direction": buf.direction,
    }
    return positions, clusters, meta


def shape_text_ft(text, font_filename):
    """Shape text with FreeType.

    FreeType supports basic shaping with kerning, but no glyph replacements,
    so each character becomes exactly one glyph.
    """
    ref_size = REF_GLYPH_SIZE
    face = CACHE_FT[font_filename]

    n_glyphs = len(text)
    glyph_indices = [face.get_char_index(c) for c in text]

    # Advances can be in font units or in 16.16 format
    advances = [face.get_advance(i, freetype.FT_LOAD_DEFAULT) for i in glyph_indices]
    advances = [(x / 65536 if x > 65536 * 10 else x) for x in advances]

    positions = np.zeros((n_glyphs, 2), np.float32)
    pen_x = 0
    prev = " "
    for i in range(n_glyphs):
        c = text[i]
        kerning = face.get_kerning(prev, c, freetype.FT_KERNING_UNSCALED)
        pen_x += kerning.x / 64
        positions[i] = pen_x / ref_size, 0
        pen_x += advances[i]
        prev = c

    meta = {
        "extent": pen_x / ref_size,
        "ascender": face.ascender / face.units_per_EM,
        "descender": face.descender / face.units_per_EM,
        "direction": "ltr",
    }
    return positions, np.arange(n_glyphs), meta


def char_offsets_from_clusters(n_chars, positions, clusters):
    """Get the x offset of each character from the shaped glyphs.

    Characters that do not start a cluster (e.g. the second char of a
    ligature) share the offset of the cluster they belong to.
    """
    offsets = np.zeros((n_chars,), np.float32)
    assigned = np.zeros((n_chars,), bool)
    for g in range(len(clusters)):
        c = int(clusters[g])
        if 0 <= c < n_chars and not assigned[c]:
            offsets[c] = positions[g, 0]
            assigned[c] = True
    for i in range(1, n_chars):
        if not assigned[i]:
            offsets[i] = offsets[i - 1]
    return offsets


class LayoutSettings:
    """The settings that affect how text is laid out.

    Parameters:
        font_size (float): the size of the font. Default 12.
        max_width (float): the width at which words wrap. Zero means no wrapping.
        max_height (float): lines that end below this height are dropped.
            Zero means no truncation.
        line_height (float): a factor for the distance between lines. Default 1.2.
        text_align (str): "left", "center" or "right". Only has effect when
            max_width is set.
    """

    __slots__ = ["font_size", "line_height", "max_height", "max_width", "text_align"]

    def __init__(
        self,
        font_size=12,
        *,
        max_width=0,
        max_height=0,
        line_height=1.2,
        text_align="left",
    ):
        self.font_size = float(font_size)
        self.max_width = float(max_width or 0)
        self.max_height = float(max_height or 0)
        self.line_height = float(line_height)
        align = str(text_align).lower()
        if align not in TextAlign.__fields__:
            raise ValueError(f"Text align must be one of {TextAlign}. Got {text_align!r}.")
        self.text_align = TextAlign[align]
        if self.font_size <= 0:
            raise ValueError("font_size must be larger than zero.")
        if self.max_width < 0 or self.max_height < 0:
            raise ValueError("max_width and max_height cannot be negative.")

    def __repr__(self):
        fields = ", ".join(f"{key}={getattr(self, key)!r}" for key in self.__slots__)
        return f"LayoutSettings({fields})"

    def __eq__(self, other):
        if not isinstance(other, LayoutSettings):
            return NotImplemented
        return all(getattr(self, k) == getattr(other, k) for k in self.__slots__)


class LineInfo:
    """Metrics of one laid-out line."""

    __slots__ = ["end_index", "height", "start_index", "top", "width"]

    def __init__(self, start_index, end_index, top, height, width):
        self.start_index = start_index
        self.end_index = end_index
        self.top = top
        self.height = height
        self.width = width

    def __repr__(self):
        return (
            f"<LineInfo chars {self.start_index}:{self.end_index}"
            f" top={self.top} height={self.height}>"
        )


class TextLayout:
    """The result of laying out a piece of text.

    Holds a cursor position for each character that made it into the layout.
    When the layout is truncated, ``character_count`` is smaller than the
    length of the text. Otherwise there is one more cursor, at the end of
    the text, which ``get_cursor_position(character_count)`` returns.
    """

    def __init__(self, text, cursor_positions, advances, lines, *, end_cursor=None):
        self._text = text
        self._cursor_positions = cursor_positions
        self._cursor_positions.flags.writeable = False
        self._advances = advances
        self._advances.flags.writeable = False
        self._lines = tuple(lines)
        if end_cursor is not None:
            end_cursor = float(end_cursor[0]), float(end_cursor[1])
        self._end_cursor = end_cursor

    def __repr__(self):
        return f"<TextLayout {self.character_count} chars in {len(self._lines)} lines>"

    @property
    def text(self):
        """The text that this layout was made for."""
        return self._text

    @property
    def character_count(self):
        """The number of laid-out characters."""
        return len(self._cursor_positions)

    @property
    def cursor_positions(self):
        """A read-only (n, 2) array with the cursor position of each character."""
        return self._cursor_positions

    @property
    def advances(self):
        """A read-only array with the horizontal advance of each character."""
        return self._advances

    @property
    def lines(self):
        """A tuple of LineInfo objects."""
        return self._lines

    @property
    def end_cursor(self):
        """The (x, y) cursor position after the last character, or None if truncated."""
        return self._end_cursor

    def get_cursor_position(self, index):
        """Get the (x, y) cursor position of the character at the given index.

        The index can be ``character_count`` to get the end cursor, unless
        the layout is truncated.
        """
        if index == len(self._cursor_positions) and self._end_cursor is not None:
            return self._end_cursor
        x, y = self._cursor_positions[index]
        return float(x), float(y)

    def get_size(self):
        """Get the (width, height) of the laid-out text."""
        if not self._lines:
            return 0.0, 0.0
        width = max(line.width for line in self._lines)
        last = self._lines[-1]
        return float(width), float(-last.top + last.height)


class TextShaper:
    """Base class for objects that lay out text.

    Subclasses implement ``shape_piece()`` and ``get_font_extents()``;
    this class takes care of line breaking, alignment and truncation.
    """

    def shape_piece(self, text):
        """Get the per-character x offsets and the total extent of a piece
        of text without newlines, in unit font size.
        """
        raise NotImplementedError()

    def get_font_extents(self):
        """Get (ascender, descender) in unit font size."""
        raise NotImplementedError()

    def layout(self, text, settings):
        """Lay out the given text, returning a TextLayout.

        Parameters:
            text (str): the text to lay out.
            settings (LayoutSettings): font size, wrapping width, etc.
        """
        font_size = settings.font_size
        max_width = settings.max_width
        ascender, descender = self.get_font_extents()
        line_height = (ascender - descender) * font_size * settings.line_height

        n = len(text)
        positions = np.zeros((n, 2), np.float32)
        advances = np.zeros((n,), np.float32)

        # Each line is (start_index, end_index, width without trailing whitespace)
        lines = []
        line_start = 0
        pen_x = 0.0
        line_width = 0.0

        for kind, start, piece in tokenize_text(text):
            if kind == "nl":
                positions[start, 0] = pen_x
                lines.append((line_start, start + 1, line_width))
                line_start = start + 1
                pen_x = line_width = 0.0
                continue

            offsets, extent = self.shape_piece(piece)
            offsets = offsets * font_size
            extent = extent * font_size

            if (
                kind != "ws"
                and max_width > 0
                and line_width > 0
                and pen_x + extent > max_width
            ):
                lines.append((line_start, start, line_width))
                line_start = start
                pen_x = line_width = 0.0

            end = start + len(piece)
            positions[start:end, 0] = pen_x + offsets
            advances[start:end] = np.diff(np.append(offsets, extent))
            pen_x += extent
            if kind != "ws":
                line_width = pen_x

        lines.append((line_start, n, line_width))

        # Place lines from the top down, dropping what does not fit
        line_infos = []
        end_cursor = None
        for i, (start, end, width) in enumerate(lines):
            top = -i * line_height
            if settings.max_height > 0 and (i + 1) * line_height > settings.max_height:
                break
            shift = 0.0
            if max_width > 0:
                shift = (max_width - width) * ALIGN_FACTORS[settings.text_align]
                positions[start:end, 0] += shift
            positions[start:end, 1] = top
            line_infos.append(LineInfo(start, end, top, line_height, width))
            if i == len(lines) - 1:
                # The pen after the last character
                end_cursor = (pen_x + shift, top)

        count = line_infos[-1].end_index if line_infos else 0
        if count < n:
            logger.debug(f"Text layout truncated to {count} of {n} characters.")
        return TextLayout(
            text,
            positions[:count].copy(),
            advances[:count].copy(),
            line_infos,
            end_cursor=end_cursor,
        )


class MonospaceShaper(TextShaper):
    """A shaper that gives each character the same advance.

    Needs no font, which makes layouts fast and fully predictable.

    Parameters:
        advance (float): the advance of each character, in unit font size.
        ascender (float): the ascender, in unit font size.
        descender (float): the descender (negative), in unit font size.
    """

    def __init__(self, advance=0.6, *, ascender=0.8, descender=-0.2):
        self._advance = float(advance)
        self._ascender = float(ascender)
        self._descender = float(descender)

    @property
    def advance(self):
        return self._advance

    def shape_piece(self, text):
        n = len(text)
        return np.arange(n, dtype=np.float32) * self._advance, n * self._advance

    def get_font_extents(self):
        return self._ascender, self._descender


class HarfbuzzShaper(TextShaper):
    """A shaper that uses Harfbuzz to shape words.

    Parameters:
        font_filename (str): the font file to use. If None, the default font
            is looked up (see ``find_font_file()``).
        direction (str | None): the text direction overload ("ltr" or "rtl").
    """

    def __init__(self, font_filename=None, *, direction=None):
        if font_filename is None:
            font_filename = find_font_file()
            if font_filename is None:
                raise RuntimeError("Could not find a font file to shape text with.")
        self._font_filename = str(font_filename)
        self._direction = direction
        self._extents = None

    @property
    def font_filename(self):
        return self._font_filename

    def shape_piece(self, text):
        positions, clusters, meta = shape_text_hb(
            text, self._font_filename, self._direction
        )
        return char_offsets_from_clusters(len(text), positions, clusters), meta["extent"]

    def get_font_extents(self):
        if self._extents is None:
            meta = shape_text_hb(" ", self._font_filename, self._direction)[2]
            self._extents = meta["ascender"], meta["descender"]
        return self._extents


class FreetypeShaper(HarfbuzzShaper):
    """A shaper that uses FreeType. Supports kerning but not ligatures."""

    def __init__(self, font_filename=None):
        super().__init__(font_filename)

    def shape_piece(self, text):
        positions, clusters, meta = shape_text_ft(text, self._font_filename)
        return char_offsets_from_clusters(len(text), positions, clusters), meta["extent"]

    def get_font_extents(self):
        if self._extents is None:
            meta = shape_text_ft(" ", self._font_filename)[2]
            self._extents = meta["ascender"], meta["descender"]
        return self._extents


def get_default_shaper():
    """Get a shaper for text objects that were not given one.

    Uses Harfbuzz with the font in ``SPRITETEXT_FONT``, or the first
    system font that can be found. Falls back to a MonospaceShaper.
    """
    font_filename = os.getenv("SPRITETEXT_FONT", "") or find_font_file()
    if font_filename:
        return HarfbuzzShaper(font_filename)
    logger.warning("No font file found, falling back to monospace text layout.")
    return MonospaceShaper()
