"""
Scanning of inline sprite markup.

The markup looks like ``<sprite=NAME x=DX y=DY size=S/>``, where the x, y
and size fields are optional, but must appear in that order. Matching is
case-insensitive. A single token never spans a newline, but the text around
it may contain any number of lines.
"""

import re
import math


SPRITE_PATTERN = re.compile(
    r"<(?:sprite=)(.*?)(?: x=(.*?))?(?: y=(.*?))?(?: size=(.*?))?/>",
    re.IGNORECASE | re.MULTILINE,
)


def parse_number(value, default=0.0):
    """Parse a numeric markup field, returning ``default`` on failure.

    Non-finite values and underscore digit separators are not accepted.
    """
    if value is None:
        return default
    if "_" in value:
        return default
    try:
        number = float(value)
    except ValueError:
        return default
    if not math.isfinite(number):
        return default
    return number


class SpriteToken:
    """One inline sprite occurrence in a piece of text.

    Parameters:
        start (int): the offset of the markup in the original text.
        length (int): the number of characters of the markup.
        name (str): the sprite name.
        offset_x (float): horizontal offset of the image. Default 0.
        offset_y (float): vertical offset of the image. Default 0.
        scale (float): uniform scale of the image. Default 1.
    """

    __slots__ = ["_length", "_name", "_offset_x", "_offset_y", "_scale", "_start"]

    def __init__(self, start, length, name, offset_x=0.0, offset_y=0.0, scale=1.0):
        self._start = int(start)
        self._length = int(length)
        self._name = str(name)
        self._offset_x = float(offset_x)
        self._offset_y = float(offset_y)
        self._scale = float(scale)

    def __repr__(self):
        return (
            f"<SpriteToken {self._name!r} at {self._start}:{self.end}"
            f" offset=({self._offset_x}, {self._offset_y}) scale={self._scale}>"
        )

    def __eq__(self, other):
        if not isinstance(other, SpriteToken):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def _key(self):
        return (
            self._start,
            self._length,
            self._name,
            self._offset_x,
            self._offset_y,
            self._scale,
        )

    @property
    def start(self):
        """The index of the first character of the markup in the raw text."""
        return self._start

    @property
    def length(self):
        """The number of characters of the markup."""
        return self._length

    @property
    def end(self):
        """The index just past the markup in the raw text."""
        return self._start + self._length

    @property
    def name(self):
        """The name of the sprite to show."""
        return self._name

    @property
    def offset_x(self):
        return self._offset_x

    @property
    def offset_y(self):
        return self._offset_y

    @property
    def scale(self):
        """The uniform scale factor for the image."""
        return self._scale

    @classmethod
    def from_match(cls, match):
        """Create a token from a match of ``SPRITE_PATTERN``."""
        name, x, y, size = match.groups()
        # The scale is 1 only when the size field is absent. A size that
        # fails to parse becomes 0, just like x and y.
        scale = 1.0 if size is None else parse_number(size, 0.0)
        return cls(
            match.start(),
            match.end() - match.start(),
            name,
            parse_number(x, 0.0),
            parse_number(y, 0.0),
            scale,
        )


def iter_sprite_tokens(text):
    """Yield the sprite tokens in the given text, from left to right."""
    for match in SPRITE_PATTERN.finditer(text):
        yield SpriteToken.from_match(match)


def scan_sprite_tokens(text):
    """Get a list of all sprite tokens in the given text."""
    return list(iter_sprite_tokens(text))
