"""
Rewriting of text that contains sprite markup.

The markup of each sprite that can be resolved is removed from the text,
and the position where it used to be (in the rewritten text) is recorded.
Markup that cannot be resolved stays in the text as-is, so the user can
see it.
"""

from .. import logger


class TokenResolution:
    """A sprite token with its resolved sprite and its offset in the display text."""

    __slots__ = ["display_offset", "sprite", "token"]

    def __init__(self, token, sprite, display_offset):
        self.token = token
        self.sprite = sprite
        self.display_offset = int(display_offset)

    def __repr__(self):
        return f"<TokenResolution {self.token.name!r} at {self.display_offset}>"


class PendingBatch:
    """The result of a scan that waits to be applied to the anchors.

    Holds the display text and the list of token resolutions, index-aligned
    with the anchors that will represent them.
    """

    __slots__ = ["_display_text", "_resolutions"]

    def __init__(self, display_text, resolutions):
        self._display_text = display_text
        self._resolutions = tuple(resolutions)

    def __repr__(self):
        return f"<PendingBatch with {len(self._resolutions)} sprites>"

    def __len__(self):
        return len(self._resolutions)

    @property
    def display_text(self):
        """The text with all resolved markup removed."""
        return self._display_text

    @property
    def resolutions(self):
        """A tuple of TokenResolution objects, in order of appearance."""
        return self._resolutions


def rewrite_text(text, tokens, resolver):
    """Remove resolvable sprite markup from the text.

    Parameters:
        text (str): the raw text.
        tokens (list): the SpriteToken objects found in the text, in order.
        resolver (SpriteResolver): maps a sprite name to a sprite, or None.

    Returns:
        display_text (str): the text without the markup of resolved tokens.
        resolutions (list): a TokenResolution for each resolved token.
    """
    pieces = []
    resolutions = []
    removed = 0
    pos = 0

    for token in tokens:
        sprite = resolver.resolve(token.name)
        if sprite is None:
            logger.debug(f"Could not resolve sprite {token.name!r}, keeping markup.")
            continue
        pieces.append(text[pos : token.start])
        resolutions.append(TokenResolution(token, sprite, token.start - removed))
        removed += token.length
        pos = token.end

    pieces.append(text[pos:])
    return "".join(pieces), resolutions
