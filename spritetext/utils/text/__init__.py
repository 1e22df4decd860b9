"""
The stages of putting sprites in text:

* Scanning: find the sprite markup in the raw text.
* Rewriting: remove resolvable markup, record where it was.
* Shaping & layout: get a cursor position for each character of the display text.
* Reconciliation: put the anchors at the recorded positions (see ``spritetext.objects``).

This namespace contains the functions for the first three stages.
"""

from ._markup import (  # noqa: F401
    SPRITE_PATTERN,
    SpriteToken,
    iter_sprite_tokens,
    parse_number,
    scan_sprite_tokens,
)
from ._rewriter import TokenResolution, PendingBatch, rewrite_text  # noqa: F401
from ._tokenizers import tokenize_text  # noqa: F401
from ._fontfinder import find_font_file  # noqa: F401
from ._shaper import (  # noqa: F401
    LayoutSettings,
    LineInfo,
    TextLayout,
    TextShaper,
    MonospaceShaper,
    HarfbuzzShaper,
    FreetypeShaper,
    get_default_shaper,
)
