"""Inline sprites in text labels."""

# ruff: noqa: F401, F403

from ._version import __version__, version_info
from . import utils

from .resources import *
from .objects import *

from .utils import enums, logger
from .utils.enums import *
from .utils.clock import Clock
from .utils.ticker import Ticker
from .utils.load import load_sprite_atlas
from .utils.text import (
    LayoutSettings,
    TextLayout,
    TextShaper,
    MonospaceShaper,
    HarfbuzzShaper,
    FreetypeShaper,
    SpriteToken,
    TokenResolution,
    PendingBatch,
    scan_sprite_tokens,
    rewrite_text,
)
