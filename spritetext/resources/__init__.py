"""
Resources represent the data that objects refer to.

.. currentmodule:: spritetext.resources

.. autosummary::
    :toctree: resources/
    :template: ../_templates/custom_layout.rst

    Resource
    SpriteAtlas
    Sprite
    SpriteResolver
    AtlasResolver
    SearchResolver

"""

# ruff: noqa: F401

from ._base import Resource
from ._atlas import SpriteAtlas, Sprite
from ._resolvers import SpriteResolver, AtlasResolver, SearchResolver
