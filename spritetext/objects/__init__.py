"""World Objects.

.. currentmodule:: spritetext.objects

.. rubric:: Objects
.. autosummary::
    :toctree: objects/
    :template: ../_templates/custom_layout.rst

    WorldObject
    Group
    Scene
    Image
    SpriteAnchor
    Text
    SpriteText
    AnchorReconciler

"""

# ruff: noqa: F401

from ._base import WorldObject
from ._more import Group, Scene, Image, SpriteAnchor
from ._text import Text
from ._anchors import AnchorReconciler
from ._sprite_text import SpriteText
