"""
The enums used in spritetext. The enums are all available from the root ``spritetext`` namespace.

.. currentmodule:: spritetext.utils.enums

.. autosummary::
    :toctree: utils/enums
    :template: ../_templates/custom_layout.rst

    ReconcileState
    TextAlign

"""

from wgpu.utils import BaseEnum


__all__ = ["ReconcileState", "TextAlign"]


class Enum(BaseEnum):
    """Enum base class for spritetext."""


class ReconcileState(Enum):
    """The states of a SpriteText widget with respect to its inline sprites."""

    idle = None  #: nothing to do, anchors match the text.
    text_changing = None  #: scan and rewrite are running.
    pending = None  #: a batch waits for the next tick.
    reconciling = None  #: the batch is being applied to the anchors.


class TextAlign(Enum):
    """The horizontal alignment of lines, when a maximum width is set."""

    left = None  #: lines start at the left edge.
    center = None  #: lines are centered.
    right = None  #: lines end at the right edge.
