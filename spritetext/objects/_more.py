import numpy as np

from ._base import WorldObject
from ..resources import Sprite


class Group(WorldObject):
    """A group of objects.

    A Group is useful when manipulating the scene graph as children can be
    jointly moved/scaled. It has no visual properties.

    Parameters
    ----------
    visible : bool
        If true, the object and its children are visible.

    name : str
        The name of the group.

    """

    def __init__(self, *, visible=True, name=""):
        super().__init__(visible=visible, name=name)


class Scene(Group):
    """Root of the scene graph.

    The scene holds all objects that take part in the update loop as
    either direct or indirect children/nested objects.
    """


class Image(WorldObject):
    """A 2D image showing a sprite.

    The image is centered on its local position. Its size is in local units
    and can be reset to the native size of the sprite with ``set_native_size()``.

    Parameters
    ----------
    sprite : Sprite | None
        The sprite to show.
    enabled : bool
        Whether the image is shown. Alias for ``visible``.
    interactive : bool
        Whether the image can be the target of pointer events. Default True.
    name : str
        The name of the object.

    """

    def __init__(self, sprite=None, *, enabled=True, interactive=True, name=""):
        super().__init__(visible=enabled, name=name)
        self._size = np.zeros((2,), float)
        self.sprite = sprite
        self.interactive = interactive

    @property
    def sprite(self):
        """The Sprite shown by this image, or None."""
        return self._sprite

    @sprite.setter
    def sprite(self, sprite):
        if not (sprite is None or isinstance(sprite, Sprite)):
            raise TypeError(f"Image.sprite must be a Sprite or None, not {sprite!r}")
        self._sprite = sprite

    @property
    def enabled(self):
        """Whether the image is shown. Disabled images stay in the scene graph."""
        return self.visible

    @enabled.setter
    def enabled(self, value):
        self.visible = value

    @property
    def interactive(self):
        """Whether the image can be hit by pointer events."""
        return self._interactive

    @interactive.setter
    def interactive(self, value):
        self._interactive = bool(value)

    @property
    def size(self):
        """The (width, height) of the image in local units."""
        return tuple(float(x) for x in self._size)

    @size.setter
    def size(self, value):
        width, height = value
        if width < 0 or height < 0:
            raise ValueError("Image size cannot be negative.")
        self._size[:] = width, height

    def set_native_size(self):
        """Set the size of the image to the size of its sprite (in pixels)."""
        if self._sprite is not None:
            self.size = self._sprite.size

    def _get_local_bounding_box(self):
        if not self._size.any():
            return None
        half_w, half_h = self._size / 2
        return np.array([(-half_w, -half_h, 0), (half_w, half_h, 0)], float)


class SpriteAnchor(Image):
    """The image that a SpriteText creates to show an inline sprite.

    Anchors are owned by their SpriteText, which creates, positions and
    destroys them. They do not respond to pointer events.
    """

    def __init__(self, sprite=None, *, enabled=True, name="RichSprite"):
        super().__init__(sprite, enabled=enabled, interactive=False, name=name)
