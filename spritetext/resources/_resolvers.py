"""
Resolvers map sprite names (as written in the markup) to sprites.
"""

from ._atlas import SpriteAtlas


class SpriteResolver:
    """Base class for objects that look up a sprite by name.

    Subclasses implement ``resolve()``, which returns a ``Sprite``, or None
    when there is no sprite with that name.
    """

    def __init__(self, atlas):
        if not isinstance(atlas, SpriteAtlas):
            raise TypeError(f"Expected a SpriteAtlas, not {type(atlas).__name__}.")
        self._atlas = atlas

    def __repr__(self):
        return f"<{self.__class__.__name__} for {self._atlas!r}>"

    @property
    def atlas(self):
        """The atlas in which sprites are looked up."""
        return self._atlas

    def resolve(self, name):
        raise NotImplementedError()


class AtlasResolver(SpriteResolver):
    """Resolve names with a direct lookup in the atlas."""

    def resolve(self, name):
        return self._atlas.get_sprite(name)


class SearchResolver(SpriteResolver):
    """Resolve names by searching the packables of the atlas.

    Each packable is searched for sprites whose name contains the requested
    name; a candidate is only accepted when its name matches exactly. This is
    slower than the ``AtlasResolver``, but it mirrors how authoring tools
    locate assets, and is handy when sprites are organized in many groups.
    The result does not differ from an ``AtlasResolver``.
    """

    def resolve(self, name):
        for packable in self._atlas.packables:
            for sprite in self._atlas.find_sprites(name, packable):
                if sprite.name == name:
                    return sprite
        return None
