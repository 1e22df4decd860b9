import math
import threading

import numpy as np

from ._base import Resource
from ..utils import logger


def generate_size_table(max_size=8192):
    """Yield (size, area, ref_area) tuples, for ref areas that double each step.

    Each size is the smallest multiple of 8 whose square covers the ref area.
    """
    size = 0
    ref_area = 256
    while size < max_size:
        root = math.isqrt(ref_area - 1) + 1
        size = min(max(size, -(-root // 8) * 8), max_size)
        yield size, size * size, ref_area
        ref_area *= 2


# Atlas sizes, ordered by (roughly doubling) area.
SIZES = list(generate_size_table())


def get_suitable_size(approximate_area):
    """Get the atlas size whose area is closest to the given area."""
    for (size1, area1, _), (size2, area2, _) in zip(SIZES, SIZES[1:]):
        if area2 >= approximate_area:
            if approximate_area - area1 < area2 - approximate_area:
                return size1
            return size2
    return SIZES[-1][0]


def as_rgba(image):
    """Convert the given image to a contiguous uint8 RGBA array."""
    image = np.asarray(image)
    if image.dtype.kind == "f":
        image = (np.clip(image, 0, 1) * 255 + 0.5).astype(np.uint8)
    elif image.dtype.kind == "u" and image.dtype.itemsize > 1:
        # E.g. 16-bit PNG, keep the most significant byte
        image = (image >> (8 * (image.dtype.itemsize - 1))).astype(np.uint8)
    elif image.dtype != np.uint8:
        raise ValueError(
            f"Sprite images must be unsigned int or float, not {image.dtype}."
        )
    if image.ndim == 2:
        image = image[:, :, None]
    if image.ndim != 3 or image.shape[2] not in (1, 2, 3, 4):
        raise ValueError(f"Unsupported shape for a sprite image: {image.shape}")
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise ValueError("Sprite images cannot be empty.")

    rgba = np.full(image.shape[:2] + (4,), 255, np.uint8)
    nchannels = image.shape[2]
    if nchannels <= 2:  # gray (+ alpha)
        rgba[:, :, :3] = image[:, :, :1]
        if nchannels == 2:
            rgba[:, :, 3] = image[:, :, 1]
    else:
        rgba[:, :, :nchannels] = image
    return rgba


class SkylinePacker:
    """Skyline bottom-left rectangle packing.

    The skyline is a list of (x, y, width) segments that together span the
    width of the bin. A rectangle goes where its top ends up lowest (ties go
    to the narrowest segment), after which the skyline is raised below it.
    See "A Thousand Ways to Pack the Bin" by Jukka Jylänki (2010).
    """

    def __init__(self, width, height):
        self.reset(width, height)

    def reset(self, width, height):
        """Forget all packed rectangles, and set the bin size."""
        self._width = int(width)
        self._height = int(height)
        self._skyline = [(0, 0, self._width)]

    def _fit(self, index, width, height):
        x = self._skyline[index][0]
        if x + width > self._width:
            return None
        y = 0
        remaining = width
        for _, segment_y, segment_width in self._skyline[index:]:
            if remaining <= 0:
                break
            y = max(y, segment_y)
            if y + height > self._height:
                return None
            remaining -= segment_width
        return y

    def pack(self, width, height):
        """Claim a spot for a rectangle. Returns its (x, y), or None if it does not fit."""
        best = None
        for index, (_, _, segment_width) in enumerate(self._skyline):
            y = self._fit(index, width, height)
            if y is None:
                continue
            key = (y + height, segment_width)
            if best is None or key < best[0]:
                best = key, index, y
        if best is None:
            return None

        _, index, y = best
        x = self._skyline[index][0]
        self._raise(index, x, y + height, width)
        return x, y

    def _raise(self, index, x, top, width):
        skyline = self._skyline
        skyline.insert(index, (x, top, width))
        right = x + width

        # Cut away what the new segment covers
        i = index + 1
        while i < len(skyline):
            segment_x, segment_y, segment_width = skyline[i]
            if segment_x >= right:
                break
            covered = right - segment_x
            if covered < segment_width:
                skyline[i] = right, segment_y, segment_width - covered
                break
            del skyline[i]

        # Join neighbours of equal height
        i = 0
        while i < len(skyline) - 1:
            x1, y1, w1 = skyline[i]
            x2, y2, w2 = skyline[i + 1]
            if y1 == y2:
                skyline[i] = x1, y1, w1 + w2
                del skyline[i + 1]
            else:
                i += 1


class Sprite:
    """A named image that lives in a SpriteAtlas.

    Sprites are created with ``SpriteAtlas.add_sprite()``. The location of a
    sprite in the atlas can change when the atlas is repacked, so the
    region is always looked up via the atlas. Once the sprite is removed
    from the atlas, its size is (0, 0) and it has no region.
    """

    __slots__ = ["__weakref__", "_atlas", "_index", "_name", "_packable"]

    def __init__(self, atlas, index, name, packable):
        self._atlas = atlas
        self._index = index
        self._name = name
        self._packable = packable

    def __repr__(self):
        if self._index is None:
            return f"<Sprite {self._name!r} (removed) from {self._atlas!r}>"
        w, h = self.size
        return f"<Sprite {self._name!r} {w}x{h} in {self._atlas!r}>"

    @property
    def name(self):
        return self._name

    @property
    def atlas(self):
        """The SpriteAtlas that this sprite belongs to."""
        return self._atlas

    @property
    def packable(self):
        """The name of the group of sprites (within the atlas) this sprite was added to."""
        return self._packable

    @property
    def index(self):
        """The slot of the sprite in the atlas, or None if it was removed."""
        return self._index

    @property
    def removed(self):
        """Whether this sprite was removed from its atlas."""
        return self._index is None

    @property
    def size(self):
        """The native (width, height) of the sprite in pixels."""
        if self._index is None:
            return (0, 0)
        slot = self._atlas._slots[self._index]
        return (slot[2], slot[3])

    @property
    def origin(self):
        """The (x, y) location of the sprite in the atlas array."""
        if self._index is None:
            return (0, 0)
        slot = self._atlas._slots[self._index]
        return (slot[0], slot[1])

    def get_region(self):
        """Return a copy of the RGBA pixels of this sprite, or None if it was removed."""
        if self._index is None:
            return None
        return self._atlas.get_region(self._index)


class SpriteAtlas(Resource):
    """A named collection of sprites, packed into a single RGBA array (thread-safe).

    Sprites are added in named groups called packables (e.g. one per source
    directory). When the array is full, it is repacked, and grown if that is
    not enough. Sprites can therefore move, which is why a sprite looks its
    region up through the atlas.

    Parameters
    ----------
    name : str
        The name of the atlas.
    initial_size : int
        The approximate initial width and height of the array.

    """

    def __init__(self, name="", *, initial_size=256):
        super().__init__()
        self._lock = threading.RLock()
        self._name = str(name)

        self._sprites = {}  # name -> Sprite
        self._packables = {}  # packable name -> list of sprite names

        # One [x, y, w, h] per slot, None for freed slots
        self._slots = []
        self._free_slots = []
        self._allocated_area = 0
        self._freed_area = 0

        size = get_suitable_size(initial_size**2)
        self._array = np.zeros((size, size, 4), np.uint8)
        self._packer = SkylinePacker(size, size)

    def __repr__(self):
        return f"<SpriteAtlas {self._name!r} with {len(self._sprites)} sprites>"

    def __len__(self):
        return len(self._sprites)

    def __contains__(self, name):
        return name in self._sprites

    @property
    def name(self):
        return self._name

    @property
    def array(self):
        """The RGBA array holding all sprites (read-only view)."""
        view = self._array.view()
        view.flags.writeable = False
        return view

    @property
    def sprite_names(self):
        """A tuple with the names of all sprites, in order of addition."""
        return tuple(self._sprites)

    @property
    def packables(self):
        """A tuple with the names of the packables (groups of sprites)."""
        return tuple(self._packables)

    @property
    def allocated_area(self):
        """The area taken by the sprites."""
        return self._allocated_area

    @property
    def total_area(self):
        """The area of the array."""
        height, width = self._array.shape[:2]
        return width * height

    # --- sprite management

    def add_sprite(self, name, image, packable="default"):
        """Add an image to the atlas under the given name. Returns the new Sprite.

        The image can be a uint8 or float array of shape (h, w), (h, w, 3)
        or (h, w, 4). Names must be unique within the atlas.
        """
        name = str(name)
        rgba = as_rgba(image)
        with self._lock:
            if name in self._sprites:
                raise ValueError(f"The atlas already has a sprite named {name!r}.")
            h, w = rgba.shape[:2]
            index = self._allocate_slot(w, h)
            self.set_region(index, rgba)
            sprite = Sprite(self, index, name, str(packable))
            self._sprites[name] = sprite
            self._packables.setdefault(sprite.packable, []).append(name)
            self._bump_rev()
        return sprite

    def remove_sprite(self, name):
        """Remove the sprite with the given name from the atlas."""
        with self._lock:
            sprite = self._sprites.pop(name)
            names = self._packables[sprite.packable]
            names.remove(name)
            if not names:
                del self._packables[sprite.packable]
            self._free_slot(sprite.index)
            sprite._index = None
            self._bump_rev()

    def get_sprite(self, name):
        """Get the sprite with exactly the given name, or None."""
        return self._sprites.get(name)

    def find_sprites(self, query, packable=None):
        """Get the sprites whose name contains the query (case-insensitive).

        If packable is given, only that group of sprites is searched.
        """
        query = query.lower()
        if packable is None:
            names = self._sprites
        else:
            names = self._packables.get(packable, ())
        return [self._sprites[name] for name in names if query in name.lower()]

    # --- regions

    def get_region(self, index):
        """Return a copy of the pixels in the given slot."""
        with self._lock:
            x, y, w, h = self._slots[index]
            return self._array[y : y + h, x : x + w].copy()

    def set_region(self, index, region):
        """Write pixels into the given slot."""
        with self._lock:
            x, y, w, h = self._slots[index]
            self._array[y : y + h, x : x + w] = region

    def _repack(self, size):
        """Move all sprites into a fresh array of the given size.
        Returns False (and leaves the atlas untouched) if they do not fit.
        """
        packer = SkylinePacker(size, size)
        placements = []
        for index, slot in enumerate(self._slots):
            if slot is None:
                continue
            pos = packer.pack(slot[2], slot[3])
            if pos is None:
                return False
            placements.append((slot, pos))

        array = np.zeros((size, size, 4), np.uint8)
        for slot, (x2, y2) in placements:
            x1, y1, w, h = slot
            array[y2 : y2 + h, x2 : x2 + w] = self._array[y1 : y1 + h, x1 : x1 + w]
            slot[:2] = x2, y2

        self._array = array
        self._packer = packer
        self._freed_area = 0
        logger.debug(f"Repacked {self!r} into a {size}x{size} array.")
        return True

    def _allocate_slot(self, w, h):
        pos = self._packer.pack(w, h)
        if pos is None:
            size = self._array.shape[0]
            # Reclaim freed space first, if there is a fair amount of it
            if self._freed_area >= 0.5 * self._allocated_area > 0:
                self._repack(size)
                pos = self._packer.pack(w, h)
            while pos is None:
                new_size = get_suitable_size(size * size * 2)
                if new_size == size:
                    raise RuntimeError("Sprite atlas is out of space and cannot be larger.")
                size = new_size
                if self._repack(size):
                    pos = self._packer.pack(w, h)

        slot = [pos[0], pos[1], w, h]
        if self._free_slots:
            index = self._free_slots.pop()
            self._slots[index] = slot
        else:
            index = len(self._slots)
            self._slots.append(slot)
        self._allocated_area += w * h
        return index

    def _free_slot(self, index):
        self.set_region(index, 0)
        x, y, w, h = self._slots[index]
        self._slots[index] = None
        self._free_slots.append(index)
        self._freed_area += w * h
        self._allocated_area -= w * h
