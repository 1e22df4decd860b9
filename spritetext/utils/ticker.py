"""
The host loop: drives the lifecycle hooks and per-tick updates of the
objects in a scene.
"""

import weakref

from . import logger
from .clock import Clock


class Ticker:
    """Ticks the objects in a scene.

    Each call to ``tick()`` walks the scene, skipping invisible subtrees.
    Objects that became active since the previous tick get ``_on_enable()``
    and objects that are no longer active get ``_on_disable()``. Then
    ``_update_object()`` is called on each active object, in traversal order.

    Parameters
    ----------
    scene : WorldObject
        The root of the objects to tick.
    clock : Clock | None
        The clock to measure time between ticks. A new one is created if omitted.

    """

    def __init__(self, scene, *, clock=None):
        self._scene = scene
        self._clock = clock or Clock()
        self._active = weakref.WeakSet()
        self._frame_count = 0

    @property
    def scene(self):
        """The root object that is ticked."""
        return self._scene

    @property
    def clock(self):
        return self._clock

    @property
    def frame_count(self):
        """The number of ticks performed so far."""
        return self._frame_count

    def tick(self):
        """Perform one tick. Returns the time since the previous tick."""
        delta = self._clock.tick()

        objects = list(self._scene.iter(skip_invisible=True))
        current = set(objects)

        for ob in list(self._active):
            if ob not in current:
                ob._on_disable()
        for ob in objects:
            if ob not in self._active:
                ob._on_enable()
        self._active = weakref.WeakSet(objects)

        for ob in objects:
            # Earlier updates may have hidden or destroyed this object
            if ob.active_in_hierarchy:
                ob._update_object()

        self._frame_count += 1
        logger.debug(f"Tick {self._frame_count}: updated {len(objects)} objects.")
        return delta

    def run(self, n=1):
        """Perform n ticks."""
        for _ in range(n):
            self.tick()
