from __future__ import annotations

import weakref
from typing import Callable, Iterator, List, Tuple

import numpy as np
import pylinalg as la

from ..utils import logger
from ..utils.transform import AffineTransform


class WorldObject:
    """Base class for the objects in a scene graph.

    A world object has at most one parent and any number of children. Its
    ``local`` transform places it relative to its parent. The host loop
    (see :class:`Ticker`) calls the lifecycle hooks of active objects.

    Parameters
    ----------
    visible : bool
        Whether the object is visible. Invisible objects (and their children)
        are not active, and are skipped by the ``Ticker``.
    name : str
        The name of the object.

    Notes
    -----
    Use :class:`Group` to collect multiple world objects into a single empty
    world object.

    """

    def __init__(self, *, visible: bool = True, name: str = "") -> None:
        self._parent: weakref.ReferenceType[WorldObject] | None = None
        self._children: List[WorldObject] = []
        self._destroyed = False

        #: The transform of the object, relative to its parent.
        self.local = AffineTransform()

        self.visible = visible
        self.name = name

    def __repr__(self):
        return f"<spritetext.{self.__class__.__name__} {self.name} at {hex(id(self))}>"

    @property
    def visible(self) -> bool:
        """Whether the object is visible (and can be active). Default True."""
        return self._visible

    @visible.setter
    def visible(self, visible: bool) -> None:
        self._visible = bool(visible)

    @property
    def destroyed(self) -> bool:
        """Whether ``destroy()`` has been called on this object."""
        return self._destroyed

    @property
    def active_in_hierarchy(self) -> bool:
        """Whether this object and all its ancestors are visible and alive."""
        ob = self
        while ob is not None:
            if ob._destroyed or not ob._visible:
                return False
            ob = ob.parent
        return True

    @property
    def parent(self) -> WorldObject | None:
        """The parent of this object, or None (read-only)."""
        return None if self._parent is None else self._parent()

    @property
    def children(self) -> Tuple[WorldObject, ...]:
        """A tuple with the children of this object (read-only)."""
        return tuple(self._children)

    @property
    def world_matrix(self) -> np.ndarray:
        """The affine matrix that maps local coordinates to world coordinates."""
        parent = self.parent
        if parent is None:
            return self.local.matrix
        return parent.world_matrix @ self.local.matrix

    def add(self, *objects: WorldObject, before: WorldObject | None = None) -> WorldObject:
        """Add child objects, and return self.

        An object that already has a parent is moved. If ``before`` is given,
        the objects are inserted in front of that child, in the given order.
        """
        for ob in objects:
            if ob._destroyed:
                raise ValueError(f"Cannot add destroyed object {ob!r}.")
            old_parent = ob.parent
            if old_parent is not None:
                old_parent.remove(ob)
            if before is None:
                self._children.append(ob)
            else:
                self._children.insert(self._children.index(before), ob)
            ob._parent = weakref.ref(self)
        return self

    def remove(self, *objects: WorldObject) -> None:
        """Remove the given child objects."""
        for ob in objects:
            if ob not in self._children:
                logger.warning(f"Cannot remove {ob!r}: not a child of {self!r}.")
                continue
            self._children.remove(ob)
            ob._parent = None

    def clear(self) -> None:
        """Remove all children."""
        children, self._children = self._children, []
        for ob in children:
            ob._parent = None

    def destroy(self) -> None:
        """Destroy this object and its children, immediately.

        The object is removed from its parent, and cannot be added to the
        scene graph again.
        """
        if self._destroyed:
            return
        for ob in reversed(self.children):
            ob.destroy()
        parent = self.parent
        if parent is not None:
            parent.remove(self)
        self._destroyed = True

    def traverse(
        self, callback: Callable[[WorldObject], None], skip_invisible: bool = False
    ) -> None:
        """Call the callback for this object and each of its descendants, depth first."""
        for ob in self.iter(skip_invisible=skip_invisible):
            callback(ob)

    def iter(
        self,
        filter_fn: Callable[[WorldObject], bool] | None = None,
        skip_invisible: bool = False,
    ) -> Iterator[WorldObject]:
        """Iterate over this object and its descendants, depth first.

        If ``filter_fn`` is given, only objects for which it returns True
        are yielded. If ``skip_invisible`` is True, invisible objects are
        skipped together with their children.
        """
        if skip_invisible and not self._visible:
            return
        if filter_fn is None or filter_fn(self):
            yield self
        for ob in tuple(self._children):
            yield from ob.iter(filter_fn, skip_invisible)

    def _get_local_bounding_box(self) -> np.ndarray | None:
        """The bounding box of the object itself, excluding children."""
        return None

    def get_bounding_box(self) -> np.ndarray | None:
        """Axis-aligned bounding box in parent space.

        Returns
        -------
        aabb : ndarray, [2, 3] or None
            An axis-aligned bounding box, or None when neither this object
            nor its children take up space.
        """
        aabbs = [ob.get_bounding_box() for ob in self._children]
        aabbs.append(self._get_local_bounding_box())
        aabbs = [aabb for aabb in aabbs if aabb is not None]
        if not aabbs:
            return None

        aabbs = np.stack(aabbs)
        combined = np.stack([aabbs[:, 0].min(axis=0), aabbs[:, 1].max(axis=0)])
        return la.aabb_transform(combined, self.local.matrix)

    # --- hooks for the host loop

    def _update_object(self):
        """Called by the ``Ticker`` once per tick, while the object is active.
        Good time for lazy updates.
        """
        pass

    def _on_enable(self):
        """Called by the ``Ticker`` when the object becomes active."""
        pass

    def _on_disable(self):
        """Called by the ``Ticker`` when the object stops being active."""
        pass
