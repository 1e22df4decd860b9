from __future__ import annotations

from typing import Tuple

import numpy as np
import pylinalg as la


class AffineTransform:
    """The transform of a world object, relative to its parent.

    The transform is stored as a position, a rotation quaternion and a
    per-axis scale. The matrix is composed from these on demand, and
    kept until one of them changes.

    Parameters
    ----------
    position : ndarray, [3]
        The position of this transform expressed in the parent frame.
    rotation : ndarray, [4]
        The rotation quaternion of this transform.
    scale : ndarray, [3]
        The per-axis scale of this transform. A scalar is applied to all axes.

    Notes
    -----
    The arrays returned by the getters are read-only. Assign a new value to
    update the transform.

    """

    __slots__ = ("_matrix", "_position", "_rotation", "_scale")

    def __init__(self, position=(0, 0, 0), rotation=(0, 0, 0, 1), scale=(1, 1, 1)):
        self._position = self._frozen(np.zeros(3))
        self._rotation = self._frozen(np.array([0, 0, 0, 1], float))
        self._scale = self._frozen(np.ones(3))
        self._matrix = None
        self.position = position
        self.rotation = rotation
        self.scale = scale

    def __repr__(self):
        return (
            f"<AffineTransform position={self._position.tolist()}"
            f" scale={self._scale.tolist()}>"
        )

    @staticmethod
    def _frozen(array):
        array.flags.writeable = False
        return array

    def _assign(self, array, value):
        array.flags.writeable = True
        try:
            array[:] = value
        finally:
            array.flags.writeable = False
        self._matrix = None

    @property
    def position(self) -> np.ndarray:
        """The origin of the object in parent space. Setting an (x, y) pair puts z at 0."""
        return self._position

    @position.setter
    def position(self, value):
        value = np.asarray(value, dtype=float)
        if value.shape == (2,):
            value = np.append(value, 0.0)
        self._assign(self._position, value)

    @property
    def rotation(self) -> np.ndarray:
        """The orientation as a quaternion."""
        return self._rotation

    @rotation.setter
    def rotation(self, value):
        self._assign(self._rotation, value)

    @property
    def scale(self) -> np.ndarray:
        """The per-axis scale. Setting a scalar scales all axes uniformly."""
        return self._scale

    @scale.setter
    def scale(self, value):
        self._assign(self._scale, value)

    @property
    def x(self) -> float:
        return float(self._position[0])

    @x.setter
    def x(self, value):
        self.position = value, self._position[1], self._position[2]

    @property
    def y(self) -> float:
        return float(self._position[1])

    @y.setter
    def y(self, value):
        self.position = self._position[0], value, self._position[2]

    @property
    def components(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """The (position, rotation, scale) tuple."""
        return self._position, self._rotation, self._scale

    @property
    def matrix(self) -> np.ndarray:
        """Affine matrix describing this transform (read-only).

        ``vec_parent = matrix @ vec_local``.
        """
        if self._matrix is None:
            self._matrix = self._frozen(
                la.mat_compose(self._position, self._rotation, self._scale)
            )
        return self._matrix

    def __array__(self, dtype=None, copy=None) -> np.ndarray:
        return np.asarray(self.matrix, dtype=dtype)
