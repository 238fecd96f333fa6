# npvertex/maths/rotation.py
# MIT License
# Created on 2022-11-11
# Last update: 2025-10-18
# Author: Alain Bernard

"""
Rotation
========

Batch of 3×3 rotation matrices.

A `Rotation` is the pure rotation part of a `Transformation`. It is used to rotate
directions which must neither be scaled nor translated, typically vertex tangents.

    >>> R = Rotation.from_axis_angle([0, 0, 1], np.pi / 2)
    >>> R @ np.array([1., 0., 0.])
    array([0., 1., 0.])
"""

import numpy as np

from .itemsarray import ItemsArray


# ====================================================================================================
# Rotation
# ====================================================================================================

class Rotation(ItemsArray):
    """
    Rotation represented as 3×3 matrices.

    Matrices are applied to column vectors: ``R @ v``.
    """

    _item_shape = (3, 3)

    # ====================================================================================================
    # Constructors
    # ====================================================================================================

    @classmethod
    def identity(cls, shape=()):
        """Identity rotation(s) for the given batch shape."""
        mat = np.broadcast_to(np.eye(3, dtype=cls.FLOAT), shape + (3, 3)).copy()
        return cls(mat, copy=False)

    @classmethod
    def from_matrix(cls, mat, *, validate: bool = True, tol: float = 1e-5) -> "Rotation":
        """
        Construct a Rotation from raw 3×3 matrices.

        Parameters
        ----------
        mat : array_like (..., 3, 3)
            One or more candidate rotation matrices.

        validate : bool, default True
            Check that matrices are orthogonal with a determinant of ±1.
            Mirror matrices (determinant -1) are accepted since they are what
            remains of a transformation with a negative scale.

        tol : float, default 1e-5
            Tolerance used for validation.

        Raises
        ------
        ValueError
            If validation is enabled and any matrix is not orthogonal.
        """
        mat = np.asarray(mat, dtype=cls.FLOAT)
        if mat.shape[-2:] != (3, 3):
            raise ValueError(f"Rotation> Expected matrices of shape (..., 3, 3), not {mat.shape}")

        if validate:
            should_be_identity = mat @ np.swapaxes(mat, -1, -2)
            error = np.abs(should_be_identity - np.eye(3, dtype=cls.FLOAT)).max(axis=(-2, -1))
            if np.any(error > tol):
                raise ValueError("Rotation> Rotation matrix is not orthogonal within tolerance.")

            det = np.linalg.det(mat)
            if np.any(np.abs(np.abs(det) - 1.0) > tol):
                raise ValueError("Rotation> Rotation matrix determinant not close to ±1.")

        return cls(mat, copy=True)

    @classmethod
    def from_axis_angle(cls, axis, angle, *, degrees: bool = False) -> "Rotation":
        """
        Construct a rotation from an axis–angle pair (right-hand rule).

        Parameters
        ----------
        axis : array_like (..., 3)
            Rotation axis, normalized internally.
        angle : array_like (...,)
            Rotation angle, broadcastable with the batch shape of `axis`.
        degrees : bool, default False
            `angle` is given in degrees.
        """
        axis = np.asarray(axis, dtype=np.float64)
        angle = np.asarray(angle, dtype=np.float64)

        if axis.shape[-1] != 3:
            raise ValueError("Rotation> Axis must have shape (..., 3)")

        if degrees:
            angle = np.deg2rad(angle)

        axis = axis / np.linalg.norm(axis, axis=-1, keepdims=True)
        shape = np.broadcast_shapes(axis.shape[:-1], angle.shape)
        axis = np.broadcast_to(axis, shape + (3,))
        angle = np.broadcast_to(angle, shape)

        x, y, z = axis[..., 0], axis[..., 1], axis[..., 2]
        c = np.cos(angle)
        s = np.sin(angle)
        t = 1.0 - c

        mat = np.empty(shape + (3, 3), dtype=np.float64)
        mat[..., 0, 0] = t * x * x + c
        mat[..., 0, 1] = t * x * y - s * z
        mat[..., 0, 2] = t * x * z + s * y

        mat[..., 1, 0] = t * x * y + s * z
        mat[..., 1, 1] = t * y * y + c
        mat[..., 1, 2] = t * y * z - s * x

        mat[..., 2, 0] = t * x * z - s * y
        mat[..., 2, 1] = t * y * z + s * x
        mat[..., 2, 2] = t * z * z + c

        return cls(mat, copy=False)

    @classmethod
    def from_euler(cls, euler, *, order: str = "XYZ", degrees: bool = False) -> "Rotation":
        """
        Construct a rotation from Euler angles.

        Parameters
        ----------
        euler : array_like (..., 3)
            Angles around the X, Y and Z axes, whatever the order.
        order : {'XYZ', 'XZY', 'YXZ', 'YZX', 'ZXY', 'ZYX'}, default 'XYZ'
            Order in which the elementary rotations are applied: with 'XYZ',
            the rotation around X is applied first.
        degrees : bool, default False
            `euler` is given in degrees.

        Raises
        ------
        ValueError
            If `order` is not a permutation of 'XYZ'.
        """
        order = order.upper()
        if order not in ('XYZ', 'XZY', 'YXZ', 'YZX', 'ZXY', 'ZYX'):
            raise ValueError(f"Rotation> Unsupported Euler order '{order}'")

        euler = np.asarray(euler, dtype=np.float64)
        if euler.shape[-1] != 3:
            raise ValueError("Rotation> Euler angles must have shape (..., 3)")

        if degrees:
            euler = np.deg2rad(euler)

        def axis_rot(angle, ax):
            c = np.cos(angle)
            s = np.sin(angle)
            R = np.zeros(angle.shape + (3, 3), dtype=np.float64)
            R[..., ax, ax] = 1
            R[..., (ax + 1) % 3, (ax + 1) % 3] = c
            R[..., (ax + 2) % 3, (ax + 2) % 3] = c
            R[..., (ax + 1) % 3, (ax + 2) % 3] = -s
            R[..., (ax + 2) % 3, (ax + 1) % 3] = s
            return R

        mat = np.broadcast_to(np.eye(3), euler.shape[:-1] + (3, 3))
        for letter in order:
            ax = 'XYZ'.index(letter)
            mat = axis_rot(euler[..., ax], ax) @ mat

        return cls(mat, copy=False)

    # ====================================================================================================
    # Operations
    # ====================================================================================================

    def apply(self, vectors: np.ndarray) -> np.ndarray:
        """
        Rotate 3D vectors.

        Parameters
        ----------
        vectors : array_like (..., 3)
            Vectors to rotate, broadcastable with the rotation batch shape.

        Returns
        -------
        np.ndarray
            Rotated vectors.
        """
        vectors = np.asarray(vectors, dtype=self._mat.dtype)
        if vectors.shape[-1] != 3:
            raise ValueError(f"Rotation> Input must have shape (..., 3), not {vectors.shape}")
        return np.einsum('...ij,...j->...i', self._mat, vectors)

    def inverse(self) -> "Rotation":
        """Inverse rotation, i.e. the transposed matrices."""
        return type(self)(np.swapaxes(self._mat, -1, -2), copy=True)

    def is_identity(self, tol: float = 1e-6):
        """True where the rotation is the identity (a bool for a single rotation)."""
        err = np.abs(self._mat - np.eye(3, dtype=self.FLOAT)).max(axis=(-2, -1))
        result = err < tol
        return bool(result) if result.shape == () else result

    # ----------------------------------------------------------------------------------------------------
    # Operators
    # ----------------------------------------------------------------------------------------------------

    def __matmul__(self, other):
        """
        ``R @ S`` composes two rotations (S is applied first), ``R @ v`` rotates vectors.
        """
        if isinstance(other, Rotation):
            return type(self)(self._mat @ other._mat, copy=False)
        elif isinstance(other, (np.ndarray, list, tuple)):
            return self.apply(other)
        else:
            raise TypeError(f"{type(self).__name__}> unsupported operand type for @: {type(other).__name__}")

    def __invert__(self) -> "Rotation":
        return self.inverse()
