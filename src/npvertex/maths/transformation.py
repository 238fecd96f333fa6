# MIT License
#
# Copyright (c) 2025 Alain Bernard
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the \"Software\"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED \"AS IS\", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
Module Name: transformation
Author: Alain Bernard
Version: 0.1.0
Created: 2022-11-11
Last updated: 2025-10-18

Batch of 4×4 homogeneous affine transformation matrices.
Inherits from `ItemsArray` with `_item_shape = (4, 4)`. Provides:

- Construction from translation, rotation and scale
- Decomposition into rotation (as `Rotation`), scale, and translation
- Composition (`@` operator) and inversion (`~`)
- The three ways a vertex attribute is transformed:
    - points (`transform_points`): the translation applies
    - normals (`transform_normals`): inverse transpose of the linear part
    - tangents (`rotate_vectors`): pure rotation, extra components such as
      the tangent handedness are kept untouched

Example:
    >>> T = Transformation.from_components(translation=[1, 2, 3], scale=[2, 2, 2])
    >>> T.transform_points([[0, 0, 0]])
    array([[1., 2., 3.]], dtype=float32)
"""

__all__ = ['Transformation', 'as_transformation']

import numpy as np

from ..constants import ZERO

from .itemsarray import ItemsArray
from .rotation import Rotation

class Transformation(ItemsArray):

    _item_shape = (4, 4) # Array of 4x4 matrices

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def identity(cls, shape=()) -> "Transformation":
        mat = np.broadcast_to(np.eye(4, dtype=cls.FLOAT), shape + (4, 4)).copy()
        return cls(mat, copy=False)

    @classmethod
    def compose(cls, *transforms: "Transformation") -> "Transformation":
        """Compose multiple transformations together (right to left).

        Parameters
        ----------
        *transforms : Transformation
            Composition is performed as `T1 @ T2 @ T3`, meaning `T3` is applied first.

        Returns
        -------
        Transformation
            The composed transformation.
        """
        if not transforms:
            raise ValueError("Transformation> At least one Transformation must be provided")

        result = transforms[0]
        for tf in transforms[1:]:
            result = result @ tf
        return result

    @classmethod
    def from_components(cls, translation=None, rotation=None, scale=None) -> "Transformation":
        """Build a *Transformation* from translation, rotation, and scale.

        The matrix is ``T * R * S``: scale first, then rotation, then translation.

        Parameters
        ----------
        translation : array_like (..., 3), optional
            Translation vector(s).  Default is ``[0, 0, 0]``.
        rotation : None or array_like (..., 3, 3) or Rotation, optional
            Rotation matrix/matrices.  If *None*, uses the identity.
        scale : array_like (..., 3), optional
            Per‑axis scale vector(s).  Default is ``[1, 1, 1]``.

        Notes
        -----
        The three inputs are broadcast together.
        """
        t = np.zeros(3, dtype=cls.FLOAT) if translation is None else np.asarray(translation, dtype=cls.FLOAT)
        s = np.ones(3, dtype=cls.FLOAT) if scale is None else np.asarray(scale, dtype=cls.FLOAT)

        if t.shape[-1] != 3 or s.shape[-1] != 3:
            raise ValueError("Transformation> translation and scale must end with 3 components")

        if rotation is None:
            r = np.eye(3, dtype=cls.FLOAT)
        else:
            r = np.asarray(rotation, dtype=cls.FLOAT)
            if r.shape[-2:] != (3, 3):
                raise ValueError("Transformation> rotation must end with (3, 3)")

        batch_shape = np.broadcast_shapes(t.shape[:-1], s.shape[:-1], r.shape[:-2])

        t_b = np.broadcast_to(t, batch_shape + (3,))
        s_b = np.broadcast_to(s, batch_shape + (3,))
        r_b = np.broadcast_to(r, batch_shape + (3, 3))

        mat = np.zeros(batch_shape + (4, 4), dtype=cls.FLOAT)
        mat[..., :3, :3] = r_b * s_b[..., None, :]  # scale columns
        mat[..., :3, 3] = t_b
        mat[..., 3, 3] = 1.0

        return cls(mat, copy=False)

    # ------------------------------------------------------------------
    # Decomposition: rotation, scale, translation
    # ------------------------------------------------------------------

    def decompose(self):
        """Return rotation, scale, translation from each 4x4 transform.

        Returns
        -------
        rot : Rotation
            Rotation (orthonormal, no scale)
        scale : ndarray (..., 3)
            Scale vector along each axis
        trans : ndarray (..., 3)
            Translation vector
        """
        return self.rotation, self.scale, self.position.copy()

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    @property
    def position(self) -> np.ndarray:
        """The translation component (view, not copy)."""
        return self._mat[..., :3, 3]

    @property
    def linear(self) -> np.ndarray:
        """The 3×3 linear part (rotation and scale, view)."""
        return self._mat[..., :3, :3]

    @property
    def scale(self) -> np.ndarray:
        """Per axis scale, norm of the columns of the linear part."""
        return np.linalg.norm(self.linear, axis=-2)

    @property
    def rotation(self) -> Rotation:
        """The pure rotation part of the matrix."""
        scale = np.linalg.norm(self.linear, axis=-2, keepdims=True)
        return Rotation(self.linear / np.maximum(scale, ZERO), copy=False)

    @property
    def normal_matrix(self) -> np.ndarray:
        """Inverse transpose of the linear part, used to transform normals."""
        inv = np.linalg.inv(self.linear.astype(np.float64))
        return np.swapaxes(inv, -1, -2).astype(self.FLOAT)

    def is_identity(self, eps: float = 1e-5):
        """True where the transformation is (approximately) the identity.

        Returns a Python bool for a single transformation, a boolean array otherwise.
        """
        diff = np.abs(self._mat - np.eye(4, dtype=self.FLOAT))
        result = np.all(diff < eps, axis=(-2, -1))
        return bool(result) if result.shape == () else result

    # ------------------------------------------------------------------
    # Inversion
    # ------------------------------------------------------------------

    def inverse(self) -> "Transformation":
        """Return the inverse of the transformation(s).

        Scale and shear are supported: the linear part is inverted as a general matrix.
        """
        mat = self._mat.astype(np.float64)
        lin_inv = np.linalg.inv(mat[..., :3, :3])

        inv = np.zeros_like(mat)
        inv[..., :3, :3] = lin_inv
        inv[..., :3, 3] = -np.einsum("...ij,...j->...i", lin_inv, mat[..., :3, 3])
        inv[..., 3, 3] = 1.0

        return Transformation(inv, copy=False)

    # ------------------------------------------------------------------
    # Transform vertex attributes
    # ------------------------------------------------------------------

    @staticmethod
    def _check_vectors(vectors, sizes, title):
        vectors = np.asarray(vectors, dtype=ItemsArray.FLOAT)
        if vectors.shape[-1] not in sizes:
            raise ValueError(f"Transformation> {title} must have shape (..., {' or '.join(str(s) for s in sizes)}), not {vectors.shape}")
        return vectors

    def transform_points(self, points: np.ndarray) -> np.ndarray:
        """Transform 3D points: linear part then translation.

        Parameters
        ----------
        points : array_like (..., 3)

        Returns
        -------
        ndarray (..., 3)
        """
        points = self._check_vectors(points, (3,), "Points")
        return np.einsum('...ij,...j->...i', self.linear, points) + self.position

    def transform_vectors(self, vectors: np.ndarray) -> np.ndarray:
        """Transform 3D directions with the linear part only (no translation)."""
        vectors = self._check_vectors(vectors, (3,), "Vectors")
        return np.einsum('...ij,...j->...i', self.linear, vectors)

    def transform_normals(self, normals: np.ndarray) -> np.ndarray:
        """Transform normals with the inverse transpose of the linear part.

        Normals stay perpendicular to the transformed surface under non uniform
        scale. They are not normalized.
        """
        normals = self._check_vectors(normals, (3,), "Normals")
        return np.einsum('...ij,...j->...i', self.normal_matrix, normals)

    def rotate_vectors(self, vectors: np.ndarray) -> np.ndarray:
        """Rotate directions by the pure rotation part.

        Parameters
        ----------
        vectors : array_like (..., 3) or (..., 4)
            With 4 components, only xyz are rotated, w (e.g. tangent handedness)
            is copied.

        Returns
        -------
        ndarray
            Same shape as the input.
        """
        vectors = self._check_vectors(vectors, (3, 4), "Vectors")
        rotated = self.rotation.apply(vectors[..., :3])
        if vectors.shape[-1] == 3:
            return rotated

        result = np.empty(np.broadcast_shapes(rotated.shape[:-1], vectors.shape[:-1]) + (4,), dtype=self.FLOAT)
        result[..., :3] = rotated
        result[..., 3] = vectors[..., 3]
        return result

    # ------------------------------------------------------------------
    # Overloaded operators
    # ------------------------------------------------------------------

    def __matmul__(self, other):
        """Overload the **@** operator.

        * **Transformation @ Transformation**  → composition, the right operand
          is applied first.
        * **Transformation @ points**  → alias for :py:meth:`transform_points`.
        """
        if isinstance(other, Transformation):
            return Transformation(np.matmul(self._mat, other._mat), copy=False)

        return self.transform_points(other)

    def __invert__(self) -> "Transformation":
        return self.inverse()

# ====================================================================================================
# Argument helper
# ====================================================================================================

def as_transformation(value) -> Transformation | None:
    """Optional transformation argument to Transformation.

    Parameters
    ----------
    value : None, Transformation or array_like (4, 4)

    Returns
    -------
    Transformation or None
        None if `value` is None.

    Raises
    ------
    ValueError
        If `value` is not a single 4×4 matrix.
    """
    if value is None:
        return None

    transfo = value if isinstance(value, Transformation) else Transformation(value)
    if not transfo.is_scalar:
        raise ValueError(f"Transformation> A single 4x4 matrix is expected, not a batch of shape {transfo.shape}")
    return transfo
