# npvertex/maths/itemsarray.py
# MIT License
# Created on 2022-11-11
# Last update: 2025-10-18
# Author: Alain Bernard

"""
ItemsArray
==========

Base class for batches of fixed-shape items (3x3 rotation matrices, 4x4 transformation
matrices), backed by a single NumPy array.

Subclasses only declare `_item_shape`. The class provides:

- Validation of the trailing item shape at construction
- Batch shape / size queries which ignore the item shape
- NumPy interoperability (`__array__`, indexing, iteration)

    >>> class Vectors(ItemsArray):
    ...     _item_shape = (3,)
    >>> V = Vectors([[1, 2, 3], [4, 5, 6]])
    >>> V.shape
    (2,)
"""

import numpy as np

from ..constants import bfloat

# ====================================================================================================
# ItemsArray
# ====================================================================================================

class ItemsArray:

    FLOAT = bfloat
    __array_priority__ = 10.0  # NumPy defers to ItemsArray in mixed operations
    __slots__ = ("_mat",)
    _item_shape = (3,)

    def __init__(self, mat: np.ndarray | list | tuple, *, copy: bool = True):
        """
        Wrap an array-like whose trailing dimensions are broadcastable to `_item_shape`.

        Parameters
        ----------
        mat : array_like
            Input data, shape ``(..., *_item_shape)``.

        copy : bool, default True
            Copy the input. With False, the array is kept as is when it already
            has the right dtype.

        Raises
        ------
        ValueError
            If the input can't be broadcast to the item shape.
        """
        if isinstance(mat, ItemsArray):
            mat = mat._mat

        mat = np.asarray(mat, dtype=self.FLOAT)

        item_ndim = len(self._item_shape)
        if mat.ndim < item_ndim:
            raise ValueError(f"{type(self).__name__}> Input of shape {mat.shape} has not the item shape {self._item_shape}")
        if mat.shape[-item_ndim:] != self._item_shape:
            # A broadcast view is read only: always copied
            try:
                mat = np.broadcast_to(mat, mat.shape[:-item_ndim] + self._item_shape)
            except ValueError:
                raise ValueError(f"{type(self).__name__}> Input of shape {mat.shape} not broadcastable to item shape {self._item_shape}")
            copy = True

        self._mat = mat.copy() if copy else mat

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------

    def __len__(self):
        if self.is_scalar:
            raise TypeError(f"{type(self).__name__}> len() of a single item")
        return self._mat.shape[0]

    def __repr__(self):
        return f"<{type(self).__name__}(shape={self.shape}, dtype={self._mat.dtype})>"

    def __array__(self, dtype=None, copy=None):
        return np.asarray(self._mat, dtype=dtype)

    # ------------------------------------------------------------------
    # Shape
    # ------------------------------------------------------------------

    @property
    def is_scalar(self):
        """True if the array holds a single item (no batch dimension)."""
        return self._mat.shape == self._item_shape

    def as_array(self, dtype=None) -> np.ndarray:
        """**View** on the internal array (no copy)."""
        return np.asarray(self._mat, dtype=dtype)

    @property
    def shape(self) -> tuple:
        """Batch shape (everything *except* the final item_shape)."""
        return self._mat.shape[:-len(self._item_shape)]

    @property
    def size(self) -> int:
        """Number of items."""
        return int(np.prod(self.shape))

    # ------------------------------------------------------------------
    # Global
    # ------------------------------------------------------------------

    def copy(self):
        return type(self)(self._mat.copy(), copy=False)

    # ------------------------------------------------------------------
    # Access to items
    # ------------------------------------------------------------------

    def __getitem__(self, key):
        if self.is_scalar:
            raise TypeError(f"{type(self).__name__}> A single item is not subscriptable")
        return type(self)(self._mat[key], copy=False)

    def __iter__(self):
        if self.is_scalar:
            raise TypeError(f"{type(self).__name__}> A single item is not iterable")
        return (type(self)(x, copy=False) for x in self._mat)
