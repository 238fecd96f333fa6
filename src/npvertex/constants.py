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
Module Name: constants
Author: Alain Bernard
Version: 0.1.0
Created: 2025-07-21
Last updated: 2025-10-18

Summary:
This module defines core constants used throughout the `npvertex` package for consistent
vertex attribute management.

It includes:
  - The `VertexAttributes` flags used to request a subset of attribute channels
  - The attribute table: vertex field name, flag, number of components and mesh buffer name
  - Global NumPy dtypes and tolerance

Usage example:
    >>> from npvertex.constants import VertexAttributes, bfloat
    >>> attrs = VertexAttributes.POSITION | VertexAttributes.NORMAL
"""

__all__ = [
    'bfloat', 'bint', 'bbool',
    'ZERO', 'EPS',
    'VertexAttributes',
    'ATTRIBUTES', 'ATTRIBUTE_NAMES', 'OPTIONAL_NAMES', 'UV_CHANNELS',
    ]

from enum import IntFlag

import numpy as np

bfloat = np.float32
bint = np.int32
bbool = np.bool_

ZERO = 1e-6
EPS = ZERO

# =============================================================================================================================
# Attribute flags
# =============================================================================================================================

class VertexAttributes(IntFlag):
    """Attribute channels a vertex can carry.

    Flags can be combined to restrict an operation to a subset of channels:

    ``` python
    arrays = get_arrays(verts, VertexAttributes.POSITION | VertexAttributes.TEXTURE0)
    ```
    """
    NONE     = 0
    POSITION = 0x01
    TEXTURE0 = 0x02
    TEXTURE1 = 0x04
    TEXTURE2 = 0x08
    TEXTURE3 = 0x10
    COLOR    = 0x20
    NORMAL   = 0x40
    TANGENT  = 0x80
    ALL      = 0xFF

# =============================================================================================================================
# Attributes table
#
# vertex field name -> (flag, number of components, mesh buffer name)
# uv3 and uv4 have no dedicated buffer: they are read and written with get_uvs / set_uvs
# on channels 2 and 3.
# The order is the order of the VertexArrays fields.
# =============================================================================================================================

ATTRIBUTES = {
    'position' : (VertexAttributes.POSITION, 3, 'vertices'),
    'color'    : (VertexAttributes.COLOR,    4, 'colors'),
    'uv0'      : (VertexAttributes.TEXTURE0, 2, 'uv'),
    'normal'   : (VertexAttributes.NORMAL,   3, 'normals'),
    'tangent'  : (VertexAttributes.TANGENT,  4, 'tangents'),
    'uv2'      : (VertexAttributes.TEXTURE1, 2, 'uv2'),
    'uv3'      : (VertexAttributes.TEXTURE2, 4, None),
    'uv4'      : (VertexAttributes.TEXTURE3, 4, None),
}

ATTRIBUTE_NAMES = tuple(ATTRIBUTES.keys())

# Attributes which can be missing on one side of an interpolation
OPTIONAL_NAMES = tuple(name for name in ATTRIBUTE_NAMES if name != 'position')

# Generalized uv channels index
UV_CHANNELS = {'uv3': 2, 'uv4': 3}
