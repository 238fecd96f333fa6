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
Module Name: vertex
Author: Alain Bernard
Version: 0.1.0
Created: 2025-09-12
Last updated: 2025-10-18

Summary:
    A single mesh vertex with optional attributes.

    Each attribute (position, color, normal, tangent, uv0, uv2, uv3, uv4) is either
    absent (None) or a float32 vector owned by the vertex. Absent is never the same
    as a zero value: presence is queried with the `has_xxx` properties or with
    `has_attribute`.

Usage example:
    >>> v = Vertex(position=(0, 0, 0), normal=(0, 0, 1))
    >>> v.has_normal, v.has_color
    (True, False)
    >>> v.has_attribute(VertexAttributes.POSITION | VertexAttributes.NORMAL)
    True
"""

__all__ = ["Vertex"]

import numpy as np

from .constants import ATTRIBUTES, ATTRIBUTE_NAMES, VertexAttributes, bfloat

# ====================================================================================================
# Attribute descriptor
# ====================================================================================================

class _VertexAttribute:
    """Optional fixed size float vector stored in the vertex values dict.

    Setting a value copies it; setting None removes the attribute.
    """

    def __set_name__(self, owner, name):
        self.name = name
        self.size = ATTRIBUTES[name][1]

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return instance._values.get(self.name)

    def __set__(self, instance, value):
        if value is None:
            instance._values.pop(self.name, None)
            return

        a = np.array(value, dtype=bfloat)
        if a.shape != (self.size,):
            raise ValueError(f"Vertex> '{self.name}' expects {self.size} components, not shape {a.shape}")
        instance._values[self.name] = a

    def __delete__(self, instance):
        instance._values.pop(self.name, None)

# ====================================================================================================
# Vertex
# ====================================================================================================

class Vertex:
    """
    Mesh vertex with optional attributes.

    Parameters
    ----------
    position : array_like (3,), optional
    color : array_like (4,), optional
        RGBA.
    normal : array_like (3,), optional
    tangent : array_like (4,), optional
        Direction and handedness sign in w.
    uv0, uv2 : array_like (2,), optional
    uv3, uv4 : array_like (4,), optional

    Notes
    -----
    Lists of vertices are expected to share the same attributes. The first vertex of
    a list is used as the template of the whole list by the conversion functions.
    """

    __slots__ = ('_values',)

    position = _VertexAttribute()
    color    = _VertexAttribute()
    uv0      = _VertexAttribute()
    normal   = _VertexAttribute()
    tangent  = _VertexAttribute()
    uv2      = _VertexAttribute()
    uv3      = _VertexAttribute()
    uv4      = _VertexAttribute()

    def __init__(self, position=None, color=None, normal=None, tangent=None, uv0=None, uv2=None, uv3=None, uv4=None):
        self._values = {}

        self.position = position
        self.color    = color
        self.normal   = normal
        self.tangent  = tangent
        self.uv0      = uv0
        self.uv2      = uv2
        self.uv3      = uv3
        self.uv4      = uv4

    # ----------------------------------------------------------------------------------------------------
    # Presence
    # ----------------------------------------------------------------------------------------------------

    @property
    def has_position(self):
        return 'position' in self._values

    @property
    def has_color(self):
        return 'color' in self._values

    @property
    def has_normal(self):
        return 'normal' in self._values

    @property
    def has_tangent(self):
        return 'tangent' in self._values

    @property
    def has_uv0(self):
        return 'uv0' in self._values

    @property
    def has_uv2(self):
        return 'uv2' in self._values

    @property
    def has_uv3(self):
        return 'uv3' in self._values

    @property
    def has_uv4(self):
        return 'uv4' in self._values

    @property
    def attributes(self) -> VertexAttributes:
        """Flags of the attributes the vertex carries."""
        flags = VertexAttributes.NONE
        for name in self._values:
            flags |= ATTRIBUTES[name][0]
        return flags

    def has_attribute(self, attributes: VertexAttributes) -> bool:
        """True if the vertex carries **all** the attributes in the flags.

        ``` python
        v.has_attribute(VertexAttributes.POSITION | VertexAttributes.NORMAL)
        ```
        """
        attributes = VertexAttributes(attributes)
        return (self.attributes & attributes) == attributes

    # ----------------------------------------------------------------------------------------------------
    # Dunder
    # ----------------------------------------------------------------------------------------------------

    def copy(self) -> "Vertex":
        """Deep copy: the attribute vectors are duplicated."""
        return Vertex(**self._values)

    def __eq__(self, other):
        if not isinstance(other, Vertex):
            return NotImplemented
        if self._values.keys() != other._values.keys():
            return False
        return all(np.array_equal(value, other._values[name]) for name, value in self._values.items())

    __hash__ = None

    def __repr__(self):
        items = [f"{name}={self._values[name].tolist()}" for name in ATTRIBUTE_NAMES if name in self._values]
        return f"<Vertex {', '.join(items) if items else 'empty'}>"
