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
Module Name: meshbuffers
Author: Alain Bernard
Version: 0.1.0
Created: 2025-09-12
Last updated: 2025-10-18

Summary:
    Mesh container holding one buffer per vertex attribute (structure of arrays)
    plus a flat triangle index buffer.

    Buffers are `vertices`, `colors`, `normals`, `tangents`, `uv` and `uv2`. The
    generalized uv channels 2 and 3 are accessed with `get_uvs` / `set_uvs`.

    `vertices` defines the vertex count, the other buffers must have the same length.
    Assigning None removes a buffer.

Usage example:
    ```python
    mesh = MeshBuffers(vertices=[[0, 0, 0], [1, 0, 0], [0, 1, 0]], triangles=[0, 1, 2])
    mesh.normals = [[0, 0, 1]] * 3
    ```
"""

__all__ = ["MeshBuffers"]

import numpy as np

from .constants import ATTRIBUTES, VertexAttributes, bfloat, bint

# Buffer name -> number of components
BUFFERS = {buffer: size for (_, size, buffer) in ATTRIBUTES.values() if buffer is not None}

UV_SIZES = {0: 2, 1: 2, 2: 4, 3: 4}

# =============================================================================================================================
# Mesh buffers

class MeshBuffers:

    def __init__(self, vertices=None, triangles=None, colors=None, normals=None, tangents=None, uv=None, uv2=None):
        """
        Initialize the mesh buffers.

        Parameters
        ----------
        vertices : array_like (n, 3), optional
            Vertex positions, defines the vertex count.
        triangles : array_like of int, optional
            Flat array of vertex indices, three per triangle.
        colors : array_like (n, 4), optional
        normals : array_like (n, 3), optional
        tangents : array_like (n, 4), optional
        uv, uv2 : array_like (n, 2), optional
        """
        self._buffers = {}
        self._uvs = {}
        self._triangles = None

        self.vertices  = vertices
        self.colors    = colors
        self.normals   = normals
        self.tangents  = tangents
        self.uv        = uv
        self.uv2       = uv2
        self.triangles = triangles

    def __str__(self):
        names = [name for name in BUFFERS if name in self._buffers] + [f"uv{channel + 1}" for channel in sorted(self._uvs)]
        return f"<MeshBuffers: vertices {self.vertex_count}, triangles {len(self.triangles) // 3}, buffers {names}>"

    # =============================================================================================================================
    # Clear
    # =============================================================================================================================

    def clear(self):
        """Remove all the buffers, triangles included."""
        self._buffers.clear()
        self._uvs.clear()
        self._triangles = None

    # =============================================================================================================================
    # Buffers
    # =============================================================================================================================

    @property
    def vertex_count(self):
        buffer = self._buffers.get('vertices')
        return 0 if buffer is None else len(buffer)

    def _get(self, name):
        buffer = self._buffers.get(name)
        return None if buffer is None else buffer.copy()

    @staticmethod
    def _as_buffer(name, value):
        size = BUFFERS[name]
        a = np.array(value, dtype=bfloat)
        if a.size == 0:
            return np.zeros((0, size), dtype=bfloat)
        if a.ndim != 2 or a.shape[1] != size:
            raise ValueError(f"MeshBuffers> '{name}' expects a shape (n, {size}), not {a.shape}")
        return a

    def _set(self, name, value):
        if value is None:
            self._buffers.pop(name, None)
            return

        a = self._as_buffer(name, value)
        if a.shape[0] != self.vertex_count:
            raise ValueError(f"MeshBuffers> '{name}' has {a.shape[0]} items, {self.vertex_count} are expected")
        self._buffers[name] = a

    @property
    def vertices(self):
        return self._get('vertices')

    @vertices.setter
    def vertices(self, value):
        if value is None:
            self.clear()
            return

        a = self._as_buffer('vertices', value)
        others = [name for name in self._buffers if name != 'vertices']
        if len(a) != self.vertex_count and (others or self._uvs or self._triangles is not None):
            raise ValueError(f"MeshBuffers> Can't change the vertex count from {self.vertex_count} to {len(a)}, clear the mesh first")
        self._buffers['vertices'] = a

    @property
    def colors(self):
        return self._get('colors')

    @colors.setter
    def colors(self, value):
        self._set('colors', value)

    @property
    def normals(self):
        return self._get('normals')

    @normals.setter
    def normals(self, value):
        self._set('normals', value)

    @property
    def tangents(self):
        return self._get('tangents')

    @tangents.setter
    def tangents(self, value):
        self._set('tangents', value)

    @property
    def uv(self):
        return self._get('uv')

    @uv.setter
    def uv(self, value):
        self._set('uv', value)

    @property
    def uv2(self):
        return self._get('uv2')

    @uv2.setter
    def uv2(self, value):
        self._set('uv2', value)

    # =============================================================================================================================
    # Generalized uv channels
    # =============================================================================================================================

    def get_uvs(self, channel):
        """
        Read an uv channel as a list of vectors.

        Channels 0 and 1 return 2D vectors read from `uv` and `uv2`, channels 2 and 3
        return 4D vectors.

        Returns
        -------
        list of ndarray
            Empty list if the channel is not set.
        """
        if channel not in UV_SIZES:
            raise ValueError(f"MeshBuffers> Invalid uv channel {channel}, valid channels are 0 to 3")

        if channel < 2:
            buffer = self._buffers.get('uv' if channel == 0 else 'uv2')
        else:
            buffer = self._uvs.get(channel)

        return [] if buffer is None else [v.copy() for v in buffer]

    def set_uvs(self, channel, values):
        """
        Set an uv channel from a sequence of vectors.

        For channels 2 and 3, vectors with 2 or 3 components are padded with zeros.
        None removes the channel.
        """
        if channel not in UV_SIZES:
            raise ValueError(f"MeshBuffers> Invalid uv channel {channel}, valid channels are 0 to 3")

        if channel < 2:
            self._set('uv' if channel == 0 else 'uv2', values)
            return

        if values is None:
            self._uvs.pop(channel, None)
            return

        a = np.array(values, dtype=bfloat)
        if a.size == 0:
            a = np.zeros((0, 4), bfloat)
        if a.ndim != 2 or a.shape[1] not in (2, 3, 4):
            raise ValueError(f"MeshBuffers> uv channel {channel} expects vectors of 2 to 4 components, not shape {a.shape}")
        if len(a) != self.vertex_count:
            raise ValueError(f"MeshBuffers> uv channel {channel} has {len(a)} items, {self.vertex_count} are expected")

        uvs = np.zeros((len(a), 4), dtype=bfloat)
        uvs[:, :a.shape[1]] = a
        self._uvs[channel] = uvs

    # =============================================================================================================================
    # Triangles
    # =============================================================================================================================

    @property
    def triangles(self):
        """Flat triangle indices, empty array if not set."""
        if self._triangles is None:
            return np.zeros(0, dtype=bint)
        return self._triangles.copy()

    @triangles.setter
    def triangles(self, value):
        if value is None:
            self._triangles = None
            return

        a = np.array(value, dtype=bint).reshape(-1)
        if len(a) % 3 != 0:
            raise ValueError(f"MeshBuffers> Triangles length must be a multiple of 3, not {len(a)}")
        if len(a) and (a.min() < 0 or a.max() >= self.vertex_count):
            raise ValueError(f"MeshBuffers> Triangle indices out of range [0, {self.vertex_count}[")
        self._triangles = a

    # =============================================================================================================================
    # Attributes
    # =============================================================================================================================

    @property
    def attributes(self) -> VertexAttributes:
        """Flags of the attributes having a buffer."""
        flags = VertexAttributes.NONE
        for name, (flag, _, buffer) in ATTRIBUTES.items():
            if buffer in self._buffers:
                flags |= flag
        if 2 in self._uvs:
            flags |= VertexAttributes.TEXTURE2
        if 3 in self._uvs:
            flags |= VertexAttributes.TEXTURE3
        return flags
