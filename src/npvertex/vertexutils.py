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
Module Name: vertexutils
Author: Alain Bernard
Version: 0.1.0
Created: 2025-09-12
Last updated: 2025-10-18

Summary:
    Conversions between mesh buffers (one array per attribute) and lists of `Vertex`,
    and interpolation between vertices.

    - `get_arrays` : list of vertices -> `VertexArrays`
    - `get_vertices` : mesh buffers -> list of vertices
    - `set_mesh` : list of vertices -> mesh buffers (replaces all the buffers)
    - `mix` : interpolate two vertices, tolerating different attributes
    - `mix_buffers` : interpolate many pairs of vertices directly in buffer form

    The first vertex of a list is the template of the whole list: an attribute is
    considered as present in the list if and only if the first vertex has it.

Usage example:
    ```python
    verts = get_vertices(mesh, local_to_world=matrix)
    # Split an edge in its middle
    verts.append(mix(verts[0], verts[1], .5))
    set_mesh(mesh, verts, world_to_local=~matrix)
    mesh.triangles = new_triangles
    ```
"""

__all__ = [
    "VertexArrays",
    "attributes_of", "is_uniform",
    "get_arrays", "get_vertices", "set_mesh",
    "mix", "mix_buffers",
]

import logging
from typing import NamedTuple

import numpy as np
from numba import njit

from .constants import ATTRIBUTES, ATTRIBUTE_NAMES, OPTIONAL_NAMES, UV_CHANNELS, VertexAttributes, bfloat, bint
from .maths import as_transformation
from .vertex import Vertex

# ====================================================================================================
# numba optimized calls
# ====================================================================================================

# ----------------------------------------------------------------------------------------------------
# Interpolate rows of an attribute array
#
# Row k of the result is src[i0[k]]*(1 - weights[k]) + src[i1[k]]*weights[k]
# Indices must have been checked by the caller
# ----------------------------------------------------------------------------------------------------

@njit(cache=True)
def lerp_rows(src, i0, i1, weights):

    n = len(i0)
    size = src.shape[1]
    result = np.empty((n, size), dtype=src.dtype)

    for k in range(n):
        t = weights[k]
        u = 1.0 - t
        a = i0[k]
        b = i1[k]
        for c in range(size):
            result[k, c] = src[a, c]*u + src[b, c]*t

    return result

# ====================================================================================================
# Buffer form
# ====================================================================================================

class VertexArrays(NamedTuple):
    """
    Vertex attributes as one array per attribute.

    `position`, `color`, `uv0`, `normal`, `tangent` and `uv2` are float arrays of shape
    ``(n, size)``. `uv3` and `uv4` are lists of 4D vectors. Absent attributes are None.
    """
    position: np.ndarray | None = None
    color: np.ndarray | None = None
    uv0: np.ndarray | None = None
    normal: np.ndarray | None = None
    tangent: np.ndarray | None = None
    uv2: np.ndarray | None = None
    uv3: list | None = None
    uv4: list | None = None

    @property
    def attributes(self) -> VertexAttributes:
        """Flags of the arrays which are not None."""
        flags = VertexAttributes.NONE
        for name in ATTRIBUTE_NAMES:
            if getattr(self, name) is not None:
                flags |= ATTRIBUTES[name][0]
        return flags

# ====================================================================================================
# Presence template
# ====================================================================================================

def _check_vertices(vertices, title):
    if vertices is None:
        raise ValueError(f"{title}> Argument 'vertices' can't be None")

def attributes_of(vertices) -> VertexAttributes:
    """Attributes of a list of vertices, i.e. the attributes of its first vertex.

    Returns `VertexAttributes.NONE` for an empty list.
    """
    _check_vertices(vertices, "attributes_of")
    return vertices[0].attributes if len(vertices) else VertexAttributes.NONE

def is_uniform(vertices) -> bool:
    """Check that all the vertices carry the same attributes than the first one.

    The conversion functions only look at the first vertex. This function can be used
    to validate a list built by hand before converting it.
    """
    flags = attributes_of(vertices)
    return all(v.attributes == flags for v in vertices)

# ====================================================================================================
# Vertices to arrays
# ====================================================================================================

def _gather(vertices, name, size):
    # Vertices lacking the attribute keep zeros
    a = np.zeros((len(vertices), size), dtype=bfloat)
    for i, vertex in enumerate(vertices):
        value = getattr(vertex, name)
        if value is not None:
            a[i] = value
    return a

def _transform(transfo, name, a):
    if transfo is None:
        return a
    if name == 'position':
        a = transfo.transform_points(a)
    elif name == 'normal':
        a = transfo.transform_normals(a)
    elif name == 'tangent':
        a = transfo.rotate_vectors(a)
    return a.astype(bfloat, copy=False)

def get_arrays(vertices, attributes=VertexAttributes.ALL, world_to_local=None) -> VertexArrays:
    """
    Allocate and fill the requested attribute arrays.

    An array is allocated for an attribute if it is requested **and** the first vertex
    has it. Values of the other vertices are copied even if they are absent on
    the first one; vertices lacking a list attribute give zeros.

    > ***Note:*** To rebuild a mesh, use `set_mesh` which only assigns the relevant buffers.

    Parameters
    ----------
    vertices : sequence of Vertex
        The source vertices, left unchanged.
    attributes : VertexAttributes, default ALL
        The requested attributes.
    world_to_local : Transformation or array_like (4, 4), optional
        Transformation applied to positions (as points), normals (inverse transpose)
        and tangents (rotation only, w is kept).

    Returns
    -------
    VertexArrays
        New arrays, None for the attributes not requested or not present.

    Raises
    ------
    ValueError
        If `vertices` is None.
    """
    _check_vertices(vertices, "get_arrays")
    transfo = as_transformation(world_to_local)

    requested = VertexAttributes(attributes)
    first = vertices[0] if len(vertices) else Vertex()

    arrays = {}
    for name, (flag, size, _) in ATTRIBUTES.items():
        if not (requested & flag) or not first.has_attribute(flag):
            arrays[name] = None
            continue

        a = _transform(transfo, name, _gather(vertices, name, size))
        arrays[name] = list(a) if name in UV_CHANNELS else a

    result = VertexArrays(**arrays)
    logging.debug(f"get_arrays> {len(vertices)} vertices, requested {requested!r}, allocated {result.attributes!r}")

    return result

# ====================================================================================================
# Mesh to vertices
# ====================================================================================================

def _read_buffer(mesh, name, count):
    buffer = ATTRIBUTES[name][2]
    if buffer is None:
        values = mesh.get_uvs(UV_CHANNELS[name])
    else:
        values = getattr(mesh, buffer)

    if values is None or len(values) != count:
        return None

    size = ATTRIBUTES[name][1]
    a = np.asarray(values, dtype=bfloat).reshape(count, -1)
    if a.shape[1] == size:
        return a
    if a.shape[1] > size or name not in UV_CHANNELS:
        raise ValueError(f"get_vertices> Buffer '{name}' has {a.shape[1]} components, {size} expected")

    # Generalized uv channels accept 2 or 3 components
    padded = np.zeros((count, size), dtype=bfloat)
    padded[:, :a.shape[1]] = a
    return padded

def get_vertices(mesh, local_to_world=None) -> list[Vertex] | None:
    """
    Build the list of vertices from the mesh buffers.

    An attribute is set on all the vertices if its buffer exists and has exactly
    `mesh.vertex_count` items, otherwise it is absent from all the vertices.

    Parameters
    ----------
    mesh : MeshBuffers
        Any object exposing `vertex_count`, `vertices`, `colors`, `normals`,
        `tangents`, `uv`, `uv2` and `get_uvs(channel)` is accepted.
    local_to_world : Transformation or array_like (4, 4), optional
        Transformation applied to positions (as points), normals (inverse transpose)
        and tangents (rotation only, w is kept).

    Returns
    -------
    list of Vertex or None
        None if `mesh` is None.
    """
    if mesh is None:
        return None

    transfo = as_transformation(local_to_world)
    count = mesh.vertex_count

    arrays = {}
    if count:
        for name in ATTRIBUTE_NAMES:
            a = _read_buffer(mesh, name, count)
            if a is not None:
                arrays[name] = _transform(transfo, name, a)

    logging.debug(f"get_vertices> {count} vertices, attributes {list(arrays.keys())}")

    vertices = []
    for i in range(count):
        vertices.append(Vertex(**{name: a[i] for name, a in arrays.items()}))

    return vertices

# ====================================================================================================
# Vertices to mesh
# ====================================================================================================

def set_mesh(mesh, vertices, world_to_local=None):
    """
    Replace the mesh buffers by the vertices attributes.

    The mesh is cleared before the new buffers are assigned: the triangles must be set
    again after calling this function. A buffer is assigned if the first vertex has
    the corresponding attribute.

    Parameters
    ----------
    mesh : MeshBuffers
        The target mesh. Needs `clear()`, the buffer properties and `set_uvs(channel, values)`.
    vertices : sequence of Vertex
        The new vertices.
    world_to_local : Transformation or array_like (4, 4), optional
        Transformation applied before the buffers are assigned.

    Raises
    ------
    ValueError
        If `mesh` or `vertices` is None, if `vertices` is empty or if the first
        vertex has no position. The mesh is left untouched in these cases.
    """
    if mesh is None:
        raise ValueError("set_mesh> Argument 'mesh' can't be None")
    _check_vertices(vertices, "set_mesh")
    if not len(vertices):
        raise ValueError("set_mesh> The list of vertices is empty")
    if not vertices[0].has_position:
        raise ValueError("set_mesh> The first vertex must have a position")

    arrays = get_arrays(vertices, VertexAttributes.ALL, world_to_local)

    mesh.clear()

    first = vertices[0]
    for name, (flag, _, buffer) in ATTRIBUTES.items():
        if not first.has_attribute(flag):
            continue

        a = getattr(arrays, name)
        if buffer is None:
            if a is not None:
                mesh.set_uvs(UV_CHANNELS[name], a)
        else:
            setattr(mesh, buffer, a)

    logging.debug(f"set_mesh> {len(vertices)} vertices, attributes {first.attributes!r}")

# ====================================================================================================
# Interpolation
# ====================================================================================================

def mix(x, y, weight):
    """
    Linearly interpolate between two vertices.

    The position is always interpolated. For the other attributes:
    - present on both vertices: interpolated
    - present on one vertex only: value of this vertex
    - absent from both: absent

    Parameters
    ----------
    x : Vertex
        Left vertex, must have a position.
    y : Vertex
        Right vertex, must have a position.
    weight : float
        0 gives x, 1 gives y. Not clamped: values outside [0, 1] extrapolate.

    Returns
    -------
    Vertex
        A new vertex. Normals and tangents are not normalized.
    """
    i = 1.0 - weight

    v = Vertex()
    v.position = x.position*i + y.position*weight

    for name in OPTIONAL_NAMES:
        a = getattr(x, name)
        b = getattr(y, name)
        if a is not None and b is not None:
            setattr(v, name, a*i + b*weight)
        elif a is not None:
            setattr(v, name, a)
        elif b is not None:
            setattr(v, name, b)

    return v

def mix_buffers(arrays, i0, i1, weights) -> VertexArrays:
    """
    Interpolate pairs of vertices given in buffer form.

    For each k, the new vertex k is ``mix(vertex[i0[k]], vertex[i1[k]], weights[k])``.
    In buffer form all the vertices share the same attributes, the arrays which are
    None stay None.

    ``` python
    arrays = get_arrays(verts)
    # Middle of edges (0, 1) and (1, 2)
    middles = mix_buffers(arrays, [0, 1], [1, 2], [.5, .5])
    ```

    Parameters
    ----------
    arrays : VertexArrays
    i0, i1 : array_like of int
        Indices of the left and right vertices.
    weights : array_like of float

    Returns
    -------
    VertexArrays

    Raises
    ------
    ValueError
        If the lengths of `i0`, `i1` and `weights` differ or if an index is out of range.
    """
    if arrays is None:
        raise ValueError("mix_buffers> Argument 'arrays' can't be None")

    i0 = np.ascontiguousarray(i0, dtype=bint).reshape(-1)
    i1 = np.ascontiguousarray(i1, dtype=bint).reshape(-1)
    weights = np.ascontiguousarray(weights, dtype=bfloat).reshape(-1)

    if not (len(i0) == len(i1) == len(weights)):
        raise ValueError(f"mix_buffers> Lengths mismatch: i0 {len(i0)}, i1 {len(i1)}, weights {len(weights)}")

    result = {}
    for name in ATTRIBUTE_NAMES:
        a = getattr(arrays, name)
        if a is None:
            result[name] = None
            continue

        src = np.ascontiguousarray(np.asarray(a, dtype=bfloat).reshape(len(a), ATTRIBUTES[name][1]))
        if len(i0) and (min(i0.min(), i1.min()) < 0 or max(i0.max(), i1.max()) >= len(src)):
            raise ValueError(f"mix_buffers> Indices out of range [0, {len(src)}[ for '{name}'")

        mixed = lerp_rows(src, i0, i1, weights)
        result[name] = list(mixed) if name in UV_CHANNELS else mixed

    return VertexArrays(**result)
