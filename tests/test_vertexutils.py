from types import SimpleNamespace

import numpy as np
import pytest

from npvertex import (
    MeshBuffers, Rotation, Transformation, Vertex, VertexArrays, VertexAttributes,
    attributes_of, get_arrays, get_vertices, is_uniform, mix, mix_buffers, set_mesh,
)

# ----------------------------------------------------------------------------------------------------
# Fixtures
# ----------------------------------------------------------------------------------------------------

def full_mesh(count=4, seed=0):
    rng = np.random.default_rng(seed)
    mesh = MeshBuffers(vertices=rng.uniform(-1, 1, (count, 3)))
    mesh.colors = rng.uniform(0, 1, (count, 4))
    mesh.normals = rng.uniform(-1, 1, (count, 3))
    mesh.tangents = rng.uniform(-1, 1, (count, 4))
    mesh.uv = rng.uniform(0, 1, (count, 2))
    mesh.uv2 = rng.uniform(0, 1, (count, 2))
    mesh.set_uvs(2, rng.uniform(0, 1, (count, 4)))
    mesh.set_uvs(3, rng.uniform(0, 1, (count, 4)))
    mesh.triangles = [0, 1, 2, 0, 2, 3]
    return mesh


def make_vertices():
    return [
        Vertex(position=(0, 0, 0), normal=(0, 0, 1), uv0=(0, 0)),
        Vertex(position=(1, 0, 0), normal=(0, 0, 1), uv0=(1, 0)),
        Vertex(position=(0, 1, 0), normal=(0, 0, 1), uv0=(0, 1)),
    ]

# ----------------------------------------------------------------------------------------------------
# get_arrays
# ----------------------------------------------------------------------------------------------------

def test_get_arrays_none_raises():
    with pytest.raises(ValueError):
        get_arrays(None)


def test_get_arrays_empty_list():
    arrays = get_arrays([])
    assert isinstance(arrays, VertexArrays)
    assert all(a is None for a in arrays)
    assert arrays.attributes == VertexAttributes.NONE


def test_get_arrays_present_attributes():
    arrays = get_arrays(make_vertices())
    assert arrays.attributes == VertexAttributes.POSITION | VertexAttributes.NORMAL | VertexAttributes.TEXTURE0
    assert arrays.position.shape == (3, 3)
    assert arrays.position.dtype == np.float32
    assert np.array_equal(arrays.uv0, [[0, 0], [1, 0], [0, 1]])
    assert arrays.color is None and arrays.uv3 is None


def test_get_arrays_requested_subset():
    arrays = get_arrays(make_vertices(), VertexAttributes.POSITION | VertexAttributes.COLOR)
    assert arrays.position is not None
    # Requested but absent
    assert arrays.color is None
    # Present but not requested
    assert arrays.normal is None
    assert arrays.uv0 is None


def test_get_arrays_gated_by_first_vertex():
    verts = make_vertices()
    verts[1].color = (1, 0, 0, 1)
    verts[2].color = (0, 1, 0, 1)
    arrays = get_arrays(verts, VertexAttributes.COLOR | VertexAttributes.POSITION)
    assert arrays.color is None


def test_get_arrays_missing_on_later_vertex_gives_zeros():
    verts = make_vertices()
    verts[2].normal = None
    arrays = get_arrays(verts)
    assert np.array_equal(arrays.normal[2], [0, 0, 0])


def test_get_arrays_generalized_uvs_are_lists():
    verts = [Vertex(position=(i, 0, 0), uv3=(i, 1, 2, 3), uv4=(0, 0, 0, i)) for i in range(3)]
    arrays = get_arrays(verts)
    assert isinstance(arrays.uv3, list) and isinstance(arrays.uv4, list)
    assert len(arrays.uv3) == 3
    assert np.array_equal(arrays.uv4[2], [0, 0, 0, 2])


def test_get_arrays_does_not_mutate_vertices():
    verts = make_vertices()
    before = [v.copy() for v in verts]
    arrays = get_arrays(verts, world_to_local=Transformation.from_components(translation=(1, 2, 3)))
    arrays.position[:] = 99
    assert verts == before


def test_get_arrays_translation():
    verts = make_vertices()
    T = Transformation.from_components(translation=(10, 20, 30))
    arrays = get_arrays(verts, world_to_local=T)
    assert np.allclose(arrays.position, [[10, 20, 30], [11, 20, 30], [10, 21, 30]])
    assert np.array_equal(arrays.normal, [[0, 0, 1]] * 3)
    assert np.array_equal(arrays.uv0, [[0, 0], [1, 0], [0, 1]])


def test_get_arrays_tangent_rotated_only():
    verts = [Vertex(position=(0, 0, 0), tangent=(1, 0, 0, -1), color=(1, 0, 0, 1))]
    R = Rotation.from_axis_angle((0, 0, 1), 90, degrees=True)
    T = Transformation.from_components(translation=(5, 0, 0), rotation=R, scale=(2, 2, 2))
    arrays = get_arrays(verts, world_to_local=T.as_array())
    assert np.allclose(arrays.tangent, [[0, 1, 0, -1]], atol=1e-6)
    assert np.array_equal(arrays.color, [[1, 0, 0, 1]])


def test_attributes_of_and_is_uniform():
    verts = make_vertices()
    assert attributes_of(verts) == VertexAttributes.POSITION | VertexAttributes.NORMAL | VertexAttributes.TEXTURE0
    assert attributes_of([]) == VertexAttributes.NONE
    assert is_uniform(verts)
    assert is_uniform([])
    verts[1].color = (1, 1, 1, 1)
    assert not is_uniform(verts)
    with pytest.raises(ValueError):
        attributes_of(None)

# ----------------------------------------------------------------------------------------------------
# get_vertices
# ----------------------------------------------------------------------------------------------------

def test_get_vertices_none_mesh():
    assert get_vertices(None) is None


def test_get_vertices_empty_mesh():
    assert get_vertices(MeshBuffers()) == []


def test_get_vertices_reads_all_buffers():
    mesh = full_mesh()
    verts = get_vertices(mesh)
    assert len(verts) == 4
    assert all(v.attributes == VertexAttributes.ALL for v in verts)
    assert np.array_equal(verts[2].position, mesh.vertices[2])
    assert np.array_equal(verts[3].uv4, mesh.get_uvs(3)[3])


def test_get_vertices_length_mismatch_is_absent_for_all():
    mesh = SimpleNamespace(
        vertex_count=3,
        vertices=np.zeros((3, 3)),
        colors=np.ones((2, 4)),
        normals=np.tile([0., 0., 1.], (3, 1)),
        tangents=None,
        uv=np.zeros((3, 2)),
        uv2=np.zeros((0, 2)),
        get_uvs=lambda channel: [np.ones(4)] * 3 if channel == 2 else [],
    )
    verts = get_vertices(mesh)
    assert len(verts) == 3
    for v in verts:
        assert v.has_position and v.has_normal and v.has_uv0 and v.has_uv3
        assert not (v.has_color or v.has_tangent or v.has_uv2 or v.has_uv4)


def test_get_vertices_transform():
    mesh = MeshBuffers(vertices=[[0, 0, 0], [1, 0, 0]])
    mesh.normals = [[0, 0, 1], [0, 0, 1]]
    T = Transformation.from_components(translation=(0, 0, 5))
    verts = get_vertices(mesh, local_to_world=T)
    assert np.allclose(verts[1].position, [1, 0, 5])
    assert np.allclose(verts[1].normal, [0, 0, 1])


def test_get_vertices_short_color_buffer_raises():
    mesh = SimpleNamespace(
        vertex_count=2,
        vertices=np.zeros((2, 3)),
        colors=np.ones((2, 3)),
        normals=None, tangents=None, uv=None, uv2=None,
        get_uvs=lambda channel: [],
    )
    with pytest.raises(ValueError):
        get_vertices(mesh)


def test_get_vertices_pads_generalized_uvs_only():
    mesh = SimpleNamespace(
        vertex_count=2,
        vertices=np.zeros((2, 3)),
        colors=None, normals=None, tangents=None, uv=None, uv2=None,
        get_uvs=lambda channel: [np.array([1., 2.])] * 2 if channel == 3 else [],
    )
    verts = get_vertices(mesh)
    assert np.array_equal(verts[1].uv4, [1, 2, 0, 0])


def test_normals_under_non_uniform_scale():
    T = Transformation.from_components(scale=(4, 1, 1))
    mesh = MeshBuffers(vertices=[[0, 0, 0], [1, -1, 0]])
    mesh.normals = [[1, 1, 0], [1, 1, 0]]

    verts = get_vertices(mesh, local_to_world=T)
    # Inverse transpose, not the plain scale
    assert np.allclose(verts[0].normal, [.25, 1, 0])
    edge = verts[1].position - verts[0].position
    assert abs(np.dot(edge, verts[0].normal)) < 1e-5

    arrays = get_arrays(verts, world_to_local=~T)
    assert np.allclose(arrays.normal, [[1, 1, 0], [1, 1, 0]], atol=1e-5)

# ----------------------------------------------------------------------------------------------------
# set_mesh
# ----------------------------------------------------------------------------------------------------

def test_set_mesh_argument_checks():
    with pytest.raises(ValueError):
        set_mesh(None, make_vertices())
    with pytest.raises(ValueError):
        set_mesh(MeshBuffers(), None)
    with pytest.raises(ValueError):
        set_mesh(MeshBuffers(), [])


def test_set_mesh_replaces_buffers_and_clears_triangles():
    mesh = full_mesh()
    set_mesh(mesh, make_vertices())
    assert mesh.vertex_count == 3
    assert mesh.attributes == VertexAttributes.POSITION | VertexAttributes.NORMAL | VertexAttributes.TEXTURE0
    assert mesh.colors is None
    assert mesh.get_uvs(2) == []
    assert len(mesh.triangles) == 0
    mesh.triangles = [0, 1, 2]


def test_set_mesh_generalized_uvs():
    verts = [Vertex(position=(i, 0, 0), uv4=(i, i, i, i)) for i in range(3)]
    mesh = MeshBuffers()
    set_mesh(mesh, verts)
    assert mesh.get_uvs(2) == []
    assert np.array_equal(mesh.get_uvs(3)[1], [1, 1, 1, 1])


def test_set_mesh_without_position_leaves_mesh_untouched():
    mesh = full_mesh()
    before = mesh.vertices
    verts = [Vertex(color=(1, 0, 0, 1)), Vertex(color=(0, 1, 0, 1))]
    with pytest.raises(ValueError):
        set_mesh(mesh, verts)
    assert mesh.vertex_count == 4
    assert np.array_equal(mesh.vertices, before)
    assert np.array_equal(mesh.triangles, [0, 1, 2, 0, 2, 3])
    assert mesh.colors is not None


def test_round_trip_is_exact():
    src = full_mesh(count=8, seed=3)
    dst = MeshBuffers()
    set_mesh(dst, get_vertices(src))
    for name in ('vertices', 'colors', 'normals', 'tangents', 'uv', 'uv2'):
        assert np.array_equal(getattr(dst, name), getattr(src, name)), name
    for channel in (2, 3):
        assert np.array_equal(np.array(dst.get_uvs(channel)), np.array(src.get_uvs(channel)))


def test_round_trip_with_transform_and_inverse():
    src = full_mesh(count=5, seed=1)
    R = Rotation.from_axis_angle((1, 2, 3), .4)
    T = Transformation.from_components(translation=(1, -1, 2), rotation=R, scale=(1.5, 1.5, 1.5))
    dst = MeshBuffers()
    set_mesh(dst, get_vertices(src, local_to_world=T), world_to_local=~T)
    assert np.allclose(dst.vertices, src.vertices, atol=1e-5)
    assert np.allclose(dst.normals, src.normals, atol=1e-5)
    assert np.allclose(dst.tangents, src.tangents, atol=1e-5)
    assert np.array_equal(dst.colors, src.colors)

# ----------------------------------------------------------------------------------------------------
# mix
# ----------------------------------------------------------------------------------------------------

def test_mix_linearity():
    x = Vertex(position=(0, 2, 4))
    y = Vertex(position=(2, 4, 8))
    assert np.array_equal(mix(x, y, 0).position, x.position)
    assert np.array_equal(mix(x, y, 1).position, y.position)
    assert np.allclose(mix(x, y, .5).position, [1, 3, 6])


def test_mix_extrapolates():
    x = Vertex(position=(0, 0, 0), uv0=(0, 0))
    y = Vertex(position=(1, 0, 0), uv0=(1, 1))
    v = mix(x, y, 2)
    assert np.allclose(v.position, [2, 0, 0])
    assert np.allclose(v.uv0, [2, 2])


@pytest.mark.parametrize("weight", [0., .25, .5, 1.])
def test_mix_presence_fallback(weight):
    x = Vertex(position=(0, 0, 0), normal=(0, 0, 1))
    y = Vertex(position=(1, 1, 1), color=(1, 0, 0, 1))
    v = mix(x, y, weight)
    assert np.array_equal(v.normal, x.normal)
    assert np.array_equal(v.color, y.color)
    assert not v.has_tangent and not v.has_uv3


def test_mix_no_normalization():
    x = Vertex(position=(0, 0, 0), normal=(1, 0, 0))
    y = Vertex(position=(0, 0, 0), normal=(0, 1, 0))
    v = mix(x, y, .5)
    assert np.allclose(v.normal, [.5, .5, 0])


def test_mix_returns_independent_values():
    x = Vertex(position=(0, 0, 0), color=(1, 1, 1, 1))
    y = Vertex(position=(1, 0, 0))
    v = mix(x, y, .5)
    v.color[0] = 0
    assert x.color[0] == 1

# ----------------------------------------------------------------------------------------------------
# mix_buffers
# ----------------------------------------------------------------------------------------------------

def test_mix_buffers_agrees_with_mix():
    verts = get_vertices(full_mesh(count=6, seed=2))
    arrays = get_arrays(verts)
    i0, i1, w = [0, 2, 5], [1, 3, 0], [.5, .1, 1.5]
    mixed = mix_buffers(arrays, i0, i1, w)
    assert mixed.attributes == VertexAttributes.ALL
    assert isinstance(mixed.uv3, list)
    for k in range(3):
        expected = mix(verts[i0[k]], verts[i1[k]], w[k])
        assert np.allclose(mixed.position[k], expected.position, atol=1e-5)
        assert np.allclose(mixed.tangent[k], expected.tangent, atol=1e-5)
        assert np.allclose(mixed.uv4[k], expected.uv4, atol=1e-5)


def test_mix_buffers_keeps_absent_arrays():
    arrays = get_arrays(make_vertices())
    mixed = mix_buffers(arrays, [0], [2], [.5])
    assert mixed.color is None
    assert np.allclose(mixed.uv0, [[0, .5]])


def test_mix_buffers_errors():
    arrays = get_arrays(make_vertices())
    with pytest.raises(ValueError):
        mix_buffers(arrays, [0, 1], [1], [.5, .5])
    with pytest.raises(ValueError):
        mix_buffers(arrays, [0], [3], [.5])
    with pytest.raises(ValueError):
        mix_buffers(None, [0], [1], [.5])
