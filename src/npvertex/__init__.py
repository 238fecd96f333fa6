
from .constants import VertexAttributes
from .vertex import Vertex
from .meshbuffers import MeshBuffers
from .vertexutils import VertexArrays, attributes_of, is_uniform, get_arrays, get_vertices, set_mesh, mix, mix_buffers

from . import constants

from .maths import Rotation, Transformation

VERSION = (0, 1, 0)

__version__ = ".".join(map(str, VERSION))

__all__ = [
    "VERSION",
    "VertexAttributes",
    "Vertex",
    "MeshBuffers",
    "VertexArrays",
    "attributes_of", "is_uniform",
    "get_arrays", "get_vertices", "set_mesh",
    "mix", "mix_buffers",
    "constants",
    "Rotation", "Transformation",
]
