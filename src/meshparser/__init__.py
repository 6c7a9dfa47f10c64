"""meshparser package

Decoder for binary ``.mesh`` geometry files: a vertex list, a triangle
index list and shader-tagged sub-meshes over ranges of that list.

``decode`` and ``decode_async`` share one pipeline; failures surface as
``NotMeshError`` (not this format) or ``CorruptMeshError`` (this format,
but malformed; ``.cause`` holds the specific failure).
"""

from .api import (
    decode,
    decode_async,
    decode_bytes,
    decode_file,
    decode_file_async,
    mesh_summary,
)
from .decoding.errors import CorruptMeshError, MeshError, NotMeshError
from .model import Mesh, ShaderType, SubMesh, VertexRecord

__version__ = "0.3.0"

__all__ = [
    "__version__",
    "decode",
    "decode_async",
    "decode_bytes",
    "decode_file",
    "decode_file_async",
    "mesh_summary",
    "Mesh",
    "ShaderType",
    "SubMesh",
    "VertexRecord",
    "MeshError",
    "NotMeshError",
    "CorruptMeshError",
]
