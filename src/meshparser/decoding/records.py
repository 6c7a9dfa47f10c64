"""Record decoders: vertex, index buffer and sub-mesh.

Each decoder is a generator over ``stream.Read`` requests (see
``stream.py``) and owns no state beyond its local decode.
"""

from __future__ import annotations

import struct
from typing import List

from ..model import ShaderType, SubMesh, VertexRecord
from .constants import (
    INDEX_CHUNK,
    MAX_NAME_LENGTH,
    SUBMESH_RESERVED_POST_SHADER,
    SUBMESH_RESERVED_PRE_SHADER,
    SUBMESH_RESERVED_TRAILER,
    VERTEX_FORMAT,
    VERTEX_RECORD_SIZE,
)
from .errors import (
    IndexOutOfRange,
    NameTooLong,
    TextDecodeFailure,
)
from .stream import (
    Decoder,
    read_exact,
    read_u16_le,
    read_u32_le,
    read_upto,
    skip_forward,
    unpack,
)

__all__ = ["vertex_record", "vertices", "indices", "sub_mesh"]

_VERTEX = struct.Struct(VERTEX_FORMAT)
assert _VERTEX.size == VERTEX_RECORD_SIZE


def vertex_record() -> Decoder[VertexRecord]:
    raw = yield from read_exact(VERTEX_RECORD_SIZE)
    px, py, pz, r, g, b, a, nx, ny, nz = unpack(_VERTEX, raw)
    return VertexRecord(
        position=(px, py, pz),
        color=(r, g, b, a),
        normal=(nx, ny, nz),
    )


def vertices(vertex_count: int) -> Decoder[List[VertexRecord]]:
    out: List[VertexRecord] = []
    for _ in range(vertex_count):
        out.append((yield from vertex_record()))
    return out


def indices(index_count: int, vertex_count: int) -> Decoder[List[int]]:
    """Decode ``index_count`` u16 indices bounded by ``vertex_count``.

    Indices are requested in chunks. A short chunk is still validated index
    by index before the truncation is reported, so the first bad index wins
    over a later end of stream exactly as with one read per index.
    """
    out: List[int] = []
    position = 0
    while position < index_count:
        want = min(INDEX_CHUNK, index_count - position)
        raw = yield from read_upto(want * 2)
        usable = len(raw) - len(raw) % 2
        for (index,) in struct.iter_unpack("<H", raw[:usable]):
            if index >= vertex_count:
                raise IndexOutOfRange(position, vertex_count)
            out.append(index)
            position += 1
        if len(raw) != want * 2:
            # end of stream: re-request the remainder so the driver reports it
            yield from read_exact(want * 2 - len(raw))
    return out


def sub_mesh() -> Decoder[SubMesh]:
    index_buffer_start = yield from read_u32_le()
    index_buffer_length = yield from read_u32_le()
    yield from skip_forward(SUBMESH_RESERVED_PRE_SHADER)

    shader_id = ShaderType.from_raw((yield from read_u16_le()))
    yield from skip_forward(SUBMESH_RESERVED_POST_SHADER)

    name_length_bytes = yield from read_u16_le()
    if name_length_bytes > MAX_NAME_LENGTH:
        raise NameTooLong(name_length_bytes, MAX_NAME_LENGTH)
    raw_name = yield from read_exact(name_length_bytes)
    try:
        name = raw_name.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise TextDecodeFailure(str(exc)) from exc
    yield from skip_forward(SUBMESH_RESERVED_TRAILER)

    return SubMesh(
        index_buffer_start=index_buffer_start,
        index_buffer_length=index_buffer_length,
        shader_id=shader_id,
        name_length_bytes=name_length_bytes,
        name=name,
    )
