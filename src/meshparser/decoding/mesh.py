"""Mesh decode pipeline.

Strict order: magic -> header -> vertices -> indices -> sub-meshes, each
stage consuming counts produced by the previous one. The first failure
aborts the decode; no partial mesh is ever returned.
"""

from __future__ import annotations

from typing import Any, List

from ..logging import get_logger
from ..model import Mesh, SubMesh
from .constants import HEADER_RESERVED_A, HEADER_RESERVED_B, MAGIC
from .errors import (
    DecodeFailure,
    SubMeshRangeOutOfBounds,
    corrupt_mesh,
    not_mesh,
)
from .records import indices, sub_mesh, vertices
from .stream import (
    Decoder,
    as_async_byte_source,
    as_byte_source,
    read_exact,
    read_u16_le,
    read_u32_le,
    run_async,
    run_blocking,
    skip_forward,
)

__all__ = ["mesh", "sub_meshes", "decode", "decode_async"]


class _WrongMagic(Exception):
    def __init__(self, magic: bytes):
        super().__init__(magic)
        self.magic = magic


def sub_meshes(
    sub_mesh_count: int, index_count: int
) -> Decoder[List[SubMesh]]:
    out: List[SubMesh] = []
    for i in range(sub_mesh_count):
        sm = yield from sub_mesh()
        if sm.index_buffer_start > index_count:
            raise SubMeshRangeOutOfBounds(
                i, sm.index_buffer_start, index_count
            )
        if sm.index_buffer_end > index_count:
            raise SubMeshRangeOutOfBounds(i, sm.index_buffer_end, index_count)
        out.append(sm)
    return out


def mesh() -> Decoder[Mesh]:
    logger = get_logger()
    magic = yield from read_exact(len(MAGIC))
    if magic != MAGIC:
        raise _WrongMagic(magic)
    yield from skip_forward(HEADER_RESERVED_A)

    vertex_count = yield from read_u16_le()
    yield from skip_forward(HEADER_RESERVED_B)
    verts = yield from vertices(vertex_count)
    logger.debug("decoded %d vertices", vertex_count)

    index_count = yield from read_u32_le()
    idx = yield from indices(index_count, vertex_count)
    logger.debug("decoded %d indices", index_count)

    sub_mesh_count = yield from read_u16_le()
    subs = yield from sub_meshes(sub_mesh_count, index_count)
    logger.debug("decoded %d sub-meshes", sub_mesh_count)

    return Mesh(
        vertex_count=vertex_count,
        vertices=tuple(verts),
        index_count=index_count,
        indices=tuple(idx),
        sub_mesh_count=sub_mesh_count,
        sub_meshes=tuple(subs),
    )


def decode(source: Any) -> Mesh:
    """Decode a mesh from a blocking byte source.

    ``source`` may be ``bytes``-like, a binary file object, or anything with
    a ``read(n)`` method. Raises ``NotMeshError`` or ``CorruptMeshError``.
    """
    try:
        return run_blocking(mesh(), as_byte_source(source))
    except _WrongMagic as exc:
        raise not_mesh(exc.magic) from None
    except DecodeFailure as exc:
        raise corrupt_mesh(exc) from exc


async def decode_async(source: Any) -> Mesh:
    """Suspending form of :func:`decode`.

    Accepts ``asyncio.StreamReader`` or any object with an awaitable
    ``read(n)``; blocking file objects are read in a worker thread.
    """
    try:
        return await run_async(mesh(), as_async_byte_source(source))
    except _WrongMagic as exc:
        raise not_mesh(exc.magic) from None
    except DecodeFailure as exc:
        raise corrupt_mesh(exc) from exc

