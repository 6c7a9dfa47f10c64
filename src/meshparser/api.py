"""High-level API for meshparser.

Thin wrappers over the decode pipeline for the common sources (bytes, file
paths) plus a JSON-friendly summary used by the CLI.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Dict

from .decoding.errors import MeshError
from .decoding.mesh import decode, decode_async
from .logging import get_logger
from .model import Mesh

__all__ = [
    "decode",
    "decode_async",
    "decode_bytes",
    "decode_file",
    "decode_file_async",
    "mesh_summary",
]


def decode_bytes(data: bytes | bytearray | memoryview) -> Mesh:
    return decode(data)


def decode_file(path: str | Path) -> Mesh:
    p = Path(path)
    with p.open("rb") as f:
        try:
            return decode(f)
        except MeshError as exc:
            get_logger().debug("%s: %s [%s]", p.name, exc, exc.code)
            raise


async def decode_file_async(path: str | Path) -> Mesh:
    """Decode a file without blocking the event loop.

    The file is opened and read on worker threads; the decode itself runs
    on the calling task.
    """
    p = Path(path)
    f = await asyncio.to_thread(p.open, "rb")
    try:
        return await decode_async(f)
    except MeshError as exc:
        get_logger().debug("%s: %s [%s]", p.name, exc, exc.code)
        raise
    finally:
        await asyncio.to_thread(f.close)


def _bounds(mesh: Mesh) -> Dict[str, Any] | None:
    if not mesh.vertices:
        return None
    xs, ys, zs = zip(*(v.position for v in mesh.vertices))
    return {
        "min": [min(xs), min(ys), min(zs)],
        "max": [max(xs), max(ys), max(zs)],
    }


def mesh_summary(mesh: Mesh) -> Dict[str, Any]:
    return {
        "vertex_count": mesh.vertex_count,
        "index_count": mesh.index_count,
        "triangle_count": mesh.index_count // 3,
        "sub_mesh_count": mesh.sub_mesh_count,
        "bounds": _bounds(mesh),
        "sub_meshes": [
            {
                "name": sm.name,
                "shader": sm.shader_id.name.lower(),
                "index_buffer_start": sm.index_buffer_start,
                "index_buffer_length": sm.index_buffer_length,
            }
            for sm in mesh.sub_meshes
        ],
    }
