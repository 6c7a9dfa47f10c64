"""Fixture helper: assemble .mesh byte strings for tests.

Only what the tests need to produce valid and deliberately broken inputs;
counts are written as given so headers can disagree with the payload.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

RESERVED_FILL = b"\xab"


@dataclass
class SubMeshSpec:
    start: int = 0
    length: int = 0
    shader: int = 0
    name: str = ""
    raw_name: Optional[bytes] = None
    name_length: Optional[int] = None

    def to_bytes(self) -> bytes:
        name = self.raw_name
        if name is None:
            name = self.name.encode()
        declared = len(name) if self.name_length is None else self.name_length
        return (
            struct.pack("<II", self.start, self.length)
            + RESERVED_FILL * 2
            + struct.pack("<H", self.shader)
            + RESERVED_FILL * 26
            + struct.pack("<H", declared)
            + name
            + RESERVED_FILL * 12
        )


@dataclass
class MeshSpec:
    vertices: List[Tuple[Sequence[float], Sequence[int], Sequence[float]]] = (
        field(default_factory=list)
    )
    indices: List[int] = field(default_factory=list)
    sub_meshes: List[SubMeshSpec] = field(default_factory=list)
    magic: bytes = b"mesh"
    vertex_count: Optional[int] = None
    index_count: Optional[int] = None
    sub_mesh_count: Optional[int] = None

    def to_bytes(self) -> bytes:
        vc = self.vertex_count
        if vc is None:
            vc = len(self.vertices)
        ic = len(self.indices) if self.index_count is None else self.index_count
        sc = (
            len(self.sub_meshes)
            if self.sub_mesh_count is None
            else self.sub_mesh_count
        )
        out = bytearray(self.magic)
        out += RESERVED_FILL * 4
        out += struct.pack("<H", vc)
        out += RESERVED_FILL * 4
        for pos, color, normal in self.vertices:
            out += struct.pack("<3f4B3f", *pos, *color, *normal)
        out += struct.pack("<I", ic)
        for i in self.indices:
            out += struct.pack("<H", i)
        out += struct.pack("<H", sc)
        for sm in self.sub_meshes:
            out += sm.to_bytes()
        return bytes(out)


def vertex(x: float = 0.0, y: float = 0.0, z: float = 0.0):
    return ((x, y, z), (255, 128, 0, 255), (0.0, 1.0, 0.0))


def triangle_mesh() -> MeshSpec:
    """One triangle, one opaque sub-mesh covering all three indices."""
    return MeshSpec(
        vertices=[vertex(0, 0, 0), vertex(1, 0, 0), vertex(0, 1, 0)],
        indices=[0, 1, 2],
        sub_meshes=[SubMeshSpec(start=0, length=3, shader=0, name="hull")],
    )


def quad_mesh() -> MeshSpec:
    """Two triangles in two sub-meshes with different shaders."""
    return MeshSpec(
        vertices=[
            vertex(0, 0, 0),
            vertex(1, 0, 0),
            vertex(1, 1, 0),
            vertex(0, 1, 0),
        ],
        indices=[0, 1, 2, 0, 2, 3],
        sub_meshes=[
            SubMeshSpec(start=0, length=3, shader=0, name="body"),
            SubMeshSpec(start=3, length=3, shader=2, name="lamp"),
        ],
    )
