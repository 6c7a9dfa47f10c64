"""Dataclass models for decoded mesh geometry."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, Tuple

from .decoding.errors import UnknownShaderType

Vec3 = Tuple[float, float, float]
Rgba = Tuple[int, int, int, int]


class ShaderType(IntEnum):
    OPAQUE = 0
    TRANSPARENT = 1
    EMISSIVE = 2
    LAVA = 3

    @classmethod
    def from_raw(cls, raw: int) -> "ShaderType":
        try:
            return cls(raw)
        except ValueError:
            raise UnknownShaderType(raw) from None


@dataclass(frozen=True, slots=True)
class VertexRecord:
    position: Vec3
    color: Rgba
    normal: Vec3


@dataclass(frozen=True, slots=True)
class SubMesh:
    index_buffer_start: int
    index_buffer_length: int
    shader_id: ShaderType
    name_length_bytes: int
    name: str

    @property
    def index_buffer_end(self) -> int:
        return self.index_buffer_start + self.index_buffer_length


@dataclass(frozen=True, slots=True)
class Mesh:
    vertex_count: int
    vertices: Tuple[VertexRecord, ...]
    index_count: int
    indices: Tuple[int, ...]
    sub_mesh_count: int
    sub_meshes: Tuple[SubMesh, ...]

    def triangles(self) -> Iterator[Tuple[int, int, int]]:
        """Yield index triples in file order.

        A trailing group of fewer than three indices is not a triangle and
        is ignored.
        """
        idx = self.indices
        for i in range(0, len(idx) - len(idx) % 3, 3):
            yield idx[i], idx[i + 1], idx[i + 2]

    def sub_mesh_indices(self, i: int) -> Tuple[int, ...]:
        sm = self.sub_meshes[i]
        return self.indices[sm.index_buffer_start : sm.index_buffer_end]


__all__ = ["ShaderType", "VertexRecord", "SubMesh", "Mesh", "Vec3", "Rgba"]
