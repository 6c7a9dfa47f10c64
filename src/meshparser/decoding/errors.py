"""Error definitions for mesh decoding.

Two layers:

* ``DecodeFailure`` subclasses are the closed set of specific causes raised
  inside the decode pipeline.
* ``MeshError`` is what callers see. It has exactly two cases:
  ``NotMeshError`` (wrong magic, not this format at all) and
  ``CorruptMeshError`` (this format, but structurally invalid), the latter
  carrying the specific cause for display.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

E_NOT_MESH = "E_NOT_MESH"
E_STREAM = "E_STREAM"
E_INDEX_OUT_OF_RANGE = "E_INDEX_OUT_OF_RANGE"
E_UNKNOWN_SHADER = "E_UNKNOWN_SHADER"
E_NAME_TOO_LONG = "E_NAME_TOO_LONG"
E_TEXT_DECODE = "E_TEXT_DECODE"
E_SUBMESH_RANGE = "E_SUBMESH_RANGE"
E_SLICE_CONVERSION = "E_SLICE_CONVERSION"


class DecodeFailure(Exception):
    """Base of the specific failure causes."""

    code: str = "E_INTERNAL"

    def context(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": str(self),
            "context": self.context(),
        }


@dataclass(eq=False)
class StreamFailure(DecodeFailure):
    requested: int
    received: int
    offset: int
    reason: str = ""

    code = E_STREAM

    def __str__(self) -> str:
        msg = (
            f"stream ended or failed at offset {self.offset}: "
            f"wanted {self.requested} bytes, got {self.received}"
        )
        return f"{msg} ({self.reason})" if self.reason else msg

    def context(self) -> Dict[str, Any]:
        return {
            "requested": self.requested,
            "received": self.received,
            "offset": self.offset,
        }


@dataclass(eq=False)
class IndexOutOfRange(DecodeFailure):
    position: int
    vertex_count: int

    code = E_INDEX_OUT_OF_RANGE

    def __str__(self) -> str:
        return (
            f"While building indices, an index, number {self.position}, "
            f"exceeded the vertex count, {self.vertex_count}"
        )

    def context(self) -> Dict[str, Any]:
        return {"position": self.position, "vertex_count": self.vertex_count}


@dataclass(eq=False)
class UnknownShaderType(DecodeFailure):
    raw: int

    code = E_UNKNOWN_SHADER

    def __str__(self) -> str:
        return f"Tried to make shader with type: {self.raw}"

    def context(self) -> Dict[str, Any]:
        return {"raw": self.raw}


@dataclass(eq=False)
class NameTooLong(DecodeFailure):
    length: int
    limit: int

    code = E_NAME_TOO_LONG

    def __str__(self) -> str:
        return (
            f"name_length_bytes {self.length} exceeds the limit of "
            f"{self.limit}"
        )

    def context(self) -> Dict[str, Any]:
        return {"length": self.length, "limit": self.limit}


@dataclass(eq=False)
class TextDecodeFailure(DecodeFailure):
    reason: str

    code = E_TEXT_DECODE

    def __str__(self) -> str:
        return f"sub-mesh name is not valid UTF-8: {self.reason}"

    def context(self) -> Dict[str, Any]:
        return {"reason": self.reason}


@dataclass(eq=False)
class SubMeshRangeOutOfBounds(DecodeFailure):
    sub_mesh: int
    value: int
    index_count: int

    code = E_SUBMESH_RANGE

    def __str__(self) -> str:
        return (
            f"Submesh {self.sub_mesh}'s indexbuffer either starts or runs "
            f"out of bounds: index {self.value} exceeds bound: "
            f"{self.index_count}"
        )

    def context(self) -> Dict[str, Any]:
        return {
            "sub_mesh": self.sub_mesh,
            "value": self.value,
            "index_count": self.index_count,
        }


@dataclass(eq=False)
class SliceConversionFailure(DecodeFailure):
    fmt: str
    size: int

    code = E_SLICE_CONVERSION

    def __str__(self) -> str:
        return f"could not convert {self.size} bytes with layout {self.fmt!r}"

    def context(self) -> Dict[str, Any]:
        return {"fmt": self.fmt, "size": self.size}


@dataclass(eq=False)
class MeshError(Exception):
    code: str
    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context or {},
        }


class NotMeshError(MeshError):
    pass


@dataclass(eq=False)
class CorruptMeshError(MeshError):
    cause: Optional[DecodeFailure] = None


def not_mesh(magic: bytes) -> NotMeshError:
    return NotMeshError(
        code=E_NOT_MESH,
        message="File is not a .mesh",
        context={"magic": magic.hex()},
    )


def corrupt_mesh(cause: DecodeFailure) -> CorruptMeshError:
    return CorruptMeshError(
        code=cause.code,
        message=(
            "File doesn't represent a valid mesh - Did you try to parse a "
            "non-stormworks mesh, or is the file corrupted? Internal library "
            f"error: {cause}"
        ),
        context=cause.context(),
        cause=cause,
    )


__all__ = [
    "DecodeFailure",
    "StreamFailure",
    "IndexOutOfRange",
    "UnknownShaderType",
    "NameTooLong",
    "TextDecodeFailure",
    "SubMeshRangeOutOfBounds",
    "SliceConversionFailure",
    "MeshError",
    "NotMeshError",
    "CorruptMeshError",
    "not_mesh",
    "corrupt_mesh",
    "E_NOT_MESH",
    "E_STREAM",
    "E_INDEX_OUT_OF_RANGE",
    "E_UNKNOWN_SHADER",
    "E_NAME_TOO_LONG",
    "E_TEXT_DECODE",
    "E_SUBMESH_RANGE",
    "E_SLICE_CONVERSION",
]
