"""Binary layout constants for the .mesh format.

All integers are little-endian. Reserved widths are skipped verbatim and
must not change even though their content is never interpreted.
"""

from __future__ import annotations

MAGIC = b"mesh"

# Header: magic(4) + reserved(4) + vertex_count(u16) + reserved(4)
HEADER_RESERVED_A = 4
HEADER_RESERVED_B = 4

# Vertex record: position 3xf32, color 4xu8, normal 3xf32
VERTEX_RECORD_SIZE = 28
VERTEX_FORMAT = "<3f4B3f"

# Sub-mesh record reserved regions
SUBMESH_RESERVED_PRE_SHADER = 2
SUBMESH_RESERVED_POST_SHADER = 4 * 3 + 4 * 3 + 2  # 26
SUBMESH_RESERVED_TRAILER = 4 * 3  # 12

# Sanity bound on declared sub-mesh name length (bytes)
MAX_NAME_LENGTH = 1000

# Indices fetched per read request by the index decoder
INDEX_CHUNK = 4096

__all__ = [
    "MAGIC",
    "HEADER_RESERVED_A",
    "HEADER_RESERVED_B",
    "VERTEX_RECORD_SIZE",
    "VERTEX_FORMAT",
    "SUBMESH_RESERVED_PRE_SHADER",
    "SUBMESH_RESERVED_POST_SHADER",
    "SUBMESH_RESERVED_TRAILER",
    "MAX_NAME_LENGTH",
    "INDEX_CHUNK",
]
