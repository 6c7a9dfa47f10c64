"""Render-ready arrays from a decoded mesh.

Positions are mirrored on X to match the target engine handedness, vertex
color bytes are normalised to [0, 1] with a 1/2.2 gamma curve on RGB, and
normals and indices pass through unchanged. Nothing here feeds back into
decoding.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .model import Mesh

__all__ = ["RenderArrays", "to_render_arrays", "GAMMA"]

GAMMA = 1.0 / 2.2


@dataclass(slots=True)
class RenderArrays:
    positions: np.ndarray  # (N, 3) float32
    normals: np.ndarray  # (N, 3) float32
    colors: np.ndarray  # (N, 4) float32 in [0, 1]
    indices: np.ndarray  # (M,) uint32, triangle list
    topology: str = "triangle_list"

    @property
    def triangle_count(self) -> int:
        return int(self.indices.shape[0] // 3)


def to_render_arrays(mesh: Mesh) -> RenderArrays:
    n = len(mesh.vertices)
    positions = np.empty((n, 3), dtype=np.float32)
    normals = np.empty((n, 3), dtype=np.float32)
    colors_u8 = np.empty((n, 4), dtype=np.uint8)
    for i, v in enumerate(mesh.vertices):
        positions[i] = v.position
        normals[i] = v.normal
        colors_u8[i] = v.color

    positions[:, 0] *= -1.0

    colors = colors_u8.astype(np.float32) / 255.0
    colors[:, :3] = np.power(colors[:, :3], GAMMA)

    indices = np.asarray(mesh.indices, dtype=np.uint32)
    return RenderArrays(
        positions=positions,
        normals=normals,
        colors=colors,
        indices=indices,
    )
