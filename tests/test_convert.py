import numpy as np

from meshparser import decode_bytes
from meshparser.convert import GAMMA, to_render_arrays
from mesh_builder import MeshSpec, quad_mesh


def test_render_arrays_shapes_and_dtypes():
    arrays = to_render_arrays(decode_bytes(quad_mesh().to_bytes()))
    assert arrays.positions.shape == (4, 3)
    assert arrays.normals.shape == (4, 3)
    assert arrays.colors.shape == (4, 4)
    assert arrays.indices.tolist() == [0, 1, 2, 0, 2, 3]
    assert arrays.positions.dtype == np.float32
    assert arrays.colors.dtype == np.float32
    assert arrays.indices.dtype == np.uint32
    assert arrays.triangle_count == 2
    assert arrays.topology == "triangle_list"


def test_x_axis_is_mirrored_and_normals_untouched():
    spec = MeshSpec(
        vertices=[((2.0, 3.0, 4.0), (0, 0, 0, 0), (0.5, 0.0, 0.0))]
    )
    arrays = to_render_arrays(decode_bytes(spec.to_bytes()))
    assert arrays.positions[0].tolist() == [-2.0, 3.0, 4.0]
    assert arrays.normals[0].tolist() == [0.5, 0.0, 0.0]


def test_color_gamma_on_rgb_only():
    spec = MeshSpec(
        vertices=[((0.0, 0.0, 0.0), (255, 0, 51, 51), (0.0, 0.0, 1.0))]
    )
    arrays = to_render_arrays(decode_bytes(spec.to_bytes()))
    r, g, b, a = arrays.colors[0].tolist()
    assert r == 1.0
    assert g == 0.0
    assert np.isclose(b, (51 / 255.0) ** GAMMA, atol=1e-6)
    assert np.isclose(a, 51 / 255.0, atol=1e-6)


def test_empty_mesh_converts():
    arrays = to_render_arrays(decode_bytes(MeshSpec().to_bytes()))
    assert arrays.positions.shape == (0, 3)
    assert arrays.indices.shape == (0,)
    assert arrays.triangle_count == 0
