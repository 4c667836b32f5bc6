"""Tests for heightmap generation and surface normals."""

import math

import numpy as np
import pytest

from engine.errors import InputError
from terrain import TerrainOptions, calculate_terrain_normals, generate_terrain

pytestmark = pytest.mark.smoke


def test_shape_is_rows_by_columns():
    terrain = generate_terrain(7, 5)
    assert terrain.shape == (5, 7)


@pytest.mark.parametrize(
    "options",
    [{}, {"ridged": True}, {"warp": True}, {"seed": 42.5, "scale": 0.3, "octaves": 3}],
)
def test_values_in_unit_interval(options):
    terrain = generate_terrain(32, 24, options)
    assert terrain.min() >= 0.0
    assert terrain.max() <= 1.0


def test_golden_heightmap_values():
    options = {"seed": 0, "scale": 0.1, "octaves": 4}
    terrain = generate_terrain(10, 10, options)
    np.testing.assert_array_equal(terrain, generate_terrain(10, 10, options))
    # Every octave past the first lands on lattice points (noise 0) for these
    # cells; the first octave gives noise3(.5, 0, 0) = 0 and -0.25 at y = .5
    assert terrain[0, 0] == 0.5
    assert terrain[0, 5] == pytest.approx(0.5, abs=1e-12)
    assert terrain[5, 0] == pytest.approx(13 / 30, abs=1e-12)
    assert terrain[5, 5] == pytest.approx(13 / 30, abs=1e-12)


def test_origin_with_seed_zero_is_mid_height():
    # Noise vanishes on lattice points, so (0, 0, 0) maps to 0.5
    assert generate_terrain(1, 1)[0, 0] == 0.5


def test_elevation_scales_heights():
    base = generate_terrain(12, 8, {"seed": 3.0})
    tall = generate_terrain(12, 8, {"seed": 3.0, "elevation": 2.0})
    np.testing.assert_array_equal(tall, base * 2.0)


def test_ridged_takes_precedence_over_warp():
    both = generate_terrain(16, 16, {"ridged": True, "warp": True, "seed": 1.0})
    ridged = generate_terrain(16, 16, {"ridged": True, "seed": 1.0})
    np.testing.assert_array_equal(both, ridged)


def test_different_seeds_differ():
    a = generate_terrain(16, 16, {"seed": 1.0, "scale": 0.1})
    b = generate_terrain(16, 16, {"seed": 2.0, "scale": 0.1})
    assert not np.array_equal(a, b)


def test_accepts_options_dataclass():
    opts = TerrainOptions(scale=0.05, octaves=2)
    np.testing.assert_array_equal(
        generate_terrain(8, 4, opts), generate_terrain(8, 4, {"scale": 0.05, "octaves": 2})
    )


@pytest.mark.parametrize("width,height", [(0, 5), (5, 0), (-1, 3), (2.5, 3), (True, 3)])
def test_rejects_bad_dimensions(width, height):
    with pytest.raises(InputError):
        generate_terrain(width, height)


@pytest.mark.parametrize(
    "options",
    [
        {"scale": 0},
        {"scale": math.nan},
        {"octaves": 0},
        {"octaves": 1.5},
        {"persistence": 0},
        {"persistence": 1.5},
        {"lacunarity": 0.5},
        {"elevation": -1},
        {"seed": math.inf},
        {"roughness": 2},
    ],
)
def test_rejects_bad_options(options):
    with pytest.raises(InputError):
        generate_terrain(4, 4, options)


def test_input_error_is_value_error():
    with pytest.raises(ValueError):
        TerrainOptions(octaves=0)


def test_numpy_integer_octaves_are_normalized():
    options = TerrainOptions(octaves=np.int64(4))
    assert options.octaves == 4
    assert type(options.octaves) is int
    np.testing.assert_array_equal(
        generate_terrain(6, 6, {"octaves": np.int32(3)}),
        generate_terrain(6, 6, {"octaves": 3}),
    )


def test_normals_are_unit_length_everywhere():
    terrain = generate_terrain(20, 15, {"scale": 0.2, "seed": 4.0, "elevation": 5.0})
    normals = calculate_terrain_normals(terrain)
    assert normals.shape == (15, 20, 3)
    np.testing.assert_allclose(np.linalg.norm(normals, axis=-1), 1.0, atol=1e-6)


def test_flat_terrain_points_straight_up():
    normals = calculate_terrain_normals(np.full((4, 6), 0.3))
    np.testing.assert_array_equal(normals, np.broadcast_to([0.0, 0.0, 1.0], (4, 6, 3)))


def test_slope_interior_and_clamped_border():
    ramp = np.tile(np.arange(5, dtype=np.float64), (3, 1))  # height == x
    normals = calculate_terrain_normals(ramp)

    # Interior: dZdX = 1
    np.testing.assert_allclose(normals[1, 2], np.array([-1.0, 0.0, 1.0]) / math.sqrt(2))
    # Left border clamps to itself: dZdX = (1 - 0) / 2
    np.testing.assert_allclose(normals[1, 0], np.array([-0.5, 0.0, 1.0]) / math.sqrt(1.25))


@pytest.mark.parametrize(
    "heightmap",
    [np.zeros(5), np.zeros((0, 3)), np.array([[0.0, math.nan]])],
)
def test_normals_reject_bad_heightmaps(heightmap):
    with pytest.raises(InputError):
        calculate_terrain_normals(heightmap)
