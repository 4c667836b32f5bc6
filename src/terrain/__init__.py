"""Procedural terrain: 3D gradient noise, fractal sums, heightmaps and normals."""

from terrain.noise_field import (
    NOISE_BOUND,
    domain_warped_noise,
    fbm3,
    noise3,
    ridged_multifractal,
)
from terrain.synth import TerrainOptions, calculate_terrain_normals, generate_terrain

__all__ = [
    "NOISE_BOUND",
    "TerrainOptions",
    "calculate_terrain_normals",
    "domain_warped_noise",
    "fbm3",
    "generate_terrain",
    "noise3",
    "ridged_multifractal",
]
