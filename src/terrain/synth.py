"""Terrain synthesizer — heightmaps and surface normals from 3D noise."""

import dataclasses
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass

import numpy as np

from engine.errors import InputError
from terrain.noise_field import domain_warped_noise, fbm3, ridged_multifractal

logger = logging.getLogger(__name__)

# Fixed displacement strength for domain-warped terrain
TERRAIN_WARP_STRENGTH = 2.5

# Depth coordinate is derived from the seed so different seeds slice different planes
SEED_DEPTH_FACTOR = 0.1


@dataclass(frozen=True)
class TerrainOptions:
    """Noise parameters for :func:`generate_terrain`.

    ``ridged`` takes precedence over ``warp``; with neither set the terrain is
    plain fBm.
    """

    scale: float = 0.01
    octaves: int = 6
    persistence: float = 0.5
    lacunarity: float = 2.0
    elevation: float = 1.0
    seed: float = 0.0
    warp: bool = False
    ridged: bool = False

    def __post_init__(self):
        for name in ("scale", "persistence", "lacunarity", "elevation", "seed"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InputError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise InputError(f"{name} must be finite, got {value!r}")
        if self.scale <= 0:
            raise InputError(f"scale must be > 0, got {self.scale}")
        if isinstance(self.octaves, bool) or not isinstance(self.octaves, (int, np.integer)):
            raise InputError(f"octaves must be an integer, got {self.octaves!r}")
        object.__setattr__(self, "octaves", int(self.octaves))
        if self.octaves < 1:
            raise InputError(f"octaves must be >= 1, got {self.octaves}")
        if not 0 < self.persistence <= 1:
            raise InputError(f"persistence must be in (0, 1], got {self.persistence}")
        if self.lacunarity < 1:
            raise InputError(f"lacunarity must be >= 1, got {self.lacunarity}")
        if self.elevation < 0:
            raise InputError(f"elevation must be >= 0, got {self.elevation}")

    @classmethod
    def from_mapping(cls, values: Mapping) -> "TerrainOptions":
        """Build options from a partial mapping; missing keys take defaults."""
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise InputError(f"unknown terrain options: {sorted(unknown)}")
        return cls(**dict(values))


def _coerce_options(options) -> TerrainOptions:
    if options is None:
        return TerrainOptions()
    if isinstance(options, TerrainOptions):
        return options
    if isinstance(options, Mapping):
        return TerrainOptions.from_mapping(options)
    raise InputError(f"options must be TerrainOptions or a mapping, got {type(options).__name__}")


def _check_dimension(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InputError(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise InputError(f"{name} must be > 0, got {value}")
    return int(value)


def generate_terrain(width: int, height: int, options=None) -> np.ndarray:
    """Generate a ``(height, width)`` heightmap in ``[0, elevation]``.

    Cell ``(x, y)`` samples noise at ``(x*scale + seed, y*scale + seed,
    seed*0.1)``. The raw value is mapped from ``[-1, 1]`` to ``[0, 1]`` via
    ``(v + 1) * 0.5`` (clipped, since noise may overshoot slightly) and then
    multiplied by ``elevation``.

    Args:
        width:   Columns, > 0.
        height:  Rows, > 0.
        options: TerrainOptions, a partial mapping of its fields, or None.

    Raises:
        InputError: On non-positive dimensions or invalid options.
    """
    width = _check_dimension("width", width)
    height = _check_dimension("height", height)
    opts = _coerce_options(options)

    ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
    nx = xs * opts.scale + opts.seed
    ny = ys * opts.scale + opts.seed
    nz = opts.seed * SEED_DEPTH_FACTOR

    if opts.ridged:
        values = ridged_multifractal(
            nx, ny, nz, opts.octaves, opts.persistence, opts.lacunarity
        )
    elif opts.warp:
        values = domain_warped_noise(nx, ny, nz, TERRAIN_WARP_STRENGTH)
    else:
        values = fbm3(nx, ny, nz, opts.octaves, opts.persistence, opts.lacunarity)

    heightmap = np.clip((values + 1.0) * 0.5, 0.0, 1.0) * opts.elevation
    logger.debug(
        "Generated %dx%d terrain (ridged=%s, warp=%s, seed=%s)",
        width,
        height,
        opts.ridged,
        opts.warp,
        opts.seed,
    )
    return heightmap


def calculate_terrain_normals(heightmap: np.ndarray) -> np.ndarray:
    """Per-cell unit normals, shape ``(height, width, 3)`` as ``(x, y, z)``.

    Central differences with neighbours clamped to the cell itself at the
    border (no wrap-around): ``dZdX = (right - left) / 2``,
    ``dZdY = (bottom - top) / 2``, normal = normalize(-dZdX, -dZdY, 1).
    """
    terrain = np.asarray(heightmap, dtype=np.float64)
    if terrain.ndim != 2 or terrain.size == 0:
        raise InputError(f"heightmap must be a non-empty 2D grid, got shape {terrain.shape}")
    if not np.all(np.isfinite(terrain)):
        raise InputError("heightmap contains non-finite values")

    padded = np.pad(terrain, 1, mode="edge")
    left = padded[1:-1, :-2]
    right = padded[1:-1, 2:]
    top = padded[:-2, 1:-1]
    bottom = padded[2:, 1:-1]

    dz_dx = (right - left) / 2.0
    dz_dy = (bottom - top) / 2.0

    normals = np.stack([-dz_dx, -dz_dy, np.ones_like(terrain)], axis=-1)
    length = np.linalg.norm(normals, axis=-1, keepdims=True)
    up = np.array([0.0, 0.0, 1.0])
    safe = np.where(length > 0, length, 1.0)
    return np.where(length > 0, normals / safe, up)
