"""Terrain presets per landscape type."""

import numpy as np

from engine.determinism import ensure_rng
from engine.errors import InputError
from terrain.synth import TerrainOptions

LANDSCAPE_TYPES = (
    "peaceful",
    "mysterious",
    "dramatic",
    "cheerful",
    "melancholic",
    "cosmic",
    "galactic",
)

# Grid the scene renderer samples terrain on (columns, rows)
TERRAIN_GRID = (100, 50)

_WARPED = {"mysterious", "cosmic"}
_RIDGED = {"dramatic", "galactic"}


def terrain_options_for(
    landscape_type: str,
    seed: float | None = None,
    rng: np.random.Generator | None = None,
) -> TerrainOptions:
    """TerrainOptions for a landscape type; a missing seed is drawn from [0, 100)."""
    kind = str(landscape_type).lower()
    if kind not in LANDSCAPE_TYPES:
        raise InputError(f"unknown landscape type {landscape_type!r}")
    if seed is None:
        seed = float(ensure_rng(rng).random() * 100.0)

    return TerrainOptions(
        scale=0.02,
        octaves=6,
        persistence=0.5,
        lacunarity=2.0,
        elevation=1.0,
        seed=seed,
        warp=kind in _WARPED,
        ridged=kind in _RIDGED,
    )
