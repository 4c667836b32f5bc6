"""Tests for landscape terrain presets."""

import numpy as np
import pytest

from engine.errors import InputError
from scene.presets import LANDSCAPE_TYPES, TERRAIN_GRID, terrain_options_for
from terrain.synth import generate_terrain

pytestmark = pytest.mark.smoke


@pytest.mark.parametrize(
    "kind,warp,ridged",
    [
        ("peaceful", False, False),
        ("mysterious", True, False),
        ("dramatic", False, True),
        ("cosmic", True, False),
        ("Galactic", False, True),
    ],
)
def test_flags(kind, warp, ridged):
    options = terrain_options_for(kind, seed=12.0)
    assert options.warp is warp
    assert options.ridged is ridged
    assert options.scale == 0.02
    assert options.octaves == 6
    assert options.seed == 12.0


def test_missing_seed_drawn_from_rng():
    a = terrain_options_for("cheerful", rng=np.random.default_rng(5))
    b = terrain_options_for("cheerful", rng=np.random.default_rng(5))
    assert a == b
    assert 0.0 <= a.seed < 100.0


def test_unknown_type():
    with pytest.raises(InputError):
        terrain_options_for("volcanic", seed=1.0)


@pytest.mark.parametrize("kind", LANDSCAPE_TYPES)
def test_presets_generate_on_scene_grid(kind):
    cols, rows = TERRAIN_GRID
    heights = generate_terrain(cols, rows, terrain_options_for(kind, seed=3.0))
    assert heights.shape == (rows, cols)
    assert heights.min() >= 0.0
    assert heights.max() <= 1.0
