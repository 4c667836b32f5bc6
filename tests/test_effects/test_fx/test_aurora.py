"""Tests for fx.aurora."""

import numpy as np
import pytest

from effects.fx.aurora import band_color

pytestmark = pytest.mark.smoke


def test_low_intensity_bands_are_green():
    rng = np.random.default_rng(0)
    for _ in range(50):
        r, g, b = band_color(0.1, rng)
        assert r == 0
        assert 150 <= g < 250
        assert 50 <= b < 100


def test_mid_intensity_bands_have_no_red():
    rng = np.random.default_rng(0)
    colors = [band_color(0.45, rng) for _ in range(100)]
    assert all(r == 0 for r, _, _ in colors)
    # Both green and blue bands occur
    assert any(b >= 150 for _, _, b in colors)
    assert any(b < 100 for _, _, b in colors)


def test_high_intensity_adds_purple_and_pink():
    rng = np.random.default_rng(0)
    colors = [band_color(0.9, rng) for _ in range(200)]
    assert any(r > 0 for r, _, _ in colors)
    assert all(0 <= c <= 255 for color in colors for c in color)
