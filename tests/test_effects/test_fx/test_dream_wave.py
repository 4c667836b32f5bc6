"""Tests for fx.dream_wave."""

import math

import numpy as np
import pytest

from effects.fx.dream_wave import apply, wave_shift

pytestmark = pytest.mark.smoke


def _frame(h=20, w=24):
    rng = np.random.default_rng(42)
    return rng.integers(0, 256, (h, w, 4), dtype=np.uint8)


@pytest.mark.parametrize("horizontal", [True, False])
def test_zero_amplitude_is_identity(horizontal):
    frame = _frame()
    np.testing.assert_array_equal(wave_shift(frame, horizontal, 0.0, 50.0, 1.3), frame)


def test_constant_horizontal_shift():
    frame = _frame()
    # A huge period holds sin() at 1 for every row
    out = wave_shift(frame, True, 3.0, 1e12, math.pi / 2)
    np.testing.assert_array_equal(out[:, :-3], frame[:, 3:])
    np.testing.assert_array_equal(out[:, -3:], 0)


def test_constant_vertical_shift():
    frame = _frame()
    out = wave_shift(frame, False, 2.0, 1e12, -math.pi / 2)
    np.testing.assert_array_equal(out[2:], frame[:-2])
    np.testing.assert_array_equal(out[:2], 0)


def test_zero_intensity_only_tints():
    frame = np.full((16, 16, 4), [90, 90, 90, 255], dtype=np.uint8)
    out = apply(frame, 0.0, np.random.default_rng(0))
    np.testing.assert_array_equal(out[:, :, 3], 255)
    # A colour blend keeps the gray lightness but moves hue and saturation
    assert not np.array_equal(out, frame)
