"""Tests for fx.watercolor."""

import numpy as np
import pytest

from effects.fx.watercolor import apply

pytestmark = pytest.mark.smoke


def _frame(h=40, w=40):
    rng = np.random.default_rng(42)
    frame = rng.integers(0, 256, (h, w, 4), dtype=np.uint8)
    frame[:, :, 3] = 255
    return frame


def test_changes_the_frame():
    frame = _frame()
    out = apply(frame, 0.6, np.random.default_rng(1))
    assert not np.array_equal(out, frame)


def test_opaque_frame_stays_opaque():
    out = apply(_frame(), 1.0, np.random.default_rng(1))
    np.testing.assert_array_equal(out[:, :, 3], 255)


def test_different_seeds_differ():
    frame = _frame()
    a = apply(frame, 0.8, np.random.default_rng(1))
    b = apply(frame, 0.8, np.random.default_rng(2))
    assert not np.array_equal(a, b)
