"""Tests for the intensity calibration report."""

import numpy as np
import pytest

from effects._calibration import LEVELS, _test_frame, calibrate_all, flat_effects, print_report
from effects.registry import list_all

pytestmark = pytest.mark.smoke


@pytest.fixture(scope="module")
def results():
    return calibrate_all(_test_frame(48, 36))


def test_one_row_per_effect_and_level(results):
    assert len(results) == len(list_all()) * len(LEVELS)
    for r in results:
        assert set(r) == {"effect_id", "category", "intensity", "mean_pixel_diff"}
        assert r["mean_pixel_diff"] >= 0


def test_every_catalog_effect_changes_the_frame(results):
    flat = flat_effects([r for r in results if r["category"] == "creative"])
    assert flat == []


def test_flat_effects_uses_peak():
    rows = [
        {"effect_id": "a", "mean_pixel_diff": 0.1},
        {"effect_id": "a", "mean_pixel_diff": 3.0},
        {"effect_id": "b", "mean_pixel_diff": 0.2},
    ]
    assert flat_effects(rows) == ["b"]


def test_test_frame_is_opaque():
    frame = _test_frame(10, 8)
    assert frame.shape == (8, 10, 4)
    assert frame.dtype == np.uint8
    assert (frame[:, :, 3] == 255).all()


def test_print_report(results, capsys):
    print_report(results)
    out = capsys.readouterr().out
    assert "kaleidoscope" in out
    assert "All effects produce visible change." in out or "WARNING" in out
