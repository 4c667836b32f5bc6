"""Tests for engine.pipeline — persistent application, random selection, auto-disable."""

import logging

import numpy as np
import pytest

from effects import registry
from engine import pipeline
from engine.errors import InputError, PartialFailure, ResourceUnavailable
from engine.pipeline import (
    DISABLE_THRESHOLD,
    INTENSITY_RANGE,
    EffectResult,
    apply_effect,
    apply_random_effect,
    describe,
    get_effect_health,
    get_effect_stats,
    reset_effect_health,
    select_effect,
)

pytestmark = pytest.mark.smoke


def _frame(h=32, w=40):
    rng = np.random.default_rng(42)
    frame = rng.integers(0, 256, (h, w, 4), dtype=np.uint8)
    frame[:, :, 3] = 255
    return frame


def _crash(frame, intensity, rng):
    raise RuntimeError("boom")


@pytest.fixture
def broken_neon(monkeypatch):
    info = dict(registry.get("neon"), fn=_crash)
    monkeypatch.setitem(registry._REGISTRY, "neon", info)


def test_apply_effect_returns_new_frame():
    frame = _frame()
    before = frame.copy()
    out = apply_effect(frame, "vortex", 0.6, np.random.default_rng(1))
    assert out.shape == frame.shape
    assert out.dtype == np.uint8
    assert out is not frame
    np.testing.assert_array_equal(frame, before)


def test_apply_effect_is_deterministic_with_seed():
    frame = _frame()
    a = apply_effect(frame, "crystallize", 0.4, np.random.default_rng(5))
    b = apply_effect(frame, "crystallize", 0.4, np.random.default_rng(5))
    np.testing.assert_array_equal(a, b)


def test_apply_effect_accepts_legacy_ids():
    frame = _frame()
    a = apply_effect(frame, "galaxySwirl", 0.5, np.random.default_rng(2))
    b = apply_effect(frame, "galaxy_swirl", 0.5, np.random.default_rng(2))
    np.testing.assert_array_equal(a, b)
    apply_effect(frame, "crystalize", 0.5, np.random.default_rng(2))


def test_unknown_effect_raises():
    with pytest.raises(InputError):
        apply_effect(_frame(), "melt", 0.5)


@pytest.mark.parametrize("intensity", [-0.1, 1.01, float("nan"), float("inf"), True, "0.5", None])
def test_bad_intensity_raises(intensity):
    with pytest.raises(InputError):
        apply_effect(_frame(), "neon", intensity)


def test_intensity_bounds_accepted():
    apply_effect(_frame(), "prism", 0, np.random.default_rng(0))
    apply_effect(_frame(), "prism", 1, np.random.default_rng(0))
    apply_effect(_frame(), "prism", np.float32(0.5), np.random.default_rng(0))


@pytest.mark.parametrize(
    "frame",
    [
        np.zeros((10, 10, 3), dtype=np.uint8),
        np.zeros((10, 10, 4), dtype=np.float32),
        np.zeros((0, 10, 4), dtype=np.uint8),
        [[0, 0, 0, 0]],
    ],
)
def test_bad_frame_raises(frame):
    with pytest.raises(InputError):
        apply_effect(frame, "neon", 0.5)


def test_failure_raises_partial_failure_and_leaves_input(broken_neon):
    frame = _frame()
    before = frame.copy()
    with pytest.raises(PartialFailure) as exc_info:
        apply_effect(frame, "neon", 0.5)
    assert exc_info.value.effect_id == "neon"
    assert isinstance(exc_info.value.cause, RuntimeError)
    np.testing.assert_array_equal(frame, before)
    assert get_effect_health()["failure_counts"]["neon"] == 1


def test_auto_disable_after_threshold(broken_neon, caplog):
    frame = _frame(8, 8)
    with caplog.at_level(logging.WARNING, logger="engine.pipeline"):
        for _ in range(DISABLE_THRESHOLD):
            with pytest.raises(PartialFailure):
                apply_effect(frame, "neon", 0.5)
    assert "neon" in get_effect_health()["disabled_effects"]
    assert "auto-disabled" in caplog.text


def test_success_resets_failure_count(monkeypatch):
    calls = []

    def flaky(frame, intensity, rng):
        calls.append(1)
        if len(calls) < 3:
            raise RuntimeError("warming up")
        return frame.copy()

    monkeypatch.setitem(registry._REGISTRY, "neon", dict(registry.get("neon"), fn=flaky))
    for _ in range(2):
        with pytest.raises(PartialFailure):
            apply_effect(_frame(8, 8), "neon", 0.5)
    apply_effect(_frame(8, 8), "neon", 0.5)
    assert get_effect_health()["failure_counts"]["neon"] == 0
    assert get_effect_health()["disabled_effects"] == []


def test_reset_single_effect():
    pipeline._record_failure("vortex")
    pipeline._record_failure("neon")
    reset_effect_health("vortex")
    counts = get_effect_health()["failure_counts"]
    assert "vortex" not in counts
    assert counts["neon"] == 1


def test_select_effect_range_and_catalog():
    rng = np.random.default_rng(11)
    low, high = INTENSITY_RANGE
    seen = set()
    for _ in range(200):
        request = select_effect(rng)
        assert request.type in registry.catalog_ids()
        assert low <= request.intensity <= high
        seen.add(request.type)
    assert len(seen) == 10


def test_select_effect_skips_disabled():
    for eid in registry.catalog_ids()[1:]:
        for _ in range(DISABLE_THRESHOLD):
            pipeline._record_failure(eid)
    rng = np.random.default_rng(0)
    assert {select_effect(rng).type for _ in range(20)} == {"kaleidoscope"}


def test_select_effect_all_disabled():
    for eid in registry.catalog_ids():
        for _ in range(DISABLE_THRESHOLD):
            pipeline._record_failure(eid)
    with pytest.raises(ResourceUnavailable):
        select_effect(np.random.default_rng(0))


def test_apply_random_effect():
    frame = _frame()
    out, result = apply_random_effect(frame, np.random.default_rng(3))
    assert isinstance(result, EffectResult)
    assert out.shape == frame.shape
    assert result.type in registry.catalog_ids()
    assert result.name == registry.get(result.type)["name"]
    assert INTENSITY_RANGE[0] <= result.intensity <= INTENSITY_RANGE[1]


def test_apply_random_effect_seeded_repeatable():
    frame = _frame()
    out_a, res_a = apply_random_effect(frame, np.random.default_rng(8))
    out_b, res_b = apply_random_effect(frame, np.random.default_rng(8))
    assert res_a == res_b
    np.testing.assert_array_equal(out_a, out_b)


def test_describe_and_to_dict():
    result = describe("dreamWave", 0.5)
    assert result.to_dict() == {
        "type": "dream_wave",
        "name": "Dream Wave",
        "description": "Flowing currents of consciousness ripple across the dreamscape",
        "intensity": 0.5,
    }
    with pytest.raises(InputError):
        describe("melt", 0.5)


def test_timing_recorded():
    apply_effect(_frame(8, 8), "pixelate", 0.3)
    stats = get_effect_stats()["pixelate"]
    assert stats["samples"] == 1
    assert stats["p95"] is None
    assert stats["max"] >= 0


def test_slow_effect_warns(monkeypatch, caplog):
    monkeypatch.setattr(pipeline, "EFFECT_WARN_MS", -1)
    with caplog.at_level(logging.WARNING, logger="engine.pipeline"):
        apply_effect(_frame(8, 8), "pixelate", 0.3)
    assert "warn threshold" in caplog.text
