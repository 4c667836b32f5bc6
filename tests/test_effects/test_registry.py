"""Tests for the effect registry."""

import numpy as np
import pytest

from effects import registry

pytestmark = pytest.mark.smoke


def test_all_builtins_registered():
    ids = [e["id"] for e in registry.list_all()]
    assert len(ids) == 11
    assert "util.hue_rotate" in ids
    assert len(set(ids)) == len(ids)


def test_list_all_metadata():
    for info in registry.list_all():
        assert set(info) == {"id", "name", "description", "category"}
        assert info["name"]
        assert info["description"]


def test_catalog_excludes_utilities():
    catalog = registry.catalog_ids()
    assert len(catalog) == 10
    assert "util.hue_rotate" not in catalog


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("galaxySwirl", "galaxy_swirl"),
        ("dreamWave", "dream_wave"),
        ("galaxy_swirl", "galaxy_swirl"),
        ("crystalize", "crystallize"),
        ("  neon ", "neon"),
    ],
)
def test_normalize_id(raw, expected):
    assert registry.normalize_id(raw) == expected


def test_get_accepts_camel_case_and_alias():
    assert registry.get("galaxySwirl") is registry.get("galaxy_swirl")
    assert registry.get("crystalize") is registry.get("crystallize")


def test_get_unknown_returns_none():
    assert registry.get("melt") is None
    assert registry.get(None) is None
    assert registry.get(42) is None


def test_resolve_id():
    assert registry.resolve_id("dreamWave") == "dream_wave"
    assert registry.resolve_id("util.hue_rotate") == "util.hue_rotate"
    assert registry.resolve_id("nope") is None


def test_register_custom(monkeypatch):
    monkeypatch.setattr(registry, "_REGISTRY", dict(registry._REGISTRY))

    def passthrough(frame, intensity, rng):
        return frame.copy()

    registry.register("test.passthrough", passthrough, "Pass", "Does nothing", "test")
    info = registry.get("test.passthrough")
    assert info["fn"] is passthrough
    assert "test.passthrough" not in registry.catalog_ids()
    frame = np.zeros((2, 2, 4), dtype=np.uint8)
    np.testing.assert_array_equal(info["fn"](frame, 0.5, None), frame)
