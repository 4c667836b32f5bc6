"""Effect registry — central lookup for all registered effects."""

import re
from typing import Callable

import numpy as np

EffectFn = Callable[[np.ndarray, float, np.random.Generator], np.ndarray]

# Category of the effects eligible for random selection
CATALOG_CATEGORY = "creative"

# Legacy spellings accepted by get()
ALIASES = {
    "crystalize": "crystallize",
}

_REGISTRY: dict[str, dict] = {}


def normalize_id(effect_id: str) -> str:
    """``galaxySwirl`` -> ``galaxy_swirl``; aliases resolved."""
    snake = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", effect_id.strip()).lower()
    return ALIASES.get(snake, snake)


def register(effect_id: str, fn: EffectFn, name: str, description: str, category: str):
    """Register an effect."""
    _REGISTRY[effect_id] = {
        "fn": fn,
        "name": name,
        "description": description,
        "category": category,
    }


def get(effect_id: str) -> dict | None:
    """Get effect info by ID (snake_case, camelCase or alias)."""
    if not isinstance(effect_id, str):
        return None
    return _REGISTRY.get(effect_id) or _REGISTRY.get(normalize_id(effect_id))


def resolve_id(effect_id: str) -> str | None:
    """Canonical registered id for ``effect_id``, or None."""
    if not isinstance(effect_id, str):
        return None
    if effect_id in _REGISTRY:
        return effect_id
    canonical = normalize_id(effect_id)
    return canonical if canonical in _REGISTRY else None


def list_all() -> list[dict]:
    """List all registered effects with metadata."""
    return [
        {
            "id": eid,
            "name": info["name"],
            "description": info["description"],
            "category": info["category"],
        }
        for eid, info in _REGISTRY.items()
    ]


def catalog_ids() -> list[str]:
    """Ids eligible for random selection, in registration order."""
    return [eid for eid, info in _REGISTRY.items() if info["category"] == CATALOG_CATEGORY]


def _auto_register():
    """Import and register all built-in effects."""
    from effects.fx import (
        aurora,
        crystallize,
        dream_wave,
        galaxy_swirl,
        kaleidoscope,
        neon,
        pixelate,
        prism,
        vortex,
        watercolor,
    )
    from effects.util import hue_rotate

    for mod in [
        kaleidoscope,
        vortex,
        crystallize,
        neon,
        watercolor,
        pixelate,
        galaxy_swirl,
        dream_wave,
        prism,
        aurora,
        hue_rotate,
    ]:
        register(
            mod.EFFECT_ID,
            mod.apply,
            mod.EFFECT_NAME,
            mod.EFFECT_DESCRIPTION,
            mod.EFFECT_CATEGORY,
        )


_auto_register()
