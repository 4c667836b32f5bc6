"""Seeded determinism for reproducible effects and terrain."""

import numpy as np


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Create an RNG. ``None`` draws fresh OS entropy (production default)."""
    return np.random.default_rng(seed)


def ensure_rng(rng: np.random.Generator | None) -> np.random.Generator:
    """Return *rng* unchanged, or a fresh system-seeded generator."""
    if rng is None:
        return make_rng()
    return rng
