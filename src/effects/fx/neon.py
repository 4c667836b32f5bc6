"""Neon — glowing white edges over a darkened frame, with a coloured tint."""

import numpy as np

from effects.util.bloom import bloom
from effects.util.convolution import LAPLACIAN_KERNEL, convolve
from engine.compositor import blend, solid_layer

EFFECT_ID = "neon"
EFFECT_NAME = "Neon Glow"
EFFECT_DESCRIPTION = "Vibrant glowing edges illuminate the darkness with electric energy"
EFFECT_CATEGORY = "creative"

# Pink, cyan, yellow
TINTS = ((255, 50, 200), (50, 200, 255), (255, 200, 50))
TINT_ALPHA = 0.2
BASE_DIM = 0.3


def apply(frame: np.ndarray, intensity: float, rng: np.random.Generator) -> np.ndarray:
    """Laplacian edges above ``30 - 20*intensity`` drawn white, then bloom and tint."""
    edges = convolve(frame, LAPLACIAN_KERNEL)
    strength = edges[:, :, :3].max(axis=2).astype(np.float32)
    threshold = 30.0 - intensity * 20.0
    edge_alpha = np.where(strength > threshold, np.minimum(1.0, strength * 2.0 / 255.0), 0.0)

    output = frame.copy()
    output[:, :, :3] = np.rint(frame[:, :, :3] * BASE_DIM).astype(np.uint8)
    output = blend(output, solid_layer(frame.shape, (255, 255, 255), edge_alpha))

    output = bloom(output, intensity * 0.5)

    tint = TINTS[int(rng.integers(len(TINTS)))]
    return blend(output, solid_layer(frame.shape, tint, TINT_ALPHA), "screen")
