"""Watercolor — layered edge-preserving blurs, paper tint and pigment jitter."""

import math

import numpy as np

from effects.util.blur import bilateral_blur
from engine.compositor import blend, linear_gradient, solid_layer

EFFECT_ID = "watercolor"
EFFECT_NAME = "Watercolor Wash"
EFFECT_DESCRIPTION = (
    "Gentle flowing pigments blend at the edges creating ephemeral textures"
)
EFFECT_CATEGORY = "creative"

COLOR_THRESHOLD = 25.0
PAPER_TINT = (240, 235, 225)
PAPER_ALPHA = 0.3
BLEED_START = (30, 144, 255)
BLEED_END = (240, 128, 128)


def apply(frame: np.ndarray, intensity: float, rng: np.random.Generator) -> np.ndarray:
    h, w = frame.shape[:2]
    passes = 3 + int(math.floor(intensity * 4))

    output = frame.copy()
    for _ in range(passes):
        radius = 1.0 + rng.random() * intensity * 8.0
        opacity = 0.2 + rng.random() * 0.3
        blurred = bilateral_blur(output, radius, COLOR_THRESHOLD)
        output = blend(output, blurred, "normal", opacity)

    output = blend(output, solid_layer(frame.shape, PAPER_TINT, PAPER_ALPHA), "multiply")

    bleed = intensity * 0.3
    stops = [
        (0.0, (*BLEED_START, bleed)),
        (0.5, (255, 255, 255, 0.0)),
        (1.0, (*BLEED_END, bleed)),
    ]
    output = blend(output, linear_gradient(frame.shape, (0.0, 0.0), (w, h), stops), "screen")

    # One variation per pixel, shared by the three colour channels
    jitter = (rng.random((h, w)) * 2.0 - 1.0) * (intensity * 20.0)
    rgb = output[:, :, :3].astype(np.float64) + jitter[:, :, np.newaxis]
    output[:, :, :3] = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)
    return output
