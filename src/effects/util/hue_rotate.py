"""Hue Rotate effect — modular rotation of hue in HSL space."""

import numpy as np

from effects.util.color_space import hsl_to_rgb, rgb_to_hsl, rotate_hue

EFFECT_ID = "util.hue_rotate"
EFFECT_NAME = "Hue Rotate"
EFFECT_DESCRIPTION = "Rotates every colour around the hue wheel"
EFFECT_CATEGORY = "util"


def apply(frame: np.ndarray, intensity: float, rng: np.random.Generator) -> np.ndarray:
    """Rotate hue by ``intensity`` of a full turn; saturation, lightness and alpha kept."""
    rgb = frame[:, :, :3].astype(np.float64) / 255.0
    hue, sat, light = rgb_to_hsl(rgb)
    rotated = hsl_to_rgb(rotate_hue(hue, intensity), sat, light)

    output = frame.copy()
    output[:, :, :3] = np.clip(np.rint(rotated * 255.0), 0, 255).astype(np.uint8)
    return output
