"""Bloom — glow from the bright areas of a frame, screened back on top."""

import numpy as np

from effects.util.blur import gaussian_blur
from effects.util.color_space import luminance
from engine.compositor import blend


def bloom(frame: np.ndarray, intensity: float) -> np.ndarray:
    """Isolate pixels with luma >= ``1 - intensity/2``, blur them, screen over.

    Sub-threshold pixels are cleared (alpha included) before the blur, whose
    radius grows from 5 to 20 px with ``intensity``.
    """
    intensity = float(intensity)
    threshold = 1.0 - intensity * 0.5
    bright = luminance(frame[:, :, :3]) / 255.0 >= threshold

    if not bright.any():
        return frame.copy()

    glow = np.where(bright[:, :, np.newaxis], frame, 0).astype(np.uint8)
    glow = gaussian_blur(glow, 5.0 + intensity * 15.0)
    return blend(frame, glow, "screen")
