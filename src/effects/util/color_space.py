"""RGB <-> HSL conversion on float arrays.

Channels are floats in [0, 1] with RGB on the last axis. Hue is a fraction
of a full turn in [0, 1), so rotating by ``amount`` is ``(h + amount) % 1``.
"""

import numpy as np


def rgb_to_hsl(rgb: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Convert RGB [0,1] float to (hue, saturation, lightness), each in [0, 1]."""
    rgb = np.asarray(rgb, dtype=np.float64)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    cmax = np.maximum(np.maximum(r, g), b)
    cmin = np.minimum(np.minimum(r, g), b)
    delta = cmax - cmin
    light = (cmax + cmin) / 2.0

    # Saturation (achromatic when delta == 0)
    denom = 1.0 - np.abs(2.0 * light - 1.0)
    sat = np.divide(delta, denom, out=np.zeros_like(delta), where=(delta > 0) & (denom > 0))

    hue = np.zeros_like(delta)
    safe = np.where(delta > 0, delta, 1.0)
    mask_r = (cmax == r) & (delta > 0)
    mask_g = (cmax == g) & (delta > 0) & ~mask_r
    mask_b = (delta > 0) & ~mask_r & ~mask_g

    hue = np.where(mask_r, ((g - b) / safe) % 6.0, hue)
    hue = np.where(mask_g, (b - r) / safe + 2.0, hue)
    hue = np.where(mask_b, (r - g) / safe + 4.0, hue)
    hue = (hue / 6.0) % 1.0

    return hue, np.clip(sat, 0.0, 1.0), light


def hsl_to_rgb(hue: np.ndarray, sat: np.ndarray, light: np.ndarray) -> np.ndarray:
    """Convert HSL (all in [0, 1]) back to an RGB [0,1] float array."""
    hue = np.asarray(hue, dtype=np.float64) % 1.0
    sat = np.asarray(sat, dtype=np.float64)
    light = np.asarray(light, dtype=np.float64)

    a = sat * np.minimum(light, 1.0 - light)
    channels = []
    for n in (0.0, 8.0, 4.0):
        k = (n + hue * 12.0) % 12.0
        channels.append(light - a * np.clip(np.minimum(k - 3.0, 9.0 - k), -1.0, 1.0))

    return np.clip(np.stack(channels, axis=-1), 0.0, 1.0)


def rotate_hue(hue: np.ndarray, amount: float) -> np.ndarray:
    """Modular hue rotation; ``amount`` is a fraction of a full turn."""
    return (np.asarray(hue, dtype=np.float64) + amount) % 1.0


def luminance(rgb: np.ndarray) -> np.ndarray:
    """Rec. 601 luma of an RGB array, in the same units as the input."""
    rgb = np.asarray(rgb, dtype=np.float32)
    return 0.299 * rgb[..., 0] + 0.587 * rgb[..., 1] + 0.114 * rgb[..., 2]
