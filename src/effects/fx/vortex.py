"""Vortex — spiral warp around the centre, strongest near the middle."""

import math

import numpy as np

from effects.util.bloom import bloom
from engine.compositor import vignette

EFFECT_ID = "vortex"
EFFECT_NAME = "Cosmic Vortex"
EFFECT_DESCRIPTION = "A spiraling cosmic whirlpool pulling elements toward its center"
EFFECT_CATEGORY = "creative"

GLOW_COLOR = (180, 160, 255)
GLOW_ALPHA = 0.25
# Keeps exact grid positions from flooring to the previous pixel
SNAP = 1e-9


def swirl(frame: np.ndarray, twist: np.ndarray) -> np.ndarray:
    """Resample ``frame`` with each pixel's polar angle offset by ``twist``.

    ``twist`` is an (H, W) array of radians. Sources are floored to the
    pixel grid; sources outside the frame become transparent.
    """
    h, w = frame.shape[:2]
    cx, cy = w / 2.0, h / 2.0
    ys, xs = np.mgrid[0:h, 0:w].astype(np.float64)
    dx = xs - cx
    dy = ys - cy
    distance = np.hypot(dx, dy)
    angle = np.arctan2(dy, dx) + twist

    # Nudge so exact grid positions do not floor to the previous pixel
    src_x = np.floor(cx + np.cos(angle) * distance + SNAP).astype(np.intp)
    src_y = np.floor(cy + np.sin(angle) * distance + SNAP).astype(np.intp)
    inside = (src_x >= 0) & (src_x < w) & (src_y >= 0) & (src_y < h)

    output = np.zeros_like(frame)
    output[inside] = frame[src_y[inside], src_x[inside]]
    return output


def radial_distance(shape: tuple[int, ...]) -> tuple[np.ndarray, float]:
    """Distance of every pixel from the centre, and the half-diagonal."""
    h, w = shape[:2]
    ys, xs = np.mgrid[0:h, 0:w].astype(np.float64)
    return np.hypot(xs - w / 2.0, ys - h / 2.0), math.hypot(w, h) / 2.0


def apply(frame: np.ndarray, intensity: float, rng: np.random.Generator) -> np.ndarray:
    distance, max_radius = radial_distance(frame.shape)
    spiral = 4.0 + intensity * 8.0
    twist = (1.0 - distance / max_radius) * spiral * intensity

    output = swirl(frame, twist)
    output = bloom(output, intensity * 0.2)
    return vignette(
        output,
        0.0,
        max_radius * 0.7,
        GLOW_ALPHA,
        color=GLOW_COLOR,
        mode="screen",
        reverse=True,
    )
