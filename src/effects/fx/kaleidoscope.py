"""Kaleidoscope — one wedge of the frame repeated around the centre."""

import math

import numpy as np

from effects.util.bloom import bloom
from effects.fx.vortex import SNAP
from engine.compositor import radial_gradient, radial_mask_erase

EFFECT_ID = "kaleidoscope"
EFFECT_NAME = "Kaleidoscopic Vision"
EFFECT_DESCRIPTION = (
    "A mesmerizing reflection of geometric patterns that unfold in perfect symmetry"
)
EFFECT_CATEGORY = "creative"

RADIUS_FACTOR = 0.9
EDGE_ERASE_ALPHA = 0.8


def segment_count(intensity: float) -> int:
    return 3 + int(math.floor(intensity * 10))


def apply(frame: np.ndarray, intensity: float, rng: np.random.Generator) -> np.ndarray:
    """Copy the wedge straddling angle 0 into every segment, bloom, fade the rim.

    A flat frame has no pattern to mirror and is returned unchanged.
    """
    flat = frame.reshape(-1, 4)
    if (flat == flat[0]).all():
        return frame.copy()

    h, w = frame.shape[:2]
    cx, cy = w / 2.0, h / 2.0
    radius = min(cx, cy) * RADIUS_FACTOR
    segments = segment_count(intensity)
    seg_angle = 2.0 * math.pi / segments

    ys, xs = np.mgrid[0:h, 0:w].astype(np.float64)
    dx = xs - cx
    dy = ys - cy
    distance = np.hypot(dx, dy)
    theta = np.arctan2(dy, dx)

    # Rotate each output pixel back into the source wedge (-seg/2, seg/2]
    k = np.round(theta / seg_angle)
    local = theta - k * seg_angle
    src_x = np.floor(cx + np.cos(local) * distance + SNAP).astype(np.intp)
    src_y = np.floor(cy + np.sin(local) * distance + SNAP).astype(np.intp)
    inside = (
        (distance < radius)
        & (src_x >= 0)
        & (src_x < w)
        & (src_y >= 0)
        & (src_y < h)
    )

    output = np.zeros_like(frame)
    output[inside] = frame[src_y[inside], src_x[inside]]

    output = bloom(output, intensity * 0.3)
    mask = radial_gradient(frame.shape, (cx, cy), radius * 0.8, radius * 1.2, 0.0, EDGE_ERASE_ALPHA)
    return radial_mask_erase(output, mask)
