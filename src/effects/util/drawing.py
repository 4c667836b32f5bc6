"""Anti-aliased shape drawing onto transparent RGBA layers via OpenCV.

Coordinates are floats; they are passed to OpenCV in 1/16 px fixed point so
small particles keep their sub-pixel placement.
"""

import cv2
import numpy as np

_SHIFT = 4
_SCALE = 1 << _SHIFT

# Concentric rings used to approximate a radial glow
GLOW_RINGS = 6


def transparent_layer(shape: tuple[int, ...]) -> np.ndarray:
    h, w = shape[:2]
    return np.zeros((h, w, 4), dtype=np.uint8)


def _rgba(color, alpha: float) -> tuple[int, int, int, int]:
    r, g, b = color
    return (int(r), int(g), int(b), int(round(max(0.0, min(1.0, alpha)) * 255)))


def draw_disc(layer: np.ndarray, x: float, y: float, radius: float, color, alpha: float = 1.0):
    """Fill a circle in place; the disc replaces what is underneath."""
    center = (int(round(x * _SCALE)), int(round(y * _SCALE)))
    cv2.circle(
        layer,
        center,
        max(1, int(round(radius * _SCALE))),
        _rgba(color, alpha),
        thickness=-1,
        lineType=cv2.LINE_AA,
        shift=_SHIFT,
    )


def draw_glow(layer: np.ndarray, x: float, y: float, radius: float, color, alpha: float):
    """Radial falloff from ``alpha`` at the centre to 0 at ``radius``."""
    for ring in range(GLOW_RINGS):
        t = ring / GLOW_RINGS
        draw_disc(layer, x, y, radius * (1.0 - t), color, alpha * (t + 1.0 / GLOW_RINGS))


def polygon_mask(shape: tuple[int, ...], points: np.ndarray) -> np.ndarray:
    """(H, W) float32 coverage mask of a filled polygon, 1.0 inside."""
    h, w = shape[:2]
    mask = np.zeros((h, w), dtype=np.uint8)
    pts = np.round(np.asarray(points, dtype=np.float64) * _SCALE).astype(np.int32)
    cv2.fillPoly(mask, [pts.reshape(-1, 1, 2)], 255, lineType=cv2.LINE_AA, shift=_SHIFT)
    return mask.astype(np.float32) / 255.0
