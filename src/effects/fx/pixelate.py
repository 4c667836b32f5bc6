"""Pixelate — flat block averages with optional grid and RGB split."""

import math

import numpy as np

EFFECT_ID = "pixelate"
EFFECT_NAME = "Pixel Dream"
EFFECT_DESCRIPTION = (
    "Reality breaks into discrete blocks of color revealing the digital beneath"
)
EFFECT_CATEGORY = "creative"

GRID_ALPHA = 0.1


def block_size(intensity: float) -> int:
    return max(2, 3 + int(math.floor(intensity * 15)))


def block_average(frame: np.ndarray, size: int) -> np.ndarray:
    """Replace each size x size block (edge blocks clipped) by its rounded mean."""
    h, w = frame.shape[:2]
    output = np.empty_like(frame)
    for y in range(0, h, size):
        for x in range(0, w, size):
            block = frame[y : y + size, x : x + size]
            mean = block.reshape(-1, 4).mean(axis=0)
            output[y : y + size, x : x + size] = np.rint(mean).astype(np.uint8)
    return output


def apply(frame: np.ndarray, intensity: float, rng: np.random.Generator) -> np.ndarray:
    h, w = frame.shape[:2]
    size = block_size(intensity)
    output = block_average(frame, size)

    if intensity > 0.5:
        # Darken interior block boundaries by a 10% black line
        rgb = output[:, :, :3].astype(np.float32)
        rgb[size:h:size, :] *= 1.0 - GRID_ALPHA
        rgb[:, size:w:size] *= 1.0 - GRID_ALPHA
        output[:, :, :3] = np.rint(rgb).astype(np.uint8)

        shift = int(math.floor(intensity * size * 0.3))
        if shift > 0:
            cols = np.arange(w)
            shifted = output.copy()
            shifted[:, :, 0] = output[:, np.minimum(w - 1, cols + shift), 0]
            shifted[:, :, 2] = output[:, np.maximum(0, cols - shift), 2]
            output = shifted

    return output
