"""Aurora — translucent sinusoidal ribbons over a dimmed frame."""

import math

import numpy as np

from effects.util.drawing import draw_disc, draw_glow, polygon_mask, transparent_layer
from engine.compositor import blend, solid_layer, vignette

EFFECT_ID = "aurora"
EFFECT_NAME = "Aurora Borealis"
EFFECT_DESCRIPTION = "Shimmering veils of luminous color dance across the northern sky"
EFFECT_CATEGORY = "creative"

BASE_DIM = 0.6
BAND_ALPHA = 0.2
# Horizontal spacing between ribbon crest vertices
CREST_STEP = 5


def _green(rng):
    return (0, 150 + int(rng.integers(100)), 50 + int(rng.integers(50)))


def _blue(rng):
    return (0, 100 + int(rng.integers(50)), 150 + int(rng.integers(100)))


def _purple(rng):
    return (80 + int(rng.integers(60)), 0, 150 + int(rng.integers(100)))


def _pink(rng):
    return (150 + int(rng.integers(100)), 50 + int(rng.integers(30)), 150 + int(rng.integers(100)))


def band_color(intensity: float, rng: np.random.Generator) -> tuple[int, int, int]:
    """Greens at low intensity, blues from 0.3, purples and pinks from 0.6."""
    roll = rng.random()
    if intensity < 0.3:
        return _green(rng)
    if intensity < 0.6:
        return _green(rng) if roll > 0.5 else _blue(rng)
    if roll > 0.7:
        return _green(rng)
    if roll > 0.4:
        return _blue(rng)
    if roll > 0.2:
        return _purple(rng)
    return _pink(rng)


def _ribbon(w: int, top: float, bottom: float, frequency: float, amplitude: float, phase: float):
    xs = np.arange(0, w, CREST_STEP, dtype=np.float64)
    crest = top + np.sin(xs / w * 2.0 * math.pi * frequency + phase) * amplitude
    points = [(0.0, bottom)]
    points.extend(zip(xs, crest))
    points.extend([(float(w), bottom), (0.0, bottom)])
    return np.array(points)


def _draw_stars(frame: np.ndarray, intensity: float, rng: np.random.Generator) -> np.ndarray:
    h, w = frame.shape[:2]
    layer = transparent_layer(frame.shape)
    for _ in range(int(math.floor(intensity * 200))):
        x = rng.random() * w
        y = rng.random() * h * 0.6
        size = 0.5 + rng.random() * 1.5
        opacity = 0.3 + (1.0 - y / h) * 0.6
        draw_disc(layer, x, y, size, (255, 255, 255), opacity)
        if rng.random() > 0.8:
            draw_glow(layer, x, y, size * 3.0, (255, 255, 255), opacity)
    return blend(frame, layer)


def apply(frame: np.ndarray, intensity: float, rng: np.random.Generator) -> np.ndarray:
    h, w = frame.shape[:2]
    output = frame.copy()
    output[:, :, :3] = np.rint(frame[:, :, :3] * BASE_DIM).astype(np.uint8)

    bands = 3 + int(math.floor(intensity * 7))
    passes = 3 + int(math.floor(intensity * 5))
    amplitude = 20.0 + intensity * 50.0

    for band in range(bands):
        y_position = h * (0.1 + band * 0.1)
        height = h * (0.1 + rng.random() * 0.3)
        frequency = 1.0 + rng.random() * 3.0
        color = band_color(intensity, rng)

        for _ in range(passes):
            phase = rng.random() * 2.0 * math.pi
            top = y_position + (rng.random() - 0.5) * 10.0
            ribbon = _ribbon(w, top, top + height, frequency, amplitude, phase)
            mask = polygon_mask(frame.shape, ribbon) * BAND_ALPHA
            output = blend(output, solid_layer(frame.shape, color, mask), "screen")

    if intensity > 0.5:
        output = _draw_stars(output, intensity, rng)

    return vignette(output, h * 0.3, h * 0.9, 0.5)
