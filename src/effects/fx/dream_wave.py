"""Dream Wave — stacked sinusoidal row/column shifts, softened and tinted."""

import math

import numpy as np

from effects.util.bloom import bloom
from effects.util.blur import gaussian_blur
from engine.compositor import blend, linear_gradient

EFFECT_ID = "dream_wave"
EFFECT_NAME = "Dream Wave"
EFFECT_DESCRIPTION = "Flowing currents of consciousness ripple across the dreamscape"
EFFECT_CATEGORY = "creative"

TINT_START = (100, 150, 255)
TINT_END = (255, 150, 250)
TINT_ALPHA = 0.3


def wave_shift(frame: np.ndarray, horizontal: bool, amplitude: float, period: float, phase: float):
    """Shift each row (or column) by ``sin(pos/period·2π + phase)·amplitude``.

    Shifts are rounded to whole pixels; samples that land outside the frame
    become transparent.
    """
    h, w = frame.shape[:2]
    output = np.zeros_like(frame)
    if horizontal:
        offsets = np.rint(np.sin(np.arange(h) / period * 2.0 * math.pi + phase) * amplitude)
        src = np.arange(w)[np.newaxis, :] + offsets.astype(np.intp)[:, np.newaxis]
        rows = np.broadcast_to(np.arange(h)[:, np.newaxis], src.shape)
        valid = (src >= 0) & (src < w)
        output[valid] = frame[rows[valid], src[valid]]
    else:
        offsets = np.rint(np.sin(np.arange(w) / period * 2.0 * math.pi + phase) * amplitude)
        src = np.arange(h)[:, np.newaxis] + offsets.astype(np.intp)[np.newaxis, :]
        cols = np.broadcast_to(np.arange(w)[np.newaxis, :], src.shape)
        valid = (src >= 0) & (src < h)
        output[valid] = frame[src[valid], cols[valid]]
    return output


def apply(frame: np.ndarray, intensity: float, rng: np.random.Generator) -> np.ndarray:
    h, w = frame.shape[:2]
    passes = 5 + int(math.floor(intensity * 10))
    base_amplitude = intensity * 20.0
    base_period = 100.0 + rng.random() * 100.0

    output = frame
    for _ in range(passes):
        horizontal = rng.random() > 0.5
        amplitude = base_amplitude * (0.5 + rng.random() * 0.5)
        period = base_period * (0.8 + rng.random() * 0.4)
        phase = rng.random() * 2.0 * math.pi
        output = wave_shift(output, horizontal, amplitude, period, phase)

    if intensity > 0:
        output = gaussian_blur(output, intensity * 6.0)
    output = bloom(output, intensity * 0.4)

    stops = [(0.0, (*TINT_START, TINT_ALPHA)), (1.0, (*TINT_END, TINT_ALPHA))]
    return blend(output, linear_gradient(frame.shape, (0.0, 0.0), (w, h), stops), "color")
