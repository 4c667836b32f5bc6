"""Prism — red/blue channel split with a rainbow beam and lens flare.

Green is never touched: the beam and flare are screened into the red and
blue channels only, so the output green channel is the input's exactly.
"""

import math

import numpy as np

from effects.util.drawing import polygon_mask
from engine.compositor import linear_gradient

EFFECT_ID = "prism"
EFFECT_NAME = "Prismatic Light"
EFFECT_DESCRIPTION = "Light splits into its component colors, revealing hidden spectrums"
EFFECT_CATEGORY = "creative"

BEAM_ALPHA = 0.2
RAINBOW = (
    (0.0, (255, 0, 0)),
    (0.17, (255, 165, 0)),
    (0.33, (255, 255, 0)),
    (0.5, (0, 255, 0)),
    (0.67, (0, 0, 255)),
    (0.83, (75, 0, 130)),
    (1.0, (238, 130, 238)),
)
# (offset along radius, alpha)
FLARE_STOPS = ((0.0, 0.8), (0.3, 0.4), (1.0, 0.0))

SCREEN_CHANNELS = (0, 2)


def split_channels(frame: np.ndarray, separation: int) -> np.ndarray:
    """Red sampled from ``x + separation``, blue from ``x - separation``.

    Samples that fall outside the frame contribute 0.
    """
    w = frame.shape[1]
    output = frame.copy()
    output[:, :, 0] = 0
    output[:, :, 2] = 0
    if separation < w:
        output[:, : w - separation, 0] = frame[:, separation:, 0]
        output[:, separation:, 2] = frame[:, : w - separation, 2]
    return output


def _screen_into(output: np.ndarray, color: np.ndarray, alpha: np.ndarray):
    """Screen ``color`` (H, W, 3) at per-pixel ``alpha`` into red and blue."""
    for ch in SCREEN_CHANNELS:
        base = output[:, :, ch].astype(np.float32) / 255.0
        layer = color[:, :, ch].astype(np.float32) / 255.0
        screened = 1.0 - (1.0 - base) * (1.0 - layer)
        mixed = base + alpha * (screened - base)
        output[:, :, ch] = np.clip(np.rint(mixed * 255.0), 0, 255).astype(np.uint8)


def apply(frame: np.ndarray, intensity: float, rng: np.random.Generator) -> np.ndarray:
    h, w = frame.shape[:2]
    separation = int(math.floor(5 + intensity * 15))
    output = split_channels(frame, separation)

    angle = rng.random() * 2.0 * math.pi
    cx, cy = w / 2.0, h / 2.0
    half = min(w, h) * 0.8 / 2.0
    ux, uy = math.cos(angle), math.sin(angle)
    start = (cx - ux * half, cy - uy * half)
    end = (cx + ux * half, cy + uy * half)

    beam_width = 20.0 + intensity * 60.0
    px, py = -uy * beam_width / 2.0, ux * beam_width / 2.0
    quad = np.array(
        [
            (start[0] + px, start[1] + py),
            (end[0] + px, end[1] + py),
            (end[0] - px, end[1] - py),
            (start[0] - px, start[1] - py),
        ]
    )
    stops = [(offset, (*rgb, 1.0)) for offset, rgb in RAINBOW]
    gradient = linear_gradient(frame.shape, start, end, stops)
    _screen_into(output, gradient[:, :, :3], polygon_mask(frame.shape, quad) * BEAM_ALPHA)

    if intensity > 0.5:
        flare_radius = beam_width * 2.0
        ys, xs = np.mgrid[0:h, 0:w].astype(np.float32)
        t = np.hypot(xs + 0.5 - end[0], ys + 0.5 - end[1]) / flare_radius
        offsets, alphas = zip(*FLARE_STOPS)
        flare_alpha = np.interp(t, offsets, alphas).astype(np.float32)
        white = np.full((h, w, 3), 255, dtype=np.uint8)
        _screen_into(output, white, flare_alpha)

    return output
