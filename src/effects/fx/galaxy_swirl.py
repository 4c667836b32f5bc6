"""Galaxy Swirl — swirled frame under a starfield with spiral dust arms."""

import math

import numpy as np

from effects.fx.vortex import radial_distance, swirl
from effects.util.drawing import draw_disc, draw_glow, transparent_layer
from engine.compositor import blend, solid_layer, vignette

EFFECT_ID = "galaxy_swirl"
EFFECT_NAME = "Galactic Spiral"
EFFECT_DESCRIPTION = "Celestial bodies dance in spiraling arms of star-filled cosmic dust"
EFFECT_CATEGORY = "creative"

# (rgb, alpha)
STAR_COLORS = (
    ((255, 255, 255), 0.9),
    ((173, 216, 230), 0.8),
    ((255, 223, 186), 0.8),
    ((200, 200, 255), 0.7),
)
# Cycled per arm
DUST_COLORS = ((173, 216, 230), (255, 223, 186), (230, 230, 255), (255, 200, 255))

BACKGROUND_DIM = 0.7
FOREGROUND_OPACITY = 0.8
VIGNETTE_ALPHA = 0.7


def _draw_stars(layer: np.ndarray, intensity: float, rng: np.random.Generator):
    h, w = layer.shape[:2]
    count = 200 + int(math.floor(intensity * 300))
    xs = rng.random(count) * w
    ys = rng.random(count) * h
    sizes = rng.random(count) * 2.0 + 0.5
    picks = rng.integers(len(STAR_COLORS), size=count)
    glows = rng.random(count) > 0.7
    glow_scale = 2.0 + rng.random(count) * 3.0

    for i in range(count):
        color, alpha = STAR_COLORS[picks[i]]
        draw_disc(layer, xs[i], ys[i], sizes[i], color, alpha)
        if glows[i]:
            draw_glow(layer, xs[i], ys[i], sizes[i] * glow_scale[i], (255, 255, 255), 0.8)


def _draw_arms(layer: np.ndarray, intensity: float, max_radius: float, rng: np.random.Generator):
    h, w = layer.shape[:2]
    cx, cy = w / 2.0, h / 2.0
    arms = 2 + int(math.floor(intensity * 3))
    particles = 300 + int(math.floor(intensity * 500))
    arm_width = 0.3 + intensity * 0.5

    for arm in range(arms):
        arm_angle = arm / arms * 2.0 * math.pi
        distance = rng.random(particles) * max_radius * 0.9
        spiral_offset = distance / 50.0 * (4.0 + intensity * 8.0)
        angle = arm_angle + spiral_offset + (rng.random(particles) - 0.5) * arm_width
        xs = cx + np.cos(angle) * distance
        ys = cy + np.sin(angle) * distance
        opacity = 0.1 + rng.random(particles) * 0.3
        sizes = rng.random(particles) * 2.0 + 0.5
        color = DUST_COLORS[arm % len(DUST_COLORS)]

        visible = (xs >= 0) & (xs < w) & (ys >= 0) & (ys < h)
        for i in np.flatnonzero(visible):
            draw_disc(layer, xs[i], ys[i], sizes[i], color, opacity[i])


def apply(frame: np.ndarray, intensity: float, rng: np.random.Generator) -> np.ndarray:
    distance, max_radius = radial_distance(frame.shape)

    # Stronger twist toward the rim, unlike the plain vortex
    twist = (distance / max_radius) * (intensity * 15.0) * (intensity * 1.5)
    background = swirl(frame, twist)
    background[:, :, :3] = np.rint(background[:, :, :3] * BACKGROUND_DIM).astype(np.uint8)

    particles = transparent_layer(frame.shape)
    _draw_stars(particles, intensity, rng)
    _draw_arms(particles, intensity, max_radius, rng)
    foreground = blend(solid_layer(frame.shape, (0, 0, 0)), particles)

    output = blend(background, foreground, "screen", FOREGROUND_OPACITY)
    return vignette(output, max_radius * 0.5, max_radius, VIGNETTE_ALPHA)
