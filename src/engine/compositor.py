"""Compositor — blend modes, gradients and masks for RGBA frames.

Layers are combined with the non-premultiplied W3C compositing model: the
blend function mixes the colours where both layers are present, then the
result is composited source-over using the layer alpha times ``opacity``.
For an opaque base and an opaque layer at full opacity the output is exactly
``B(base, layer)``.

CRITICAL: All blend math uses float32 to avoid uint8 overflow/wrap.
"""

import logging

import numpy as np

from effects.util.color_space import hsl_to_rgb, rgb_to_hsl
from engine.errors import InputError

logger = logging.getLogger(__name__)

Color = tuple[int, int, int]


def _blend_normal(base: np.ndarray, layer: np.ndarray) -> np.ndarray:
    return layer


def _blend_add(base: np.ndarray, layer: np.ndarray) -> np.ndarray:
    return np.minimum(base + layer, 1.0)


def _blend_multiply(base: np.ndarray, layer: np.ndarray) -> np.ndarray:
    return base * layer


def _blend_screen(base: np.ndarray, layer: np.ndarray) -> np.ndarray:
    return 1.0 - (1.0 - base) * (1.0 - layer)


def _blend_overlay(base: np.ndarray, layer: np.ndarray) -> np.ndarray:
    # Conditional: multiply where base < 0.5, screen where base >= 0.5
    low = 2.0 * base * layer
    high = 1.0 - 2.0 * (1.0 - base) * (1.0 - layer)
    return np.where(base < 0.5, low, high)


def _blend_color(base: np.ndarray, layer: np.ndarray) -> np.ndarray:
    """Hue and saturation of the layer, lightness of the base."""
    hue, sat, _ = rgb_to_hsl(layer)
    _, _, light = rgb_to_hsl(base)
    return hsl_to_rgb(hue, sat, light).astype(np.float32)


BLEND_MODES = {
    "normal": _blend_normal,
    "add": _blend_add,
    "multiply": _blend_multiply,
    "screen": _blend_screen,
    "overlay": _blend_overlay,
    "color": _blend_color,
}


def blend(
    base: np.ndarray,
    layer: np.ndarray,
    mode: str = "normal",
    opacity: float = 1.0,
) -> np.ndarray:
    """Composite ``layer`` over ``base`` with a blend mode.

    Args:
        base: RGBA uint8 (H, W, 4).
        layer: RGBA uint8 with the same shape as ``base``.
        mode: One of :data:`BLEND_MODES`.
        opacity: Global layer opacity in [0, 1], multiplied into layer alpha.

    Returns:
        New RGBA uint8 frame.
    """
    fn = BLEND_MODES.get(mode)
    if fn is None:
        raise InputError(f"unknown blend mode: {mode!r}")
    if base.shape != layer.shape:
        raise InputError(f"layer shape {layer.shape} does not match base {base.shape}")
    opacity = max(0.0, min(1.0, float(opacity)))

    cb = base[:, :, :3].astype(np.float32) / 255.0
    cs = layer[:, :, :3].astype(np.float32) / 255.0
    ab = base[:, :, 3:4].astype(np.float32) / 255.0
    as_ = layer[:, :, 3:4].astype(np.float32) / 255.0 * opacity

    mixed = (1.0 - ab) * cs + ab * fn(cb, cs)
    ao = as_ + ab * (1.0 - as_)
    numer = as_ * mixed + ab * cb * (1.0 - as_)
    co = np.divide(numer, ao, out=np.zeros_like(numer), where=ao > 0)

    output = np.empty_like(base)
    output[:, :, :3] = np.clip(np.rint(co * 255.0), 0, 255).astype(np.uint8)
    output[:, :, 3] = np.clip(np.rint(ao[:, :, 0] * 255.0), 0, 255).astype(np.uint8)
    return output


def solid_layer(shape: tuple[int, ...], color: Color, alpha=1.0) -> np.ndarray:
    """RGBA layer of one colour; ``alpha`` is a scalar or an (H, W) mask in [0, 1]."""
    h, w = shape[:2]
    layer = np.empty((h, w, 4), dtype=np.uint8)
    layer[:, :, :3] = np.asarray(color, dtype=np.uint8)
    alpha = np.broadcast_to(np.asarray(alpha, dtype=np.float32), (h, w))
    layer[:, :, 3] = np.clip(np.rint(alpha * 255.0), 0, 255).astype(np.uint8)
    return layer


def radial_gradient(
    shape: tuple[int, ...],
    center: tuple[float, float],
    inner: float,
    outer: float,
    start: float = 0.0,
    end: float = 1.0,
) -> np.ndarray:
    """(H, W) float32 ramp from ``start`` at ``inner`` radius to ``end`` at ``outer``.

    Values are held constant inside ``inner`` and beyond ``outer``.
    """
    h, w = shape[:2]
    cx, cy = center
    ys, xs = np.mgrid[0:h, 0:w].astype(np.float32)
    dist = np.hypot(xs + 0.5 - cx, ys + 0.5 - cy)
    span = max(outer - inner, 1e-6)
    t = np.clip((dist - inner) / span, 0.0, 1.0)
    return (start + (end - start) * t).astype(np.float32)


def linear_gradient(
    shape: tuple[int, ...],
    p0: tuple[float, float],
    p1: tuple[float, float],
    stops: list[tuple[float, tuple[int, int, int, float]]],
) -> np.ndarray:
    """RGBA layer with colour stops along the segment ``p0 -> p1``.

    Each stop is ``(offset, (r, g, b, alpha))`` with offset and alpha in
    [0, 1]. Pixels project onto the segment and clamp to the end stops.
    """
    h, w = shape[:2]
    x0, y0 = p0
    x1, y1 = p1
    dx, dy = x1 - x0, y1 - y0
    length_sq = dx * dx + dy * dy
    ys, xs = np.mgrid[0:h, 0:w].astype(np.float32)
    if length_sq <= 0:
        t = np.zeros((h, w), dtype=np.float32)
    else:
        t = np.clip(((xs + 0.5 - x0) * dx + (ys + 0.5 - y0) * dy) / length_sq, 0.0, 1.0)

    offsets = np.array([s[0] for s in stops], dtype=np.float32)
    colors = np.array([s[1] for s in stops], dtype=np.float32)
    colors[:, 3] *= 255.0

    layer = np.empty((h, w, 4), dtype=np.uint8)
    for ch in range(4):
        values = np.interp(t, offsets, colors[:, ch])
        layer[:, :, ch] = np.clip(np.rint(values), 0, 255).astype(np.uint8)
    return layer


def radial_mask_erase(frame: np.ndarray, mask: np.ndarray) -> np.ndarray:
    """Destination-out erase: alpha becomes ``alpha * (1 - mask)``."""
    output = frame.copy()
    keep = 1.0 - np.clip(mask.astype(np.float32), 0.0, 1.0)
    output[:, :, 3] = np.clip(np.rint(frame[:, :, 3] * keep), 0, 255).astype(np.uint8)
    return output


def vignette(
    frame: np.ndarray,
    inner: float,
    outer: float,
    max_alpha: float,
    *,
    color: Color = (0, 0, 0),
    mode: str = "normal",
    center: tuple[float, float] | None = None,
    reverse: bool = False,
) -> np.ndarray:
    """Blend a radial colour ramp over ``frame``.

    The ramp goes from transparent at ``inner`` to ``max_alpha`` at ``outer``
    (or the other way round with ``reverse``, for centre glows).
    """
    h, w = frame.shape[:2]
    if center is None:
        center = (w / 2.0, h / 2.0)
    start, end = (max_alpha, 0.0) if reverse else (0.0, max_alpha)
    mask = radial_gradient(frame.shape, center, inner, outer, start, end)
    return blend(frame, solid_layer(frame.shape, color, mask), mode)
