"""Separable Gaussian blur and edge-preserving bilateral blur.

Both sample with clamped borders. The bilateral filter splits the frame into
row bands processed on a thread pool; each band reads only the immutable
padded source, so bands need no locking.
"""

import logging
import math
import os
from concurrent.futures import ThreadPoolExecutor

import numpy as np
from scipy.ndimage import correlate1d

from engine.errors import InputError

logger = logging.getLogger(__name__)

# Frames shorter than this are filtered on the calling thread
PARALLEL_MIN_ROWS = 128


def gaussian_kernel(radius: float) -> np.ndarray:
    """1D Gaussian weights, size ``2*ceil(radius)+1``, sigma ``radius/3``, sum 1."""
    if not math.isfinite(radius) or radius <= 0:
        raise InputError(f"blur radius must be finite and > 0, got {radius!r}")
    size = 2 * math.ceil(radius) + 1
    sigma = radius / 3.0
    center = size // 2
    offsets = np.arange(size, dtype=np.float64) - center
    weights = np.exp(-(offsets * offsets) / (2.0 * sigma * sigma))
    return weights / weights.sum()


def gaussian_blur(frame: np.ndarray, radius: float) -> np.ndarray:
    """Blur all four channels, horizontal pass then vertical pass.

    A radius of 0 returns an unchanged copy.
    """
    if radius == 0:
        return frame.copy()
    kernel = gaussian_kernel(radius)

    data = frame.astype(np.float32)
    data = correlate1d(data, kernel, axis=1, mode="nearest")
    data = correlate1d(data, kernel, axis=0, mode="nearest")
    return np.clip(np.rint(data), 0, 255).astype(np.uint8)


def _worker_count() -> int:
    env = os.environ.get("LANDSCAPE_WORKERS", "")
    if env.isdigit() and int(env) > 0:
        return int(env)
    return os.cpu_count() or 1


def _bilateral_band(
    padded: np.ndarray,
    valid: np.ndarray,
    offsets: list[tuple[int, int, float]],
    pad: int,
    y0: int,
    y1: int,
    width: int,
    color_threshold: float,
) -> np.ndarray:
    rows = y1 - y0
    center = padded[y0 + pad : y1 + pad, pad : pad + width]
    acc = np.zeros((rows, width, 4), dtype=np.float64)
    weight_sum = np.zeros((rows, width), dtype=np.float64)
    color_denom = 2.0 * color_threshold * color_threshold

    for dy, dx, spatial in offsets:
        sy = y0 + pad + dy
        sx = pad + dx
        neighbour = padded[sy : sy + rows, sx : sx + width]
        inside = valid[sy : sy + rows, sx : sx + width]

        color_diff = np.abs(neighbour[:, :, :3] - center[:, :, :3]).sum(axis=2)
        weight = spatial * np.exp(-(color_diff * color_diff) / color_denom) * inside

        acc += neighbour * weight[:, :, np.newaxis]
        weight_sum += weight

    # The centre sample always contributes weight 1, so weight_sum > 0
    return acc / weight_sum[:, :, np.newaxis]


def bilateral_blur(
    frame: np.ndarray,
    radius: float,
    color_threshold: float,
    *,
    workers: int | None = None,
) -> np.ndarray:
    """Edge-preserving blur.

    Each neighbour within ``radius`` (Euclidean) is weighted by
    ``exp(-d²/(2·radius²)) · exp(-Δ²/(2·threshold²))`` where ``Δ`` is the
    summed absolute RGB difference to the centre pixel. Neighbours outside
    the frame are skipped, not clamped. All four channels are averaged.
    """
    if not math.isfinite(radius) or radius <= 0:
        raise InputError(f"bilateral radius must be finite and > 0, got {radius!r}")
    if not math.isfinite(color_threshold) or color_threshold <= 0:
        raise InputError(f"color threshold must be finite and > 0, got {color_threshold!r}")

    h, w = frame.shape[:2]
    pad = int(math.floor(radius))
    radius_sq = radius * radius

    offsets = [
        (dy, dx, math.exp(-(dy * dy + dx * dx) / (2.0 * radius_sq)))
        for dy in range(-pad, pad + 1)
        for dx in range(-pad, pad + 1)
        if dy * dy + dx * dx <= radius_sq
    ]

    padded = np.pad(frame.astype(np.float64), ((pad, pad), (pad, pad), (0, 0)), mode="edge")
    valid = np.pad(np.ones((h, w), dtype=np.float64), pad, mode="constant")

    n_workers = max(1, workers if workers is not None else _worker_count())
    if h < PARALLEL_MIN_ROWS or n_workers == 1:
        result = _bilateral_band(padded, valid, offsets, pad, 0, h, w, color_threshold)
    else:
        bounds = np.linspace(0, h, num=min(n_workers, h) + 1, dtype=int)
        with ThreadPoolExecutor(max_workers=n_workers) as pool:
            futures = [
                pool.submit(
                    _bilateral_band,
                    padded,
                    valid,
                    offsets,
                    pad,
                    int(y0),
                    int(y1),
                    w,
                    color_threshold,
                )
                for y0, y1 in zip(bounds[:-1], bounds[1:])
                if y1 > y0
            ]
            result = np.concatenate([f.result() for f in futures], axis=0)
        logger.debug("Bilateral blur r=%.1f over %d bands", radius, len(futures))

    return np.clip(np.rint(result), 0, 255).astype(np.uint8)
