"""Square-kernel convolution with clamped borders."""

import numpy as np
from scipy.ndimage import correlate

from engine.errors import InputError

# 8-neighbour Laplacian used for edge detection
LAPLACIAN_KERNEL = np.array(
    [
        [-1.0, -1.0, -1.0],
        [-1.0, 8.0, -1.0],
        [-1.0, -1.0, -1.0],
    ],
    dtype=np.float32,
)


def _check_kernel(kernel) -> np.ndarray:
    kernel = np.asarray(kernel, dtype=np.float32)
    if kernel.ndim == 1:
        side = int(round(np.sqrt(kernel.size)))
        if side * side != kernel.size:
            raise InputError(f"flat kernel of length {kernel.size} is not square")
        kernel = kernel.reshape(side, side)
    if kernel.ndim != 2 or kernel.shape[0] != kernel.shape[1]:
        raise InputError(f"kernel must be N x N, got shape {kernel.shape}")
    if kernel.shape[0] % 2 == 0:
        raise InputError(f"kernel size must be odd, got {kernel.shape[0]}")
    if not np.all(np.isfinite(kernel)):
        raise InputError("kernel contains non-finite weights")
    return kernel


def convolve(frame: np.ndarray, kernel, *, include_alpha: bool = False) -> np.ndarray:
    """Weighted neighbourhood sum per channel, clamped to [0, 255].

    Out-of-range samples clamp to the nearest edge pixel (never wrap). The
    kernel is applied as written (cross-correlation, no flip). Alpha passes
    through unless ``include_alpha`` is set.
    """
    kernel = _check_kernel(kernel)
    channels = 4 if include_alpha else 3

    output = frame.copy()
    for ch in range(channels):
        filtered = correlate(frame[:, :, ch].astype(np.float32), kernel, mode="nearest")
        output[:, :, ch] = np.clip(np.rint(filtered), 0, 255).astype(np.uint8)
    return output
