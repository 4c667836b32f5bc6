"""Improved Perlin noise in 3D and its fractal compositions.

All functions accept Python floats or numpy arrays (broadcast together) and
return a float for scalar input, an ndarray otherwise. There is no mutable
state: the permutation table is built once at import and frozen.

Bounds: ``noise3`` stays within ``[-NOISE_BOUND, NOISE_BOUND]``. Improved
Perlin gradients can overshoot 1.0 by a few percent at rare points, so
callers must not assume anything tighter than ``[-1, 1]`` plus that margin.
``ridged_multifractal`` is always in ``[0, 1]``.
"""

import math

import numpy as np

from engine.errors import InputError

NOISE_BOUND = 1.1

# Ken Perlin's reference permutation of 0..255
PERMUTATION: tuple[int, ...] = (
    151, 160, 137, 91, 90, 15, 131, 13, 201, 95, 96, 53, 194, 233, 7, 225,
    140, 36, 103, 30, 69, 142, 8, 99, 37, 240, 21, 10, 23, 190, 6, 148,
    247, 120, 234, 75, 0, 26, 197, 62, 94, 252, 219, 203, 117, 35, 11, 32,
    57, 177, 33, 88, 237, 149, 56, 87, 174, 20, 125, 136, 171, 168, 68, 175,
    74, 165, 71, 134, 139, 48, 27, 166, 77, 146, 158, 231, 83, 111, 229, 122,
    60, 211, 133, 230, 220, 105, 92, 41, 55, 46, 245, 40, 244, 102, 143, 54,
    65, 25, 63, 161, 1, 216, 80, 73, 209, 76, 132, 187, 208, 89, 18, 169,
    200, 196, 135, 130, 116, 188, 159, 86, 164, 100, 109, 198, 173, 186, 3, 64,
    52, 217, 226, 250, 124, 123, 5, 202, 38, 147, 118, 126, 255, 82, 85, 212,
    207, 206, 59, 227, 47, 16, 58, 17, 182, 189, 28, 42, 223, 183, 170, 213,
    119, 248, 152, 2, 44, 154, 163, 70, 221, 153, 101, 155, 167, 43, 172, 9,
    129, 22, 39, 253, 19, 98, 108, 110, 79, 113, 224, 232, 178, 185, 112, 104,
    218, 246, 97, 228, 251, 34, 242, 193, 238, 210, 144, 12, 191, 179, 162, 241,
    81, 51, 145, 235, 249, 14, 239, 107, 49, 192, 214, 31, 181, 199, 106, 157,
    184, 84, 204, 176, 115, 121, 50, 45, 127, 4, 150, 254, 138, 236, 205, 93,
    222, 114, 67, 29, 24, 72, 243, 141, 128, 195, 78, 66, 215, 61, 156, 180,
)

# Doubled so corner hashes (index + 1) never need a wrap
_P = np.array(PERMUTATION + PERMUTATION, dtype=np.intp)
_P.flags.writeable = False

# Decorrelating offsets for the three displacement fields of domain warping
WARP_OFFSETS = ((0.0, 0.0, 0.0), (100.0, 100.0, 0.0), (200.0, 200.0, 200.0))
WARP_FREQUENCY = 0.5


def _fade(t: np.ndarray) -> np.ndarray:
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def _lerp(t: np.ndarray, a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return a + t * (b - a)


def _grad(hash_: np.ndarray, x: np.ndarray, y: np.ndarray, z: np.ndarray) -> np.ndarray:
    """Dot product with one of 12 edge gradients picked by the low 4 bits."""
    h = hash_ & 15
    u = np.where(h < 8, x, y)
    v = np.where(h < 4, y, np.where((h == 12) | (h == 14), x, z))
    return np.where((h & 1) == 0, u, -u) + np.where((h & 2) == 0, v, -v)


def _scalar_or_array(value: np.ndarray, scalar: bool):
    return float(value) if scalar else value


def _is_scalar(*values) -> bool:
    return all(np.ndim(v) == 0 for v in values)


def _check_octaves(octaves: int) -> int:
    try:
        count = int(octaves)
    except (TypeError, ValueError, OverflowError):
        raise InputError(f"octaves must be an integer >= 1, got {octaves!r}") from None
    if isinstance(octaves, bool) or count != octaves or count < 1:
        raise InputError(f"octaves must be an integer >= 1, got {octaves!r}")
    return count


def noise3(x, y, z):
    """Improved Perlin noise at ``(x, y, z)``; roughly in ``[-1, 1]``."""
    scalar = _is_scalar(x, y, z)
    x, y, z = np.broadcast_arrays(
        np.asarray(x, dtype=np.float64),
        np.asarray(y, dtype=np.float64),
        np.asarray(z, dtype=np.float64),
    )

    fx, fy, fz = np.floor(x), np.floor(y), np.floor(z)
    xi = fx.astype(np.intp) & 255
    yi = fy.astype(np.intp) & 255
    zi = fz.astype(np.intp) & 255

    x = x - fx
    y = y - fy
    z = z - fz

    u, v, w = _fade(x), _fade(y), _fade(z)

    a = _P[xi] + yi
    aa = _P[a] + zi
    ab = _P[a + 1] + zi
    b = _P[xi + 1] + yi
    ba = _P[b] + zi
    bb = _P[b + 1] + zi

    result = _lerp(
        w,
        _lerp(
            v,
            _lerp(u, _grad(_P[aa], x, y, z), _grad(_P[ba], x - 1, y, z)),
            _lerp(u, _grad(_P[ab], x, y - 1, z), _grad(_P[bb], x - 1, y - 1, z)),
        ),
        _lerp(
            v,
            _lerp(u, _grad(_P[aa + 1], x, y, z - 1), _grad(_P[ba + 1], x - 1, y, z - 1)),
            _lerp(
                u,
                _grad(_P[ab + 1], x, y - 1, z - 1),
                _grad(_P[bb + 1], x - 1, y - 1, z - 1),
            ),
        ),
    )
    return _scalar_or_array(result, scalar)


def fbm3(x, y, z, octaves: int = 6, persistence: float = 0.5, lacunarity: float = 2.0):
    """Fractal Brownian motion: amplitude-normalised sum of noise octaves.

    Raises:
        InputError: If ``octaves`` is not an integer >= 1.
    """
    octaves = _check_octaves(octaves)
    scalar = _is_scalar(x, y, z)
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    z = np.asarray(z, dtype=np.float64)

    total = np.zeros(np.broadcast_shapes(x.shape, y.shape, z.shape))
    frequency = 1.0
    amplitude = 1.0
    max_value = 0.0

    for _ in range(octaves):
        total = total + noise3(x * frequency, y * frequency, z * frequency) * amplitude
        max_value += amplitude
        amplitude *= persistence
        frequency *= lacunarity

    return _scalar_or_array(total / max_value, scalar)


def ridged_multifractal(
    x,
    y,
    z,
    octaves: int = 6,
    persistence: float = 0.5,
    lacunarity: float = 2.0,
    gain: float = 2.0,
):
    """Ridged multifractal noise in ``[0, 1]``.

    Each octave contributes ``(1 - |noise|)**2``, weighted by the previous
    octave's squared signal times ``gain`` (clamped to ``[0, 1]``), so ridges
    sharpen where earlier octaves were already near a crest.
    """
    octaves = _check_octaves(octaves)
    scalar = _is_scalar(x, y, z)
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    z = np.asarray(z, dtype=np.float64)

    shape = np.broadcast_shapes(x.shape, y.shape, z.shape)
    total = np.zeros(shape)
    prev = np.ones(shape)
    frequency = 1.0
    amplitude = 0.5
    max_value = 0.0

    for _ in range(octaves):
        signal = 1.0 - np.abs(noise3(x * frequency, y * frequency, z * frequency))
        signal_sq = signal * signal
        total = total + signal_sq * amplitude * prev
        prev = np.clip(signal_sq * gain, 0.0, 1.0)
        max_value += amplitude
        frequency *= lacunarity
        amplitude *= persistence

    result = np.clip(total / max_value, 0.0, 1.0)
    return _scalar_or_array(result, scalar)


def domain_warped_noise(x, y, z, warp_strength: float = 1.0):
    """fBm sampled at coordinates displaced by three offset noise fields."""
    if not math.isfinite(warp_strength):
        raise InputError(f"warp_strength must be finite, got {warp_strength!r}")
    scalar = _is_scalar(x, y, z)
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    z = np.asarray(z, dtype=np.float64)

    sx, sy, sz = x * WARP_FREQUENCY, y * WARP_FREQUENCY, z * WARP_FREQUENCY
    (ox0, oy0, oz0), (ox1, oy1, oz1), (ox2, oy2, oz2) = WARP_OFFSETS
    warp_x = noise3(sx + ox0, sy + oy0, sz + oz0) * warp_strength
    warp_y = noise3(sx + ox1, sy + oy1, sz + oz1) * warp_strength
    warp_z = noise3(sx + ox2, sy + oy2, sz + oz2) * warp_strength

    result = fbm3(x + warp_x, y + warp_y, z + warp_z)
    return _scalar_or_array(np.asarray(result), scalar)
