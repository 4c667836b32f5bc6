"""Crystallize — Voronoi cells filled with their average colour."""

import math

import numpy as np
from scipy.spatial import cKDTree

from engine.compositor import blend, solid_layer

EFFECT_ID = "crystallize"
EFFECT_NAME = "Crystal Formation"
EFFECT_DESCRIPTION = "Fractured geometric facets catch and reflect light in unexpected ways"
EFFECT_CATEGORY = "creative"

EDGE_BRIGHTEN = 1.5
HIGHLIGHT_ALPHA = 0.2


def assign_cells(shape: tuple[int, ...], seeds: np.ndarray) -> np.ndarray:
    """Index of the nearest seed for every pixel, shape (H, W)."""
    h, w = shape[:2]
    ys, xs = np.mgrid[0:h, 0:w]
    points = np.column_stack([xs.ravel(), ys.ravel()]).astype(np.float64)
    _, labels = cKDTree(seeds).query(points)
    return labels.reshape(h, w)


def cell_boundaries(labels: np.ndarray) -> np.ndarray:
    """Interior pixels whose 4-neighbourhood touches another cell."""
    edge = np.zeros(labels.shape, dtype=bool)
    center = labels[1:-1, 1:-1]
    edge[1:-1, 1:-1] = (
        (center != labels[1:-1, :-2])
        | (center != labels[1:-1, 2:])
        | (center != labels[:-2, 1:-1])
        | (center != labels[2:, 1:-1])
    )
    return edge


def apply(frame: np.ndarray, intensity: float, rng: np.random.Generator) -> np.ndarray:
    h, w = frame.shape[:2]
    n_cells = 20 + int(math.floor(intensity * 80))
    seeds = np.column_stack([rng.random(n_cells) * w, rng.random(n_cells) * h])

    labels = assign_cells(frame.shape, seeds)
    flat_labels = labels.ravel()
    counts = np.bincount(flat_labels, minlength=n_cells)
    pixels = frame.reshape(-1, 4).astype(np.int64)

    averages = np.zeros((n_cells, 4), dtype=np.uint8)
    used = counts > 0
    for ch in range(4):
        sums = np.bincount(flat_labels, weights=pixels[:, ch], minlength=n_cells)
        averages[used, ch] = np.floor(sums[used] / counts[used]).astype(np.uint8)

    output = averages[labels]
    edge = cell_boundaries(labels)
    output[edge, :3] = np.minimum(255, np.rint(output[edge, :3] * EDGE_BRIGHTEN)).astype(np.uint8)

    return blend(output, solid_layer(frame.shape, (255, 255, 255), HIGHLIGHT_ALPHA), "screen")
