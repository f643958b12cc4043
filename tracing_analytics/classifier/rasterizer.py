"""
Stroke rasterization for the character classifier.

Strokes are scaled (keeping aspect ratio) so their bounding box fits a
20-pixel box centered in a 28x28 grid, then drawn with a 3x3 soft brush.
"""

import math
from typing import Sequence

import numpy as np

GRID_SIZE = 28
TARGET_SIZE = 20


def _stamp(grid: np.ndarray, x: float, y: float):
    """Soft 3x3 brush: intensity falls off with distance from the pen center."""
    cx, cy = int(round(x)), int(round(y))
    size = grid.shape[0]
    for gy in range(cy - 1, cy + 2):
        for gx in range(cx - 1, cx + 2):
            if 0 <= gx < size and 0 <= gy < size:
                intensity = max(0.0, 1 - 0.5 * math.hypot(gx - x, gy - y))
                grid[gy, gx] = min(1.0, grid[gy, gx] + intensity)


def rasterize_strokes(strokes: Sequence[Sequence], grid_size: int = GRID_SIZE,
                      target_size: int = TARGET_SIZE) -> np.ndarray:
    """
    Render strokes into a ``grid_size`` x ``grid_size`` float array in [0, 1].

    Args:
        strokes: Strokes, each a sequence of points with ``x`` and ``y``.
        grid_size: Output side length in pixels.
        target_size: Side of the box the drawing is scaled into.

    Returns:
        2D numpy array; all zeros when there are no points.
    """
    grid = np.zeros((grid_size, grid_size), dtype=float)
    points = [p for stroke in strokes for p in stroke]
    if not points:
        return grid

    xs = [p.x for p in points]
    ys = [p.y for p in points]
    min_x, min_y = min(xs), min(ys)
    width = max(xs) - min_x
    height = max(ys) - min_y
    extent = max(width, height)
    scale = target_size / extent if extent > 0 else 1.0

    offset_x = (grid_size - width * scale) / 2
    offset_y = (grid_size - height * scale) / 2

    def to_grid(p):
        return (p.x - min_x) * scale + offset_x, (p.y - min_y) * scale + offset_y

    for stroke in strokes:
        if not stroke:
            continue
        prev = to_grid(stroke[0])
        _stamp(grid, *prev)
        for point in stroke[1:]:
            curr = to_grid(point)
            dist = math.hypot(curr[0] - prev[0], curr[1] - prev[1])
            steps = max(1, int(math.ceil(dist * 2)))
            for s in range(1, steps + 1):
                t = s / steps
                _stamp(grid, prev[0] + t * (curr[0] - prev[0]), prev[1] + t * (curr[1] - prev[1]))
            prev = curr

    return grid


def flip_horizontal(raster: np.ndarray) -> np.ndarray:
    return raster[:, ::-1].copy()


def flip_vertical(raster: np.ndarray) -> np.ndarray:
    return raster[::-1, :].copy()


def rotate_180(raster: np.ndarray) -> np.ndarray:
    return raster[::-1, ::-1].copy()
