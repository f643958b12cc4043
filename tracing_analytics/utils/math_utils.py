"""
Statistical helpers and shape moments used across the analytics modules.

All functions return neutral values (0.0, empty lists) for empty input rather
than raising, so that a degenerate stroke never aborts a session summary.
"""

import math
from typing import Dict, List, Sequence

import numpy as np


class StatsUtils:
    """Utility class for descriptive statistics over numeric sequences."""

    @staticmethod
    def mean(values: Sequence[float]) -> float:
        if len(values) == 0:
            return 0.0
        return float(np.mean(values))

    @staticmethod
    def variance(values: Sequence[float]) -> float:
        """Population variance."""
        if len(values) == 0:
            return 0.0
        return float(np.var(values))

    @staticmethod
    def std(values: Sequence[float]) -> float:
        """Population standard deviation."""
        if len(values) == 0:
            return 0.0
        return float(np.std(values))

    @staticmethod
    def coefficient_of_variation(values: Sequence[float]) -> float:
        avg = StatsUtils.mean(values)
        if avg == 0:
            return 0.0
        return StatsUtils.std(values) / avg

    @staticmethod
    def percentile(values: Sequence[float], p: float) -> float:
        """Linearly interpolated percentile, ``p`` in [0, 100]."""
        if len(values) == 0:
            return 0.0
        return float(np.percentile(values, p))

    @staticmethod
    def clamp(value: float, low: float, high: float) -> float:
        return max(low, min(high, value))

    @staticmethod
    def normalize(value: float, low: float, high: float) -> float:
        """Map ``value`` into [0, 1] relative to [low, high]."""
        if high == low:
            return 0.0
        return StatsUtils.clamp((value - low) / (high - low), 0.0, 1.0)

    @staticmethod
    def linear_regression(x_values: Sequence[float], y_values: Sequence[float]) -> Dict[str, float]:
        """
        Ordinary least squares fit of ``y = slope * x + intercept``.

        Args:
            x_values: Independent variable samples.
            y_values: Dependent variable samples, same length as ``x_values``.

        Returns:
            Dict with ``slope``, ``intercept`` and ``r2``. All zero when the
            inputs are empty, mismatched, or ``x`` has no spread.
        """
        if len(x_values) != len(y_values) or len(x_values) == 0:
            return {'slope': 0.0, 'intercept': 0.0, 'r2': 0.0}

        x = np.asarray(x_values, dtype=float)
        y = np.asarray(y_values, dtype=float)
        n = len(x)

        denominator = n * np.sum(x * x) - np.sum(x) ** 2
        if abs(denominator) < 1e-12:
            return {'slope': 0.0, 'intercept': float(np.mean(y)), 'r2': 0.0}

        slope = (n * np.sum(x * y) - np.sum(x) * np.sum(y)) / denominator
        intercept = (np.sum(y) - slope * np.sum(x)) / n

        ss_total = np.sum((y - np.mean(y)) ** 2)
        ss_residual = np.sum((y - (slope * x + intercept)) ** 2)
        r2 = 0.0 if ss_total == 0 else 1 - ss_residual / ss_total

        return {'slope': float(slope), 'intercept': float(intercept), 'r2': float(r2)}

    @staticmethod
    def find_peaks(data: Sequence[float], threshold: float = 0.0, min_distance: int = 5) -> List[int]:
        """Indices strictly greater than every neighbour within ``min_distance``."""
        peaks = []
        for i in range(min_distance, len(data) - min_distance):
            if data[i] < threshold:
                continue
            window = list(data[i - min_distance:i]) + list(data[i + 1:i + min_distance + 1])
            if all(data[i] > v for v in window):
                peaks.append(i)
        return peaks

    @staticmethod
    def find_valleys(data: Sequence[float], min_distance: int = 5) -> List[int]:
        return StatsUtils.find_peaks([-v for v in data], -math.inf, min_distance)


def calculate_hu_moments(points: Sequence) -> List[float]:
    """
    Seven Hu invariant moments of a point cloud.

    The cloud is treated as unit-mass samples, so ``m00`` is the point count.
    """
    if len(points) == 0:
        return [0.0] * 7

    xs = np.array([p.x for p in points], dtype=float)
    ys = np.array([p.y for p in points], dtype=float)
    dx = xs - xs.mean()
    dy = ys - ys.mean()
    m00 = float(len(points))

    def eta(p: int, q: int) -> float:
        mu = float(np.sum(dx ** p * dy ** q))
        return mu / m00 ** (1 + (p + q) / 2)

    n20, n02, n11 = eta(2, 0), eta(0, 2), eta(1, 1)
    n30, n03, n21, n12 = eta(3, 0), eta(0, 3), eta(2, 1), eta(1, 2)

    hu1 = n20 + n02
    hu2 = (n20 - n02) ** 2 + 4 * n11 ** 2
    hu3 = (n30 - 3 * n12) ** 2 + (3 * n21 - n03) ** 2
    hu4 = (n30 + n12) ** 2 + (n21 + n03) ** 2
    hu5 = ((n30 - 3 * n12) * (n30 + n12) * ((n30 + n12) ** 2 - 3 * (n21 + n03) ** 2)
           + (3 * n21 - n03) * (n21 + n03) * (3 * (n30 + n12) ** 2 - (n21 + n03) ** 2))
    hu6 = ((n20 - n02) * ((n30 + n12) ** 2 - (n21 + n03) ** 2)
           + 4 * n11 * (n30 + n12) * (n21 + n03))
    hu7 = ((3 * n21 - n03) * (n30 + n12) * ((n30 + n12) ** 2 - 3 * (n21 + n03) ** 2)
           - (n30 - 3 * n12) * (n21 + n03) * (3 * (n30 + n12) ** 2 - (n21 + n03) ** 2))

    return [hu1, hu2, hu3, hu4, hu5, hu6, hu7]
