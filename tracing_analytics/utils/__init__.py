"""
Utilities package for stroke geometry, statistics and signal processing.

This package provides the shared primitives used by the feature extractors,
the sequencing scorer and the session aggregator.
"""

from .geometry import (
    Point,
    BoundingBox,
    GeometryUtils,
    DataValidator
)
from .math_utils import StatsUtils, calculate_hu_moments
from .signal_processing import (
    gaussian_smooth,
    savitzky_golay_filter,
    power_spectral_density,
    dominant_frequency,
    low_pass_filter,
    high_pass_filter,
    zero_crossing_rate,
    autocorrelation,
    spectral_entropy
)
from .logger import SessionLogger
from .records import RawTouchPoint, NotComputed, to_serializable

__all__ = [
    'Point',
    'BoundingBox',
    'GeometryUtils',
    'DataValidator',
    'StatsUtils',
    'calculate_hu_moments',
    'gaussian_smooth',
    'savitzky_golay_filter',
    'power_spectral_density',
    'dominant_frequency',
    'low_pass_filter',
    'high_pass_filter',
    'zero_crossing_rate',
    'autocorrelation',
    'spectral_entropy',
    'SessionLogger',
    'RawTouchPoint',
    'NotComputed',
    'to_serializable'
]
