"""
Feature extraction for traced strokes.

Per-stroke kinematics and tremor, spatial accuracy against a reference path,
session-level shape quality and orientation similarity.
"""

from .tremor import TremorSeverity, TremorMetrics, detect_tremor, classify_tremor_severity, average_tremor
from .spatial import OffTrackEvent, SpatialAccuracyMetrics, compute_spatial_accuracy
from .shape import ShapeQualityMetrics, compute_shape_quality
from .orientation import OrientationSimilarity, compute_orientation_similarity
from .stroke_features import (
    StrokeFeatureSummary,
    StrokeFeatureExtractor,
    compute_stroke_features,
    count_direction_reversals
)

__all__ = [
    'TremorSeverity',
    'TremorMetrics',
    'detect_tremor',
    'classify_tremor_severity',
    'average_tremor',
    'OffTrackEvent',
    'SpatialAccuracyMetrics',
    'compute_spatial_accuracy',
    'ShapeQualityMetrics',
    'compute_shape_quality',
    'OrientationSimilarity',
    'compute_orientation_similarity',
    'StrokeFeatureSummary',
    'StrokeFeatureExtractor',
    'compute_stroke_features',
    'count_direction_reversals'
]
