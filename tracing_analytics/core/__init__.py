"""
Core session aggregation and the session summary data model.
"""

from .aggregator import SessionState, SessionFeatureAggregator
from .models import (
    RawTouchPoint,
    NotComputed,
    StrokeFeatureSummary,
    SessionOverview,
    DataQuality,
    KinematicsBlock,
    DynamicsBlock,
    GraphomotorBlock,
    ShapeBlock,
    OrientationBlock,
    SessionFeatureSummary
)

__all__ = [
    'SessionState',
    'SessionFeatureAggregator',
    'RawTouchPoint',
    'NotComputed',
    'StrokeFeatureSummary',
    'SessionOverview',
    'DataQuality',
    'KinematicsBlock',
    'DynamicsBlock',
    'GraphomotorBlock',
    'ShapeBlock',
    'OrientationBlock',
    'SessionFeatureSummary'
]
