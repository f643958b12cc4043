"""
Spatial accuracy of a traced stroke against the reference path.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..config.settings import AnalyticsConfig, DEFAULT_CONFIG
from ..utils.geometry import GeometryUtils, Point
from ..utils.math_utils import StatsUtils

logger = logging.getLogger(__name__)


@dataclass
class OffTrackEvent:
    """A run of consecutive samples further than the off-track threshold from the path."""
    start_timestamp: float
    peak_deviation: float
    location: Point
    duration_ms: float = 0.0
    recovery_time_ms: float = 0.0

    def to_dict(self):
        return {
            'start_timestamp': self.start_timestamp,
            'peak_deviation': self.peak_deviation,
            'location': {'x': self.location.x, 'y': self.location.y},
            'duration_ms': self.duration_ms,
            'recovery_time_ms': self.recovery_time_ms,
        }


@dataclass
class SpatialAccuracyMetrics:
    mean_deviation: float = 0.0
    max_deviation: float = 0.0
    deviation_std: float = 0.0
    off_track_events: List[OffTrackEvent] = field(default_factory=list)
    off_track_duration_ms: float = 0.0
    spatial_drift: float = 0.0
    deviation_profile: List[float] = field(default_factory=list)
    accuracy_score: float = 100.0

    @property
    def off_track_count(self) -> int:
        return len(self.off_track_events)

    @property
    def recovery_times_ms(self) -> List[float]:
        return [e.recovery_time_ms for e in self.off_track_events]

    def to_dict(self):
        return {
            'mean_deviation': self.mean_deviation,
            'max_deviation': self.max_deviation,
            'deviation_std': self.deviation_std,
            'off_track_events': [e.to_dict() for e in self.off_track_events],
            'off_track_count': self.off_track_count,
            'off_track_duration_ms': self.off_track_duration_ms,
            'recovery_times_ms': self.recovery_times_ms,
            'spatial_drift': self.spatial_drift,
            'deviation_profile': list(self.deviation_profile),
            'accuracy_score': self.accuracy_score,
        }


def min_distance_to_path(point, reference: Sequence, max_segment_px: float = 50.0) -> float:
    """
    Distance from ``point`` to the polyline through ``reference``.

    Segments longer than ``max_segment_px`` are jumps between strokes and are
    skipped; if every segment is skipped the nearest reference sample is used.
    """
    if not reference:
        return math.inf

    best = math.inf
    for i in range(len(reference) - 1):
        p1, p2 = reference[i], reference[i + 1]
        if GeometryUtils.calculate_distance(p1, p2) > max_segment_px:
            continue
        best = min(best, GeometryUtils.point_to_segment_distance(point, p1, p2))

    if math.isinf(best):
        best = min(GeometryUtils.calculate_distance(point, ref) for ref in reference)
    return best


def compute_spatial_accuracy(points: Sequence, path, stroke_index: Optional[int] = None,
                             config: AnalyticsConfig = DEFAULT_CONFIG) -> SpatialAccuracyMetrics:
    """
    Measure how closely a traced stroke follows the reference path.

    Args:
        points: Traced samples with ``x``, ``y`` and ``timestamp``.
        path: ReferencePath to measure against.
        stroke_index: Restrict the reference to this stroke when it exists.
        config: Analytics constants.

    Returns:
        SpatialAccuracyMetrics; neutral (accuracy 100) for empty input or path.
    """
    if not points or path is None or path.is_empty:
        return SpatialAccuracyMetrics()

    reference = path.points
    if stroke_index is not None and 0 <= stroke_index < path.stroke_count:
        reference = path.stroke_points(stroke_index)

    deviations = []
    events: List[OffTrackEvent] = []
    current: Optional[OffTrackEvent] = None

    for point in points:
        deviation = min_distance_to_path(point, reference, config.neighbor_segment_max_px)
        deviations.append(deviation)
        t = point.timestamp

        if deviation > config.off_track_threshold_px:
            if current is None:
                current = OffTrackEvent(t, deviation, Point(point.x, point.y))
            else:
                current.duration_ms = t - current.start_timestamp
                if deviation > current.peak_deviation:
                    current.peak_deviation = deviation
                    current.location = Point(point.x, point.y)
        elif current is not None:
            current.recovery_time_ms = t - (current.start_timestamp + current.duration_ms)
            events.append(current)
            current = None

    if current is not None:
        events.append(current)

    mean_dev = StatsUtils.mean(deviations)
    quarter = len(deviations) // 4
    drift = 0.0
    if quarter > 0:
        drift = StatsUtils.mean(deviations[-quarter:]) - StatsUtils.mean(deviations[:quarter])

    tolerance = max(config.accuracy_tolerance_px, 1e-9)
    accuracy = 100 * (1 - min(mean_dev / (2 * tolerance), 1.0))

    return SpatialAccuracyMetrics(
        mean_deviation=mean_dev,
        max_deviation=max(deviations),
        deviation_std=StatsUtils.std(deviations),
        off_track_events=events,
        off_track_duration_ms=sum(e.duration_ms for e in events),
        spatial_drift=drift,
        deviation_profile=deviations,
        accuracy_score=accuracy,
    )
