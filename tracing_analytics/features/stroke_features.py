"""
Per-stroke feature extraction.

Turns the raw samples of one completed stroke (pen-down to pen-up) into a
StrokeFeatureSummary: timing, pauses, velocity/acceleration/jerk, ballistic
movement, sharp direction reversals, tremor and (optionally) spatial accuracy
against the reference path.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from ..config.settings import AnalyticsConfig, DEFAULT_CONFIG
from ..utils.geometry import GeometryUtils
from ..utils.math_utils import StatsUtils
from ..utils.records import NotComputed, to_serializable
from ..utils.signal_processing import gaussian_smooth
from .spatial import SpatialAccuracyMetrics, compute_spatial_accuracy
from .tremor import TremorMetrics, detect_tremor

logger = logging.getLogger(__name__)

OVERLAY_DISABLED = NotComputed("reference overlay disabled")
NO_REFERENCE = NotComputed("no reference path")


@dataclass(frozen=True)
class StrokeFeatureSummary:
    """Features of one completed stroke. Velocities in px/s, times in ms."""
    stroke_id: int
    point_count: int
    initiation_delay_ms: float
    stroke_duration_ms: float
    path_length: float
    pause_count: int
    pause_duration_ms: float
    avg_pause_duration_ms: float
    avg_velocity: float
    peak_velocity: float
    avg_pressure: float
    max_acceleration: float
    total_jerk: float
    normalized_jerk: float
    velocity_peaks: int
    velocity_valleys: int
    sampling_rate_hz: float
    is_ballistic: bool
    ballistic_score: float
    reversal_count: int
    is_direction_consistent: bool
    tremor: TremorMetrics = field(default_factory=TremorMetrics)
    spatial: Union[SpatialAccuracyMetrics, NotComputed] = OVERLAY_DISABLED

    def to_dict(self):
        return to_serializable(self)


def count_direction_reversals(points: Sequence, config: AnalyticsConfig = DEFAULT_CONFIG) -> int:
    """
    Count sharp direction changes within a stroke.

    At each sample the vector from ``stride`` samples back is compared with
    the vector ``stride`` samples ahead. Both must exceed the minimum length;
    a turn sharper than the reversal angle counts once and the scan skips
    ahead by ``stride`` so one corner is not counted twice.
    """
    stride = config.reversal_stride
    n = len(points)
    if n < stride * 2 + 1:
        return 0

    threshold = math.radians(config.reversal_angle_deg)
    reversals = 0
    i = stride
    while i < n - stride:
        prev, curr, nxt = points[i - stride], points[i], points[i + stride]
        v1x, v1y = curr.x - prev.x, curr.y - prev.y
        v2x, v2y = nxt.x - curr.x, nxt.y - curr.y

        if (math.hypot(v1x, v1y) >= config.reversal_min_vector_px
                and math.hypot(v2x, v2y) >= config.reversal_min_vector_px):
            if GeometryUtils.vector_angle(v1x, v1y, v2x, v2y) > threshold:
                reversals += 1
                i += stride
        i += 1
    return reversals


class StrokeFeatureExtractor:
    """Computes StrokeFeatureSummary records with a fixed set of constants."""

    def __init__(self, config: AnalyticsConfig = DEFAULT_CONFIG):
        self.config = config

    def compute(self, stroke_id: int, points: Sequence, ideal_path=None,
                previous_stroke_end: Optional[float] = None) -> StrokeFeatureSummary:
        """
        Extract features from one stroke.

        Args:
            stroke_id: Index of the stroke within the session.
            points: Samples ordered by timestamp (ms). Callers discard strokes
                with fewer than two samples; shorter input yields zeros.
            ideal_path: Optional ReferencePath for spatial accuracy.
            previous_stroke_end: Timestamp of the previous stroke's last sample.

        Returns:
            StrokeFeatureSummary
        """
        config = self.config
        duration_ms = float(points[-1].timestamp - points[0].timestamp) if points else 0.0
        duration_s = duration_ms / 1000.0

        path_length = 0.0
        pause_count = 0
        pause_duration = 0.0
        velocities: List[float] = []
        intervals_s: List[float] = []

        for i in range(1, len(points)):
            p1, p2 = points[i - 1], points[i]
            dist = GeometryUtils.calculate_distance(p1, p2)
            dt_ms = p2.timestamp - p1.timestamp
            path_length += dist

            if dt_ms > config.pause_threshold_ms:
                pause_count += 1
                pause_duration += dt_ms

            dt_s = dt_ms / 1000.0
            intervals_s.append(dt_s)
            velocities.append(dist / dt_s if dt_s > 0 else 0.0)

        # Second and third differences of the velocity profile
        max_acc = 0.0
        total_jerk = 0.0
        prev_acc = None
        for i in range(1, len(velocities)):
            dt_s = intervals_s[i]
            if dt_s <= 0 or intervals_s[i - 1] <= 0:
                prev_acc = None
                continue
            acc = abs(velocities[i] - velocities[i - 1]) / dt_s
            max_acc = max(max_acc, acc)
            if prev_acc is not None:
                total_jerk += abs(acc - prev_acc) / dt_s
            prev_acc = acc

        avg_velocity = path_length / duration_s if duration_s > 0 else 0.0
        # avg velocity (px/s) over max acceleration (px/s^2), expressed in ms
        ballistic_score = 1000.0 * avg_velocity / max_acc if max_acc > 0 else 0.0
        reversals = count_direction_reversals(points, config)

        smoothed = gaussian_smooth(velocities, 1.0)
        velocity_peaks = len(StatsUtils.find_peaks(smoothed, StatsUtils.mean(smoothed), 2))

        initiation_delay = 0.0
        if previous_stroke_end is not None and points:
            initiation_delay = max(0.0, points[0].timestamp - previous_stroke_end)

        summary = StrokeFeatureSummary(
            stroke_id=stroke_id,
            point_count=len(points),
            initiation_delay_ms=initiation_delay,
            stroke_duration_ms=duration_ms,
            path_length=path_length,
            pause_count=pause_count,
            pause_duration_ms=pause_duration,
            avg_pause_duration_ms=pause_duration / pause_count if pause_count else 0.0,
            avg_velocity=avg_velocity,
            peak_velocity=max(velocities) if velocities else 0.0,
            avg_pressure=StatsUtils.mean([p.pressure for p in points]),
            max_acceleration=max_acc,
            total_jerk=total_jerk,
            normalized_jerk=total_jerk / (duration_ms or 1),
            velocity_peaks=velocity_peaks,
            velocity_valleys=pause_count,
            sampling_rate_hz=len(points) / duration_s if duration_s > 0 else 0.0,
            is_ballistic=ballistic_score > config.ballistic_ratio_threshold,
            ballistic_score=ballistic_score,
            reversal_count=reversals,
            is_direction_consistent=reversals == 0,
            tremor=detect_tremor(points, config),
            spatial=self._spatial(points, ideal_path, stroke_id),
        )
        return summary

    def _spatial(self, points, ideal_path, stroke_id):
        if not self.config.reference_overlay_enabled:
            return OVERLAY_DISABLED
        if ideal_path is None or ideal_path.is_empty:
            return NO_REFERENCE
        return compute_spatial_accuracy(points, ideal_path, stroke_id, self.config)


def compute_stroke_features(stroke_id: int, points: Sequence, ideal_path=None,
                            config: AnalyticsConfig = DEFAULT_CONFIG,
                            previous_stroke_end: Optional[float] = None) -> StrokeFeatureSummary:
    """Module-level convenience wrapper around StrokeFeatureExtractor."""
    return StrokeFeatureExtractor(config).compute(stroke_id, points, ideal_path, previous_stroke_end)
