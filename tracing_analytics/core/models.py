"""
Data model of a finalized tracing session.

The session summary is a tree of plain dataclasses. ``to_dict()`` turns it
into JSON-safe dictionaries with snake_case keys; fields this pipeline did not
compute carry a NotComputed marker instead of a made-up constant.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from ..classifier.base import ClassificationResult
from ..features.shape import ShapeQualityMetrics
from ..features.spatial import SpatialAccuracyMetrics
from ..features.orientation import OrientationSimilarity
from ..features.stroke_features import StrokeFeatureSummary
from ..features.tremor import TremorSeverity
from ..risk.risk_aggregator import RiskAssessment
from ..sequencing.stroke_segmenter import StrokeSequencing
from ..utils.records import NotComputed, RawTouchPoint, to_serializable

NO_WIDTH_SENSOR = NotComputed("no contact-size sensor")
NO_ORIENTATION_TRACKING = NotComputed("orientation consistency is not tracked")


@dataclass(frozen=True)
class SessionOverview:
    is_correct: bool = False
    completion_time_ms: float = 0.0
    score: float = 0.0
    status: str = 'empty'


@dataclass(frozen=True)
class DataQuality:
    sampling_rate_hz: float = 0.0
    total_samples: int = 0
    points_dropped: int = 0
    completeness_score: float = 1.0


@dataclass(frozen=True)
class KinematicsBlock:
    """Session velocity profile (px/s) after Savitzky-Golay smoothing."""
    avg_velocity: float = 0.0
    velocity_variance: float = 0.0
    velocity_cov: float = 0.0
    peak_velocity: float = 0.0
    velocity_peaks: int = 0
    velocity_valleys: int = 0
    time_in_motion_ms: float = 0.0
    time_paused_ms: float = 0.0
    fluency_ratio: float = 0.0
    speed_degradation_slope: float = 0.0


@dataclass(frozen=True)
class DynamicsBlock:
    max_acceleration: float = 0.0
    avg_jerk: float = 0.0
    normalized_jerk: float = 0.0
    acceleration_symmetry: float = 1.0
    ballistic_movements: int = 0


@dataclass(frozen=True)
class GraphomotorBlock:
    tremor_frequency: float = 0.0
    tremor_amplitude: float = 0.0
    tremor_power: float = 0.0
    tremor_severity: TremorSeverity = TremorSeverity.NONE
    avg_pressure: float = 0.0
    pressure_variance: float = 0.0
    pressure_modulation_score: float = 0.0
    stroke_width_mean: Union[float, NotComputed] = NO_WIDTH_SENSOR
    stroke_width_variance: Union[float, NotComputed] = NO_WIDTH_SENSOR


@dataclass(frozen=True)
class ShapeBlock:
    metrics: ShapeQualityMetrics = field(default_factory=ShapeQualityMetrics)
    closure_success: bool = True
    letter_closure_success_rate: float = 1.0
    path_variance: float = 0.0
    spatial_drift: float = 0.0
    off_track_events: int = 0
    spatial_accuracy: Union[SpatialAccuracyMetrics, NotComputed] = NotComputed("reference overlay disabled")
    line_continuity: Dict[str, float] = field(default_factory=dict)
    self_corrections: int = 0


@dataclass(frozen=True)
class OrientationBlock:
    micropause_count: int = 0
    direction_reversal_count: int = 0
    reversal_detected: bool = False
    reversal_type: Optional[str] = None
    mirror_confusion_score: float = 0.1
    similarity: Union[OrientationSimilarity, NotComputed] = NotComputed("no reference path")
    orientation_consistency: Union[float, NotComputed] = NO_ORIENTATION_TRACKING


@dataclass(frozen=True)
class SessionFeatureSummary:
    """Terminal, immutable artifact of one tracing session."""
    version: str
    session_id: str
    letter: str
    timestamp: str
    overview: SessionOverview
    data_quality: DataQuality
    kinematics: KinematicsBlock
    dynamics: DynamicsBlock
    graphomotor: GraphomotorBlock
    shape: ShapeBlock
    sequencing: StrokeSequencing
    orientation: OrientationBlock
    risk: RiskAssessment
    ml: ClassificationResult
    context: Dict[str, Any] = field(default_factory=dict)
    strokes: List[StrokeFeatureSummary] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return to_serializable(self)

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


__all__ = [
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
