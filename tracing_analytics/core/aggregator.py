"""
Session feature aggregator that coordinates per-stroke extraction, stroke
sequencing, classification and risk screening for one tracing session.
"""

import asyncio
import datetime
import logging
import time
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from ..classifier.base import ClassificationResult, placeholder_classification
from ..config.settings import AnalyticsConfig, DEFAULT_CONFIG
from ..features.orientation import compute_orientation_similarity
from ..features.shape import compute_shape_quality
from ..features.spatial import SpatialAccuracyMetrics, compute_spatial_accuracy
from ..features.stroke_features import StrokeFeatureExtractor, StrokeFeatureSummary
from ..features.tremor import average_tremor
from ..reference.letters import get_letter_definition
from ..reference.path_generator import ReferencePath
from ..risk.risk_aggregator import RiskInputs, assess_risk
from ..sequencing.stroke_segmenter import (
    analyze_closure_success,
    analyze_line_continuity,
    analyze_pressure_modulation,
    analyze_stroke_order,
    detect_self_corrections
)
from ..utils.geometry import DataValidator, GeometryUtils, Point
from ..utils.logger import SessionLogger
from ..utils.math_utils import StatsUtils
from ..utils.records import NotComputed, RawTouchPoint
from ..utils.signal_processing import savitzky_golay_filter
from .models import (
    DataQuality,
    DynamicsBlock,
    GraphomotorBlock,
    KinematicsBlock,
    OrientationBlock,
    SessionFeatureSummary,
    SessionOverview,
    ShapeBlock
)

logger = logging.getLogger(__name__)

_REVERSAL_NAMES = {
    'horizontal_flip': 'horizontal',
    'vertical_flip': 'vertical',
    'rotation_180': 'rotation',
}


class SessionState(Enum):
    IDLE = 'idle'
    RECORDING = 'recording'
    FINALIZED = 'finalized'


class SessionFeatureAggregator:
    """
    Owns the raw point buffer and completed stroke summaries of one session.

    Calls are not reentrant: a capture surface must serialize ``add_point``,
    ``end_stroke`` and ``generate_session_summary`` for a given aggregator.
    """

    def __init__(self, config: AnalyticsConfig = DEFAULT_CONFIG, classifier=None,
                 logger: Optional[SessionLogger] = None):
        self.config = config
        self.classifier = classifier
        self.session_logger = logger or SessionLogger()
        self.extractor = StrokeFeatureExtractor(config)
        self.state = SessionState.IDLE
        self._reset()

    def _reset(self):
        self._raw_points: List[RawTouchPoint] = []
        self._current_stroke: List[RawTouchPoint] = []
        self._strokes_history: List[List[RawTouchPoint]] = []
        self._summaries: List[StrokeFeatureSummary] = []
        self._points_dropped = 0
        self._stroke_start_time: Optional[float] = None
        self._letter: Optional[str] = None
        self._reference_path: Optional[ReferencePath] = None
        self._expected_strokes = 0

    # Recording

    def start_session(self, letter: Optional[str] = None, reference_path: Optional[ReferencePath] = None):
        """Clear all buffers and start recording a new session."""
        self._reset()
        self._letter = letter
        if reference_path is not None:
            self._reference_path = reference_path
            self._expected_strokes = reference_path.stroke_count
        elif letter:
            self._load_reference(letter)
        self.state = SessionState.RECORDING
        logger.debug("Session started for letter %s (%d expected strokes)", letter, self._expected_strokes)

    def _load_reference(self, letter: str):
        try:
            definition = get_letter_definition(letter)
        except KeyError:
            logger.warning("No reference definition for letter %r; sequencing without a reference", letter)
            return
        self._reference_path = definition.reference_path(self.config.samples_per_segment)
        self._expected_strokes = definition.expected_stroke_count

    def _ensure_recording(self):
        if self.state == SessionState.FINALIZED:
            raise RuntimeError("Session already finalized; call start_session() to begin a new one")
        if self.state == SessionState.IDLE:
            self.start_session()

    def add_point(self, point: RawTouchPoint):
        """Append a touch sample to the session and the current stroke."""
        self._ensure_recording()
        clean = DataValidator.sanitize_points([point])
        if not clean:
            self._points_dropped += 1
            return
        point = clean[0]

        self._raw_points.append(point)
        self._current_stroke.append(point)
        if len(self._current_stroke) == 1:
            self._stroke_start_time = point.timestamp

    def add_sample(self, x: float, y: float, pressure: float = 1.0, timestamp: Optional[int] = None):
        """Capture-side convenience; stamps the sample with a monotonic ms clock when needed."""
        if timestamp is None:
            timestamp = int(time.monotonic() * 1000)
        self.add_point(RawTouchPoint(x, y, timestamp, pressure))

    def start_stroke(self):
        """Pen-down signal. Ends a pending stroke, or drops a dangling tap."""
        self._ensure_recording()
        if len(self._current_stroke) >= 2:
            self.end_stroke()
        elif self._current_stroke:
            logger.debug("Discarding %d-point tap", len(self._current_stroke))
            del self._raw_points[-len(self._current_stroke):]
            self._current_stroke = []

    def end_stroke(self, stroke_id: Optional[int] = None) -> Optional[StrokeFeatureSummary]:
        """
        Pen-up signal: summarize the buffered stroke.

        Returns None without touching the buffer when fewer than two points
        have been collected.
        """
        if self.state == SessionState.FINALIZED:
            raise RuntimeError("Session already finalized")
        if len(self._current_stroke) < 2:
            return None

        if stroke_id is None:
            stroke_id = len(self._summaries)
        previous_end = self._strokes_history[-1][-1].timestamp if self._strokes_history else None

        points = list(self._current_stroke)
        self._strokes_history.append(points)
        summary = self.extractor.compute(stroke_id, points, self._reference_path, previous_end)
        self._summaries.append(summary)
        self._current_stroke = []

        self.session_logger.log_stroke(summary)
        return summary

    @property
    def stroke_summaries(self) -> tuple:
        return tuple(self._summaries)

    @property
    def reference_path(self) -> Optional[ReferencePath]:
        return self._reference_path

    # Finalization

    async def generate_session_summary(self, session_id: str, letter: str,
                                       context: Optional[Dict[str, Any]] = None) -> SessionFeatureSummary:
        """
        Finalize the session and build its feature summary.

        Args:
            session_id: Identifier assigned by the caller.
            letter: Letter the child was asked to trace.
            context: Device/input metadata copied into the summary.

        Returns:
            SessionFeatureSummary

        Raises:
            RuntimeError: If the session was already finalized.
        """
        if self.state == SessionState.FINALIZED:
            raise RuntimeError("generate_session_summary() already called for this session")
        if len(self._current_stroke) >= 2:
            self.end_stroke()
        if self._reference_path is None and letter:
            self._load_reference(letter)

        config = self.config
        strokes = self._strokes_history
        summaries = self._summaries

        kinematics = self._kinematics()
        shape_metrics = compute_shape_quality(strokes, config)
        tremor = average_tremor([s.tremor for s in summaries], config)
        ml = await self._classify(strokes, letter)
        sequencing = analyze_stroke_order(strokes, self._reference_path, self._expected_strokes)
        pressure = analyze_pressure_modulation(strokes)
        spatial = self._spatial_accuracy()

        similarity = NotComputed("no reference path")
        if self._reference_path is not None and not self._reference_path.is_empty and strokes:
            similarity = compute_orientation_similarity(
                [p for stroke in strokes for p in stroke], self._reference_path.points)

        shape = ShapeBlock(
            metrics=shape_metrics,
            closure_success=shape_metrics.closure_success_rate > 0.8,
            letter_closure_success_rate=analyze_closure_success(strokes, letter, config)['closure_success_rate'],
            path_variance=StatsUtils.variance(spatial.deviation_profile) if isinstance(spatial, SpatialAccuracyMetrics) else 0.0,
            spatial_drift=spatial.spatial_drift if isinstance(spatial, SpatialAccuracyMetrics) else 0.0,
            off_track_events=spatial.off_track_count if isinstance(spatial, SpatialAccuracyMetrics) else 0,
            spatial_accuracy=spatial,
            line_continuity=analyze_line_continuity(strokes, config),
            self_corrections=len(detect_self_corrections(strokes)),
        )

        raw_pressures = [p.pressure for p in self._raw_points]
        graphomotor = GraphomotorBlock(
            tremor_frequency=tremor.frequency,
            tremor_amplitude=tremor.amplitude,
            tremor_power=tremor.power,
            tremor_severity=tremor.severity,
            avg_pressure=StatsUtils.mean([s.avg_pressure for s in summaries]),
            pressure_variance=StatsUtils.variance(raw_pressures) if len(raw_pressures) >= 2 else 0.0,
            pressure_modulation_score=pressure['pressure_modulation_score'],
        )

        orientation = self._orientation(ml, similarity)

        # Similarities and accuracy only count toward risk when the overlay is on
        spatial_computed = isinstance(spatial, SpatialAccuracyMetrics)
        use_similarity = spatial_computed and not isinstance(similarity, NotComputed)
        risk = assess_risk(RiskInputs(
            horizontal_mirror_similarity=similarity.horizontal_mirror_similarity if use_similarity else 0.0,
            rotation_90_similarity=similarity.rotation_90_similarity if use_similarity else 0.0,
            rotation_180_similarity=similarity.rotation_180_similarity if use_similarity else 0.0,
            stroke_order_score=sequencing.stroke_order_score,
            tremor_amplitude=tremor.amplitude,
            spatial_accuracy_score=spatial.accuracy_score if spatial_computed else 100.0,
            pressure_modulation_score=pressure['pressure_modulation_score'],
            mirror_confusion_score=orientation.mirror_confusion_score,
            fluency_ratio=kinematics.fluency_ratio,
            avg_velocity=kinematics.avg_velocity,
        ), config)

        accepted = len(self._raw_points)
        total = accepted + self._points_dropped
        summary = SessionFeatureSummary(
            version=config.summary_version,
            session_id=session_id,
            letter=letter,
            timestamp=datetime.datetime.now(datetime.timezone.utc).isoformat(),
            overview=SessionOverview(
                is_correct=ml.is_correct,
                completion_time_ms=self._completion_time(),
                score=ml.confidence * 100,
                status='completed' if summaries else 'empty',
            ),
            data_quality=DataQuality(
                sampling_rate_hz=StatsUtils.mean([s.sampling_rate_hz for s in summaries]),
                total_samples=accepted,
                points_dropped=self._points_dropped,
                completeness_score=accepted / total if total else 1.0,
            ),
            kinematics=kinematics,
            dynamics=self._dynamics(),
            graphomotor=graphomotor,
            shape=shape,
            sequencing=sequencing,
            orientation=orientation,
            risk=risk,
            ml=ml,
            context=dict(context or {}),
            strokes=list(summaries),
        )

        self.state = SessionState.FINALIZED
        self.session_logger.log_session(summary)
        return summary

    def _completion_time(self) -> float:
        if not self._raw_points:
            return 0.0
        return float(self._raw_points[-1].timestamp - self._raw_points[0].timestamp)

    def _kinematics(self) -> KinematicsBlock:
        """Smoothed velocity profile over the flattened stroke history."""
        flat = [p for stroke in self._strokes_history for p in stroke]
        raw_velocities = []
        for i, point in enumerate(flat):
            if i == 0:
                raw_velocities.append(0.0)
                continue
            dt_s = (point.timestamp - flat[i - 1].timestamp) / 1000.0
            dist = GeometryUtils.calculate_distance(flat[i - 1], point)
            raw_velocities.append(dist / dt_s if dt_s > 0 else 0.0)

        smoothed = savitzky_golay_filter(raw_velocities, self.config.smoothing_window)
        slope = 0.0
        if len(smoothed) >= 10:
            slope = StatsUtils.linear_regression(list(range(len(smoothed))), smoothed)['slope']

        summaries = self._summaries
        completion = self._completion_time()
        time_in_motion = sum(s.stroke_duration_ms for s in summaries)
        pauses = sum(s.pause_count for s in summaries)

        return KinematicsBlock(
            avg_velocity=StatsUtils.mean(smoothed),
            velocity_variance=StatsUtils.variance(smoothed),
            velocity_cov=StatsUtils.coefficient_of_variation(smoothed),
            peak_velocity=max(smoothed) if smoothed else 0.0,
            velocity_peaks=sum(s.velocity_peaks for s in summaries),
            velocity_valleys=pauses + max(0, len(summaries) - 1),
            time_in_motion_ms=time_in_motion,
            time_paused_ms=sum(s.pause_duration_ms for s in summaries),
            fluency_ratio=time_in_motion / completion if completion > 0 else 0.0,
            speed_degradation_slope=slope,
        )

    def _dynamics(self) -> DynamicsBlock:
        summaries = self._summaries
        if not summaries:
            return DynamicsBlock()
        max_acc = max(s.max_acceleration for s in summaries)
        jerk = StatsUtils.mean([s.normalized_jerk for s in summaries])
        return DynamicsBlock(
            max_acceleration=max_acc,
            avg_jerk=jerk,
            normalized_jerk=jerk,
            acceleration_symmetry=1 - summaries[0].max_acceleration / (max_acc if max_acc > 0 else 1),
            ballistic_movements=sum(1 for s in summaries if s.is_ballistic),
        )

    def _spatial_accuracy(self):
        if not self.config.reference_overlay_enabled:
            return NotComputed("reference overlay disabled")
        if self._reference_path is None or self._reference_path.is_empty:
            return NotComputed("no reference path")
        flat = [p for stroke in self._strokes_history for p in stroke]
        return compute_spatial_accuracy(flat, self._reference_path, None, self.config)

    def _orientation(self, ml: ClassificationResult, similarity) -> OrientationBlock:
        summaries = self._summaries
        stroke_reversals = sum(s.reversal_count for s in summaries)
        reversal_type = _REVERSAL_NAMES.get(ml.reversal_type.value) if ml.reversal_detected else None
        if reversal_type is None and stroke_reversals > 0:
            reversal_type = 'rotation'

        return OrientationBlock(
            micropause_count=sum(s.pause_count for s in summaries),
            direction_reversal_count=stroke_reversals,
            reversal_detected=ml.reversal_detected or stroke_reversals > 0,
            reversal_type=reversal_type,
            mirror_confusion_score=0.9 if ml.reversal_detected else 0.1,
            similarity=similarity,
        )

    async def _classify(self, strokes: List[List[RawTouchPoint]], letter: str) -> ClassificationResult:
        """Ask the classifier for a verdict; any failure yields the placeholder."""
        if self.classifier is None:
            return placeholder_classification(letter)
        if not strokes:
            logger.info("No strokes recorded; skipping classification")
            return placeholder_classification(letter)

        xy_strokes = [[Point(p.x, p.y) for p in stroke] for stroke in strokes]
        try:
            result = await asyncio.wait_for(self._call_classifier(xy_strokes, letter),
                                            timeout=self.config.classifier_timeout_s)
        except asyncio.TimeoutError:
            logger.warning("Classifier timed out after %.1fs for letter %s",
                           self.config.classifier_timeout_s, letter)
            return placeholder_classification(letter)
        except Exception as e:
            self.session_logger.log_classifier_failure(letter, e)
            return placeholder_classification(letter)

        if isinstance(result, ClassificationResult):
            return result
        if isinstance(result, Mapping):
            try:
                return ClassificationResult.from_mapping(result, letter, self.config.max_top_predictions)
            except (TypeError, ValueError) as e:
                self.session_logger.log_classifier_failure(letter, e)
                return placeholder_classification(letter)

        self.session_logger.log_classifier_failure(letter)
        return placeholder_classification(letter)

    async def _call_classifier(self, strokes, letter):
        classify = self.classifier.classify
        if asyncio.iscoroutinefunction(classify):
            return await classify(strokes, letter)
        result = await asyncio.to_thread(classify, strokes, letter)
        if asyncio.iscoroutine(result):
            result = await result
        return result
