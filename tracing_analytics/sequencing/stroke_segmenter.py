"""
Stroke segmentation and sequencing.

Splits a flat touch stream into strokes at pen lifts (timestamp gaps), then
compares the strokes against the reference letter: how many were drawn,
whether they were drawn in the taught order and direction, and how the child
moved between them.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..config.settings import AnalyticsConfig, DEFAULT_CONFIG
from ..reference.path_generator import ReferencePath, find_closest_path_point
from ..utils.geometry import GeometryUtils
from ..utils.math_utils import StatsUtils

logger = logging.getLogger(__name__)


@dataclass
class SegmentedStroke:
    """A run of samples between two pen lifts."""
    stroke_id: int
    start_index: int
    end_index: int
    points: List = field(default_factory=list)

    @property
    def duration_s(self) -> float:
        if len(self.points) < 2:
            return 0.0
        return (self.points[-1].timestamp - self.points[0].timestamp) / 1000.0

    @property
    def length(self) -> float:
        return GeometryUtils.calculate_path_length(self.points)


@dataclass
class StrokeSequencing:
    stroke_count_expected: int = 0
    stroke_count_actual: int = 0
    extra_strokes: int = 0
    missing_strokes: int = 0
    stroke_order_correctness: List[bool] = field(default_factory=list)
    stroke_direction_correctness: List[bool] = field(default_factory=list)
    stroke_order_score: float = 0.0
    stroke_sequence_correct: bool = False
    stroke_sequence_violations: List[str] = field(default_factory=list)
    lift_off_count: int = 0
    planning_latencies_s: List[float] = field(default_factory=list)
    avg_inter_stroke_latency_s: float = 0.0

    def to_dict(self):
        return {
            'stroke_count_expected': self.stroke_count_expected,
            'stroke_count_actual': self.stroke_count_actual,
            'extra_strokes': self.extra_strokes,
            'missing_strokes': self.missing_strokes,
            'stroke_order_correctness': list(self.stroke_order_correctness),
            'stroke_direction_correctness': list(self.stroke_direction_correctness),
            'stroke_order_score': self.stroke_order_score,
            'stroke_sequence_correct': self.stroke_sequence_correct,
            'stroke_sequence_violations': list(self.stroke_sequence_violations),
            'lift_off_count': self.lift_off_count,
            'planning_latencies_s': list(self.planning_latencies_s),
            'avg_inter_stroke_latency_s': self.avg_inter_stroke_latency_s,
        }


def _points_of(stroke) -> Sequence:
    return stroke.points if hasattr(stroke, 'points') else stroke


def detect_strokes(points: Sequence, lift_off_gap_ms: float = 200.0, min_points: int = 2) -> List[SegmentedStroke]:
    """
    Split a touch stream into strokes wherever consecutive timestamps are
    more than ``lift_off_gap_ms`` apart.

    Strokes with fewer than ``min_points`` samples are accidental taps and
    are dropped; stroke ids stay consecutive over the kept strokes.
    """
    if not points:
        return []

    strokes: List[SegmentedStroke] = []
    current = [points[0]]
    start_index = 0

    def flush(end_index: int):
        if len(current) >= min_points:
            strokes.append(SegmentedStroke(len(strokes), start_index, end_index, list(current)))

    for i in range(1, len(points)):
        if points[i].timestamp - points[i - 1].timestamp > lift_off_gap_ms:
            flush(i - 1)
            current = [points[i]]
            start_index = i
        else:
            current.append(points[i])

    flush(len(points) - 1)
    return strokes


def inter_stroke_latencies(strokes: Sequence) -> List[float]:
    """Seconds between the end of each stroke and the start of the next."""
    latencies = []
    for i in range(1, len(strokes)):
        prev_end = _points_of(strokes[i - 1])[-1].timestamp
        current_start = _points_of(strokes[i])[0].timestamp
        latencies.append((current_start - prev_end) / 1000.0)
    return latencies


def analyze_stroke_order(strokes: Sequence, reference_path: Optional[ReferencePath],
                         expected_stroke_count: int) -> StrokeSequencing:
    """
    Compare drawn strokes against the reference stroke order.

    Each stroke's first sample is matched to the closest reference sample,
    whose stroke index is the stroke the child was actually drawing. Stroke
    ``i`` is in order when that index is ``i``. Without a reference path
    every stroke is taken to be in order.

    Args:
        strokes: Drawn strokes (SegmentedStroke or plain lists of samples).
        reference_path: ReferencePath of the expected letter, or None.
        expected_stroke_count: Number of strokes the letter is taught with.

    Returns:
        StrokeSequencing
    """
    stroke_points = [_points_of(s) for s in strokes if len(_points_of(s)) > 0]
    actual = len(stroke_points)
    expected = max(0, int(expected_stroke_count))
    has_reference = reference_path is not None and not reference_path.is_empty

    order: List[bool] = []
    direction: List[bool] = []
    violations: List[str] = []

    for i, points in enumerate(stroke_points):
        if not has_reference:
            order.append(True)
            direction.append(True)
            continue

        _, _, start_index = find_closest_path_point(points[0], reference_path)
        _, _, end_index = find_closest_path_point(points[-1], reference_path)
        reference_stroke = reference_path.stroke_index_for(start_index)

        in_order = reference_stroke == i
        order.append(in_order)
        if not in_order:
            violations.append(f"Stroke {i + 1} should be stroke {reference_stroke + 1}")
        direction.append(end_index > start_index)

    correct = sum(1 for ok in order if ok)
    score = 0.0 if actual == 0 else correct / max(actual, expected)
    latencies = inter_stroke_latencies(stroke_points)

    return StrokeSequencing(
        stroke_count_expected=expected,
        stroke_count_actual=actual,
        extra_strokes=max(0, actual - expected),
        missing_strokes=max(0, expected - actual),
        stroke_order_correctness=order,
        stroke_direction_correctness=direction,
        stroke_order_score=score,
        stroke_sequence_correct=actual > 0 and actual == expected and all(order),
        stroke_sequence_violations=violations,
        lift_off_count=max(0, actual - 1),
        planning_latencies_s=latencies,
        avg_inter_stroke_latency_s=StatsUtils.mean(latencies),
    )


def score_sequencing(points: Sequence, reference_path: Optional[ReferencePath], expected_stroke_count: int,
                     config: AnalyticsConfig = DEFAULT_CONFIG) -> StrokeSequencing:
    """Segment a flat touch stream and score its stroke order."""
    strokes = detect_strokes(points, config.lift_off_gap_ms, config.min_stroke_points)
    return analyze_stroke_order(strokes, reference_path, expected_stroke_count)


def detect_self_corrections(strokes: Sequence) -> List[Dict[str, float]]:
    """
    Find backtracking samples inside strokes.

    A sample is a self-correction when it is closer to the sample two or three
    steps back than half its distance to the previous sample. Strokes with
    fewer than five samples are ignored.
    """
    events = []
    for stroke_id, stroke in enumerate(strokes):
        points = _points_of(stroke)
        if len(points) < 5:
            continue
        for i in range(3, len(points)):
            current = points[i]
            to_prev = GeometryUtils.calculate_distance(current, points[i - 1])
            to_prev2 = GeometryUtils.calculate_distance(current, points[i - 2])
            to_prev3 = GeometryUtils.calculate_distance(current, points[i - 3])
            if to_prev2 < to_prev * 0.5 or to_prev3 < to_prev * 0.5:
                events.append({'stroke_id': getattr(stroke, 'stroke_id', stroke_id),
                               'timestamp': current.timestamp})
    return events


def analyze_line_continuity(strokes: Sequence, config: AnalyticsConfig = DEFAULT_CONFIG) -> Dict[str, float]:
    """
    Gaps and overlaps between consecutive strokes.

    A transition is a gap when the next stroke starts more than
    ``continuity_gap_px`` from where the last one ended, and an overlap when
    it starts closer than ``continuity_overlap_px``. Gaps weigh double.
    """
    if not strokes:
        return {'endpoint_count': 0, 'junction_count': 0, 'gap_count': 0,
                'overlap_count': 0, 'line_continuity_score': 100.0}

    gaps = 0
    overlaps = 0
    for i in range(len(strokes) - 1):
        end = _points_of(strokes[i])[-1]
        start = _points_of(strokes[i + 1])[0]
        gap = GeometryUtils.calculate_distance(end, start)
        if gap > config.continuity_gap_px:
            gaps += 1
        elif gap < config.continuity_overlap_px:
            overlaps += 1

    transitions = len(strokes) - 1
    score = 100.0
    if transitions > 0:
        score = max(0.0, 100 - (gaps * 2 + overlaps) / transitions * 100)

    return {
        'endpoint_count': len(strokes) * 2,
        'junction_count': overlaps,
        'gap_count': gaps,
        'overlap_count': overlaps,
        'line_continuity_score': score,
    }


def analyze_closure_success(strokes: Sequence, letter: Optional[str],
                            config: AnalyticsConfig = DEFAULT_CONFIG) -> Dict[str, object]:
    """Closure rate for letters with enclosed counters (A, B, D, O, P, Q, R); 1.0 for the rest."""
    if not letter or letter.upper() not in config.closed_letters:
        return {'closure_success_rate': 1.0, 'closure_gaps': []}

    gaps = []
    closed = 0
    for stroke in strokes:
        points = _points_of(stroke)
        if len(points) < config.letter_closure_min_points:
            continue
        gap = GeometryUtils.calculate_distance(points[0], points[-1])
        gaps.append(gap)
        if gap < config.letter_closure_gap_px:
            closed += 1

    rate = closed / len(gaps) if gaps else 1.0
    return {'closure_success_rate': rate, 'closure_gaps': gaps}


def analyze_pressure_modulation(strokes: Sequence) -> Dict[str, float]:
    """Pressure statistics across all samples; steadier pressure scores higher."""
    pressures = [p.pressure for stroke in strokes for p in _points_of(stroke)]
    if not pressures:
        return {'pressure_mean': 0.0, 'pressure_variance': 0.0,
                'pressure_range': 0.0, 'pressure_modulation_score': 0.0}

    cov = StatsUtils.coefficient_of_variation(pressures)
    return {
        'pressure_mean': StatsUtils.mean(pressures),
        'pressure_variance': StatsUtils.variance(pressures),
        'pressure_range': max(pressures) - min(pressures),
        'pressure_modulation_score': max(0.0, 100 - cov * 100),
    }
