import math

import pytest

from tracing_analytics.config import DEFAULT_CONFIG
from tracing_analytics.features import (
    TremorSeverity,
    classify_tremor_severity,
    compute_stroke_features,
    count_direction_reversals,
    detect_tremor,
)
from tracing_analytics.utils import NotComputed, RawTouchPoint


def _line_stroke(start, end, count, duration_ms, t0=0):
    points = []
    for i in range(count):
        f = i / (count - 1)
        points.append(RawTouchPoint(
            start[0] + f * (end[0] - start[0]),
            start[1] + f * (end[1] - start[1]),
            t0 + f * duration_ms,
        ))
    return points


def _hairpin(step=5.0, leg=10, angle_deg=170.0, dt=10):
    """Move right for ``leg`` steps, then turn by ``angle_deg`` and move back."""
    points = [RawTouchPoint(i * step, 0.0, i * dt) for i in range(leg + 1)]
    dx = step * math.cos(math.radians(angle_deg))
    dy = step * math.sin(math.radians(angle_deg))
    x, y = points[-1].x, points[-1].y
    for k in range(1, leg + 1):
        points.append(RawTouchPoint(x + k * dx, y + k * dy, (leg + k) * dt))
    return points


def test_straight_line_stroke():
    points = _line_stroke((0, 0), (100, 0), 50, 1000)
    summary = compute_stroke_features(0, points)

    assert summary.point_count == 50
    assert summary.stroke_duration_ms == pytest.approx(1000.0)
    assert summary.path_length == pytest.approx(100.0)
    assert summary.avg_velocity == pytest.approx(100.0)
    assert summary.peak_velocity == pytest.approx(100.0)
    assert summary.pause_count == 0
    assert summary.reversal_count == 0
    assert summary.is_direction_consistent
    assert summary.tremor.amplitude == pytest.approx(0.0, abs=1e-9)
    assert summary.tremor.severity == TremorSeverity.NONE
    assert summary.sampling_rate_hz == pytest.approx(50.0)


def test_diagonal_line_has_no_tremor_or_reversals():
    points = _line_stroke((10, 10), (210, 160), 40, 800)
    summary = compute_stroke_features(3, points)
    assert summary.stroke_id == 3
    assert summary.reversal_count == 0
    assert summary.tremor.amplitude == pytest.approx(0.0, abs=1e-9)
    assert not summary.tremor.has_significant_tremor


def test_sharp_direction_change_counts_one_reversal():
    assert count_direction_reversals(_hairpin()) == 1


def test_short_stroke_has_no_reversals():
    assert count_direction_reversals(_hairpin(leg=3)) == 0


@pytest.mark.parametrize("scale", [0.25, 1.0, 7.5])
def test_reversal_count_ignores_time_scaling(scale):
    points = _hairpin() + [RawTouchPoint(p.x, p.y, p.timestamp + 210) for p in _hairpin()]
    scaled = [RawTouchPoint(p.x, p.y, p.timestamp * scale) for p in points]
    assert count_direction_reversals(scaled) == count_direction_reversals(points)


def test_gap_over_threshold_counts_one_pause():
    points = _line_stroke((0, 0), (50, 0), 10, 90)
    late = _line_stroke((55, 0), (100, 0), 10, 90, t0=90 + 200)
    summary = compute_stroke_features(0, points + late)
    assert summary.pause_count == 1
    assert summary.pause_duration_ms == pytest.approx(200.0)
    assert summary.avg_pause_duration_ms == pytest.approx(200.0)
    assert summary.velocity_valleys == 1


def test_gap_at_threshold_is_not_a_pause():
    points = [RawTouchPoint(0, 0, 0), RawTouchPoint(1, 0, 150), RawTouchPoint(2, 0, 160)]
    assert compute_stroke_features(0, points).pause_count == 0


def test_velocity_is_zero_for_repeated_timestamps():
    points = [RawTouchPoint(0, 0, 0), RawTouchPoint(5, 0, 0), RawTouchPoint(10, 0, 100)]
    summary = compute_stroke_features(0, points)
    # first pair has no elapsed time, second covers 5 px in 100 ms
    assert summary.peak_velocity == pytest.approx(50.0)
    assert summary.avg_velocity == pytest.approx(100.0)


def test_identical_points_yield_zero_metrics():
    points = [RawTouchPoint(5, 5, i * 10) for i in range(20)]
    summary = compute_stroke_features(0, points)
    assert summary.avg_velocity == 0.0
    assert summary.max_acceleration == 0.0
    assert summary.total_jerk == 0.0
    assert summary.reversal_count == 0
    assert summary.tremor.amplitude == 0.0
    assert summary.ballistic_score == 0.0


def test_initiation_delay_uses_previous_stroke_end():
    points = _line_stroke((0, 0), (10, 0), 5, 100, t0=1000)
    summary = compute_stroke_features(1, points, previous_stroke_end=700)
    assert summary.initiation_delay_ms == pytest.approx(300.0)


def test_spatial_not_computed_with_overlay_disabled():
    summary = compute_stroke_features(0, _line_stroke((0, 0), (10, 0), 5, 100))
    assert isinstance(summary.spatial, NotComputed)
    assert summary.to_dict()['spatial'] == {'not_computed': True, 'reason': 'reference overlay disabled'}


def test_tremor_needs_minimum_points():
    metrics = detect_tremor(_line_stroke((0, 0), (10, 10), 9, 100))
    assert metrics.power == 0.0
    assert metrics.frequency == 0.0


def test_oscillating_stroke_shows_tremor():
    points = []
    for i in range(120):
        t = i * 10
        points.append(RawTouchPoint(i * 2.0, 4.0 * math.sin(2 * math.pi * 6 * t / 1000.0), t))
    metrics = detect_tremor(points)
    assert metrics.amplitude > 0.5
    assert 2.0 <= metrics.frequency <= 12.0
    assert metrics.power > 0


@pytest.mark.parametrize("power,expected", [
    (0.0, TremorSeverity.NONE),
    (10.0, TremorSeverity.NONE),
    (10.5, TremorSeverity.MILD),
    (20.5, TremorSeverity.MODERATE),
    (30.5, TremorSeverity.SEVERE),
])
def test_tremor_severity_steps(power, expected):
    assert classify_tremor_severity(power) == expected


def test_custom_pause_threshold():
    config = DEFAULT_CONFIG.replace(pause_threshold_ms=50.0)
    points = [RawTouchPoint(0, 0, 0), RawTouchPoint(1, 0, 60), RawTouchPoint(2, 0, 70)]
    assert compute_stroke_features(0, points, config=config).pause_count == 1


def _accelerating(position, count, dt=10):
    return [RawTouchPoint(position(i), 0.0, i * dt) for i in range(count)]


def test_constant_acceleration_stroke_is_ballistic():
    # x = 0.5 i^2 at 10 ms spacing: velocity ramps by 100 px/s each sample
    points = _accelerating(lambda i: 0.5 * i * i, 20)
    summary = compute_stroke_features(0, points)
    assert summary.avg_velocity == pytest.approx(950.0)
    assert summary.max_acceleration == pytest.approx(10000.0)
    assert summary.total_jerk == pytest.approx(0.0, abs=1e-3)
    assert summary.ballistic_score == pytest.approx(95.0)
    assert summary.is_ballistic


@pytest.mark.parametrize("threshold,expected", [(50.0, True), (100.0, False)])
def test_ballistic_threshold_is_configurable(threshold, expected):
    config = DEFAULT_CONFIG.replace(ballistic_ratio_threshold=threshold)
    points = _accelerating(lambda i: 0.5 * i * i, 20)
    assert compute_stroke_features(0, points, config=config).is_ballistic is expected


def test_increasing_acceleration_accumulates_jerk():
    # x = i^3 / 10: acceleration grows by 6000 px/s^2 per sample
    points = _accelerating(lambda i: i ** 3 / 10.0, 11)
    summary = compute_stroke_features(0, points)
    assert summary.max_acceleration == pytest.approx(54000.0)
    assert summary.total_jerk == pytest.approx(4.8e6)
    assert summary.normalized_jerk == pytest.approx(48000.0)
    assert summary.ballistic_score == pytest.approx(1000.0 * 1000.0 / 54000.0)
