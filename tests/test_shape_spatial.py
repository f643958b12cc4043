import math

import pytest

from tracing_analytics.features import (
    compute_orientation_similarity,
    compute_shape_quality,
    compute_spatial_accuracy,
)
from tracing_analytics.reference import PathSegment, generate_ideal_path
from tracing_analytics.utils import Point, RawTouchPoint


def _polygon(sides, radius=50.0, cx=200.0, cy=200.0):
    points = []
    for k in range(sides + 1):
        angle = 2 * math.pi * k / sides
        points.append(RawTouchPoint(cx + radius * math.cos(angle), cy + radius * math.sin(angle), k * 10))
    return points


def _horizontal(y, count=21, x0=0.0, x1=100.0, t0=0):
    return [RawTouchPoint(x0 + (x1 - x0) * i / (count - 1), y, t0 + i * 10) for i in range(count)]


@pytest.mark.parametrize("sides", [20, 36, 72])
def test_regular_polygon_compactness_approaches_one(sides):
    metrics = compute_shape_quality([_polygon(sides)])
    assert metrics.compactness > 0.95
    assert metrics.compactness <= 1.0
    assert metrics.closure_success_rate == 1.0
    # every vertex turns by 360/sides degrees, well under the corner limit
    assert metrics.corner_count == sides - 1
    assert metrics.avg_corner_sharpness == pytest.approx(1 - 4 / sides)
    assert metrics.curve_smoothness == pytest.approx(4 / sides)
    assert metrics.mean_curvature == pytest.approx(1 / 50.0)


def test_straight_line_compactness_is_zero():
    metrics = compute_shape_quality([_horizontal(0.0)])
    assert metrics.compactness == 0.0
    assert metrics.aspect_ratio == 1.0
    assert metrics.mean_curvature == 0.0
    assert metrics.endpoint_count == 2


def test_empty_shape_is_neutral():
    metrics = compute_shape_quality([])
    assert metrics.compactness == 0.0
    assert metrics.closure_success_rate == 1.0


def _bend(turn_deg, length=20.0):
    heading = math.radians(turn_deg)
    return [
        RawTouchPoint(0, 0, 0),
        RawTouchPoint(length, 0, 10),
        RawTouchPoint(length + length * math.cos(heading), length * math.sin(heading), 20),
    ]


def test_gentle_turn_is_a_corner():
    metrics = compute_shape_quality([_bend(30)])
    assert metrics.corner_count == 1
    assert metrics.avg_corner_sharpness == pytest.approx(2 / 3)
    assert metrics.curve_smoothness == pytest.approx(1 / 3)


def test_hairpin_turn_is_not_a_corner():
    metrics = compute_shape_quality([_bend(170)])
    assert metrics.corner_count == 0
    assert metrics.curve_smoothness == 1.0


def test_symmetry_and_junctions():
    crossbar = _horizontal(0.0)
    stem = [RawTouchPoint(50.0, float(y), 500 + y) for y in range(0, 101, 5)]
    metrics = compute_shape_quality([crossbar, stem])
    assert metrics.junction_count == 1
    assert metrics.endpoint_count == 4

    balanced = compute_shape_quality([[RawTouchPoint(-1, 0, 0), RawTouchPoint(1, 0, 10)]])
    assert balanced.symmetry_score == 1.0


def test_open_stroke_fails_closure():
    arc = _polygon(24)[:13]
    assert compute_shape_quality([arc]).closure_success_rate == 0.0


def test_spatial_accuracy_against_line():
    path = generate_ideal_path([[PathSegment.line(0, 0, 100, 0)]], 20)
    metrics = compute_spatial_accuracy(_horizontal(10.0), path)
    assert metrics.mean_deviation == pytest.approx(10.0)
    assert metrics.max_deviation == pytest.approx(10.0)
    assert metrics.off_track_events == []
    assert metrics.accuracy_score == pytest.approx(90.0)
    assert metrics.spatial_drift == pytest.approx(0.0)


def test_off_track_event_and_recovery():
    path = generate_ideal_path([[PathSegment.line(0, 0, 100, 0)]], 20)
    ys = [0, 0, 40, 45, 40, 0, 0, 0]
    points = [RawTouchPoint(10.0 * i, y, i * 10) for i, y in enumerate(ys)]
    metrics = compute_spatial_accuracy(points, path)

    assert metrics.off_track_count == 1
    event = metrics.off_track_events[0]
    assert event.start_timestamp == 20
    assert event.peak_deviation == pytest.approx(45.0)
    assert event.location == Point(30, 45)
    assert event.duration_ms == pytest.approx(20.0)
    assert event.recovery_time_ms == pytest.approx(10.0)
    assert metrics.off_track_duration_ms == pytest.approx(20.0)


def test_spatial_drift_grows_when_tracing_wanders():
    path = generate_ideal_path([[PathSegment.line(0, 0, 100, 0)]], 20)
    points = [RawTouchPoint(5.0 * i, i * 0.5, i * 10) for i in range(20)]
    assert compute_spatial_accuracy(points, path).spatial_drift > 0


def test_spatial_accuracy_with_empty_inputs():
    path = generate_ideal_path([[PathSegment.line(0, 0, 100, 0)]], 20)
    assert compute_spatial_accuracy([], path).accuracy_score == 100.0
    assert compute_spatial_accuracy(_horizontal(0.0), generate_ideal_path([], 5)).accuracy_score == 100.0


def test_spatial_accuracy_restricted_to_stroke():
    path = generate_ideal_path([
        [PathSegment.line(0, 0, 100, 0)],
        [PathSegment.line(0, 100, 100, 100)],
    ], 20)
    on_second = _horizontal(100.0)
    assert compute_spatial_accuracy(on_second, path).mean_deviation == pytest.approx(0.0)
    assert compute_spatial_accuracy(on_second, path, stroke_index=0).mean_deviation == pytest.approx(100.0)


def test_orientation_similarity_of_an_l_shape():
    reference = [Point(0, y) for y in range(0, 101, 10)] + [Point(x, 100) for x in range(10, 61, 10)]
    metrics = compute_orientation_similarity(reference, reference)
    assert metrics.identity_similarity == pytest.approx(1.0)
    assert metrics.horizontal_mirror_similarity < 1.0
    assert metrics.rotation_180_similarity < 1.0


def test_orientation_similarity_detects_mirror():
    reference = [Point(0, y) for y in range(0, 101, 10)] + [Point(x, 100) for x in range(10, 61, 10)]
    mirrored = [Point(60 - p.x, p.y) for p in reference]
    metrics = compute_orientation_similarity(mirrored, reference)
    assert metrics.horizontal_mirror_similarity == pytest.approx(1.0)
    assert metrics.identity_similarity < metrics.horizontal_mirror_similarity


def test_orientation_similarity_degenerate():
    metrics = compute_orientation_similarity([Point(1, 1)], [Point(0, 0)])
    assert metrics.identity_similarity == 0.0
