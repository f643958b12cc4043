import math

import pytest

from tracing_analytics.utils import (
    GeometryUtils,
    Point,
    StatsUtils,
    calculate_hu_moments,
    dominant_frequency,
    gaussian_smooth,
    low_pass_filter,
    savitzky_golay_filter,
    zero_crossing_rate,
    autocorrelation,
)
from tracing_analytics.utils.geometry import DataValidator
from tracing_analytics.utils.records import RawTouchPoint


def test_distance_and_path_length():
    assert GeometryUtils.calculate_distance(Point(0, 0), Point(3, 4)) == pytest.approx(5.0)
    points = [Point(0, 0), Point(3, 4), Point(3, 10)]
    assert GeometryUtils.calculate_path_length(points) == pytest.approx(11.0)
    assert GeometryUtils.calculate_path_length([Point(1, 1)]) == 0.0


def test_point_to_segment_distance_clamps_to_endpoints():
    start, end = Point(0, 0), Point(10, 0)
    assert GeometryUtils.point_to_segment_distance(Point(5, 5), start, end) == pytest.approx(5.0)
    assert GeometryUtils.point_to_segment_distance(Point(15, 0), start, end) == pytest.approx(5.0)
    assert GeometryUtils.point_to_segment_distance(Point(3, 4), start, start) == pytest.approx(5.0)


def test_angles():
    right_angle = GeometryUtils.angle_between(Point(1, 0), Point(0, 0), Point(0, 1))
    assert right_angle == pytest.approx(math.pi / 2)
    straight = GeometryUtils.turn_angle(Point(0, 0), Point(1, 0), Point(2, 0))
    assert straight == pytest.approx(0.0)
    assert GeometryUtils.vector_angle(0, 0, 1, 0) == 0.0


def test_perpendicular_normal():
    nx, ny = GeometryUtils.perpendicular_normal(Point(0, 0), Point(2, 0))
    assert nx == pytest.approx(0.0)
    assert ny == pytest.approx(1.0)
    assert GeometryUtils.perpendicular_normal(Point(1, 1), Point(1, 1)) == (0.0, 1.0)


def test_bezier_sampling_hits_endpoints():
    p0, p1, p2, p3 = Point(0, 0), Point(0, 10), Point(10, 10), Point(10, 0)
    samples = GeometryUtils.sample_bezier(p0, p1, p2, p3, 10)
    assert len(samples) == 11
    assert samples[0] == p0
    assert samples[-1] == p3


def test_convex_hull_and_area():
    points = [Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10), Point(5, 5)]
    hull = GeometryUtils.convex_hull(points)
    assert len(hull) == 4
    assert GeometryUtils.polygon_area(hull) == pytest.approx(100.0)


def test_hausdorff_distance():
    a = [Point(0, 0), Point(1, 0)]
    assert GeometryUtils.hausdorff_distance(a, a) == pytest.approx(0.0)
    assert GeometryUtils.hausdorff_distance(a, [Point(0, 3), Point(1, 3)]) == pytest.approx(3.0)
    assert math.isinf(GeometryUtils.hausdorff_distance(a, []))


def test_mirror_and_rotate_about_bbox_center():
    points = [Point(0, 0), Point(10, 0), Point(10, 4)]
    mirrored = GeometryUtils.mirror_horizontal(points)
    assert mirrored[0] == Point(10, 0)
    rotated = GeometryUtils.rotate_points(points, math.pi)
    assert rotated[0].x == pytest.approx(10.0)
    assert rotated[0].y == pytest.approx(4.0)


def test_sanitize_points_drops_non_finite_and_clamps_pressure():
    points = [
        RawTouchPoint(0, 0, 0, 0.5),
        RawTouchPoint(float('nan'), 0, 10, 0.5),
        RawTouchPoint(1, 1, 20, 3.0),
    ]
    clean = DataValidator.sanitize_points(points)
    assert len(clean) == 2
    assert clean[1].pressure == 1.0


def test_stats_utils():
    assert StatsUtils.mean([]) == 0.0
    assert StatsUtils.variance([1, 2, 3, 4]) == pytest.approx(1.25)
    assert StatsUtils.coefficient_of_variation([0, 0]) == 0.0
    fit = StatsUtils.linear_regression([0, 1, 2, 3], [1, 3, 5, 7])
    assert fit['slope'] == pytest.approx(2.0)
    assert fit['intercept'] == pytest.approx(1.0)
    assert fit['r2'] == pytest.approx(1.0)
    assert StatsUtils.linear_regression([1, 1], [2, 3])['slope'] == 0.0


def test_find_peaks():
    data = [0, 1, 5, 1, 0, 0, 1, 6, 1, 0]
    assert StatsUtils.find_peaks(data, 0, 1) == [2, 7]


def test_hu_moments_are_translation_invariant():
    shape = [Point(0, 0), Point(4, 0), Point(4, 2), Point(0, 2), Point(1, 1)]
    shifted = [Point(p.x + 50, p.y - 20) for p in shape]
    for a, b in zip(calculate_hu_moments(shape), calculate_hu_moments(shifted)):
        assert a == pytest.approx(b, abs=1e-9)
    assert calculate_hu_moments([]) == [0.0] * 7


def test_gaussian_smooth_preserves_length_and_constants():
    assert gaussian_smooth([]) == []
    smoothed = gaussian_smooth([2.0, 2.0, 2.0], sigma=2.0)
    assert len(smoothed) == 3
    assert smoothed == pytest.approx([2.0, 2.0, 2.0])


def test_savitzky_golay_filter():
    assert savitzky_golay_filter([3.0] * 7, 4) == pytest.approx([3.0] * 7)
    assert savitzky_golay_filter([0, 0, 9, 0, 0], 3)[2] == pytest.approx(3.0)
    with pytest.raises(ValueError):
        savitzky_golay_filter([1.0], 0)


def test_dominant_frequency_finds_sine():
    fs = 60.0
    signal = [math.sin(2 * math.pi * 5 * i / fs) for i in range(120)]
    freq, power = dominant_frequency(signal, fs, (2, 12))
    assert freq == pytest.approx(5.0)
    assert power > 0


def test_zero_crossing_and_autocorrelation():
    assert zero_crossing_rate([1, -1, 1, -1]) == pytest.approx(1.0)
    assert zero_crossing_rate([1]) == 0.0
    assert autocorrelation([1, 2, 3, 4], 0) == pytest.approx(1.0)
    assert autocorrelation([5, 5, 5], 1) == 0.0


def test_curvature_of_circle_through_three_points():
    assert GeometryUtils.calculate_curvature(Point(5, 0), Point(0, 5), Point(-5, 0)) == pytest.approx(0.2)
    assert GeometryUtils.calculate_curvature(Point(0, 0), Point(1, 0), Point(2, 0)) == 0.0
    assert GeometryUtils.calculate_curvature(Point(0, 0), Point(0, 0), Point(2, 0)) == 0.0


def test_percentile_normalize_and_valleys():
    assert StatsUtils.percentile([1, 2, 3, 4], 50) == pytest.approx(2.5)
    assert StatsUtils.percentile([], 90) == 0.0
    assert StatsUtils.normalize(5, 0, 10) == pytest.approx(0.5)
    assert StatsUtils.normalize(20, 0, 10) == 1.0
    assert StatsUtils.normalize(1, 1, 1) == 0.0
    data = [3, 2, 1, 0, 1, 2, 3, 2, 1, 0, 1, 2, 3]
    assert StatsUtils.find_valleys(data, 2) == [3, 9]


def test_low_pass_filter_smooths_a_step():
    assert low_pass_filter([2.0] * 5, 1.0, 10.0) == pytest.approx([2.0] * 5)
    filtered = low_pass_filter([0.0, 1.0, 1.0, 1.0], 1.0, 10.0)
    assert filtered == sorted(filtered)
    assert 0.0 < filtered[-1] < 1.0
    assert low_pass_filter([], 1.0, 10.0) == []
