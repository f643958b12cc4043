import pytest

from tracing_analytics.reference import get_letter_definition
from tracing_analytics.sequencing import (
    analyze_closure_success,
    analyze_line_continuity,
    analyze_pressure_modulation,
    analyze_stroke_order,
    detect_self_corrections,
    detect_strokes,
    inter_stroke_latencies,
    score_sequencing,
)
from tracing_analytics.utils import RawTouchPoint


def _trace_reference(letter, order=None, reverse=(), lift_ms=400):
    """
    Trace the reference strokes of a letter, optionally reordered or reversed.

    Each stroke starts one sample in, since some strokes begin on a sample of
    an earlier stroke and the closest-point lookup keeps the first match.
    """
    path = get_letter_definition(letter).reference_path(10)
    order = range(path.stroke_count) if order is None else order
    t = 0
    strokes = []
    for k in order:
        guides = list(path.stroke_points(k))
        if k in reverse:
            guides.reverse()
        guides = guides[1:]
        stroke = []
        for g in guides:
            stroke.append(RawTouchPoint(g.x, g.y, t, 0.5))
            t += 10
        strokes.append(stroke)
        t += lift_ms
    return path, strokes


def test_detect_strokes_splits_on_lift_off():
    points = []
    for s, start in enumerate((0, 1000, 2000)):
        points.extend(RawTouchPoint(i, s * 10, start + i * 10) for i in range(5))
    points.append(RawTouchPoint(0, 0, 5000))

    strokes = detect_strokes(points)
    assert len(strokes) == 3
    assert [s.stroke_id for s in strokes] == [0, 1, 2]
    assert strokes[1].start_index == 5
    assert strokes[1].end_index == 9
    assert strokes[0].duration_s == pytest.approx(0.04)
    assert detect_strokes([]) == []


def test_three_strokes_in_order():
    path, strokes = _trace_reference('H')
    result = analyze_stroke_order(strokes, path, 3)
    assert result.stroke_count_actual == 3
    assert result.extra_strokes == 0
    assert result.missing_strokes == 0
    assert result.stroke_order_score == pytest.approx(1.0)
    assert result.stroke_sequence_correct
    assert result.stroke_sequence_violations == []
    assert result.stroke_direction_correctness == [True, True, True]
    assert result.lift_off_count == 2
    assert len(result.planning_latencies_s) == 2


def test_swapped_strokes_are_out_of_order():
    path, strokes = _trace_reference('H', order=[1, 0, 2])
    result = analyze_stroke_order(strokes, path, 3)
    assert result.stroke_order_correctness[:2] == [False, False]
    assert "Stroke 1 should be stroke 2" in result.stroke_sequence_violations
    assert "Stroke 2 should be stroke 1" in result.stroke_sequence_violations
    assert result.stroke_order_score == pytest.approx(1 / 3)
    assert not result.stroke_sequence_correct


def test_reversed_stroke_direction():
    path, strokes = _trace_reference('L', reverse=(0,))
    result = analyze_stroke_order(strokes, path, 2)
    assert result.stroke_direction_correctness[0] is False
    assert result.stroke_direction_correctness[1] is True


def test_extra_and_missing_strokes():
    path, strokes = _trace_reference('H')
    extra = analyze_stroke_order(strokes + [strokes[-1]], path, 3)
    assert extra.extra_strokes == 1
    assert extra.missing_strokes == 0
    assert not extra.stroke_sequence_correct

    missing = analyze_stroke_order(strokes[:2], path, 3)
    assert missing.missing_strokes == 1
    assert missing.stroke_order_score == pytest.approx(2 / 3)


def test_order_without_reference():
    _, strokes = _trace_reference('T')
    result = analyze_stroke_order(strokes, None, 2)
    assert result.stroke_order_score == pytest.approx(1.0)
    assert result.stroke_sequence_correct

    empty = analyze_stroke_order([], None, 0)
    assert empty.stroke_order_score == 0.0
    assert empty.lift_off_count == 0
    assert not empty.stroke_sequence_correct


def test_score_sequencing_from_flat_stream():
    path, strokes = _trace_reference('T')
    flat = [p for stroke in strokes for p in stroke]
    result = score_sequencing(flat, path, 2)
    assert result.stroke_count_actual == 2
    assert result.stroke_sequence_correct


def test_inter_stroke_latencies():
    a = [RawTouchPoint(0, 0, 0), RawTouchPoint(1, 0, 100)]
    b = [RawTouchPoint(0, 5, 600), RawTouchPoint(1, 5, 700)]
    assert inter_stroke_latencies([a, b]) == [pytest.approx(0.5)]


def test_self_corrections():
    stroke = [RawTouchPoint(x, 0, i * 10) for i, x in enumerate((0, 10, 20, 30, 11))]
    events = detect_self_corrections([stroke])
    assert len(events) == 1
    assert events[0]['timestamp'] == 40
    assert detect_self_corrections([stroke[:4]]) == []


def test_line_continuity():
    a = [RawTouchPoint(0, 0, 0), RawTouchPoint(10, 0, 10)]
    far = [RawTouchPoint(60, 0, 500), RawTouchPoint(70, 0, 510)]
    touching = [RawTouchPoint(12, 0, 500), RawTouchPoint(20, 0, 510)]

    gap = analyze_line_continuity([a, far])
    assert gap['gap_count'] == 1
    assert gap['line_continuity_score'] == 0.0

    overlap = analyze_line_continuity([a, touching])
    assert overlap['overlap_count'] == 1
    assert overlap['junction_count'] == 1
    assert overlap['line_continuity_score'] == 0.0

    assert analyze_line_continuity([a])['line_continuity_score'] == 100.0
    assert analyze_line_continuity([])['line_continuity_score'] == 100.0


def test_closure_success_for_closed_letters():
    _, o_strokes = _trace_reference('O')
    assert analyze_closure_success(o_strokes, 'O')['closure_success_rate'] == 1.0

    open_stroke = [RawTouchPoint(i * 10, 0, i * 10) for i in range(12)]
    assert analyze_closure_success([open_stroke], 'o')['closure_success_rate'] == 0.0
    assert analyze_closure_success([open_stroke], 'L')['closure_success_rate'] == 1.0


def test_pressure_modulation():
    steady = [[RawTouchPoint(i, 0, i, 0.5) for i in range(5)]]
    assert analyze_pressure_modulation(steady)['pressure_modulation_score'] == pytest.approx(100.0)
    varied = [[RawTouchPoint(i, 0, i, p) for i, p in enumerate((0.1, 0.9, 0.1, 0.9))]]
    assert analyze_pressure_modulation(varied)['pressure_modulation_score'] < 100.0
    assert analyze_pressure_modulation([])['pressure_modulation_score'] == 0.0
