import pytest

from tracing_analytics.reference import (
    LETTER_DEFINITIONS,
    PathSegment,
    ReferencePathGenerator,
    find_closest_path_point,
    generate_ideal_path,
    get_letter_definition,
)
from tracing_analytics.utils import Point


@pytest.mark.parametrize("samples", [1, 10, 30])
def test_single_line_segment(samples):
    path = generate_ideal_path([[PathSegment.line(0, 0, 30, 40)]], samples)
    assert len(path.points) == samples + 1
    assert path.stroke_boundaries == (samples,)
    assert path.total_length == pytest.approx(50.0)


def test_stroke_boundaries_and_lookup():
    path = generate_ideal_path([
        [PathSegment.line(0, 0, 100, 0)],
        [PathSegment.line(0, 50, 100, 50)],
    ], 10)
    assert path.stroke_boundaries == (10, 21)
    assert path.stroke_index_for(0) == 0
    assert path.stroke_index_for(10) == 0
    assert path.stroke_index_for(11) == 1
    assert path.stroke_range(1) == (11, 21)
    assert len(path.stroke_points(1)) == 11
    assert path.total_length == pytest.approx(200.0)
    assert [p.index for p in path.points] == list(range(22))


def test_normals_are_unit_and_perpendicular():
    path = generate_ideal_path([[PathSegment.line(0, 0, 100, 0)]], 5)
    for p in path.points:
        assert p.normal_x == pytest.approx(0.0)
        assert p.normal_y == pytest.approx(1.0)


def test_multi_segment_stroke_length_excludes_jumps():
    stroke = [PathSegment.line(0, 0, 10, 0), PathSegment.line(10, 0, 10, 10)]
    path = generate_ideal_path([stroke], 4)
    assert len(path.points) == 10
    assert path.stroke_boundaries == (9,)
    assert path.total_length == pytest.approx(20.0)


def test_empty_definition_gives_empty_path():
    path = generate_ideal_path([], 10)
    assert path.is_empty
    assert path.stroke_boundaries == ()
    assert path.total_length == 0.0
    assert generate_ideal_path([[]], 10).is_empty


def test_invalid_sample_count():
    with pytest.raises(ValueError):
        ReferencePathGenerator(0)


def test_find_closest_path_point():
    path = generate_ideal_path([[PathSegment.line(0, 0, 100, 0)]], 10)
    guide, distance, index = find_closest_path_point(Point(31, 5), path)
    assert index == 3
    assert guide.x == pytest.approx(30.0)
    assert distance == pytest.approx(Point(31, 5).distance_to(Point(30, 0)))

    empty = generate_ideal_path([], 10)
    assert find_closest_path_point(Point(0, 0), empty) == (None, float('inf'), -1)


def test_all_letters_generate_valid_paths():
    assert sorted(LETTER_DEFINITIONS) == [chr(c) for c in range(ord('A'), ord('Z') + 1)]
    for letter, definition in LETTER_DEFINITIONS.items():
        path = definition.reference_path(8)
        boundaries = path.stroke_boundaries
        assert len(boundaries) == definition.expected_stroke_count, letter
        assert all(a < b for a, b in zip(boundaries, boundaries[1:])), letter
        assert boundaries[-1] == len(path.points) - 1, letter
        for p in path.points:
            assert 0 <= p.x <= 600 and 0 <= p.y <= 800, letter


def test_letter_metadata():
    assert get_letter_definition('a').expected_stroke_count == 3
    assert get_letter_definition('O').expected_stroke_count == 1
    assert get_letter_definition('E').expected_stroke_count == 4
    assert 'D' in get_letter_definition('B').confusion_pairs
    with pytest.raises(KeyError):
        get_letter_definition('7')
