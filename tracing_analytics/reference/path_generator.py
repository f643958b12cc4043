"""
Reference path generation.

Converts a letter's vector stroke definition (ordered strokes, each a list of
line or cubic Bezier segments) into a dense sequence of guide points. The
resulting ReferencePath is the ground truth that traced strokes are measured
against.
"""

import logging
import math
from dataclasses import dataclass
from functools import cached_property
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..utils.geometry import GeometryUtils, Point

logger = logging.getLogger(__name__)

LINE = 'line'
BEZIER = 'bezier'


@dataclass(frozen=True)
class PathSegment:
    """A line or cubic Bezier segment of a letter stroke."""
    kind: str
    start: Point
    end: Point
    control1: Optional[Point] = None
    control2: Optional[Point] = None

    @classmethod
    def line(cls, x1: float, y1: float, x2: float, y2: float) -> 'PathSegment':
        return cls(LINE, Point(x1, y1), Point(x2, y2))

    @classmethod
    def bezier(cls, x1: float, y1: float, cx1: float, cy1: float,
               cx2: float, cy2: float, x2: float, y2: float) -> 'PathSegment':
        return cls(BEZIER, Point(x1, y1), Point(x2, y2), Point(cx1, cy1), Point(cx2, cy2))

    def sample(self, samples: int) -> List[Point]:
        """Sample ``samples + 1`` points at ``t = i / samples``."""
        if self.kind == LINE:
            return GeometryUtils.sample_line(self.start, self.end, samples)
        if self.kind == BEZIER:
            if self.control1 is None or self.control2 is None:
                raise ValueError("Bezier segment requires two control points")
            return GeometryUtils.sample_bezier(self.start, self.control1, self.control2, self.end, samples)
        raise ValueError(f"Unknown segment type: {self.kind!r}")


@dataclass(frozen=True)
class GuidePoint:
    """One sample of the reference path with its unit normal."""
    x: float
    y: float
    index: int
    normal_x: float
    normal_y: float


@dataclass(frozen=True)
class ReferencePath:
    """
    Dense reference geometry for one letter.

    ``stroke_boundaries[k]`` is the global index of the last point of stroke
    ``k``; stroke ``k`` spans ``(stroke_boundaries[k-1], stroke_boundaries[k]]``
    with the first stroke starting at index 0.
    """
    points: Tuple[GuidePoint, ...] = ()
    stroke_boundaries: Tuple[int, ...] = ()
    total_length: float = 0.0

    @property
    def is_empty(self) -> bool:
        return len(self.points) == 0

    @property
    def stroke_count(self) -> int:
        return len(self.stroke_boundaries)

    @cached_property
    def coordinates(self) -> np.ndarray:
        """(n, 2) array of point coordinates."""
        if self.is_empty:
            return np.zeros((0, 2), dtype=float)
        return np.array([(p.x, p.y) for p in self.points], dtype=float)

    def stroke_range(self, stroke_index: int) -> Tuple[int, int]:
        """Inclusive ``(first, last)`` global indices of a stroke."""
        if not 0 <= stroke_index < self.stroke_count:
            raise IndexError(f"stroke index {stroke_index} out of range")
        first = 0 if stroke_index == 0 else self.stroke_boundaries[stroke_index - 1] + 1
        return first, self.stroke_boundaries[stroke_index]

    def stroke_points(self, stroke_index: int) -> Tuple[GuidePoint, ...]:
        first, last = self.stroke_range(stroke_index)
        return self.points[first:last + 1]

    def stroke_index_for(self, point_index: int) -> int:
        """Map a global point index to the index of the stroke containing it."""
        for k, boundary in enumerate(self.stroke_boundaries):
            if point_index <= boundary:
                return k
        return max(0, self.stroke_count - 1)

    def to_dict(self):
        return {
            'points': [
                {'x': p.x, 'y': p.y, 'index': p.index, 'normal_x': p.normal_x, 'normal_y': p.normal_y}
                for p in self.points
            ],
            'stroke_boundaries': list(self.stroke_boundaries),
            'total_length': self.total_length,
        }


class ReferencePathGenerator:
    """Samples letter stroke definitions into reference paths."""

    def __init__(self, samples_per_segment: int = 30):
        if samples_per_segment < 1:
            raise ValueError(f"samples_per_segment must be >= 1, got {samples_per_segment}")
        self.samples_per_segment = samples_per_segment

    def generate(self, strokes: Sequence[Sequence[PathSegment]]) -> ReferencePath:
        """
        Build a reference path from ordered strokes of path segments.

        Args:
            strokes: Ordered strokes, each an ordered list of segments.

        Returns:
            ReferencePath; empty when no stroke has any segment.
        """
        points: List[GuidePoint] = []
        boundaries: List[int] = []
        total_length = 0.0

        for stroke in strokes:
            stroke_samples: List[Point] = []
            for segment in stroke:
                segment_samples = segment.sample(self.samples_per_segment)
                total_length += GeometryUtils.calculate_path_length(segment_samples)
                stroke_samples.extend(segment_samples)

            if not stroke_samples:
                logger.debug("Skipping stroke without segments")
                continue

            for i, (nx, ny) in enumerate(self._normals(stroke_samples)):
                sample = stroke_samples[i]
                points.append(GuidePoint(sample.x, sample.y, len(points), nx, ny))
            boundaries.append(len(points) - 1)

        return ReferencePath(tuple(points), tuple(boundaries), total_length)

    @staticmethod
    def _normals(samples: List[Point]) -> List[Tuple[float, float]]:
        """Central differences in the interior, one-sided at both ends."""
        n = len(samples)
        if n == 1:
            return [(0.0, 1.0)]

        normals = []
        for i in range(n):
            if i == 0:
                prev, nxt = samples[0], samples[1]
            elif i == n - 1:
                prev, nxt = samples[n - 2], samples[n - 1]
            else:
                prev, nxt = samples[i - 1], samples[i + 1]
            normals.append(GeometryUtils.perpendicular_normal(prev, nxt))
        return normals


def generate_ideal_path(strokes: Sequence[Sequence[PathSegment]], samples_per_segment: int = 30) -> ReferencePath:
    """Module-level convenience wrapper around ReferencePathGenerator."""
    return ReferencePathGenerator(samples_per_segment).generate(strokes)


def find_closest_path_point(point, path: ReferencePath) -> Tuple[Optional[GuidePoint], float, int]:
    """
    Nearest reference sample to ``point``.

    Returns ``(guide_point, distance, index)``; ``(None, inf, -1)`` for an empty path.
    """
    if path.is_empty:
        return None, math.inf, -1
    coords = path.coordinates
    dists = np.hypot(coords[:, 0] - point.x, coords[:, 1] - point.y)
    index = int(np.argmin(dists))
    return path.points[index], float(dists[index]), index
