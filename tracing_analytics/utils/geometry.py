"""
Shared geometry utilities for stroke analysis.

Everything here works on any object exposing ``x`` and ``y`` attributes, so
raw touch samples, reference guide points and plain ``Point`` instances can be
mixed freely.
"""

import logging
import math
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class Point:
    """Represents a 2D point."""

    __slots__ = ('x', 'y')

    def __init__(self, x: float, y: float):
        self.x = float(x)
        self.y = float(y)

    def __repr__(self):
        return f"Point({self.x:.1f}, {self.y:.1f})"

    def __eq__(self, other):
        if not hasattr(other, 'x') or not hasattr(other, 'y'):
            return False
        return abs(self.x - other.x) < 1e-10 and abs(self.y - other.y) < 1e-10

    def __hash__(self):
        return hash((round(self.x, 10), round(self.y, 10)))

    def distance_to(self, other) -> float:
        """Calculate Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)


class BoundingBox:
    """Axis-aligned bounding box of a point set."""

    __slots__ = ('min_x', 'min_y', 'max_x', 'max_y')

    def __init__(self, min_x: float, min_y: float, max_x: float, max_y: float):
        self.min_x = min_x
        self.min_y = min_y
        self.max_x = max_x
        self.max_y = max_y

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point:
        return Point((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)


class GeometryUtils:
    """Utility class for geometric calculations."""

    @staticmethod
    def calculate_distance(p1, p2) -> float:
        """Calculate Euclidean distance between two points."""
        return math.hypot(p2.x - p1.x, p2.y - p1.y)

    @staticmethod
    def calculate_path_length(points: Sequence) -> float:
        """Calculate total path length."""
        if len(points) < 2:
            return 0.0

        length = 0.0
        for i in range(1, len(points)):
            length += GeometryUtils.calculate_distance(points[i-1], points[i])
        return length

    @staticmethod
    def vector_angle(v1x: float, v1y: float, v2x: float, v2y: float) -> float:
        """
        Angle in radians between two vectors.

        Returns 0.0 when either vector has zero length.
        """
        mag1 = math.hypot(v1x, v1y)
        mag2 = math.hypot(v2x, v2y)
        if mag1 == 0 or mag2 == 0:
            return 0.0
        cos_angle = (v1x * v2x + v1y * v2y) / (mag1 * mag2)
        return math.acos(max(-1.0, min(1.0, cos_angle)))

    @staticmethod
    def angle_between(p1, p2, p3) -> float:
        """Interior angle at ``p2`` formed by ``p1`` and ``p3``, in radians."""
        return GeometryUtils.vector_angle(p1.x - p2.x, p1.y - p2.y, p3.x - p2.x, p3.y - p2.y)

    @staticmethod
    def turn_angle(p1, p2, p3) -> float:
        """Change of heading at ``p2`` when travelling p1 -> p2 -> p3, in radians."""
        return GeometryUtils.vector_angle(p2.x - p1.x, p2.y - p1.y, p3.x - p2.x, p3.y - p2.y)

    @staticmethod
    def calculate_curvature(p1, p2, p3) -> float:
        """Curvature (1 / circumradius) of the circle through three points."""
        a = GeometryUtils.calculate_distance(p1, p2)
        b = GeometryUtils.calculate_distance(p2, p3)
        c = GeometryUtils.calculate_distance(p1, p3)
        if a == 0 or b == 0 or c == 0:
            return 0.0

        s = (a + b + c) / 2
        area = math.sqrt(max(0.0, s * (s - a) * (s - b) * (s - c)))
        if area == 0:
            return 0.0
        return 4 * area / (a * b * c)

    @staticmethod
    def perpendicular_normal(p1, p2) -> Tuple[float, float]:
        """Unit normal of the direction p1 -> p2; (0, 1) for coincident points."""
        dx = p2.x - p1.x
        dy = p2.y - p1.y
        mag = math.hypot(dx, dy)
        if mag == 0:
            return 0.0, 1.0
        return -dy / mag, dx / mag

    @staticmethod
    def point_to_segment_distance(point, seg_start, seg_end) -> float:
        """Distance from a point to the closest point of a line segment."""
        dx = seg_end.x - seg_start.x
        dy = seg_end.y - seg_start.y
        len_squared = dx * dx + dy * dy
        if len_squared == 0:
            return GeometryUtils.calculate_distance(point, seg_start)

        t = ((point.x - seg_start.x) * dx + (point.y - seg_start.y) * dy) / len_squared
        t = max(0.0, min(1.0, t))
        proj_x = seg_start.x + t * dx
        proj_y = seg_start.y + t * dy
        return math.hypot(point.x - proj_x, point.y - proj_y)

    @staticmethod
    def bezier_point(t: float, p0, p1, p2, p3) -> Point:
        """Evaluate a cubic Bezier curve with the Bernstein polynomial."""
        mt = 1 - t
        a = mt * mt * mt
        b = 3 * mt * mt * t
        c = 3 * mt * t * t
        d = t * t * t
        return Point(
            a * p0.x + b * p1.x + c * p2.x + d * p3.x,
            a * p0.y + b * p1.y + c * p2.y + d * p3.y,
        )

    @staticmethod
    def sample_bezier(p0, p1, p2, p3, samples: int = 50) -> List[Point]:
        """Sample ``samples + 1`` evenly spaced parametric points along a Bezier curve."""
        return [GeometryUtils.bezier_point(i / samples, p0, p1, p2, p3) for i in range(samples + 1)]

    @staticmethod
    def sample_line(start, end, samples: int = 50) -> List[Point]:
        """Sample ``samples + 1`` evenly spaced points along a line segment."""
        return [
            Point(start.x + (i / samples) * (end.x - start.x),
                  start.y + (i / samples) * (end.y - start.y))
            for i in range(samples + 1)
        ]

    @staticmethod
    def bounding_box(points: Sequence) -> BoundingBox:
        """Get the bounding box of a point set (all zeros when empty)."""
        if not points:
            return BoundingBox(0.0, 0.0, 0.0, 0.0)
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return BoundingBox(min(xs), min(ys), max(xs), max(ys))

    @staticmethod
    def convex_hull(points: Sequence) -> List[Point]:
        """Convex hull in counter-clockwise order (monotone chain)."""
        unique = sorted({(p.x, p.y) for p in points})
        if len(unique) < 3:
            return [Point(x, y) for x, y in unique]

        def cross(o, a, b):
            return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])

        lower = []
        for p in unique:
            while len(lower) >= 2 and cross(lower[-2], lower[-1], p) <= 0:
                lower.pop()
            lower.append(p)

        upper = []
        for p in reversed(unique):
            while len(upper) >= 2 and cross(upper[-2], upper[-1], p) <= 0:
                upper.pop()
            upper.append(p)

        return [Point(x, y) for x, y in lower[:-1] + upper[:-1]]

    @staticmethod
    def polygon_area(points: Sequence) -> float:
        """Area of a simple polygon via the shoelace formula."""
        if len(points) < 3:
            return 0.0
        area = 0.0
        for i in range(len(points)):
            j = (i + 1) % len(points)
            area += points[i].x * points[j].y - points[j].x * points[i].y
        return abs(area) / 2

    @staticmethod
    def hausdorff_distance(shape1: Sequence, shape2: Sequence) -> float:
        """Symmetric Hausdorff distance between two point sets."""
        if not shape1 or not shape2:
            return float('inf')
        a = np.array([(p.x, p.y) for p in shape1], dtype=float)
        b = np.array([(p.x, p.y) for p in shape2], dtype=float)
        dists = np.sqrt(((a[:, None, :] - b[None, :, :]) ** 2).sum(axis=2))
        return float(max(dists.min(axis=1).max(), dists.min(axis=0).max()))

    @staticmethod
    def mirror_horizontal(points: Sequence, center_x: Optional[float] = None) -> List[Point]:
        """Mirror points across a vertical axis (defaults to the bounding-box center)."""
        if center_x is None:
            center_x = GeometryUtils.bounding_box(points).center.x
        return [Point(2 * center_x - p.x, p.y) for p in points]

    @staticmethod
    def mirror_vertical(points: Sequence, center_y: Optional[float] = None) -> List[Point]:
        """Mirror points across a horizontal axis (defaults to the bounding-box center)."""
        if center_y is None:
            center_y = GeometryUtils.bounding_box(points).center.y
        return [Point(p.x, 2 * center_y - p.y) for p in points]

    @staticmethod
    def rotate_points(points: Sequence, angle: float, centroid: Optional[Point] = None) -> List[Point]:
        """Rotate points by ``angle`` radians around a center (defaults to the bounding-box center)."""
        if centroid is None:
            centroid = GeometryUtils.bounding_box(points).center

        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        rotated = []
        for point in points:
            dx = point.x - centroid.x
            dy = point.y - centroid.y
            rotated.append(Point(dx * cos_a - dy * sin_a + centroid.x,
                                 dx * sin_a + dy * cos_a + centroid.y))
        return rotated


class DataValidator:
    """Utility class for validating raw touch samples."""

    @staticmethod
    def is_finite_point(point) -> bool:
        """True when the sample carries finite coordinates and timestamp."""
        try:
            values = (float(point.x), float(point.y), float(point.timestamp))
        except (AttributeError, TypeError, ValueError):
            return False
        return all(math.isfinite(v) for v in values)

    @staticmethod
    def clamp_pressure(pressure) -> float:
        """Clamp a pressure reading into [0, 1]; non-finite readings become 0."""
        try:
            value = float(pressure)
        except (TypeError, ValueError):
            return 0.0
        if not math.isfinite(value):
            return 0.0
        return max(0.0, min(1.0, value))

    @staticmethod
    def sanitize_points(points: Sequence) -> list:
        """Drop non-finite samples and clamp pressure readings into [0, 1]."""
        clean = []
        for point in points:
            if not DataValidator.is_finite_point(point):
                continue
            pressure = DataValidator.clamp_pressure(getattr(point, 'pressure', 1.0))
            if pressure != point.pressure:
                point = replace(point, pressure=pressure)
            clean.append(point)

        dropped = len(points) - len(clean)
        if dropped:
            logger.warning("Dropped %d non-finite touch sample(s)", dropped)
        return clean
