"""
Shape-quality metrics for a traced letter.

All metrics are computed over the completed strokes of a session: overall
proportions (aspect ratio, compactness, left/right balance), corner
sharpness, per-stroke closure and the connectivity between strokes.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Sequence

from ..config.settings import AnalyticsConfig, DEFAULT_CONFIG
from ..utils.geometry import GeometryUtils
from ..utils.math_utils import StatsUtils, calculate_hu_moments

logger = logging.getLogger(__name__)


@dataclass
class ShapeQualityMetrics:
    aspect_ratio: float = 1.0
    compactness: float = 0.0
    symmetry_score: float = 1.0
    corner_count: int = 0
    avg_corner_sharpness: float = 0.0
    curve_smoothness: float = 1.0
    mean_curvature: float = 0.0
    closure_success_rate: float = 1.0
    endpoint_count: int = 0
    junction_count: int = 0
    hull_area: float = 0.0
    perimeter: float = 0.0
    width: float = 0.0
    height: float = 0.0
    hu_moments: List[float] = field(default_factory=lambda: [0.0] * 7)

    def to_dict(self):
        return {
            'aspect_ratio': self.aspect_ratio,
            'compactness': self.compactness,
            'symmetry_score': self.symmetry_score,
            'corner_count': self.corner_count,
            'avg_corner_sharpness': self.avg_corner_sharpness,
            'curve_smoothness': self.curve_smoothness,
            'mean_curvature': self.mean_curvature,
            'closure_success_rate': self.closure_success_rate,
            'endpoint_count': self.endpoint_count,
            'junction_count': self.junction_count,
            'hull_area': self.hull_area,
            'perimeter': self.perimeter,
            'width': self.width,
            'height': self.height,
            'hu_moments': list(self.hu_moments),
        }


def corner_sharpness(stroke: Sequence, max_angle_deg: float = 90.0) -> List[float]:
    """
    Sharpness of every corner along a stroke.

    A corner is a sample where the heading change between the incoming and
    outgoing segments is below ``max_angle_deg``; its sharpness is
    ``1 - turn / max_angle``, so a 30 degree bend scores 2/3 and a hairpin
    is not counted.
    """
    max_angle = math.radians(max_angle_deg)
    corners = []
    for i in range(1, len(stroke) - 1):
        p1, p2, p3 = stroke[i - 1], stroke[i], stroke[i + 1]
        if (p1.x, p1.y) == (p2.x, p2.y) or (p2.x, p2.y) == (p3.x, p3.y):
            continue
        turn = GeometryUtils.turn_angle(p1, p2, p3)
        if turn < max_angle:
            corners.append(1 - turn / max_angle)
    return corners


def closure_success_rate(strokes: Sequence[Sequence], gap_px: float = 20.0, min_points: int = 5) -> float:
    """Fraction of strokes longer than ``min_points`` that end within ``gap_px`` of their start."""
    attempted = 0
    closed = 0
    for stroke in strokes:
        if len(stroke) <= min_points:
            continue
        attempted += 1
        if GeometryUtils.calculate_distance(stroke[0], stroke[-1]) < gap_px:
            closed += 1
    if attempted == 0:
        return 1.0
    return closed / attempted


def count_junctions(strokes: Sequence[Sequence], tolerance_px: float = 20.0) -> int:
    """Number of stroke pairs where an endpoint of one lies within ``tolerance_px`` of the other."""
    def touches(endpoints, other) -> bool:
        return any(
            GeometryUtils.calculate_distance(end, p) < tolerance_px
            for end in endpoints for p in other
        )

    count = 0
    for i in range(len(strokes)):
        for j in range(i + 1, len(strokes)):
            a, b = strokes[i], strokes[j]
            if not a or not b:
                continue
            if touches((a[0], a[-1]), b) or touches((b[0], b[-1]), a):
                count += 1
    return count


def compute_shape_quality(strokes: Sequence[Sequence], config: AnalyticsConfig = DEFAULT_CONFIG) -> ShapeQualityMetrics:
    """
    Compute shape-quality metrics over the strokes of one session.

    Compactness is ``4*pi*A / P**2`` where ``A`` is the convex-hull area of
    all samples and ``P`` the summed within-stroke path length, capped at 1.
    A straight line has no hull area, so its compactness is 0.

    Args:
        strokes: Completed strokes, each an ordered list of samples.
        config: Analytics constants.

    Returns:
        ShapeQualityMetrics; neutral defaults for empty input.
    """
    points = [p for stroke in strokes for p in stroke]
    if not points:
        return ShapeQualityMetrics()

    bbox = GeometryUtils.bounding_box(points)
    aspect_ratio = bbox.width / bbox.height if bbox.height > 0 else 1.0

    hull_area = GeometryUtils.polygon_area(GeometryUtils.convex_hull(points))
    perimeter = sum(GeometryUtils.calculate_path_length(stroke) for stroke in strokes)
    compactness = 0.0
    if perimeter > 0:
        compactness = min(1.0, 4 * math.pi * hull_area / (perimeter * perimeter))

    center_x = bbox.center.x
    left = sum(1 for p in points if p.x < center_x)
    right = len(points) - left
    symmetry = 1 - abs(left - right) / len(points)

    corners = []
    for stroke in strokes:
        corners.extend(corner_sharpness(stroke, config.corner_angle_deg))
    avg_sharpness = StatsUtils.mean(corners)
    smoothness = 1 - avg_sharpness if corners else 1.0

    curvatures = [
        GeometryUtils.calculate_curvature(stroke[i - 1], stroke[i], stroke[i + 1])
        for stroke in strokes for i in range(1, len(stroke) - 1)
    ]

    return ShapeQualityMetrics(
        aspect_ratio=aspect_ratio,
        compactness=compactness,
        symmetry_score=symmetry,
        corner_count=len(corners),
        avg_corner_sharpness=avg_sharpness,
        curve_smoothness=smoothness,
        mean_curvature=StatsUtils.mean(curvatures),
        closure_success_rate=closure_success_rate(strokes, config.closure_gap_px, config.closure_min_points),
        endpoint_count=2 * sum(1 for stroke in strokes if stroke),
        junction_count=count_junctions(strokes, config.junction_tolerance_px),
        hull_area=hull_area,
        perimeter=perimeter,
        width=bbox.width,
        height=bbox.height,
        hu_moments=calculate_hu_moments(points),
    )
