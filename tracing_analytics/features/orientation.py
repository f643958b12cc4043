"""
Orientation similarity: how closely a mirrored, flipped or rotated copy of
the tracing matches the reference letter.

A high mirror or rotation similarity (relative to the identity) is the
geometric signature of a letter reversal.
"""

import logging
import math
from dataclasses import dataclass
from typing import Sequence

from ..utils.geometry import GeometryUtils

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrientationSimilarity:
    identity_similarity: float = 0.0
    horizontal_mirror_similarity: float = 0.0
    vertical_flip_similarity: float = 0.0
    rotation_90_similarity: float = 0.0
    rotation_180_similarity: float = 0.0
    rotation_270_similarity: float = 0.0

    def to_dict(self):
        return {
            'identity_similarity': self.identity_similarity,
            'horizontal_mirror_similarity': self.horizontal_mirror_similarity,
            'vertical_flip_similarity': self.vertical_flip_similarity,
            'rotation_90_similarity': self.rotation_90_similarity,
            'rotation_180_similarity': self.rotation_180_similarity,
            'rotation_270_similarity': self.rotation_270_similarity,
        }


def _similarity(candidate: Sequence, reference: Sequence, max_dim: float) -> float:
    if max_dim <= 0:
        return 0.0
    distance = GeometryUtils.hausdorff_distance(candidate, reference)
    if math.isinf(distance):
        return 0.0
    return max(0.0, 1 - distance / max_dim)


def compute_orientation_similarity(points: Sequence, reference: Sequence) -> OrientationSimilarity:
    """
    Hausdorff similarity of transformed tracings against reference samples.

    Each transform is applied about the bounding-box center of the traced
    points; similarity is ``max(0, 1 - d / max_dim)`` with ``max_dim`` the
    larger side of the traced bounding box.

    Args:
        points: Traced samples (all strokes).
        reference: Reference path samples.

    Returns:
        OrientationSimilarity; all zero when either set is empty or degenerate.
    """
    if not points or not reference:
        return OrientationSimilarity()

    bbox = GeometryUtils.bounding_box(points)
    max_dim = max(bbox.width, bbox.height)
    if max_dim <= 0:
        return OrientationSimilarity()

    center = bbox.center
    return OrientationSimilarity(
        identity_similarity=_similarity(points, reference, max_dim),
        horizontal_mirror_similarity=_similarity(
            GeometryUtils.mirror_horizontal(points, center.x), reference, max_dim),
        vertical_flip_similarity=_similarity(
            GeometryUtils.mirror_vertical(points, center.y), reference, max_dim),
        rotation_90_similarity=_similarity(
            GeometryUtils.rotate_points(points, math.pi / 2, center), reference, max_dim),
        rotation_180_similarity=_similarity(
            GeometryUtils.rotate_points(points, math.pi, center), reference, max_dim),
        rotation_270_similarity=_similarity(
            GeometryUtils.rotate_points(points, 3 * math.pi / 2, center), reference, max_dim),
    )
