"""
Stroke segmentation, ordering and stroke-quality heuristics.
"""

from .stroke_segmenter import (
    SegmentedStroke,
    StrokeSequencing,
    detect_strokes,
    analyze_stroke_order,
    score_sequencing,
    detect_self_corrections,
    analyze_line_continuity,
    analyze_closure_success,
    analyze_pressure_modulation,
    inter_stroke_latencies
)

__all__ = [
    'SegmentedStroke',
    'StrokeSequencing',
    'detect_strokes',
    'analyze_stroke_order',
    'score_sequencing',
    'detect_self_corrections',
    'analyze_line_continuity',
    'analyze_closure_success',
    'analyze_pressure_modulation',
    'inter_stroke_latencies'
]
