"""
Reference geometry: letter stroke definitions and dense ideal paths.
"""

from .path_generator import (
    PathSegment,
    GuidePoint,
    ReferencePath,
    ReferencePathGenerator,
    generate_ideal_path,
    find_closest_path_point
)
from .letters import LetterDefinition, LETTER_DEFINITIONS, get_letter_definition

__all__ = [
    'PathSegment',
    'GuidePoint',
    'ReferencePath',
    'ReferencePathGenerator',
    'generate_ideal_path',
    'find_closest_path_point',
    'LetterDefinition',
    'LETTER_DEFINITIONS',
    'get_letter_definition'
]
