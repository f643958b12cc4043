"""
Character classification: the collaborator contract and a scikit-learn
implementation that works on rasterized strokes.
"""

from .base import (
    CharacterClassifier,
    ClassificationResult,
    Prediction,
    ReversalType,
    placeholder_classification
)
from .rasterizer import rasterize_strokes, flip_horizontal, flip_vertical, rotate_180
from .ml_classifier import MLCharacterClassifier

__all__ = [
    'CharacterClassifier',
    'ClassificationResult',
    'Prediction',
    'ReversalType',
    'placeholder_classification',
    'rasterize_strokes',
    'flip_horizontal',
    'flip_vertical',
    'rotate_180',
    'MLCharacterClassifier'
]
