"""
Character classifier contract.

A classifier receives the drawn strokes (each a list of points with ``x``
and ``y``) plus the letter the child was asked to trace, and returns its
verdict. ``classify`` may be a plain or an ``async`` method; the session
aggregator awaits either and falls back to a placeholder verdict when the
classifier fails, times out or returns nothing.
"""

import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, runtime_checkable


class ReversalType(str, Enum):
    HORIZONTAL_FLIP = 'horizontal_flip'
    VERTICAL_FLIP = 'vertical_flip'
    ROTATION_180 = 'rotation_180'
    NONE = 'none'


@dataclass(frozen=True)
class Prediction:
    char: str
    confidence: float

    def to_dict(self):
        return {'char': self.char, 'confidence': self.confidence}


def _now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


@dataclass(frozen=True)
class ClassificationResult:
    """Verdict of the character classifier for one session."""
    predicted_char: str
    expected_char: str
    confidence: float
    is_correct: bool
    top_predictions: List[Prediction] = field(default_factory=list)
    reversal_detected: bool = False
    reversal_type: ReversalType = ReversalType.NONE
    reversal_confidence: Optional[float] = None
    is_placeholder: bool = False
    analysis_timestamp: str = field(default_factory=_now_iso)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], expected_letter: str,
                     max_predictions: int = 5) -> 'ClassificationResult':
        """
        Coerce a loosely typed classifier payload.

        Accepts snake_case or camelCase keys, sorts top predictions by
        descending confidence and keeps at most ``max_predictions``.
        """
        def get(*keys, default=None):
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return default

        predictions = []
        for item in get('top_predictions', 'topPredictions', default=[]):
            if isinstance(item, Prediction):
                predictions.append(item)
            elif isinstance(item, Mapping):
                predictions.append(Prediction(str(item.get('char', '?')), float(item.get('confidence', 0.0))))
            else:
                char, confidence = item
                predictions.append(Prediction(str(char), float(confidence)))
        predictions.sort(key=lambda p: p.confidence, reverse=True)

        predicted = str(get('predicted_char', 'predictedChar', default='?'))
        confidence = min(1.0, max(0.0, float(get('confidence', default=0.0))))
        is_correct = bool(get('is_correct', 'isCorrect',
                              default=predicted.upper() == expected_letter.upper()))

        raw_type = get('reversal_type', 'reversalType', default=ReversalType.NONE)
        try:
            reversal_type = ReversalType(raw_type)
        except ValueError:
            reversal_type = ReversalType.NONE

        return cls(
            predicted_char=predicted,
            expected_char=expected_letter,
            confidence=confidence,
            is_correct=is_correct,
            top_predictions=predictions[:max_predictions],
            reversal_detected=bool(get('reversal_detected', 'reversalDetected', default=False)),
            reversal_type=reversal_type,
            reversal_confidence=get('reversal_confidence', 'reversalConfidence'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'predicted_char': self.predicted_char,
            'expected_char': self.expected_char,
            'confidence': self.confidence,
            'is_correct': self.is_correct,
            'top_predictions': [p.to_dict() for p in self.top_predictions],
            'reversal_detected': self.reversal_detected,
            'reversal_type': self.reversal_type.value,
            'reversal_confidence': self.reversal_confidence,
            'is_placeholder': self.is_placeholder,
            'analysis_timestamp': self.analysis_timestamp,
        }


def placeholder_classification(expected_letter: str) -> ClassificationResult:
    """Explicit "unknown" verdict used when no classifier result is available."""
    return ClassificationResult(
        predicted_char='?',
        expected_char=expected_letter,
        confidence=0.0,
        is_correct=False,
        is_placeholder=True,
    )


@runtime_checkable
class CharacterClassifier(Protocol):
    """Anything with a ``classify(strokes, expected_letter)`` method."""

    def classify(self, strokes: Sequence[Sequence[Any]], expected_letter: str) -> Any:
        ...
