"""
Tracing Analytics Package
Feature extraction and risk screening for handwriting tracing sessions.
"""

from .config.settings import AnalyticsConfig, DEFAULT_CONFIG
from .core.aggregator import SessionFeatureAggregator, SessionState
from .core.models import SessionFeatureSummary
from .classifier.ml_classifier import MLCharacterClassifier
from .reference.letters import LETTER_DEFINITIONS, get_letter_definition
from .utils.records import RawTouchPoint, NotComputed

__version__ = "1.0.0"
__all__ = [
    "AnalyticsConfig",
    "DEFAULT_CONFIG",
    "SessionFeatureAggregator",
    "SessionState",
    "SessionFeatureSummary",
    "MLCharacterClassifier",
    "LETTER_DEFINITIONS",
    "get_letter_definition",
    "RawTouchPoint",
    "NotComputed"
]
