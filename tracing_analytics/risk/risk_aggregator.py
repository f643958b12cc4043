"""
Coarse risk screening from session features.

Every score is a fixed weighted combination of upstream features, clamped to
[0, 100]. The weights and cutoffs come from AnalyticsConfig and are product
constants, not learned values. The result is advisory and never a diagnosis.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List

from ..config.settings import AnalyticsConfig, DEFAULT_CONFIG
from ..utils.math_utils import StatsUtils

logger = logging.getLogger(__name__)


class RiskLevel(str, Enum):
    LOW = 'low'
    MILD = 'mild'
    MODERATE = 'moderate'
    HIGH = 'high'
    SEVERE = 'severe'

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {level: i for i, level in enumerate(RiskLevel)}


@dataclass(frozen=True)
class RiskInputs:
    """Upstream features the risk heuristics read. Similarities and ratios in [0, 1]."""
    horizontal_mirror_similarity: float = 0.0
    rotation_90_similarity: float = 0.0
    rotation_180_similarity: float = 0.0
    stroke_order_score: float = 1.0
    tremor_amplitude: float = 0.0
    spatial_accuracy_score: float = 100.0
    pressure_modulation_score: float = 100.0
    mirror_confusion_score: float = 0.0
    fluency_ratio: float = 1.0
    avg_velocity: float = 100.0


@dataclass
class RiskAssessment:
    dyslexia_risk_score: float = 0.0
    dysgraphia_risk_score: float = 0.0
    reversal_risk_score: float = 0.0
    attention_deficit_score: float = 0.0
    processing_speed_deficit_score: float = 0.0
    working_memory_deficit_score: float = 0.0
    overall_risk_level: RiskLevel = RiskLevel.LOW
    concern_flags: List[str] = field(default_factory=list)
    clinical_alert_flags: List[str] = field(default_factory=list)
    advisory: bool = True

    def to_dict(self):
        return {
            'dyslexia_risk_score': self.dyslexia_risk_score,
            'dysgraphia_risk_score': self.dysgraphia_risk_score,
            'reversal_risk_score': self.reversal_risk_score,
            'attention_deficit_score': self.attention_deficit_score,
            'processing_speed_deficit_score': self.processing_speed_deficit_score,
            'working_memory_deficit_score': self.working_memory_deficit_score,
            'overall_risk_level': self.overall_risk_level.value,
            'concern_flags': list(self.concern_flags),
            'clinical_alert_flags': list(self.clinical_alert_flags),
            'advisory': self.advisory,
        }


def _clamp(score: float) -> float:
    return StatsUtils.clamp(score, 0.0, 100.0)


def bucket_risk_level(score: float, config: AnalyticsConfig = DEFAULT_CONFIG) -> RiskLevel:
    """Map a mean risk score onto a level (strictly greater than each cutoff)."""
    mild, moderate, high, severe = config.risk_level_cutoffs
    if score > severe:
        return RiskLevel.SEVERE
    if score > high:
        return RiskLevel.HIGH
    if score > moderate:
        return RiskLevel.MODERATE
    if score > mild:
        return RiskLevel.MILD
    return RiskLevel.LOW


def processing_speed_deficit(avg_velocity: float, config: AnalyticsConfig = DEFAULT_CONFIG) -> float:
    """Step function of average velocity (px/s); slower writing scores higher."""
    for limit, score in config.processing_speed_steps:
        if avg_velocity < limit:
            return score
    return 0.0


def concern_flags(assessment: RiskAssessment) -> List[str]:
    flags = []
    if assessment.dyslexia_risk_score > 50:
        flags.append("High dyslexia risk")
    if assessment.dysgraphia_risk_score > 50:
        flags.append("High dysgraphia risk")
    if assessment.reversal_risk_score > 60:
        flags.append("Letter reversal concern")
    if assessment.attention_deficit_score > 60:
        flags.append("Attention deficit indicators")
    return flags


def clinical_alert_flags(level: RiskLevel) -> List[str]:
    if level == RiskLevel.SEVERE:
        return ['immediate_referral']
    if level in (RiskLevel.HIGH, RiskLevel.MODERATE):
        return ['monitor_closely']
    if level == RiskLevel.LOW:
        return ['typical_development']
    return []


def assess_risk(inputs: RiskInputs, config: AnalyticsConfig = DEFAULT_CONFIG) -> RiskAssessment:
    """
    Combine session features into the six composite risk scores.

    Args:
        inputs: Feature values gathered from the session summary.
        config: Weights, thresholds and bucket cutoffs.

    Returns:
        RiskAssessment with concern and clinical-alert flags filled in.
    """
    w_mirror, w_order, w_rotation = config.dyslexia_weights
    dyslexia = (w_mirror * inputs.horizontal_mirror_similarity
                + w_order * (1 - inputs.stroke_order_score)
                + w_rotation * max(inputs.rotation_90_similarity, inputs.rotation_180_similarity))

    dysgraphia = 0.0
    if inputs.tremor_amplitude > config.dysgraphia_tremor_amplitude_px:
        dysgraphia += config.dysgraphia_tremor_penalty
    dysgraphia += config.dysgraphia_accuracy_weight * (100 - inputs.spatial_accuracy_score)
    dysgraphia += config.dysgraphia_pressure_weight * (100 - inputs.pressure_modulation_score)

    assessment = RiskAssessment(
        dyslexia_risk_score=_clamp(dyslexia),
        dysgraphia_risk_score=_clamp(dysgraphia),
        reversal_risk_score=_clamp(100 * inputs.mirror_confusion_score),
        attention_deficit_score=_clamp(100 - 100 * inputs.fluency_ratio),
        processing_speed_deficit_score=_clamp(processing_speed_deficit(inputs.avg_velocity, config)),
        working_memory_deficit_score=_clamp(100 - 100 * inputs.stroke_order_score),
    )

    headline = StatsUtils.mean([
        assessment.dyslexia_risk_score,
        assessment.dysgraphia_risk_score,
        assessment.reversal_risk_score,
    ])
    assessment.overall_risk_level = bucket_risk_level(headline, config)
    assessment.concern_flags = concern_flags(assessment)
    assessment.clinical_alert_flags = clinical_alert_flags(assessment.overall_risk_level)

    logger.debug("Risk assessed: mean=%.1f level=%s", headline, assessment.overall_risk_level.value)
    return assessment
