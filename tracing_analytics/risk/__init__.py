"""
Advisory risk screening built from session features.
"""

from .risk_aggregator import (
    RiskLevel,
    RiskInputs,
    RiskAssessment,
    assess_risk,
    bucket_risk_level,
    processing_speed_deficit,
    concern_flags,
    clinical_alert_flags
)

__all__ = [
    'RiskLevel',
    'RiskInputs',
    'RiskAssessment',
    'assess_risk',
    'bucket_risk_level',
    'processing_speed_deficit',
    'concern_flags',
    'clinical_alert_flags'
]
