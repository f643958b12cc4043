"""
Tremor analysis for a single stroke.

Tremor is measured as the perpendicular deviation of each sample from the
chord joining the samples ``window`` steps before and after it. The chord
follows the intended path curvature, so what remains is high-frequency
oscillation. The deviation sequence is then analysed in the frequency domain
with a direct DFT restricted to the physiological tremor band.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from ..config.settings import AnalyticsConfig, DEFAULT_CONFIG
from ..utils.geometry import GeometryUtils
from ..utils.math_utils import StatsUtils
from ..utils.signal_processing import (
    dominant_frequency,
    high_pass_filter,
    spectral_entropy,
    zero_crossing_rate
)

logger = logging.getLogger(__name__)


class TremorSeverity(str, Enum):
    NONE = 'none'
    MILD = 'mild'
    MODERATE = 'moderate'
    SEVERE = 'severe'


@dataclass(frozen=True)
class TremorMetrics:
    """Tremor summary for one stroke (or the mean over several strokes)."""
    frequency: float = 0.0
    amplitude: float = 0.0
    power: float = 0.0
    has_significant_tremor: bool = False
    severity: TremorSeverity = TremorSeverity.NONE
    spectral_entropy: float = 0.0
    zero_crossing_rate: float = 0.0

    def to_dict(self):
        return {
            'frequency': self.frequency,
            'amplitude': self.amplitude,
            'power': self.power,
            'has_significant_tremor': self.has_significant_tremor,
            'severity': self.severity.value,
            'spectral_entropy': self.spectral_entropy,
            'zero_crossing_rate': self.zero_crossing_rate,
        }


def classify_tremor_severity(power: float, config: AnalyticsConfig = DEFAULT_CONFIG) -> TremorSeverity:
    """Step function of normalized tremor power (strictly greater than each cutoff)."""
    mild, moderate, severe = config.tremor_severity_cutoffs
    if power > severe:
        return TremorSeverity.SEVERE
    if power > moderate:
        return TremorSeverity.MODERATE
    if power > mild:
        return TremorSeverity.MILD
    return TremorSeverity.NONE


def chord_deviations(points: Sequence, window: int) -> List[float]:
    """Distance of each interior sample from the chord ``points[i-window] -> points[i+window]``."""
    deviations = []
    for i in range(window, len(points) - window):
        deviations.append(
            GeometryUtils.point_to_segment_distance(points[i], points[i - window], points[i + window])
        )
    return deviations


def estimate_sampling_rate(points: Sequence, fallback: float = 60.0) -> float:
    """Samples per second over the stroke; ``fallback`` for zero or unknown duration."""
    if len(points) < 2:
        return fallback
    duration_s = (points[-1].timestamp - points[0].timestamp) / 1000.0
    if duration_s <= 0:
        return fallback
    rate = len(points) / duration_s
    if not math.isfinite(rate) or rate <= 0:
        return fallback
    return rate


def detect_tremor(points: Sequence, config: AnalyticsConfig = DEFAULT_CONFIG,
                  sampling_rate: Optional[float] = None) -> TremorMetrics:
    """
    Measure tremor over one stroke's samples.

    Args:
        points: Ordered samples with ``x``, ``y`` and ``timestamp`` (ms).
        config: Analytics constants (window, band, scaling, cutoffs).
        sampling_rate: Override for the estimated sampling rate in Hz.

    Returns:
        TremorMetrics; all zero for strokes shorter than ``tremor_min_points``.
    """
    if len(points) < config.tremor_min_points:
        return TremorMetrics()

    deviations = chord_deviations(points, config.tremor_window)
    if not deviations:
        return TremorMetrics()

    fs = sampling_rate if sampling_rate else estimate_sampling_rate(points, config.default_sampling_rate_hz)
    amplitude = StatsUtils.mean(deviations)
    frequency, peak_power = dominant_frequency(deviations, fs, config.tremor_band_hz)
    power = min(config.tremor_power_cap, peak_power * config.tremor_power_scale)
    severity = classify_tremor_severity(power, config)

    # Spectral shape of the oscillation with slow drift removed
    mean_dev = amplitude
    centered = high_pass_filter([d - mean_dev for d in deviations], config.tremor_band_hz[0] / 2, fs)

    return TremorMetrics(
        frequency=frequency,
        amplitude=amplitude,
        power=power,
        has_significant_tremor=severity != TremorSeverity.NONE,
        severity=severity,
        spectral_entropy=spectral_entropy(centered, fs),
        zero_crossing_rate=zero_crossing_rate(centered),
    )


def average_tremor(metrics: Sequence[TremorMetrics], config: AnalyticsConfig = DEFAULT_CONFIG) -> TremorMetrics:
    """Mean of per-stroke tremor metrics; severity re-bucketed from the mean power."""
    if not metrics:
        return TremorMetrics()
    power = StatsUtils.mean([m.power for m in metrics])
    severity = classify_tremor_severity(power, config)
    return TremorMetrics(
        frequency=StatsUtils.mean([m.frequency for m in metrics]),
        amplitude=StatsUtils.mean([m.amplitude for m in metrics]),
        power=power,
        has_significant_tremor=severity != TremorSeverity.NONE,
        severity=severity,
        spectral_entropy=StatsUtils.mean([m.spectral_entropy for m in metrics]),
        zero_crossing_rate=StatsUtils.mean([m.zero_crossing_rate for m in metrics]),
    )
