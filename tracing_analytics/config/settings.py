"""
Configuration settings for the tracing analytics pipeline.

All thresholds the pipeline relies on live here so that a session can be
analysed with a different set of product constants without touching the
extractors themselves.
"""

from dataclasses import dataclass, replace
from typing import Tuple


@dataclass(frozen=True)
class CanvasConfig:
    """Geometry of the tracing canvas the letter definitions are drawn on."""

    WIDTH: float = 600.0
    HEIGHT: float = 800.0
    LETTER_WIDTH: float = 400.0
    LETTER_HEIGHT: float = 500.0
    BASELINE: float = 500.0

    @property
    def center_x(self) -> float:
        return self.WIDTH / 2

    @property
    def center_y(self) -> float:
        return self.HEIGHT / 2


@dataclass(frozen=True)
class AnalyticsConfig:
    """Product-tunable constants for stroke and session analytics."""

    # Kinematics
    pause_threshold_ms: float = 150.0
    ballistic_ratio_threshold: float = 2.0
    smoothing_window: int = 5

    # Direction reversals (sharp turns inside one stroke)
    reversal_stride: int = 4
    reversal_angle_deg: float = 135.0
    reversal_min_vector_px: float = 3.0

    # Tremor
    tremor_min_points: int = 10
    tremor_window: int = 5
    tremor_band_hz: Tuple[float, float] = (2.0, 12.0)
    tremor_power_scale: float = 1000.0
    tremor_power_cap: float = 100.0
    tremor_severity_cutoffs: Tuple[float, float, float] = (10.0, 20.0, 30.0)
    default_sampling_rate_hz: float = 60.0

    # Shape quality
    closure_gap_px: float = 20.0
    closure_min_points: int = 5
    corner_angle_deg: float = 90.0
    junction_tolerance_px: float = 20.0

    # Spatial accuracy against the reference path
    off_track_threshold_px: float = 30.0
    neighbor_segment_max_px: float = 50.0
    accuracy_tolerance_px: float = 50.0

    # Stroke segmentation and sequencing
    lift_off_gap_ms: float = 200.0
    min_stroke_points: int = 2
    continuity_gap_px: float = 20.0
    continuity_overlap_px: float = 5.0
    closed_letters: str = "ABDOPQR"
    letter_closure_gap_px: float = 30.0
    letter_closure_min_points: int = 10

    # Risk aggregation
    dyslexia_weights: Tuple[float, float, float] = (40.0, 30.0, 30.0)
    dysgraphia_tremor_amplitude_px: float = 5.0
    dysgraphia_tremor_penalty: float = 30.0
    dysgraphia_accuracy_weight: float = 0.4
    dysgraphia_pressure_weight: float = 0.3
    processing_speed_steps: Tuple[Tuple[float, float], ...] = ((30.0, 70.0), (50.0, 40.0), (70.0, 20.0))
    risk_level_cutoffs: Tuple[float, float, float, float] = (15.0, 30.0, 50.0, 70.0)

    # Character classifier
    classifier_timeout_s: float = 5.0
    max_top_predictions: int = 5

    # Reference path
    samples_per_segment: int = 30
    reference_overlay_enabled: bool = False

    # Persistence
    summary_version: str = "1.0.0"

    def replace(self, **overrides) -> "AnalyticsConfig":
        """Return a copy with the given fields overridden."""
        return replace(self, **overrides)


DEFAULT_CONFIG = AnalyticsConfig()
DEFAULT_CANVAS = CanvasConfig()
