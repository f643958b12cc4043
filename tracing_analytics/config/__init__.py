"""
Configuration package for the tracing analytics pipeline.
"""

from .settings import AnalyticsConfig, CanvasConfig, DEFAULT_CONFIG, DEFAULT_CANVAS

__all__ = ['AnalyticsConfig', 'CanvasConfig', 'DEFAULT_CONFIG', 'DEFAULT_CANVAS']
