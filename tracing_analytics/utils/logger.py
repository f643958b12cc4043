"""
Logging utilities for tracing sessions and stroke summaries.
"""

import datetime
import logging
from typing import Optional

_LOGGER_NAME = 'tracing_analytics.session'


class SessionLogger:
    """Handles logging of completed strokes and finalized sessions."""

    def __init__(self, debug_file: Optional[str] = None, name: str = _LOGGER_NAME):
        self.logger = logging.getLogger(name)
        self._file_handler = None
        if debug_file:
            try:
                handler = logging.FileHandler(debug_file, mode='w')
            except OSError as e:
                self.logger.warning("Could not open debug file %s: %s", debug_file, e)
            else:
                handler.setFormatter(logging.Formatter('[%(asctime)s] %(levelname)s %(message)s'))
                handler.setLevel(logging.DEBUG)
                self.logger.setLevel(logging.DEBUG)
                self.logger.addHandler(handler)
                self._file_handler = handler
                self.logger.debug("Debug logging started at %s", datetime.datetime.now())

    def log_stroke(self, summary):
        """Log a completed stroke summary."""
        self.logger.debug(
            "Stroke %s: points=%d duration=%.0fms pauses=%d (%.0fms) reversals=%d "
            "ballistic=%s tremor=%s",
            summary.stroke_id,
            summary.point_count,
            summary.stroke_duration_ms,
            summary.pause_count,
            summary.pause_duration_ms,
            summary.reversal_count,
            'YES' if summary.is_ballistic else 'NO',
            summary.tremor.severity.value,
        )

    def log_session(self, summary):
        """Log a finalized session summary."""
        self.logger.info(
            "Session %s (%s): strokes=%d expected=%d predicted=%s confidence=%.1f%% risk=%s",
            summary.session_id,
            summary.letter,
            summary.sequencing.stroke_count_actual,
            summary.sequencing.stroke_count_expected,
            summary.ml.predicted_char,
            summary.ml.confidence * 100,
            summary.risk.overall_risk_level.value,
        )

    def log_classifier_failure(self, letter: str, error: Optional[BaseException] = None):
        """Log a classifier failure that was replaced by a placeholder verdict."""
        if error is None:
            self.logger.warning("Classifier returned no result for letter %s; using placeholder", letter)
        else:
            self.logger.warning("Classifier failed for letter %s (%s: %s); using placeholder",
                                letter, type(error).__name__, error)

    def close(self):
        """Detach and close the debug file handler."""
        if self._file_handler is not None:
            self.logger.removeHandler(self._file_handler)
            self._file_handler.close()
            self._file_handler = None
