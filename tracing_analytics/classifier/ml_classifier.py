"""
Machine Learning Character Classifier

Recognizes traced uppercase letters with scikit-learn. Strokes are
rasterized into a 28x28 grid and classified by a random forest trained on
jittered renderings of the reference letter definitions, so no external
handwriting dataset is needed.
"""

import asyncio
import logging
import math
import os
from typing import List, Optional, Sequence, Tuple

import joblib
import numpy as np
from sklearn.ensemble import RandomForestClassifier
from sklearn.preprocessing import StandardScaler

from ..reference.letters import LETTER_DEFINITIONS
from ..utils.geometry import Point
from .base import ClassificationResult, Prediction, ReversalType, placeholder_classification
from .rasterizer import flip_horizontal, flip_vertical, rasterize_strokes, rotate_180

logger = logging.getLogger(__name__)

_REVERSAL_TRANSFORMS = (
    (ReversalType.HORIZONTAL_FLIP, flip_horizontal),
    (ReversalType.VERTICAL_FLIP, flip_vertical),
    (ReversalType.ROTATION_180, rotate_180),
)


class MLCharacterClassifier:
    """
    Random-forest letter classifier over rasterized strokes.

    When the prediction is wrong, the flipped and rotated rasters are
    classified too; if one of them is recognized as the expected letter the
    tracing is reported as a reversal of that kind.
    """

    def __init__(self, model_path: Optional[str] = None, samples_per_letter: int = 30,
                 n_estimators: int = 100, max_top_predictions: int = 5, random_state: int = 42):
        self.model_path = model_path
        self.samples_per_letter = samples_per_letter
        self.n_estimators = n_estimators
        self.max_top_predictions = max_top_predictions
        self.random_state = random_state
        self.classifier = None
        self.scaler = StandardScaler()
        self._load_or_train_model()

    @staticmethod
    def _letter_strokes(letter: str, samples_per_segment: int = 8) -> List[List[Point]]:
        path = LETTER_DEFINITIONS[letter].reference_path(samples_per_segment)
        return [[Point(p.x, p.y) for p in path.stroke_points(k)] for k in range(path.stroke_count)]

    @staticmethod
    def _jitter(strokes: List[List[Point]], rng: np.random.RandomState) -> List[List[Point]]:
        """Random scale, rotation, translation and per-point noise."""
        points = [p for stroke in strokes for p in stroke]
        cx = sum(p.x for p in points) / len(points)
        cy = sum(p.y for p in points) / len(points)
        sx, sy = rng.uniform(0.8, 1.2, size=2)
        angle = math.radians(rng.uniform(-10, 10))
        tx, ty = rng.uniform(-20, 20, size=2)
        noise = rng.uniform(2.0, 8.0)
        cos_a, sin_a = math.cos(angle), math.sin(angle)

        jittered = []
        for stroke in strokes:
            new_stroke = []
            for p in stroke:
                dx = (p.x - cx) * sx
                dy = (p.y - cy) * sy
                new_stroke.append(Point(
                    cx + dx * cos_a - dy * sin_a + tx + rng.normal(0, noise),
                    cy + dx * sin_a + dy * cos_a + ty + rng.normal(0, noise),
                ))
            jittered.append(new_stroke)
        return jittered

    def _generate_training_data(self) -> Tuple[np.ndarray, np.ndarray]:
        """Jittered renderings of every letter definition."""
        rng = np.random.RandomState(self.random_state)
        features = []
        labels = []
        for letter in sorted(LETTER_DEFINITIONS):
            strokes = self._letter_strokes(letter)
            features.append(rasterize_strokes(strokes).ravel())
            labels.append(letter)
            for _ in range(self.samples_per_letter - 1):
                features.append(rasterize_strokes(self._jitter(strokes, rng)).ravel())
                labels.append(letter)
        return np.vstack(features), np.array(labels)

    def _load_or_train_model(self):
        """Load existing model or train a new one."""
        if self.model_path and os.path.exists(self.model_path):
            try:
                model_data = joblib.load(self.model_path)
                self.classifier = model_data['classifier']
                self.scaler = model_data['scaler']
                logger.info("Loaded letter classifier from %s", self.model_path)
                return
            except Exception as e:
                logger.warning("Could not load letter classifier from %s (%s); retraining",
                               self.model_path, e)

        logger.info("Training letter classifier on %d renderings per letter", self.samples_per_letter)
        X, y = self._generate_training_data()
        X_scaled = self.scaler.fit_transform(X)

        self.classifier = RandomForestClassifier(n_estimators=self.n_estimators,
                                                 random_state=self.random_state)
        self.classifier.fit(X_scaled, y)

        if self.model_path:
            self._save_model()

    def _save_model(self):
        """Save the trained model."""
        model_data = {
            'classifier': self.classifier,
            'scaler': self.scaler
        }
        joblib.dump(model_data, self.model_path)

    def _probabilities(self, raster: np.ndarray) -> np.ndarray:
        features = self.scaler.transform([raster.ravel()])
        return self.classifier.predict_proba(features)[0]

    def predict_raster(self, raster: np.ndarray) -> List[Prediction]:
        """Ranked predictions for one raster, most confident first."""
        probabilities = self._probabilities(raster)
        order = np.argsort(probabilities)[::-1][:self.max_top_predictions]
        return [Prediction(str(self.classifier.classes_[i]), float(probabilities[i])) for i in order]

    def classify(self, strokes: Sequence[Sequence], expected_letter: str) -> ClassificationResult:
        """
        Classify traced strokes against the expected letter.

        Args:
            strokes: Strokes, each a sequence of points with ``x`` and ``y``.
            expected_letter: Letter the child was asked to trace.

        Returns:
            ClassificationResult; a placeholder when there is nothing to classify.
        """
        if self.classifier is None or not any(len(s) for s in strokes):
            return placeholder_classification(expected_letter)

        expected = expected_letter.upper()
        raster = rasterize_strokes(strokes)
        top = self.predict_raster(raster)
        best = top[0]
        is_correct = best.char == expected

        reversal_type = ReversalType.NONE
        reversal_confidence = None
        if not is_correct and expected in self.classifier.classes_:
            expected_index = list(self.classifier.classes_).index(expected)
            for kind, transform in _REVERSAL_TRANSFORMS:
                probabilities = self._probabilities(transform(raster))
                if int(np.argmax(probabilities)) == expected_index:
                    reversal_type = kind
                    reversal_confidence = float(probabilities[expected_index])
                    break

        result = ClassificationResult(
            predicted_char=best.char,
            expected_char=expected_letter,
            confidence=best.confidence,
            is_correct=is_correct,
            top_predictions=top,
            reversal_detected=reversal_type != ReversalType.NONE,
            reversal_type=reversal_type,
            reversal_confidence=reversal_confidence,
        )
        logger.info("Classified %s as %s (%.1f%%)%s", expected_letter, best.char, best.confidence * 100,
                    f" reversal={reversal_type.value}" if result.reversal_detected else "")
        return result

    async def aclassify(self, strokes: Sequence[Sequence], expected_letter: str) -> ClassificationResult:
        """Run ``classify`` in a worker thread."""
        return await asyncio.to_thread(self.classify, strokes, expected_letter)
