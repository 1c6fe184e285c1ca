"""MNIST-style digit classifier running an ONNX model through OpenCV DNN.

The model is expected to take a (1, 1, N, N) float tensor and return 10
scores (logits or probabilities) for digits 0-9.

Example:
    >>> config = ClassifierConfig(type="onnx", model_path="models/digits.onnx")
    >>> classifier = OnnxDigitClassifier(config)
    >>> classifier.classify(glyph)
    DigitPrediction(digit=3, confidence=0.97)
"""

import logging
import threading
from pathlib import Path

import cv2
import numpy as np

from .classifier import DigitClassifier
from .config_loader import ClassifierConfig
from .types import DigitPrediction

logger = logging.getLogger(__name__)


def softmax(scores: np.ndarray) -> np.ndarray:
    shifted = scores - np.max(scores)
    exp = np.exp(shifted)
    return exp / exp.sum()


class OnnxDigitClassifier(DigitClassifier):
    """Digit classifier backed by cv2.dnn.

    The network is loaded on first use. Inference is serialized with a lock
    because a cv2.dnn.Net instance is not safe to share between threads.

    Args:
        config: Classifier configuration (model_path required).
    """

    def __init__(self, config: ClassifierConfig):
        self.config = config
        self.model_path = Path(config.model_path)
        self._net = None
        self._lock = threading.Lock()

    def _load_model(self):
        if self._net is None:
            if not self.model_path.exists():
                raise FileNotFoundError(f"Classifier model not found: {self.model_path}")
            logger.info(f"Loading digit classifier from {self.model_path}")
            self._net = cv2.dnn.readNetFromONNX(str(self.model_path))
        return self._net

    def preprocess(self, glyph: np.ndarray) -> np.ndarray:
        """Glyph -> (1, 1, N, N) float32 blob."""
        size = self.config.input_size
        scale = 1.0 / 255.0 if self.config.normalize else 1.0
        return cv2.dnn.blobFromImage(glyph, scalefactor=scale, size=(size, size))

    def classify(self, glyph: np.ndarray) -> DigitPrediction:
        self.validate_glyph(glyph)
        blob = self.preprocess(glyph)

        with self._lock:
            net = self._load_model()
            net.setInput(blob)
            scores = net.forward().reshape(-1).astype(np.float64)

        if scores.size != 10:
            raise ValueError(f"Expected 10 class scores, model returned {scores.size}")

        # Models exported with a softmax head already return probabilities
        if scores.min() >= 0.0 and abs(scores.sum() - 1.0) < 1e-3:
            probs = scores
        else:
            probs = softmax(scores)

        digit = int(np.argmax(probs))
        confidence = float(np.clip(probs[digit], 0.0, 1.0))
        logger.debug(f"ONNX prediction: {digit} ({confidence:.3f})")
        return DigitPrediction(digit=digit, confidence=confidence)
