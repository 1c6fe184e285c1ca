"""Digit classifier boundary.

The pipeline treats the classifier as a black box: one normalized glyph in,
one DigitPrediction out. Concrete engines live in engine_onnx.py and
engine_tesseract.py; `create_classifier` selects one from configuration.

Example:
    >>> from src.ocr import create_classifier, get_default_config
    >>> classifier = create_classifier(get_default_config().classifier)
    >>> prediction = classifier.classify(glyph.image)
    >>> print(prediction.digit, prediction.confidence)
    4 0.98
"""

import logging
from abc import ABC, abstractmethod

import numpy as np

from .config_loader import ClassifierConfig
from .types import DigitPrediction

logger = logging.getLogger(__name__)


class DigitClassifier(ABC):
    """Abstract base class for digit classifiers."""

    @abstractmethod
    def classify(self, glyph: np.ndarray) -> DigitPrediction:
        """Classify one glyph.

        Args:
            glyph: Single-channel uint8 raster, ink white on black.

        Returns:
            Predicted digit with confidence.
        """

    @staticmethod
    def validate_glyph(glyph: np.ndarray) -> None:
        if glyph is None or glyph.size == 0:
            raise ValueError("Invalid glyph: image is None or empty")
        if glyph.ndim != 2:
            raise ValueError(f"Glyph must be single-channel (H, W), got shape {glyph.shape}")


def create_classifier(config: ClassifierConfig) -> DigitClassifier:
    """Instantiate the engine named in the configuration.

    Raises:
        ValueError: If the engine type is unknown or required settings are missing.
    """
    if config.type == "onnx":
        from .engine_onnx import OnnxDigitClassifier

        if not config.model_path:
            raise ValueError("ONNX classifier requires 'model_path'")
        return OnnxDigitClassifier(config)

    if config.type == "tesseract":
        from .engine_tesseract import TesseractDigitClassifier

        return TesseractDigitClassifier(config)

    raise ValueError(f"Unknown classifier type: {config.type}")
