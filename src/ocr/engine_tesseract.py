"""Tesseract fallback classifier for single digit glyphs.

Tesseract runs in single-character mode on an upscaled, inverted copy of
the glyph (dark ink on white, as Tesseract expects).

Example:
    >>> config = ClassifierConfig(type="tesseract")
    >>> classifier = TesseractDigitClassifier(config)
    >>> prediction = classifier.classify(glyph)
    >>> print(prediction.digit, prediction.confidence)
    5 0.91
"""

import logging

import cv2
import numpy as np
import pytesseract

from .classifier import DigitClassifier
from .config_loader import ClassifierConfig
from .types import DigitPrediction

logger = logging.getLogger(__name__)

UPSCALE_SIZE = 64
BORDER = 16


class TesseractDigitClassifier(DigitClassifier):
    """Wrapper for Tesseract OCR restricted to one digit.

    Args:
        config: Classifier configuration.

    Raises:
        RuntimeError: If the Tesseract binary is not available.
    """

    def __init__(self, config: ClassifierConfig):
        self.config = config

        # Verify Tesseract is available
        try:
            version = pytesseract.get_tesseract_version()
            logger.info(f"Tesseract classifier initialized: version {version}")
        except Exception as e:
            logger.error(f"Tesseract not found or not properly configured: {e}")
            raise RuntimeError(
                "Tesseract not available. Please install Tesseract OCR.\n"
                "Linux: sudo apt-get install tesseract-ocr\n"
                "MacOS: brew install tesseract"
            ) from e

    def preprocess(self, glyph: np.ndarray) -> np.ndarray:
        image = cv2.resize(glyph, (UPSCALE_SIZE, UPSCALE_SIZE), interpolation=cv2.INTER_CUBIC)
        image = cv2.bitwise_not(image)
        return cv2.copyMakeBorder(
            image, BORDER, BORDER, BORDER, BORDER, cv2.BORDER_CONSTANT, value=255
        )

    def classify(self, glyph: np.ndarray) -> DigitPrediction:
        """Classify one glyph.

        Returns digit 0 with confidence 0.0 when Tesseract reads no digit, so
        the aggregator's minimum confidence flags the cell.
        """
        self.validate_glyph(glyph)
        image = self.preprocess(glyph)

        # NOTE: tessedit_char_whitelist makes Tesseract report confidence 0,
        # digits are filtered afterwards instead.
        tesseract_config = f"--psm {self.config.tesseract_psm}"
        data = pytesseract.image_to_data(
            image, config=tesseract_config, output_type=pytesseract.Output.DICT
        )

        best = None
        for text, conf in zip(data["text"], data["conf"]):
            digits = [c for c in str(text).strip() if c.isdigit()]
            conf = float(conf)
            if not digits or conf < 0:
                continue
            if best is None or conf > best[1]:
                best = (int(digits[0]), conf)

        if best is None:
            logger.warning("Tesseract returned no digit for glyph")
            return DigitPrediction(digit=0, confidence=0.0)

        digit, conf = best
        return DigitPrediction(digit=digit, confidence=min(conf / 100.0, 1.0))
