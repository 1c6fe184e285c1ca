"""Unit tests for the classifier boundary and engines.

Engines are exercised with their backends mocked: no model file or
Tesseract binary is needed.
"""

from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from src.ocr import ClassifierConfig, DigitClassifier, DigitPrediction, create_classifier
from src.ocr.engine_onnx import OnnxDigitClassifier, softmax
from src.ocr.engine_tesseract import TesseractDigitClassifier


@pytest.fixture
def glyph():
    image = np.zeros((28, 28), dtype=np.uint8)
    image[4:24, 12:16] = 255
    return image


class TestDigitPrediction:
    def test_valid_prediction(self):
        prediction = DigitPrediction(digit=3, confidence=0.5)
        assert prediction.digit == 3

    @pytest.mark.parametrize("digit, confidence", [(10, 0.5), (-1, 0.5), (3, 1.5)])
    def test_invalid_prediction(self, digit, confidence):
        with pytest.raises(ValueError):
            DigitPrediction(digit=digit, confidence=confidence)


class TestCreateClassifier:
    def test_onnx_requires_model_path(self):
        with pytest.raises(ValueError, match="model_path"):
            create_classifier(ClassifierConfig(type="onnx", model_path=None))

    def test_onnx_engine_is_lazy(self, tmp_path):
        config = ClassifierConfig(type="onnx", model_path=str(tmp_path / "missing.onnx"))

        classifier = create_classifier(config)

        assert isinstance(classifier, OnnxDigitClassifier)
        assert isinstance(classifier, DigitClassifier)

    @patch("src.ocr.engine_tesseract.pytesseract")
    def test_tesseract_engine(self, mock_tesseract):
        mock_tesseract.get_tesseract_version.return_value = "5.3.0"

        classifier = create_classifier(ClassifierConfig(type="tesseract"))

        assert isinstance(classifier, TesseractDigitClassifier)


class TestOnnxDigitClassifier:
    def test_missing_model_raises_on_first_use(self, tmp_path, glyph):
        classifier = OnnxDigitClassifier(
            ClassifierConfig(type="onnx", model_path=str(tmp_path / "missing.onnx"))
        )

        with pytest.raises(FileNotFoundError):
            classifier.classify(glyph)

    def test_logits_are_softmaxed(self, tmp_path, glyph):
        classifier = OnnxDigitClassifier(
            ClassifierConfig(type="onnx", model_path=str(tmp_path / "model.onnx"))
        )
        logits = np.zeros((1, 10), dtype=np.float32)
        logits[0, 4] = 5.0
        classifier._net = MagicMock()
        classifier._net.forward.return_value = logits

        prediction = classifier.classify(glyph)

        assert prediction.digit == 4
        assert prediction.confidence == pytest.approx(softmax(logits[0].astype(np.float64))[4])
        blob = classifier._net.setInput.call_args.args[0]
        assert blob.shape == (1, 1, 28, 28)
        assert blob.max() <= 1.0

    def test_probabilities_used_as_is(self, tmp_path, glyph):
        classifier = OnnxDigitClassifier(
            ClassifierConfig(type="onnx", model_path=str(tmp_path / "model.onnx"))
        )
        probs = np.full((1, 10), 0.05, dtype=np.float32)
        probs[0, 9] = 0.55
        classifier._net = MagicMock()
        classifier._net.forward.return_value = probs

        prediction = classifier.classify(glyph)

        assert prediction.digit == 9
        assert prediction.confidence == pytest.approx(0.55, abs=1e-6)

    def test_invalid_glyph_rejected(self, tmp_path):
        classifier = OnnxDigitClassifier(
            ClassifierConfig(type="onnx", model_path=str(tmp_path / "model.onnx"))
        )

        with pytest.raises(ValueError, match="single-channel"):
            classifier.classify(np.zeros((28, 28, 3), dtype=np.uint8))


class TestTesseractDigitClassifier:
    @patch("src.ocr.engine_tesseract.pytesseract")
    def test_best_digit_selected(self, mock_tesseract, glyph):
        mock_tesseract.get_tesseract_version.return_value = "5.3.0"
        mock_tesseract.image_to_data.return_value = {
            "text": ["", "7", "l"],
            "conf": ["-1", "88", "40"],
        }
        classifier = TesseractDigitClassifier(ClassifierConfig(type="tesseract"))

        prediction = classifier.classify(glyph)

        assert prediction == DigitPrediction(digit=7, confidence=0.88)
        config_arg = mock_tesseract.image_to_data.call_args.kwargs["config"]
        assert "--psm 10" in config_arg

    @patch("src.ocr.engine_tesseract.pytesseract")
    def test_no_digit_gives_zero_confidence(self, mock_tesseract, glyph):
        mock_tesseract.get_tesseract_version.return_value = "5.3.0"
        mock_tesseract.image_to_data.return_value = {"text": ["", "x"], "conf": ["-1", "60"]}
        classifier = TesseractDigitClassifier(ClassifierConfig(type="tesseract"))

        prediction = classifier.classify(glyph)

        assert prediction.confidence == 0.0

    @patch("src.ocr.engine_tesseract.pytesseract")
    def test_missing_binary_raises_runtime_error(self, mock_tesseract):
        mock_tesseract.get_tesseract_version.side_effect = OSError("tesseract not found")

        with pytest.raises(RuntimeError, match="Tesseract not available"):
            TesseractDigitClassifier(ClassifierConfig(type="tesseract"))
