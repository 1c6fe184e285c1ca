"""Tests for the debug overlay observer."""

from unittest.mock import Mock

import matplotlib

matplotlib.use("Agg")

import numpy as np

from src.ocr import DigitClassifier, DigitPrediction
from src.pipeline import CaptureSession, ScoreCardPipeline
from src.utils.visualization import DebugImageRecorder, draw_corners, plot_glyphs


def test_draw_corners_keeps_input_untouched(sample_card_frame):
    frame, corners = sample_card_frame
    original = frame.copy()

    canvas = draw_corners(frame, corners)

    assert canvas.shape == frame.shape
    assert np.array_equal(frame, original)
    assert not np.array_equal(canvas, frame)


def test_plot_glyphs_skips_empty_cells(tmp_path):
    assert plot_glyphs({(0, 0): []}, save_path=tmp_path / "g.png") is None
    assert not (tmp_path / "g.png").exists()


def test_recorder_writes_stage_images(tmp_path, frame_factory):
    classifier = Mock(spec=DigitClassifier)
    classifier.classify.return_value = DigitPrediction(digit=3, confidence=0.9)
    recorder = DebugImageRecorder(tmp_path / "debug")
    session = CaptureSession([recorder])

    result = ScoreCardPipeline(classifier=classifier).process(
        frame_factory(ink={(1, 0): [(0.4, 0.6)]}), session=session
    )

    assert result.is_pass()
    for name in ("corners.png", "card.png", "grid.png", "glyphs.png"):
        assert (tmp_path / "debug" / name).exists()
    assert recorder.offsets[0] == (0, (0.0, 0.0), True)
