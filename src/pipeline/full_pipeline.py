"""
Full End-to-End Pipeline

Orchestrates every stage for score card recognition:

    Frame -> corner detection -> rectification -> grid search
          -> digit segmentation (per cell) -> classification -> aggregation

A capture attempt either recognizes every score cell or is rejected as a
whole with a single reason.

Usage:
    python -m src.pipeline.full_pipeline --input card.jpg --output result.json
"""

import argparse
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import numpy as np

from src.alignment import AlignmentProcessor
from src.alignment.types import RejectionReason as AlignmentRejection
from src.common.observer import PipelineObserver
from src.grid import CellGridLocator, GridConfig
from src.grid import get_default_config as get_default_grid_config
from src.grid.types import RefinedCell
from src.ocr import DigitClassifier, DigitPrediction, OCRConfig, ResultAggregator, create_classifier
from src.ocr import get_default_config as get_default_ocr_config
from src.segmentation import DigitSegmenter, SegmentationConfig
from src.segmentation import get_default_config as get_default_segmentation_config
from src.utils.io import load_frame, save_json

from .config_loader import PipelineConfig
from .config_loader import get_default_config as get_default_pipeline_config
from .session import CaptureSession
from .types import DecisionStatus, PipelineResult, RejectionReason

logger = logging.getLogger(__name__)

CellKey = Tuple[int, int]


class ScoreCardPipeline:
    """End-to-end pipeline for score card recognition.

    Every stage can be injected; missing stages are built from the bundled
    default configuration of their package.

    Args:
        alignment: Corner detection + rectification stage.
        grid_config: Template, refiner and offset search settings.
        segmentation_config: Digit segmentation thresholds.
        ocr_config: Classifier and override-rule settings.
        classifier: Digit classifier; created from `ocr_config` when None.
        config: Orchestration settings.
    """

    def __init__(
        self,
        alignment: Optional[AlignmentProcessor] = None,
        grid_config: Optional[GridConfig] = None,
        segmentation_config: Optional[SegmentationConfig] = None,
        ocr_config: Optional[OCRConfig] = None,
        classifier: Optional[DigitClassifier] = None,
        config: Optional[PipelineConfig] = None,
    ):
        self.config = config or get_default_pipeline_config()
        self.alignment = alignment or AlignmentProcessor()

        grid_config = grid_config or get_default_grid_config()
        self.field_spec = grid_config.field_spec
        self.locator = CellGridLocator(grid_config)

        self.segmenter = DigitSegmenter(segmentation_config or get_default_segmentation_config())

        ocr_config = ocr_config or get_default_ocr_config()
        self.classifier = classifier or create_classifier(ocr_config.classifier)
        self.aggregator = ResultAggregator(ocr_config.aggregation, self.field_spec)

        logger.info(
            f"Pipeline ready: card {self.alignment.card_size[0]}x{self.alignment.card_size[1]}, "
            f"{self.field_spec.digit_cell_count} cells, "
            f"classifier {type(self.classifier).__name__}"
        )

    def process(
        self,
        frame: np.ndarray,
        corners: Optional[np.ndarray] = None,
        session: Optional[CaptureSession] = None,
    ) -> PipelineResult:
        """
        Run one capture attempt.

        Args:
            frame: Camera frame (grayscale, BGR or BGRA).
            corners: Card corners from the live loop; detected when None.
            session: Capture session providing the observers.

        Returns:
            PipelineResult with every cell on PASS, no cells on REJECT.
        """
        start_time = time.perf_counter()
        observer = session.observer if session is not None else PipelineObserver()

        def elapsed_ms() -> float:
            return (time.perf_counter() - start_time) * 1000

        # Stage 1: corners + rectification
        alignment = self.alignment.process(frame, corners)
        observer.on_corners(frame, alignment.corners)

        if not alignment.is_pass():
            if alignment.rejection_reason == AlignmentRejection.CORNERS_NOT_FOUND:
                reason = RejectionReason.DETECTION_FAILURE
            else:
                reason = RejectionReason.RECTIFICATION_FAILURE
            return self._reject(reason, alignment.corners, elapsed_ms())

        card = alignment.card_image
        observer.on_rectified(card)

        # Stage 2: grid search
        grid = self.locator.locate(card, observer)
        if not grid.success:
            result = self._reject(
                RejectionReason.GRID_SEARCH_EXHAUSTED, alignment.corners, elapsed_ms()
            )
            result.offset_iterations = grid.iterations
            return result

        # Stage 3: segmentation + classification per cell
        predictions = self.recognize_cells(card, grid.cells, observer)

        # Stage 4: aggregation
        results = self.aggregator.aggregate(predictions)
        observer.on_results(results)

        processing_time_ms = elapsed_ms()
        logger.info(f"Score card recognized in {processing_time_ms:.1f} ms")
        return PipelineResult(
            decision=DecisionStatus.PASS,
            results=results,
            corners=alignment.corners,
            offset=grid.offset,
            offset_iterations=grid.iterations,
            processing_time_ms=processing_time_ms,
        )

    def recognize_cells(
        self,
        card: np.ndarray,
        cells: List[RefinedCell],
        observer: Optional[PipelineObserver] = None,
    ) -> Dict[CellKey, List[DigitPrediction]]:
        """Segment and classify every refined cell, keyed by (row, col)."""
        observer = observer or PipelineObserver()

        def recognize(cell: RefinedCell) -> Tuple[CellKey, List[DigitPrediction]]:
            field = self.field_spec.fields[cell.row]
            glyphs = self.segmenter.segment(cell.bbox.crop(card), allow_split=field.max_digits == 2)
            observer.on_glyphs(cell.row, cell.col, [g.image for g in glyphs])
            return (cell.row, cell.col), [self.classifier.classify(g.image) for g in glyphs]

        if self.config.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                pairs = list(executor.map(recognize, cells))
        else:
            pairs = [recognize(cell) for cell in cells]

        predictions = dict(pairs)
        filled = sum(1 for p in predictions.values() if p)
        logger.info(f"Classified {len(predictions)} cells ({filled} with ink)")
        return predictions

    def detect_live(
        self, frames: Iterable[np.ndarray], session: CaptureSession
    ) -> Iterator[Tuple[int, Optional[np.ndarray]]]:
        """Corner detection over a frame stream, for live guidance.

        Yields (frame_index, corners or None) until the frames run out or
        `session.stop()` is called; the flag is checked before every frame.
        """
        for index, frame in enumerate(frames):
            if session.is_stopped:
                logger.info(f"Live detection stopped before frame {index}")
                return

            corners = self.alignment.detect_corners(frame)
            session.frames_processed += 1
            session.observer.on_corners(frame, corners)
            yield index, corners

    def run_live(
        self, frames: Iterable[np.ndarray], session: CaptureSession
    ) -> Optional[PipelineResult]:
        """Attempt a capture on every frame with a card until one succeeds.

        The session is stopped after the first recognized card.

        Returns:
            The first PASS result, or None if the stream ended or the
            session was stopped first.
        """
        current = {}

        def tracked() -> Iterator[np.ndarray]:
            for frame in frames:
                current["frame"] = frame
                yield frame

        for index, corners in self.detect_live(tracked(), session):
            if corners is None:
                continue

            result = self.process(current["frame"], corners=corners, session=session)
            if result.is_pass():
                logger.info(f"Card captured on frame {index}")
                session.stop()
                return result
            logger.info(f"Frame {index}: {result.get_error_message()}")

        return None

    def _reject(
        self,
        reason: RejectionReason,
        corners: Optional[np.ndarray],
        processing_time_ms: float,
    ) -> PipelineResult:
        result = PipelineResult(
            decision=DecisionStatus.REJECT,
            rejection_reason=reason,
            corners=corners,
            processing_time_ms=processing_time_ms,
        )
        logger.warning(result.get_error_message())
        return result


def main():
    parser = argparse.ArgumentParser(description="Recognize the scores on a photographed score card")
    parser.add_argument("--input", type=str, required=True, help="Input image")
    parser.add_argument("--output", type=str, default=None, help="Output JSON file")
    parser.add_argument(
        "--classifier", choices=["onnx", "tesseract"], default=None, help="Override classifier type"
    )
    parser.add_argument("--model", type=str, default=None, help="ONNX model path")
    parser.add_argument("--workers", type=int, default=None, help="Worker threads per card")
    parser.add_argument("--debug-dir", type=str, default=None, help="Write debug overlays here")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

    config = get_default_pipeline_config()
    if args.workers is not None:
        config = config.model_copy(update={"max_workers": args.workers})
    debug_dir = args.debug_dir or config.debug_dir

    ocr_config = get_default_ocr_config()
    classifier_updates = {}
    if args.classifier:
        classifier_updates["type"] = args.classifier
    if args.model:
        classifier_updates["model_path"] = args.model
    if classifier_updates:
        ocr_config = ocr_config.model_copy(
            update={"classifier": ocr_config.classifier.model_copy(update=classifier_updates)}
        )

    pipeline = ScoreCardPipeline(ocr_config=ocr_config, config=config)

    observers = []
    if debug_dir:
        from src.utils.visualization import DebugImageRecorder

        observers.append(DebugImageRecorder(Path(debug_dir)))
    session = CaptureSession(observers)

    frame = load_frame(Path(args.input))
    result = pipeline.process(frame, session=session)

    if result.is_pass():
        for r in result.results:
            if r.text:
                print(f"{r.field_id:<20} player {r.col + 1}: {r.text} ({r.confidence:.2f})")
    else:
        print(result.get_error_message())

    if args.output:
        save_json(result.to_dict(), Path(args.output))
        logger.info(f"Result written to {args.output}")


if __name__ == "__main__":
    main()
