"""
Main processor for the Alignment module.

Orchestrates the frame -> canonical card stage:
1. Corner detection (sheet boundary)
2. Geometric validation (enclosed area, convexity)
3. Perspective rectification to the canonical raster

Implements fail-fast strategy: stops at first failure.
"""

import logging
from pathlib import Path
from typing import Optional

import numpy as np

from src.alignment.config_loader import INTERPOLATION_FLAGS, load_config
from src.alignment.corner_detector import CornerDetector
from src.alignment.geometric_validator import validate_quadrilateral
from src.alignment.image_rectification import order_points, rectify_card
from src.alignment.types import (
    AlignmentConfig,
    AlignmentResult,
    DecisionStatus,
    RejectionReason,
)

logger = logging.getLogger(__name__)


class AlignmentProcessor:
    """
    Detects the score card in a frame and rectifies it.

    Example:
        >>> processor = AlignmentProcessor()
        >>> result = processor.process(cv2.imread("card.jpg"))
        >>> if result.is_pass():
        ...     cv2.imwrite("card_canonical.png", result.card_image)
    """

    def __init__(
        self,
        config: Optional[AlignmentConfig] = None,
        config_path: Optional[Path] = None,
    ):
        """
        Initialize the alignment processor.

        Args:
            config: Pre-loaded configuration object. If None, will load from file.
            config_path: Path to config file. If None, uses default location.
        """
        if config is not None:
            self.config = config
            logger.info("Using provided configuration")
        else:
            self.config = load_config(config_path) if config_path else load_config()
            logger.info("Loaded configuration from file")

        self.detector = CornerDetector(self.config.corners)

    @property
    def card_size(self) -> tuple:
        """Canonical (width, height)."""
        return (
            self.config.rectification.card_width,
            self.config.rectification.card_height,
        )

    def detect_corners(self, frame: np.ndarray) -> Optional[np.ndarray]:
        """Run only the corner detector (used by the live guidance loop)."""
        return self.detector.detect(frame)

    def process(
        self, frame: np.ndarray, corners: Optional[np.ndarray] = None
    ) -> AlignmentResult:
        """
        Execute the alignment stage.

        Args:
            frame: Camera frame (grayscale, BGR or BGRA).
            corners: Already detected corners; detection runs when None.

        Returns:
            AlignmentResult with the canonical card on PASS.
        """
        rect_cfg = self.config.rectification

        logger.info("[Stage 1/3] Corner Detection")
        if corners is None:
            corners = self.detector.detect(frame)

        if corners is None:
            logger.warning("Alignment REJECTED at Stage 1: no card boundary found")
            return AlignmentResult(
                decision=DecisionStatus.REJECT,
                card_image=None,
                corners=None,
                rejection_reason=RejectionReason.CORNERS_NOT_FOUND,
            )

        logger.info("[Stage 2/3] Geometric Validation")
        corners = order_points(corners)
        is_valid, area = validate_quadrilateral(corners, rect_cfg.min_quad_area_px)
        if not is_valid:
            logger.warning("Alignment REJECTED at Stage 2: degenerate quadrilateral")
            return AlignmentResult(
                decision=DecisionStatus.REJECT,
                card_image=None,
                corners=corners,
                rejection_reason=RejectionReason.DEGENERATE_QUADRILATERAL,
                quad_area=area,
            )

        logger.info("[Stage 3/3] Perspective Rectification")
        try:
            card = rectify_card(
                frame,
                corners,
                rect_cfg.card_width,
                rect_cfg.card_height,
                interpolation=INTERPOLATION_FLAGS[rect_cfg.warp_interpolation],
                min_area=rect_cfg.min_quad_area_px,
            )
        except ValueError as e:
            logger.error(f"Rectification failed: {e}")
            return AlignmentResult(
                decision=DecisionStatus.REJECT,
                card_image=None,
                corners=corners,
                rejection_reason=RejectionReason.RECTIFICATION_FAILED,
                quad_area=area,
            )

        logger.info(f"Alignment PASSED: card {card.shape[1]}x{card.shape[0]}")
        return AlignmentResult(
            decision=DecisionStatus.PASS,
            card_image=card,
            corners=corners,
            rejection_reason=RejectionReason.NONE,
            quad_area=area,
        )
