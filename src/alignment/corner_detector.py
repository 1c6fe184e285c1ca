"""
Score card boundary detection.

Finds the sheet's 4-corner boundary in a raw camera frame:
blur -> edge map -> external contours -> polygon approximation ->
largest 4-vertex approximation -> deterministic corner ordering.

A frame either yields a complete ordered quadrilateral or nothing; there
is no approximate result.
"""

import logging
from typing import Optional

import cv2
import numpy as np

from src.alignment.image_rectification import order_points
from src.alignment.types import CornerDetectionConfig
from src.common.types import to_grayscale

logger = logging.getLogger(__name__)


class CornerDetector:
    """
    Locates the score card quadrilateral in a frame.

    Example:
        >>> detector = CornerDetector(config.corners)
        >>> corners = detector.detect(frame)
        >>> if corners is not None:
        ...     tl, tr, br, bl = corners
    """

    def __init__(self, config: CornerDetectionConfig):
        self.config = config

    def detect(self, frame: np.ndarray) -> Optional[np.ndarray]:
        """
        Detect the card corners.

        Args:
            frame: Grayscale, BGR or BGRA uint8 frame.

        Returns:
            float32 array (4, 2) ordered [TL, TR, BR, BL], or None if no
            4-vertex contour was found.

        Raises:
            ValueError: If the frame is None or empty.
        """
        if frame is None or frame.size == 0:
            raise ValueError("Invalid input frame: frame is None or empty")

        edges = self._edge_map(frame)
        contours, _ = cv2.findContours(edges, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

        min_area = self.config.min_area_ratio * frame.shape[0] * frame.shape[1]
        best_quad = None
        best_area = 0.0

        for contour in contours:
            perimeter = cv2.arcLength(contour, True)
            approx = cv2.approxPolyDP(
                contour, self.config.approx_epsilon_ratio * perimeter, True
            )
            if len(approx) != 4:
                continue

            area = float(cv2.contourArea(approx))
            if area > best_area and area >= min_area:
                best_area = area
                best_quad = approx

        if best_quad is None:
            logger.debug(f"No 4-vertex contour among {len(contours)} contours")
            return None

        corners = order_points(best_quad.reshape(4, 2))
        logger.debug(f"Card corners found: area={best_area:.0f}px, corners={corners.tolist()}")
        return corners

    def _edge_map(self, frame: np.ndarray) -> np.ndarray:
        gray = to_grayscale(frame)
        k = self.config.blur_kernel_size
        blurred = cv2.GaussianBlur(gray, (k, k), 0)
        return cv2.Canny(
            blurred, self.config.canny_low_threshold, self.config.canny_high_threshold
        )
