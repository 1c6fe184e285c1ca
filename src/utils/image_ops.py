"""
Binary Image Helpers

Thresholding and line-density measurements shared by cell refinement and
digit segmentation. Ink is always the 255 foreground.
"""

import cv2
import numpy as np

from src.common.types import to_grayscale


def binarize_inverted(image: np.ndarray) -> np.ndarray:
    """Grayscale + global Otsu threshold, inverted so dark ink becomes 255."""
    gray = to_grayscale(image)
    _, binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY_INV + cv2.THRESH_OTSU)
    return binary


def line_ratios(binary: np.ndarray, axis: int) -> np.ndarray:
    """
    Foreground ratio of every line.

    Args:
        binary: Single-channel binary image.
        axis: 1 for one ratio per row, 0 for one ratio per column.

    Returns:
        float array of length H (axis=1) or W (axis=0).
    """
    return np.count_nonzero(binary, axis=axis) / binary.shape[axis]
