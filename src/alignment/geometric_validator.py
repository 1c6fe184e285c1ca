"""
Geometric validation functions for the Alignment module.

Validates the detected card quadrilateral before performing the
perspective transformation.
"""

import logging
from typing import Tuple, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def calculate_quad_area(keypoints: Union[np.ndarray, list]) -> float:
    """
    Enclosed area of a quadrilateral given in traversal order.

    Args:
        keypoints: 4 corner points in order [TL, TR, BR, BL].

    Returns:
        Absolute polygon area in square pixels.
    """
    keypoints = np.array(keypoints, dtype=np.float32)

    if keypoints.shape != (4, 2):
        raise ValueError(
            f"Expected 4 keypoints with shape (4, 2), got {keypoints.shape}"
        )

    return float(abs(cv2.contourArea(keypoints)))


def is_convex_quadrilateral(rect: Union[np.ndarray, list]) -> bool:
    """
    Check if 4 ordered points form a convex quadrilateral.

    For each consecutive edge pair (P1->P2, P2->P3) the 2D cross product
    is computed; all of them share one sign for a convex polygon. Mixed
    signs indicate concavity or self-intersection.

    Args:
        rect: Ordered points [TL, TR, BR, BL] with shape (4, 2).

    Returns:
        True if the quadrilateral is convex, False otherwise.
    """
    rect = np.array(rect, dtype=np.float64)
    cross_products = []

    for i in range(4):
        p1 = rect[i]
        p2 = rect[(i + 1) % 4]
        p3 = rect[(i + 2) % 4]

        v1 = p2 - p1
        v2 = p3 - p2

        cross_products.append(v1[0] * v2[1] - v1[1] * v2[0])

    # Allow small numerical errors near zero
    signs = [cp > 1e-6 for cp in cross_products]
    is_convex = all(signs) or not any(signs)

    if not is_convex:
        logger.warning(
            f"Non-convex quadrilateral detected. Cross products: {cross_products}"
        )

    return is_convex


def validate_quadrilateral(
    keypoints: Union[np.ndarray, list], min_area: float
) -> Tuple[bool, float]:
    """
    Gate applied before rectification.

    Rejects quadrilaterals whose enclosed area is below `min_area`
    (near-collinear corners make the homography unstable) and
    non-convex ones (self-intersecting corner order).

    Args:
        keypoints: 4 corner points in order [TL, TR, BR, BL].
        min_area: Minimum enclosed area in square pixels.

    Returns:
        Tuple of (is_valid, area).

    Example:
        >>> points = np.array([[100, 100], [400, 100], [400, 300], [100, 300]])
        >>> validate_quadrilateral(points, min_area=1000.0)
        (True, 60000.0)
    """
    area = calculate_quad_area(keypoints)

    if area < min_area:
        logger.warning(f"Quadrilateral area {area:.1f}px below minimum {min_area:.1f}px")
        return False, area

    if not is_convex_quadrilateral(keypoints):
        return False, area

    logger.debug(f"Quadrilateral valid: area={area:.1f}px")
    return True, area
