"""
Image Rectification Utilities

Provides corner ordering and the perspective warp that maps a detected
score card quadrilateral onto the canonical card raster. Every template
coordinate downstream is expressed in that canonical space.
"""

import logging
from typing import Union

import cv2
import numpy as np

from src.alignment.geometric_validator import calculate_quad_area

logger = logging.getLogger(__name__)


def order_points(pts: Union[np.ndarray, list]) -> np.ndarray:
    """
    Order 4 points as Top-Left, Top-Right, Bottom-Right, Bottom-Left.

    The ordering only depends on the point coordinates, never on the order
    in which the contour tracer returned them:
    - Sort all points by y (ties broken by x).
    - The first two are the top pair, the last two the bottom pair.
    - Within each pair the smaller x is the left corner.

    Args:
        pts: Array of 4 points with shape (4, 2) or list of [x, y] coordinates.
             A contour of shape (4, 1, 2) is accepted as well.

    Returns:
        Ordered float32 array of shape (4, 2): [TL, TR, BR, BL].

    Raises:
        ValueError: If input does not contain exactly 4 points.

    Example:
        >>> pts = np.array([[300, 150], [100, 200], [320, 400], [80, 380]])
        >>> order_points(pts)[0]  # Top-Left
        array([300., 150.], dtype=float32)
    """
    pts = np.array(pts, dtype=np.float32)
    if pts.ndim == 3 and pts.shape[1] == 1:
        pts = pts.reshape(-1, 2)

    if pts.shape != (4, 2):
        raise ValueError(
            f"Expected exactly 4 points with shape (4, 2), got shape {pts.shape}"
        )

    # lexsort uses the last key as primary: y first, then x
    by_y = pts[np.lexsort((pts[:, 0], pts[:, 1]))]

    top = by_y[:2][np.argsort(by_y[:2, 0], kind="stable")]
    bottom = by_y[2:][np.argsort(by_y[2:, 0], kind="stable")]

    rect = np.array([top[0], top[1], bottom[1], bottom[0]], dtype=np.float32)

    logger.debug(
        f"Ordered points: TL={rect[0]}, TR={rect[1]}, BR={rect[2]}, BL={rect[3]}"
    )

    return rect


def canonical_corners(width: int, height: int) -> np.ndarray:
    """
    Corners of the canonical card rectangle in TL, TR, BR, BL order.

    Args:
        width: Canonical card width in pixels.
        height: Canonical card height in pixels.

    Returns:
        float32 array of shape (4, 2).
    """
    return np.array(
        [
            [0, 0],  # Top-Left
            [width, 0],  # Top-Right
            [width, height],  # Bottom-Right
            [0, height],  # Bottom-Left
        ],
        dtype=np.float32,
    )


def rectify_card(
    image: np.ndarray,
    corners: Union[np.ndarray, list],
    width: int,
    height: int,
    interpolation: int = cv2.INTER_LINEAR,
    min_area: float = 1.0,
) -> np.ndarray:
    """
    Warp the card quadrilateral onto a canonical raster of fixed size.

    Computes the planar homography mapping the 4 corners to
    (0,0)/(W,0)/(W,H)/(0,H) and resamples the frame through it.

    Args:
        image: Input frame (H, W, C) or (H, W).
        corners: 4 corner points in frame coordinates, any order.
        width: Canonical card width.
        height: Canonical card height.
        interpolation: OpenCV interpolation flag (bilinear by default).
        min_area: Minimum enclosed quadrilateral area in pixels. Smaller
            (near-collinear) quadrilaterals give an unstable transform.

    Returns:
        Canonical card raster of shape (height, width[, C]).

    Raises:
        ValueError: If the image is empty, the corners are not 4 points,
            the target size is invalid or the quadrilateral is degenerate.

    Example:
        >>> card = rectify_card(frame, corners, 950, 1400)
        >>> card.shape[:2]
        (1400, 950)
    """
    if image is None or image.size == 0:
        raise ValueError("Invalid input image: image is None or empty")

    if width < 1 or height < 1:
        raise ValueError(f"Invalid canonical size: {width}x{height}")

    rect = order_points(corners)

    area = calculate_quad_area(rect)
    if area < min_area:
        raise ValueError(
            f"Quadrilateral area {area:.1f}px is below {min_area:.1f}px; "
            "points are near-collinear or too close together"
        )

    dst = canonical_corners(width, height)

    M = cv2.getPerspectiveTransform(rect, dst)
    if not np.all(np.isfinite(M)):
        raise ValueError("Perspective transform is singular")

    rectified = cv2.warpPerspective(image, M, (width, height), flags=interpolation)

    logger.info(f"Rectified card from quadrilateral (area {area:.0f}px) to {width}x{height}")

    return rectified
