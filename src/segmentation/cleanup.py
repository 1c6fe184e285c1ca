"""Ink cleanup inside a refined cell.

A refined cell still carries its printed border and, after small
misalignments, slivers of neighbouring lines. Two passes remove them
before glyph extraction:

1. Edge lines: rows/columns near the border that are mostly ink.
2. Border artifacts: blobs whose outline lies mostly outside the central
   region of the cell.

Both functions modify the binary image in place.
"""

import logging
from typing import Callable, Iterable

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def _scan(
    indices: Iterable[int],
    ratio_at: Callable[[int], float],
    blank: Callable[[int], None],
    line_ratio: float,
    miss_tolerance: int,
) -> int:
    removed = 0
    misses = 0
    for i in indices:
        if ratio_at(i) > line_ratio:
            blank(i)
            removed += 1
            misses = 0
        else:
            misses += 1
            if misses >= miss_tolerance:
                break
    return removed


def remove_edge_lines(
    binary: np.ndarray,
    scan_depth: float = 0.15,
    line_ratio: float = 0.5,
    miss_tolerance: int = 2,
) -> int:
    """Blank border-parallel lines that are mostly ink.

    Scans inward from each of the 4 borders up to `scan_depth` of the
    relevant dimension. A direction stops early after `miss_tolerance`
    consecutive lines that do not qualify.

    Args:
        binary: Binary cell image, ink = 255. Modified in place.
        scan_depth: Maximum scan depth as a fraction of height / width.
        line_ratio: Minimum ink fraction for a line to be blanked.
        miss_tolerance: Consecutive misses that end a direction.

    Returns:
        Number of blanked lines.
    """
    h, w = binary.shape
    row_depth = max(1, int(h * scan_depth))
    col_depth = max(1, int(w * scan_depth))

    def row_ratio(y: int) -> float:
        return np.count_nonzero(binary[y, :]) / w

    def col_ratio(x: int) -> float:
        return np.count_nonzero(binary[:, x]) / h

    def blank_row(y: int) -> None:
        binary[y, :] = 0

    def blank_col(x: int) -> None:
        binary[:, x] = 0

    removed = 0
    removed += _scan(range(row_depth), row_ratio, blank_row, line_ratio, miss_tolerance)
    removed += _scan(range(h - 1, h - 1 - row_depth, -1), row_ratio, blank_row, line_ratio, miss_tolerance)
    removed += _scan(range(col_depth), col_ratio, blank_col, line_ratio, miss_tolerance)
    removed += _scan(range(w - 1, w - 1 - col_depth, -1), col_ratio, blank_col, line_ratio, miss_tolerance)

    if removed:
        logger.debug(f"Edge cleanup blanked {removed} line(s)")
    return removed


def remove_border_artifacts(
    binary: np.ndarray,
    margin_ratio: float = 0.15,
    outside_ratio: float = 0.75,
) -> int:
    """Erase blobs whose outline lies mostly near the cell border.

    For every external contour the fraction of its boundary points outside
    the central region (inset by `margin_ratio` on every side) is computed;
    contours above `outside_ratio` are filled with background.

    Args:
        binary: Binary cell image, ink = 255. Modified in place.
        margin_ratio: Inset of the central region.
        outside_ratio: Maximum tolerated outside fraction.

    Returns:
        Number of erased contours.
    """
    h, w = binary.shape
    contours, _ = cv2.findContours(binary, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_NONE)

    min_x, max_x = w * margin_ratio, w - w * margin_ratio
    min_y, max_y = h * margin_ratio, h - h * margin_ratio

    erased = 0
    for contour in contours:
        pts = contour.reshape(-1, 2)
        outside = (
            (pts[:, 0] < min_x) | (pts[:, 0] > max_x) | (pts[:, 1] < min_y) | (pts[:, 1] > max_y)
        )
        if outside.mean() > outside_ratio:
            cv2.drawContours(binary, [contour], -1, 0, thickness=cv2.FILLED)
            erased += 1

    if erased:
        logger.debug(f"Removed {erased} border artifact(s)")
    return erased
