"""Tightens a padded nominal cell to its printed boundary.

The padded crop contains the printed rule lines around the cell plus
whatever ink the player wrote. Rule lines are the only rows/columns that
are almost completely ink, so a density scan from each side finds them
without any knowledge of the exact print position.

Example:
    >>> refiner = CellRefiner(RefinerConfig())
    >>> box = refiner.refine(card[y0:y1, x0:x1])
    >>> if box is None:
    ...     pass  # caller tries the next alignment offset
"""

import logging
from typing import Optional, Tuple

import numpy as np

from src.common.types import BBox
from src.utils.image_ops import binarize_inverted, line_ratios

from .config_loader import RefinerConfig

logger = logging.getLogger(__name__)


class CellRefiner:
    """Finds the grid-line bounding box inside a padded cell crop.

    Args:
        config: Refinement thresholds.
    """

    def __init__(self, config: RefinerConfig):
        self.config = config
        self._min_ratio = config.expected_ratio * (1.0 - config.ratio_tolerance)
        self._max_ratio = config.expected_ratio * (1.0 + config.ratio_tolerance)

    def refine(self, crop: np.ndarray) -> Optional[BBox]:
        """Refine a padded crop to the printed cell boundary.

        Args:
            crop: Padded nominal cell raster (grayscale or BGR).

        Returns:
            Bounding box in crop coordinates (exclusive max edges) spanning
            the outermost grid lines, or None when fewer than the required
            lines were found on an axis or the box has the wrong proportions.
        """
        if crop is None or crop.size == 0:
            return None

        binary = binarize_inverted(crop)

        rows = self._boundary_pair(line_ratios(binary, axis=1))
        if rows is None:
            return None
        cols = self._boundary_pair(line_ratios(binary, axis=0))
        if cols is None:
            return None

        top, bottom = rows
        left, right = cols
        box = BBox(x_min=left, y_min=top, x_max=right + 1, y_max=bottom + 1)

        if not self.is_valid_ratio(box.width, box.height):
            logger.debug(
                f"Refined box {box.width}x{box.height} rejected: "
                f"ratio {box.aspect_ratio:.2f} outside [{self._min_ratio:.2f}, {self._max_ratio:.2f}]"
            )
            return None

        return box

    def is_valid_ratio(self, width: float, height: float) -> bool:
        """Check width/height against the expected cell proportions."""
        if height <= 0:
            return False
        return self._min_ratio <= width / height <= self._max_ratio

    def _boundary_pair(self, ratios: np.ndarray) -> Optional[Tuple[int, int]]:
        """First qualifying line scanning inward from each end of one axis."""
        dense = np.flatnonzero(ratios > self.config.line_density_threshold)
        if len(dense) == 0:
            return None
        # Adjacent dense rows belong to one printed (thick) line
        line_count = 1 + int(np.count_nonzero(np.diff(dense) > 1))
        if line_count < self.config.min_lines_per_axis:
            return None
        return int(dense[0]), int(dense[-1])
