"""Splits one refined cell into normalized digit glyphs.

Pipeline per cell:
    1. Grayscale + inverse Otsu threshold (ink = foreground)
    2. Edge cleanup (residual border strokes)
    3. Border-artifact removal (blobs hugging the border)
    4. Split detection for two-digit fields (gap in the central band)
    5. Per half: ink extent -> resize to the inner box -> center on canvas

A blank cell (or half) is not an error: it simply yields no glyph.

Example:
    >>> segmenter = DigitSegmenter(get_default_config())
    >>> glyphs = segmenter.segment(cell_image, allow_split=True)
    >>> [g.image.shape for g in glyphs]
    [(28, 28), (28, 28)]
"""

import logging
from typing import List, Optional

import cv2
import numpy as np

from src.common.types import to_grayscale
from src.utils.image_ops import binarize_inverted, line_ratios

from .cleanup import remove_border_artifacts, remove_edge_lines
from .config_loader import SegmentationConfig, SplitConfig
from .types import DigitGlyph

logger = logging.getLogger(__name__)


def find_split_column(binary: np.ndarray, config: SplitConfig) -> Optional[int]:
    """Locate the gap between two digits.

    Only columns in the central band are scanned. Once a column inside a
    digit (ink ratio above `ink_ratio`) is followed by a blank column
    (below `blank_ratio`), the lowest-ratio column is tracked until ink
    resumes.

    Args:
        binary: Cleaned binary cell, ink = 255.
        config: Split detection thresholds.

    Returns:
        Column index where the cell should be cut, or None.
    """
    h, w = binary.shape
    ratios = line_ratios(binary, axis=0)

    start = int(w * config.band_exclude)
    end = w - start

    in_digit = False
    best = None
    best_ratio = 1.0

    for x in range(start, end):
        ratio = ratios[x]
        if best is not None:
            if ratio > config.ink_ratio:
                break
            if ratio < best_ratio:
                best, best_ratio = x, ratio
            continue

        if ratio > config.ink_ratio:
            in_digit = True
        elif in_digit and ratio < config.blank_ratio:
            best, best_ratio = x, ratio

    if best is None or not 0 < best < w:
        return None
    return best


def normalize_glyph(binary: np.ndarray, inner_size: int, glyph_size: int) -> Optional[np.ndarray]:
    """Crop to the ink extent and center it on a square canvas.

    The union bounding box of all external contours is resized (area
    interpolation, aspect ratio kept) so that its longer side equals
    `inner_size`, then pasted centered onto a `glyph_size` canvas.

    Returns:
        uint8 array (glyph_size, glyph_size), or None if there is no ink.
    """
    binary = np.ascontiguousarray(binary)
    contours, _ = cv2.findContours(binary, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    if not contours:
        return None

    rects = np.array([cv2.boundingRect(c) for c in contours])
    x0 = int(rects[:, 0].min())
    y0 = int(rects[:, 1].min())
    x1 = int((rects[:, 0] + rects[:, 2]).max())
    y1 = int((rects[:, 1] + rects[:, 3]).max())

    ink = binary[y0:y1, x0:x1]
    h, w = ink.shape
    scale = inner_size / max(h, w)
    new_w = max(1, int(round(w * scale)))
    new_h = max(1, int(round(h * scale)))
    resized = cv2.resize(ink, (new_w, new_h), interpolation=cv2.INTER_AREA)

    canvas = np.zeros((glyph_size, glyph_size), dtype=np.uint8)
    off_x = (glyph_size - new_w) // 2
    off_y = (glyph_size - new_h) // 2
    canvas[off_y : off_y + new_h, off_x : off_x + new_w] = resized
    return canvas


class DigitSegmenter:
    """Turns one refined cell raster into 0-2 classifier-ready glyphs.

    Args:
        config: Segmentation configuration.
    """

    def __init__(self, config: SegmentationConfig):
        self.config = config

    def segment(self, cell: np.ndarray, allow_split: bool = True) -> List[DigitGlyph]:
        """Segment a cell into glyphs, left to right.

        Args:
            cell: Refined cell raster (grayscale or BGR), printed border
                included.
            allow_split: Whether the field can hold two digits.

        Returns:
            0, 1 or 2 glyphs ordered left to right.

        Raises:
            ValueError: If the cell raster is empty.
        """
        if cell is None or cell.size == 0:
            raise ValueError("Invalid cell image: image is None or empty")

        gray = to_grayscale(cell)
        if int(gray.max()) - int(gray.min()) < self.config.glyph.min_contrast:
            return []

        binary = binarize_inverted(gray)

        edge = self.config.edge_cleanup
        remove_edge_lines(binary, edge.scan_depth, edge.line_ratio, edge.miss_tolerance)

        artifacts = self.config.artifacts
        remove_border_artifacts(binary, artifacts.margin_ratio, artifacts.outside_ratio)

        halves = [binary]
        if allow_split:
            split = find_split_column(binary, self.config.split)
            if split is not None:
                logger.debug(f"Splitting cell at column {split}/{binary.shape[1]}")
                halves = [binary[:, :split], binary[:, split:]]

        glyph_cfg = self.config.glyph
        glyphs = []
        for half in halves:
            ink_pixels = int(np.count_nonzero(half))
            if ink_pixels < glyph_cfg.min_ink_fraction * half.size:
                continue

            image = normalize_glyph(half, glyph_cfg.inner_size, glyph_cfg.glyph_size)
            if image is None:
                continue

            glyphs.append(DigitGlyph(image=image, index=len(glyphs), ink_pixels=ink_pixels))

        return glyphs
