"""Type definitions for the segmentation module."""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class DigitGlyph:
    """One normalized digit, ready for the classifier.

    Attributes:
        image: Square uint8 raster, ink 255 on background 0, centered.
        index: Left-to-right position within its cell (0 or 1).
        ink_pixels: Foreground pixel count before normalization.
    """

    image: np.ndarray
    index: int
    ink_pixels: int

    @property
    def size(self) -> int:
        return int(self.image.shape[0])
