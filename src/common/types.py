"""
Common type definitions for the score card reader.

Geometry and raster helpers shared between pipeline stages. Boxes are
Pydantic models in canonical card coordinates, so invalid rectangles
are rejected at construction instead of producing empty crops later.
"""

from typing import Union

import cv2
import numpy as np
from pydantic import BaseModel, Field, field_validator, model_validator


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """
    Convert a BGR, BGRA or single-channel image to 2D grayscale.

    Args:
        image: uint8 array of shape (H, W), (H, W, 1), (H, W, 3) or (H, W, 4).

    Returns:
        Grayscale array of shape (H, W). Grayscale input is returned
        as-is (no copy).

    Raises:
        ValueError: If the channel layout is not supported.
    """
    if image.ndim == 2:
        return image
    if image.ndim == 3:
        channels = image.shape[2]
        if channels == 1:
            return image[:, :, 0]
        if channels == 3:
            return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        if channels == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    raise ValueError(f"Unsupported image shape for grayscale conversion: {image.shape}")


class BBox(BaseModel):
    """
    Axis-aligned box [x_min, y_min, x_max, y_max] with exclusive max edges.

    Used for padded nominal cells and refined cell boundaries in canonical
    card coordinates.

    Example:
        >>> bbox = BBox(x_min=100, y_min=50, x_max=195, y_max=103)
        >>> print(bbox.width, bbox.height)  # 95, 53
        >>> crop = bbox.crop(card)
    """

    x_min: int = Field(..., description="Minimum X-coordinate (left edge)")
    y_min: int = Field(..., description="Minimum Y-coordinate (top edge)")
    x_max: int = Field(..., description="Maximum X-coordinate (right edge)")
    y_max: int = Field(..., description="Maximum Y-coordinate (bottom edge)")

    model_config = {"frozen": True}

    @field_validator("x_min", "y_min", "x_max", "y_max", mode="before")
    @classmethod
    def _convert_to_int(cls, v: Union[int, float]) -> int:
        """Convert coordinate to int, rounding if float."""
        if isinstance(v, (int, float, np.integer, np.floating)):
            return int(round(float(v)))
        raise ValueError(f"Coordinate must be numeric, got {type(v)}")

    @model_validator(mode="after")
    def _validate_bbox(self) -> "BBox":
        if self.x_min >= self.x_max:
            raise ValueError(
                f"Invalid bbox: x_min ({self.x_min}) must be < x_max ({self.x_max})"
            )
        if self.y_min >= self.y_max:
            raise ValueError(
                f"Invalid bbox: y_min ({self.y_min}) must be < y_max ({self.y_max})"
            )
        if self.x_min < 0 or self.y_min < 0:
            raise ValueError(
                f"Invalid bbox: coordinates must be non-negative, "
                f"got x_min={self.x_min}, y_min={self.y_min}"
            )
        return self

    @property
    def width(self) -> int:
        return self.x_max - self.x_min

    @property
    def height(self) -> int:
        return self.y_max - self.y_min

    @property
    def aspect_ratio(self) -> float:
        """Width / height."""
        return self.width / self.height

    def translate(self, dx: int, dy: int) -> "BBox":
        """Return a copy shifted by (dx, dy)."""
        return BBox(
            x_min=self.x_min + dx,
            y_min=self.y_min + dy,
            x_max=self.x_max + dx,
            y_max=self.y_max + dy,
        )

    def crop(self, image: np.ndarray) -> np.ndarray:
        """Return the view of `image` covered by this box."""
        return image[self.y_min : self.y_max, self.x_min : self.x_max]

    def __repr__(self) -> str:
        return (
            f"BBox(x_min={self.x_min}, y_min={self.y_min}, "
            f"x_max={self.x_max}, y_max={self.y_max}, "
            f"width={self.width}, height={self.height})"
        )
