"""
Data types and structures for the Alignment module.

Provides type-safe containers for configuration and results of the
frame -> canonical card stage.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np


class DecisionStatus(Enum):
    """Stage decision outcomes."""

    PASS = "PASS"
    REJECT = "REJECT"


class RejectionReason(Enum):
    """Specific reasons for rejection."""

    CORNERS_NOT_FOUND = "Corners Not Found"  # No 4-vertex contour in the frame
    DEGENERATE_QUADRILATERAL = "Degenerate Quadrilateral"  # Too small / non-convex
    RECTIFICATION_FAILED = "Rectification Failed"  # Transform could not be applied
    NONE = "None"  # No rejection (passed all checks)


@dataclass
class CornerDetectionConfig:
    """Configuration for sheet boundary detection."""

    blur_kernel_size: int
    canny_low_threshold: float
    canny_high_threshold: float
    approx_epsilon_ratio: float  # Fraction of contour perimeter
    min_area_ratio: float  # Minimum quad area as fraction of the frame


@dataclass
class RectificationConfig:
    """Configuration for the canonical card raster."""

    card_width: int
    card_height: int
    warp_interpolation: str
    min_quad_area_px: float  # Below this the homography is considered unstable


@dataclass
class AlignmentConfig:
    """Complete alignment module configuration."""

    corners: CornerDetectionConfig
    rectification: RectificationConfig


@dataclass
class AlignmentResult:
    """
    Output from the alignment stage.

    Attributes:
        decision: PASS or REJECT status.
        card_image: The canonical card raster (None if rejected).
        corners: Ordered TL, TR, BR, BL corners in frame coordinates
            (None if no quadrilateral was found).
        rejection_reason: Specific reason if rejected.
        quad_area: Enclosed area of the detected quadrilateral in pixels.
    """

    decision: DecisionStatus
    card_image: Optional[np.ndarray]
    corners: Optional[np.ndarray]
    rejection_reason: RejectionReason
    quad_area: float = 0.0

    def is_pass(self) -> bool:
        """Check if the stage passed."""
        return self.decision == DecisionStatus.PASS

    def get_error_message(self) -> str:
        """Get human-readable error message."""
        if self.is_pass():
            return "Card rectified"

        reason_messages = {
            RejectionReason.CORNERS_NOT_FOUND: "No card boundary found in frame",
            RejectionReason.DEGENERATE_QUADRILATERAL: (
                f"Card boundary is degenerate (area {self.quad_area:.0f}px)"
            ),
            RejectionReason.RECTIFICATION_FAILED: "Perspective transform failed",
        }

        return reason_messages.get(
            self.rejection_reason, f"Rejected: {self.rejection_reason.value}"
        )
