"""
Card Alignment: sheet boundary detection and perspective rectification.

Locates the score card quadrilateral in a camera frame and warps it onto
the canonical card raster used by all field templates.

Pipeline stages:
1. Corner detection (edge map + largest 4-vertex contour)
2. Geometric validation (area, convexity)
3. Perspective rectification (warp to canonical size)
"""

from src.alignment.config_loader import load_config
from src.alignment.corner_detector import CornerDetector
from src.alignment.image_rectification import order_points, rectify_card
from src.alignment.processor import AlignmentProcessor
from src.alignment.types import (
    AlignmentConfig,
    AlignmentResult,
    DecisionStatus,
    RejectionReason,
)

__all__ = [
    "AlignmentProcessor",
    "CornerDetector",
    "load_config",
    "order_points",
    "rectify_card",
    "AlignmentConfig",
    "AlignmentResult",
    "DecisionStatus",
    "RejectionReason",
]
