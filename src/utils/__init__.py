"""
Shared Utilities

Common functions used across all modules.
"""

from src.utils.image_ops import binarize_inverted, line_ratios
from src.utils.io import load_frame, save_image, save_json

__all__ = [
    "binarize_inverted",
    "line_ratios",
    "load_frame",
    "save_image",
    "save_json",
]
