"""Digit segmentation: refined cell -> normalized digit glyphs.

Core Components:
    - config_loader: Thresholds with Pydantic validation
    - cleanup: Edge-line and border-artifact removal
    - digit_segmenter: Split detection and glyph normalization
"""

from .cleanup import remove_border_artifacts, remove_edge_lines
from .config_loader import SegmentationConfig, get_default_config, load_config
from .digit_segmenter import DigitSegmenter, find_split_column, normalize_glyph
from .types import DigitGlyph

__all__ = [
    "DigitGlyph",
    "DigitSegmenter",
    "SegmentationConfig",
    "load_config",
    "get_default_config",
    "find_split_column",
    "normalize_glyph",
    "remove_edge_lines",
    "remove_border_artifacts",
]
