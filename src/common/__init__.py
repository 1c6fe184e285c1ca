"""
Common types and utilities shared across all modules.

Geometry and raster helpers used by alignment, grid location and
segmentation, plus the observer hooks every stage reports through.
"""

from src.common.observer import CompositeObserver, PipelineObserver
from src.common.types import BBox, to_grayscale

__all__ = ["BBox", "CompositeObserver", "PipelineObserver", "to_grayscale"]
