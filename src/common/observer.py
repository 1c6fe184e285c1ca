"""
Observer hooks for pipeline stages.

Stages report intermediate results (detected corners, rectified card,
offset attempts, located grid, glyphs, final results) through these
callbacks instead of drawing debug output themselves. The base class
implements every hook as a no-op; subclasses override what they need.

Hooks may be invoked from worker threads when parallel evaluation is
enabled, so implementations must not assume the caller's thread.
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np


class PipelineObserver:
    """No-op base observer."""

    def on_corners(self, frame: np.ndarray, corners: Optional[np.ndarray]) -> None:
        """Called after corner detection (corners is None when not found)."""

    def on_rectified(self, card: np.ndarray) -> None:
        """Called with the canonical card raster."""

    def on_offset_tried(self, index: int, offset: Tuple[float, float], success: bool) -> None:
        """Called once per evaluated grid search offset."""

    def on_grid_located(self, card: np.ndarray, cells: Sequence) -> None:
        """Called with the refined cells of the accepted offset."""

    def on_glyphs(self, row: int, col: int, glyphs: List[np.ndarray]) -> None:
        """Called with the normalized glyphs of one cell."""

    def on_results(self, results: Sequence) -> None:
        """Called with the aggregated recognition results."""


class CompositeObserver(PipelineObserver):
    """Fans every callback out to several observers."""

    def __init__(self, observers: Sequence[PipelineObserver] = ()):
        self.observers = list(observers)

    def on_corners(self, frame: np.ndarray, corners: Optional[np.ndarray]) -> None:
        for observer in self.observers:
            observer.on_corners(frame, corners)

    def on_rectified(self, card: np.ndarray) -> None:
        for observer in self.observers:
            observer.on_rectified(card)

    def on_offset_tried(self, index: int, offset: Tuple[float, float], success: bool) -> None:
        for observer in self.observers:
            observer.on_offset_tried(index, offset, success)

    def on_grid_located(self, card: np.ndarray, cells: Sequence) -> None:
        for observer in self.observers:
            observer.on_grid_located(card, cells)

    def on_glyphs(self, row: int, col: int, glyphs: List[np.ndarray]) -> None:
        for observer in self.observers:
            observer.on_glyphs(row, col, glyphs)

    def on_results(self, results: Sequence) -> None:
        for observer in self.observers:
            observer.on_results(results)
