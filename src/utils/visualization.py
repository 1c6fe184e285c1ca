"""
Visualization Utilities

Debug overlays for the recognition pipeline. `DebugImageRecorder` is a
PipelineObserver that writes one image per stage into a directory:

    corners.png  detected card boundary on the input frame
    card.png     rectified card
    grid.png     refined cells (green) and their search boxes (grey)
    glyphs.png   matplotlib montage of the normalized glyphs per cell
"""

import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import cv2
import matplotlib.pyplot as plt
import numpy as np

from src.common.observer import PipelineObserver
from src.utils.io import save_image

logger = logging.getLogger(__name__)

CORNER_LABELS = ("TL", "TR", "BR", "BL")


def to_bgr(image: np.ndarray) -> np.ndarray:
    """Copy of the image as 3-channel BGR for drawing."""
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
    return image.copy()


def draw_corners(frame: np.ndarray, corners: np.ndarray) -> np.ndarray:
    """Draw the ordered quadrilateral with labelled corners."""
    canvas = to_bgr(frame)
    pts = np.round(corners).astype(np.int32).reshape(-1, 1, 2)
    cv2.polylines(canvas, [pts], isClosed=True, color=(0, 255, 0), thickness=3)
    for label, (x, y) in zip(CORNER_LABELS, pts.reshape(-1, 2)):
        cv2.circle(canvas, (int(x), int(y)), 8, (0, 0, 255), -1)
        cv2.putText(
            canvas, label, (int(x) + 10, int(y) + 10), cv2.FONT_HERSHEY_SIMPLEX, 1.0, (0, 0, 255), 2
        )
    return canvas


def draw_cells(card: np.ndarray, cells: Sequence) -> np.ndarray:
    """Draw refined cells and the padded boxes they were searched in."""
    canvas = to_bgr(card)
    for cell in cells:
        sb = cell.spec.search_box
        cv2.rectangle(canvas, (sb.x_min, sb.y_min), (sb.x_max - 1, sb.y_max - 1), (160, 160, 160), 1)
        b = cell.bbox
        cv2.rectangle(canvas, (b.x_min, b.y_min), (b.x_max - 1, b.y_max - 1), (0, 200, 0), 2)
    return canvas


def plot_glyphs(
    glyphs: Dict[Tuple[int, int], List[np.ndarray]],
    labels: Optional[Dict[Tuple[int, int], str]] = None,
    save_path: Path = None,
):
    """
    Plot every non-empty cell's glyphs side by side, one cell per tile.

    Args:
        glyphs: Glyph rasters keyed by (row, col)
        labels: Optional tile titles keyed by (row, col)
        save_path: Optional path to save figure
    """
    keys = [k for k in sorted(glyphs) if glyphs[k]]
    if not keys:
        return None

    cols = min(6, len(keys))
    rows = (len(keys) + cols - 1) // cols
    fig, axes = plt.subplots(rows, cols, figsize=(cols * 1.6, rows * 1.2), squeeze=False)

    for ax in axes.flat:
        ax.axis('off')

    for ax, key in zip(axes.flat, keys):
        ax.imshow(np.hstack(glyphs[key]), cmap='gray', vmin=0, vmax=255)
        title = labels.get(key, "") if labels else ""
        ax.set_title(f"{key[0]},{key[1]} {title}".strip(), fontsize=8)

    fig.tight_layout()
    if save_path:
        fig.savefig(save_path, bbox_inches='tight', dpi=120)
    plt.close(fig)
    return fig


class DebugImageRecorder(PipelineObserver):
    """Writes stage overlays of the last capture attempt to a directory.

    Glyph and offset callbacks may arrive from worker threads; they only
    record data. Plotting happens in `on_results`.
    """

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self.offsets: List[Tuple[int, Tuple[float, float], bool]] = []
        self.glyphs: Dict[Tuple[int, int], List[np.ndarray]] = {}

    def on_corners(self, frame, corners):
        if corners is None:
            return
        save_image(draw_corners(frame, corners), self.output_dir / "corners.png")

    def on_rectified(self, card):
        with self._lock:
            self.offsets.clear()
            self.glyphs.clear()
        save_image(card, self.output_dir / "card.png")

    def on_offset_tried(self, index, offset, success):
        with self._lock:
            self.offsets.append((index, offset, success))

    def on_grid_located(self, card, cells):
        save_image(draw_cells(card, cells), self.output_dir / "grid.png")

    def on_glyphs(self, row, col, glyphs):
        with self._lock:
            self.glyphs[(row, col)] = list(glyphs)

    def on_results(self, results):
        labels = {(r.row, r.col): r.text for r in results}
        plot_glyphs(self.glyphs, labels, self.output_dir / "glyphs.png")
        logger.info(
            f"Debug images written to {self.output_dir} ({len(self.offsets)} offsets tried)"
        )
