"""Adaptive score-field cell location on the canonical card.

Even after rectification the printed grid rarely sits exactly where the
template says: print offsets and corner detection jitter move it by a few
percent of the card. The locator therefore searches a bounded set of
trial offsets. For each offset it builds the complete cell set and refines
every cell; the first offset for which every single cell refines wins.
Offsets are never scored against each other and a partial grid is never
returned.

Offsets are enumerated centre-out, so the untouched template is always
tried first and small corrections are preferred over large ones.

Example:
    >>> locator = CellGridLocator(get_default_config())
    >>> result = locator.locate(card)
    >>> if result.success:
    ...     for cell in result.cells:
    ...         print(cell.row, cell.col, cell.bbox)
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Tuple

import numpy as np

from src.common.observer import PipelineObserver
from src.common.types import BBox

from .cell_refiner import CellRefiner
from .config_loader import GridConfig
from .types import CellSpec, GridSearchResult, RefinedCell

logger = logging.getLogger(__name__)

Offset = Tuple[float, float]


def _clipped_box(x0: float, y0: float, x1: float, y1: float, width: int, height: int) -> BBox:
    left = min(max(int(round(x0)), 0), width - 1)
    top = min(max(int(round(y0)), 0), height - 1)
    right = min(max(int(round(x1)), left + 1), width)
    bottom = min(max(int(round(y1)), top + 1), height)
    return BBox(x_min=left, y_min=top, x_max=right, y_max=bottom)


class CellGridLocator:
    """Bounded backtracking search for a fully resolvable cell grid.

    Args:
        config: Grid configuration (template, refiner, search, field spec).
        refiner: Cell refiner; built from `config.refiner` when omitted.
    """

    def __init__(self, config: GridConfig, refiner: Optional[CellRefiner] = None):
        self.config = config
        self.refiner = refiner or CellRefiner(config.refiner)

    def trial_offsets(self, width: int, height: int) -> List[Offset]:
        """All trial offsets in canonical pixels, in search order."""
        search = self.config.search
        kx = np.arange(search.steps_x) - (search.steps_x - 1) / 2.0
        ky = np.arange(search.steps_y) - (search.steps_y - 1) / 2.0

        step_x = 2 * search.range_x * width / (search.steps_x - 1) if search.steps_x > 1 else 0.0
        step_y = 2 * search.range_y * height / (search.steps_y - 1) if search.steps_y > 1 else 0.0

        steps = [(float(i), float(j)) for j in ky for i in kx]
        steps.sort(key=lambda s: (abs(s[0]) + abs(s[1]), max(abs(s[0]), abs(s[1])), s[1], s[0]))

        return [(i * step_x, j * step_y) for i, j in steps]

    def build_cells(self, offset: Offset, width: int, height: int) -> List[CellSpec]:
        """Nominal cell set for one trial offset, ordered by (row, col)."""
        t = self.config.template
        spec = self.config.field_spec
        dx, dy = offset

        cell_w = t.cell_width * width
        cell_h = t.cell_height * height
        pad_x = t.padding_x * cell_w
        pad_y = t.padding_y * cell_h

        cells = []
        for row, definition, index_in_block in spec.block_positions():
            if not definition.requires_digit_input:
                continue

            block_y = t.upper_block_y if definition.upper_block else t.lower_block_y
            y = (block_y + index_in_block * t.pitch_y) * height + dy

            for col in range(spec.player_columns):
                x = (t.origin_x + col * t.pitch_x) * width + dx
                search_box = _clipped_box(
                    x - pad_x, y - pad_y, x + cell_w + pad_x, y + cell_h + pad_y, width, height
                )
                cells.append(
                    CellSpec(
                        row=row,
                        col=col,
                        field_id=definition.field_id,
                        x=x,
                        y=y,
                        w=cell_w,
                        h=cell_h,
                        search_box=search_box,
                    )
                )
        return cells

    def refine_cells(
        self,
        card: np.ndarray,
        cells: List[CellSpec],
        cancelled: Optional[Callable[[], bool]] = None,
    ) -> Optional[List[RefinedCell]]:
        """Refine every cell; None as soon as one cell fails (or on cancel)."""
        refined = []
        for cell in cells:
            if cancelled is not None and cancelled():
                return None

            box = self.refiner.refine(cell.search_box.crop(card))
            if box is None:
                logger.debug(f"Cell ({cell.row}, {cell.col}) '{cell.field_id}' did not refine")
                return None

            refined.append(
                RefinedCell(spec=cell, bbox=box.translate(cell.search_box.x_min, cell.search_box.y_min))
            )
        return refined

    def locate(
        self, card: np.ndarray, observer: Optional[PipelineObserver] = None
    ) -> GridSearchResult:
        """Search trial offsets until one resolves every cell.

        Args:
            card: Canonical card raster.
            observer: Optional callbacks for debug overlays.

        Returns:
            GridSearchResult; `success` is False when the search space is
            exhausted.

        Raises:
            ValueError: If the card raster is empty.
        """
        if card is None or card.size == 0:
            raise ValueError("Invalid card image: image is None or empty")

        height, width = card.shape[:2]
        offsets = self.trial_offsets(width, height)
        observer = observer or PipelineObserver()

        logger.info(
            f"Searching {len(offsets)} offsets for {self.config.field_spec.digit_cell_count} cells"
        )

        if self.config.search.max_workers > 1:
            result = self._search_parallel(card, offsets, observer)
        else:
            result = self._search_sequential(card, offsets, observer)

        if result.success:
            logger.info(
                f"Grid located at offset ({result.offset[0]:.1f}, {result.offset[1]:.1f}) "
                f"after {result.iterations} iteration(s)"
            )
            observer.on_grid_located(card, result.cells)
        else:
            logger.warning(f"Grid search exhausted after {result.iterations} offsets")

        return result

    def _search_sequential(
        self, card: np.ndarray, offsets: List[Offset], observer: PipelineObserver
    ) -> GridSearchResult:
        height, width = card.shape[:2]

        for index, offset in enumerate(offsets):
            cells = self.refine_cells(card, self.build_cells(offset, width, height))
            observer.on_offset_tried(index, offset, cells is not None)

            if cells is not None:
                return GridSearchResult(
                    success=True,
                    offset=offset,
                    offset_index=index,
                    iterations=index + 1,
                    cells=cells,
                )

        return GridSearchResult(success=False, iterations=len(offsets))

    def _search_parallel(
        self, card: np.ndarray, offsets: List[Offset], observer: PipelineObserver
    ) -> GridSearchResult:
        """Evaluate offsets concurrently; the lowest successful index wins.

        Workers abandon an offset once a lower-indexed offset has succeeded,
        so the accepted offset is the one the sequential search would pick.
        """
        height, width = card.shape[:2]
        lock = threading.Lock()
        best = {"index": len(offsets)}
        evaluated = {"count": 0}

        def evaluate(index: int, offset: Offset):
            def cancelled() -> bool:
                return best["index"] < index

            if cancelled():
                return index, None

            with lock:
                evaluated["count"] += 1

            cells = self.refine_cells(card, self.build_cells(offset, width, height), cancelled)
            if cells is not None:
                with lock:
                    best["index"] = min(best["index"], index)
            return index, cells

        successes = {}
        with ThreadPoolExecutor(max_workers=self.config.search.max_workers) as executor:
            futures = [executor.submit(evaluate, i, o) for i, o in enumerate(offsets)]
            for future in as_completed(futures):
                index, cells = future.result()
                observer.on_offset_tried(index, offsets[index], cells is not None)
                if cells is not None:
                    successes[index] = cells

        if not successes:
            return GridSearchResult(success=False, iterations=evaluated["count"])

        index = min(successes)
        return GridSearchResult(
            success=True,
            offset=offsets[index],
            offset_index=index,
            iterations=evaluated["count"],
            cells=successes[index],
        )
