"""
Tests for the adaptive cell grid search.

Cards are drawn from the bundled template (see conftest), so the printed
cell positions are known: cell (row, col) sits at the template origin
plus the shift applied when drawing.
"""

from unittest.mock import Mock

import numpy as np
import pytest

from src.common.observer import PipelineObserver
from src.grid.locator import CellGridLocator


def with_workers(grid_config, workers):
    search = grid_config.search.model_copy(update={"max_workers": workers})
    return grid_config.model_copy(update={"search": search})


class TestTrialOffsets:
    def test_zero_offset_first(self, grid_config):
        offsets = CellGridLocator(grid_config).trial_offsets(950, 1400)

        assert offsets[0] == (0.0, 0.0)

    def test_covers_full_search_space(self, grid_config):
        offsets = CellGridLocator(grid_config).trial_offsets(950, 1400)

        assert len(offsets) == 11 * 11
        assert len(set(offsets)) == len(offsets)
        xs = [o[0] for o in offsets]
        ys = [o[1] for o in offsets]
        assert min(xs) == pytest.approx(-38.0)
        assert max(xs) == pytest.approx(38.0)
        assert min(ys) == pytest.approx(-56.0)
        assert max(ys) == pytest.approx(56.0)

    def test_small_corrections_before_large(self, grid_config):
        offsets = CellGridLocator(grid_config).trial_offsets(950, 1400)
        step_x, step_y = 7.6, 11.2

        distances = [abs(dx) / step_x + abs(dy) / step_y for dx, dy in offsets]

        assert [round(d) for d in distances] == sorted(round(d) for d in distances)


class TestBuildCells:
    def test_cell_count_and_order(self, grid_config):
        cells = CellGridLocator(grid_config).build_cells((0.0, 0.0), 950, 1400)

        assert len(cells) == grid_config.field_spec.digit_cell_count == 78
        keys = [(c.row, c.col) for c in cells]
        assert keys == sorted(keys)
        assert {c.field_id for c in cells}.isdisjoint({"upper_sum", "bonus", "grand_total"})

    def test_nominal_geometry(self, grid_config):
        cells = CellGridLocator(grid_config).build_cells((0.0, 0.0), 950, 1400)
        first = cells[0]

        assert (first.row, first.col, first.field_id) == (0, 0, "ones")
        assert first.x == pytest.approx(342.0)
        assert first.y == pytest.approx(168.0)
        assert first.w == pytest.approx(95.0)
        assert first.h == pytest.approx(52.78)
        # Padded by 15% / 25% of the cell size on every side
        assert first.search_box.x_min == 328
        assert first.search_box.y_min == 155

    def test_lower_block_starts_at_its_own_origin(self, grid_config):
        cells = CellGridLocator(grid_config).build_cells((0.0, 0.0), 950, 1400)
        three_kind = next(c for c in cells if c.field_id == "three_of_a_kind" and c.col == 0)

        assert three_kind.y == pytest.approx(700.0)

    def test_offset_shifts_every_cell(self, grid_config):
        locator = CellGridLocator(grid_config)
        base = locator.build_cells((0.0, 0.0), 950, 1400)
        moved = locator.build_cells((7.6, -11.2), 950, 1400)

        for a, b in zip(base, moved):
            assert b.x - a.x == pytest.approx(7.6)
            assert b.y - a.y == pytest.approx(-11.2)

    def test_search_boxes_clipped_to_card(self, grid_config):
        cells = CellGridLocator(grid_config).build_cells((38.0, 56.0), 950, 1400)

        for cell in cells:
            assert cell.search_box.x_max <= 950
            assert cell.search_box.y_max <= 1400


class TestLocate:
    def test_nominal_card_first_iteration(self, grid_config, card_factory):
        result = CellGridLocator(grid_config).locate(card_factory())

        assert result.success
        assert result.offset == (0.0, 0.0)
        assert result.offset_index == 0
        assert result.iterations == 1
        assert len(result.cells) == 78

    def test_refined_cells_match_printed_grid(self, grid_config, card_factory):
        result = CellGridLocator(grid_config).locate(card_factory())

        first = result.cells[0]
        assert abs(first.bbox.x_min - 342) <= 1
        assert abs(first.bbox.y_min - 168) <= 1
        assert abs(first.bbox.width - 97) <= 2
        assert abs(first.bbox.height - 55) <= 2
        for cell in result.cells:
            ratio = cell.bbox.width / cell.bbox.height
            assert 1.35 <= ratio <= 2.25

    def test_handwriting_does_not_break_search(self, grid_config, card_factory):
        card = card_factory(ink={(1, 0): [(0.4, 0.6)], (9, 3): [(0.2, 0.4), (0.6, 0.8)]})

        result = CellGridLocator(grid_config).locate(card)

        assert result.success
        assert result.offset_index == 0

    def test_shifted_card_found_at_nonzero_offset(self, grid_config, card_factory):
        result = CellGridLocator(grid_config).locate(card_factory(shift=(25, 25)))

        assert result.success
        assert result.offset != (0.0, 0.0)
        assert result.offset[0] > 0 and result.offset[1] > 0
        assert result.offset_index > 0
        assert result.iterations == result.offset_index + 1
        first = result.cells[0]
        assert abs(first.bbox.x_min - 367) <= 2
        assert abs(first.bbox.y_min - 193) <= 2

    def test_blank_card_exhausts_search(self, grid_config):
        card = np.full((1400, 950), 255, dtype=np.uint8)

        result = CellGridLocator(grid_config).locate(card)

        assert not result.success
        assert result.offset is None
        assert result.cells == []
        assert result.iterations == 121

    def test_parallel_search_matches_sequential(self, grid_config, card_factory):
        card = card_factory(shift=(25, 25))

        sequential = CellGridLocator(grid_config).locate(card)
        parallel = CellGridLocator(with_workers(grid_config, 4)).locate(card)

        assert parallel.success
        assert parallel.offset == sequential.offset
        assert parallel.offset_index == sequential.offset_index
        assert [c.bbox for c in parallel.cells] == [c.bbox for c in sequential.cells]

    def test_parallel_search_exhausted(self, grid_config):
        card = np.full((1400, 950), 255, dtype=np.uint8)

        result = CellGridLocator(with_workers(grid_config, 4)).locate(card)

        assert not result.success
        assert result.cells == []

    def test_observer_notified(self, grid_config, card_factory):
        observer = Mock(spec=PipelineObserver)

        result = CellGridLocator(grid_config).locate(card_factory(shift=(25, 25)), observer)

        assert observer.on_offset_tried.call_count == result.iterations
        last_call = observer.on_offset_tried.call_args_list[-1]
        assert last_call.args[2] is True
        observer.on_grid_located.assert_called_once()

    def test_empty_card_raises_error(self, grid_config):
        with pytest.raises(ValueError, match="Invalid card image"):
            CellGridLocator(grid_config).locate(np.array([]))
