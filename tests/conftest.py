"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all test modules. Synthetic score cards are drawn straight from the
grid template so that the expected cell positions are known exactly.
"""

import cv2
import numpy as np
import pytest

from src.grid import get_default_config as get_default_grid_config

LINE_THICKNESS = 2
LABEL_COLUMN_X = 0.05


def cell_origin(grid_config, row, col, width, height, shift=(0, 0)):
    """Top-left corner of a template cell in canonical pixels."""
    t = grid_config.template
    for r, definition, index_in_block in grid_config.field_spec.block_positions():
        if r == row:
            block_y = t.upper_block_y if definition.upper_block else t.lower_block_y
            x = (t.origin_x + col * t.pitch_x) * width + shift[0]
            y = (block_y + index_in_block * t.pitch_y) * height + shift[1]
            return x, y
    raise KeyError(row)


def draw_score_card(grid_config, width=950, height=1400, shift=(0, 0), ink=None):
    """
    Draw a blank score card with printed rule lines for every row.

    Args:
        grid_config: Grid configuration providing the template.
        width, height: Canonical card size.
        shift: (dx, dy) applied to everything printed on the card.
        ink: Optional {(row, col): [(x0, x1), ...]} of handwritten blobs,
            given as fractions of the cell width; each blob covers the
            middle half of the cell height.

    Returns:
        uint8 grayscale card, white paper with black ink.
    """
    t = grid_config.template
    spec = grid_config.field_spec
    dx, dy = shift
    card = np.full((height, width), 255, dtype=np.uint8)

    pitch_y = t.pitch_y * height
    left = int(round(LABEL_COLUMN_X * width + dx))
    right = int(round((t.origin_x + spec.player_columns * t.pitch_x) * width + dx))

    for upper, block_y in ((True, t.upper_block_y), (False, t.lower_block_y)):
        rows = sum(1 for f in spec.fields if f.upper_block == upper)
        top = block_y * height + dy
        bottom = int(round(top + rows * pitch_y))

        for r in range(rows + 1):
            y = int(round(top + r * pitch_y))
            card[y : y + LINE_THICKNESS, left : right + LINE_THICKNESS] = 0

        xs = [left] + [
            int(round((t.origin_x + c * t.pitch_x) * width + dx))
            for c in range(spec.player_columns + 1)
        ]
        for x in xs:
            card[int(round(top)) : bottom + LINE_THICKNESS, x : x + LINE_THICKNESS] = 0

    cell_w = t.cell_width * width
    cell_h = t.cell_height * height
    for (row, col), blobs in (ink or {}).items():
        x, y = cell_origin(grid_config, row, col, width, height, shift)
        y0 = int(round(y + 0.25 * cell_h))
        y1 = int(round(y + 0.75 * cell_h))
        for fx0, fx1 in blobs:
            card[y0:y1, int(round(x + fx0 * cell_w)) : int(round(x + fx1 * cell_w))] = 0

    return card


def embed_in_frame(card, margin=(60, 50), background=40):
    """Place a card axis-aligned on a dark BGR background."""
    mx, my = margin
    h, w = card.shape[:2]
    frame = np.full((h + 2 * my, w + 2 * mx, 3), background, dtype=np.uint8)
    frame[my : my + h, mx : mx + w] = cv2.cvtColor(card, cv2.COLOR_GRAY2BGR)
    return frame


def warp_into_frame(card, quad, frame_size, background=40):
    """Project a card onto a dark BGR frame with corners at `quad` (TL, TR, BR, BL)."""
    h, w = card.shape[:2]
    src = np.array([[0, 0], [w - 1, 0], [w - 1, h - 1], [0, h - 1]], dtype=np.float32)
    matrix = cv2.getPerspectiveTransform(src, np.asarray(quad, dtype=np.float32))
    warped = cv2.warpPerspective(
        card,
        matrix,
        frame_size,
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=background,
    )
    return cv2.cvtColor(warped, cv2.COLOR_GRAY2BGR)


@pytest.fixture
def grid_config():
    """Bundled grid configuration."""
    return get_default_grid_config()


@pytest.fixture
def card_factory(grid_config):
    """Factory drawing canonical cards from the bundled template."""

    def make(shift=(0, 0), ink=None):
        return draw_score_card(grid_config, shift=shift, ink=ink)

    return make


@pytest.fixture
def frame_factory(card_factory):
    """Factory producing camera-like frames with an axis-aligned card."""

    def make(shift=(0, 0), ink=None, margin=(60, 50)):
        return embed_in_frame(card_factory(shift=shift, ink=ink), margin=margin)

    return make


@pytest.fixture
def sample_quadrilateral_points():
    """Fixture providing sample 4-corner points for testing."""
    return np.array(
        [
            [300, 150],  # Top-right area
            [100, 200],  # Top-left area
            [320, 400],  # Bottom-right area
            [80, 380],  # Bottom-left area
        ],
        dtype=np.float32,
    )


@pytest.fixture
def sample_card_frame():
    """Fixture providing a frame with a perspective-distorted bright card."""
    frame = np.full((700, 900, 3), 30, dtype=np.uint8)

    pts = np.array([[150, 100], [560, 130], [600, 620], [110, 580]], dtype=np.int32)
    cv2.fillPoly(frame, [pts], (235, 235, 235))

    return frame, pts.astype(np.float32)


@pytest.fixture
def two_blob_cell():
    """Fixture providing a white cell with two dark blobs separated by a gap."""
    h, w = 60, 108
    cell = np.full((h, w), 255, dtype=np.uint8)
    y0, y1 = int(0.25 * h), int(0.75 * h)
    cell[y0:y1, int(0.20 * w) : int(0.45 * w)] = 0
    cell[y0:y1, int(0.55 * w) : int(0.80 * w)] = 0
    return cell


@pytest.fixture
def warped_frame_factory(card_factory):
    """Factory producing frames with the card seen under perspective."""

    def make(quad, frame_size=(1120, 1540), ink=None):
        return warp_into_frame(card_factory(ink=ink), quad, frame_size)

    return make
