"""Type definitions for the grid module.

Field layout (which logical rows exist, which of them carry handwritten
scores) and the per-iteration cell geometry produced by the offset search.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, model_validator

from src.common.types import BBox


class FieldDefinition(BaseModel):
    """One logical row of the score card.

    Attributes:
        field_id: Stable identifier (e.g. "ones", "full_house").
        upper_block: True for rows of the upper block, False for the lower.
        requires_digit_input: Whether players write a score into this row.
        max_digits: Maximum number of digits a score in this row can have.
        fixed_value: Score this row is always worth when scored, if any.
    """

    field_id: str
    upper_block: bool
    requires_digit_input: bool = True
    max_digits: int = Field(default=2, ge=1, le=2)
    fixed_value: Optional[int] = Field(default=None, ge=0)

    model_config = {"frozen": True}


class FieldSpec(BaseModel):
    """Ordered row layout of the card plus the number of player columns."""

    fields: Tuple[FieldDefinition, ...]
    player_columns: int = Field(default=6, ge=1)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _validate_fields(self) -> "FieldSpec":
        if not self.fields:
            raise ValueError("FieldSpec needs at least one field")
        ids = [f.field_id for f in self.fields]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate field ids in FieldSpec: {ids}")
        if not any(f.requires_digit_input for f in self.fields):
            raise ValueError("FieldSpec has no field requiring digit input")
        return self

    def get(self, field_id: str) -> FieldDefinition:
        """Look up a field by id.

        Raises:
            KeyError: If the field is unknown.
        """
        for definition in self.fields:
            if definition.field_id == field_id:
                return definition
        raise KeyError(field_id)

    def block_positions(self) -> List[Tuple[int, FieldDefinition, int]]:
        """(row, field, index within its block) for every field, in order."""
        positions = []
        counters = {True: 0, False: 0}
        for row, definition in enumerate(self.fields):
            block = definition.upper_block
            positions.append((row, definition, counters[block]))
            counters[block] += 1
        return positions

    @property
    def digit_cell_count(self) -> int:
        """Number of cells that carry digits (rows x player columns)."""
        rows = sum(1 for f in self.fields if f.requires_digit_input)
        return rows * self.player_columns


@dataclass(frozen=True)
class CellSpec:
    """Nominal (unrefined) cell for one trial offset, canonical coordinates.

    `x, y, w, h` describe the template rectangle shifted by the trial
    offset; `search_box` is that rectangle inflated by the padding
    fractions and clipped to the card.
    """

    row: int
    col: int
    field_id: str
    x: float
    y: float
    w: float
    h: float
    search_box: BBox


@dataclass(frozen=True)
class RefinedCell:
    """A cell tightened to its printed boundary (canonical coordinates)."""

    spec: CellSpec
    bbox: BBox

    @property
    def row(self) -> int:
        return self.spec.row

    @property
    def col(self) -> int:
        return self.spec.col

    @property
    def field_id(self) -> str:
        return self.spec.field_id


@dataclass
class GridSearchResult:
    """Outcome of the alignment offset search.

    Attributes:
        success: True only when every cell of one offset refined.
        offset: Accepted (dx, dy) in canonical pixels, None on failure.
        offset_index: Position of the accepted offset in search order.
        iterations: Offsets evaluated before the search stopped.
        cells: Refined cells ordered by (row, col); empty on failure.
    """

    success: bool
    offset: Optional[Tuple[float, float]] = None
    offset_index: Optional[int] = None
    iterations: int = 0
    cells: List[RefinedCell] = field(default_factory=list)
