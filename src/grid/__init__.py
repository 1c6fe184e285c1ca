"""Score-field grid location.

Finds every digit-capturing cell on the canonical card:

    - types: FieldSpec, CellSpec, RefinedCell, GridSearchResult
    - config_loader: Template geometry, refinement and search configuration
    - cell_refiner: Line-density refinement of one padded cell
    - locator: Alignment offset search with first-success-wins semantics

Example:
    >>> from src.grid import CellGridLocator, get_default_config
    >>> locator = CellGridLocator(get_default_config())
    >>> result = locator.locate(card)
"""

from .cell_refiner import CellRefiner
from .config_loader import (
    GridConfig,
    RefinerConfig,
    SearchConfig,
    TemplateConfig,
    get_default_config,
    load_config,
)
from .locator import CellGridLocator
from .types import CellSpec, FieldDefinition, FieldSpec, GridSearchResult, RefinedCell

__all__ = [
    # Types
    "FieldDefinition",
    "FieldSpec",
    "CellSpec",
    "RefinedCell",
    "GridSearchResult",
    # Configuration
    "GridConfig",
    "TemplateConfig",
    "RefinerConfig",
    "SearchConfig",
    "load_config",
    "get_default_config",
    # Components
    "CellRefiner",
    "CellGridLocator",
]
