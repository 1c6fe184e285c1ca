"""Type definitions for the recognition stage.

This module defines the values that cross the classifier boundary and the
per-cell recognition results produced by the aggregator.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class DigitPrediction:
    """Classification of one digit glyph.

    Attributes:
        digit: Predicted digit (0-9)
        confidence: Classifier confidence (0.0-1.0)
    """

    digit: int
    confidence: float

    def __post_init__(self):
        if not 0 <= self.digit <= 9:
            raise ValueError(f"digit must be in 0-9, got {self.digit}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0, 1], got {self.confidence}")


@dataclass
class RecognitionResult:
    """Recognized content of one score cell.

    Attributes:
        row: Row index on the card (FieldSpec order)
        col: Player column index
        field_id: Score field identifier
        text: Final cell text after override rules ("" for blank)
        confidence: Minimum glyph confidence, 1.0 for a blank cell
        raw_text: Concatenated classifier output before override rules
        applied_rule: Name of the override rule that fired, if any
    """

    row: int
    col: int
    field_id: str
    text: str
    confidence: float
    raw_text: str
    applied_rule: Optional[str] = None

    @property
    def is_blank(self) -> bool:
        return self.text == ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return asdict(self)
