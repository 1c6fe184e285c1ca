"""Combines per-glyph predictions into per-cell score text.

Glyph digits are concatenated left to right. A table of override rules
(configuration data, see config.yaml) then corrects domain-specific
misreads. Rules are evaluated top to bottom against the raw text and the
first matching rule wins.

Example:
    >>> aggregator = ResultAggregator(config.aggregation, field_spec)
    >>> result = aggregator.aggregate_cell(2, 0, field_spec.get("threes"),
    ...                                    [DigitPrediction(7, 0.9)])
    >>> print(result.text, result.applied_rule)
    1 lone_seven_is_one
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from src.grid.types import FieldDefinition, FieldSpec

from .config_loader import AggregationConfig, OverrideRule
from .types import DigitPrediction, RecognitionResult

logger = logging.getLogger(__name__)

CellKey = Tuple[int, int]


def rule_matches(rule: OverrideRule, field: FieldDefinition, raw_text: str) -> bool:
    """Check every configured condition of a rule."""
    if rule.text is not None and raw_text != rule.text:
        return False
    if rule.requires_ink and not raw_text:
        return False
    if rule.requires_fixed_value is not None:
        if rule.requires_fixed_value != (field.fixed_value is not None):
            return False
    if rule.max_digits is not None and field.max_digits != rule.max_digits:
        return False
    if field.field_id in rule.exclude_fields:
        return False
    return True


def render_result(rule: OverrideRule, field: FieldDefinition) -> str:
    if "{fixed_value}" in rule.result:
        if field.fixed_value is None:
            raise ValueError(
                f"Rule '{rule.name}' uses {{fixed_value}} but field '{field.field_id}' has none"
            )
        return rule.result.replace("{fixed_value}", str(field.fixed_value))
    return rule.result


class ResultAggregator:
    """Applies concatenation and override rules cell by cell.

    Args:
        config: Aggregation configuration holding the override table.
        field_spec: Card layout, used to resolve field ids per row.
    """

    def __init__(self, config: AggregationConfig, field_spec: FieldSpec):
        self.config = config
        self.field_spec = field_spec

    def aggregate_cell(
        self,
        row: int,
        col: int,
        field: FieldDefinition,
        predictions: Sequence[DigitPrediction],
    ) -> RecognitionResult:
        raw_text = "".join(str(p.digit) for p in predictions)
        confidence = min((p.confidence for p in predictions), default=1.0)

        text = raw_text
        applied_rule: Optional[str] = None
        for rule in self.config.rules:
            if rule_matches(rule, field, raw_text):
                text = render_result(rule, field)
                applied_rule = rule.name
                logger.debug(
                    f"Cell ({row}, {col}) {field.field_id}: rule {rule.name} "
                    f"'{raw_text}' -> '{text}'"
                )
                break

        return RecognitionResult(
            row=row,
            col=col,
            field_id=field.field_id,
            text=text,
            confidence=confidence,
            raw_text=raw_text,
            applied_rule=applied_rule,
        )

    def aggregate(
        self, predictions: Dict[CellKey, Sequence[DigitPrediction]]
    ) -> List[RecognitionResult]:
        """Aggregate all cells of one card.

        Args:
            predictions: Glyph predictions keyed by (row, col), each list
                ordered left to right. Blank cells map to an empty list.

        Returns:
            Recognition results sorted by (row, col).

        Raises:
            ValueError: If a row does not belong to the field spec.
        """
        fields = self.field_spec.fields
        results = []
        for (row, col) in sorted(predictions):
            if not 0 <= row < len(fields):
                raise ValueError(f"Row {row} outside field spec ({len(fields)} rows)")
            results.append(self.aggregate_cell(row, col, fields[row], predictions[(row, col)]))

        overridden = sum(1 for r in results if r.applied_rule)
        logger.info(f"Aggregated {len(results)} cells ({overridden} overridden)")
        return results
