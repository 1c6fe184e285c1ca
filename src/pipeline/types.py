"""Type definitions for the end-to-end pipeline.

A capture attempt either yields a result for every score cell or is
rejected as a whole; PipelineResult never carries a partial grid.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from src.ocr.types import RecognitionResult


class DecisionStatus(Enum):
    """Decision status for a capture attempt."""

    PASS = "pass"
    REJECT = "reject"


class RejectionReason(Enum):
    """Why a capture attempt failed."""

    DETECTION_FAILURE = "detection_failure"
    RECTIFICATION_FAILURE = "rectification_failure"
    GRID_SEARCH_EXHAUSTED = "grid_search_exhausted"
    NONE = "none"


_REASON_MESSAGES = {
    RejectionReason.DETECTION_FAILURE: "no card boundary found in the frame",
    RejectionReason.RECTIFICATION_FAILURE: "card boundary could not be rectified",
    RejectionReason.GRID_SEARCH_EXHAUSTED: "score grid could not be aligned",
}


@dataclass
class PipelineResult:
    """Outcome of one capture attempt.

    Attributes:
        decision: PASS when every cell was recognized
        rejection_reason: Failure category (NONE on PASS)
        results: Per-cell recognition results sorted by (row, col), empty on REJECT
        corners: Card quadrilateral (TL, TR, BR, BL) if detected
        offset: Accepted grid offset in pixels
        offset_iterations: Offsets tried by the grid search
        processing_time_ms: Total processing time in milliseconds
    """

    decision: DecisionStatus
    rejection_reason: RejectionReason = RejectionReason.NONE
    results: List[RecognitionResult] = field(default_factory=list)
    corners: Optional[np.ndarray] = None
    offset: Optional[Tuple[float, float]] = None
    offset_iterations: int = 0
    processing_time_ms: float = 0.0

    def is_pass(self) -> bool:
        return self.decision == DecisionStatus.PASS

    def get_error_message(self) -> str:
        """User-facing message for a rejected attempt ("" on PASS)."""
        if self.is_pass():
            return ""
        detail = _REASON_MESSAGES.get(self.rejection_reason, "unknown error")
        return f"Score card not recognized, retry: {detail}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "decision": self.decision.value,
            "rejection_reason": self.rejection_reason.value,
            "message": self.get_error_message(),
            "corners": self.corners.tolist() if self.corners is not None else None,
            "offset": list(self.offset) if self.offset is not None else None,
            "offset_iterations": self.offset_iterations,
            "processing_time_ms": round(self.processing_time_ms, 2),
            "results": [r.to_dict() for r in self.results],
        }
