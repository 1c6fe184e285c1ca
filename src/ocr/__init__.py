"""Recognition: digit classification and per-cell aggregation.

Core Components:
    - types: DigitPrediction and RecognitionResult
    - config_loader: Configuration loading with Pydantic validation
    - classifier: DigitClassifier boundary and engine factory
    - engine_onnx / engine_tesseract: Concrete classifiers
    - aggregator: Text concatenation and override rules

Example:
    >>> from src.ocr import ResultAggregator, get_default_config
    >>> config = get_default_config()
    >>> aggregator = ResultAggregator(config.aggregation, field_spec)
    >>> results = aggregator.aggregate(predictions)
"""

from .aggregator import ResultAggregator, rule_matches
from .classifier import DigitClassifier, create_classifier
from .config_loader import (
    AggregationConfig,
    ClassifierConfig,
    OCRConfig,
    OverrideRule,
    get_default_config,
    load_config,
)
from .types import DigitPrediction, RecognitionResult

__all__ = [
    "DigitClassifier",
    "DigitPrediction",
    "RecognitionResult",
    "ResultAggregator",
    "create_classifier",
    "rule_matches",
    "AggregationConfig",
    "ClassifierConfig",
    "OCRConfig",
    "OverrideRule",
    "load_config",
    "get_default_config",
]
