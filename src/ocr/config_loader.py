"""Configuration loader with Pydantic validation for the recognition stage.

This module provides type-safe configuration loading from YAML files using
Pydantic models for validation and default values.
"""

from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


class ClassifierConfig(BaseModel):
    """Digit classifier configuration.

    Attributes:
        type: Engine type ("onnx" or "tesseract")
        model_path: ONNX model file (required for "onnx")
        input_size: Side of the square model input
        normalize: Scale pixel values to [0, 1] before inference
        tesseract_psm: Page segmentation mode for Tesseract
    """

    type: Literal["onnx", "tesseract"] = "onnx"
    model_path: Optional[str] = None
    input_size: int = Field(default=28, ge=1)
    normalize: bool = True
    tesseract_psm: int = Field(default=10, ge=0, le=13)


class OverrideRule(BaseModel):
    """One entry of the aggregator's override table.

    A rule matches when every configured condition holds. Conditions left
    unset are ignored.

    Attributes:
        name: Rule identifier, reported in RecognitionResult.applied_rule
        text: Raw text the rule applies to
        requires_fixed_value: Field must (True) / must not (False) have a fixed value
        requires_ink: Raw text must be non-blank
        max_digits: Field capacity the rule applies to
        exclude_fields: Field ids the rule never applies to
        result: Replacement text; "{fixed_value}" is substituted
    """

    name: str
    text: Optional[str] = None
    requires_fixed_value: Optional[bool] = None
    requires_ink: bool = False
    max_digits: Optional[int] = Field(default=None, ge=1, le=2)
    exclude_fields: List[str] = []
    result: str


class AggregationConfig(BaseModel):
    """Aggregation configuration.

    Attributes:
        rules: Override rules, first match wins
    """

    rules: List[OverrideRule] = []

    @field_validator("rules")
    @classmethod
    def unique_rule_names(cls, v: List[OverrideRule]) -> List[OverrideRule]:
        names = [rule.name for rule in v]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate override rule names: {names}")
        return v


class OCRConfig(BaseModel):
    """Complete recognition configuration."""

    classifier: ClassifierConfig = ClassifierConfig()
    aggregation: AggregationConfig = AggregationConfig()


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> OCRConfig:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated OCRConfig object with all settings

    Raises:
        FileNotFoundError: If config file does not exist
        yaml.YAMLError: If YAML parsing fails
        pydantic.ValidationError: If configuration validation fails

    Example:
        >>> config = load_config(Path("src/ocr/config.yaml"))
        >>> print(config.classifier.type)
        onnx
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    return OCRConfig(**config_dict)


def get_default_config() -> OCRConfig:
    """Get default configuration from bundled config.yaml file."""
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    # Fallback to hardcoded defaults if config file is missing
    return OCRConfig()
