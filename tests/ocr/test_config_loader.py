"""Unit tests for the recognition configuration loader."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from src.ocr.config_loader import (
    AggregationConfig,
    ClassifierConfig,
    OCRConfig,
    OverrideRule,
    get_default_config,
    load_config,
)


class TestLoadConfig:
    def test_default_config(self):
        config = get_default_config()

        assert isinstance(config, OCRConfig)
        assert config.classifier.type == "onnx"
        assert config.classifier.input_size == 28
        assert [r.name for r in config.aggregation.rules] == [
            "fixed_value_struck",
            "fixed_value_default",
            "lone_seven_is_one",
            "lone_one_is_blank",
        ]

    def test_default_rule_conditions(self):
        rules = {r.name: r for r in get_default_config().aggregation.rules}

        assert rules["fixed_value_default"].result == "{fixed_value}"
        assert rules["fixed_value_default"].requires_ink
        assert rules["lone_seven_is_one"].max_digits == 2
        assert rules["lone_one_is_blank"].exclude_fields == ["ones"]

    def test_load_custom_config(self, tmp_path):
        path = tmp_path / "ocr.yaml"
        with open(path, "w") as f:
            yaml.dump({"classifier": {"type": "tesseract", "tesseract_psm": 8}}, f)

        config = load_config(path)

        assert config.classifier.type == "tesseract"
        assert config.classifier.tesseract_psm == 8
        assert config.aggregation.rules == []

    def test_missing_file_raises_error(self):
        with pytest.raises(FileNotFoundError):
            load_config(Path("nonexistent_config.yaml"))

    def test_unknown_classifier_type_rejected(self):
        with pytest.raises(ValidationError):
            ClassifierConfig(type="svm")

    def test_duplicate_rule_names_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate"):
            AggregationConfig(
                rules=[
                    OverrideRule(name="a", text="7", result="1"),
                    OverrideRule(name="a", text="1", result=""),
                ]
            )

    def test_rule_requires_result(self):
        with pytest.raises(ValidationError):
            OverrideRule(name="incomplete", text="7")
