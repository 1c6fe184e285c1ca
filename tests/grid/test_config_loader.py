"""
Unit tests for the grid configuration and field layout.
"""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from src.grid.config_loader import GridConfig, get_default_config, load_config
from src.grid.types import FieldDefinition, FieldSpec


def minimal_config():
    return {
        "field_spec": {
            "player_columns": 2,
            "fields": [
                {"field_id": "ones", "upper_block": True, "max_digits": 1},
                {"field_id": "chance", "upper_block": False},
            ],
        }
    }


class TestLoadConfig:
    def test_load_default_config(self):
        config = get_default_config()

        assert isinstance(config, GridConfig)
        assert config.field_spec.player_columns == 6
        assert len(config.field_spec.fields) == 19
        assert config.field_spec.digit_cell_count == 78
        assert config.refiner.expected_ratio == 1.8
        assert config.search.steps_x == 11

    def test_field_capabilities(self):
        spec = get_default_config().field_spec

        assert spec.get("ones").max_digits == 1
        assert spec.get("twos").max_digits == 2
        assert spec.get("full_house").fixed_value == 25
        assert spec.get("kniffel").fixed_value == 50
        assert spec.get("chance").fixed_value is None
        assert not spec.get("bonus").requires_digit_input

    def test_load_custom_config(self, tmp_path):
        path = tmp_path / "grid.yaml"
        with open(path, "w") as f:
            yaml.dump(minimal_config(), f)

        config = load_config(path)

        assert config.field_spec.player_columns == 2
        assert config.template.origin_x == 0.36
        assert config.field_spec.digit_cell_count == 4

    def test_missing_file_raises_error(self):
        with pytest.raises(FileNotFoundError):
            load_config(Path("nonexistent_config.yaml"))

    def test_template_must_fit_card(self):
        raw = minimal_config()
        raw["field_spec"]["player_columns"] = 8

        with pytest.raises(ValidationError, match="does not fit"):
            GridConfig(**raw)

    @pytest.mark.parametrize(
        "section, key, value",
        [
            ("refiner", "ratio_tolerance", 1.5),
            ("refiner", "min_lines_per_axis", 1),
            ("search", "steps_x", 0),
            ("search", "max_workers", 0),
            ("template", "padding_x", 0.6),
        ],
    )
    def test_invalid_values_rejected(self, section, key, value):
        raw = minimal_config()
        raw[section] = {key: value}

        with pytest.raises(ValidationError):
            GridConfig(**raw)


class TestFieldSpec:
    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate"):
            FieldSpec(
                fields=(
                    FieldDefinition(field_id="ones", upper_block=True),
                    FieldDefinition(field_id="ones", upper_block=False),
                )
            )

    def test_needs_an_input_field(self):
        with pytest.raises(ValidationError, match="no field requiring digit input"):
            FieldSpec(
                fields=(FieldDefinition(field_id="sum", upper_block=True, requires_digit_input=False),)
            )

    def test_unknown_field_raises_key_error(self):
        with pytest.raises(KeyError):
            get_default_config().field_spec.get("yahtzee_bonus")

    def test_block_positions(self):
        spec = get_default_config().field_spec
        positions = {d.field_id: (row, idx) for row, d, idx in spec.block_positions()}

        assert positions["ones"] == (0, 0)
        assert positions["upper_total"] == (8, 8)
        assert positions["three_of_a_kind"] == (9, 0)
        assert positions["chance"] == (15, 6)

    def test_field_spec_is_immutable(self):
        spec = get_default_config().field_spec

        with pytest.raises(ValidationError):
            spec.player_columns = 3

    def test_max_digits_bounds(self):
        with pytest.raises(ValidationError):
            FieldDefinition(field_id="x", upper_block=True, max_digits=3)
