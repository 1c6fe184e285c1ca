"""Configuration loader with Pydantic validation for the grid module.

Provides type-safe loading of the field template, refinement thresholds,
offset search space and field layout from YAML files.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, model_validator

from .types import FieldSpec

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


class TemplateConfig(BaseModel):
    """Nominal cell geometry as fractions of the canonical card.

    Attributes:
        origin_x: Left edge of player column 0
        pitch_x: Distance between player columns
        pitch_y: Distance between rows
        upper_block_y: Top edge of the upper block's first row
        lower_block_y: Top edge of the lower block's first row
        cell_width: Nominal cell width
        cell_height: Nominal cell height
        padding_x: Horizontal inflation per side, fraction of cell width
        padding_y: Vertical inflation per side, fraction of cell height
    """

    origin_x: float = Field(default=0.36, ge=0.0, lt=1.0)
    pitch_x: float = Field(default=0.10, gt=0.0)
    pitch_y: float = Field(default=0.0377, gt=0.0)
    upper_block_y: float = Field(default=0.12, ge=0.0, lt=1.0)
    lower_block_y: float = Field(default=0.50, ge=0.0, lt=1.0)
    cell_width: float = Field(default=0.10, gt=0.0, le=1.0)
    cell_height: float = Field(default=0.0377, gt=0.0, le=1.0)
    padding_x: float = Field(default=0.15, ge=0.0, lt=0.5)
    padding_y: float = Field(default=0.25, ge=0.0, lt=0.5)


class RefinerConfig(BaseModel):
    """Cell boundary refinement thresholds.

    Attributes:
        line_density_threshold: Ink fraction above which a line is a grid line
        expected_ratio: Printed cell width / height
        ratio_tolerance: Accepted relative deviation from expected_ratio
        min_lines_per_axis: Grid lines required on each axis
    """

    line_density_threshold: float = Field(default=0.7, gt=0.0, lt=1.0)
    expected_ratio: float = Field(default=1.8, gt=0.0)
    ratio_tolerance: float = Field(default=0.25, gt=0.0, lt=1.0)
    min_lines_per_axis: int = Field(default=2, ge=2)


class SearchConfig(BaseModel):
    """Alignment offset search space.

    Attributes:
        steps_x: Trial offsets along x
        steps_y: Trial offsets along y
        range_x: Offsets span +/- this fraction of the card width
        range_y: Offsets span +/- this fraction of the card height
        max_workers: Worker threads; 1 evaluates offsets sequentially
    """

    steps_x: int = Field(default=11, ge=1)
    steps_y: int = Field(default=11, ge=1)
    range_x: float = Field(default=0.04, ge=0.0, lt=0.5)
    range_y: float = Field(default=0.04, ge=0.0, lt=0.5)
    max_workers: int = Field(default=1, ge=1)


class GridConfig(BaseModel):
    """Complete grid module configuration."""

    template: TemplateConfig = TemplateConfig()
    refiner: RefinerConfig = RefinerConfig()
    search: SearchConfig = SearchConfig()
    field_spec: FieldSpec

    @model_validator(mode="after")
    def _check_template_fits(self) -> "GridConfig":
        t = self.template
        right_edge = t.origin_x + (self.field_spec.player_columns - 1) * t.pitch_x + t.cell_width
        if right_edge > 1.0 + 1e-6:
            raise ValueError(
                f"Template does not fit the card: last column ends at {right_edge:.3f}"
            )
        return self


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> GridConfig:
    """Load and validate grid configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated GridConfig object

    Raises:
        FileNotFoundError: If config file does not exist
        yaml.YAMLError: If YAML parsing fails
        pydantic.ValidationError: If configuration validation fails

    Example:
        >>> config = load_config()
        >>> config.field_spec.player_columns
        6
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f)

    return GridConfig(**config_dict)


def get_default_config() -> GridConfig:
    """Get default configuration from bundled config.yaml file."""
    return load_config(DEFAULT_CONFIG_PATH)
