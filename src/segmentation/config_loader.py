"""Configuration loader with Pydantic validation for digit segmentation."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, model_validator

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


class EdgeCleanupConfig(BaseModel):
    """Removal of residual cell-border strokes.

    Attributes:
        scan_depth: Maximum scan depth from each border, fraction of the dimension
        line_ratio: Lines with a larger ink fraction are blanked
        miss_tolerance: Consecutive non-qualifying lines that end a scan
    """

    scan_depth: float = Field(default=0.15, gt=0.0, le=0.5)
    line_ratio: float = Field(default=0.5, gt=0.0, lt=1.0)
    miss_tolerance: int = Field(default=2, ge=1)


class ArtifactConfig(BaseModel):
    """Removal of blobs hugging the cell border.

    Attributes:
        margin_ratio: Inset of the central region, fraction of each dimension
        outside_ratio: Blobs with more boundary points outside the central
            region than this fraction are erased
    """

    margin_ratio: float = Field(default=0.15, ge=0.0, lt=0.5)
    outside_ratio: float = Field(default=0.75, gt=0.0, le=1.0)


class SplitConfig(BaseModel):
    """Two-digit split detection.

    Attributes:
        band_exclude: Fraction excluded at each side; columns in between are scanned
        ink_ratio: Column ink fraction above which the scan is inside a digit
        blank_ratio: Column ink fraction below which the column is a gap
    """

    band_exclude: float = Field(default=0.35, ge=0.0, lt=0.5)
    ink_ratio: float = Field(default=0.2, gt=0.0, lt=1.0)
    blank_ratio: float = Field(default=0.08, ge=0.0, lt=1.0)

    @model_validator(mode="after")
    def _check_ratios(self) -> "SplitConfig":
        if self.blank_ratio >= self.ink_ratio:
            raise ValueError(
                f"blank_ratio ({self.blank_ratio}) must be below ink_ratio ({self.ink_ratio})"
            )
        return self


class GlyphConfig(BaseModel):
    """Glyph normalization (MNIST-style input).

    Attributes:
        inner_size: Ink is resized to fit this square
        glyph_size: Side of the square output canvas
        min_ink_fraction: Halves with less ink than this fraction are blank
        min_contrast: Cells with a smaller gray-level range contain no ink
    """

    inner_size: int = Field(default=20, ge=1)
    glyph_size: int = Field(default=28, ge=1)
    min_ink_fraction: float = Field(default=0.01, ge=0.0, lt=1.0)
    min_contrast: int = Field(default=40, ge=0, le=255)

    @model_validator(mode="after")
    def _check_sizes(self) -> "GlyphConfig":
        if self.inner_size > self.glyph_size:
            raise ValueError(
                f"inner_size ({self.inner_size}) cannot exceed glyph_size ({self.glyph_size})"
            )
        return self


class SegmentationConfig(BaseModel):
    """Complete segmentation configuration."""

    edge_cleanup: EdgeCleanupConfig = EdgeCleanupConfig()
    artifacts: ArtifactConfig = ArtifactConfig()
    split: SplitConfig = SplitConfig()
    glyph: GlyphConfig = GlyphConfig()


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> SegmentationConfig:
    """Load and validate segmentation configuration from YAML file.

    Raises:
        FileNotFoundError: If config file does not exist
        pydantic.ValidationError: If configuration validation fails
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    return SegmentationConfig(**config_dict)


def get_default_config() -> SegmentationConfig:
    """Get default configuration from bundled config.yaml file.

    Falls back to the model defaults if the bundled file is missing.
    """
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return SegmentationConfig()
