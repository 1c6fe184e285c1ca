"""Configuration loader with Pydantic validation for the end-to-end pipeline.

Stage settings live in each stage package's own config.yaml; this file
only covers orchestration.
"""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


class PipelineConfig(BaseModel):
    """Orchestration settings.

    Attributes:
        max_workers: Worker threads for per-cell segmentation and
            classification; 1 processes cells in the calling thread
        debug_dir: Directory for debug overlays, disabled when None
    """

    max_workers: int = Field(default=1, ge=1)
    debug_dir: Optional[str] = None


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> PipelineConfig:
    """Load and validate pipeline configuration from YAML file.

    Raises:
        FileNotFoundError: If config file does not exist
        pydantic.ValidationError: If configuration validation fails
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    return PipelineConfig(**config_dict)


def get_default_config() -> PipelineConfig:
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return PipelineConfig()
