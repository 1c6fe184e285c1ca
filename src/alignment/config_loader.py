"""
Configuration loader for the Alignment module.

Loads and validates configuration from config.yaml file.
"""

import logging
from pathlib import Path
from typing import Any, Dict

import cv2
import yaml

from src.alignment.types import (
    AlignmentConfig,
    CornerDetectionConfig,
    RectificationConfig,
)

logger = logging.getLogger(__name__)

# Default configuration path (relative to this file)
DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"

INTERPOLATION_FLAGS = {
    "linear": cv2.INTER_LINEAR,
    "cubic": cv2.INTER_CUBIC,
    "nearest": cv2.INTER_NEAREST,
    "area": cv2.INTER_AREA,
    "lanczos": cv2.INTER_LANCZOS4,
}


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> AlignmentConfig:
    """
    Load alignment configuration from YAML file.

    Args:
        config_path: Path to the configuration YAML file.

    Returns:
        Validated AlignmentConfig object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config is invalid or missing required fields.

    Example:
        >>> config = load_config()
        >>> print(config.rectification.card_width)
        950
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.debug(f"Loading alignment config from {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        raw_config = yaml.safe_load(f)

    try:
        config = _parse_config(raw_config)
        _validate_config(config)
        logger.info("Successfully loaded alignment configuration")
        return config
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid configuration file: {e}") from e


def _parse_config(raw: Dict[str, Any]) -> AlignmentConfig:
    """Parse raw dictionary into structured config objects."""
    corners = raw["corners"]
    rectification = raw["rectification"]

    return AlignmentConfig(
        corners=CornerDetectionConfig(
            blur_kernel_size=int(corners["blur_kernel_size"]),
            canny_low_threshold=float(corners["canny_low_threshold"]),
            canny_high_threshold=float(corners["canny_high_threshold"]),
            approx_epsilon_ratio=float(corners["approx_epsilon_ratio"]),
            min_area_ratio=float(corners["min_area_ratio"]),
        ),
        rectification=RectificationConfig(
            card_width=int(rectification["card_width"]),
            card_height=int(rectification["card_height"]),
            warp_interpolation=str(rectification["warp_interpolation"]),
            min_quad_area_px=float(rectification["min_quad_area_px"]),
        ),
    )


def _validate_config(config: AlignmentConfig) -> None:
    """
    Validate configuration values for logical consistency.

    Raises:
        ValueError: If any configuration value is invalid.
    """
    corners = config.corners
    if corners.blur_kernel_size < 1 or corners.blur_kernel_size % 2 == 0:
        raise ValueError(
            f"blur_kernel_size must be a positive odd number, got {corners.blur_kernel_size}"
        )

    if corners.canny_low_threshold >= corners.canny_high_threshold:
        raise ValueError(
            f"canny_low_threshold ({corners.canny_low_threshold}) must be less than "
            f"canny_high_threshold ({corners.canny_high_threshold})"
        )

    if not 0 < corners.approx_epsilon_ratio < 1:
        raise ValueError("approx_epsilon_ratio must be in (0, 1)")

    if not 0 <= corners.min_area_ratio < 1:
        raise ValueError("min_area_ratio must be in [0, 1)")

    rect = config.rectification
    if rect.card_width < 1 or rect.card_height < 1:
        raise ValueError(
            f"Card dimensions must be positive, got {rect.card_width}x{rect.card_height}"
        )

    if rect.min_quad_area_px < 0:
        raise ValueError("min_quad_area_px cannot be negative")

    if rect.warp_interpolation not in INTERPOLATION_FLAGS:
        raise ValueError(
            f"Invalid warp_interpolation: {rect.warp_interpolation}. "
            f"Must be one of {list(INTERPOLATION_FLAGS)}"
        )

    logger.debug("Configuration validation passed")
