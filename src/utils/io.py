"""
I/O Utilities

File input/output operations.
"""

import json
from pathlib import Path
from typing import Dict, Any

import cv2
import numpy as np


def load_frame(file_path: Path) -> np.ndarray:
    """
    Load an image file as a BGR frame.

    Raises:
        FileNotFoundError: If the file is missing or cannot be decoded
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Image not found: {file_path}")

    frame = cv2.imread(str(file_path), cv2.IMREAD_COLOR)
    if frame is None:
        raise FileNotFoundError(f"Image could not be decoded: {file_path}")
    return frame


def save_image(image: np.ndarray, file_path: Path):
    """Write an image, creating parent directories."""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(file_path), image):
        raise IOError(f"Failed to write image: {file_path}")


def save_json(data: Dict[str, Any], file_path: Path, indent: int = 2):
    """Save data to JSON file."""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, 'w') as f:
        json.dump(data, f, indent=indent)
