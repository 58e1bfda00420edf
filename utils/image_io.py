"""Image and container file I/O."""

from pathlib import Path

import cv2
import numpy as np


def load_image(path: str) -> np.ndarray:
    """Load image as RGB uint8."""
    img = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if img is None:
        raise ValueError(f"Could not load image from {path}")
    return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)


def save_image(image: np.ndarray, path: str) -> None:
    """Save an RGB or RGBA image."""
    if image.shape[2] == 4:
        converted = cv2.cvtColor(image, cv2.COLOR_RGBA2BGRA)
    else:
        converted = cv2.cvtColor(image, cv2.COLOR_RGB2BGR)
    if not cv2.imwrite(str(path), converted):
        raise ValueError(f"Could not write image to {path}")


def crop_to_multiple(image: np.ndarray, block_size: int) -> np.ndarray:
    """Drop trailing rows/columns so both dimensions divide block_size."""
    h, w = image.shape[:2]
    return np.ascontiguousarray(image[:h - h % block_size, :w - w % block_size])


def read_container(path: str) -> bytes:
    return Path(path).read_bytes()


def write_container(data: bytes, path: str) -> None:
    Path(path).write_bytes(data)
