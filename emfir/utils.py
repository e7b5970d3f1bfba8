"""Utility functions for scaling count images and writing thumbnails."""
from __future__ import annotations

from pathlib import Path

import imageio.v2 as imageio
import numpy as np


def _normalize_to_u8(values: np.ndarray) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float32)
    if arr.size == 0:
        return np.zeros(arr.shape, dtype=np.uint8)
    min_val = float(np.min(arr))
    max_val = float(np.max(arr))
    value_range = max_val - min_val
    if value_range == 0.0:
        return np.zeros(arr.shape, dtype=np.uint8)
    scaled = (arr - min_val) / value_range * 255.0
    return np.clip(scaled, 0, 255).astype(np.uint8)


def log_scale_to_u8(image: np.ndarray) -> np.ndarray:
    """
    Map counts through log(x + 1) and stretch min..max onto 0..255.
    """
    return _normalize_to_u8(np.log1p(np.asarray(image, dtype=np.float32)))


def linear_scale_to_u8(image: np.ndarray) -> np.ndarray:
    """Stretch min..max onto 0..255; a flat image maps to zeros."""
    return _normalize_to_u8(image)


def gray_to_rgb(image: np.ndarray) -> np.ndarray:
    if image.ndim != 2:
        raise ValueError("Expected a 2-D image, got shape %s" % (image.shape,))
    return np.repeat(image[:, :, None], 3, axis=2)


def save_image(image: np.ndarray, path: str | Path) -> None:
    """
    Save a (H, W) count image as an 8-bit log-scaled grayscale picture.
    """
    if image.ndim != 2:
        raise ValueError("image must have shape (H, W)")
    imageio.imwrite(str(path), log_scale_to_u8(image))
