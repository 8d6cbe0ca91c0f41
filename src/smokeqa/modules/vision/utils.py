"""
Vision utilities: image loading/decoding.
"""
from __future__ import annotations

import os
from typing import Union

import cv2  # type: ignore
import numpy as np

from ...core.errors import ResourceNotFound


ImageLike = Union[str, bytes, np.ndarray]

_IMAGE_PATH_CACHE: dict[str, np.ndarray] = {}


def load_image(img: ImageLike) -> np.ndarray:
    """Load an image into a BGR numpy array.

    - str: treated as a file path and loaded via cv2.imread (cached per path)
    - bytes: decoded via cv2.imdecode
    - np.ndarray: returned as-is (assumed BGR or single-channel)
    """
    if isinstance(img, np.ndarray):
        return img
    if isinstance(img, (bytes, bytearray)):
        arr = np.frombuffer(img, dtype=np.uint8)
        mat = cv2.imdecode(arr, cv2.IMREAD_COLOR) if arr.size else None
        if mat is None:
            raise ValueError(f"Failed to decode image bytes (len={len(img)})")
        return mat
    if isinstance(img, str):
        if img in _IMAGE_PATH_CACHE:
            return _IMAGE_PATH_CACHE[img]
        if not os.path.isfile(img):
            raise ResourceNotFound([img])
        mat = cv2.imread(img, cv2.IMREAD_COLOR)
        if mat is None:
            raise ValueError(f"Failed to load image from path: {img}")
        _IMAGE_PATH_CACHE[img] = mat
        return mat
    raise TypeError(f"Unsupported image type: {type(img)}")


__all__ = ["ImageLike", "load_image"]
