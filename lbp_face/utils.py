"""Face image processing utilities."""

from typing import Optional, Tuple

import cv2
import numpy as np

from .constants import get_recognition_config
from .detection.types import DetectedFace
from .recognition.types import PixelBuffer


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Convert a BGR, BGRA or grayscale image to single-channel uint8."""
    if image.ndim == 3 and image.shape[2] == 4:
        gray = cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    elif image.ndim == 3 and image.shape[2] == 3:
        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    elif image.ndim == 3 and image.shape[2] == 1:
        gray = image[:, :, 0]
    elif image.ndim == 2:
        gray = image
    else:
        raise ValueError(f"Unsupported image shape: {image.shape}")
    return np.ascontiguousarray(gray, dtype=np.uint8)


def crop_face(
    image: np.ndarray,
    bbox: Tuple[int, int, int, int],
    margin: Optional[float] = None,
) -> np.ndarray:
    """Crop face from image with margin.

    Args:
        image: Full image
        bbox: Bounding box (x, y, w, h)
        margin: Margin around face as fraction of size (uses config default if None)

    Returns:
        Cropped face image, clipped to the image bounds
    """
    if margin is None:
        margin = get_recognition_config().crop_margin_ratio
    x, y, w, h = bbox
    margin_w = int(w * margin)
    margin_h = int(h * margin)
    x1 = max(0, x - margin_w)
    y1 = max(0, y - margin_h)
    x2 = min(image.shape[1], x + w + margin_w)
    y2 = min(image.shape[0], y + h + margin_h)
    return image[y1:y2, x1:x2]


def normalize_face(
    face_image: np.ndarray,
    target_size: Optional[Tuple[int, int]] = None,
) -> PixelBuffer:
    """Convert a face crop to a fixed-size grayscale buffer.

    Args:
        face_image: Cropped face image (BGR, BGRA or grayscale)
        target_size: Output (width, height) (uses config default if None)
    """
    if target_size is None:
        target_size = get_recognition_config().face_size
    if face_image.size == 0:
        raise ValueError("Empty face crop")
    gray = to_grayscale(face_image)
    resized = cv2.resize(gray, tuple(int(v) for v in target_size))
    return PixelBuffer.from_array(resized)


def crop_and_normalize(
    image: np.ndarray,
    face: DetectedFace,
    target_size: Optional[Tuple[int, int]] = None,
    margin: Optional[float] = None,
) -> PixelBuffer:
    """Crop a detected face and produce its fixed-size grayscale buffer.

    Args:
        image: Full image the face was detected in
        face: Detected face rectangle
        target_size: Output (width, height), 100x100 by default
        margin: Crop margin as fraction of face size

    Returns:
        PixelBuffer of the requested size
    """
    crop = crop_face(image, face.bbox, margin=margin)
    return normalize_face(crop, target_size=target_size)
