"""Haar Cascade face detector."""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

import cv2
import numpy as np

from ..constants import get_detection_config
from .base import BaseFaceDetector
from .types import DetectedFace

logger = logging.getLogger(__name__)

CASCADE_FILE = "haarcascade_frontalface_default.xml"


def default_cascade_path() -> str:
    """Frontal face cascade bundled with opencv-python."""
    return cv2.data.haarcascades + CASCADE_FILE  # type: ignore


class HaarCascadeDetector(BaseFaceDetector):
    """Face detector using OpenCV's frontal face Haar Cascade."""

    def __init__(
        self,
        scale_factor: Optional[float] = None,
        min_neighbors: Optional[int] = None,
        min_size: Optional[Tuple[int, int]] = None,
        cascade_path: Optional[str] = None,
    ):
        """Initialize Haar Cascade detector.

        Unset arguments fall back to the face_detection config section.

        Args:
            scale_factor: Pyramid step between detection scales
            min_neighbors: Overlapping hits needed to keep a candidate
            min_size: Smallest (width, height) reported
            cascade_path: Cascade XML file (bundled frontal face model if None)

        Raises:
            RuntimeError: If the cascade file is missing or cannot be parsed
        """
        config = get_detection_config()
        self.scale_factor = scale_factor if scale_factor is not None else config.scale_factor
        self.min_neighbors = min_neighbors if min_neighbors is not None else config.min_neighbors
        self.min_size = tuple(min_size) if min_size is not None else config.min_size
        self.cascade_path = str(cascade_path or config.cascade_path or default_cascade_path())

        if not Path(self.cascade_path).is_file():
            raise RuntimeError(f"Cascade file not found: {self.cascade_path}")

        self.cascade = cv2.CascadeClassifier(self.cascade_path)
        if self.cascade.empty():
            raise RuntimeError(f"Failed to load cascade from {self.cascade_path}")
        logger.debug(f"Loaded Haar cascade from {self.cascade_path}")

    def detect(self, image: np.ndarray) -> List[DetectedFace]:
        """Detect faces using Haar Cascade."""
        if image.ndim == 3 and image.shape[2] == 4:
            gray = cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
        elif image.ndim == 3:
            gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        else:
            gray = image

        rects = self.cascade.detectMultiScale(
            gray,
            scaleFactor=self.scale_factor,
            minNeighbors=self.min_neighbors,
            minSize=self.min_size,
        )

        return [
            DetectedFace(x=int(x), y=int(y), width=int(w), height=int(h))
            for (x, y, w, h) in rects
        ]
