"""Detector interface shared by every detection backend."""

from abc import ABC, abstractmethod
from typing import List

import numpy as np

from .types import DetectedFace


class BaseFaceDetector(ABC):
    """Finds face rectangles in an image.

    Subclasses only implement detect(). Anything satisfying it can be handed
    to FaceDetector directly, which is how tests inject fixed detections.
    """

    @property
    def name(self) -> str:
        """Name reported as the backend of a FaceDetector wrapping this."""
        return type(self).__name__

    @abstractmethod
    def detect(self, image: np.ndarray) -> List[DetectedFace]:
        """Find faces in a BGR, BGRA or grayscale image.

        Returns zero or more rectangles in pixel coordinates, in no
        particular order.
        """
