"""Unified face detector with configurable backend."""

from typing import List, Optional, Sequence, Tuple, Union

import cv2
import numpy as np

from .base import BaseFaceDetector
from .haar import HaarCascadeDetector
from .types import DetectedFace


class FaceDetector:
    """Main face detector class with configurable backend."""

    BACKENDS = {
        "haar_cascade": HaarCascadeDetector,
    }

    def __init__(self, backend: Union[str, BaseFaceDetector] = "haar_cascade", **kwargs):
        """Initialize face detector with specified backend.

        Args:
            backend: Detection backend name (default: haar_cascade), or an
                     already constructed detector instance
            **kwargs: Additional arguments for the detector
        """
        if isinstance(backend, BaseFaceDetector):
            self.backend_name = backend.name
            self.detector = backend
            return

        if backend not in self.BACKENDS:
            raise ValueError(
                f"Unknown backend: {backend}. "
                f"Available: {list(self.BACKENDS.keys())}"
            )

        self.backend_name = backend
        self.detector: BaseFaceDetector = self.BACKENDS[backend](**kwargs)

    def detect(self, image: np.ndarray) -> List[DetectedFace]:
        """Detect faces in an image."""
        return self.detector.detect(image)

    def draw_detections(
        self,
        image: np.ndarray,
        faces: List[DetectedFace],
        labels: Optional[Sequence[str]] = None,
        color: Tuple[int, int, int] = (229, 136, 30),
        thickness: int = 2,
    ) -> np.ndarray:
        """Draw detection boxes on a copy of the image.

        When labels are given, each box gets a filled caption bar above it
        with the matching label.
        """
        output = image.copy()
        if output.ndim == 2:
            output = cv2.cvtColor(output, cv2.COLOR_GRAY2BGR)

        for i, face in enumerate(faces):
            cv2.rectangle(
                output,
                (face.x, face.y),
                (face.x + face.width, face.y + face.height),
                color,
                thickness,
            )

            if labels is not None and i < len(labels):
                top = max(0, face.y - 20)
                cv2.rectangle(
                    output,
                    (face.x, top),
                    (face.x + face.width, top + 20),
                    color,
                    -1,
                )
                cv2.putText(
                    output, labels[i],
                    (face.x + 5, top + 15),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1
                )

        return output

    @classmethod
    def available_backends(cls) -> List[str]:
        """Return list of available detection backends."""
        return list(cls.BACKENDS.keys())
