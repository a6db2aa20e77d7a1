"""Face detection backends.

Available backends:
- haar_cascade: OpenCV frontal face Haar Cascade (default)
"""

from .types import DetectedFace
from .base import BaseFaceDetector
from .haar import HaarCascadeDetector
from .detector import FaceDetector

DETECTION_BACKENDS = FaceDetector.BACKENDS

__all__ = [
    "DetectedFace",
    "BaseFaceDetector",
    "HaarCascadeDetector",
    "FaceDetector",
    "DETECTION_BACKENDS",
]
