"""LBP Face Recognition.

Detects faces with OpenCV's Haar cascade, describes each face with a local
binary pattern histogram, and classifies it against enrolled identities by
chi-square nearest-centroid search.

Quick Start:
    # Command line
    python -m lbp_face register --name Alice --images ./alice_photos/
    python -m lbp_face recognize --image group.jpg --output annotated.jpg

    # As library
    from lbp_face import FaceRecognizer

    recognizer = FaceRecognizer()
    recognizer.register_face("Alice", image)
    recognizer.train()
    matches = recognizer.recognize(query_image, threshold=0.35)
"""

from .constants import UNKNOWN_LABEL
from .exceptions import EmptyTrainingSetError, FaceRecognitionError, InvalidBufferError
from .detection import DetectedFace, FaceDetector, HaarCascadeDetector
from .recognition import (
    ClassificationResult,
    DescriptorExtractor,
    FaceMatch,
    FaceRecognizer,
    IdentityModel,
    Matcher,
    ModelStore,
    PixelBuffer,
    chi_square_distance,
    classify,
)
from .utils import crop_and_normalize

__version__ = "0.1.0"

__all__ = [
    "UNKNOWN_LABEL",
    "FaceRecognitionError",
    "InvalidBufferError",
    "EmptyTrainingSetError",
    "DetectedFace",
    "FaceDetector",
    "HaarCascadeDetector",
    "ClassificationResult",
    "DescriptorExtractor",
    "FaceMatch",
    "FaceRecognizer",
    "IdentityModel",
    "Matcher",
    "ModelStore",
    "PixelBuffer",
    "chi_square_distance",
    "classify",
    "crop_and_normalize",
]
