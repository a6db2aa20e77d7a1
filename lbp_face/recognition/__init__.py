"""Face recognition module.

Contains:
- PixelBuffer, IdentityModel, ClassificationResult, FaceMatch: data types
- DescriptorExtractor: LBP texture histograms
- ModelStore: per-identity samples and centroids
- chi_square_distance / classify / Matcher: nearest-centroid matching
- FaceRecognizer: detection + descriptors + matching
"""

from .types import (
    ClassificationResult,
    FaceMatch,
    Histogram,
    IdentityModel,
    PixelBuffer,
)
from .descriptor import DescriptorExtractor, NEIGHBOR_OFFSETS, lbp_codes
from .store import ModelStore, average_histograms
from .matcher import Matcher, chi_square_distance, classify, classify_models, rank
from .recognizer import FaceRecognizer

__all__ = [
    # Types
    "ClassificationResult", "FaceMatch", "Histogram", "IdentityModel", "PixelBuffer",
    # Descriptor
    "DescriptorExtractor", "NEIGHBOR_OFFSETS", "lbp_codes",
    # Store
    "ModelStore", "average_histograms",
    # Matching
    "Matcher", "chi_square_distance", "classify", "classify_models", "rank",
    # Recognizer
    "FaceRecognizer",
]
