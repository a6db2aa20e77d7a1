"""Face recognition types."""

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

from ..constants import UNKNOWN_LABEL
from ..detection.types import DetectedFace
from ..exceptions import InvalidBufferError

# A read-only float64 array of shape (HISTOGRAM_BINS,) summing to 1.0
Histogram = np.ndarray


def freeze(array: np.ndarray) -> np.ndarray:
    """Mark an array read-only and return it."""
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """Grayscale image region with row-major uint8 samples."""

    width: int
    height: int
    samples: np.ndarray = field(repr=False)

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise InvalidBufferError(
                f"Negative buffer dimensions: {self.width}x{self.height}"
            )
        raw = np.asarray(self.samples)
        if raw.dtype == np.bool_ or not np.issubdtype(raw.dtype, np.integer):
            raise InvalidBufferError(f"Samples must be integers, got dtype {raw.dtype}")
        if raw.size and (raw.min() < 0 or raw.max() > 255):
            raise InvalidBufferError(
                f"Samples must lie in 0..255, got range {raw.min()}..{raw.max()}"
            )

        samples = np.array(raw, dtype=np.uint8).reshape(-1)
        if samples.size != self.width * self.height:
            raise InvalidBufferError(
                f"Expected {self.width * self.height} samples for a "
                f"{self.width}x{self.height} buffer, got {samples.size}"
            )
        object.__setattr__(self, "samples", freeze(samples))

    @classmethod
    def from_array(cls, gray: np.ndarray) -> "PixelBuffer":
        """Build a buffer from a 2-D grayscale image."""
        gray = np.asarray(gray)
        if gray.ndim != 2:
            raise InvalidBufferError(f"Expected a 2-D grayscale image, got shape {gray.shape}")
        height, width = gray.shape
        return cls(width=int(width), height=int(height), samples=gray)

    def as_array(self) -> np.ndarray:
        """Return the samples as a read-only (height, width) view."""
        return self.samples.reshape(self.height, self.width)

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.height, self.width)


@dataclass(frozen=True, eq=False)
class IdentityModel:
    """Aggregated signature of one enrolled identity."""

    label: str
    centroid: Histogram = field(repr=False)
    sample_count: int = 1


@dataclass(frozen=True)
class ClassificationResult:
    """Result of classifying one query histogram."""

    label: str
    distance: float

    @property
    def is_known(self) -> bool:
        """True when the query matched an enrolled identity."""
        return self.label != UNKNOWN_LABEL

    def to_dict(self) -> dict:
        return {"label": self.label, "distance": float(self.distance)}


@dataclass(frozen=True)
class FaceMatch:
    """A detected face paired with its classification."""

    face: DetectedFace
    result: ClassificationResult

    def to_dict(self) -> dict:
        data = self.face.to_dict()
        data.update(self.result.to_dict())
        return data
