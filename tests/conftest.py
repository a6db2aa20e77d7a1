"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from typing import List

import numpy as np
import pytest

# Add the project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from lbp_face.detection import BaseFaceDetector, DetectedFace, FaceDetector  # noqa: E402


FACE_SIZE = 100


def horizontal_ramp(size: int = FACE_SIZE) -> np.ndarray:
    """Grayscale image brightening left to right (every LBP code is 56)."""
    row = (np.arange(size) * 2).astype(np.uint8)
    return np.tile(row, (size, 1))


def vertical_ramp(size: int = FACE_SIZE) -> np.ndarray:
    """Grayscale image brightening top to bottom (every LBP code is 14)."""
    return horizontal_ramp(size).T.copy()


def to_bgr(gray: np.ndarray) -> np.ndarray:
    return np.stack([gray, gray, gray], axis=-1)


class WholeImageDetector(BaseFaceDetector):
    """Reports the whole image as a single face."""

    def detect(self, image: np.ndarray) -> List[DetectedFace]:
        h, w = image.shape[:2]
        return [DetectedFace(x=0, y=0, width=w, height=h)]


class NoFaceDetector(BaseFaceDetector):
    """Never finds a face."""

    def detect(self, image: np.ndarray) -> List[DetectedFace]:
        return []


@pytest.fixture
def sample_image():
    """Create a sample BGR test image."""
    return np.random.randint(0, 255, (480, 640, 3), dtype=np.uint8)


@pytest.fixture
def sample_grayscale_image():
    """Create a sample grayscale test image."""
    return np.random.randint(0, 255, (480, 640), dtype=np.uint8)


@pytest.fixture
def alice_image():
    """BGR face image with a horizontal texture."""
    return to_bgr(horizontal_ramp())


@pytest.fixture
def bob_image():
    """BGR face image with a vertical texture."""
    return to_bgr(vertical_ramp())


@pytest.fixture
def constant_image():
    """Uniform BGR image (every LBP code is 0)."""
    return np.full((FACE_SIZE, FACE_SIZE, 3), 200, dtype=np.uint8)


@pytest.fixture
def whole_image_detector():
    return FaceDetector(WholeImageDetector())


@pytest.fixture
def no_face_detector():
    return FaceDetector(NoFaceDetector())


@pytest.fixture
def recognizer(whole_image_detector):
    """Recognizer over an in-memory store that treats each image as one face."""
    from lbp_face.recognition import FaceRecognizer, ModelStore

    return FaceRecognizer(
        store=ModelStore(),
        detector=whole_image_detector,
        threshold=0.35,
        face_size=(FACE_SIZE, FACE_SIZE),
    )


def unit_histogram(index: int) -> np.ndarray:
    """Histogram with all mass in one bin."""
    hist = np.zeros(256, dtype=np.float64)
    hist[index] = 1.0
    return hist


def random_histogram(rng: np.random.RandomState) -> np.ndarray:
    values = rng.random_sample(256)
    return values / values.sum()
