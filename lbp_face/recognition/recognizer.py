"""Main face recognizer combining detection, descriptors, and matching."""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import cv2
import numpy as np

from ..constants import get_detection_config, get_recognition_config
from ..detection import DetectedFace, FaceDetector
from ..utils import crop_and_normalize, normalize_face
from .descriptor import DescriptorExtractor
from .matcher import classify, classify_models
from .store import ModelStore
from .types import ClassificationResult, FaceMatch, Histogram

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".bmp")


class FaceRecognizer:
    """Enrollment and recognition surfaces over one model store."""

    def __init__(
        self,
        store: Optional[ModelStore] = None,
        detector: Optional[FaceDetector] = None,
        threshold: Optional[float] = None,
        face_size: Optional[tuple] = None,
    ):
        """Initialize face recognizer.

        Args:
            store: Model store to train and query (new in-memory store if None)
            detector: Face detector (configured backend if None)
            threshold: Default rejection distance for recognize()
            face_size: (width, height) faces are resized to before extraction
        """
        config = get_recognition_config()
        self.store = store if store is not None else ModelStore()
        self.threshold = threshold if threshold is not None else config.threshold
        self.face_size = tuple(face_size) if face_size is not None else config.face_size

        self._detector = detector or FaceDetector(backend=get_detection_config().backend)
        self._extractor = DescriptorExtractor(max_workers=config.max_workers)

    @property
    def detector(self) -> FaceDetector:
        return self._detector

    @property
    def extractor(self) -> DescriptorExtractor:
        return self._extractor

    def detect(self, image: np.ndarray) -> List[DetectedFace]:
        """Detect faces in an image."""
        return self._detector.detect(image)

    def describe(self, image: np.ndarray, face: DetectedFace) -> Histogram:
        """Descriptor of one detected face."""
        buffer = crop_and_normalize(image, face, target_size=self.face_size)
        return self._extractor.extract(buffer)

    # ------------------------------------------------------------------
    # Enrollment
    # ------------------------------------------------------------------

    def register_face(
        self,
        name: str,
        face_image: np.ndarray,
        detect: bool = True,
    ) -> bool:
        """Submit one training image for an identity.

        The sample is stored but only used after train().

        Args:
            name: Identity name for this face
            face_image: Image containing the face (full image or cropped)
            detect: If True, detect face first and use the first one found;
                    if False, assume the image is already a face crop

        Returns:
            True if a sample was added

        Raises:
            ValueError: If name is blank or the reserved unknown label
        """
        self.store.validate_label(name)

        try:
            if detect:
                faces = self._detector.detect(face_image)
                if not faces:
                    logger.warning(f"No face detected for {name}")
                    return False
                histogram = self.describe(face_image, faces[0])
            else:
                buffer = normalize_face(face_image, target_size=self.face_size)
                histogram = self._extractor.extract(buffer)
        except ValueError as e:
            logger.warning(f"Could not extract descriptor for {name}: {e}")
            return False

        self.store.add(name, histogram)
        logger.debug(f"Registered face for {name} ({self.store.sample_count(name)} samples)")
        return True

    def register_images(self, name: str, image_paths: List[Path]) -> int:
        """Register every readable image in a list of paths.

        Returns:
            Number of images that produced a sample
        """
        self.store.validate_label(name)

        count = 0
        for image_file in image_paths:
            image = cv2.imread(str(image_file))
            if image is None:
                logger.warning(f"Could not load image: {image_file}")
                continue
            if self.register_face(name, image):
                count += 1
                logger.debug(f"  ✓ {Path(image_file).name}")
        return count

    def register_from_directory(self, directory: Union[str, Path]) -> Dict[str, int]:
        """Register faces from a directory structure.

        Expected structure:
            directory/
                person1/
                    image1.jpg
                    image2.jpg
                person2/
                    image1.jpg

        Args:
            directory: Path to face directory

        Returns:
            Dict mapping name to number of registered faces
        """
        dir_path = Path(directory)
        if not dir_path.exists():
            logger.warning(f"Directory not found: {directory}")
            return {}

        results = {}

        for person_dir in sorted(dir_path.iterdir()):
            if not person_dir.is_dir():
                continue

            images = sorted(
                p for p in person_dir.iterdir()
                if p.suffix.lower() in IMAGE_EXTENSIONS
            )
            count = self.register_images(person_dir.name, images)

            if count > 0:
                results[person_dir.name] = count
                logger.info(f"Registered {count} faces for {person_dir.name}")

        return results

    def train(self) -> List[str]:
        """Commit all submitted samples to the store.

        Returns:
            Trained identity labels

        Raises:
            EmptyTrainingSetError: If nothing was registered
        """
        return list(self.store.commit().keys())

    # ------------------------------------------------------------------
    # Recognition
    # ------------------------------------------------------------------

    def recognize(
        self,
        image: np.ndarray,
        threshold: Optional[float] = None,
    ) -> List[FaceMatch]:
        """Recognize every face in an image.

        All faces are classified against the same committed snapshot, and
        their descriptors are extracted in parallel.

        Args:
            image: Input image (BGR, BGRA or grayscale)
            threshold: Rejection distance (recognizer default if None)

        Returns:
            One FaceMatch per detected face; empty when no face is found
        """
        threshold = self.threshold if threshold is None else threshold
        models = self.store.snapshot()
        faces = self._detector.detect(image)

        kept, buffers = [], []
        for face in faces:
            try:
                buffers.append(crop_and_normalize(image, face, target_size=self.face_size))
            except ValueError as e:
                logger.debug(f"Skipping face at {face.bbox}: {e}")
                continue
            kept.append(face)

        histograms = self._extractor.extract_many(buffers)

        return [
            FaceMatch(face=face, result=classify_models(histogram, models, threshold))
            for face, histogram in zip(kept, histograms)
        ]

    def recognize_face(
        self,
        face_image: np.ndarray,
        threshold: Optional[float] = None,
    ) -> ClassificationResult:
        """Recognize a single cropped face image."""
        threshold = self.threshold if threshold is None else threshold
        buffer = normalize_face(face_image, target_size=self.face_size)
        return classify(self._extractor.extract(buffer), self.store, threshold)

    def get_registered_identities(self) -> List[str]:
        """Get list of trained identity names."""
        return self.store.labels()

    def get_sample_count(self, name: str) -> int:
        """Get number of registered samples for an identity."""
        return self.store.sample_count(name)

    def remove_identity(self, name: str) -> bool:
        """Remove an identity from the store."""
        return self.store.remove(name)
