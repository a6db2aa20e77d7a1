"""Model store holding per-identity training histograms and centroids."""

import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

import numpy as np

from ..constants import HISTOGRAM_BINS, UNKNOWN_LABEL
from ..exceptions import EmptyTrainingSetError
from .types import Histogram, IdentityModel, freeze

logger = logging.getLogger(__name__)


def average_histograms(histograms: List[Histogram]) -> Histogram:
    """Element-wise arithmetic mean of a list of histograms."""
    stacked = np.stack(histograms).astype(np.float64, copy=False)
    return freeze(np.sum(stacked, axis=0) / len(histograms))


class ModelStore:
    """Mapping from identity label to its trained model.

    Training histograms are collected with add() and only become visible to
    classification after commit(), which rebuilds every centroid and swaps
    the whole model map in one step. A single lock guards the samples, the
    swap and snapshot(), so a reader never sees a half-built map.
    """

    def __init__(self, database_path: Optional[Union[str, Path]] = None):
        """Initialize the store.

        Args:
            database_path: .npz file to persist to. Loaded on construction
                           when it exists. If None, storage is in-memory only.
        """
        self._database_path = Path(database_path) if database_path else None
        self._samples: Dict[str, List[Histogram]] = {}
        self._models: Dict[str, IdentityModel] = {}
        self._lock = threading.RLock()

        if self._database_path and self._database_path.exists():
            self.load(self._database_path)

    @property
    def database_path(self) -> Optional[Path]:
        return self._database_path

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    @staticmethod
    def validate_label(label: str) -> None:
        """Raise ValueError unless label can name an enrolled identity."""
        if not isinstance(label, str) or not label.strip():
            raise ValueError("Label must be a non-empty string")
        if label == UNKNOWN_LABEL:
            raise ValueError(f"'{UNKNOWN_LABEL}' is reserved for rejected faces")

    def add(self, label: str, histogram: Histogram) -> None:
        """Submit one training histogram for a label.

        The sample is retained but not visible to classification until the
        next commit().
        """
        self.validate_label(label)

        sample = np.array(histogram, dtype=np.float64).reshape(-1)
        if sample.shape != (HISTOGRAM_BINS,):
            raise ValueError(
                f"Histogram must have {HISTOGRAM_BINS} bins, got {sample.shape[0]}"
            )

        with self._lock:
            self._samples.setdefault(label, []).append(freeze(sample))
            count = len(self._samples[label])

        logger.debug(f"Added histogram for {label} ({count} total)")

    def commit(self) -> Dict[str, IdentityModel]:
        """Recompute every centroid from the retained samples.

        Returns:
            The new label -> IdentityModel mapping

        Raises:
            EmptyTrainingSetError: If no samples were submitted. The
                previously committed models are left untouched.
        """
        with self._lock:
            total = sum(len(samples) for samples in self._samples.values())
            if total == 0:
                raise EmptyTrainingSetError("Nothing to train: no histograms submitted")

            models = {
                label: IdentityModel(
                    label=label,
                    centroid=average_histograms(samples),
                    sample_count=len(samples),
                )
                for label, samples in self._samples.items()
                if samples
            }
            self._models = models

        logger.info(f"Trained {len(models)} identities from {total} samples")
        return dict(models)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def snapshot(self) -> Tuple[IdentityModel, ...]:
        """Committed models in insertion order, as an immutable tuple."""
        with self._lock:
            return tuple(self._models.values())

    def get(self, label: str) -> Optional[IdentityModel]:
        """Get the committed model for a label."""
        with self._lock:
            return self._models.get(label)

    def labels(self) -> List[str]:
        """Get list of all committed identity labels."""
        with self._lock:
            return list(self._models.keys())

    def pending_labels(self) -> List[str]:
        """Get labels that have submitted samples, committed or not."""
        with self._lock:
            return [label for label, samples in self._samples.items() if samples]

    def sample_count(self, label: str) -> int:
        """Get number of submitted samples for a label."""
        with self._lock:
            return len(self._samples.get(label, []))

    def remove(self, label: str) -> bool:
        """Remove a label's samples and model.

        Returns:
            True if removed, False if not found
        """
        with self._lock:
            found = label in self._samples or label in self._models
            self._samples.pop(label, None)
            self._models.pop(label, None)

        if found:
            logger.info(f"Removed identity: {label}")
        return found

    def clear(self) -> None:
        """Drop all samples and models."""
        with self._lock:
            self._samples.clear()
            self._models.clear()
        logger.info("Model store cleared")

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, path: Optional[Union[str, Path]] = None) -> Path:
        """Save samples and committed centroids to an .npz file."""
        path = Path(path) if path else self._database_path
        if path is None:
            raise ValueError("No database path set, cannot save")
        path.parent.mkdir(parents=True, exist_ok=True)

        with self._lock:
            sample_labels = [label for label, samples in self._samples.items() if samples]
            arrays = {
                f"samples_{i}": np.stack(self._samples[label])
                for i, label in enumerate(sample_labels)
            }
            model_labels = list(self._models.keys())
            for i, label in enumerate(model_labels):
                arrays[f"centroid_{i}"] = np.asarray(self._models[label].centroid)
                arrays[f"count_{i}"] = np.asarray(self._models[label].sample_count)

        # Written to a sibling temp file, then renamed over the store
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "wb") as f:
                np.savez_compressed(
                    f,
                    sample_labels=np.array(sample_labels, dtype=str),
                    model_labels=np.array(model_labels, dtype=str),
                    **arrays,
                )
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(f"Model store saved to {path}")
        return path

    def load(self, path: Optional[Union[str, Path]] = None) -> None:
        """Replace the store contents with those saved at path."""
        path = Path(path) if path else self._database_path
        if path is None:
            raise ValueError("No database path set, cannot load")

        samples: Dict[str, List[Histogram]] = {}
        models: Dict[str, IdentityModel] = {}
        with np.load(path, allow_pickle=False) as data:
            for i, label in enumerate(data["sample_labels"].tolist()):
                samples[label] = [freeze(np.array(row, dtype=np.float64)) for row in data[f"samples_{i}"]]
            for i, label in enumerate(data["model_labels"].tolist()):
                models[label] = IdentityModel(
                    label=label,
                    centroid=freeze(np.array(data[f"centroid_{i}"], dtype=np.float64)),
                    sample_count=int(data[f"count_{i}"]),
                )

        with self._lock:
            self._samples = samples
            self._models = models

        logger.info(f"Loaded {len(models)} identities from {path}")

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        with self._lock:
            return len(self._models)

    def __contains__(self, label: object) -> bool:
        with self._lock:
            return label in self._models

    def __iter__(self) -> Iterator[str]:
        return iter(self.labels())

    def __getitem__(self, label: str) -> IdentityModel:
        model = self.get(label)
        if model is None:
            raise KeyError(label)
        return model
