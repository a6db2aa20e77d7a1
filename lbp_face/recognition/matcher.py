"""Chi-square histogram distance and nearest-centroid classification."""

import math
from typing import List, Sequence, Tuple

import numpy as np

from ..constants import UNKNOWN_LABEL
from .store import ModelStore
from .types import ClassificationResult, Histogram, IdentityModel


def chi_square_distance(a: Histogram, b: Histogram) -> float:
    """Chi-square divergence between two histograms.

    Bins where both histograms are zero contribute nothing. The sum is
    halved, so two disjoint unit masses are at distance 1.0.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        raise ValueError(f"Histogram shapes differ: {a.shape} vs {b.shape}")

    total = a + b
    mask = total != 0
    diff = a[mask] - b[mask]
    return float(np.sum(diff * diff / total[mask]) / 2.0)


def rank(query: Histogram, store: ModelStore) -> List[Tuple[str, float]]:
    """All committed identities with their distance, closest first.

    Equal distances keep the store's insertion order.
    """
    scored = [
        (model.label, chi_square_distance(query, model.centroid))
        for model in store.snapshot()
    ]
    return sorted(scored, key=lambda item: item[1])


def classify_models(
    query: Histogram,
    models: Sequence[IdentityModel],
    threshold: float,
) -> ClassificationResult:
    """Nearest-centroid classification over an already taken snapshot.

    Args:
        query: Histogram of the face to classify
        models: Committed models in insertion order, as from ModelStore.snapshot()
        threshold: Largest accepted distance

    Returns:
        The closest label and its distance, or UNKNOWN_LABEL with the best
        distance found (infinite when there are no models)

    Raises:
        ValueError: If threshold is NaN
    """
    if math.isnan(threshold):
        raise ValueError("Threshold must be a number, got NaN")

    best_label = UNKNOWN_LABEL
    best_distance = math.inf

    for model in models:
        distance = chi_square_distance(query, model.centroid)
        if distance < best_distance:
            best_distance = distance
            best_label = model.label

    if best_distance > threshold:
        best_label = UNKNOWN_LABEL

    return ClassificationResult(label=best_label, distance=best_distance)


def classify(query: Histogram, store: ModelStore, threshold: float) -> ClassificationResult:
    """Classify a histogram against the store's committed models."""
    return classify_models(query, store.snapshot(), threshold)


class Matcher:
    """Classifier bound to a fixed rejection threshold."""

    def __init__(self, threshold: float):
        self.threshold = threshold

    distance = staticmethod(chi_square_distance)

    def classify(self, query: Histogram, store: ModelStore) -> ClassificationResult:
        return classify(query, store, self.threshold)

    def rank(self, query: Histogram, store: ModelStore) -> List[Tuple[str, float]]:
        return rank(query, store)
