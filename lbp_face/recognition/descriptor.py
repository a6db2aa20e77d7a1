"""Local binary pattern texture descriptor.

Each interior pixel is compared with its 8 neighbours, read clockwise from
the top-left. A neighbour strictly brighter than the centre sets its bit; the
top-left neighbour is the most significant bit. The 8-bit codes are counted
into a 256-bin histogram normalized by the number of interior pixels, giving
a signature that is insensitive to monotonic lighting changes.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional

import numpy as np

from ..constants import HISTOGRAM_BINS
from ..exceptions import InvalidBufferError
from .types import Histogram, PixelBuffer, freeze

logger = logging.getLogger(__name__)

# (row, col) neighbour offsets, most significant bit first
NEIGHBOR_OFFSETS = (
    (-1, -1), (-1, 0), (-1, 1), (0, 1),
    (1, 1), (1, 0), (1, -1), (0, -1),
)


def lbp_codes(buffer: PixelBuffer) -> np.ndarray:
    """Compute the 8-bit texture code of every interior pixel.

    Returns:
        uint8 array of shape (height - 2, width - 2)
    """
    if buffer.width <= 2 or buffer.height <= 2:
        raise InvalidBufferError(
            f"Buffer of {buffer.width}x{buffer.height} has no interior pixels"
        )

    image = buffer.as_array()
    h, w = image.shape
    center = image[1:h - 1, 1:w - 1]
    codes = np.zeros(center.shape, dtype=np.uint8)

    for bit, (dy, dx) in zip(range(7, -1, -1), NEIGHBOR_OFFSETS):
        neighbor = image[1 + dy:h - 1 + dy, 1 + dx:w - 1 + dx]
        codes |= (neighbor > center).astype(np.uint8) << np.uint8(bit)

    return codes


class DescriptorExtractor:
    """Converts grayscale face buffers into normalized LBP histograms."""

    def __init__(self, max_workers: Optional[int] = None):
        """
        Args:
            max_workers: Thread count used by extract_many
        """
        self.max_workers = max_workers

    @property
    def histogram_size(self) -> int:
        return HISTOGRAM_BINS

    def extract(self, buffer: PixelBuffer) -> Histogram:
        """Extract the texture histogram of a face buffer.

        Args:
            buffer: Grayscale face region, at least 3x3

        Returns:
            Read-only float64 array of 256 values summing to 1.0

        Raises:
            InvalidBufferError: If the buffer has no interior pixels
        """
        codes = lbp_codes(buffer)
        counts = np.bincount(codes.ravel(), minlength=HISTOGRAM_BINS)
        histogram = counts.astype(np.float64) / float(codes.size)
        return freeze(histogram)

    def extract_many(self, buffers: Iterable[PixelBuffer]) -> List[Histogram]:
        """Extract histograms for several independent buffers in parallel.

        Results keep the input order. The first failing buffer's error is
        raised.
        """
        buffers = list(buffers)
        if len(buffers) <= 1:
            return [self.extract(b) for b in buffers]

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            histograms = list(executor.map(self.extract, buffers))

        logger.debug(f"Extracted {len(histograms)} descriptors")
        return histograms
