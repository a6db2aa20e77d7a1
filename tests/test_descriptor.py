"""Tests for the LBP descriptor extractor."""

import numpy as np
import pytest

from conftest import horizontal_ramp, vertical_ramp


class TestPixelBuffer:
    """Test cases for PixelBuffer construction."""

    def test_from_array(self):
        """Test buffer built from a 2-D image keeps dimensions and samples."""
        from lbp_face import PixelBuffer

        gray = np.arange(12, dtype=np.uint8).reshape(3, 4)
        buffer = PixelBuffer.from_array(gray)

        assert buffer.width == 4
        assert buffer.height == 3
        assert buffer.samples.tolist() == list(range(12))
        assert np.array_equal(buffer.as_array(), gray)

    def test_samples_are_copied_and_read_only(self):
        """Test later changes to the source do not leak into the buffer."""
        from lbp_face import PixelBuffer

        gray = np.zeros((3, 3), dtype=np.uint8)
        buffer = PixelBuffer.from_array(gray)
        gray[1, 1] = 255

        assert buffer.as_array()[1, 1] == 0
        with pytest.raises(ValueError):
            buffer.samples[0] = 1

    def test_sample_count_mismatch(self):
        """Test buffer rejects samples that do not match its dimensions."""
        from lbp_face import InvalidBufferError, PixelBuffer

        with pytest.raises(InvalidBufferError):
            PixelBuffer(width=3, height=3, samples=np.zeros(8, dtype=np.uint8))

    @pytest.mark.parametrize("gray", [
        np.full((3, 3), 300, dtype=np.int64),
        np.full((3, 3), -1, dtype=np.int16),
        np.full((3, 3), 0.9),
        np.ones((3, 3), dtype=bool),
    ])
    def test_rejects_samples_outside_uint8(self, gray):
        """Test out-of-range or non-integer samples are not silently converted."""
        from lbp_face import InvalidBufferError, PixelBuffer

        with pytest.raises(InvalidBufferError):
            PixelBuffer.from_array(gray)

    def test_accepts_wider_integer_types_in_range(self):
        """Test in-range samples of any integer dtype are stored as uint8."""
        from lbp_face import PixelBuffer

        buffer = PixelBuffer(width=2, height=2, samples=[0, 17, 128, 255])

        assert buffer.samples.dtype == np.uint8
        assert buffer.samples.tolist() == [0, 17, 128, 255]

    def test_from_array_rejects_color(self):
        """Test a 3-channel image is not accepted as a grayscale buffer."""
        from lbp_face import InvalidBufferError, PixelBuffer

        with pytest.raises(InvalidBufferError):
            PixelBuffer.from_array(np.zeros((4, 4, 3), dtype=np.uint8))


class TestDescriptorExtractor:
    """Test cases for DescriptorExtractor."""

    def test_constant_image(self):
        """Test uniform image puts all mass in bucket 0."""
        from lbp_face import DescriptorExtractor, PixelBuffer

        buffer = PixelBuffer.from_array(np.full((100, 100), 200, dtype=np.uint8))
        hist = DescriptorExtractor().extract(buffer)

        expected = np.zeros(256)
        expected[0] = 1.0
        assert hist.shape == (256,)
        assert hist.dtype == np.float64
        assert np.array_equal(hist, expected)

    def test_random_image_is_distribution(self, sample_grayscale_image):
        """Test histogram is non-negative and sums to one."""
        from lbp_face import DescriptorExtractor, PixelBuffer

        hist = DescriptorExtractor().extract(PixelBuffer.from_array(sample_grayscale_image))

        assert len(hist) == 256
        assert np.all(hist >= 0)
        assert abs(hist.sum() - 1.0) < 1e-6

    @pytest.mark.parametrize("row,col,code", [
        (0, 0, 128),  # top-left is the most significant bit
        (0, 1, 64),
        (0, 2, 32),
        (1, 2, 16),
        (2, 2, 8),
        (2, 1, 4),
        (2, 0, 2),
        (1, 0, 1),  # left is the least significant bit
    ])
    def test_neighbor_bit_order(self, row, col, code):
        """Test each neighbour maps to its bit, clockwise from top-left."""
        from lbp_face import DescriptorExtractor, PixelBuffer

        gray = np.full((3, 3), 10, dtype=np.uint8)
        gray[1, 1] = 100
        gray[row, col] = 200
        hist = DescriptorExtractor().extract(PixelBuffer.from_array(gray))

        assert hist[code] == 1.0

    def test_equal_neighbors_do_not_set_bits(self):
        """Test only strictly brighter neighbours count."""
        from lbp_face import DescriptorExtractor, PixelBuffer

        gray = np.full((3, 3), 100, dtype=np.uint8)
        gray[0, 0] = 101
        hist = DescriptorExtractor().extract(PixelBuffer.from_array(gray))

        assert hist[128] == 1.0

    def test_all_neighbors_brighter(self):
        """Test a dark centre yields code 255."""
        from lbp_face import DescriptorExtractor, PixelBuffer

        gray = np.full((3, 3), 50, dtype=np.uint8)
        gray[1, 1] = 0
        hist = DescriptorExtractor().extract(PixelBuffer.from_array(gray))

        assert hist[255] == 1.0

    def test_ramps(self):
        """Test directional gradients produce their single expected code."""
        from lbp_face import DescriptorExtractor, PixelBuffer

        extractor = DescriptorExtractor()
        horizontal = extractor.extract(PixelBuffer.from_array(horizontal_ramp()))
        vertical = extractor.extract(PixelBuffer.from_array(vertical_ramp()))

        assert horizontal[0b00111000] == 1.0
        assert vertical[0b00001110] == 1.0

    def test_non_square_buffer_excludes_border(self):
        """Test a 5x3 buffer has exactly three interior pixels."""
        from lbp_face.recognition import PixelBuffer, lbp_codes

        gray = np.arange(15, dtype=np.uint8).reshape(3, 5)
        codes = lbp_codes(PixelBuffer.from_array(gray))

        assert codes.shape == (1, 3)

    def test_monotonic_lighting_invariance(self):
        """Test a brightness shift leaves the histogram unchanged."""
        from lbp_face import DescriptorExtractor, PixelBuffer

        rng = np.random.RandomState(7)
        gray = rng.randint(0, 200, (64, 48)).astype(np.uint8)
        brighter = (gray + 50).astype(np.uint8)

        extractor = DescriptorExtractor()
        a = extractor.extract(PixelBuffer.from_array(gray))
        b = extractor.extract(PixelBuffer.from_array(brighter))

        assert np.array_equal(a, b)

    @pytest.mark.parametrize("width,height", [(2, 2), (2, 10), (10, 2), (0, 0)])
    def test_too_small_buffer(self, width, height):
        """Test buffers without interior pixels raise InvalidBufferError."""
        from lbp_face import DescriptorExtractor, InvalidBufferError, PixelBuffer

        buffer = PixelBuffer(width=width, height=height,
                             samples=np.zeros(width * height, dtype=np.uint8))

        with pytest.raises(InvalidBufferError):
            DescriptorExtractor().extract(buffer)

    def test_histogram_is_read_only(self):
        """Test extracted histograms cannot be modified in place."""
        from lbp_face import DescriptorExtractor, PixelBuffer

        hist = DescriptorExtractor().extract(PixelBuffer.from_array(horizontal_ramp()))

        assert hist.flags.writeable is False

    def test_extract_many_keeps_order(self):
        """Test parallel extraction matches sequential extraction."""
        from lbp_face import DescriptorExtractor, PixelBuffer

        rng = np.random.RandomState(3)
        buffers = [
            PixelBuffer.from_array(horizontal_ramp()),
            PixelBuffer.from_array(vertical_ramp()),
            PixelBuffer.from_array(rng.randint(0, 255, (40, 30)).astype(np.uint8)),
        ]
        extractor = DescriptorExtractor(max_workers=2)

        batch = extractor.extract_many(buffers)

        assert len(batch) == 3
        for buffer, hist in zip(buffers, batch):
            assert np.array_equal(hist, extractor.extract(buffer))

    def test_extract_many_propagates_errors(self):
        """Test a bad buffer in a batch raises."""
        from lbp_face import DescriptorExtractor, InvalidBufferError, PixelBuffer

        buffers = [
            PixelBuffer.from_array(horizontal_ramp()),
            PixelBuffer.from_array(np.zeros((2, 2), dtype=np.uint8)),
        ]

        with pytest.raises(InvalidBufferError):
            DescriptorExtractor().extract_many(buffers)
