"""Exceptions raised by the recognition engine."""


class FaceRecognitionError(Exception):
    """Base class for recognition engine errors."""


class InvalidBufferError(FaceRecognitionError, ValueError):
    """Pixel buffer is malformed or too small to extract a descriptor from.

    Raised when the sample count does not match the dimensions, or when the
    buffer has no interior pixels (width or height of 2 or less).
    """


class EmptyTrainingSetError(FaceRecognitionError):
    """Training was committed with no histograms submitted for any label."""
