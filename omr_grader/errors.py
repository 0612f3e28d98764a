# omr_grader/errors.py
"""
Exceptions raised by the OMR Grader.
"""


class OMRError(Exception):
    """Base class for every error raised by this package."""


class CatalogError(OMRError, ValueError):
    """The region catalog is missing fields or breaks a layout invariant."""


class ImageDecodeError(OMRError):
    """A sheet image could not be decoded into a pixel buffer."""
