# omr_grader/image_processing.py
"""
Functions for loading sheet images into pixel buffers.
"""
import logging
import os

import cv2
import numpy as np

from .errors import ImageDecodeError

logger = logging.getLogger(__name__)


def _check_buffer(image, source):
    if image.ndim == 2 or (image.ndim == 3 and image.shape[2] in (1, 3, 4)):
        if image.shape[0] > 0 and image.shape[1] > 0:
            return image
    raise ImageDecodeError(f"Unsupported pixel buffer from {source} (shape={image.shape})")


def load_image(source):
    """
    Loads a sheet image from a file path, encoded bytes, or an already decoded array.

    Colour images come back as OpenCV BGR(A) arrays; the channel order does not
    matter to the density evaluator, which averages the colour channels.
    """
    if isinstance(source, np.ndarray):
        return _check_buffer(source, 'array')

    if isinstance(source, (bytes, bytearray, memoryview)):
        buffer = np.frombuffer(source, dtype=np.uint8)
        image = cv2.imdecode(buffer, cv2.IMREAD_COLOR) if buffer.size else None
        if image is None:
            raise ImageDecodeError(f"Could not decode image from {len(buffer)} bytes")
        logger.debug("Decoded image from bytes (shape=%s)", image.shape)
        return _check_buffer(image, 'bytes')

    if isinstance(source, (str, os.PathLike)):
        path = os.fspath(source)
        image = cv2.imread(path, cv2.IMREAD_COLOR)
        if image is None:
            raise ImageDecodeError(f"Could not read image at {path}")
        logger.debug("Loaded image: %s (shape=%s)", path, image.shape)
        return _check_buffer(image, path)

    raise ImageDecodeError(f"Cannot load an image from {type(source).__name__}")
