# omr_grader/density.py
"""
Mark density evaluation: how much of an option region is covered by ink.
"""
import logging

import numpy as np

from . import config

logger = logging.getLogger(__name__)


def _sample_window(region, img_w, img_h, inset):
    """
    Converts a region's percent geometry into a pixel window, shrunk by
    ``inset`` on every side and clamped to the image.
    Returns (left, top, right, bottom).
    """
    x = region.x / 100.0 * img_w
    y = region.y / 100.0 * img_h
    w = region.w / 100.0 * img_w
    h = region.h / 100.0 * img_h

    left = max(0, int(round(x + w * inset)))
    top = max(0, int(round(y + h * inset)))
    right = min(img_w, int(round(x + w * (1 - inset))))
    bottom = min(img_h, int(round(y + h * (1 - inset))))
    return left, top, right, bottom


def _brightness(window):
    # Unweighted mean of the colour channels; alpha is ignored.
    if window.ndim == 2:
        return window.astype(np.float32)
    if window.shape[2] < 3:
        return window[:, :, 0].astype(np.float32)
    return window[:, :, :3].astype(np.float32).mean(axis=2)


def ink_density(image, region, cfg=None) -> float:
    """
    Fraction of dark pixels in the central sub-window of ``region``, in [0, 1].

    A region that cannot be sampled (no image, window outside the raster,
    zero area) has density 0.0; it reads as "no mark" rather than an error.
    """
    cfg = cfg or config.DEFAULT_DETECTION
    try:
        img_h, img_w = image.shape[:2]
        left, top, right, bottom = _sample_window(region, img_w, img_h, cfg.sample_inset)
        if right <= left or bottom <= top:
            return 0.0

        window = image[top:bottom, left:right]
        area = (right - left) * (bottom - top)
        dark = np.count_nonzero(_brightness(window) < cfg.dark_pixel_threshold)
    except (AttributeError, IndexError, TypeError, ValueError) as e:
        logger.debug("Could not sample region %s: %s", getattr(region, 'id', region), e)
        return 0.0

    return float(dark) / float(area)
