"""
Image quality scoring for camera frames

Scores are independent of the challenge decision and only meant to tell the
user when lighting or focus is too poor for reliable landmarks.
"""
import cv2
import numpy as np

from ..models.data_models import ImageQuality


# Optimal mean brightness range on a 0-255 scale
BRIGHTNESS_LOW = 80.0
BRIGHTNESS_HIGH = 180.0
SHARPNESS_STEP = 4
SHARPNESS_NORMALIZER = 50.0
CONTRAST_NORMALIZER = 70.0

LIGHTING_WEIGHT = 0.3
SHARPNESS_WEIGHT = 0.5
CONTRAST_WEIGHT = 0.2


def _grayscale(frame: np.ndarray) -> np.ndarray:
    if frame.ndim == 2:
        return frame.astype(np.float64)
    # cv2 uses the same 0.299/0.587/0.114 luma weights
    return cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY).astype(np.float64)


def lighting_score(frame: np.ndarray) -> float:
    """
    Score mean perceived brightness.

    Returns 100 inside the optimal range, falling linearly to 0 for a black
    frame, and by 100 per 75 levels above the range.
    """
    brightness = float(np.mean(_grayscale(frame)))

    if BRIGHTNESS_LOW <= brightness <= BRIGHTNESS_HIGH:
        return 100.0
    if brightness < BRIGHTNESS_LOW:
        return max(0.0, brightness / BRIGHTNESS_LOW * 100.0)
    return max(0.0, 100.0 - (brightness - BRIGHTNESS_HIGH) / 75.0 * 100.0)


def sharpness_score(frame: np.ndarray) -> float:
    """
    Score focus with the mean squared Laplacian on a downsampled grid.

    The Laplacian is taken with a neighbor distance of SHARPNESS_STEP pixels,
    evaluated at every SHARPNESS_STEP-th pixel.
    """
    gray = _grayscale(frame)
    s = SHARPNESS_STEP
    height, width = gray.shape
    if height <= 2 * s or width <= 2 * s:
        return 0.0

    center = gray[s:height - s:s, s:width - s:s]
    top = gray[0:height - 2 * s:s, s:width - s:s]
    bottom = gray[2 * s:height:s, s:width - s:s]
    left = gray[s:height - s:s, 0:width - 2 * s:s]
    right = gray[s:height - s:s, 2 * s:width:s]

    rows = min(a.shape[0] for a in (center, top, bottom, left, right))
    cols = min(a.shape[1] for a in (center, top, bottom, left, right))
    laplacian = (
        4 * center[:rows, :cols]
        - top[:rows, :cols] - bottom[:rows, :cols]
        - left[:rows, :cols] - right[:rows, :cols]
    )
    mean_square = float(np.mean(laplacian ** 2))
    return min(100.0, mean_square / SHARPNESS_NORMALIZER * 100.0)


def contrast_score(frame: np.ndarray) -> float:
    """Score brightness spread by standard deviation"""
    std_dev = float(np.std(_grayscale(frame)))
    return min(100.0, std_dev / CONTRAST_NORMALIZER * 100.0)


def clarity_score(lighting: float, sharpness: float, contrast: float) -> int:
    """Weighted overall score, rounded"""
    clarity = (
        LIGHTING_WEIGHT * lighting +
        SHARPNESS_WEIGHT * sharpness +
        CONTRAST_WEIGHT * contrast
    )
    return int(round(clarity))


def assess_quality(frame: np.ndarray) -> ImageQuality:
    """Compute every quality score for a BGR (or grayscale) frame"""
    lighting = lighting_score(frame)
    sharpness = sharpness_score(frame)
    contrast = contrast_score(frame)
    return ImageQuality(
        lighting=lighting,
        sharpness=sharpness,
        contrast=contrast,
        clarity=clarity_score(lighting, sharpness, contrast),
    )
