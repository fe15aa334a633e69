"""Contour helpers shared by the mask-based detectors."""

import cv2
import numpy as np

from gesture_vision.core.types import Point2D


def structuring_element(size: int) -> np.ndarray:
    """Elliptical kernel for morphological cleanup."""
    size = max(1, int(size))
    return cv2.getStructuringElement(cv2.MORPH_ELLIPSE, (size, size))


def largest_region(mask: np.ndarray, min_area: float):
    """Find the largest external contour of a binary mask.

    Returns:
        (center, area) where center is the bounding-box center, or None when
        the largest contour does not exceed ``min_area``.
    """
    contours, _ = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    if not contours:
        return None

    largest = max(contours, key=cv2.contourArea)
    area = cv2.contourArea(largest)
    if area <= min_area:
        return None

    x, y, w, h = cv2.boundingRect(largest)
    return Point2D(x + w / 2.0, y + h / 2.0), float(area)
