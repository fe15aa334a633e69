"""
Frame-differencing motion detector.

Compares the live frame against the session's background model: blurred
grayscale absolute difference, binarized, cleaned with an open/close pass,
then the largest moving blob is reported.
"""

import logging
import cv2
import numpy as np

from gesture_vision.core.types import DETECTOR_WEIGHTS, DetectionSignal, DetectorKind
from gesture_vision.modules.detection.regions import largest_region, structuring_element

logger = logging.getLogger(__name__)


class MotionDetector:
    """Background-difference detector. Fails on a perfectly still hand."""

    kind = DetectorKind.MOTION

    def __init__(self, config: dict = None):
        config = config or {}
        self._weight = config.get("weight", DETECTOR_WEIGHTS[self.kind])
        self._blur_kernel = self._odd(config.get("blur_kernel", 15))
        self._diff_threshold = config.get("diff_threshold", 25)
        self._min_area = config.get("min_area", 500)
        self._kernel = structuring_element(config.get("kernel_size", 5))

    @staticmethod
    def _odd(value) -> int:
        value = max(1, int(value))
        return value if value % 2 == 1 else value + 1

    def prepare(self, frame: np.ndarray) -> np.ndarray:
        """Grayscale + Gaussian blur, the form both inputs are compared in."""
        gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY) if frame.ndim == 3 else frame
        return cv2.GaussianBlur(gray, (self._blur_kernel, self._blur_kernel), 0)

    def detect(self, frame: np.ndarray, background) -> DetectionSignal:
        """Detect the dominant moving region.

        Args:
            frame: working-resolution BGR frame
            background: working-resolution BGR background model, or None

        Returns:
            DetectionSignal; absent when there is no usable background.
        """
        if background is None or background.shape[:2] != frame.shape[:2]:
            return DetectionSignal.absent(self.kind, self._weight)

        diff = cv2.absdiff(self.prepare(frame), self.prepare(background))
        _, mask = cv2.threshold(diff, self._diff_threshold, 255, cv2.THRESH_BINARY)
        mask = cv2.morphologyEx(mask, cv2.MORPH_OPEN, self._kernel)
        mask = cv2.morphologyEx(mask, cv2.MORPH_CLOSE, self._kernel)

        region = largest_region(mask, self._min_area)
        if region is None:
            return DetectionSignal.absent(self.kind, self._weight)

        center, area = region
        return DetectionSignal(self.kind, True, center, self._weight, area)

    @property
    def weight(self) -> float:
        return self._weight
