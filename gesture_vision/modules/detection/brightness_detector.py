"""
Dark-region detector for a hand held against a light background.
"""

import logging
import cv2
import numpy as np

from gesture_vision.core.types import DETECTOR_WEIGHTS, DetectionSignal, DetectorKind
from gesture_vision.modules.detection.regions import largest_region, structuring_element

logger = logging.getLogger(__name__)


class BrightnessDetector:
    """Inverse luminance threshold. Fails against non-uniform backgrounds."""

    kind = DetectorKind.BRIGHTNESS

    def __init__(self, config: dict = None):
        config = config or {}
        self._weight = config.get("weight", DETECTOR_WEIGHTS[self.kind])
        self._threshold = config.get("threshold", 60)
        self._min_area = config.get("min_area", 1000)
        self._kernel = structuring_element(config.get("kernel_size", 5))

    def detect(self, frame: np.ndarray) -> DetectionSignal:
        gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY) if frame.ndim == 3 else frame
        # Dark pixels become foreground
        _, mask = cv2.threshold(gray, self._threshold, 255, cv2.THRESH_BINARY_INV)
        mask = cv2.morphologyEx(mask, cv2.MORPH_OPEN, self._kernel)

        region = largest_region(mask, self._min_area)
        if region is None:
            return DetectionSignal.absent(self.kind, self._weight)
        center, area = region
        return DetectionSignal(self.kind, True, center, self._weight, area)

    @property
    def weight(self) -> float:
        return self._weight
