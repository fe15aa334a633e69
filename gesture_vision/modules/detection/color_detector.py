"""
Skin-tone detector.

Builds one skin mask in HSV and one in YCrCb and ORs them, so a hand that
only one color space recognizes under the current lighting still counts.
"""

import logging
import cv2
import numpy as np

from gesture_vision.core.types import DETECTOR_WEIGHTS, DetectionSignal, DetectorKind
from gesture_vision.modules.detection.regions import largest_region, structuring_element

logger = logging.getLogger(__name__)


def _bound(values) -> np.ndarray:
    return np.array(values, dtype=np.uint8)


class ColorDetector:
    """Dual color-space skin detector. Fails under strongly colored lighting."""

    kind = DetectorKind.COLOR

    def __init__(self, config: dict = None):
        config = config or {}
        self._weight = config.get("weight", DETECTOR_WEIGHTS[self.kind])
        self._hsv_lower = _bound(config.get("hsv_lower", [0, 48, 80]))
        self._hsv_upper = _bound(config.get("hsv_upper", [20, 255, 255]))
        self._ycrcb_lower = _bound(config.get("ycrcb_lower", [0, 133, 77]))
        self._ycrcb_upper = _bound(config.get("ycrcb_upper", [255, 173, 127]))
        self._min_area = config.get("min_area", 1000)
        self._kernel = structuring_element(config.get("kernel_size", 5))

    def skin_mask(self, frame: np.ndarray) -> np.ndarray:
        """Binary mask of pixels inside either skin range."""
        hsv = cv2.cvtColor(frame, cv2.COLOR_BGR2HSV)
        mask_hsv = cv2.inRange(hsv, self._hsv_lower, self._hsv_upper)

        ycrcb = cv2.cvtColor(frame, cv2.COLOR_BGR2YCrCb)
        mask_ycrcb = cv2.inRange(ycrcb, self._ycrcb_lower, self._ycrcb_upper)

        mask = cv2.bitwise_or(mask_hsv, mask_ycrcb)
        return cv2.morphologyEx(mask, cv2.MORPH_OPEN, self._kernel)

    def detect(self, frame: np.ndarray) -> DetectionSignal:
        region = largest_region(self.skin_mask(frame), self._min_area)
        if region is None:
            return DetectionSignal.absent(self.kind, self._weight)
        center, area = region
        return DetectionSignal(self.kind, True, center, self._weight, area)

    @property
    def weight(self) -> float:
        return self._weight
