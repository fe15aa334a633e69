"""
Frame preprocessing shared by all detectors.
Downscales captured frames to a fixed working resolution so per-frame cost
does not depend on the native capture resolution.
"""

import logging
import cv2
import numpy as np

logger = logging.getLogger(__name__)


class FrameProcessor:
    """Working-resolution conversion and frame sanity checks."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._working_size = (
            int(config.get("working_width", 320)),
            int(config.get("working_height", 240)),
        )

    @staticmethod
    def is_empty(frame) -> bool:
        """True for frames a camera hiccup can deliver: None or zero-sized."""
        return frame is None or not isinstance(frame, np.ndarray) or frame.size == 0

    def to_working(self, frame: np.ndarray) -> np.ndarray:
        """Resize a BGR frame to the working resolution.

        Grayscale input is promoted to 3 channels so every detector can rely
        on BGR layout.
        """
        if frame.ndim == 2:
            frame = cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
        h, w = frame.shape[:2]
        if (w, h) == self._working_size:
            return frame
        # INTER_AREA is the right filter for shrinking
        interpolation = cv2.INTER_AREA if w > self._working_size[0] else cv2.INTER_LINEAR
        return cv2.resize(frame, self._working_size, interpolation=interpolation)

    @property
    def working_size(self) -> tuple:
        """(width, height) of frames handed to the detectors."""
        return self._working_size
