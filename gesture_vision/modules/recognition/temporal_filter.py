"""
Optional consecutive-zone debouncing.

With ``required_consecutive`` = 1 (the default) every qualifying frame
passes through unchanged. Larger values hold back a decisive gesture until
the same zone has been seen on that many consecutive frames.
"""

import logging

from gesture_vision.core.types import FusedResult, GestureType

logger = logging.getLogger(__name__)


class TemporalFilter:
    """Per-session streak counter over fused gestures."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._required = max(1, int(config.get("required_consecutive", 1)))
        self._streak_gesture = None
        self._streak = 0

    def update(self, result: FusedResult) -> FusedResult:
        """Feed one frame's result.

        Returns:
            ``result`` itself once its gesture has held for the required
            number of frames; otherwise a NONE result with the same
            confidence.
        """
        if result.gesture == self._streak_gesture:
            self._streak += 1
        else:
            self._streak_gesture = result.gesture
            self._streak = 1

        if self._required == 1 or not result.gesture.is_decisive:
            return result
        if self._streak >= self._required:
            return result

        logger.debug("Holding %s (%d/%d)", result.gesture.value, self._streak, self._required)
        return FusedResult(confidence=result.confidence, centroid=None,
                           gesture=GestureType.NONE, signals=result.signals)

    def reset(self):
        self._streak_gesture = None
        self._streak = 0

    @property
    def required_consecutive(self) -> int:
        return self._required

    @property
    def streak(self) -> int:
        return self._streak
