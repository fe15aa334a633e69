"""
Confidence-weighted fusion of detector signals and zone classification.

No single cue is robust alone, so every present detector contributes its
fixed weight to the frame confidence and its center to a weighted centroid.
The centroid's vertical position picks one of three horizontal bands.
"""

import logging
from typing import Iterable, Optional, Tuple

from gesture_vision.core.types import DetectionSignal, FusedResult, GestureType, Point2D

logger = logging.getLogger(__name__)


def classify_zone(y: float, height: float) -> GestureType:
    """Map a vertical position to a gesture band.

    The frame is split into three equal bands. A position exactly on a band
    boundary belongs to the upper band (y = h/3 is HIGHER, y = 2h/3 is
    NEUTRAL).
    """
    if height <= 0:
        raise ValueError("frame height must be positive, got %r" % height)
    # Compare y*3 against multiples of h to keep boundaries exact
    if y * 3 <= height:
        return GestureType.HIGHER
    if y * 3 <= 2 * height:
        return GestureType.NEUTRAL
    return GestureType.LOWER


def weighted_centroid(signals: Iterable[DetectionSignal]) -> Optional[Point2D]:
    """Weighted mean of present signal centers, or None when nothing is present."""
    total = 0.0
    sx = 0.0
    sy = 0.0
    for signal in signals:
        if not signal.present or signal.center is None:
            continue
        total += signal.weight
        sx += signal.center.x * signal.weight
        sy += signal.center.y * signal.weight
    if total <= 0:
        return None
    return Point2D(sx / total, sy / total)


class FusionEngine:
    """Stateless per-frame fusion: (signals, frame size) -> FusedResult."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._confidence_gate = config.get("confidence_gate", 0.5)

    def fuse(self, signals, frame_size: Tuple[int, int]) -> FusedResult:
        """Fuse detector outputs for one frame.

        Args:
            signals: iterable of DetectionSignal (absent ones are ignored)
            frame_size: (width, height) of the working frame

        Returns:
            FusedResult with NONE gesture and no centroid when the summed
            weight of present signals does not exceed the gate.
        """
        signals = list(signals)
        present = [s for s in signals if s.present and s.center is not None]
        confidence = sum(s.weight for s in present)

        if confidence <= self._confidence_gate:
            return FusedResult(confidence=confidence, centroid=None,
                               gesture=GestureType.NONE, signals=signals)

        centroid = weighted_centroid(present)
        gesture = classify_zone(centroid.y, frame_size[1])
        logger.debug("Fused %d signals: conf=%.2f centroid=(%.1f, %.1f) -> %s",
                     len(present), confidence, centroid.x, centroid.y, gesture.value)
        return FusedResult(confidence=confidence, centroid=centroid,
                           gesture=gesture, signals=signals)

    @property
    def confidence_gate(self) -> float:
        return self._confidence_gate
