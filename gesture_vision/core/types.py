"""
Shared domain types for the live gesture session service.

Centralizes enums, data classes, and type definitions used across modules
to eliminate circular imports and ensure type consistency.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, NamedTuple, Optional


# =============================================================================
# Gesture Types
# =============================================================================

class GestureType(Enum):
    """Coarse gesture classes produced by zone classification."""
    HIGHER = "higher"
    LOWER = "lower"
    NEUTRAL = "neutral"
    NONE = "none"

    @property
    def is_decisive(self) -> bool:
        return self in (GestureType.HIGHER, GestureType.LOWER)


class EventKind(Enum):
    """Values of the outbound ``gesture`` field."""
    CALIBRATING = "calibrating"
    ERROR = "error"
    STOPPED = "stopped"
    HIGHER = "higher"
    LOWER = "lower"

    @property
    def is_status(self) -> bool:
        return self in (EventKind.CALIBRATING, EventKind.ERROR, EventKind.STOPPED)


class DetectorKind(Enum):
    """Independent visual heuristics fused per frame."""
    MOTION = "motion"
    COLOR = "color"
    BRIGHTNESS = "brightness"


DETECTOR_WEIGHTS: Dict[DetectorKind, float] = {
    DetectorKind.MOTION: 0.4,
    DetectorKind.COLOR: 0.3,
    DetectorKind.BRIGHTNESS: 0.3,
}


GESTURE_MESSAGES: Dict[GestureType, str] = {
    GestureType.HIGHER: "Hand in upper zone - HIGHER",
    GestureType.LOWER: "Hand in lower zone - LOWER",
    GestureType.NEUTRAL: "Hand in middle zone",
    GestureType.NONE: "No hand detected",
}


# =============================================================================
# Data Containers
# =============================================================================

class Point2D(NamedTuple):
    """A position in working-frame pixel coordinates."""
    x: float
    y: float


@dataclass(frozen=True)
class DetectionSignal:
    """Output of one detector for one frame."""
    kind: DetectorKind
    present: bool
    center: Optional[Point2D] = None
    weight: float = 0.0
    area: float = 0.0

    @classmethod
    def absent(cls, kind: DetectorKind, weight: float) -> "DetectionSignal":
        return cls(kind=kind, present=False, center=None, weight=weight)

    def __repr__(self):
        if not self.present:
            return f"DetectionSignal({self.kind.value}, absent)"
        return (f"DetectionSignal({self.kind.value}, center=({self.center.x:.1f}, "
                f"{self.center.y:.1f}), area={self.area:.0f})")


@dataclass(frozen=True)
class FusedResult:
    """Fusion output for one frame.

    ``gesture`` is HIGHER/LOWER/NEUTRAL only when ``confidence`` cleared the
    fusion gate; otherwise it is NONE and ``centroid`` is None.
    """
    confidence: float
    centroid: Optional[Point2D]
    gesture: GestureType
    signals: List[DetectionSignal] = field(default_factory=list)


@dataclass(frozen=True)
class GestureEvent:
    """The only externally visible artifact of a session."""
    session_id: str
    gesture: EventKind
    message: str
    timestamp: int = field(default_factory=lambda: int(time.time() * 1000))

    def to_message(self) -> dict:
        """Outbound payload as delivered to the session's subscribers."""
        return {
            "gesture": self.gesture.value,
            "message": self.message,
            "timestamp": self.timestamp,
        }

    def to_dict(self) -> dict:
        payload = self.to_message()
        payload["sessionId"] = self.session_id
        return payload


# =============================================================================
# Errors
# =============================================================================

class GestureVisionError(Exception):
    """Base error for caller-facing misuse of the service."""


class CameraError(GestureVisionError):
    """Raised when a capture handle is used in an invalid state."""
