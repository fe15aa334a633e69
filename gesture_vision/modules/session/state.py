"""
Per-session mutable state and the store that owns it.

A SessionState is mutated only by its own scheduled cycle and by the
registry's start/stop. The SessionStore is the single structure shared
between registry calls and scheduler callbacks.
"""

import threading
import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from gesture_vision.core.types import GestureType
from gesture_vision.modules.recognition.temporal_filter import TemporalFilter

logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    """Everything one live gesture session owns."""
    session_id: str
    camera: object                                   # CameraManager, exclusively owned
    camera_index: int = 0
    active: bool = True
    background: Optional[np.ndarray] = None          # working-resolution BGR
    lighting_quality: Optional[str] = None           # from start-up calibration
    last_gesture: GestureType = GestureType.NONE
    last_gesture_at: int = 0                         # epoch ms of last emitted gesture
    frames_processed: int = 0
    read_failures: int = 0
    refresh_requested: bool = False
    task: object = None                              # PeriodicTask
    temporal_filter: TemporalFilter = field(default_factory=TemporalFilter)
    cycle_lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def snapshot(self) -> dict:
        return {
            "session_id": self.session_id,
            "camera_index": self.camera_index,
            "active": self.active,
            "has_background": self.background is not None,
            "lighting_quality": self.lighting_quality,
            "last_gesture": self.last_gesture.value,
            "last_gesture_at": self.last_gesture_at,
            "frames_processed": self.frames_processed,
            "read_failures": self.read_failures,
        }


class SessionStore:
    """Thread-safe mapping of session id -> SessionState."""

    def __init__(self):
        self._lock = threading.Lock()
        self._sessions = {}

    def get(self, session_id: str) -> Optional[SessionState]:
        with self._lock:
            return self._sessions.get(session_id)

    def put(self, state: SessionState):
        with self._lock:
            self._sessions[state.session_id] = state

    def pop(self, session_id: str) -> Optional[SessionState]:
        with self._lock:
            return self._sessions.pop(session_id, None)

    def ids(self) -> list:
        with self._lock:
            return list(self._sessions.keys())

    def __contains__(self, session_id) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
