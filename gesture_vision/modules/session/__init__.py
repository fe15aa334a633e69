"""Session lifecycle: state, scheduling and the start/stop registry."""
from .registry import SessionRegistry
from .scheduler import CaptureScheduler, PeriodicTask
from .state import SessionState, SessionStore

__all__ = [
    "SessionRegistry",
    "CaptureScheduler",
    "PeriodicTask",
    "SessionState",
    "SessionStore",
]
