"""Visual heuristics fused by the recognition stage."""
from .motion_detector import MotionDetector
from .color_detector import ColorDetector
from .brightness_detector import BrightnessDetector
from .background import IntervalRefresh, NeverRefresh, RandomRefresh, build_refresh_policy

__all__ = [
    "MotionDetector",
    "ColorDetector",
    "BrightnessDetector",
    "IntervalRefresh",
    "NeverRefresh",
    "RandomRefresh",
    "build_refresh_policy",
]
