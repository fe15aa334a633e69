"""
Per-frame processing pipeline.

    frame -> FrameProcessor (working resolution)
          -> MotionDetector / ColorDetector / BrightnessDetector
          -> background refresh
          -> FusionEngine -> FusedResult

The pipeline itself holds no session state: the background model and the
frame counter live on the SessionState passed in, so one pipeline instance
serves every session of a registry.
"""

import logging

from gesture_vision.core.types import FusedResult
from gesture_vision.modules.capture.frame_processor import FrameProcessor
from gesture_vision.modules.detection.background import RefreshPolicy, build_refresh_policy
from gesture_vision.modules.detection.brightness_detector import BrightnessDetector
from gesture_vision.modules.detection.color_detector import ColorDetector
from gesture_vision.modules.detection.motion_detector import MotionDetector
from gesture_vision.modules.recognition.fusion import FusionEngine
from gesture_vision.modules.utils.logger import log_timing

logger = logging.getLogger(__name__)


class GesturePipeline:
    """Runs all detectors on one frame and fuses their outputs."""

    def __init__(self, config: dict = None, refresh_policy: RefreshPolicy = None):
        """
        Args:
            config: mapping with optional ``processing``, ``detection`` and
                ``fusion`` sections (see config/config.yaml)
            refresh_policy: background refresh strategy; built from
                ``detection.background_refresh`` when omitted
        """
        config = config or {}
        detection = config.get("detection", {})

        self._frame_processor = FrameProcessor(config.get("processing", {}))
        self._motion = MotionDetector(detection.get("motion", {}))
        self._color = ColorDetector(detection.get("color", {}))
        self._brightness = BrightnessDetector(detection.get("brightness", {}))
        self._fusion = FusionEngine(config.get("fusion", {}))
        self._refresh_policy = refresh_policy or build_refresh_policy(
            detection.get("background_refresh", {})
        )

    @log_timing(slow_ms=150)
    def process(self, frame, session) -> FusedResult:
        """Run one processing cycle for ``session``.

        Mutates only ``session.background``, ``session.frames_processed`` and
        ``session.refresh_requested``.
        """
        working = self._frame_processor.to_working(frame)
        session.frames_processed += 1

        if session.background is None:
            # First usable frame seeds the model when calibration got nothing
            session.background = working
            logger.debug("Session %s: background seeded from live frame", session.session_id)

        signals = [
            self._motion.detect(working, session.background),
            self._color.detect(working),
            self._brightness.detect(working),
        ]

        if session.refresh_requested or self._refresh_policy.should_refresh(session.frames_processed):
            session.background = working
            session.refresh_requested = False
            logger.debug("Session %s: background refreshed at frame %d",
                         session.session_id, session.frames_processed)

        return self._fusion.fuse(signals, self._frame_processor.working_size)

    @property
    def frame_processor(self) -> FrameProcessor:
        return self._frame_processor

    @property
    def fusion(self) -> FusionEngine:
        return self._fusion

    @property
    def refresh_policy(self) -> RefreshPolicy:
        return self._refresh_policy
