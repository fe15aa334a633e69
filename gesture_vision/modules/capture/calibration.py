"""
Initial background capture for a freshly opened camera.

The captured frame becomes the session's background model for motion
differencing. A lighting assessment is logged alongside so poor setups are
visible in the service log.
"""

import logging
import cv2
import numpy as np

logger = logging.getLogger(__name__)


class BackgroundCalibrator:
    """Captures the reference frame a session starts with."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._num_frames = max(1, int(config.get("background_frames", 1)))
        self._max_attempts = max(self._num_frames, int(config.get("max_attempts", 3)))

    def capture(self, camera, frame_processor):
        """Read frames from ``camera`` and build a working-resolution background.

        Args:
            camera: opened CameraManager
            frame_processor: FrameProcessor used for the working resolution

        Returns:
            tuple: (background or None, report dict)
        """
        frames = []
        attempts = 0
        while len(frames) < self._num_frames and attempts < self._max_attempts:
            attempts += 1
            ok, frame = camera.read()
            if not ok or frame_processor.is_empty(frame):
                continue
            frames.append(frame_processor.to_working(frame))

        if not frames:
            logger.warning("Background capture failed: no frames after %d reads", attempts)
            return None, {"success": False, "frames": 0}

        if len(frames) == 1:
            background = frames[0]
        else:
            # Median suppresses anything that moved during calibration
            background = np.median(np.stack(frames), axis=0).astype(np.uint8)

        gray = cv2.cvtColor(background, cv2.COLOR_BGR2GRAY)
        brightness = float(np.mean(gray))
        contrast = float(np.std(gray))
        report = {
            "success": True,
            "frames": len(frames),
            "avg_brightness": round(brightness, 1),
            "avg_contrast": round(contrast, 1),
            "lighting_quality": self.assess_lighting(brightness, contrast),
        }
        logger.info(
            "Background captured: frames=%d, brightness=%.1f, contrast=%.1f, quality=%s",
            report["frames"], report["avg_brightness"],
            report["avg_contrast"], report["lighting_quality"],
        )
        return background, report

    @staticmethod
    def assess_lighting(brightness: float, contrast: float) -> str:
        """Assess overall lighting quality."""
        if brightness < 30:
            return "very_low"
        elif brightness < 60:
            return "low"
        elif brightness > 220:
            return "overexposed"
        elif contrast < 20:
            return "flat"
        elif 80 <= brightness <= 180 and contrast >= 40:
            return "good"
        else:
            return "acceptable"
