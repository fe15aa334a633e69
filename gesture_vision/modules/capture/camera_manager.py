"""
Exclusive camera handle owned by a single session.

Wraps cv2.VideoCapture with resolution/frame-rate hints and an idempotent,
thread-safe release so a handle is closed exactly once no matter how many
teardown paths reach it.
"""

import threading
import logging
import cv2

from gesture_vision.core.types import CameraError

logger = logging.getLogger(__name__)


class CameraManager:
    """One opened capture device with a once-only release."""

    def __init__(self, config: dict):
        self._device_id = config.get("device_id", 0)
        self._width = config.get("width", 640)
        self._height = config.get("height", 480)
        self._fps = config.get("fps", 30)
        self._backend = config.get("backend", "auto")
        self._buffer_size = config.get("buffer_size", 1)

        self._cap = None
        self._lock = threading.Lock()
        self._opened = False
        self._released = False
        self._frame_id = 0

    def open(self) -> bool:
        """Open the device and apply capture hints.

        Returns:
            True if the device is readable. On failure nothing stays open.
        """
        if self._released:
            raise CameraError("Camera %d handle was released; create a new one" % self._device_id)
        if self._opened:
            return True

        backend_map = {
            "v4l2": cv2.CAP_V4L2,
            "gstreamer": cv2.CAP_GSTREAMER,
            "auto": cv2.CAP_ANY,
        }
        backend = backend_map.get(self._backend, cv2.CAP_ANY)

        cap = cv2.VideoCapture(self._device_id, backend)
        if not cap.isOpened():
            logger.error("Failed to open camera %d with backend %s", self._device_id, self._backend)
            cap.release()
            return False

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self._width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self._height)
        cap.set(cv2.CAP_PROP_FPS, self._fps)
        cap.set(cv2.CAP_PROP_BUFFERSIZE, self._buffer_size)

        actual_w = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_h = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        actual_fps = cap.get(cv2.CAP_PROP_FPS)
        logger.info(
            "Camera %d opened: %dx%d @ %.0f FPS (requested %dx%d @ %d)",
            self._device_id, actual_w, actual_h, actual_fps,
            self._width, self._height, self._fps,
        )

        with self._lock:
            self._cap = cap
            self._opened = True
        return True

    def read(self):
        """Blocking read of the next frame.

        Returns:
            tuple: (ok, frame). ``ok`` is False when the device could not
            deliver a frame or the handle is closed.
        """
        with self._lock:
            cap = self._cap
        if cap is None:
            return False, None
        ok, frame = cap.read()
        if ok:
            self._frame_id += 1
        return bool(ok), frame

    def release(self) -> bool:
        """Release the device. Only the first call has an effect."""
        with self._lock:
            if self._released or self._cap is None:
                self._released = True
                return False
            cap = self._cap
            self._cap = None
            self._released = True
        cap.release()
        logger.info("Camera %d released after %d frames", self._device_id, self._frame_id)
        return True

    @property
    def device_id(self) -> int:
        return self._device_id

    @property
    def resolution(self) -> tuple:
        return (self._width, self._height)

    @property
    def frame_count(self) -> int:
        return self._frame_id

    @property
    def is_open(self) -> bool:
        with self._lock:
            cap = self._cap
        return cap is not None and cap.isOpened()

    @property
    def is_released(self) -> bool:
        return self._released

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *args):
        self.release()
