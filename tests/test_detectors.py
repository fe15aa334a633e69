"""
Tests for Detector Primitives
==============================

Synthetic working-resolution frames (320x240 BGR) with a single rectangular
"hand" at a known position.
"""

import numpy as np
import pytest

from gesture_vision.core.types import DetectorKind
from gesture_vision.modules.detection.brightness_detector import BrightnessDetector
from gesture_vision.modules.detection.color_detector import ColorDetector
from gesture_vision.modules.detection.motion_detector import MotionDetector
from gesture_vision.modules.detection.regions import largest_region

SKIN_BGR = (120, 160, 220)
DARK_SKIN_BGR = (20, 35, 80)


def blank(value=200):
    return np.full((240, 320, 3), value, dtype=np.uint8)


def with_rect(frame, x, y, w, h, color):
    frame = frame.copy()
    frame[y:y + h, x:x + w] = color
    return frame


class TestLargestRegion:

    def test_empty_mask(self):
        mask = np.zeros((240, 320), dtype=np.uint8)
        assert largest_region(mask, 100) is None

    def test_picks_largest(self):
        mask = np.zeros((240, 320), dtype=np.uint8)
        mask[10:20, 10:20] = 255
        mask[100:160, 200:260] = 255
        center, area = largest_region(mask, 100)
        assert center.x == pytest.approx(230)
        assert center.y == pytest.approx(130)
        assert area > 3000

    def test_area_floor_is_exclusive(self):
        mask = np.zeros((240, 320), dtype=np.uint8)
        mask[10:20, 10:20] = 255      # contour area 81
        assert largest_region(mask, 81) is None
        assert largest_region(mask, 80) is not None


class TestMotionDetector:

    @pytest.fixture
    def detector(self):
        return MotionDetector()

    def test_no_background(self, detector):
        result = detector.detect(blank(0), None)
        assert result.kind == DetectorKind.MOTION
        assert not result.present
        assert result.center is None
        assert result.weight == pytest.approx(0.4)

    def test_static_scene(self, detector):
        frame = with_rect(blank(0), 140, 20, 60, 60, (255, 255, 255))
        assert not detector.detect(frame, frame.copy()).present

    def test_moving_block(self, detector):
        background = blank(0)
        frame = with_rect(background, 140, 20, 60, 60, (255, 255, 255))
        result = detector.detect(frame, background)
        assert result.present
        assert result.center.x == pytest.approx(170, abs=3)
        assert result.center.y == pytest.approx(50, abs=3)
        assert result.area > 500

    def test_small_change_below_floor(self, detector):
        background = blank(0)
        frame = with_rect(background, 100, 100, 8, 8, (255, 255, 255))
        assert not detector.detect(frame, background).present

    def test_mismatched_background_size(self, detector):
        frame = with_rect(blank(0), 140, 20, 60, 60, (255, 255, 255))
        background = np.zeros((120, 160, 3), dtype=np.uint8)
        assert not detector.detect(frame, background).present


class TestColorDetector:

    @pytest.fixture
    def detector(self):
        return ColorDetector()

    def test_gray_scene_has_no_skin(self, detector):
        assert not detector.detect(blank(200)).present

    def test_skin_block(self, detector):
        frame = with_rect(blank(200), 140, 160, 60, 60, SKIN_BGR)
        result = detector.detect(frame)
        assert result.present
        assert result.kind == DetectorKind.COLOR
        assert result.center.x == pytest.approx(170, abs=2)
        assert result.center.y == pytest.approx(190, abs=2)
        assert result.weight == pytest.approx(0.3)

    def test_masks_are_or_combined(self):
        """A color accepted by only one color space still counts."""
        never_hsv = ColorDetector({"hsv_lower": [179, 255, 255], "hsv_upper": [179, 255, 255]})
        frame = with_rect(blank(200), 140, 160, 60, 60, SKIN_BGR)
        assert never_hsv.detect(frame).present

    def test_small_patch_below_floor(self, detector):
        frame = with_rect(blank(200), 10, 10, 20, 20, SKIN_BGR)
        assert not detector.detect(frame).present


class TestBrightnessDetector:

    @pytest.fixture
    def detector(self):
        return BrightnessDetector()

    def test_light_scene(self, detector):
        assert not detector.detect(blank(230)).present

    def test_dark_hand_on_light_background(self, detector):
        frame = with_rect(blank(230), 20, 90, 60, 60, (20, 20, 20))
        result = detector.detect(frame)
        assert result.present
        assert result.kind == DetectorKind.BRIGHTNESS
        assert result.center.x == pytest.approx(50, abs=2)
        assert result.center.y == pytest.approx(120, abs=2)

    def test_custom_threshold(self):
        frame = with_rect(blank(230), 20, 90, 60, 60, (100, 100, 100))
        assert not BrightnessDetector().detect(frame).present
        assert BrightnessDetector({"threshold": 120}).detect(frame).present


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
