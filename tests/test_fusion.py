"""
Tests for Fusion & Zone Classification
=======================================
"""

import pytest

from gesture_vision.core.types import DetectionSignal, DetectorKind, GestureType, Point2D
from gesture_vision.modules.recognition.fusion import (
    FusionEngine, classify_zone, weighted_centroid,
)

FRAME = (320, 240)


def signal(kind, x, y, weight):
    return DetectionSignal(kind, True, Point2D(x, y), weight, area=1500.0)


def motion(x, y):
    return signal(DetectorKind.MOTION, x, y, 0.4)


def color(x, y):
    return signal(DetectorKind.COLOR, x, y, 0.3)


def brightness(x, y):
    return signal(DetectorKind.BRIGHTNESS, x, y, 0.3)


class TestConfidenceGate:
    """Results at or below the gate carry no gesture and no centroid."""

    @pytest.fixture
    def engine(self):
        return FusionEngine()

    def test_no_signals(self, engine):
        result = engine.fuse([], FRAME)
        assert result.gesture == GestureType.NONE
        assert result.centroid is None
        assert result.confidence == 0.0

    def test_absent_signals_are_ignored(self, engine):
        signals = [
            DetectionSignal.absent(DetectorKind.MOTION, 0.4),
            DetectionSignal.absent(DetectorKind.COLOR, 0.3),
            brightness(100, 20),
        ]
        result = engine.fuse(signals, FRAME)
        assert result.confidence == pytest.approx(0.3)
        assert result.gesture == GestureType.NONE
        assert result.centroid is None

    def test_motion_alone_is_below_gate(self, engine):
        """0.4 never clears a 0.5 gate on its own."""
        result = engine.fuse([motion(160, 10)], FRAME)
        assert result.confidence == pytest.approx(0.4)
        assert result.gesture == GestureType.NONE
        assert result.centroid is None

    def test_two_weak_detectors_clear_gate(self, engine):
        result = engine.fuse([color(160, 10), brightness(160, 30)], FRAME)
        assert result.confidence == pytest.approx(0.6)
        assert result.gesture == GestureType.HIGHER

    def test_custom_gate(self):
        engine = FusionEngine({"confidence_gate": 0.3})
        result = engine.fuse([motion(160, 230)], FRAME)
        assert result.gesture == GestureType.LOWER

    def test_signals_are_kept_on_result(self, engine):
        signals = [motion(10, 10), color(10, 10)]
        assert engine.fuse(signals, FRAME).signals == signals


class TestWeightedCentroid:
    """Centroid is the standard weighted mean of present centers."""

    def test_motion_and_brightness(self):
        result = FusionEngine().fuse([motion(10, 10), brightness(50, 50)], FRAME)
        expected = (10 * 0.4 + 50 * 0.3) / 0.7
        assert result.confidence == pytest.approx(0.7)
        assert result.centroid.x == pytest.approx(expected)
        assert result.centroid.y == pytest.approx(expected)
        assert result.centroid.x == pytest.approx(27.14, abs=0.01)

    def test_all_three(self):
        result = FusionEngine().fuse(
            [motion(100, 100), color(200, 40), brightness(40, 220)], FRAME)
        assert result.confidence == pytest.approx(1.0)
        assert result.centroid.x == pytest.approx(100 * 0.4 + 200 * 0.3 + 40 * 0.3)
        assert result.centroid.y == pytest.approx(100 * 0.4 + 40 * 0.3 + 220 * 0.3)

    def test_helper_returns_none_without_signals(self):
        assert weighted_centroid([]) is None
        assert weighted_centroid([DetectionSignal.absent(DetectorKind.COLOR, 0.3)]) is None


class TestZoneClassification:
    """Three equal bands; boundaries belong to the upper band."""

    @pytest.mark.parametrize("y, expected", [
        (0, GestureType.HIGHER),
        (10, GestureType.HIGHER),
        (80, GestureType.HIGHER),
        (80.01, GestureType.NEUTRAL),
        (120, GestureType.NEUTRAL),
        (160, GestureType.NEUTRAL),
        (160.01, GestureType.LOWER),
        (230, GestureType.LOWER),
        (240, GestureType.LOWER),
    ])
    def test_bands_for_height_240(self, y, expected):
        assert classify_zone(y, 240) == expected

    def test_depends_only_on_y(self):
        engine = FusionEngine()
        left = engine.fuse([motion(0, 230), color(0, 230)], FRAME)
        right = engine.fuse([motion(319, 230), color(319, 230)], FRAME)
        assert left.gesture == right.gesture == GestureType.LOWER

    def test_invalid_height(self):
        with pytest.raises(ValueError):
            classify_zone(10, 0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
