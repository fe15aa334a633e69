"""
Tests for Background Refresh Policies and Temporal Filtering
=============================================================
"""

import random

import pytest

from gesture_vision.core.types import FusedResult, GestureType, Point2D
from gesture_vision.modules.detection.background import (
    IntervalRefresh, NeverRefresh, RandomRefresh, build_refresh_policy,
)
from gesture_vision.modules.recognition.temporal_filter import TemporalFilter


def result(gesture, confidence=0.7):
    centroid = None if gesture == GestureType.NONE else Point2D(10, 10)
    return FusedResult(confidence=confidence, centroid=centroid, gesture=gesture)


class TestRefreshPolicies:

    def test_never(self):
        policy = NeverRefresh()
        assert not any(policy.should_refresh(i) for i in range(1000))

    def test_interval(self):
        policy = IntervalRefresh(every_n_frames=3)
        assert [i for i in range(1, 10) if policy.should_refresh(i)] == [3, 6, 9]

    def test_interval_validation(self):
        with pytest.raises(ValueError):
            IntervalRefresh(0)

    def test_random_is_seedable(self):
        first = RandomRefresh(0.5, rng=random.Random(7))
        second = RandomRefresh(0.5, rng=random.Random(7))
        assert ([first.should_refresh(i) for i in range(50)]
                == [second.should_refresh(i) for i in range(50)])

    def test_random_extremes(self):
        assert all(RandomRefresh(1.0).should_refresh(i) for i in range(20))
        assert not any(RandomRefresh(0.0).should_refresh(i) for i in range(20))

    def test_random_rate_is_roughly_one_percent(self):
        policy = RandomRefresh(0.01, rng=random.Random(1234))
        hits = sum(policy.should_refresh(i) for i in range(20000))
        assert 100 < hits < 300

    def test_random_validation(self):
        with pytest.raises(ValueError):
            RandomRefresh(1.5)

    @pytest.mark.parametrize("config, expected", [
        ({}, RandomRefresh),
        ({"strategy": "random"}, RandomRefresh),
        ({"strategy": "interval", "interval_frames": 5}, IntervalRefresh),
        ({"strategy": "never"}, NeverRefresh),
        ({"strategy": "bogus"}, RandomRefresh),
    ])
    def test_builder(self, config, expected):
        assert isinstance(build_refresh_policy(config), expected)


class TestTemporalFilter:

    def test_default_is_passthrough(self):
        filt = TemporalFilter()
        for gesture in (GestureType.HIGHER, GestureType.LOWER, GestureType.HIGHER):
            res = result(gesture)
            assert filt.update(res) is res

    def test_requires_consecutive_frames(self):
        filt = TemporalFilter({"required_consecutive": 2})

        assert filt.update(result(GestureType.HIGHER)).gesture == GestureType.NONE
        assert filt.update(result(GestureType.HIGHER)).gesture == GestureType.HIGHER
        assert filt.update(result(GestureType.HIGHER)).gesture == GestureType.HIGHER

    def test_zone_change_restarts_streak(self):
        filt = TemporalFilter({"required_consecutive": 2})

        filt.update(result(GestureType.HIGHER))
        assert filt.update(result(GestureType.LOWER)).gesture == GestureType.NONE
        assert filt.update(result(GestureType.LOWER)).gesture == GestureType.LOWER

    def test_held_result_keeps_confidence(self):
        filt = TemporalFilter({"required_consecutive": 3})
        held = filt.update(result(GestureType.LOWER, confidence=0.9))
        assert held.confidence == pytest.approx(0.9)
        assert held.centroid is None

    def test_non_decisive_results_pass(self):
        filt = TemporalFilter({"required_consecutive": 3})
        neutral = result(GestureType.NEUTRAL)
        assert filt.update(neutral) is neutral

    def test_reset(self):
        filt = TemporalFilter({"required_consecutive": 2})
        filt.update(result(GestureType.HIGHER))
        filt.reset()
        assert filt.streak == 0
        assert filt.update(result(GestureType.HIGHER)).gesture == GestureType.NONE


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
