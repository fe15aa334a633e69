"""
Background refresh strategies for the motion detector.

The background model adapts to slow lighting drift by occasionally being
replaced with the current frame. How often is a strategy choice:

    random   - replace with a fixed per-frame probability
    interval - replace every N processed frames
    never    - only explicit recalibration replaces it
"""

import random
import logging

logger = logging.getLogger(__name__)


class RefreshPolicy:
    """Decides, once per processed frame, whether to replace the background."""

    name = "base"

    def should_refresh(self, frame_index: int) -> bool:
        raise NotImplementedError


class RandomRefresh(RefreshPolicy):
    name = "random"

    def __init__(self, probability: float = 0.01, rng: random.Random = None):
        if not 0.0 <= probability <= 1.0:
            raise ValueError("refresh probability must be within [0, 1], got %r" % probability)
        self._probability = probability
        self._rng = rng or random.Random()

    def should_refresh(self, frame_index: int) -> bool:
        return self._rng.random() < self._probability


class IntervalRefresh(RefreshPolicy):
    name = "interval"

    def __init__(self, every_n_frames: int = 100):
        if every_n_frames < 1:
            raise ValueError("refresh interval must be >= 1 frame, got %r" % every_n_frames)
        self._every = every_n_frames

    def should_refresh(self, frame_index: int) -> bool:
        return frame_index > 0 and frame_index % self._every == 0


class NeverRefresh(RefreshPolicy):
    name = "never"

    def should_refresh(self, frame_index: int) -> bool:
        return False


def build_refresh_policy(config: dict = None, rng: random.Random = None) -> RefreshPolicy:
    """Create the strategy named by ``config['strategy']``."""
    config = config or {}
    strategy = config.get("strategy", "random")
    if strategy == "random":
        policy = RandomRefresh(config.get("probability", 0.01), rng=rng)
    elif strategy == "interval":
        policy = IntervalRefresh(config.get("interval_frames", 100))
    elif strategy == "never":
        policy = NeverRefresh()
    else:
        logger.warning("Unknown background refresh strategy '%s', using random", strategy)
        policy = RandomRefresh(config.get("probability", 0.01), rng=rng)
    logger.debug("Background refresh strategy: %s", policy.name)
    return policy
