"""
Forwards recognized gestures to the card game engine.

The vision side only produces "higher"/"lower"; the game engine owns the
rules. A session is bound to one game id, each decisive gesture becomes a
guess, and the engine's outcome is republished on the session's game topic
for the transport to deliver.
"""

import time
import logging
import threading
from dataclasses import dataclass, field
from typing import Optional, Protocol

from gesture_vision.core.events import EventBus, Events
from gesture_vision.core.types import EventKind, GestureEvent

logger = logging.getLogger(__name__)


@dataclass
class GuessOutcome:
    """Engine response for one guess."""
    score: int
    game_over: bool
    message: str = ""
    state: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "gameOver": self.game_over,
            "message": self.message,
            "state": dict(self.state),
        }


class GuessEvaluator(Protocol):
    """Game engine operation consumed by the bridge."""

    def make_guess(self, game_id: str, guess: str) -> Optional[GuessOutcome]:
        ...


class GameBridge:
    """Routes a session's gesture stream into guesses for its bound game."""

    def __init__(self, bus: EventBus, evaluator: GuessEvaluator, config: dict = None):
        config = config or {}
        self._bus = bus
        self._evaluator = evaluator
        self._cooldown_ms = config.get("guess_cooldown_ms", 1500)

        self._lock = threading.Lock()
        self._games = {}           # session_id -> game_id
        self._last_guess_ms = {}   # session_id -> epoch ms of last forwarded guess
        self._bus.subscribe(Events.GESTURE, self._on_gesture)

    def attach(self, session_id: str, game_id: str):
        """Bind a session's gestures to a game."""
        with self._lock:
            self._games[session_id] = game_id
            self._last_guess_ms.pop(session_id, None)
        logger.info("Session %s bound to game %s", session_id, game_id)

    def detach(self, session_id: str) -> bool:
        with self._lock:
            self._last_guess_ms.pop(session_id, None)
            return self._games.pop(session_id, None) is not None

    def game_for(self, session_id: str) -> Optional[str]:
        with self._lock:
            return self._games.get(session_id)

    def close(self):
        self._bus.unsubscribe(Events.GESTURE, self._on_gesture)

    def _on_gesture(self, event: GestureEvent):
        if event.gesture is EventKind.STOPPED:
            self.detach(event.session_id)
            return
        if event.gesture not in (EventKind.HIGHER, EventKind.LOWER):
            return

        with self._lock:
            game_id = self._games.get(event.session_id)
            if game_id is None:
                return
            last = self._last_guess_ms.get(event.session_id)
            if last is not None and event.timestamp - last < self._cooldown_ms:
                return
            self._last_guess_ms[event.session_id] = event.timestamp

        guess = event.gesture.value
        try:
            outcome = self._evaluator.make_guess(game_id, guess)
        except Exception as exc:
            logger.exception("Game %s failed to evaluate guess '%s'", game_id, guess)
            self._bus.emit(Events.game_topic(event.session_id), outcome={
                "gesture": EventKind.ERROR.value,
                "message": "Error processing gesture: %s" % exc,
                "gameId": game_id,
                "guess": guess,
                "timestamp": int(time.time() * 1000),
            })
            return
        if outcome is None:
            logger.warning("Game %s rejected guess '%s' (unknown or finished)",
                           game_id, event.gesture.value)
            return

        payload = outcome.to_dict()
        payload.update({
            "gameId": game_id,
            "guess": event.gesture.value,
            "timestamp": int(time.time() * 1000),
        })
        self._bus.emit(Events.game_topic(event.session_id), outcome=payload)
        if outcome.game_over:
            logger.info("Game %s over (score %d)", game_id, outcome.score)
            self.detach(event.session_id)
