"""
Session registry: the public start/stop surface of the service.

    start(session_id, camera_index)
        restart-aware: an active session is stopped first and the caller
        sleeps a settle delay so the camera is released before it is
        reopened. Open failure publishes an ``error`` status and leaves no
        state behind. Success captures the background, publishes
        ``calibrating`` and schedules the capture cycle.

    stop(session_id)
        idempotent: cancels the cycle, releases the camera exactly once,
        drops all per-session state and publishes ``stopped``.

Each scheduled cycle reads one frame, runs the pipeline, and hands the
result to the dispatcher. Nothing raised inside a cycle escapes it.

Locking: start/stop/teardown of one session id are serialized by a
per-id guard, so slow camera I/O for one session never blocks another.
The registry lock only protects the session store and is never held
across camera I/O, the settle delay or a wait on a running cycle.
"""

import time
import logging
import threading
from contextlib import contextmanager
from typing import Callable, Optional

from gesture_vision.core.events import EventBus
from gesture_vision.core.pipeline import GesturePipeline
from gesture_vision.core.types import EventKind, GestureVisionError
from gesture_vision.modules.capture.calibration import BackgroundCalibrator
from gesture_vision.modules.capture.camera_manager import CameraManager
from gesture_vision.modules.control.dispatcher import EventDispatcher
from gesture_vision.modules.recognition.temporal_filter import TemporalFilter
from gesture_vision.modules.session.scheduler import CaptureScheduler
from gesture_vision.modules.session.state import SessionState, SessionStore
from gesture_vision.modules.utils.performance_monitor import PerformanceMonitor

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Owns every live session and its camera."""

    def __init__(
        self,
        config: dict = None,
        bus: EventBus = None,
        camera_factory: Callable[[dict], object] = CameraManager,
        scheduler: CaptureScheduler = None,
        pipeline: GesturePipeline = None,
        dispatcher: EventDispatcher = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            config: full configuration mapping (see Config.data)
            bus: event bus the dispatcher publishes on
            camera_factory: builds a capture handle from a camera config dict
            scheduler: capture scheduler; built from ``config['scheduler']``
            pipeline: per-frame pipeline shared by all sessions
            dispatcher: event dispatcher; built over ``bus`` when omitted
            sleep: used for the restart settle delay
        """
        config = config or {}
        session_cfg = config.get("session", {})

        self._config = config
        self._camera_config = dict(config.get("camera", {}))
        self._recognition_config = config.get("recognition", {})
        self._settle_delay_s = session_cfg.get("settle_delay_ms", 1000) / 1000.0
        self._stop_timeout_s = session_cfg.get("stop_timeout_ms", 500) / 1000.0
        self._read_failure_limit = max(1, int(session_cfg.get("read_failure_limit", 3)))

        self._bus = bus or EventBus()
        self._camera_factory = camera_factory
        self._scheduler = scheduler or CaptureScheduler(config.get("scheduler", {}))
        self._pipeline = pipeline or GesturePipeline(config)
        self._dispatcher = dispatcher or EventDispatcher(self._bus)
        self._calibrator = BackgroundCalibrator(config.get("calibration", {}))
        self._monitor = PerformanceMonitor()
        self._sleep = sleep

        self._sessions = SessionStore()
        self._lock = threading.Lock()
        self._guards_lock = threading.Lock()
        self._guards = {}          # session_id -> [Lock, waiter count]

    # ------------------------------------------------------------------
    # Control surface
    # ------------------------------------------------------------------

    def start(self, session_id: str, camera_index: int = 0) -> bool:
        """Start (or restart) recognition for ``session_id``.

        Returns:
            True if the session is live after the call.
        """
        if not session_id:
            raise GestureVisionError("session_id must be a non-empty string")

        with self._session_guard(session_id):
            previous = self._detach(session_id)
            if previous is not None:
                self._teardown(previous)
                logger.info("Session %s restarting, settling camera for %.1fs",
                            session_id, self._settle_delay_s)
                self._sleep(self._settle_delay_s)

            state = self._open_session(session_id, camera_index)
            if state is None:
                return False

            with self._lock:
                self._sessions.put(state)
            self._dispatcher.emit_status(session_id, EventKind.CALIBRATING,
                                         "Calibrating background - keep the frame clear")
            state.task = self._scheduler.schedule(session_id, lambda: self._run_cycle(session_id))
            logger.info("Session %s started on camera %d", session_id, camera_index)
            return True

    def stop(self, session_id: str) -> bool:
        """Stop a session. Unknown or inactive ids are a no-op.

        Returns:
            True if a live session was torn down.
        """
        with self._session_guard(session_id):
            state = self._detach(session_id)
            if state is None:
                return False
            self._teardown(state)
            return True

    def recalibrate(self, session_id: str) -> bool:
        """Replace the background model with the next processed frame."""
        state = self._sessions.get(session_id)
        if state is None or not state.active:
            return False
        state.refresh_requested = True
        logger.info("Session %s: recalibration requested", session_id)
        return True

    def handle_command(self, payload: dict) -> bool:
        """Apply a transport command ``{"action", "sessionId", "cameraIndex"}``."""
        action = payload.get("action")
        session_id = payload.get("sessionId")
        if action == "start":
            camera_index = payload.get("cameraIndex")
            return self.start(session_id, int(camera_index) if camera_index is not None else 0)
        if action == "stop":
            return self.stop(session_id)
        if action == "recalibrate":
            return self.recalibrate(session_id)
        logger.warning("Ignoring unknown command %r for session %s", action, session_id)
        return False

    def shutdown(self):
        """Stop every session, then the scheduler."""
        for session_id in self._sessions.ids():
            self.stop(session_id)
        self._scheduler.shutdown()
        logger.info("Session registry shut down")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_active(self, session_id: str) -> bool:
        state = self._sessions.get(session_id)
        return state is not None and state.active

    def active_sessions(self) -> list:
        return [sid for sid in self._sessions.ids() if self.is_active(sid)]

    def session_stats(self, session_id: str) -> Optional[dict]:
        state = self._sessions.get(session_id)
        if state is None:
            return None
        stats = state.snapshot()
        stats["performance"] = self._monitor.get_report(session_id)
        if state.task is not None:
            stats["skipped_ticks"] = state.task.skipped
        return stats

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def scheduler(self) -> CaptureScheduler:
        return self._scheduler

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @contextmanager
    def _session_guard(self, session_id: str):
        """Serialize lifecycle changes of one session id."""
        with self._guards_lock:
            entry = self._guards.get(session_id)
            if entry is None:
                entry = self._guards[session_id] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guards_lock:
                entry[1] -= 1
                if entry[1] == 0:
                    self._guards.pop(session_id, None)

    def _open_session(self, session_id: str, camera_index: int) -> Optional[SessionState]:
        """Open the camera and capture a background. No registry lock held."""
        camera_config = dict(self._camera_config, device_id=camera_index)
        camera = self._camera_factory(camera_config)
        try:
            opened = camera.open()
        except Exception:
            logger.exception("Session %s: camera %d raised while opening", session_id, camera_index)
            opened = False

        if not opened:
            camera.release()
            self._dispatcher.emit_status(session_id, EventKind.ERROR,
                                         "Could not open camera %d" % camera_index)
            return None

        background, report = self._calibrator.capture(camera, self._pipeline.frame_processor)
        return SessionState(
            session_id=session_id,
            camera=camera,
            camera_index=camera_index,
            background=background,
            lighting_quality=report.get("lighting_quality"),
            temporal_filter=TemporalFilter(self._recognition_config),
        )

    def _detach(self, session_id: str, expected: SessionState = None) -> Optional[SessionState]:
        """Remove a live session from the store and stop its schedule.

        With ``expected``, only that exact state is detached, so a failing
        cycle can never tear down a newer session that reused its id.
        """
        with self._lock:
            state = self._sessions.get(session_id)
            if state is None or (expected is not None and state is not expected):
                return None
            self._sessions.pop(session_id)
            if not state.active:
                return None
            state.active = False

        if state.task is not None:
            state.task.cancel()
        self._scheduler.cancel(session_id)
        return state

    def _teardown(self, state: SessionState):
        """Release a detached session's camera and publish ``stopped``."""
        session_id = state.session_id

        # Let an in-flight cycle finish so "stopped" follows its last event
        acquired = state.cycle_lock.acquire(timeout=self._stop_timeout_s)
        try:
            if not acquired:
                logger.warning("Session %s: cycle still running after %.1fs, forcing release",
                               session_id, self._stop_timeout_s)
            state.camera.release()
            state.background = None
        finally:
            if acquired:
                state.cycle_lock.release()

        self._monitor.forget(session_id)
        self._dispatcher.emit_status(session_id, EventKind.STOPPED, "Live recognition stopped")
        logger.info("Session %s stopped after %d frames", session_id, state.frames_processed)

    def _run_cycle(self, session_id: str):
        state = self._sessions.get(session_id)
        if state is None or not state.active:
            return

        device_error = None
        with state.cycle_lock:
            if not state.active:
                return
            try:
                with self._monitor.measure(session_id):
                    device_error = self._process_once(state)
            except Exception:
                self._monitor.record(session_id, "error")
                logger.exception("Session %s: frame processing failed", session_id)

        if not state.active and self._sessions.get(session_id) is None:
            # Stopped mid-cycle: drop what this cycle recorded after teardown
            self._monitor.forget(session_id)
            return

        if device_error:
            self._fail(state, device_error)

    def _process_once(self, state: SessionState) -> Optional[str]:
        """One capture + recognition step. Returns a device error message, if any."""
        session_id = state.session_id
        camera = state.camera

        if not camera.is_open:
            return "Camera %d closed unexpectedly" % state.camera_index

        ok, frame = camera.read()
        if not ok:
            state.read_failures += 1
            self._monitor.record(session_id, "read_failure")
            logger.debug("Session %s: read failed (%d/%d)",
                         session_id, state.read_failures, self._read_failure_limit)
            if state.read_failures >= self._read_failure_limit:
                return "Camera %d became unreadable" % state.camera_index
            return None
        state.read_failures = 0

        if self._pipeline.frame_processor.is_empty(frame):
            self._monitor.record(session_id, "empty_frame")
            return None

        result = self._pipeline.process(frame, state)
        result = state.temporal_filter.update(result)
        self._monitor.record(session_id, "processed")

        if not state.active:
            return None
        event = self._dispatcher.dispatch(session_id, result)
        if event is not None:
            state.last_gesture = result.gesture
            state.last_gesture_at = event.timestamp
        return None

    def _fail(self, state: SessionState, message: str):
        session_id = state.session_id
        with self._session_guard(session_id):
            if self._detach(session_id, expected=state) is None:
                return
            logger.error("Session %s: %s", session_id, message)
            self._dispatcher.emit_status(session_id, EventKind.ERROR, message)
            self._teardown(state)
