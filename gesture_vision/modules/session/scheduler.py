"""
Periodic capture scheduling.

One timer thread keeps due tasks in a heap and hands each due task to a
bounded worker pool, so many sessions share a fixed number of threads.
Each session owns a cancellable PeriodicTask whose runs never overlap:
a tick that arrives while the previous run is still queued or in flight
is skipped, so a stuck session holds at most one worker and one queue slot.
"""

import heapq
import itertools
import threading
import time
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Cancellation token plus a non-overlapping runner for one callback."""

    def __init__(self, name: str, fn: Callable[[], None], interval_s: float):
        self.name = name
        self.interval_s = interval_s
        self._fn = fn
        self._cancelled = threading.Event()
        self._running = threading.Lock()
        self._state_lock = threading.Lock()
        self._pending = False
        self.runs = 0
        self.skipped = 0

    def cancel(self):
        """Stop future runs. A run already in progress finishes normally."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def in_flight(self) -> bool:
        return self._running.locked()

    @property
    def pending(self) -> bool:
        """True between claim() and the end of the claimed run."""
        return self._pending

    def claim(self) -> bool:
        """Reserve the next run before handing it to a worker.

        Returns:
            False if a claimed run is still queued or running; the tick
            counts as skipped.
        """
        with self._state_lock:
            if self._pending:
                self.skipped += 1
                return False
            self._pending = True
            return True

    def release_claim(self):
        with self._state_lock:
            self._pending = False

    def run_once(self) -> bool:
        """Run the callback unless cancelled or already running.

        Returns:
            True if the callback ran.
        """
        try:
            if self.cancelled:
                return False
            if not self._running.acquire(blocking=False):
                with self._state_lock:
                    self.skipped += 1
                logger.debug("Task %s still running, tick skipped", self.name)
                return False
            try:
                self._fn()
                self.runs += 1
            except Exception:
                logger.exception("Periodic task %s raised", self.name)
            finally:
                self._running.release()
            return True
        finally:
            self.release_claim()


class CaptureScheduler:
    """Fixed-rate scheduler over a bounded thread pool."""

    def __init__(self, config: dict = None, clock: Callable[[], float] = time.monotonic):
        config = config or {}
        self._interval_s = config.get("interval_ms", 150) / 1000.0
        self._max_workers = max(1, int(config.get("max_workers", 4)))
        self._clock = clock

        self._cond = threading.Condition()
        self._queue = []             # heap of (due, seq, task)
        self._tasks = {}             # name -> PeriodicTask
        self._seq = itertools.count()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._thread: Optional[threading.Thread] = None
        self._running = False

    def start(self):
        """Start the timer thread and worker pool (idempotent)."""
        with self._cond:
            if self._running:
                return
            self._running = True
            self._executor = ThreadPoolExecutor(
                max_workers=self._max_workers, thread_name_prefix="capture-worker"
            )
            self._thread = threading.Thread(target=self._timer_loop,
                                            name="capture-timer", daemon=True)
            self._thread.start()
        logger.info("Capture scheduler started (interval=%.0fms, workers=%d)",
                    self._interval_s * 1000, self._max_workers)

    def schedule(self, name: str, fn: Callable[[], None],
                 interval_s: float = None, delay_s: float = 0.0) -> PeriodicTask:
        """Run ``fn`` every interval until cancelled.

        Scheduling a name that already has a task cancels the old one.
        """
        task = PeriodicTask(name, fn, interval_s or self._interval_s)
        if not self._running:
            self.start()
        with self._cond:
            previous = self._tasks.get(name)
            if previous is not None:
                previous.cancel()
            self._tasks[name] = task
            heapq.heappush(self._queue, (self._clock() + delay_s, next(self._seq), task))
            self._cond.notify()
        logger.debug("Scheduled task %s every %.0fms", name, task.interval_s * 1000)
        return task

    def cancel(self, name: str) -> bool:
        """Cancel the named task. Unknown names are ignored."""
        with self._cond:
            task = self._tasks.pop(name, None)
            if task is None:
                return False
            task.cancel()
            self._cond.notify()
        logger.debug("Cancelled task %s after %d runs", name, task.runs)
        return True

    def _timer_loop(self):
        while True:
            with self._cond:
                while self._running and not self._queue:
                    self._cond.wait()
                if not self._running:
                    return

                due, _, task = self._queue[0]
                if task.cancelled:
                    heapq.heappop(self._queue)
                    continue

                now = self._clock()
                if due > now:
                    self._cond.wait(due - now)
                    continue

                heapq.heappop(self._queue)
                next_due = due + task.interval_s
                if next_due <= now:
                    # Fell behind; drop missed ticks instead of bursting
                    next_due = now + task.interval_s
                heapq.heappush(self._queue, (next_due, next(self._seq), task))
                executor = self._executor

            if not task.claim():
                logger.debug("Task %s still queued or running, tick skipped", task.name)
                continue
            try:
                executor.submit(task.run_once)
            except RuntimeError:
                # Executor shut down between dequeue and submit
                task.release_claim()
                return

    def shutdown(self, wait: bool = True):
        """Cancel every task and stop the timer thread and workers."""
        with self._cond:
            if not self._running:
                return
            self._running = False
            for task in self._tasks.values():
                task.cancel()
            self._tasks.clear()
            self._queue.clear()
            self._cond.notify_all()
            thread, executor = self._thread, self._executor

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=2.0)
        if executor is not None:
            executor.shutdown(wait=wait)
        logger.info("Capture scheduler stopped")

    def task(self, name: str) -> Optional[PeriodicTask]:
        with self._cond:
            return self._tasks.get(name)

    @property
    def interval_s(self) -> float:
        return self._interval_s

    @property
    def active_tasks(self) -> int:
        with self._cond:
            return len(self._tasks)

    @property
    def is_running(self) -> bool:
        return self._running
