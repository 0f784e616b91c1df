"""
imgsync scheduler driver.

Owns the control loop: one pass at startup, then one trigger per
interval. Passes run on a worker thread so a slow pass never delays the
clock; what happens to a trigger that fires while a pass is still
running is decided by the overlap policy:

    skip   the trigger is dropped
    queue  at most one trigger is remembered and runs right after
"""

from __future__ import annotations

import threading
from collections.abc import Callable

from imgsync.core.config import ScheduleConfig
from imgsync.core.errors import RootUnavailableError
from imgsync.core.logging import get_logger
from imgsync.sync.models import PassReport

logger = get_logger(__name__)

PassFunction = Callable[[], PassReport]


class SchedulerDriver:
    """Triggers reconcile passes; holds no sync logic itself."""

    def __init__(self, run_pass: PassFunction, config: ScheduleConfig) -> None:
        self._run_pass = run_pass
        self.config = config
        self._stop = threading.Event()
        self._active_stop: threading.Event | None = None
        self._lock = threading.Lock()
        self._running = False
        self._pending = False
        self._worker: threading.Thread | None = None
        self._report_callbacks: list[Callable[[PassReport], None]] = []
        self.last_report: PassReport | None = None
        self.passes_run = 0
        self.triggers_skipped = 0

    @property
    def is_busy(self) -> bool:
        with self._lock:
            return self._running

    def add_report_callback(self, callback: Callable[[PassReport], None]) -> None:
        """Add a callback to be notified after each completed pass."""
        self._report_callbacks.append(callback)

    def run_forever(self, stop_event: threading.Event | None = None) -> None:
        """Block, triggering passes until stop() is called or stop_event is set."""
        stop = stop_event or self._stop
        with self._lock:
            self._active_stop = stop
        if self._stop.is_set():
            stop.set()
        logger.info(
            "Scheduler started",
            interval_seconds=self.config.interval_seconds,
            run_immediately=self.config.run_immediately,
            overlap_policy=self.config.overlap_policy,
        )

        if self.config.run_immediately:
            self.trigger()

        while not stop.wait(self.config.interval_seconds):
            self.trigger()

        self.wait()
        logger.info("Scheduler stopped", passes_run=self.passes_run)

    def stop(self) -> None:
        self._stop.set()
        with self._lock:
            active = self._active_stop
        if active is not None:
            active.set()

    def trigger(self) -> bool:
        """
        Start a pass on a worker thread.

        Returns False when the trigger was dropped because a pass is
        already running (and, under the queue policy, one is already
        pending).
        """
        with self._lock:
            if self._running:
                if self.config.overlap_policy == "queue" and not self._pending:
                    self._pending = True
                    logger.info("Pass queued behind running pass")
                    return True
                self.triggers_skipped += 1
                logger.warning(
                    "Pass skipped, previous pass still running",
                    overlap_policy=self.config.overlap_policy,
                )
                return False
            self._running = True

            worker = threading.Thread(
                target=self._drain,
                name="imgsync-pass",
                daemon=True,
            )
            self._worker = worker

        worker.start()
        return True

    def wait(self, timeout: float | None = None) -> None:
        """Wait for the in-flight pass, if any, to finish."""
        with self._lock:
            worker = self._worker
        if worker is not None:
            worker.join(timeout)

    def run_once(self) -> PassReport | None:
        """Run a single pass on the calling thread."""
        return self._execute()

    def _drain(self) -> None:
        while True:
            self._execute()
            with self._lock:
                if not self._pending:
                    self._running = False
                    return
                self._pending = False

    def _execute(self) -> PassReport | None:
        try:
            report = self._run_pass()
        except RootUnavailableError as e:
            logger.error("Pass aborted, root unavailable", root=str(e.root), error=str(e))
            return None
        except Exception as e:
            logger.exception("Pass crashed", error=str(e))
            return None

        with self._lock:
            self.passes_run += 1
            self.last_report = report

        for callback in self._report_callbacks:
            try:
                callback(report)
            except Exception as e:
                logger.warning("Report callback error", error=str(e))

        return report
