"""Repeating timer that fires sync cycles and never lets two of them overlap."""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import timedelta

from readlater.runner.notify import log


class SyncTimer:
    """Fire run every interval on a worker thread.

    A tick that arrives while the previous cycle is still running is dropped, not queued.
    Exceptions from run are logged and counted; the timer keeps going.
    """

    def __init__(
        self,
        run: Callable[[], object],
        interval: timedelta | float,
        *,
        run_immediately: bool = True,
    ):
        self._run = run
        self.interval_seconds = interval.total_seconds() if isinstance(interval, timedelta) else float(interval)
        self.run_immediately = run_immediately
        self._busy = threading.Lock()
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None
        self._workers: list[threading.Thread] = []
        self.runs = 0
        self.dropped = 0
        self.failures = 0

    @property
    def running(self) -> bool:
        return self._busy.locked()

    def tick(self) -> bool:
        """Run one cycle unless one is already in progress. Returns False when the tick was dropped."""
        if not self._busy.acquire(blocking=False):
            self.dropped += 1
            log("Previous sync still running; tick dropped", "warn")
            return False
        try:
            self._run()
            self.runs += 1
        except Exception as e:
            self.failures += 1
            log(f"Sync cycle failed: {e.__class__.__name__}: {e}", "error")
        finally:
            self._busy.release()
        return True

    def _dispatch(self) -> None:
        if self.running:
            self.dropped += 1
            log("Previous sync still running; tick dropped", "warn")
            return
        worker = threading.Thread(target=self.tick, name="readlater-sync", daemon=True)
        self._workers = [w for w in self._workers if w.is_alive()]
        self._workers.append(worker)
        worker.start()

    def _loop(self) -> None:
        if self.run_immediately:
            self._dispatch()
        while not self._stopped.wait(self.interval_seconds):
            self._dispatch()

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stopped.clear()
        self._thread = threading.Thread(target=self._loop, name="readlater-timer", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Stop firing new ticks and wait for the timer and any in-flight cycle to finish."""
        self._stopped.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        for worker in self._workers:
            worker.join(timeout)
        self._workers = []

    def run_forever(self) -> None:
        """Block the calling thread until KeyboardInterrupt, then stop cleanly."""
        self.start()
        try:
            while not self._stopped.wait(1.0):
                pass
        except KeyboardInterrupt:
            log("Stopping sync timer")
        finally:
            self.stop()
