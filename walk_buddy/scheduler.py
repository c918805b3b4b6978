# walk_buddy/scheduler.py

import threading
from typing import Callable


class TaskHandle:
    """Cancellable handle for one repeating task."""

    def __init__(self, interval: float):
        self.interval = interval
        self._cancelled = threading.Event()

    @property
    def active(self) -> bool:
        return not self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def wait(self, timeout: float) -> bool:
        return self._cancelled.wait(timeout)


class ThreadScheduler:
    """Runs each repeating task on its own daemon thread.

    The first call fires one interval after scheduling. Cancelling wakes the
    worker immediately so no further calls are made.
    """

    def __init__(self, logger: Callable[[str], None] = print):
        self._log = logger

    def call_every(self, interval: float, callback: Callable[[], None]) -> TaskHandle:
        handle = TaskHandle(interval)

        def worker() -> None:
            while not handle.wait(interval):
                try:
                    callback()
                except Exception as e:
                    # Never let a tick crash the timer thread.
                    self._log(f"[TIMER] Callback error: {e}")

        threading.Thread(target=worker, name="STROBE_TIMER", daemon=True).start()
        return handle
