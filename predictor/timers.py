"""
predictor/timers.py
===================
Cancellable deferred tasks.

A :class:`DeferredTask` is the one timer a vehicle may own: starting it
while it is pending is rejected, cancelling it makes any later firing a
no-op.  The actual clock comes from a scheduler:

* :class:`sim.scheduler.EventScheduler`: simulation time, driven by the
  host tick loop.
* :class:`ThreadingScheduler`: wall-clock time via ``threading.Timer``.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol

log = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def schedule(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle: ...


class ThreadingScheduler:
    """Runs callbacks after a wall-clock delay on daemon timer threads."""

    def schedule(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay_s, callback)
        timer.daemon = True
        timer.start()
        return timer


class DeferredTask:
    """A single cancellable, reschedulable callback.

    Parameters
    ----------
    scheduler : Scheduler
        Clock used to defer *callback*.
    callback : callable
        Invoked once per successful :meth:`start`, unless cancelled.
    name : str
        Used in log lines only.
    """

    def __init__(self, scheduler: Scheduler, callback: Callable[[], None],
                 name: str = "task") -> None:
        self._scheduler = scheduler
        self._callback = callback
        self._name = name
        self._handle: Optional[TimerHandle] = None
        self._generation = 0
        # wall-clock timers fire on their own thread
        self._lock = threading.RLock()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def start(self, delay_s: float) -> bool:
        """Schedule the callback; returns False if one is already pending."""
        with self._lock:
            if self._handle is not None:
                log.debug("%s start_rejected reason=pending", self._name)
                return False
            self._generation += 1
            generation = self._generation
            self._handle = self._scheduler.schedule(delay_s, lambda: self._fire(generation))
        log.debug("%s scheduled delay=%.3fs", self._name, delay_s)
        return True

    def cancel(self) -> bool:
        """Cancel a pending callback; returns False if none was pending."""
        with self._lock:
            if self._handle is None:
                return False
            self._handle.cancel()
            self._handle = None
            self._generation += 1
        log.debug("%s cancelled", self._name)
        return True

    def _fire(self, generation: int) -> None:
        with self._lock:
            # stale firing from a cancelled or superseded schedule
            if generation != self._generation or self._handle is None:
                return
            self._handle = None
        self._callback()
