"""
sim/scheduler.py
================
Simulation-time event queue.

The host advances the clock once per step and calls :meth:`run_until`;
callbacks whose due time has passed run in due-time order (ties in
scheduling order).  Handles returned by :meth:`schedule` can be
cancelled at any time before they run.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from typing import Callable, List, Tuple

log = logging.getLogger(__name__)


class ScheduledEvent:
    """Handle for one pending callback."""

    __slots__ = ("due", "callback", "cancelled")

    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class EventScheduler:
    """Deferred callbacks against a simulation clock in seconds."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now
        self._queue: List[Tuple[float, int, ScheduledEvent]] = []
        self._seq = itertools.count()

    def schedule(self, delay_s: float, callback: Callable[[], None]) -> ScheduledEvent:
        event = ScheduledEvent(self.now + max(0.0, delay_s), callback)
        heapq.heappush(self._queue, (event.due, next(self._seq), event))
        return event

    def pending(self) -> int:
        return sum(1 for _, _, event in self._queue if not event.cancelled)

    def run_until(self, now: float) -> int:
        """Advance the clock to *now* and run every due callback.

        Returns the number of callbacks run.
        """
        ran = 0
        while self._queue and self._queue[0][0] <= now + 1e-12:
            due, _, event = heapq.heappop(self._queue)
            if event.cancelled:
                continue
            # callbacks see the time they were due at
            self.now = max(self.now, due)
            event.callback()
            ran += 1
        self.now = max(self.now, now)
        return ran
