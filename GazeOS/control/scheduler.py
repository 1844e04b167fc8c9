"""
Single-fire, cancelable tasks advanced by the frame clock.

The frame loop calls advance(now_ms) once per tick; due tasks fire in deadline
order on that same thread. A task handle can be canceled at any time before it
fires, which is how debounce windows and calibration phases are restarted.
Callbacks receive their own deadline, so chained phases do not drift with
frame jitter.
"""
from __future__ import annotations

import itertools
import logging
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class ScheduledTask:
    def __init__(self, deadline_ms: float, callback: Callable[[float], None], seq: int) -> None:
        self.deadline_ms = float(deadline_ms)
        self._callback = callback
        self._seq = seq
        self.canceled = False
        self.fired = False

    @property
    def pending(self) -> bool:
        return not (self.canceled or self.fired)

    def cancel(self) -> None:
        self.canceled = True

    def _fire(self) -> None:
        self.fired = True
        self._callback(self.deadline_ms)


class TaskScheduler:
    def __init__(self) -> None:
        self._tasks: List[ScheduledTask] = []
        self._seq = itertools.count()
        self._now: Optional[float] = None

    @property
    def now_ms(self) -> Optional[float]:
        return self._now

    @property
    def pending(self) -> int:
        return sum(1 for t in self._tasks if t.pending)

    def schedule(self, delay_ms: float, callback: Callable[[float], None], now_ms: Optional[float] = None) -> ScheduledTask:
        base = now_ms if now_ms is not None else (self._now or 0.0)
        task = ScheduledTask(base + float(delay_ms), callback, next(self._seq))
        self._tasks.append(task)
        return task

    def advance(self, now_ms: float) -> int:
        """Fire every task due at now_ms. Returns the number fired."""
        self._now = float(now_ms)
        fired = 0
        while True:
            due = [t for t in self._tasks if t.pending and t.deadline_ms <= now_ms]
            if not due:
                break
            task = min(due, key=lambda t: (t.deadline_ms, t._seq))
            task._fire()
            fired += 1
        self._tasks = [t for t in self._tasks if t.pending]
        return fired

    def cancel_all(self) -> None:
        for t in self._tasks:
            t.cancel()
        if self._tasks:
            logger.debug("Canceled %d scheduled task(s)", len(self._tasks))
        self._tasks = []
