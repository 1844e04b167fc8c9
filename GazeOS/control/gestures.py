"""
Blink gesture arbitration.

A single blink opens the app under the cursor; two blinks inside the debounce
window close the active app. Both start the same way, so no blink is acted on
until the window expires without a further blink. The hit target is captured
at the first blink of a sequence only.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from .events import GestureDecision
from .scheduler import ScheduledTask, TaskScheduler

logger = logging.getLogger(__name__)


class GestureArbitrator:
    def __init__(
        self,
        scheduler: TaskScheduler,
        is_app_active: Callable[[], bool],
        on_open: Callable[[str], None],
        on_close: Callable[[], None],
        window_ms: float = 600.0,
    ) -> None:
        self.scheduler = scheduler
        self.window_ms = float(window_ms)
        self._is_app_active = is_app_active
        self._on_open = on_open
        self._on_close = on_close

        # Gesture window
        self.count = 0
        self.first_hit: Optional[str] = None
        self._deadline: Optional[ScheduledTask] = None
        self.last_decision: Optional[GestureDecision] = None

    @property
    def awaiting(self) -> bool:
        return self._deadline is not None and self._deadline.pending

    def on_blink(self, hit_target: Optional[str], now_ms: float) -> None:
        if not self.awaiting:
            self.count = 0
            self.first_hit = hit_target
        self.count += 1
        if self._deadline is not None:
            self._deadline.cancel()
        self._deadline = self.scheduler.schedule(self.window_ms, self._on_expire, now_ms)

    def cancel(self) -> None:
        if self._deadline is not None:
            self._deadline.cancel()
        self._deadline = None
        self.count = 0
        self.first_hit = None

    def _on_expire(self, _now_ms: float) -> None:
        count = self.count
        target = self.first_hit
        self.count = 0
        self.first_hit = None
        self._deadline = None
        logger.info("Blink sequence finished. Count: %d", count)

        active = self._is_app_active()
        if count == 2 and active:
            self.last_decision = GestureDecision.CLOSE
            self._on_close()
        elif count == 1 and not active and target is not None:
            self.last_decision = GestureDecision.OPEN
            self._on_open(target)
        else:
            self.last_decision = GestureDecision.NONE
