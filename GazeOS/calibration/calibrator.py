"""Four-point head-pointer calibration.

The engine walks through four fixed screen targets (TL, TR, BR, BL). For each
target it waits a settle delay so the user can re-fixate, then collects raw
nose samples for the capture window and averages them into one measurement.
From the four measurements it solves a per-axis affine range:

  rawXLeft  = avg(TL.x, BL.x)     rawXRight  = avg(TR.x, BR.x)
  rawYTop   = avg(TL.y, TR.y)     rawYBottom = avg(BL.y, BR.y)

The targets sit at 0.1 and 0.9, i.e. they span 80% of each axis, so the
measured range is extrapolated by range / 0.8 * 0.1 on both sides to reach
screen 0 and 1. Degenerate ranges are accepted; LandmarkMapper guards them.

Timing is driven by a TaskScheduler advanced from the frame loop. Progress is
strictly sequential and cancel() drops timers and partial samples.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

import numpy as np

from GazeOS.control.scheduler import ScheduledTask, TaskScheduler

from .models import AxisRange, CalibrationConfig, CalibrationProfile, CalibrationTarget, Point

logger = logging.getLogger(__name__)

TARGETS: List[CalibrationTarget] = [
    CalibrationTarget((0.1, 0.1), "Top Left"),
    CalibrationTarget((0.9, 0.1), "Top Right"),
    CalibrationTarget((0.9, 0.9), "Bottom Right"),
    CalibrationTarget((0.1, 0.9), "Bottom Left"),
]

# Fraction of each axis covered by the targets (0.9 - 0.1)
TARGET_SPAN = 0.8
TARGET_MARGIN = 0.1

PHASE_IDLE = "idle"
PHASE_SETTLE = "settle"
PHASE_CAPTURE = "capture"


class CalibrationEngine:
    def __init__(
        self,
        scheduler: Optional[TaskScheduler] = None,
        config: Optional[CalibrationConfig] = None,
        on_complete: Optional[Callable[[CalibrationProfile], None]] = None,
    ) -> None:
        self.scheduler = scheduler or TaskScheduler()
        self.config = config or CalibrationConfig()
        self.on_complete = on_complete

        self.step = 0
        self.phase = PHASE_IDLE
        self.measurements: List[Point] = []
        self.profile: Optional[CalibrationProfile] = None
        self._samples: List[Point] = []
        self._timer: Optional[ScheduledTask] = None
        self._capture_started = 0.0
        self._capture_elapsed = False
        self._now = 0.0

    # -----------------
    # Public API
    # -----------------
    @property
    def is_running(self) -> bool:
        return self.phase != PHASE_IDLE

    @property
    def current_target(self) -> Optional[CalibrationTarget]:
        if not self.is_running or self.step >= len(TARGETS):
            return None
        return TARGETS[self.step]

    @property
    def progress(self) -> float:
        """Capture progress for the current target, 0..1."""
        if self.phase != PHASE_CAPTURE:
            return 0.0
        if self._capture_elapsed:
            return 1.0
        cap = max(1.0, float(self.config.capture_ms))
        return max(0.0, min(1.0, (self._now - self._capture_started) / cap))

    def start(self, now_ms: float) -> None:
        self.cancel()
        self.measurements = []
        self.profile = None
        self.step = 0
        self._now = float(now_ms)
        logger.info("Calibration started")
        self._begin_point(now_ms)

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        if self.is_running:
            logger.info("Calibration canceled at step %d", self.step)
        self.phase = PHASE_IDLE
        self._samples = []
        self._capture_elapsed = False

    def tick(self, now_ms: float) -> None:
        self._now = float(now_ms)
        self.scheduler.advance(now_ms)

    def add_sample(self, raw: Point, now_ms: float) -> None:
        self.tick(now_ms)
        if self.phase != PHASE_CAPTURE:
            return
        self._samples.append((float(raw[0]), float(raw[1])))
        if self._capture_elapsed:
            self._finish_point(now_ms)

    # -----------------
    # Internals
    # -----------------
    def _begin_point(self, now_ms: float) -> None:
        self._samples = []
        self._capture_elapsed = False
        self.phase = PHASE_SETTLE
        self._timer = self.scheduler.schedule(self.config.settle_ms, self._on_settled, now_ms)

    def _on_settled(self, now_ms: float) -> None:
        self.phase = PHASE_CAPTURE
        self._capture_started = now_ms
        self._timer = self.scheduler.schedule(self.config.capture_ms, self._on_capture_done, now_ms)

    def _on_capture_done(self, now_ms: float) -> None:
        self._timer = None
        if not self._samples:
            # Keep capturing until the first sample arrives
            self._capture_elapsed = True
            return
        self._finish_point(now_ms)

    def _finish_point(self, now_ms: float) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        mean = np.mean(np.asarray(self._samples, dtype=float), axis=0)
        self.measurements.append((float(mean[0]), float(mean[1])))
        logger.debug(
            "Calibration point %s: %d samples -> (%.4f, %.4f)",
            TARGETS[self.step].label, len(self._samples), mean[0], mean[1],
        )
        self.step += 1
        if self.step < len(TARGETS):
            self._begin_point(now_ms)
            return
        self.phase = PHASE_IDLE
        self._samples = []
        self.profile = self.compute_profile(self.measurements)
        logger.info("Calibration complete: %s", self.profile.to_dict())
        if self.on_complete is not None:
            self.on_complete(self.profile)

    @staticmethod
    def compute_profile(measurements: Sequence[Point]) -> CalibrationProfile:
        if len(measurements) != len(TARGETS):
            raise ValueError(f"Need {len(TARGETS)} measurements, got {len(measurements)}")
        tl, tr, br, bl = measurements
        x_left = (tl[0] + bl[0]) / 2.0
        x_right = (tr[0] + br[0]) / 2.0
        y_top = (tl[1] + tr[1]) / 2.0
        y_bottom = (bl[1] + br[1]) / 2.0

        def extrapolate(lo: float, hi: float) -> AxisRange:
            pad = (hi - lo) / TARGET_SPAN * TARGET_MARGIN
            return AxisRange(start=lo - pad, end=hi + pad)

        return CalibrationProfile(x=extrapolate(x_left, x_right), y=extrapolate(y_top, y_bottom))
