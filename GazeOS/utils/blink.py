"""
Blink detection using the Eye Aspect Ratio (EAR) of both eyes.

Each eye is given as six points in EAR order:
  p1 (corner), p2, p3 (upper lid), p4 (other corner), p5, p6 (lower lid)
  EAR = (|p2 - p6| + |p3 - p5|) / (2 * |p1 - p4|)

The averaged EAR is thresholded into an open/closed state. A blink event is
emitted on reopening only when the closure lasted between min_blink_ms and
max_blink_ms; shorter closures are treated as noise and longer ones as
deliberate, and both are dropped.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

Point = Tuple[float, float]


@dataclass
class BlinkReading:
    ear: float
    is_closed: bool
    did_blink: bool
    duration_ms: Optional[float] = None  # closure length, set on reopen


class BlinkDetector:
    def __init__(
        self,
        ear_threshold: float = 0.45,
        min_blink_ms: float = 100.0,
        max_blink_ms: float = 300.0,
    ) -> None:
        self.ear_threshold = float(ear_threshold)
        self.min_blink_ms = float(min_blink_ms)
        self.max_blink_ms = float(max_blink_ms)

        # State
        self._closed_since: Optional[float] = None

    @property
    def is_closed(self) -> bool:
        return self._closed_since is not None

    def reset(self) -> None:
        self._closed_since = None

    # Public API ---------------------------------------------------------
    def update(
        self,
        left_eye: Sequence[Point],
        right_eye: Sequence[Point],
        now_ms: Optional[float] = None,
    ) -> BlinkReading:
        avg = (self.ear(left_eye) + self.ear(right_eye)) / 2.0
        return self.update_ear(avg, now_ms)

    def update_ear(self, ear: float, now_ms: Optional[float] = None) -> BlinkReading:
        if now_ms is None:
            now_ms = time.perf_counter() * 1000.0
        ear = float(ear)

        if ear < self.ear_threshold:
            if self._closed_since is None:
                self._closed_since = now_ms
            return BlinkReading(ear=ear, is_closed=True, did_blink=False)

        if self._closed_since is None:
            return BlinkReading(ear=ear, is_closed=False, did_blink=False)

        elapsed = now_ms - self._closed_since
        self._closed_since = None
        did_blink = self.min_blink_ms <= elapsed <= self.max_blink_ms
        return BlinkReading(ear=ear, is_closed=False, did_blink=did_blink, duration_ms=elapsed)

    # Helpers ------------------------------------------------------------
    @staticmethod
    def ear(eye: Sequence[Point]) -> float:
        if len(eye) != 6:
            raise ValueError(f"EAR needs 6 eye points, got {len(eye)}")
        p = np.asarray(eye, dtype=float)
        v1 = np.linalg.norm(p[1] - p[5])
        v2 = np.linalg.norm(p[2] - p[4])
        h = np.linalg.norm(p[0] - p[3])
        if h == 0:
            return 0.0
        return float((v1 + v2) / (2.0 * h))
