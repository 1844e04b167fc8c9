"""
Dwell-select detection on the normalized cursor.

The detector keeps an anchor point. While the cursor stays within `radius`
of it, progress rises toward 1 over `dwell_ms`; reaching it fires one event.
Leaving the radius re-anchors at the current cursor and re-arms the detector,
so a fresh stay is needed before the next event.
"""
from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Optional, Tuple

Point = Tuple[float, float]


@dataclass
class DwellReading:
    progress: float
    did_dwell: bool


class DwellDetector:
    def __init__(self, radius: float = 0.04, dwell_ms: float = 600.0) -> None:
        self.radius = float(radius)
        self.dwell_ms = float(dwell_ms)
        self._anchor: Point = (0.5, 0.5)
        self._anchor_time: Optional[float] = None
        self._triggered = False

    @property
    def anchor(self) -> Point:
        return self._anchor

    @property
    def triggered(self) -> bool:
        return self._triggered

    def reset(self, now_ms: Optional[float] = None) -> None:
        self._anchor = (0.5, 0.5)
        self._anchor_time = now_ms
        self._triggered = False

    def update(self, cursor: Point, now_ms: Optional[float] = None) -> DwellReading:
        if now_ms is None:
            now_ms = time.perf_counter() * 1000.0
        if self._anchor_time is None:
            self._anchor_time = now_ms

        ax, ay = self._anchor
        if math.hypot(cursor[0] - ax, cursor[1] - ay) > self.radius:
            self._anchor = (float(cursor[0]), float(cursor[1]))
            self._anchor_time = now_ms
            self._triggered = False
            return DwellReading(progress=0.0, did_dwell=False)

        if self._triggered:
            return DwellReading(progress=0.0, did_dwell=False)

        elapsed = now_ms - self._anchor_time
        if elapsed >= self.dwell_ms:
            self._triggered = True
            # Progress drops back to 0 once the dwell fires
            return DwellReading(progress=0.0, did_dwell=True)
        return DwellReading(progress=min(1.0, elapsed / self.dwell_ms), did_dwell=False)
