from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass
class FilterConfig:
    jitter_threshold: float = 0.002  # epsilon
    idle_gain: float = 0.02
    active_gain: float = 0.1
    distance_gain: float = 5.0  # k
    max_gain: float = 0.5


class AdaptiveCursorFilter:
    """First-order cursor filter whose gain grows with the distance to target.

    Small displacements (below the jitter threshold) are smoothed heavily so the
    cursor holds still; larger ones catch up faster, capped at max_gain.
    """

    def __init__(self, config: FilterConfig | None = None) -> None:
        self.config = config or FilterConfig()
        self._x = 0.5
        self._y = 0.5

    @property
    def position(self) -> Tuple[float, float]:
        return (self._x, self._y)

    def reset(self) -> None:
        self._x = 0.5
        self._y = 0.5

    def gain(self, distance: float) -> float:
        c = self.config
        if distance < c.jitter_threshold:
            return c.idle_gain
        return min(c.active_gain + c.distance_gain * distance, c.max_gain)

    def update(self, target: Tuple[float, float]) -> Tuple[float, float]:
        dx = float(target[0]) - self._x
        dy = float(target[1]) - self._y
        g = self.gain(math.hypot(dx, dy))
        self._x += dx * g
        self._y += dy * g
        return (self._x, self._y)
