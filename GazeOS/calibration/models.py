"""
Calibration data models.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

Point = Tuple[float, float]


@dataclass(frozen=True)
class AxisRange:
    start: float  # raw value mapped to screen 0
    end: float    # raw value mapped to screen 1

    @property
    def span(self) -> float:
        return self.end - self.start


@dataclass(frozen=True)
class CalibrationProfile:
    x: AxisRange
    y: AxisRange

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {
            "x": {"start": float(self.x.start), "end": float(self.x.end)},
            "y": {"start": float(self.y.start), "end": float(self.y.end)},
        }

    @classmethod
    def from_dict(cls, data: Any) -> Optional["CalibrationProfile"]:
        """Build a profile from its JSON form, or None if the record is malformed."""
        try:
            return cls(
                x=AxisRange(float(data["x"]["start"]), float(data["x"]["end"])),
                y=AxisRange(float(data["y"]["start"]), float(data["y"]["end"])),
            )
        except (KeyError, TypeError, ValueError):
            return None


@dataclass
class CalibrationTarget:
    screen_xy: Point  # normalized (x, y)
    label: str


@dataclass
class CalibrationConfig:
    settle_ms: int = 1000
    capture_ms: int = 1000
