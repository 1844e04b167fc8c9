from __future__ import annotations

import logging
from typing import Optional, Tuple

from GazeOS.calibration.models import CalibrationProfile

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

# Fallback gain applied around the frame center when no calibration exists
UNCALIBRATED_GAIN = 2.5
MIN_AXIS_SPAN = 1e-9


def _clamp01(v: float) -> float:
    return max(0.0, min(1.0, float(v)))


class LandmarkMapper:
    """Map a raw nose-proxy landmark to a normalized screen coordinate.

    With a profile each axis is mapped as (raw - start) / (end - start); the
    ratio may extrapolate beyond the calibrated range before the final clamp.
    Without one (or with a zero-width axis) the deviation from the frame
    center is amplified and X is mirrored.
    """

    def __init__(self, profile: Optional[CalibrationProfile] = None, gain: float = UNCALIBRATED_GAIN) -> None:
        self.profile = profile
        self.gain = float(gain)

    def set_profile(self, profile: Optional[CalibrationProfile]) -> None:
        self.profile = profile

    @property
    def is_calibrated(self) -> bool:
        p = self.profile
        return (
            p is not None
            and abs(p.x.span) >= MIN_AXIS_SPAN
            and abs(p.y.span) >= MIN_AXIS_SPAN
        )

    def map(self, raw: Point) -> Point:
        rx, ry = float(raw[0]), float(raw[1])
        if self.is_calibrated:
            p = self.profile
            assert p is not None
            tx = (rx - p.x.start) / p.x.span
            ty = (ry - p.y.start) / p.y.span
            return _clamp01(tx), _clamp01(ty)
        if self.profile is not None:
            logger.debug("Calibration axis has zero width; using uncalibrated mapping")
        return self.map_uncalibrated(raw, self.gain)

    @staticmethod
    def map_uncalibrated(raw: Point, gain: float = UNCALIBRATED_GAIN) -> Point:
        ax = _clamp01(0.5 + (float(raw[0]) - 0.5) * gain)
        ay = _clamp01(0.5 + (float(raw[1]) - 0.5) * gain)
        # Selfie camera: mirror X
        return 1.0 - ax, ay
