"""
Settings manager for GazeOS.

Loads/saves JSON settings from GazeOS/settings.json (or the path in the
GAZEOS_SETTINGS environment variable) and exposes typed helpers. The stored
calibration profile lives in the same file under "calibration".
"""
from __future__ import annotations

import copy
import json
import logging
import os
from typing import Any, Dict, Optional

from GazeOS.calibration.models import CalibrationConfig, CalibrationProfile
from GazeOS.tracking.smoothing import FilterConfig

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    "camera_index": 0,
    "camera": {"resolution": [1280, 720], "fps": 30},
    "filter": {
        "jitter_threshold": 0.002,
        "idle_gain": 0.02,
        "active_gain": 0.1,
        "distance_gain": 5.0,
        "max_gain": 0.5,
    },
    "blink": {"ear_threshold": 0.45, "min_ms": 100, "max_ms": 300},
    "dwell": {"radius": 0.04, "duration_ms": 600},
    "gesture": {"window_ms": 600},
    "calibration_timing": {"settle_ms": 1000, "capture_ms": 1000},
    "content": {"generator": ""},
}


class SettingsManager:
    def __init__(self, path: Optional[str] = None) -> None:
        if path is None:
            path = os.environ.get("GAZEOS_SETTINGS") or None
        if path is None:
            here = os.path.dirname(os.path.abspath(__file__))
            path = os.path.join(os.path.dirname(here), "settings.json")
        self.path = path
        self.data: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        self.data = copy.deepcopy(DEFAULTS)
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                stored = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", self.path, e)
            return
        if not isinstance(stored, dict):
            logger.warning("Ignoring settings file %s: top level is not an object", self.path)
            return
        for key, value in stored.items():
            if isinstance(value, dict) and isinstance(self.data.get(key), dict):
                self.data[key].update(value)
            else:
                self.data[key] = value

    def save(self) -> None:
        tmp_path = self.path + ".tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self.data, f, indent=2)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _section(self, name: str) -> Dict[str, Any]:
        sec = self.data.get(name)
        return sec if isinstance(sec, dict) else {}

    # Camera ---------------------------------------------------------------
    def camera_index(self) -> int:
        return int(self.data.get("camera_index", 0))

    def camera_resolution(self) -> tuple[int, int]:
        arr = self._section("camera").get("resolution", [1280, 720])
        try:
            return int(arr[0]), int(arr[1])
        except (IndexError, TypeError, ValueError):
            return 1280, 720

    def camera_fps(self) -> int:
        return int(self._section("camera").get("fps", 30))

    # Tracking ---------------------------------------------------------------
    def filter_config(self) -> FilterConfig:
        sec = self._section("filter")
        base = FilterConfig()

        def _gain(key: str, default: float) -> float:
            # Gains above 1 overshoot the target
            return max(0.0, min(1.0, float(sec.get(key, default))))

        return FilterConfig(
            jitter_threshold=max(0.0, float(sec.get("jitter_threshold", base.jitter_threshold))),
            idle_gain=_gain("idle_gain", base.idle_gain),
            active_gain=_gain("active_gain", base.active_gain),
            distance_gain=max(0.0, float(sec.get("distance_gain", base.distance_gain))),
            max_gain=_gain("max_gain", base.max_gain),
        )

    def blink_threshold(self) -> float:
        return float(self._section("blink").get("ear_threshold", 0.45))

    def blink_duration_ms(self) -> tuple[float, float]:
        sec = self._section("blink")
        return float(sec.get("min_ms", 100)), float(sec.get("max_ms", 300))

    def dwell_radius(self) -> float:
        return float(self._section("dwell").get("radius", 0.04))

    def dwell_duration_ms(self) -> float:
        return float(self._section("dwell").get("duration_ms", 600))

    def gesture_window_ms(self) -> float:
        return float(self._section("gesture").get("window_ms", 600))

    def calibration_config(self) -> CalibrationConfig:
        sec = self._section("calibration_timing")
        return CalibrationConfig(
            settle_ms=int(sec.get("settle_ms", 1000)),
            capture_ms=int(sec.get("capture_ms", 1000)),
        )

    def content_generator(self) -> Optional[str]:
        """Reference (module:function) of the app content generator, or None."""
        ref = os.environ.get("GAZEOS_CONTENT_GENERATOR") or self._section("content").get("generator")
        return str(ref) if ref else None

    # Calibration profile ---------------------------------------------------
    def calibration_profile(self) -> Optional[CalibrationProfile]:
        raw = self.data.get("calibration")
        if raw is None:
            return None
        profile = CalibrationProfile.from_dict(raw)
        if profile is None:
            logger.warning("Ignoring malformed calibration record in %s", self.path)
        return profile

    def set_calibration_profile(self, profile: Optional[CalibrationProfile]) -> None:
        if profile is None:
            self.data.pop("calibration", None)
        else:
            self.data["calibration"] = profile.to_dict()
