"""
Per-camera-session vision state.

One VisionSession owns the mapper, cursor filter, blink and dwell detectors
and the task scheduler for a single camera session. The frame loop calls
process() once per frame; nothing else mutates this state. reset() is called
whenever the camera pipeline stops or restarts.
"""
from __future__ import annotations

from typing import Optional

from GazeOS.calibration.models import CalibrationProfile
from GazeOS.control.events import FrameResult
from GazeOS.control.scheduler import TaskScheduler
from GazeOS.tracking.landmarks import LandmarkFrame
from GazeOS.tracking.mapping import LandmarkMapper
from GazeOS.tracking.smoothing import AdaptiveCursorFilter, FilterConfig
from GazeOS.utils.blink import BlinkDetector
from GazeOS.utils.dwell import DwellDetector


class VisionSession:
    def __init__(
        self,
        profile: Optional[CalibrationProfile] = None,
        filter_config: Optional[FilterConfig] = None,
        blink: Optional[BlinkDetector] = None,
        dwell: Optional[DwellDetector] = None,
        scheduler: Optional[TaskScheduler] = None,
    ) -> None:
        self.mapper = LandmarkMapper(profile)
        self.filter = AdaptiveCursorFilter(filter_config)
        self.blink = blink or BlinkDetector()
        self.dwell = dwell or DwellDetector()
        self.scheduler = scheduler or TaskScheduler()
        self.last_result: Optional[FrameResult] = None

    def set_calibration(self, profile: Optional[CalibrationProfile]) -> None:
        self.mapper.set_profile(profile)

    def reset(self, now_ms: Optional[float] = None) -> None:
        self.scheduler.cancel_all()
        self.filter.reset()
        self.blink.reset()
        self.dwell.reset(now_ms)
        self.last_result = None

    def process(self, frame: Optional[LandmarkFrame], now_ms: float) -> Optional[FrameResult]:
        """Advance timers and, if landmarks are present, run one frame of detection.

        Returns None without touching cursor/blink/dwell state when the frame
        carries no face or any landmark coordinate is NaN or infinite.
        """
        self.scheduler.advance(now_ms)
        if frame is None or not frame.is_finite():
            return None

        target = self.mapper.map(frame.nose)
        cursor = self.filter.update(target)
        blink = self.blink.update(frame.left_eye, frame.right_eye, now_ms)
        dwell = self.dwell.update(cursor, now_ms)

        self.last_result = FrameResult(
            cursor=cursor,
            raw_head=frame.nose,
            is_blinking=blink.is_closed,
            ear=blink.ear,
            did_blink=blink.did_blink,
            dwell_progress=dwell.progress,
            did_dwell=dwell.did_dwell,
        )
        return self.last_result
