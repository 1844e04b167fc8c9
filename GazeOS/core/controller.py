from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from GazeOS.calibration.calibrator import CalibrationEngine
from GazeOS.calibration.models import CalibrationProfile
from GazeOS.control.events import AppStatus, FrameResult, Gesture
from GazeOS.control.gestures import GestureArbitrator
from GazeOS.core.session import VisionSession
from GazeOS.core.settings import SettingsManager
from GazeOS.services.content import ContentService
from GazeOS.tracking.landmarks import LandmarkFrame
from GazeOS.utils.blink import BlinkDetector
from GazeOS.utils.dwell import DwellDetector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppTarget:
    id: str
    name: str
    center: Tuple[float, float]
    half_size: Tuple[float, float] = (0.08, 0.1)

    def contains(self, xy: Tuple[float, float]) -> bool:
        return (
            abs(xy[0] - self.center[0]) < self.half_size[0]
            and abs(xy[1] - self.center[1]) < self.half_size[1]
        )


DEFAULT_APPS: List[AppTarget] = [
    AppTarget("mail", "Comms", (0.4, 0.5)),
    AppTarget("weather", "Environment", (0.6, 0.5)),
    AppTarget("assistant", "Assistant", (0.4, 0.7)),
    AppTarget("system", "System", (0.6, 0.7)),
]


class GazeController:
    """Routes per-frame vision results to app selection.

    Status flow: LOADING_MODEL -> IDLE -> (CALIBRATING <-> ACTIVE); any
    initialization failure moves to ERROR, which is terminal.
    """

    def __init__(
        self,
        settings: SettingsManager,
        content: Optional[ContentService] = None,
        apps: Optional[List[AppTarget]] = None,
    ) -> None:
        self.settings = settings
        self.content_service = content or ContentService()
        self.apps = list(apps) if apps is not None else list(DEFAULT_APPS)

        min_ms, max_ms = settings.blink_duration_ms()
        self.session = VisionSession(
            profile=settings.calibration_profile(),
            filter_config=settings.filter_config(),
            blink=BlinkDetector(settings.blink_threshold(), min_ms, max_ms),
            dwell=DwellDetector(settings.dwell_radius(), settings.dwell_duration_ms()),
        )
        self.arbitrator = GestureArbitrator(
            self.session.scheduler,
            is_app_active=lambda: self.active_app is not None,
            on_open=self.open_app,
            on_close=self.close_app,
            window_ms=settings.gesture_window_ms(),
        )
        self.calibration = CalibrationEngine(
            self.session.scheduler,
            settings.calibration_config(),
            on_complete=self._on_calibration_complete,
        )

        self.status = AppStatus.LOADING_MODEL
        self.error: Optional[str] = None
        self.active_app: Optional[str] = None
        self.hovered_app: Optional[str] = None
        self.content: Optional[str] = None
        self.last_gesture = Gesture.NONE

    # Lifecycle ---------------------------------------------------------------
    def model_ready(self) -> None:
        if self.status == AppStatus.LOADING_MODEL:
            self.status = AppStatus.IDLE

    def fail(self, exc: BaseException) -> None:
        self.error = str(exc)
        self.status = AppStatus.ERROR
        self.calibration.cancel()
        self.arbitrator.cancel()
        logger.error("Initialization failed: %s", exc)

    def start(self, now_ms: float) -> None:
        """Begin a camera session; calibrate first if no profile is stored."""
        if self.status == AppStatus.ERROR:
            return
        self.session.reset(now_ms)
        self.arbitrator.cancel()
        if self.settings.calibration_profile() is None:
            self.start_calibration(now_ms)
        else:
            self.status = AppStatus.ACTIVE

    def stop(self, now_ms: Optional[float] = None) -> None:
        self.calibration.cancel()
        self.arbitrator.cancel()
        self.session.reset(now_ms)
        self.hovered_app = None
        if self.status != AppStatus.ERROR:
            self.status = AppStatus.IDLE

    def start_calibration(self, now_ms: float) -> None:
        if self.status == AppStatus.ERROR:
            return
        self.status = AppStatus.CALIBRATING
        self.hovered_app = None
        self.arbitrator.cancel()
        self.calibration.start(now_ms)

    def cancel_calibration(self) -> None:
        if self.status != AppStatus.CALIBRATING:
            return
        self.calibration.cancel()
        self.status = AppStatus.ACTIVE

    def _on_calibration_complete(self, profile: CalibrationProfile) -> None:
        self.session.set_calibration(profile)
        self.settings.set_calibration_profile(profile)
        try:
            self.settings.save()
        except OSError as e:
            logger.warning("Failed to save calibration: %s", e)
        self.status = AppStatus.ACTIVE

    # Frame handling -------------------------------------------------------
    def hit_test(self, cursor: Tuple[float, float]) -> Optional[str]:
        for app in self.apps:
            if app.contains(cursor):
                return app.id
        return None

    def on_frame(self, frame: Optional[LandmarkFrame], now_ms: float) -> Optional[FrameResult]:
        if self.status not in (AppStatus.ACTIVE, AppStatus.CALIBRATING):
            return None
        result = self.session.process(frame, now_ms)
        if self.status == AppStatus.CALIBRATING:
            if result is not None:
                self.calibration.add_sample(result.raw_head, now_ms)
            else:
                self.calibration.tick(now_ms)
            return result
        if result is None:
            return None

        hit = None
        if self.active_app is None:
            hit = self.hit_test(result.cursor)
        self.hovered_app = hit

        if result.did_dwell and self.active_app is None and hit is not None:
            self.last_gesture = Gesture.DWELL
            self.open_app(hit)
        if result.did_blink:
            self.last_gesture = Gesture.BLINK
            self.arbitrator.on_blink(hit, now_ms)
        return result

    # App selection -----------------------------------------------------------
    def open_app(self, app_id: str) -> None:
        if self.active_app is not None:
            return
        logger.info("Opening app %s", app_id)
        self.active_app = app_id
        self.hovered_app = None
        self.content = None
        self.content_service.request(app_id, self._on_content)

    def close_app(self) -> None:
        if self.active_app is None:
            return
        logger.info("Closing app %s", self.active_app)
        self.last_gesture = Gesture.DOUBLE_BLINK
        self.active_app = None
        self.content = None

    def _on_content(self, app_id: str, text: str) -> None:
        # Drop late replies for an app that has since been closed
        if self.active_app == app_id:
            self.content = text
