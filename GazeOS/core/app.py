from __future__ import annotations

import argparse
import logging
import time
from typing import Optional

try:
    from PyQt6.QtCore import QTimer
    from PyQt6.QtWidgets import QApplication
except Exception:  # pragma: no cover
    QApplication = None  # type: ignore
    QTimer = None  # type: ignore

from GazeOS.control.events import AppStatus
from GazeOS.core.controller import GazeController
from GazeOS.core.settings import SettingsManager
from GazeOS.services.content import ContentService, load_generator
from GazeOS.tracking.camera import Camera
from GazeOS.tracking.landmarks import FaceLandmarkSource, read_landmarks
from GazeOS.ui.overlay import GazeOverlay

logger = logging.getLogger(__name__)


def _now_ms() -> float:
    return time.perf_counter() * 1000.0


class AppCore:
    """Qt shell: owns the camera, landmark model and frame timer.

    Each timer tick reads one frame, runs the landmark model and hands the
    result to the controller; the overlay repaints from controller state.
    """

    def __init__(self, settings: SettingsManager, windowed: bool = False) -> None:
        self.settings = settings
        self.controller = GazeController(settings, ContentService(load_generator(settings.content_generator())))
        w, h = settings.camera_resolution()
        self.camera = Camera(settings.camera_index(), w, h, settings.camera_fps())
        self.source: Optional[FaceLandmarkSource] = None

        self.win = GazeOverlay(self.controller)
        self.win.recalibrateRequested.connect(lambda: self.controller.start_calibration(_now_ms()))  # type: ignore[attr-defined]
        self.win.cancelCalibrationRequested.connect(self.controller.cancel_calibration)  # type: ignore[attr-defined]
        self.win.quitRequested.connect(self.shutdown)  # type: ignore[attr-defined]
        if windowed:
            self.win.resize(1280, 720)
            self.win.show()
        else:
            self.win.showFullScreen()

        self.timer = QTimer()
        self.timer.setInterval(max(1, int(1000 / max(1, settings.camera_fps()))))
        self.timer.timeout.connect(self._on_tick)  # type: ignore[attr-defined]

    def start(self) -> None:
        try:
            self.source = FaceLandmarkSource()
            self.controller.model_ready()
            self.camera.open()
        except RuntimeError as e:
            # Camera/model failures are terminal; no automatic retry
            self.controller.fail(e)
            self.win.update()
            return
        self.controller.start(_now_ms())
        self.timer.start()

    def _on_tick(self) -> None:
        if self.controller.status == AppStatus.ERROR or self.source is None:
            self.timer.stop()
            return
        landmarks = read_landmarks(self.camera, self.source)
        try:
            result = self.controller.on_frame(landmarks, _now_ms())
        except Exception:
            # An exception escaping a Qt slot aborts the process
            logger.exception("Frame processing failed; holding cursor")
            result = None
        self.win.show_result(result)

    def shutdown(self) -> None:
        self.timer.stop()
        self.controller.stop(_now_ms())
        self.camera.close()
        if self.source is not None:
            self.source.close()
            self.source = None
        app = QApplication.instance()
        if app is not None:
            app.quit()


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(prog="gazeos", description="Head-pointer and blink gesture desktop")
    parser.add_argument("--settings", help="path to settings.json")
    parser.add_argument("--windowed", action="store_true", help="run in a window instead of full screen")
    parser.add_argument("--recalibrate", action="store_true", help="discard the stored calibration profile")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if QApplication is None:
        print("PyQt6 is not installed. Please install the package dependencies.")
        return 1

    settings = SettingsManager(args.settings)
    if args.recalibrate:
        settings.set_calibration_profile(None)

    app = QApplication.instance() or QApplication([])
    core = AppCore(settings, windowed=args.windowed)
    core.start()
    return int(app.exec())


if __name__ == "__main__":
    raise SystemExit(main())
