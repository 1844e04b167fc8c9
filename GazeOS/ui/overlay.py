"""
Full-screen PyQt6 overlay: app grid, cursor with dwell ring, open-app panel
and the calibration target. It only reads GazeController state; all input
arrives through the frame loop.
"""
from __future__ import annotations

from typing import Optional

try:
    from PyQt6.QtCore import Qt, QPointF, QRectF, pyqtSignal
    from PyQt6.QtGui import QPainter, QColor, QPen, QFont
    from PyQt6.QtWidgets import QWidget
except Exception:  # pragma: no cover
    QWidget = object  # type: ignore
    pyqtSignal = lambda *a, **k: None  # type: ignore

from GazeOS.control.events import AppStatus, FrameResult
from GazeOS.core.controller import GazeController
from GazeOS.services.content import format_content
from GazeOS.tracking.mapping import LandmarkMapper


class GazeOverlay(QWidget):  # type: ignore[misc]
    recalibrateRequested = pyqtSignal()
    cancelCalibrationRequested = pyqtSignal()
    quitRequested = pyqtSignal()

    def __init__(self, controller: GazeController):  # type: ignore[no-redef]
        super().__init__()
        self.controller = controller
        self._result: Optional[FrameResult] = None
        self.setWindowTitle("GazeOS")
        self.setWindowFlags(Qt.WindowType.FramelessWindowHint | Qt.WindowType.WindowStaysOnTopHint)

    def show_result(self, result: Optional[FrameResult]) -> None:
        if result is not None:
            self._result = result
        self.update()

    def keyPressEvent(self, event):  # type: ignore[override]
        key = event.key()
        if key in (Qt.Key.Key_Q, Qt.Key.Key_Escape):
            if self.controller.status == AppStatus.CALIBRATING and key == Qt.Key.Key_Escape:
                self.cancelCalibrationRequested.emit()  # type: ignore[attr-defined]
            else:
                self.quitRequested.emit()  # type: ignore[attr-defined]
        elif key == Qt.Key.Key_C:
            self.recalibrateRequested.emit()  # type: ignore[attr-defined]

    # -----------------
    # Painting
    # -----------------
    def _to_px(self, x: float, y: float) -> QPointF:
        return QPointF(x * self.width(), y * self.height())

    def paintEvent(self, event):  # type: ignore[override]
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), QColor(8, 10, 14))
        status = self.controller.status
        if status == AppStatus.ERROR:
            self._draw_message(painter, "System Failure. Check Camera Permissions.", QColor(239, 68, 68))
        elif status == AppStatus.LOADING_MODEL:
            self._draw_message(painter, "Initializing face tracking...", QColor(34, 211, 238))
        elif status == AppStatus.CALIBRATING:
            self._draw_calibration(painter)
        elif status == AppStatus.ACTIVE:
            self._draw_apps(painter)
            self._draw_cursor(painter)
        painter.end()

    def _draw_message(self, painter, text: str, color) -> None:
        painter.setPen(color)
        painter.setFont(QFont("Sans", 16))
        painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, text)

    def _draw_apps(self, painter) -> None:
        c = self.controller
        painter.setFont(QFont("Sans", 12))
        for app in c.apps:
            tl = self._to_px(app.center[0] - app.half_size[0], app.center[1] - app.half_size[1])
            br = self._to_px(app.center[0] + app.half_size[0], app.center[1] + app.half_size[1])
            rect = QRectF(tl, br)
            if c.active_app == app.id:
                painter.setBrush(QColor(34, 211, 238, 60))
            elif c.hovered_app == app.id:
                painter.setBrush(QColor(255, 255, 255, 40))
            else:
                painter.setBrush(QColor(255, 255, 255, 12))
            painter.setPen(QColor(255, 255, 255, 80))
            painter.drawRoundedRect(rect, 14, 14)
            painter.setPen(QColor(255, 255, 255))
            painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, app.name)
        if c.active_app is not None:
            panel = QRectF(self.width() * 0.15, self.height() * 0.1, self.width() * 0.7, self.height() * 0.8)
            painter.setBrush(QColor(0, 0, 0, 220))
            painter.setPen(QColor(34, 211, 238, 120))
            painter.drawRoundedRect(panel, 20, 20)
            painter.setPen(QColor(207, 250, 254))
            text = format_content(c.active_app, c.content) if c.content is not None else "Generating content..."
            painter.drawText(panel.adjusted(24, 24, -24, -24), Qt.TextFlag.TextWordWrap, text)
            painter.setPen(QColor(255, 255, 255, 120))
            painter.drawText(panel.adjusted(24, 24, -24, -24), Qt.AlignmentFlag.AlignBottom | Qt.AlignmentFlag.AlignRight, "Double blink to close")

    def _draw_cursor(self, painter) -> None:
        if self._result is None:
            return
        p = self._to_px(*self._result.cursor)
        r = 12
        painter.setBrush(QColor(255, 255, 255, 200) if not self._result.is_blinking else QColor(34, 211, 238, 220))
        painter.setPen(Qt.PenStyle.NoPen)
        painter.drawEllipse(p, r, r)
        prog = self._result.dwell_progress
        if prog > 0:
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.setPen(QPen(QColor(34, 211, 238), 3))
            ring = QRectF(p.x() - 2 * r, p.y() - 2 * r, 4 * r, 4 * r)
            painter.drawArc(ring, 90 * 16, int(-prog * 360 * 16))

    def _draw_calibration(self, painter) -> None:
        cal = self.controller.calibration
        target = cal.current_target
        if target is None:
            return
        self._draw_message(painter, f"Calibration: look at the target ({target.label}). Esc to cancel.", QColor(255, 255, 255, 160))
        p = self._to_px(*target.screen_xy)
        r = 28
        painter.setBrush(QColor(239, 68, 68, 220))
        painter.setPen(QColor(255, 255, 255))
        painter.drawEllipse(p, r / 2, r / 2)
        if cal.progress > 0:
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.setPen(QPen(QColor(34, 211, 238), 4))
            painter.drawArc(QRectF(p.x() - r, p.y() - r, 2 * r, 2 * r), 90 * 16, int(-cal.progress * 360 * 16))
        if self._result is not None:
            # Uncalibrated preview of the raw head input
            q = self._to_px(*LandmarkMapper.map_uncalibrated(self._result.raw_head))
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.setPen(QColor(239, 68, 68, 140))
            painter.drawEllipse(q, 10, 10)
