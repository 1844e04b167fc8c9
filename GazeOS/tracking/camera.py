"""
Camera wrapper around OpenCV VideoCapture.

- Opens the configured webcam index, raising RuntimeError if it cannot
- Requests the configured resolution/FPS (drivers may ignore the hint)
- read() returns a BGR frame (unflipped) or None on a dropped frame
"""
from __future__ import annotations

import logging
import os
from typing import Optional

try:
    import cv2  # type: ignore
except Exception:  # pragma: no cover
    cv2 = None

logger = logging.getLogger(__name__)


class Camera:
    def __init__(self, index: int = 0, width: int = 1280, height: int = 720, target_fps: int = 30) -> None:
        self.index = int(index)
        self.width = int(width)
        self.height = int(height)
        self.target_fps = max(1, int(target_fps))
        self.cap = None

    def _backend(self) -> int:
        # Allow override via env GAZEOS_CAMERA_BACKEND = dshow|msmf|any
        preferred = (os.environ.get("GAZEOS_CAMERA_BACKEND", "") or "").strip().lower()
        names = {"dshow": "CAP_DSHOW", "msmf": "CAP_MSMF", "any": "CAP_ANY"}
        return int(getattr(cv2, names.get(preferred, "CAP_ANY"), 0))

    def open(self) -> None:
        if cv2 is None:
            raise RuntimeError("OpenCV (cv2) is not installed.")
        cap = cv2.VideoCapture(self.index, self._backend())
        if cap is None or not cap.isOpened():
            if cap is not None:
                cap.release()
            raise RuntimeError(
                f"Could not open camera {self.index}. "
                "Close other apps using the camera and check camera permissions."
            )
        self.cap = cap
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self.cap.set(cv2.CAP_PROP_FPS, float(self.target_fps))
        actual_w = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_h = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        if actual_w > 0 and actual_h > 0:
            self.width, self.height = actual_w, actual_h
        logger.info("Camera %d opened at %dx%d", self.index, self.width, self.height)

    def read(self) -> Optional[object]:
        if self.cap is None:
            return None
        ok, frame = self.cap.read()
        if not ok or frame is None:
            return None
        return frame

    def close(self) -> None:
        if self.cap is not None:
            try:
                self.cap.release()
            finally:
                self.cap = None

    @property
    def is_open(self) -> bool:
        return bool(self.cap is not None and self.cap.isOpened())
