"""
Face landmark source built on MediaPipe Face Mesh.

Only the landmarks the gesture pipeline needs are extracted per frame:
- index 1 (nose tip) as the head-pointer proxy
- six points per eye in EAR order (corner, upper, upper, corner, lower, lower)
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

try:
    import cv2  # type: ignore
    import mediapipe as mp  # type: ignore
except Exception:  # pragma: no cover
    cv2 = None  # type: ignore
    mp = None  # type: ignore

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

NOSE_IDX = 1
LEFT_EYE_IDX = [33, 160, 158, 133, 153, 144]
RIGHT_EYE_IDX = [362, 385, 387, 263, 373, 380]


@dataclass
class LandmarkFrame:
    nose: Point
    left_eye: Tuple[Point, ...]
    right_eye: Tuple[Point, ...]

    def is_finite(self) -> bool:
        pts = (self.nose,) + tuple(self.left_eye) + tuple(self.right_eye)
        return all(math.isfinite(v) for p in pts for v in p)


def frame_from_landmarks(pts: Sequence) -> Optional[LandmarkFrame]:
    """Build a LandmarkFrame from normalized landmarks exposing .x/.y.

    Returns None if any required index is missing or any coordinate is
    not finite.
    """
    def _pt(i: int) -> Point:
        p = pts[i]
        return (float(p.x), float(p.y))

    try:
        frame = LandmarkFrame(
            nose=_pt(NOSE_IDX),
            left_eye=tuple(_pt(i) for i in LEFT_EYE_IDX),
            right_eye=tuple(_pt(i) for i in RIGHT_EYE_IDX),
        )
    except (IndexError, KeyError, AttributeError):
        return None
    if not frame.is_finite():
        logger.debug("Dropping frame with non-finite landmarks")
        return None
    return frame


class FaceLandmarkSource:
    def __init__(self, min_detection_confidence: float = 0.5, min_tracking_confidence: float = 0.5) -> None:
        if mp is None or cv2 is None:
            raise RuntimeError("mediapipe and opencv-python must be installed.")
        try:
            self._mesh = mp.solutions.face_mesh.FaceMesh(
                max_num_faces=1,
                refine_landmarks=False,
                min_detection_confidence=min_detection_confidence,
                min_tracking_confidence=min_tracking_confidence,
            )
        except Exception as e:
            raise RuntimeError(f"Failed to load face landmark model: {e}") from e
        logger.info("Face landmark model loaded")

    def process(self, frame) -> Optional[LandmarkFrame]:
        """Run the model on a BGR frame; None when no face is found."""
        if frame is None:
            return None
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        res = self._mesh.process(rgb)
        if not res.multi_face_landmarks:
            return None
        return frame_from_landmarks(res.multi_face_landmarks[0].landmark)

    def close(self) -> None:
        self._mesh.close()


def read_landmarks(camera, source) -> Optional[LandmarkFrame]:
    """Grab one frame and run the landmark model on it.

    Any error raised while reading or detecting is logged and the frame is
    treated as having no face.
    """
    try:
        frame = camera.read()
        return source.process(frame) if frame is not None else None
    except Exception:
        logger.exception("Frame read or landmark detection failed; skipping frame")
        return None
