"""
Per-frame result and gesture types shared by the session, controller and UI.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class AppStatus(Enum):
    IDLE = "IDLE"
    LOADING_MODEL = "LOADING_MODEL"
    CALIBRATING = "CALIBRATING"
    ACTIVE = "ACTIVE"
    ERROR = "ERROR"


class Gesture(Enum):
    NONE = "NONE"
    BLINK = "BLINK"
    DOUBLE_BLINK = "DOUBLE_BLINK"
    DWELL = "DWELL"


class GestureDecision(Enum):
    NONE = "none"
    OPEN = "open"
    CLOSE = "close"


@dataclass
class FrameResult:
    cursor: Tuple[float, float]
    raw_head: Tuple[float, float]
    is_blinking: bool
    ear: float
    did_blink: bool
    dwell_progress: float
    did_dwell: bool
