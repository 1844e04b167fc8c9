import pytest

from GazeOS.calibration.models import AxisRange, CalibrationProfile
from GazeOS.core.session import VisionSession
from GazeOS.tracking.landmarks import LandmarkFrame

OPEN_EYE = ((0.0, 0.0), (0.3, -0.25), (0.7, -0.25), (1.0, 0.0), (0.7, 0.25), (0.3, 0.25))
CLOSED_EYE = ((0.0, 0.0), (0.3, -0.05), (0.7, -0.05), (1.0, 0.0), (0.7, 0.05), (0.3, 0.05))
IDENTITY = CalibrationProfile(x=AxisRange(0.0, 1.0), y=AxisRange(0.0, 1.0))


def _frame(nose, closed=False):
    eye = CLOSED_EYE if closed else OPEN_EYE
    return LandmarkFrame(nose=nose, left_eye=eye, right_eye=eye)


def test_process_reports_all_fields():
    s = VisionSession(IDENTITY)
    r = s.process(_frame((0.6, 0.5)), 0.0)
    assert r.cursor == pytest.approx((0.55, 0.5))
    assert r.raw_head == (0.6, 0.5)
    assert not r.is_blinking
    assert r.ear == pytest.approx(0.5)
    assert not r.did_blink
    assert 0.0 <= r.dwell_progress <= 1.0


def test_missing_landmarks_hold_state():
    s = VisionSession(IDENTITY)
    s.process(_frame((0.9, 0.9)), 0.0)
    before = s.filter.position
    assert s.process(None, 16.0) is None
    assert s.filter.position == before
    assert s.last_result is not None


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_landmarks_hold_state(bad):
    s = VisionSession(IDENTITY)
    s.process(_frame((0.5, 0.5)), 0.0)
    s.process(_frame((0.5, 0.5), closed=True), 20.0)
    before = s.filter.position
    assert s.process(_frame((bad, bad)), 36.0) is None
    eye = list(CLOSED_EYE)
    eye[1] = (0.3, bad)
    assert s.process(LandmarkFrame(nose=(0.5, 0.5), left_eye=tuple(eye), right_eye=CLOSED_EYE), 52.0) is None
    assert s.filter.position == before
    assert s.blink.is_closed


def test_blink_through_session():
    s = VisionSession(IDENTITY)
    s.process(_frame((0.5, 0.5)), 0.0)
    assert s.process(_frame((0.5, 0.5), closed=True), 20.0).is_blinking
    assert s.process(_frame((0.5, 0.5)), 180.0).did_blink


def test_dwell_through_session():
    s = VisionSession(IDENTITY)
    fired = [t for t in range(0, 1000, 20) if s.process(_frame((0.5, 0.5)), float(t)).did_dwell]
    assert fired == [600]


def test_set_calibration_changes_mapping():
    s = VisionSession()
    assert not s.mapper.is_calibrated
    s.set_calibration(IDENTITY)
    assert s.mapper.is_calibrated


def test_reset_restores_defaults_and_cancels_tasks():
    s = VisionSession(IDENTITY)
    s.process(_frame((0.9, 0.9), closed=True), 0.0)
    s.scheduler.schedule(100, lambda _t: None, now_ms=0.0)
    s.reset(50.0)
    assert s.filter.position == (0.5, 0.5)
    assert not s.blink.is_closed
    assert s.scheduler.pending == 0
    assert s.last_result is None
