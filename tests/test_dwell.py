import pytest

from GazeOS.utils.dwell import DwellDetector


def test_held_cursor_fires_exactly_once():
    det = DwellDetector()
    events = 0
    for t in range(0, 701, 10):
        if det.update((0.5, 0.5), float(t)).did_dwell:
            events += 1
    assert events == 1


def test_progress_rises_then_resets_on_fire():
    det = DwellDetector()
    assert det.update((0.5, 0.5), 0.0).progress == 0.0
    assert det.update((0.5, 0.5), 300.0).progress == pytest.approx(0.5)
    r = det.update((0.5, 0.5), 600.0)
    assert r.did_dwell and r.progress == 0.0
    assert det.triggered
    later = det.update((0.51, 0.5), 900.0)
    assert not later.did_dwell and later.progress == 0.0


def test_small_motion_inside_radius_keeps_timer():
    det = DwellDetector()
    det.update((0.5, 0.5), 0.0)
    det.update((0.53, 0.5), 300.0)
    assert det.update((0.47, 0.5), 600.0).did_dwell


def test_drift_out_restarts_timer():
    det = DwellDetector()
    det.update((0.5, 0.5), 0.0)
    det.update((0.5, 0.5), 400.0)
    r = det.update((0.6, 0.5), 500.0)
    assert not r.did_dwell and r.progress == 0.0
    assert det.anchor == (0.6, 0.5)
    for t in range(520, 1100, 20):
        assert not det.update((0.6, 0.5), float(t)).did_dwell
    assert det.update((0.6, 0.5), 1100.0).did_dwell


def test_rearms_after_exit_and_reentry():
    det = DwellDetector()
    det.update((0.5, 0.5), 0.0)
    assert det.update((0.5, 0.5), 600.0).did_dwell
    assert not det.update((0.5, 0.5), 1300.0).did_dwell
    det.update((0.7, 0.7), 1400.0)
    assert not det.triggered
    det.update((0.5, 0.5), 1500.0)
    assert det.update((0.5, 0.5), 2100.0).did_dwell


def test_custom_radius_and_duration():
    det = DwellDetector(radius=0.1, dwell_ms=200)
    det.update((0.5, 0.5), 0.0)
    assert det.update((0.58, 0.5), 200.0).did_dwell
