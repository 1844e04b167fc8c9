import pytest

from GazeOS.control.events import GestureDecision
from GazeOS.control.gestures import GestureArbitrator
from GazeOS.control.scheduler import TaskScheduler


class Apps:
    def __init__(self, active=None):
        self.active = active
        self.opened = []
        self.closed = 0

    def open(self, app_id):
        self.opened.append(app_id)
        self.active = app_id

    def close(self):
        self.closed += 1
        self.active = None


@pytest.fixture
def setup():
    sched = TaskScheduler()
    apps = Apps()
    arb = GestureArbitrator(sched, lambda: apps.active is not None, apps.open, apps.close)
    return sched, apps, arb


def test_single_blink_opens_after_window(setup):
    sched, apps, arb = setup
    arb.on_blink("mail", 0)
    assert arb.awaiting
    sched.advance(599)
    assert apps.opened == []
    sched.advance(600)
    assert apps.opened == ["mail"]
    assert arb.count == 0
    assert not arb.awaiting
    assert arb.last_decision == GestureDecision.OPEN
    sched.advance(5000)
    assert apps.opened == ["mail"]


def test_single_blink_without_target_is_noop(setup):
    sched, apps, arb = setup
    arb.on_blink(None, 0)
    sched.advance(600)
    assert apps.opened == []
    assert arb.last_decision == GestureDecision.NONE


def test_single_blink_with_active_app_is_noop(setup):
    sched, apps, arb = setup
    apps.active = "weather"
    arb.on_blink("mail", 0)
    sched.advance(600)
    assert apps.opened == [] and apps.closed == 0


def test_double_blink_closes_active_app(setup):
    sched, apps, arb = setup
    apps.active = "mail"
    arb.on_blink(None, 0)
    arb.on_blink(None, 300)
    sched.advance(850)
    assert apps.closed == 0
    sched.advance(900)
    assert apps.closed == 1
    assert apps.active is None
    assert arb.last_decision == GestureDecision.CLOSE


def test_double_blink_without_active_app_is_noop(setup):
    sched, apps, arb = setup
    arb.on_blink("mail", 0)
    arb.on_blink("mail", 200)
    sched.advance(1000)
    assert apps.opened == [] and apps.closed == 0


def test_triple_blink_is_noop(setup):
    sched, apps, arb = setup
    apps.active = "mail"
    for t in (0, 200, 400):
        arb.on_blink(None, t)
    assert arb.count == 3
    sched.advance(2000)
    assert apps.closed == 0
    assert apps.active == "mail"


def test_target_committed_on_first_blink(setup):
    sched, apps, arb = setup
    arb.on_blink("mail", 0)
    arb.on_blink("weather", 100)
    assert arb.first_hit == "mail"


def test_count_is_zero_when_decision_runs():
    sched = TaskScheduler()
    seen = []
    arb = None

    def on_open(app_id):
        seen.append((app_id, arb.count))

    arb = GestureArbitrator(sched, lambda: False, on_open, lambda: None)
    arb.on_blink("system", 0)
    sched.advance(600)
    assert seen == [("system", 0)]


def test_blinks_after_expiry_start_new_sequence(setup):
    sched, apps, arb = setup
    arb.on_blink(None, 0)
    sched.advance(600)
    arb.on_blink("assistant", 700)
    assert arb.count == 1
    sched.advance(1300)
    assert apps.opened == ["assistant"]


def test_cancel_discards_window(setup):
    sched, apps, arb = setup
    arb.on_blink("mail", 0)
    arb.cancel()
    sched.advance(1000)
    assert apps.opened == []
    assert arb.count == 0
