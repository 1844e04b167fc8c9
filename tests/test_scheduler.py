from GazeOS.control.scheduler import TaskScheduler


def test_task_fires_at_deadline():
    s = TaskScheduler()
    fired = []
    s.schedule(100, fired.append, now_ms=0)
    assert s.advance(99) == 0
    assert s.advance(100) == 1
    assert fired == [100]
    assert s.pending == 0


def test_canceled_task_never_fires():
    s = TaskScheduler()
    fired = []
    task = s.schedule(100, fired.append, now_ms=0)
    task.cancel()
    s.advance(500)
    assert fired == []
    assert not task.pending


def test_tasks_fire_in_deadline_order():
    s = TaskScheduler()
    order = []
    s.schedule(200, lambda _t: order.append("b"), now_ms=0)
    s.schedule(100, lambda _t: order.append("a"), now_ms=0)
    s.advance(300)
    assert order == ["a", "b"]


def test_callback_can_schedule_follow_up():
    s = TaskScheduler()
    order = []

    def first(now):
        order.append("first")
        s.schedule(50, lambda _t: order.append("second"), now_ms=now)

    s.schedule(100, first, now_ms=0)
    s.advance(120)
    assert order == ["first"]
    s.advance(149)
    assert order == ["first"]
    s.advance(150)
    assert order == ["first", "second"]


def test_cancel_all():
    s = TaskScheduler()
    fired = []
    s.schedule(10, fired.append, now_ms=0)
    s.schedule(20, fired.append, now_ms=0)
    assert s.pending == 2
    s.cancel_all()
    s.advance(100)
    assert fired == []
