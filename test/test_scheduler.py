"""
Delayed transitions: ordering, cancellation, generations.
"""

import pytest

from battleboard.engine.scheduler import TaskQueue


def test_tasks_run_when_due_in_order():
    queue = TaskQueue()
    ran = []
    queue.schedule(2.0, "late", lambda: ran.append("late"))
    queue.schedule(1.0, "early", lambda: ran.append("early"))

    assert queue.advance(0.5) == 0
    assert queue.advance(0.5) == 1
    assert ran == ["early"]

    queue.advance(5)
    assert ran == ["early", "late"]
    assert queue.now == 6.0


def test_same_due_time_keeps_schedule_order():
    queue = TaskQueue()
    ran = []
    queue.schedule(1.0, "a", lambda: ran.append("a"))
    queue.schedule(1.0, "b", lambda: ran.append("b"))

    queue.advance(1.0)

    assert ran == ["a", "b"]


def test_cancelled_task_never_runs():
    queue = TaskQueue()
    ran = []
    task = queue.schedule(1.0, "commit_move", lambda: ran.append(1))

    queue.cancel(task)
    queue.advance(10)

    assert ran == []
    assert not queue.has_pending()


def test_cancel_all_drops_everything_and_bumps_generation():
    queue = TaskQueue()
    ran = []
    queue.schedule(1.0, "a", lambda: ran.append("a"))
    queue.schedule(2.0, "b", lambda: ran.append("b"))

    assert queue.cancel_all() == 2
    assert queue.generation == 1
    queue.run_all()

    assert ran == []


def test_cancel_all_from_inside_a_callback_stops_later_tasks():
    queue = TaskQueue()
    ran = []
    queue.schedule(1.0, "reset", lambda: (ran.append("reset"), queue.cancel_all()))
    queue.schedule(1.0, "stale", lambda: ran.append("stale"))

    queue.advance(1.0)

    assert ran == ["reset"]


def test_task_scheduled_by_callback_runs_in_same_advance():
    queue = TaskQueue()
    ran = []

    def first():
        ran.append("first")
        queue.schedule(1.0, "second", lambda: ran.append("second"))

    queue.schedule(1.0, "first", first)

    assert queue.advance(3.0) == 2
    assert ran == ["first", "second"]


def test_pending_filters_by_name():
    queue = TaskQueue()
    queue.schedule(1.0, "commit_move", lambda: None)
    queue.schedule(2.0, "complete_battle", lambda: None)

    assert [t.name for t in queue.pending()] == ["commit_move", "complete_battle"]
    assert queue.has_pending("complete_battle")
    assert not queue.has_pending("other")


def test_run_all_jumps_the_clock():
    queue = TaskQueue()
    queue.schedule(3.0, "x", lambda: None)

    assert queue.run_all() == 1
    assert queue.now == 3.0


@pytest.mark.parametrize("method", ["schedule", "advance"])
def test_negative_time_rejected(method):
    queue = TaskQueue()
    with pytest.raises(ValueError):
        if method == "schedule":
            queue.schedule(-1, "x", lambda: None)
        else:
            queue.advance(-1)
