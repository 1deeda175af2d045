import threading
import time

import pytest

from scheduler import SerialScheduler


@pytest.fixture
def sched():
    s = SerialScheduler(name="test-worker").start()
    yield s
    s.shutdown()


def test_post_runs_on_worker_in_order(sched):
    seen = []
    futs = [sched.post(lambda i=i: seen.append((i, threading.current_thread().name))) for i in range(5)]
    for f in futs:
        f.result(timeout=2)
    assert [i for i, _ in seen] == [0, 1, 2, 3, 4]
    assert {name for _, name in seen} == {"test-worker"}


def test_call_later_hands_off_to_worker(sched):
    done = threading.Event()
    names = []

    def work():
        names.append(threading.current_thread().name)
        done.set()

    sched.call_later(0.01, work)
    assert done.wait(2)
    assert names == ["test-worker"]


def test_cancelled_timer_never_runs(sched):
    ran = []
    t = sched.call_later(0.05, ran.append, 1)
    t.cancel()
    time.sleep(0.15)
    sched.post(lambda: None).result(timeout=2)
    assert ran == []


def test_work_items_never_overlap(sched):
    active = []
    overlaps = []

    def work():
        active.append(1)
        if len(active) > 1:
            overlaps.append(True)
        time.sleep(0.005)
        active.pop()

    futs = [sched.post(work) for _ in range(10)]
    for f in futs:
        f.result(timeout=2)
    assert overlaps == []


def test_failing_item_does_not_stop_worker(sched):
    def boom():
        raise RuntimeError("boom")

    fut = sched.post(boom)
    with pytest.raises(RuntimeError):
        fut.result(timeout=2)
    assert sched.post(lambda: 42).result(timeout=2) == 42
