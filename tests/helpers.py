import os
from concurrent.futures import Future
from datetime import datetime, timedelta


class FakeTimer:
    def __init__(self, delay, fn, args):
        self.delay = delay
        self.fn = fn
        self.args = args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

class FakeScheduler:
    """Runs posted work inline; timers fire only when the test says so."""

    def __init__(self):
        self.timers = []

    def post(self, fn, *args):
        fut = Future()
        fut.set_result(fn(*args))
        return fut

    def call_later(self, delay, fn, *args):
        t = FakeTimer(delay, fn, args)
        self.timers.append(t)
        return t

    def on_worker(self):
        return True

    @property
    def pending(self):
        return [t for t in self.timers if not t.cancelled]

    def fire(self):
        pending = self.pending
        self.timers = []
        for t in pending:
            t.fn(*t.args)
        return len(pending)

class FakeWatch:
    instances = []

    def __init__(self, root, on_change, filename):
        self.root = root
        self.on_change = on_change
        self.filename = filename
        self.closed = False
        FakeWatch.instances.append(self)

    def start(self):
        return True

    def close(self):
        self.closed = True

class Clock:
    def __init__(self, now):
        self.now = now
        self.mono = 1000.0

    def __call__(self):
        return self.now

    def monotonic(self):
        return self.mono

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)
        self.mono += seconds

def log_line(ts: datetime, text: str) -> str:
    return ts.strftime("%y-%m-%d\t%H:%M:%S\t") + text + "\r\n"

def touch(path, content="", mtime=None):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)
    if mtime is not None:
        os.utime(path, (mtime, mtime))

def append(path, content):
    with open(path, "a", encoding="utf-8", newline="") as f:
        f.write(content)

