import logging
import queue
import threading
from concurrent.futures import Future

logger = logging.getLogger(__name__)


class SerialScheduler:
    """One worker thread running posted work items in order.

    Timers never run work themselves: when a delay expires the item is
    posted to the queue, so everything executes on the worker thread.
    """

    def __init__(self, name: str = "chat-tail"):
        self.name = name
        self.q = queue.Queue()
        self._thread = None
        self._timers = set()
        self._lock = threading.Lock()

    def start(self):
        if self._thread is None or not self._thread.is_alive():
            self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
            self._thread.start()
        return self

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def on_worker(self) -> bool:
        return threading.current_thread() is self._thread

    def post(self, fn, *args) -> Future:
        fut = Future()
        self.q.put((fut, fn, args))
        return fut

    def call_later(self, delay: float, fn, *args):
        t = threading.Timer(delay, self._fire, args=(fn, args))
        t.daemon = True
        with self._lock:
            self._timers.add(t)
        t.start()
        return t

    def _fire(self, fn, args):
        with self._lock:
            self._timers.discard(threading.current_thread())
        self.post(fn, *args)

    def shutdown(self, wait: bool = True):
        with self._lock:
            timers, self._timers = self._timers, set()
        for t in timers:
            t.cancel()
        self.q.put(None)
        if wait and self._thread is not None and not self.on_worker():
            self._thread.join(timeout=5)

    def _run(self):
        while True:
            item = self.q.get()
            if item is None:
                break
            fut, fn, args = item
            if not fut.set_running_or_notify_cancel():
                continue
            try:
                fut.set_result(fn(*args))
            except Exception as e:
                logger.exception("Scheduled task %r failed", fn)
                fut.set_exception(e)
