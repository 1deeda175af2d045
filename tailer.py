"""Polling tailer for the game's daily chat logs.

ChatTailer keeps a read cursor on today's chat log, follows the game when
it starts a new daily file or moves to the other log folder, and hands
every complete line to subscribers as (timestamp, payload).

All of its work happens in ticks run by a SerialScheduler: one tick at a
time, the next one armed only when the current one is done. Subscriber
callbacks run inside the tick, on the scheduler's worker thread.
"""

import logging
import time
from datetime import datetime
from typing import Callable, List, Optional

from chat_logs import ConnectError, LineEvent, LogNotFound, LogTail, LogTruncated
from folders import LogFolders, LogSource, select_folder
from scheduler import SerialScheduler
from state import Effect, Phase, TailState, Trigger, transition
from zone_watch import SETTINGS_FILE, ZoneWatch

logger = logging.getLogger(__name__)

POLL_DELAY = 0.5
FOLDER_CHECK = 30.0

LineHandler = Callable[[datetime, str], None]


class ChatTailer:
    def __init__(
        self,
        primary: LogFolders,
        secondary: LogFolders,
        scheduler: Optional[SerialScheduler] = None,
        custom_folder: str = "",
        poll_delay: float = POLL_DELAY,
        folder_check: float = FOLDER_CHECK,
        start_at_end: bool = True,
        settings_file: str = SETTINGS_FILE,
        clock=datetime.now,
        monotonic=time.monotonic,
        watch_factory=ZoneWatch,
        open_tail=LogTail.open,
    ):
        self._primary = primary
        self._secondary = secondary
        self._own_scheduler = scheduler is None
        self.scheduler = scheduler or SerialScheduler()
        self.custom_folder = custom_folder or ""
        self.poll_delay = float(poll_delay)
        self.folder_check = float(folder_check)
        self.start_at_end = start_at_end
        self.settings_file = settings_file
        self._clock = clock
        self._monotonic = monotonic
        self._watch_factory = watch_factory
        self._open_tail = open_tail

        self.state = TailState()
        self.source: Optional[LogSource] = None
        self.tail: Optional[LogTail] = None
        self.watch = None
        self._day = None
        self._folder_checked: Optional[float] = None
        self._recheck = False
        self._timer = None
        self._gen = 0
        self._line_handlers: List[LineHandler] = []
        self._zone_handlers: List[Callable[[], None]] = []

    # -- public interface, safe to call from any thread --

    @property
    def primary(self) -> LogFolders:
        return self._primary

    @property
    def secondary(self) -> LogFolders:
        return self._secondary

    def on_line(self, callback: LineHandler) -> LineHandler:
        self._line_handlers.append(callback)
        return callback

    def on_zone_changed(self, callback):
        self._zone_handlers.append(callback)
        return callback

    def start(self, from_start: Optional[bool] = None):
        if self._own_scheduler:
            self.scheduler.start()
        if from_start is None:
            from_start = not self.start_at_end
        return self.scheduler.post(self._begin, Trigger.REPLAY if from_start else Trigger.START)

    def stop(self):
        return self.scheduler.post(self._apply, Trigger.STOP)

    def configure_custom_folder(self, path: str):
        return self.scheduler.post(self._set_custom_folder, path)

    def close(self):
        fut = self.stop()
        if self._own_scheduler and self.scheduler.running:
            if not self.scheduler.on_worker():
                fut.result(timeout=5)
            self.scheduler.shutdown()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    # -- everything below runs on the scheduler --

    def tick(self):
        self._timer = None
        if not self.state.running:
            return
        try:
            today = self._clock().date()
            if today != self._day:
                logger.info("Day changed to %s, reconnecting", today)
                self._day = today
                self._apply(Trigger.DAY_CHANGED)
            elif self._folder_check_due():
                self._check_folder()
            self._apply(Trigger.POLL)
        finally:
            if self.state.running:
                self._schedule()

    def _on_timer(self, gen):
        if gen == self._gen:
            self.tick()

    def _begin(self, trigger: Trigger):
        self._day = self._clock().date()
        self._folder_checked = None
        self._recheck = False
        self._apply(trigger)

    def _set_custom_folder(self, path):
        path = path or ""
        if path == self.custom_folder:
            return
        self.custom_folder = path
        self._recheck = True

    def _apply(self, trigger: Trigger):
        self.state, effects = transition(self.state, trigger)
        for effect in effects:
            if effect is Effect.RELEASE:
                self._release()
            elif effect is Effect.CANCEL:
                self._cancel()
            elif effect is Effect.SCHEDULE:
                self._schedule()
            elif effect is Effect.CONNECT:
                self._apply(self._connect())
            elif effect is Effect.READ:
                self._read()

    def _schedule(self):
        self._cancel()
        self._timer = self.scheduler.call_later(self.poll_delay, self._on_timer, self._gen)

    def _cancel(self):
        self._gen += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _select(self) -> Optional[LogSource]:
        return select_folder(self.custom_folder, self._primary, self._secondary, self._day)

    def _folder_check_due(self) -> bool:
        if self.state.phase is not Phase.CONNECTED:
            return False
        if self._recheck:
            return True
        return self._folder_checked is not None and self._monotonic() - self._folder_checked >= self.folder_check

    def _check_folder(self):
        self._recheck = False
        current = self._select()
        if current is None or self.source is None or current.folders != self.source.folders:
            logger.info("Log folder changed to %s", current.folders.log_folder if current else None)
            self._folder_checked = None
            self._apply(Trigger.FOLDER_CHANGED)
        else:
            self._folder_checked = self._monotonic()

    def _connect(self) -> Trigger:
        source = self._select()
        if source is None:
            return Trigger.CONNECT_FAILED
        try:
            tail = self._open_tail(source.path, seek_to_end=self.state.seek_to_end)
        except LogNotFound:
            logger.debug("No log yet at %s", source.path)
            return Trigger.CONNECT_FAILED
        except ConnectError as e:
            logger.debug("Cannot open %s: %s", source.path, e)
            return Trigger.CONNECT_FAILED
        try:
            watch = self._watch_factory(source.root, self._zone_from_watcher, self.settings_file)
            if not watch.start():
                watch = None
        except Exception:
            tail.close()
            raise
        self.tail = tail
        self.watch = watch
        self.source = source
        self._folder_checked = self._monotonic()
        logger.info("Tailing %s from offset %d", source.path, tail.pos)
        return Trigger.CONNECTED

    def _release(self):
        tail, self.tail = self.tail, None
        watch, self.watch = self.watch, None
        try:
            if tail is not None:
                tail.close()
        finally:
            if watch is not None:
                watch.close()

    def _read(self):
        if self.tail is None:
            return
        try:
            events = self.tail.read_lines()
        except LogTruncated as e:
            logger.info("%s, reconnecting", e)
            self._apply(Trigger.TRUNCATED)
            return
        except OSError as e:
            logger.debug("Read failed on %s: %s", self.tail.path, e)
            self._apply(Trigger.READ_FAILED)
            return
        for ev in events:
            self._dispatch(ev)

    def _dispatch(self, ev: LineEvent):
        for cb in list(self._line_handlers):
            try:
                cb(ev.timestamp, ev.payload)
            except Exception:
                logger.exception("Line handler %r failed", cb)

    def _zone_from_watcher(self):
        self.scheduler.post(self._zone_changed)

    def _zone_changed(self):
        if self.state.phase is not Phase.CONNECTED:
            return
        for cb in list(self._zone_handlers):
            try:
                cb()
            except Exception:
                logger.exception("Zone handler %r failed", cb)
