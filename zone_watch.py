"""Settings file watch used to signal zone changes.

The game rewrites its settings file in the root folder whenever the player
changes zone. This is a secondary, best-effort signal: nothing here is
allowed to break log tailing.
"""

import logging
import os

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)

SETTINGS_FILE = "GorgonSettings.txt"


class _SettingsHandler(FileSystemEventHandler):
    def __init__(self, filename, callback):
        self.filename = filename
        self.callback = callback

    def on_modified(self, event):
        if event.is_directory:
            return
        if os.path.basename(os.fsdecode(event.src_path)) == self.filename:
            self.callback()


class ZoneWatch:
    def __init__(self, root: str, on_change, filename: str = SETTINGS_FILE):
        self.root = root
        self.filename = filename
        self.on_change = on_change
        self.observer = None

    def start(self) -> bool:
        if self.observer is not None:
            return True
        observer = Observer()
        try:
            observer.schedule(_SettingsHandler(self.filename, self.on_change), self.root, recursive=False)
            observer.start()
        except OSError as e:
            observer.stop()
            logger.debug("Cannot watch %s: %s", self.root, e)
            return False
        self.observer = observer
        return True

    def close(self):
        if self.observer is None:
            return
        observer, self.observer = self.observer, None
        observer.stop()
        observer.join(timeout=2)
