import os
from dataclasses import dataclass
from datetime import date
from typing import Optional

LOG_SUBFOLDER = "ChatLogs"


def log_file_name(day: date) -> str:
    return f"Chat-{day.year % 100:02d}-{day.month:02d}-{day.day:02d}.log"


@dataclass(frozen=True)
class LogFolders:
    root: str
    log_folder: str

    @classmethod
    def under(cls, root: str) -> "LogFolders":
        return cls(root, os.path.join(root, LOG_SUBFOLDER))

    def file_for(self, day: date) -> str:
        return os.path.join(self.log_folder, log_file_name(day))


@dataclass(frozen=True)
class LogSource:
    folders: LogFolders
    day: date

    @property
    def path(self) -> str:
        return self.folders.file_for(self.day)

    @property
    def root(self) -> str:
        return self.folders.root


def _last_write(path: str) -> Optional[float]:
    try:
        return os.stat(path).st_mtime
    except OSError:
        return None


def select_folder(custom: str, primary: LogFolders, secondary: LogFolders, day: date) -> Optional[LogSource]:
    """Pick the folder the game is currently writing today's log into.

    A custom folder always wins and is taken as the log folder itself.
    Otherwise the candidate whose daily file was written most recently is
    chosen, the primary winning ties. None when neither file exists.
    """
    if custom:
        custom = os.path.normpath(custom)
        return LogSource(LogFolders(os.path.dirname(custom) or custom, custom), day)
    t1 = _last_write(primary.file_for(day))
    t2 = _last_write(secondary.file_for(day))
    if t1 is None and t2 is None:
        return None
    if t2 is None or (t1 is not None and t1 >= t2):
        return LogSource(primary, day)
    return LogSource(secondary, day)
