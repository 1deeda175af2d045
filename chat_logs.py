import codecs
import os
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

HEADER_WIDTH = 18
HEADER_TAB = 17
LINE_END = "\r\n"
# longest unterminated tail kept between reads
MAX_PENDING = 64 * 1024
# YY-MM-DD\tHH:MM:SS\t
_FIELDS = (0, 3, 6, 9, 12, 15)


class ChatLogError(Exception):
    pass


class ConnectError(ChatLogError):
    pass


class LogNotFound(ConnectError):
    pass


class LogUnavailable(ConnectError):
    pass


class LogTruncated(ChatLogError):
    def __init__(self, path, offset, size):
        super().__init__(f"{path} shrank from {offset} to {size} bytes")
        self.path = path
        self.offset = offset
        self.size = size


@dataclass(frozen=True)
class LineEvent:
    timestamp: datetime
    payload: str


def _two_digits(line: str, at: int) -> Optional[int]:
    s = line[at:at + 2]
    if len(s) != 2 or not (s.isascii() and s.isdigit()):
        return None
    return int(s)


def parse_line(line: str) -> Optional[LineEvent]:
    """Split one log line into its timestamp and payload.

    Returns None for anything that does not carry the fixed header:
    diagnostic lines, blank lines and impossible dates are all dropped.
    """
    if len(line) <= HEADER_WIDTH or line[HEADER_TAB] != "\t":
        return None
    values = [_two_digits(line, at) for at in _FIELDS]
    if None in values:
        return None
    yy, month, day, hour, minute, second = values
    try:
        ts = datetime(2000 + yy, month, day, hour, minute, second)
    except ValueError:
        return None
    return LineEvent(ts, line[HEADER_WIDTH:])


def split_lines(text: str) -> List[str]:
    lines = text.split(LINE_END)
    return [ln.rstrip("\r\n") for ln in lines]


def decode(text: str) -> List[LineEvent]:
    """Decode a self-contained chunk of log text.

    A line cut at the end of the chunk is parsed as-is (and usually
    dropped); use LineBuffer when chunks come from successive reads.
    """
    out = []
    for line in split_lines(text):
        ev = parse_line(line)
        if ev is not None:
            out.append(ev)
    return out


class LineBuffer:
    """Carries the unterminated tail of one read over to the next."""

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self.pending = ""

    def feed(self, data: bytes) -> List[LineEvent]:
        text = self.pending + self._decoder.decode(data)
        lines = text.split(LINE_END)
        self.pending = lines.pop()
        if len(self.pending) > MAX_PENDING:
            self.pending = ""
        out = []
        for line in lines:
            ev = parse_line(line.rstrip("\r\n"))
            if ev is not None:
                out.append(ev)
        return out

    def reset(self):
        self._decoder.reset()
        self.pending = ""


class LogTail:
    """Read cursor into one chat log file.

    The file is only ever read; the game keeps appending to it while it is
    open. The offset moves forward by the number of bytes actually read.
    """

    def __init__(self, path):
        self.path = path
        self.pos = 0
        self.f = None
        self.buffer = LineBuffer()

    @classmethod
    def open(cls, path, seek_to_end: bool = False) -> "LogTail":
        tail = cls(path)
        try:
            tail.f = open(path, "rb")
        except FileNotFoundError as e:
            raise LogNotFound(str(e)) from e
        except OSError as e:
            raise LogUnavailable(str(e)) from e
        if seek_to_end:
            tail.pos = tail.f.seek(0, os.SEEK_END)
        return tail

    @property
    def connected(self) -> bool:
        return self.f is not None

    def size(self) -> int:
        return os.fstat(self.f.fileno()).st_size

    def read_new_bytes(self) -> bytes:
        if self.f is None:
            return b""
        size = self.size()
        if size < self.pos:
            raise LogTruncated(self.path, self.pos, size)
        if size == self.pos:
            return b""
        self.f.seek(self.pos)
        data = self.f.read(size - self.pos)
        self.pos += len(data)
        return data

    def read_lines(self) -> List[LineEvent]:
        data = self.read_new_bytes()
        if not data:
            return []
        return self.buffer.feed(data)

    def close(self):
        if self.f is not None:
            try:
                self.f.close()
            finally:
                self.f = None
                self.buffer.reset()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False
