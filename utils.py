from datetime import datetime

from rich.markup import escape


def fmt_clock(ts: datetime, today=None) -> str:
    if today is not None and ts.date() != today:
        return ts.strftime("%y-%m-%d %H:%M:%S")
    return ts.strftime("%H:%M:%S")


def chat_markup(ts: datetime, payload: str, today=None) -> str:
    return f"[grey50][{fmt_clock(ts, today)}][/grey50] {escape(payload)}"
