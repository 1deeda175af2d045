#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from datetime import date
from logging.handlers import RotatingFileHandler

from rich.box import ROUNDED
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from config import load_config, resolve_folders
from tailer import ChatTailer
from utils import chat_markup

console = Console()


def setup_logging():
    level_name = os.getenv("PGCHAT_LOG_LEVEL", "WARNING").upper()
    level = getattr(logging, level_name, logging.WARNING)
    handlers = [RichHandler(console=console, show_path=False)]
    log_file = os.getenv("PGCHAT_LOG_FILE")
    if log_file:
        fh = RotatingFileHandler(os.path.abspath(log_file), maxBytes=5_000_000, backupCount=3, encoding="utf-8")
        fh.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s"))
        handlers.append(fh)
    logging.basicConfig(level=level, format="%(message)s", handlers=handlers, force=True)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Follow the game's chat log and print new lines")
    p.add_argument("--config", default="config.json", help="config file (created with defaults if missing)")
    p.add_argument("--folder", default=None, help="read logs from this folder instead of the detected one")
    p.add_argument("--from-start", action="store_true", help="print today's log from its first line")
    return p.parse_args(argv)


def build_tailer(conf) -> ChatTailer:
    primary, secondary = resolve_folders(conf)
    return ChatTailer(
        primary,
        secondary,
        custom_folder=str(conf["folders"].get("custom", "")),
        poll_delay=float(conf["poll_delay"]),
        folder_check=float(conf["folder_check"]),
        start_at_end=bool(conf["start_at_end"]),
        settings_file=str(conf["settings_file"]),
    )


def show_folders(tailer: ChatTailer):
    t = Table(title="Chat logs", show_header=False, box=ROUNDED)
    t.add_column(justify="left")
    t.add_column(justify="left")
    t.add_row("Primary", tailer.primary.log_folder)
    t.add_row("Secondary", tailer.secondary.log_folder)
    t.add_row("Custom", tailer.custom_folder or "-")
    console.print(t)


def main(argv=None):
    args = parse_args(argv)
    setup_logging()
    try:
        conf = load_config(args.config)
    except (OSError, ValueError) as e:
        console.print(f"[red]Cannot load {args.config}: {e}[/red]")
        return 1
    if args.folder is not None:
        conf["folders"]["custom"] = args.folder
    if args.from_start:
        conf["start_at_end"] = False

    tailer = build_tailer(conf)
    console.print(Panel.fit("[bold cyan]Chat tail[/bold cyan] — Ctrl+C to quit", box=ROUNDED))
    show_folders(tailer)

    @tailer.on_line
    def _print_line(ts, payload):
        console.print(chat_markup(ts, payload, date.today()))

    @tailer.on_zone_changed
    def _print_zone():
        console.print("[yellow]-- zone changed --[/yellow]")

    tailer.start()
    try:
        while True:
            time.sleep(1.0)
    except KeyboardInterrupt:
        console.print("\n[bold]Stopped[/bold]")
    finally:
        tailer.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
