"""
Small utility functions.
"""

from __future__ import annotations

import datetime as dt
import re
import subprocess
import sys


def meeting_note_name(now: dt.datetime) -> str:
    """e.g. `2025-03-04 3.07 PM - Meeting Notes.md`"""
    ampm = "PM" if now.hour >= 12 else "AM"
    hour = now.hour % 12 or 12
    return f"{now:%Y-%m-%d} {hour}.{now:%M} {ampm} - Meeting Notes.md"


def safe_filename(name: str, max_len: int = 120) -> str:
    name = re.sub(r"[\/\\:\*\?\"<>\|]+", "-", name.strip())
    name = re.sub(r"\s+", " ", name).strip()
    return (name[:max_len].rstrip() or "Untitled")


def send_notification(title: str, message: str = "", sound: bool = True) -> None:
    """Send a macOS notification. Does nothing on other platforms."""
    if sys.platform != "darwin":
        return

    script = f'display notification "{message}" with title "{title}"'
    if sound:
        script += ' sound name "Glass"'

    try:
        subprocess.run(
            ["osascript", "-e", script],
            check=False,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except FileNotFoundError:
        pass  # osascript not available
