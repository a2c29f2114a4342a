"""
Timing, debug and notice helpers.

`status` and `step` print timestamped lines only when DEBUG_TIMING is on.
`notice` is the always-visible channel for anything the user must see,
including failures that the pipeline skips over.
"""

from __future__ import annotations

import datetime as dt
import sys
import time
from contextlib import contextmanager

DEBUG_TIMING: bool = False
START_TS: float = time.perf_counter()


def _now_str() -> str:
    return dt.datetime.now().strftime("%H:%M:%S")


def _elapsed() -> str:
    return f"{time.perf_counter() - START_TS:.1f}s"


def status(msg: str) -> None:
    """Timestamped status messages (debug only)."""
    if not DEBUG_TIMING:
        return
    print(f"[{_now_str()} +{_elapsed():>6}] {msg}", flush=True)


def notice(msg: str) -> None:
    """User-visible message, always printed to stderr."""
    if DEBUG_TIMING:
        status(msg)
        return
    print(msg, file=sys.stderr, flush=True)


@contextmanager
def step(msg: str):
    """Timed step context manager (debug only). Marks steps that raised."""
    if not DEBUG_TIMING:
        yield
        return
    t0 = time.perf_counter()
    status(f"{msg} …")
    ok = False
    try:
        yield
        ok = True
    finally:
        mark = "✓" if ok else "✗"
        status(f"{msg} {mark} ({time.perf_counter() - t0:.1f}s)")
