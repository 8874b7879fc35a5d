"""Polling change detection for a single file.

The detector compares (size, mtime) snapshots on a fixed interval instead of
relying on OS file events. It is stateless: callers re-arm it by calling
watch_file() again after each result.
"""

from __future__ import annotations

import os
import threading
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pumlwatch.core.config import POLL_INTERVAL


class WatchResult(Enum):
    """Why watch_file() returned."""

    CHANGED = "changed"
    CANCELLED = "cancelled"
    GONE = "gone"
    TIMEOUT = "timeout"  # only with an explicit timeout


@dataclass(frozen=True)
class FileSnapshot:
    """Size and modification time of a file at one instant."""

    size: int
    mtime_ns: int

    @classmethod
    def take(cls, path: str | Path) -> FileSnapshot:
        """Stat ``path``. Raises OSError if it cannot be read."""
        st = os.stat(path)
        return cls(size=st.st_size, mtime_ns=st.st_mtime_ns)


def watch_file(
    path: str | Path,
    cancel: threading.Event,
    *,
    interval: float = POLL_INTERVAL,
    timeout: float | None = None,
) -> WatchResult:
    """Block until ``path`` changes, disappears, or ``cancel`` is set.

    Every wait races ``cancel`` against the polling timer, so a cancelled
    watch returns within one interval. A stat failure at any point (including
    the first one) is reported as GONE.
    """
    if cancel.is_set():
        return WatchResult.CANCELLED

    try:
        initial = FileSnapshot.take(path)
    except OSError:
        return WatchResult.GONE

    deadline = None if timeout is None else time.monotonic() + timeout

    while True:
        wait = interval
        if deadline is not None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return WatchResult.TIMEOUT
            wait = min(wait, remaining)

        if cancel.wait(wait):
            return WatchResult.CANCELLED

        try:
            current = FileSnapshot.take(path)
        except OSError:
            return WatchResult.GONE

        if current != initial:
            return WatchResult.CHANGED
