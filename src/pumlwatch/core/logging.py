"""Structured logging and verbosity levels for the watcher."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import IntEnum
from pathlib import Path
from typing import Any

logger = logging.getLogger("pumlwatch")


class Verbosity(IntEnum):
    """Verbosity levels for console output."""

    DEFAULT = 0   # Warnings and lifecycle messages
    VERBOSE = 1   # + per-file and per-render events
    DEBUG = 2     # + renderer output, detector details


def setup_logging(verbosity: int = Verbosity.DEFAULT) -> None:
    """Configure logging based on verbosity."""
    if verbosity >= Verbosity.DEBUG:
        level = logging.DEBUG
    elif verbosity >= Verbosity.VERBOSE:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    # Lifecycle messages stay visible at the default level.
    logger.setLevel(min(level, logging.INFO))


@dataclass
class WatchStats:
    """Counters accumulated over the lifetime of a watcher."""

    files_added: int = 0
    files_removed: int = 0
    files_changed: int = 0
    renders: int = 0
    render_failures: int = 0
    artifacts_deleted: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "files_added": self.files_added,
            "files_removed": self.files_removed,
            "files_changed": self.files_changed,
            "renders": self.renders,
            "render_failures": self.render_failures,
            "artifacts_deleted": self.artifacts_deleted,
        }


class WatchLogger:
    """Structured event logger shared by the orchestrator and tracker.

    Every event goes to the standard ``pumlwatch`` logger, bumps the matching
    WatchStats counter, and, when ``log_dir`` is given, is appended to
    ``log_dir/<run_id>.jsonl``. Safe to call from any watch thread.
    """

    def __init__(self, log_dir: Path | None = None):
        self.run_id = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        self.stats = WatchStats()
        self._lock = threading.Lock()
        self._log_file = None
        self._log_path: Path | None = None

        if log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            self._log_path = log_dir / f"{self.run_id}.jsonl"
            self._log_file = open(self._log_path, "a")

    @property
    def log_path(self) -> Path | None:
        return self._log_path

    def _write_event(self, event: dict[str, Any]) -> None:
        """Write a JSON event to the JSONL log file. Caller holds the lock."""
        if self._log_file is not None:
            event["timestamp"] = datetime.now(timezone.utc).isoformat()
            self._log_file.write(json.dumps(event) + "\n")
            self._log_file.flush()

    # -- Source file events --

    def file_added(self, source: Path) -> None:
        with self._lock:
            self.stats.files_added += 1
            self._write_event({"event": "file_added", "source": str(source)})
        logger.info("Watching new file: %s", source)

    def file_removed(self, source: Path) -> None:
        with self._lock:
            self.stats.files_removed += 1
            self._write_event({"event": "file_removed", "source": str(source)})
        logger.info("File removed: %s", source)

    def file_changed(self, source: Path) -> None:
        with self._lock:
            self.stats.files_changed += 1
            self._write_event({"event": "file_changed", "source": str(source)})
        logger.info("File changed: %s", source)

    # -- Render events --

    def render_finished(self, source: Path, fmt: str, ok: bool, elapsed: float) -> None:
        with self._lock:
            self.stats.renders += 1
            if not ok:
                self.stats.render_failures += 1
            self._write_event({
                "event": "render_finished",
                "source": str(source),
                "format": fmt,
                "ok": ok,
                "time_seconds": round(elapsed, 3),
            })
        if ok:
            logger.debug("Rendered %s as %s (%.2fs)", source, fmt, elapsed)
        else:
            logger.warning("Render of %s as %s failed (%.2fs)", source, fmt, elapsed)

    def artifact_deleted(self, artifact: Path, source: Path) -> None:
        with self._lock:
            self.stats.artifacts_deleted += 1
            self._write_event({
                "event": "artifact_deleted",
                "artifact": str(artifact),
                "source": str(source),
            })
        logger.info("Deleted orphaned output: %s", artifact)

    def close(self) -> None:
        """Flush and close the JSONL log file."""
        with self._lock:
            if self._log_file is not None:
                self._write_event({"event": "shutdown", **self.stats.to_dict()})
                self._log_file.close()
                self._log_file = None
