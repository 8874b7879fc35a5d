"""Watch orchestrator: discover sources, render them, and keep them rendered.

One loop rescans the input tree on a fixed interval. Every newly discovered
source is rendered once synchronously and then handed to its own watch thread,
which re-renders it on every change. Sources that disappear from the tree get
their watch thread stopped and their outputs deleted.
"""

from __future__ import annotations

import logging
import shutil
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from pumlwatch.core.config import WatchConfig
from pumlwatch.core.errors import DiscoveryError
from pumlwatch.core.logging import WatchLogger
from pumlwatch.render.base import Renderer
from pumlwatch.watch.detector import WatchResult, watch_file
from pumlwatch.watch.discovery import discover_sources, output_dir_for
from pumlwatch.watch.tracker import GenerationTracker, TrackResult

logger = logging.getLogger(__name__)

# How long shutdown waits for each watch thread. A thread blocked in a render
# finishes that render first.
JOIN_TIMEOUT = 5.0


@dataclass
class CycleResult:
    """Sources added and removed by one reconcile() cycle."""

    added: list[Path] = field(default_factory=list)
    removed: list[Path] = field(default_factory=list)
    renders: list[TrackResult] = field(default_factory=list)


class WatchTask:
    """Per-source loop: wait for a change, re-render, repeat.

    Ends when the source goes away or the task is stopped.
    """

    def __init__(
        self,
        source: Path,
        output_dir: Path,
        on_change: Callable[[Path, Path], object],
        events: WatchLogger,
        interval: float,
    ):
        self.source = source
        self.output_dir = output_dir
        self._on_change = on_change
        self._events = events
        self._interval = interval
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            name=f"watch:{source.name}",
            daemon=True,
        )
        self.result: WatchResult | None = None

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()

    def join(self, timeout: float | None = None) -> None:
        if self._thread.ident is not None:
            self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def _run(self) -> None:
        while True:
            result = watch_file(self.source, self._stop, interval=self._interval)
            if result is not WatchResult.CHANGED:
                self.result = result
                logger.debug("Stopped watching %s: %s", self.source, result.value)
                return
            if self._stop.is_set():
                self.result = WatchResult.CANCELLED
                return
            self._events.file_changed(self.source)
            self._on_change(self.source, self.output_dir)


class Orchestrator:
    """Keep the output tree in step with the input tree.

    Args:
        config: Resolved watch configuration.
        renderer: Renderer invoked for every source and format.
        events: Structured event logger; a private one is created if omitted.
        tracker: Generation tracker; built from ``renderer`` if omitted.
    """

    def __init__(
        self,
        config: WatchConfig,
        renderer: Renderer,
        events: WatchLogger | None = None,
        tracker: GenerationTracker | None = None,
    ):
        self.config = config
        self.events = events or WatchLogger()
        self.tracker = tracker or GenerationTracker(
            renderer, formats=config.formats, events=self.events,
        )
        self._tasks: dict[Path, WatchTask] = {}
        self._tasks_lock = threading.Lock()
        self._reconciled = False

    # -- Discovery --

    def scan(self) -> list[Path]:
        """Current eligible sources under the input root."""
        return discover_sources(
            self.config.input_dir,
            extension=self.config.source_extension,
            exclude_prefix=self.config.exclude_prefix,
        )

    def output_dir_for(self, source: Path) -> Path:
        return output_dir_for(source, self.config.input_dir, self.config.output_dir)

    def watched_sources(self) -> list[Path]:
        """Sources with a live watch task."""
        with self._tasks_lock:
            return sorted(path for path, task in self._tasks.items() if task.is_alive())

    def clean_output(self) -> None:
        """Remove everything under the output root.

        Generation records live only in memory, so output left by an earlier
        process can never be attributed or reclaimed. Call before the first
        reconcile().
        """
        output_root = self.config.output_dir
        if output_root.exists():
            logger.info("Removing stale output in %s", output_root)
            shutil.rmtree(output_root)
        output_root.mkdir(parents=True, exist_ok=True)

    # -- Cycle --

    def reconcile(self) -> CycleResult:
        """Run one discovery cycle.

        Raises DiscoveryError if the input root cannot be enumerated.
        """
        current = self.scan()
        current_set = set(current)
        cycle = CycleResult()

        for source in current:
            with self._tasks_lock:
                task = self._tasks.get(source)
            if task is not None and task.is_alive():
                continue

            self.events.file_added(source)
            output_dir = self.output_dir_for(source)
            # First render happens before the watch starts so output exists
            # by the time anything asks for it.
            cycle.renders.append(self.tracker.execute_and_track(source, output_dir))

            task = WatchTask(
                source,
                output_dir,
                on_change=self.tracker.execute_and_track,
                events=self.events,
                interval=self.config.poll_interval,
            )
            with self._tasks_lock:
                self._tasks[source] = task
            task.start()
            cycle.added.append(source)

        with self._tasks_lock:
            gone = sorted(path for path in self._tasks if path not in current_set)
            removed_tasks = [self._tasks.pop(path) for path in gone]

        for task in removed_tasks:
            task.stop()
        for task in removed_tasks:
            # A task past its stop check still finishes one render; reclaim after it exits.
            task.join(JOIN_TIMEOUT)
            if task.is_alive():
                logger.warning("Watch task for %s did not stop within %.1fs", task.source, JOIN_TIMEOUT)
            self.events.file_removed(task.source)
            self.tracker.reclaim(task.source)
            cycle.removed.append(task.source)

        self._reconciled = True
        return cycle

    def run(self, cancel: threading.Event) -> None:
        """Reconcile on every poll interval until ``cancel`` is set.

        A DiscoveryError before the first successful cycle is raised; later
        ones are logged and the cycle is skipped so a briefly unreadable input
        tree does not wipe the output tree.
        """
        try:
            while not cancel.is_set():
                try:
                    self.reconcile()
                except DiscoveryError as e:
                    if not self._reconciled:
                        raise
                    logger.error("Skipping discovery cycle: %s", e)

                if cancel.wait(self.config.poll_interval):
                    break
        finally:
            self.shutdown()

    def shutdown(self, timeout: float = JOIN_TIMEOUT) -> None:
        """Stop every watch task and wait for them to exit."""
        with self._tasks_lock:
            tasks = list(self._tasks.values())
            self._tasks.clear()

        for task in tasks:
            task.stop()
        for task in tasks:
            task.join(timeout)
            if task.is_alive():
                logger.warning("Watch task for %s did not stop within %.1fs", task.source, timeout)
