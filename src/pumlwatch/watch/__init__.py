"""Source watching, rendering, and output tracking."""

from pumlwatch.watch.detector import FileSnapshot, WatchResult, watch_file
from pumlwatch.watch.discovery import discover_sources, output_dir_for
from pumlwatch.watch.orchestrator import CycleResult, Orchestrator, WatchTask
from pumlwatch.watch.tracker import GenerationTracker, TrackResult

__all__ = [
    "CycleResult",
    "FileSnapshot",
    "GenerationTracker",
    "Orchestrator",
    "TrackResult",
    "WatchResult",
    "WatchTask",
    "discover_sources",
    "output_dir_for",
    "watch_file",
]
