"""Generation tracking: which output artifacts each source file produced.

A single PlantUML source can define several diagrams, so one render may write
any number of files. The tracker attributes output to a render by diffing the
output directory before and after it runs, remembers the result per source,
and deletes files that a source no longer produces.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path

from pumlwatch.core.config import FORMAT_EXTENSIONS, OUTPUT_FORMATS
from pumlwatch.core.logging import WatchLogger
from pumlwatch.render.base import Renderer, RenderResult

logger = logging.getLogger(__name__)


@dataclass
class TrackResult:
    """Outcome of one execute_and_track() call."""

    source: Path
    output_dir: Path
    generated: frozenset[Path] = frozenset()
    deleted: list[Path] = field(default_factory=list)
    renders: list[RenderResult] = field(default_factory=list)
    used_fallback: bool = False

    @property
    def ok(self) -> bool:
        return bool(self.renders) and all(r.ok for r in self.renders)


def collect_artifacts(directory: Path, extensions: tuple[str, ...]) -> dict[Path, int]:
    """Map every artifact under ``directory`` (recursively) to its mtime in ns.

    Unreadable directories and files that vanish mid-walk are skipped.
    """
    artifacts: dict[Path, int] = {}
    if not directory.is_dir():
        return artifacts

    def _on_error(err: OSError) -> None:
        logger.warning("Skipping unreadable output directory %s: %s", err.filename, err.strerror)

    for dirpath, _dirnames, filenames in os.walk(directory, onerror=_on_error):
        for name in filenames:
            if not name.endswith(extensions):
                continue
            path = Path(dirpath) / name
            try:
                artifacts[path] = path.stat().st_mtime_ns
            except OSError:
                continue
    return artifacts


def classify_generated(before: dict[Path, int], after: dict[Path, int]) -> set[Path]:
    """Artifacts that are new, or whose mtime strictly advanced, between snapshots."""
    generated = set()
    for path, mtime in after.items():
        previous = before.get(path)
        if previous is None or mtime > previous:
            generated.add(path)
    return generated


def expected_artifacts(source: Path, output_dir: Path, formats: tuple[str, ...]) -> list[Path]:
    """Naming heuristic: ``<output_dir>/<source stem>.<format extension>``.

    This is an approximation. It matches PlantUML's default naming for a
    single-diagram source but not sources that name their diagrams explicitly.
    """
    return [output_dir / f"{source.stem}{FORMAT_EXTENSIONS[fmt]}" for fmt in formats]


class GenerationTracker:
    """Render sources and keep the source → artifacts generation record.

    All record access, and every snapshot-render-diff cycle, runs under one
    lock. The diff attributes any changed file in the output subtree to the
    running render, so two renders into overlapping directories must never
    interleave.
    """

    def __init__(
        self,
        renderer: Renderer,
        formats: tuple[str, ...] = OUTPUT_FORMATS,
        events: WatchLogger | None = None,
    ):
        self.renderer = renderer
        self.formats = tuple(formats)
        self.extensions = tuple(FORMAT_EXTENSIONS[fmt] for fmt in self.formats)
        self.events = events or WatchLogger()
        self._records: dict[Path, frozenset[Path]] = {}
        self._lock = threading.RLock()

    # -- Read accessors --

    def generated_for(self, source: Path) -> frozenset[Path]:
        """Artifacts currently attributed to ``source`` (empty if untracked)."""
        with self._lock:
            return self._records.get(Path(source), frozenset())

    def tracked_sources(self) -> list[Path]:
        with self._lock:
            return sorted(self._records)

    def snapshot(self) -> dict[Path, frozenset[Path]]:
        """Copy of the whole generation record."""
        with self._lock:
            return dict(self._records)

    def owner_of(self, artifact: Path) -> Path | None:
        """The source an artifact is attributed to, if any."""
        with self._lock:
            for source, artifacts in self._records.items():
                if artifact in artifacts:
                    return source
        return None

    # -- Mutations --

    def execute_and_track(self, source: Path, output_dir: Path) -> TrackResult:
        """Render ``source`` in every format and update its generation record.

        Artifacts that the source produced last time but not this time are
        deleted. Render failures are logged and never raised.
        """
        source = Path(source)
        output_dir = Path(output_dir)
        result = TrackResult(source=source, output_dir=output_dir)

        with self._lock:
            try:
                output_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.error("Cannot create output directory %s: %s", output_dir, e)
                return result

            before = collect_artifacts(output_dir, self.extensions)

            for fmt in self.formats:
                start = time.time()
                render = self.renderer.render(source, output_dir, fmt)
                result.renders.append(render)
                self.events.render_finished(source, fmt, render.ok, time.time() - start)

            after = collect_artifacts(output_dir, self.extensions)
            generated = classify_generated(before, after)

            if not generated and not any(r.ok for r in result.renders):
                # Nothing rendered: keep the stale output until the next change.
                logger.warning("All renders of %s failed, keeping previous output", source)
                result.generated = self._records.get(source, frozenset())
                return result

            if not generated:
                result.used_fallback = True
                generated = {
                    path for path in expected_artifacts(source, output_dir, self.formats)
                    if path.exists()
                }
                if generated:
                    logger.debug("No changed outputs detected for %s, using expected names", source)

            # Claimed artifacts move away from any other source that had them.
            for other, artifacts in list(self._records.items()):
                if other != source and artifacts & generated:
                    self._records[other] = artifacts - generated

            previous = self._records.get(source, frozenset())
            for orphan in sorted(previous - generated):
                if self._delete(orphan, source):
                    result.deleted.append(orphan)

            result.generated = frozenset(generated)
            self._records[source] = result.generated

        return result

    def reclaim(self, source: Path) -> list[Path]:
        """Delete every artifact tracked for ``source`` and forget it."""
        source = Path(source)
        deleted: list[Path] = []
        with self._lock:
            artifacts = self._records.pop(source, frozenset())
            for artifact in sorted(artifacts):
                if self._delete(artifact, source):
                    deleted.append(artifact)
        return deleted

    def _delete(self, artifact: Path, source: Path) -> bool:
        """Remove one artifact. Returns True if it was deleted by this call.

        Caller holds the lock.
        """
        for other, artifacts in self._records.items():
            if other != source and artifact in artifacts:
                return False
        try:
            artifact.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error("Failed to delete orphaned output %s: %s", artifact, e)
            return False
        self.events.artifact_deleted(artifact, source)
        return True
