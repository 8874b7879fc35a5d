"""Shared test fixtures for pumlwatch."""

from __future__ import annotations

import itertools
import os
import threading
import time
from pathlib import Path

import pytest

from pumlwatch.core.config import FORMAT_EXTENSIONS, WatchConfig
from pumlwatch.render.base import Renderer, RenderResult

# Artifacts written by FakeRenderer get strictly increasing mtimes one second
# apart, so mtime comparisons never depend on filesystem timestamp resolution.
_MTIME_BASE_NS = time.time_ns()
_mtime_counter = itertools.count(1)


def next_mtime_ns() -> int:
    return _MTIME_BASE_NS + next(_mtime_counter) * 1_000_000_000


def write_artifact(path: Path, content: str = "<svg/>") -> Path:
    """Write a file and stamp it with a fresh, strictly later mtime."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    mtime = next_mtime_ns()
    os.utime(path, ns=(mtime, mtime))
    return path


def bump_source(path: Path) -> None:
    """Change a source so a polling detector sees a different snapshot."""
    path.write_text(path.read_text() + "' edit\n")
    mtime = next_mtime_ns()
    os.utime(path, ns=(mtime, mtime))


class FakeRenderer(Renderer):
    """Stand-in for PlantUML.

    Writes ``<name>.<ext>`` for every diagram name configured for the source
    (default: the source stem). Records every call.
    """

    def __init__(self, diagrams: dict[str, list[str]] | None = None, delay: float = 0.0):
        self.diagrams = diagrams if diagrams is not None else {}
        self.delay = delay
        self.fail = False
        self.write = True
        self.skip_formats: set[str] = set()
        self.calls: list[tuple[Path, Path, str]] = []
        self._lock = threading.Lock()

    def render(self, source: Path, output_dir: Path, fmt: str) -> RenderResult:
        with self._lock:
            self.calls.append((source, output_dir, fmt))
        if self.delay:
            time.sleep(self.delay)
        if self.fail:
            return RenderResult(fmt=fmt, returncode=1, output="Error line 1 in file")
        if self.write and fmt not in self.skip_formats:
            for name in self.diagrams.get(source.name, [source.stem]):
                write_artifact(output_dir / f"{name}{FORMAT_EXTENSIONS[fmt]}", f"<{name} {fmt}/>")
        return RenderResult(fmt=fmt, returncode=0)

    def calls_for(self, source: Path) -> list[str]:
        with self._lock:
            return [fmt for src, _out, fmt in self.calls if src == source]


@pytest.fixture
def input_root(tmp_path):
    root = tmp_path / "input"
    root.mkdir()
    return root


@pytest.fixture
def output_root(tmp_path):
    root = tmp_path / "output"
    root.mkdir()
    return root


@pytest.fixture
def watch_config(input_root, output_root):
    """Config with a short poll interval for fast tests."""
    return WatchConfig.from_paths(input_root, output_root, poll_interval=0.02)


@pytest.fixture
def fake_renderer():
    return FakeRenderer()


@pytest.fixture
def make_source(input_root):
    """Create a .puml source under the input root."""

    def _make(rel: str, body: str = "@startuml\nA -> B\n@enduml\n") -> Path:
        path = input_root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(body)
        return path

    return _make


@pytest.fixture
def wait_until():
    """Poll a predicate until it holds or the timeout expires."""

    def _wait(predicate, timeout: float = 5.0, interval: float = 0.01) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(interval)
        return predicate()

    return _wait


@pytest.fixture
def artifact_writer():
    return write_artifact


@pytest.fixture
def touch_source():
    return bump_source
