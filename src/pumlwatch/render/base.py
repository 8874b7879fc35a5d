"""Renderer contract: the external process that turns a source into artifacts."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass
class RenderResult:
    """Outcome of one renderer invocation for one format.

    ``returncode`` is None when the process could not be launched at all, in
    which case ``error`` holds the reason.
    """

    fmt: str
    returncode: int | None = None
    output: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.returncode == 0


class Renderer(ABC):
    """Abstract base for renderers.

    Implementations are synchronous and must not raise for render failures;
    failures are reported through the returned RenderResult. The output
    directory exists before render() is called.
    """

    @abstractmethod
    def render(self, source: Path, output_dir: Path, fmt: str) -> RenderResult:
        """Render ``source`` into ``output_dir`` in the given format."""
        ...
