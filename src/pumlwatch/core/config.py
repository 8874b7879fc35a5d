"""Runtime configuration for the watcher, resolved paths and fixed constants."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from pumlwatch.core.errors import ConfigError

if TYPE_CHECKING:
    from pumlwatch.config import Settings

# Polling interval (seconds) for both per-file change detection and the
# discovery cycle. Not user-configurable.
POLL_INTERVAL = 0.1

SOURCE_EXTENSION = ".puml"

# Sources whose name starts with this are include-only partials.
EXCLUDE_PREFIX = "_"

# Formats rendered for every source, in render order.
OUTPUT_FORMATS: tuple[str, ...] = ("svg", "png")

FORMAT_EXTENSIONS = {
    "svg": ".svg",
    "png": ".png",
}

FORMAT_MIME_TYPES = {
    "svg": "image/svg+xml",
    "png": "image/png",
}


@dataclass(frozen=True)
class WatchConfig:
    """Resolved configuration consumed by the orchestrator.

    ``input_dir`` and ``output_dir`` are always absolute.
    """

    input_dir: Path
    output_dir: Path
    plantuml_path: Path = Path("plantuml.jar")
    java_path: str = "java"
    poll_interval: float = POLL_INTERVAL
    formats: tuple[str, ...] = OUTPUT_FORMATS
    source_extension: str = SOURCE_EXTENSION
    exclude_prefix: str = EXCLUDE_PREFIX

    @classmethod
    def from_paths(
        cls,
        input_dir: str | Path,
        output_dir: str | Path,
        **kwargs,
    ) -> WatchConfig:
        """Build a config from possibly-relative paths.

        Raises ConfigError if the output tree overlaps the input tree in
        either direction.
        """
        input_path = Path(input_dir).expanduser().resolve()
        output_path = Path(output_dir).expanduser().resolve()

        if input_path == output_path:
            msg = f"input and output directories must differ (both {input_path})"
            raise ConfigError(msg)
        if output_path.is_relative_to(input_path):
            msg = f"output directory {output_path} is inside input directory {input_path}"
            raise ConfigError(msg)
        # Stale output is cleared on startup, which must never reach the sources.
        if input_path.is_relative_to(output_path):
            msg = f"input directory {input_path} is inside output directory {output_path}"
            raise ConfigError(msg)

        for fmt in kwargs.get("formats", OUTPUT_FORMATS):
            if fmt not in FORMAT_EXTENSIONS:
                msg = f"unsupported output format: {fmt!r}"
                raise ConfigError(msg)

        return cls(input_dir=input_path, output_dir=output_path, **kwargs)

    @classmethod
    def from_settings(cls, settings: Settings) -> WatchConfig:
        """Create a WatchConfig from loaded Settings."""
        return cls.from_paths(
            settings.input_dir,
            settings.output_dir,
            plantuml_path=Path(settings.plantuml_path).expanduser(),
            java_path=settings.java_path,
        )
