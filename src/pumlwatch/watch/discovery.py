"""Source file discovery and input→output path mirroring."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pumlwatch.core.config import EXCLUDE_PREFIX, SOURCE_EXTENSION
from pumlwatch.core.errors import DiscoveryError

logger = logging.getLogger(__name__)


def is_eligible(name: str, extension: str = SOURCE_EXTENSION, exclude_prefix: str = EXCLUDE_PREFIX) -> bool:
    """True if a file name should be rendered on its own."""
    if not name.endswith(extension):
        return False
    if exclude_prefix and name.startswith(exclude_prefix):
        return False
    return True


def discover_sources(
    input_root: str | Path,
    extension: str = SOURCE_EXTENSION,
    exclude_prefix: str = EXCLUDE_PREFIX,
) -> list[Path]:
    """Return every eligible source file under ``input_root``, sorted.

    Files starting with ``exclude_prefix`` are partials meant to be included
    from other diagrams and are skipped. Unreadable subdirectories are logged
    and skipped; only an unusable root raises DiscoveryError.
    """
    root = Path(input_root)
    if not root.exists():
        raise DiscoveryError(root, "does not exist")
    if not root.is_dir():
        raise DiscoveryError(root, "not a directory")
    try:
        os.scandir(root).close()
    except OSError as e:
        raise DiscoveryError(root, str(e)) from e

    def _on_error(err: OSError) -> None:
        logger.warning("Skipping unreadable directory %s: %s", err.filename, err.strerror)

    sources: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        dirnames.sort()
        for name in sorted(filenames):
            if is_eligible(name, extension, exclude_prefix):
                sources.append(Path(dirpath) / name)
    return sources


def output_dir_for(source: str | Path, input_root: str | Path, output_root: str | Path) -> Path:
    """Mirror a source file's directory from the input tree onto the output tree.

    ``/in/a/b/c.puml`` with input root ``/in`` maps to ``<output_root>/a/b``.
    """
    output_root = Path(output_root)
    try:
        rel = Path(source).relative_to(input_root)
    except ValueError:
        logger.warning("%s is not under input directory %s", source, input_root)
        return output_root

    rel_dir = rel.parent
    if rel_dir == Path("."):
        return output_root
    return output_root / rel_dir
