"""PlantUML renderer: runs ``java -jar plantuml.jar`` as a subprocess."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from pumlwatch.render.base import Renderer, RenderResult

logger = logging.getLogger(__name__)

# PlantUML output type flags.
FORMAT_FLAGS = {
    "svg": "-tsvg",
    "png": "-tpng",
}


class PlantUMLRenderer(Renderer):
    """Render diagrams with the PlantUML jar.

    Args:
        jar_path: Path to plantuml.jar.
        java_path: Java executable used to run the jar.
        timeout: Optional wall-clock limit per invocation, in seconds.
    """

    def __init__(self, jar_path: str | Path, java_path: str = "java", timeout: float | None = None):
        self.jar_path = Path(jar_path)
        self.java_path = java_path
        self.timeout = timeout

    def command(self, source: Path, output_dir: Path, fmt: str) -> list[str]:
        """Build the argument list for one invocation."""
        flag = FORMAT_FLAGS.get(fmt)
        if flag is None:
            logger.warning("Unknown format %r, defaulting to SVG", fmt)
            flag = FORMAT_FLAGS["svg"]
        return [
            self.java_path, "-jar", str(self.jar_path),
            "-o", str(output_dir),
            flag,
            str(source),
        ]

    def render(self, source: Path, output_dir: Path, fmt: str) -> RenderResult:
        cmd = self.command(source, output_dir, fmt)
        result = RenderResult(fmt=fmt)

        try:
            proc = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            result.error = f"timed out after {e.timeout}s"
            logger.error("PlantUML timed out rendering %s: %s", source, result.error)
            return result
        except OSError as e:
            result.error = str(e)
            logger.error("Failed executing %s: %s", cmd[0], e)
            return result

        result.returncode = proc.returncode
        result.output = proc.stdout or ""

        if proc.returncode != 0:
            logger.error("PlantUML exited with code %d for %s", proc.returncode, source)
        if result.output:
            logger.info("PlantUML output for %s:\n%s", source, result.output.rstrip())

        return result
