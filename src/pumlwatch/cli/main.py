"""pumlwatch CLI: main entry point and shared utilities."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from pumlwatch.core.config import WatchConfig
from pumlwatch.core.errors import ConfigError
from pumlwatch.core.logging import WatchStats

console = Console()


def watch_options(fn):
    """Shared Click options locating the source tree, output tree and renderer.

    Every option falls back to the PUMLWATCH_* settings when omitted.
    """
    options = [
        click.option("--input", "input_dir", type=click.Path(file_okay=False, path_type=Path),
                     default=None, help="Directory of .puml sources (default: input)"),
        click.option("--output", "output_dir", type=click.Path(file_okay=False, path_type=Path),
                     default=None, help="Directory for rendered diagrams (default: output)"),
        click.option("--plantuml-path", type=click.Path(dir_okay=False, path_type=Path),
                     default=None, help="Path to plantuml.jar"),
        click.option("--java", "java_path", default=None, help="Java executable"),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


def resolve_config(
    input_dir: Path | None,
    output_dir: Path | None,
    plantuml_path: Path | None,
    java_path: str | None,
) -> WatchConfig:
    """Merge CLI options over settings. Exits with status 1 on invalid config."""
    from pumlwatch.config import get_settings

    overrides = {
        key: value
        for key, value in {
            "input_dir": input_dir,
            "output_dir": output_dir,
            "plantuml_path": plantuml_path,
            "java_path": java_path,
        }.items()
        if value is not None
    }
    settings = get_settings().model_copy(update=overrides)
    try:
        return WatchConfig.from_settings(settings)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


def stats_table(stats: WatchStats) -> Table:
    """Rich table summarizing a watcher's lifetime counters."""
    table = Table(title="Watch Summary")
    table.add_column("Event")
    table.add_column("Count", justify="right")
    for key, value in stats.to_dict().items():
        style = "red" if key == "render_failures" and value else None
        table.add_row(key.replace("_", " "), str(value), style=style)
    return table


@click.group()
@click.version_option(package_name="pumlwatch")
def main():
    """pumlwatch: render PlantUML diagrams on change and serve them live."""
    pass


def cli():
    """Entrypoint that loads .env before running the CLI."""
    from dotenv import load_dotenv

    load_dotenv()
    main()


# Import subcommand modules to register commands
from pumlwatch.cli.render_commands import render  # noqa: E402
from pumlwatch.cli.serve_commands import serve  # noqa: E402

main.add_command(serve)
main.add_command(render)
