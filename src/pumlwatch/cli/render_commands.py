"""Render command: one-shot rendering of the whole source tree."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.table import Table

from pumlwatch.cli.main import console, resolve_config, watch_options
from pumlwatch.core.errors import DiscoveryError
from pumlwatch.render import PlantUMLRenderer


@click.command()
@watch_options
@click.option("--keep-output", is_flag=True, help="Do not clear the output directory first")
@click.option("--verbose", "-v", count=True, help="Verbosity level: -v per-file events, -vv renderer output")
def render(
    input_dir: Path | None,
    output_dir: Path | None,
    plantuml_path: Path | None,
    java_path: str | None,
    keep_output: bool,
    verbose: int,
):
    """Render every diagram once and exit.

    Exits with status 1 if any diagram failed to render.
    """
    from pumlwatch.core.logging import setup_logging
    from pumlwatch.watch import Orchestrator

    setup_logging(verbose)
    config = resolve_config(input_dir, output_dir, plantuml_path, java_path)
    renderer = PlantUMLRenderer(config.plantuml_path, java_path=config.java_path)
    orchestrator = Orchestrator(config, renderer)

    try:
        sources = orchestrator.scan()
    except DiscoveryError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if not keep_output:
        orchestrator.clean_output()

    table = Table(title="Rendered Diagrams")
    table.add_column("Source")
    table.add_column("Outputs")
    table.add_column("Status")

    failed = 0
    for source in sources:
        result = orchestrator.tracker.execute_and_track(source, orchestrator.output_dir_for(source))
        outputs = ", ".join(
            str(path.relative_to(config.output_dir)) for path in sorted(result.generated)
        )
        if result.ok:
            status = "[green]ok[/green]"
        else:
            failed += 1
            status = "[red]failed[/red]"
        table.add_row(str(source.relative_to(config.input_dir)), outputs or "[dim]-[/dim]", status)

    if not sources:
        console.print(f"[dim]No diagrams found in {config.input_dir}[/dim]")
        return

    console.print(table)
    if failed:
        console.print(f"[red]{failed} of {len(sources)} diagrams failed to render[/red]")
        sys.exit(1)
