"""Serve command: watch, re-render and serve diagrams with live reload."""

from __future__ import annotations

import sys
import threading
from pathlib import Path

import click
from rich.panel import Panel

from pumlwatch.cli.main import console, resolve_config, stats_table, watch_options
from pumlwatch.core.errors import DiscoveryError


@click.command()
@watch_options
@click.option("--host", default=None, help="Interface to bind (default: 0.0.0.0)")
@click.option("--port", type=click.IntRange(1, 65535), default=None, help="Server port (default: 8080)")
@click.option("--keep-output", is_flag=True, help="Do not clear the output directory on startup")
@click.option("--log-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Write JSONL watch events to this directory")
@click.option("--verbose", "-v", count=True, help="Verbosity level: -v per-file events, -vv renderer output")
def serve(
    input_dir: Path | None,
    output_dir: Path | None,
    plantuml_path: Path | None,
    java_path: str | None,
    host: str | None,
    port: int | None,
    keep_output: bool,
    log_dir: Path | None,
    verbose: int,
):
    """Render every diagram, then re-render on change and serve the results.

    Diagrams are viewable at http://localhost:PORT/ and refresh in the browser
    as soon as their source is saved.
    """
    from pumlwatch.config import get_settings
    from pumlwatch.core.logging import WatchLogger, setup_logging
    from pumlwatch.render import PlantUMLRenderer
    from pumlwatch.watch import Orchestrator
    from pumlwatch.watch.orchestrator import JOIN_TIMEOUT
    from pumlwatch.web.server import create_app

    setup_logging(verbose)
    settings = get_settings()
    config = resolve_config(input_dir, output_dir, plantuml_path, java_path)
    host = host or settings.host
    port = port or settings.port

    console.print(
        Panel(
            f"[bold]Input:[/bold] {config.input_dir}\n"
            f"[bold]Output:[/bold] {config.output_dir}\n"
            f"[bold]PlantUML:[/bold] {config.plantuml_path}\n"
            f"[bold]Formats:[/bold] {', '.join(config.formats)}",
            title="[bold cyan]pumlwatch[/bold cyan]",
            border_style="cyan",
        )
    )

    events = WatchLogger(log_dir)
    renderer = PlantUMLRenderer(config.plantuml_path, java_path=config.java_path)
    orchestrator = Orchestrator(config, renderer, events=events)

    if not keep_output:
        orchestrator.clean_output()

    # Initial generation runs before the server accepts requests.
    try:
        with console.status("Rendering diagrams..."):
            cycle = orchestrator.reconcile()
    except DiscoveryError as e:
        console.print(f"[red]Error:[/red] {e}")
        orchestrator.shutdown()
        events.close()
        sys.exit(1)

    failed = sum(1 for r in cycle.renders if not r.ok)
    console.print(f"Rendered [bold]{len(cycle.added)}[/bold] diagrams"
                  + (f", [red]{failed} failed[/red]" if failed else ""))

    cancel = threading.Event()
    watcher = threading.Thread(target=orchestrator.run, args=(cancel,), name="orchestrator", daemon=True)
    watcher.start()

    app = create_app(config.output_dir, cancel=cancel, poll_interval=config.poll_interval)
    console.print(f"[green]Serving[/green] http://localhost:{port}/")
    try:
        app.run(host=host, port=port, threaded=True, use_reloader=False)
    finally:
        cancel.set()
        watcher.join(JOIN_TIMEOUT)
        events.close()
        console.print(stats_table(events.stats))
