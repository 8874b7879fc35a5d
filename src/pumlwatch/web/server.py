"""Web viewer for rendered diagrams with live reload over Server-Sent Events."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from flask import Blueprint, Flask, Response, abort, current_app, render_template, request, send_file
from werkzeug.utils import safe_join

from pumlwatch.core.config import FORMAT_MIME_TYPES, POLL_INTERVAL
from pumlwatch.watch.detector import WatchResult, watch_file
from pumlwatch.web.tree import build_file_tree, list_diagrams

logger = logging.getLogger(__name__)

# Seconds between keep-alive comments on an idle event stream. Writing is the
# only way to notice a client that went away.
KEEPALIVE_INTERVAL = 15.0

views = Blueprint("views", __name__)


def create_app(
    output_dir: str | Path,
    cancel: threading.Event | None = None,
    poll_interval: float = POLL_INTERVAL,
    keepalive_interval: float = KEEPALIVE_INTERVAL,
) -> Flask:
    """Create the viewer app serving diagrams from ``output_dir``.

    Setting ``cancel`` ends every open live-reload stream.
    """
    app = Flask(__name__)
    app.config["OUTPUT_DIR"] = Path(output_dir).resolve()
    app.config["POLL_INTERVAL"] = poll_interval
    app.config["KEEPALIVE_INTERVAL"] = keepalive_interval
    app.extensions["pumlwatch.cancel"] = cancel or threading.Event()
    app.register_blueprint(views)
    return app


def _artifact_path(name: str, ext: str) -> Path:
    """Resolve ``<name>.<ext>`` under the output root, or abort with 404."""
    joined = safe_join(str(current_app.config["OUTPUT_DIR"]), f"{name}.{ext}")
    if joined is None:
        abort(404)
    path = Path(joined)
    if not path.is_file():
        abort(404)
    return path


def _sse_event(data: str) -> str:
    """Format one Server-Sent Event carrying ``data``."""
    lines = data.splitlines() or [""]
    return "".join(f"data: {line}\n" for line in lines) + "\n"


@views.route("/")
def index():
    """Folder tree of every rendered diagram."""
    names = sorted(list_diagrams(current_app.config["OUTPUT_DIR"]))
    return render_template("index.html", tree=build_file_tree(names))


@views.route("/output/<path:name>")
def view_diagram(name: str):
    """Viewer page for one diagram."""
    _artifact_path(name, "svg")
    return render_template("output.html", name=name)


@views.route("/events/<path:name>")
def diagram_events(name: str):
    """Stream the diagram's SVG now and again after every change."""
    svg_path = _artifact_path(name, "svg")
    try:
        initial = svg_path.read_text(encoding="utf-8")
    except OSError:
        abort(404)

    cancel = current_app.extensions["pumlwatch.cancel"]
    interval = current_app.config["POLL_INTERVAL"]
    keepalive = current_app.config["KEEPALIVE_INTERVAL"]

    def stream():
        yield _sse_event(initial)
        logger.info("Started watching diagram: %s", svg_path)
        while True:
            result = watch_file(svg_path, cancel, interval=interval, timeout=keepalive)
            if result is WatchResult.TIMEOUT:
                yield ": keepalive\n\n"
                continue
            if result is not WatchResult.CHANGED:
                logger.info("Stopped watching diagram %s: %s", svg_path, result.value)
                return
            try:
                svg = svg_path.read_text(encoding="utf-8")
            except OSError:
                logger.info("Stopped watching diagram %s: gone", svg_path)
                return
            # The renderer truncates before writing; skip the half-written state.
            if svg:
                logger.info("SVG changed: %s", svg_path)
                yield _sse_event(svg)

    return Response(
        stream(),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@views.route("/download/<path:name>")
def download(name: str):
    """Download a rendered diagram; ``?ext=svg`` (default) or ``?ext=png``."""
    ext = request.args.get("ext", "svg")
    if ext not in FORMAT_MIME_TYPES:
        abort(400, description=f"unsupported format: {ext}")
    path = _artifact_path(name, ext)
    return send_file(
        path,
        mimetype=FORMAT_MIME_TYPES[ext],
        as_attachment=True,
        download_name=f"{Path(name).name}.{ext}",
    )
