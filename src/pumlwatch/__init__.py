"""pumlwatch - watch PlantUML sources, re-render on change, serve the results.

Usage:
    from pumlwatch import Orchestrator, PlantUMLRenderer, WatchConfig

    config = WatchConfig.from_paths("diagrams", "build/diagrams")
    orchestrator = Orchestrator(config, PlantUMLRenderer("plantuml.jar"))
    orchestrator.run(cancel)  # cancel: threading.Event
"""

from pumlwatch.core.config import WatchConfig
from pumlwatch.core.errors import ConfigError, DiscoveryError, PumlWatchError
from pumlwatch.render import PlantUMLRenderer, Renderer, RenderResult
from pumlwatch.watch import GenerationTracker, Orchestrator, WatchResult, watch_file

__all__ = [
    "ConfigError",
    "DiscoveryError",
    "GenerationTracker",
    "Orchestrator",
    "PlantUMLRenderer",
    "PumlWatchError",
    "RenderResult",
    "Renderer",
    "WatchConfig",
    "WatchResult",
    "watch_file",
]

__version__ = "0.1.0"
