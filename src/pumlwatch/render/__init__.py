"""Renderer adapters."""

from pumlwatch.render.base import Renderer, RenderResult
from pumlwatch.render.plantuml import PlantUMLRenderer

__all__ = ["PlantUMLRenderer", "RenderResult", "Renderer"]
