"""Layerforge compositing engine."""

from layerforge.engine.registry import step, Stage, get_registry
from layerforge.engine.context import RenderContext, RenderedLayer
from layerforge.engine.pipeline import Pipeline
from layerforge.engine.compositor import composite

__all__ = [
    "step",
    "Stage",
    "get_registry",
    "RenderContext",
    "RenderedLayer",
    "Pipeline",
    "composite",
]
