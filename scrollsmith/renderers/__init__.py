"""Rendering backends sharing the ``render(name)`` contract."""
from scrollsmith.renderers.base import Renderer
from scrollsmith.renderers.builder import RendererBuilder
from scrollsmith.renderers.jinja_renderer import JinjaRenderer, format_ansi
from scrollsmith.renderers.noop_renderer import NoopRenderer
from scrollsmith.renderers.script_renderer import ScriptRenderer

__all__ = [
    'JinjaRenderer',
    'NoopRenderer',
    'Renderer',
    'RendererBuilder',
    'ScriptRenderer',
    'format_ansi',
]
