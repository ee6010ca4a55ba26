"""Construction of the rendering backends for one generation call."""
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from scrollsmith.renderers.jinja_renderer import JinjaRenderer
from scrollsmith.renderers.noop_renderer import NoopRenderer
from scrollsmith.renderers.script_renderer import ScriptRenderer


class RendererBuilder:
    """Builds every backend from the same variables and template set."""

    def __init__(self):
        self.values: Dict[str, Any] = {}
        self.templates: Dict[str, str] = {}

    def with_value(self, key: str, value: Any) -> "RendererBuilder":
        self.values[key] = value
        return self

    def with_values(self, values: Dict[str, Any]) -> "RendererBuilder":
        self.values.update(values)
        return self

    def with_template(self, name: str, source: str) -> "RendererBuilder":
        self.templates[name] = source
        return self

    def with_templates(self, templates: Dict[str, str]) -> "RendererBuilder":
        self.templates.update(templates)
        return self

    def build_jinja(self) -> JinjaRenderer:
        return JinjaRenderer(self.values, self.templates)

    def build_script(
        self,
        search_paths: Sequence[Path] = (),
        engine: Optional[Any] = None,
    ) -> ScriptRenderer:
        return ScriptRenderer(self.values, self.templates, search_paths, engine)

    def build_noop(self) -> NoopRenderer:
        return NoopRenderer(self.values, self.templates)
