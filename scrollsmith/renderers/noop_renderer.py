"""Pass-through renderer for files that are copied as-is."""
from scrollsmith.core.errors import RenderError
from scrollsmith.renderers.base import Renderer


class NoopRenderer(Renderer):

    def render(self, name: str) -> str:
        try:
            return self.templates[name]
        except KeyError:
            raise RenderError(f"No template: {name}") from None
