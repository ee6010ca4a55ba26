"""Abstract base class for rendering backends."""
from abc import ABC, abstractmethod
from typing import Any, Dict


class Renderer(ABC):
    """Renders templates of one template set by logical name."""

    def __init__(self, values: Dict[str, Any], templates: Dict[str, str]):
        """Initialize renderer.

        Args:
            values: Variable tree of the generation call
            templates: Template set (logical name -> source), shared read-only
        """
        self.values = values
        self.templates = templates

    @abstractmethod
    def render(self, name: str) -> str:
        """Render a template.

        Args:
            name: Logical template name

        Returns:
            Rendered text

        Raises:
            RenderError: Unknown template or rendering failure
        """
        pass
