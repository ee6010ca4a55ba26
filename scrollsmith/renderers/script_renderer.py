"""Script templates: Python sources that print the rendered body."""
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from scrollsmith.core.errors import RenderError
from scrollsmith.renderers.base import Renderer
from scrollsmith.scripting.helpers import OutputBuffer
from scrollsmith.scripting.runtime import Evaluator, EvaluatorBuilder


class ScriptRenderer(Renderer):
    """Runs script templates and evaluates output paths.

    Every call builds a fresh evaluator so nothing a template does is visible
    to the next one.
    """

    def __init__(
        self,
        values: Dict[str, Any],
        templates: Dict[str, str],
        search_paths: Sequence[Path] = (),
        engine: Optional[Any] = None,
    ):
        super().__init__(values, templates)
        self.search_paths = list(search_paths)
        self.engine = engine

    def evaluator(self) -> Evaluator:
        builder = EvaluatorBuilder().with_globals(self.values).enable_shell()
        for entry in self.search_paths:
            builder.with_path_entry(entry)
        if self.engine is not None:
            builder.enable_engine(self.engine)
        return builder.build()

    def render(self, name: str) -> str:
        if name not in self.templates:
            raise RenderError(f"No template: {name}")

        output = OutputBuffer()
        self.evaluator().exec_script(self.templates[name], name=name, template=output)
        return output.getvalue()

    def eval_string_template(self, expression: str, name: str = '<expression>') -> str:
        """Evaluate a short expression that must produce a string.

        Raises:
            RenderError: The result is not a string
        """
        result = self.evaluator().eval_expression(expression, name=name)
        if not isinstance(result, str):
            raise RenderError(
                f"Expression {expression!r} must produce a string, got {type(result).__name__}"
            )
        return result

    def eval_path(self, name: str) -> str:
        """Interpolate ``{expr}`` segments of a logical template name.

        The name is evaluated as an f-string, so ``src/{project.name}.txt``
        reads variables and ``{{`` escapes a literal brace.
        """
        return self.eval_string_template('f' + repr(name), name=f"<path {name}>")
