"""Generator orchestrator: resolve a scroll, load variables, render and emit.

One call walks the scroll's templates in lexical order. For every template
the output path is computed first (the logical name evaluated as an
f-string), then the body is rendered by the backend its extension selects,
then the file is emitted according to its basename:

- ``!name`` is never written
- ``+name`` is written as ``name``, replacing an existing file
- any other name is written only when the destination does not exist yet
"""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Dict, List, Optional

from scrollsmith.core.engine import ScrollEngine
from scrollsmith.core.errors import GenerationError, RenderError, ResolutionError, VariablesError
from scrollsmith.core.logger import get_logger
from scrollsmith.core.package_loader import PackageContext, PackageLoader
from scrollsmith.core.resolver import PackageResolver
from scrollsmith.core.storage import (
    load_templates,
    resolve_inner_path,
    resolve_search_locations,
    write_file,
)
from scrollsmith.core.values import evaluate_value, merge_yaml
from scrollsmith.core.variables import load_variables
from scrollsmith.renderers.base import Renderer
from scrollsmith.renderers.builder import RendererBuilder

logger = get_logger(__name__)

SKIP_PREFIX = '!'
OVERWRITE_PREFIX = '+'


class EventKind(Enum):
    START = "start"
    MESSAGE = "message"
    FINISH = "finish"


@dataclass(frozen=True)
class GeneratorEvent:
    """Progress notification sent to the observer."""
    kind: EventKind
    message: str
    template: Optional[str] = None


class OutcomeStatus(Enum):
    WRITTEN = "written"
    SKIPPED = "skipped"
    KEPT = "kept"
    DRY_RUN = "dry_run"


@dataclass(frozen=True)
class TemplateOutcome:
    """What happened to one template.

    Attributes:
        template: Logical template name
        path: Output path relative to the target directory (None when skipped)
        status: Emit result
    """
    template: str
    path: Optional[PurePosixPath]
    status: OutcomeStatus


class Generator:
    """Renders scrolls of one package into target directories."""

    def __init__(
        self,
        context: PackageContext,
        on_event: Optional[Callable[[GeneratorEvent], None]] = None,
        max_depth: Optional[int] = None,
    ):
        """Initialize generator.

        Args:
            context: Package the scroll names are resolved against
            on_event: Observer called with every GeneratorEvent
            max_depth: Ceiling for nested generation through the ``engine``
                capability (None for no limit)
        """
        self.context = context
        self.on_event = on_event
        self.max_depth = max_depth
        self.resolver = PackageResolver(context)
        self._active = 0
        self._dry_runs = 0

    @property
    def dry_run_active(self) -> bool:
        """True while any generate call on this generator is a dry run."""
        return self._dry_runs > 0

    def notify(self, kind: EventKind, message: str, template: Optional[str] = None) -> None:
        if self.on_event is not None:
            self.on_event(GeneratorEvent(kind, message, template))

    def generate(
        self,
        name: str,
        target_path: Path,
        dry_run: bool = False,
        overrides: Optional[Any] = None,
    ) -> List[TemplateOutcome]:
        """Generate a scroll into ``target_path``.

        Args:
            name: Qualified scroll name (``@/name`` or ``repository/name``)
            target_path: Output directory
            dry_run: Render everything but write nothing
            overrides: Variables merged over the scroll's own variables

        Returns:
            One TemplateOutcome per template, in lexical order

        Raises:
            ResolutionError: Unknown scroll
            VariablesError: Variables do not form a mapping
            RenderError: A template or output path failed to render
            GenerationError: Nesting ceiling exceeded
            ConfigError: The package descriptor no longer loads
        """
        if self.max_depth is not None and self._active > self.max_depth:
            raise GenerationError(
                f"Cannot generate using scroll: {name}. "
                f"Nested generation exceeds maximum depth of {self.max_depth}"
            )

        self._active += 1
        if dry_run:
            self._dry_runs += 1
        try:
            return self._generate(name, Path(target_path), dry_run, overrides)
        finally:
            self._active -= 1
            if dry_run:
                self._dry_runs -= 1

    def _generate(
        self,
        name: str,
        target_path: Path,
        dry_run: bool,
        overrides: Optional[Any],
    ) -> List[TemplateOutcome]:
        # Descriptor edits between calls (new scrolls or targets) take effect
        self.context = PackageLoader(self.context.settings).load_context(self.context.root)
        self.resolver = PackageResolver(self.context)
        scroll = self.resolver.find_scroll_by_full_name(name)
        search_paths = resolve_search_locations(self.context)
        logger.debug(f"Generating {scroll.full_name} from {scroll.directory}")

        variables = load_variables(scroll.directory / 'variables', search_paths)
        if overrides is not None:
            variables = merge_yaml(variables, evaluate_value(overrides))
        if not isinstance(variables, dict):
            raise VariablesError(
                f"Variables of scroll {scroll.full_name} must form a mapping, "
                f"got {type(variables).__name__}"
            )

        templates = load_templates(scroll.directory / 'templates')
        builder = RendererBuilder().with_templates(templates)
        for key, value in variables.items():
            builder.with_value(str(key), value)

        jinja = builder.build_jinja()
        script = builder.build_script(search_paths, engine=ScrollEngine(self))
        noop = builder.build_noop()

        outcomes = []
        for template_name in templates:
            self.notify(EventKind.START, f"Rendering {template_name} template...", template_name)

            output_path = self._output_path(template_name, script.eval_path(template_name))
            renderer, output_path = self._select(output_path, jinja, script, noop)
            content = renderer.render(template_name)

            outcome = self._emit(template_name, output_path, content, target_path, dry_run)
            outcomes.append(outcome)

        return outcomes

    def _output_path(self, template_name: str, evaluated: str) -> PurePosixPath:
        try:
            return resolve_inner_path(evaluated)
        except ResolutionError as e:
            raise RenderError(f"Invalid output path for template {template_name}. {e}") from e

    def _select(
        self,
        output_path: PurePosixPath,
        jinja: Renderer,
        script: Renderer,
        noop: Renderer,
    ):
        """Pick the backend by extension; engine extensions are stripped."""
        settings = self.context.settings
        extension = output_path.suffix.lower()
        if extension in settings.structured_extensions:
            return jinja, output_path.with_suffix('')
        if extension in settings.script_extensions:
            return script, output_path.with_suffix('')
        return noop, output_path

    def _emit(
        self,
        template_name: str,
        output_path: PurePosixPath,
        content: str,
        target_path: Path,
        dry_run: bool,
    ) -> TemplateOutcome:
        basename = output_path.name

        if basename.startswith(SKIP_PREFIX):
            self.notify(EventKind.FINISH, f"[SKIP] Skipped template: {output_path}", template_name)
            return TemplateOutcome(template_name, None, OutcomeStatus.SKIPPED)

        overwrite = basename.startswith(OVERWRITE_PREFIX)
        if overwrite:
            stripped = basename[len(OVERWRITE_PREFIX):]
            if not stripped:
                raise RenderError(f"Invalid output path for template {template_name}: {output_path}")
            output_path = output_path.with_name(stripped)

        if dry_run:
            self.notify(EventKind.FINISH, f"[DONE] Rendered template: {output_path}", template_name)
            return TemplateOutcome(template_name, output_path, OutcomeStatus.DRY_RUN)

        destination = target_path / output_path
        if destination.exists() and not overwrite:
            self.notify(
                EventKind.MESSAGE,
                f"File already exists, keeping it: {destination}",
                template_name,
            )
            self.notify(EventKind.FINISH, f"[KEEP] Kept existing file: {destination}", template_name)
            return TemplateOutcome(template_name, output_path, OutcomeStatus.KEPT)

        write_file(destination, content)
        logger.debug(f"Wrote {destination}")
        self.notify(EventKind.FINISH, f"[DONE] Generated file: {destination}", template_name)
        return TemplateOutcome(template_name, output_path, OutcomeStatus.WRITTEN)


def render_summary(outcomes: List[TemplateOutcome]) -> Dict[str, int]:
    """Count outcomes by status."""
    summary = {status.value: 0 for status in OutcomeStatus}
    for outcome in outcomes:
        summary[outcome.status.value] += 1
    return summary
