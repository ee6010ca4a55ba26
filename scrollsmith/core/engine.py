"""The ``engine`` capability: lets scripts call back into the generator."""
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from scrollsmith.core.errors import GenerationError, ScrollsmithError
from scrollsmith.core.logger import get_logger
from scrollsmith.core.storage import resolve_target

if TYPE_CHECKING:
    from scrollsmith.core.generator import Generator

logger = get_logger(__name__)


class ScrollEngine:
    """Re-entrant generation for scripts.

    Usage from a script::

        engine.generate("@/readme", {"target_path": "docs", "dry_run": False}, {"title": "Docs"})
    """

    def __init__(self, generator: "Generator"):
        self.generator = generator

    def generate(
        self,
        scroll: str,
        target: Optional[Dict[str, Any]] = None,
        variables: Optional[Any] = None,
    ) -> List[str]:
        """Generate ``scroll`` into the target described by ``target``.

        Args:
            scroll: Qualified scroll name
            target: Mapping with ``target_name``, ``target_path`` and ``dry_run``
                (a nested call inside a dry run is always a dry run)
            variables: Overrides merged over the scroll's variables

        Returns:
            Output paths relative to the target, skipped templates excluded

        Raises:
            GenerationError: The nested generation failed
        """
        target = target or {}
        unknown = set(target) - {'target_name', 'target_path', 'dry_run'}
        if unknown:
            raise GenerationError(
                f"Cannot generate using scroll: {scroll}. "
                f"Unknown target keys: {', '.join(sorted(unknown))}"
            )

        try:
            target_path = resolve_target(
                self.generator.context,
                target.get('target_name'),
                target.get('target_path'),
            )
            logger.debug(f"Nested generation of {scroll} into {target_path}")
            outcomes = self.generator.generate(
                scroll,
                target_path,
                dry_run=bool(target.get('dry_run', False)) or self.generator.dry_run_active,
                overrides=variables,
            )
        except GenerationError:
            raise
        except ScrollsmithError as e:
            raise GenerationError(f"Cannot generate using scroll: {scroll}. {e}") from e

        return [outcome.path.as_posix() for outcome in outcomes if outcome.path is not None]
