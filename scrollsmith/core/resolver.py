"""Namespace of scrolls and actions across a package and its dependencies.

Local entries are addressed as ``@/<name>``, entries of a declared
repository as ``<repository>/<name>``. Nothing is cached: the package's own
descriptor and those of its dependencies are read again on every call.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, TypeVar, Union

from scrollsmith.core.errors import ConfigError, ResolutionError
from scrollsmith.core.logger import get_logger
from scrollsmith.core.package_loader import PackageContext, PackageLoader
from scrollsmith.core.storage import resolve_inner_path
from scrollsmith.models.package import ActionEntry, PackageConfig, ScrollEntry

logger = get_logger(__name__)

LOCAL_PREFIX = '@'


@dataclass(frozen=True)
class ScrollRef:
    """A resolved scroll and the package owning it."""
    package: PackageConfig
    entry: ScrollEntry
    full_name: str
    package_root: Path
    dependency_name: Optional[str] = None

    @property
    def directory(self) -> Path:
        return self.package_root / resolve_inner_path(self.entry.path)


@dataclass(frozen=True)
class ActionRef:
    """A resolved action and the package owning it."""
    package: PackageConfig
    entry: ActionEntry
    full_name: str
    package_root: Path
    dependency_name: Optional[str] = None

    @property
    def script_path(self) -> Path:
        return self.package_root / resolve_inner_path(self.entry.path)


Ref = TypeVar('Ref', ScrollRef, ActionRef)


def qualified_name(owner: Optional[str], name: str) -> str:
    return f"{owner or LOCAL_PREFIX}/{name}"


class PackageResolver:
    """Resolves qualified scroll and action names for one package."""

    def __init__(self, context: PackageContext, loader: Optional[PackageLoader] = None):
        self.context = context
        self.loader = loader or PackageLoader(context.settings)

    def list_scrolls(self) -> List[ScrollRef]:
        """All scrolls of the package and its dependencies, ordered by qualified name."""
        return self._list(lambda config: config.scrolls, ScrollRef)

    def list_actions(self) -> List[ActionRef]:
        """All actions of the package and its dependencies, ordered by qualified name."""
        return self._list(lambda config: config.actions, ActionRef)

    def find_scroll_by_full_name(self, full_name: str) -> ScrollRef:
        """Resolve a qualified scroll name.

        Raises:
            ResolutionError: No scroll with that name
        """
        ref = self._find(full_name, lambda config: config.scrolls, ScrollRef)
        if ref is None:
            raise ResolutionError(f"No scroll with name: {full_name}")
        return ref

    def find_action_by_full_name(self, full_name: str) -> ActionRef:
        """Resolve a qualified action name.

        Raises:
            ResolutionError: No action with that name
        """
        ref = self._find(full_name, lambda config: config.actions, ActionRef)
        if ref is None:
            raise ResolutionError(f"No action with name: {full_name}")
        return ref

    def dependencies(self) -> List[Tuple[str, PackageConfig, Path]]:
        """Descriptors of the declared repositories that could be loaded."""
        return self._dependencies(self._local_config())

    def _dependencies(self, config: PackageConfig) -> List[Tuple[str, PackageConfig, Path]]:
        loaded = []
        for repository in config.repositories:
            module = self._load_module(repository.name)
            if module is not None:
                loaded.append((repository.name, module, self.context.module_root(repository.name)))
        return loaded

    def _local_config(self) -> PackageConfig:
        return self.loader.load(self.context.descriptor_path)

    def _load_module(self, repository_name: str) -> Optional[PackageConfig]:
        module_root = self.context.module_root(repository_name)
        try:
            return self.loader.load(self.loader.descriptor_path(module_root))
        except ConfigError as e:
            logger.debug(f"Skipping repository {repository_name}: {e}")
            return None

    def _list(
        self,
        entries: Callable[[PackageConfig], list],
        ref_type: Callable[..., Ref],
    ) -> List[Ref]:
        config = self._local_config()
        refs: Dict[str, Ref] = {}

        for repository_name, module, module_root in self._dependencies(config):
            for entry in entries(module):
                full_name = qualified_name(repository_name, entry.name)
                refs[full_name] = ref_type(module, entry, full_name, module_root, repository_name)

        # Locals go in last so they win on collision
        for entry in entries(config):
            full_name = qualified_name(None, entry.name)
            refs[full_name] = ref_type(config, entry, full_name, self.context.root)

        return [refs[name] for name in sorted(refs)]

    def _find(
        self,
        full_name: str,
        entries: Callable[[PackageConfig], list],
        ref_type: Callable[..., Ref],
    ) -> Optional[Union[ScrollRef, ActionRef]]:
        config = self._local_config()
        for entry in entries(config):
            if qualified_name(None, entry.name) == full_name:
                return ref_type(config, entry, full_name, self.context.root)

        for repository in config.repositories:
            if not full_name.startswith(f"{repository.name}/"):
                continue
            module = self._load_module(repository.name)
            if module is None:
                continue
            for entry in entries(module):
                if qualified_name(repository.name, entry.name) == full_name:
                    return ref_type(
                        module,
                        entry,
                        full_name,
                        self.context.module_root(repository.name),
                        repository.name,
                    )
        return None
