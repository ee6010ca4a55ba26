"""File system helpers: inner paths, templates, targets and search locations."""
import posixpath
import shutil
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional

from scrollsmith.core.errors import RenderError, ResolutionError
from scrollsmith.core.logger import get_logger
from scrollsmith.core.package_loader import PackageContext

logger = get_logger(__name__)


def resolve_inner_path(path: str) -> PurePosixPath:
    """Normalize a path that must stay inside its base directory.

    Raises:
        ResolutionError: The path is empty, absolute, points at the base
            directory itself, or leaves it
    """
    if not path or not path.strip():
        raise ResolutionError("Invalid path. Path should not be empty.")

    normalized = posixpath.normpath(path.replace('\\', '/'))
    if normalized.startswith('/'):
        raise ResolutionError(f"Invalid path: {path}. Path should be relative.")
    if normalized == '..' or normalized.startswith('../'):
        raise ResolutionError(f"Invalid path: {path}. Could not leave base directory.")
    if normalized == '.':
        raise ResolutionError(
            f"Invalid path: {path}. Path should not point to the base directory."
        )
    return PurePosixPath(normalized)


def read_text(path: Path) -> str:
    return Path(path).read_text(encoding='utf-8')


def write_file(path: Path, content: str) -> None:
    """Write ``content`` to ``path``, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding='utf-8')


def glob_files(directory: Path) -> List[Path]:
    """All regular files under ``directory``, ordered by relative posix path."""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    files = [p for p in directory.rglob('*') if p.is_file()]
    return sorted(files, key=lambda p: p.relative_to(directory).as_posix())


def remove_tree(path: Path) -> None:
    shutil.rmtree(path)


def load_templates(directory: Path) -> Dict[str, str]:
    """Load the template set of a scroll.

    Args:
        directory: The scroll's ``templates/`` directory

    Returns:
        Mapping of logical name (posix path under ``directory``) to source,
        in lexical order. Empty when the directory does not exist.

    Raises:
        RenderError: A template file is not UTF-8 text
    """
    directory = Path(directory)
    templates: Dict[str, str] = {}
    for file_path in glob_files(directory):
        try:
            source = read_text(file_path)
        except UnicodeDecodeError as e:
            raise RenderError(f"Template is not valid UTF-8 text: {file_path}") from e
        templates[file_path.relative_to(directory).as_posix()] = source
    return templates


def resolve_search_locations(context: PackageContext) -> List[Path]:
    """Script library directories: the local one, then one per declared repository."""
    lib_dir = context.settings.lib_dir
    locations = [context.root / lib_dir]
    for repository in context.config.repositories:
        locations.append(context.module_root(repository.name) / lib_dir)
    return locations


def resolve_target(
    context: PackageContext,
    target_name: Optional[str] = None,
    target_path: Optional[str] = None,
) -> Path:
    """Resolve an output directory by well-known target name or explicit path.

    An explicit path wins over a name. Relative explicit paths are taken
    from the current working directory; target entry paths from the package
    root.

    Raises:
        ResolutionError: Unknown target name, or neither argument given
    """
    if target_path:
        return Path(target_path).expanduser().resolve()

    if target_name:
        for target in context.config.targets:
            if target.name == target_name:
                return (context.root / Path(target.path).expanduser()).resolve()
        raise ResolutionError(f"No target with name: {target_name}")

    raise ResolutionError("Either a target name or a target path is required")
