"""Loading of a scroll's ``variables/`` directory into one variable tree."""
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from scrollsmith.core.config import get_config
from scrollsmith.core.errors import VariablesError
from scrollsmith.core.logger import get_logger
from scrollsmith.core.storage import glob_files, read_text
from scrollsmith.core.values import Merge, evaluate, load_yaml_value, merge_yaml
from scrollsmith.scripting.runtime import EvaluatorBuilder

logger = get_logger(__name__)


def load_variables(
    directory: Path,
    search_paths: Sequence[Path] = (),
    workdir: Optional[Path] = None,
) -> Dict[str, Any]:
    """Merge every variable file under ``directory`` into one mapping.

    Files are read in lexical order of their relative path. The value of
    ``a/b/c.yaml`` lands at ``{a: {b: {c: value}}}``; a value tagged as a
    top-level merge is spliced into ``{a: {b: ...}}`` instead.

    Args:
        directory: The scroll's ``variables/`` directory
        search_paths: Library directories for ``.py`` variable files
        workdir: Working directory for shell commands

    Returns:
        The merged variable tree ({} when the directory does not exist)

    Raises:
        VariablesError: Invalid YAML, invalid DSL usage or a file that is
            not UTF-8 text
        ScriptError: A ``.py`` variable file failed
    """
    directory = Path(directory)
    settings = get_config()
    tree: Dict[str, Any] = {}

    for file_path in glob_files(directory):
        extension = file_path.suffix.lower()
        if extension in settings.declarative_extensions:
            value = load_yaml_value(_read_source(file_path))
        elif extension in settings.executable_extensions:
            value = _script_value(file_path, search_paths)
        else:
            logger.debug(f"Ignoring variable file with unknown extension: {file_path}")
            continue

        relative = file_path.relative_to(directory)
        outcome = evaluate(value, workdir)
        parts = list(relative.parent.parts)
        if not isinstance(outcome, Merge):
            parts.append(relative.stem)

        nested = outcome.value
        for part in reversed(parts):
            nested = {part: nested}
        tree = merge_yaml(tree, nested)
        logger.debug(f"Loaded variables from {relative.as_posix()}")

    return tree


def load_overrides(path: Path, search_paths: Sequence[Path] = ()) -> Any:
    """Load variable overrides from one file or a directory of variable files.

    Raises:
        VariablesError: Unsupported file type, invalid YAML or DSL usage
    """
    path = Path(path)
    if path.is_dir():
        return load_variables(path, search_paths)

    settings = get_config()
    extension = path.suffix.lower()
    if extension in settings.declarative_extensions:
        return load_yaml_value(_read_source(path))
    if extension in settings.executable_extensions:
        return _script_value(path, search_paths)
    raise VariablesError(f"Unsupported variables file: {path}")


def _read_source(path: Path) -> str:
    try:
        return read_text(path)
    except UnicodeDecodeError as e:
        raise VariablesError(f"Variables file is not valid UTF-8 text: {path}") from e


def _script_value(path: Path, search_paths: Sequence[Path]) -> Any:
    builder = EvaluatorBuilder().enable_shell()
    for entry in search_paths:
        builder.with_path_entry(entry)
    return builder.build().eval_value(_read_source(path), name=str(path))
