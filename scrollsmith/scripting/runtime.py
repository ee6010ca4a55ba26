"""Embedded Python scripting runtime.

Every evaluation compiles the source and runs it in a brand-new namespace
holding deep copies of the configured globals plus the helper objects, so no
state leaks between evaluations. The value of a script is the value of its
final expression statement::

    evaluator = EvaluatorBuilder().with_global("name", "World").build()
    evaluator.eval_value("greeting = f'Hello {name}!'\\n{'greeting': greeting}")
    # -> {'greeting': 'Hello World!'}
"""
import ast
import copy
import importlib
import os
import sys
import traceback
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from scrollsmith.core.errors import GenerationError, ScriptError, SourceError
from scrollsmith.core.logger import get_logger
from scrollsmith.scripting.helpers import ShellHelper, helper_globals

logger = get_logger(__name__)


class EvaluatorBuilder:
    """Collects globals, search paths and capabilities for an Evaluator."""

    def __init__(self):
        self.globals: Dict[str, Any] = {}
        self.paths: List[Path] = []
        self.shell: Optional[ShellHelper] = None
        self.engine: Optional[Any] = None

    def with_global(self, key: str, value: Any) -> "EvaluatorBuilder":
        self.globals[str(key)] = value
        return self

    def with_globals(self, values: Dict[str, Any]) -> "EvaluatorBuilder":
        for key, value in values.items():
            self.with_global(key, value)
        return self

    def with_path_entry(self, entry: Path) -> "EvaluatorBuilder":
        self.paths.append(Path(entry))
        return self

    def enable_shell(self, shell: Optional[ShellHelper] = None) -> "EvaluatorBuilder":
        self.shell = shell or ShellHelper()
        return self

    def enable_engine(self, engine: Any) -> "EvaluatorBuilder":
        self.engine = engine
        return self

    def build(self) -> "Evaluator":
        return Evaluator(
            globals=dict(self.globals),
            paths=list(self.paths),
            shell=self.shell,
            engine=self.engine,
        )


class Evaluator:
    """Runs scripts and expressions in isolated namespaces."""

    def __init__(
        self,
        globals: Optional[Dict[str, Any]] = None,
        paths: Sequence[Path] = (),
        shell: Optional[ShellHelper] = None,
        engine: Optional[Any] = None,
    ):
        self.globals = globals or {}
        self.paths = list(paths)
        self.shell = shell
        self.engine = engine

    def namespace(self, **extra: Any) -> Dict[str, Any]:
        """A fresh namespace for one evaluation."""
        namespace: Dict[str, Any] = {'__name__': '__scroll__'}
        namespace.update(copy.deepcopy(self.globals))
        namespace.update(helper_globals(self.shell, self.engine))
        namespace.update(extra)
        return namespace

    def eval_value(self, script: str, name: str = '<script>') -> Any:
        """Run a script to completion and return its final expression as a value.

        Raises:
            ScriptError: The script failed or returned an unsupported type
        """
        result = self._run(script, name, self.namespace())
        try:
            return to_value(result)
        except TypeError as e:
            raise ScriptError(f"Error evaluating {name}: {e}", script=script) from e

    def exec_script(self, script: str, name: str = '<script>', **extra: Any) -> Dict[str, Any]:
        """Run a script body for its side effects; returns the namespace."""
        namespace = self.namespace(**extra)
        self._run(script, name, namespace)
        return namespace

    def eval_expression(self, expression: str, name: str = '<expression>') -> Any:
        """Evaluate a single expression."""
        namespace = self.namespace()
        try:
            code = compile(expression, name, 'eval')
        except SyntaxError as e:
            raise _script_error(e, expression, name) from e
        with search_path(self.paths):
            try:
                return eval(code, namespace)
            except GenerationError:
                raise
            except Exception as e:
                raise _script_error(e, expression, name) from e

    def _run(self, script: str, name: str, namespace: Dict[str, Any]) -> Any:
        try:
            tree = ast.parse(script, filename=name, mode='exec')
        except SyntaxError as e:
            raise _script_error(e, script, name) from e

        tail = None
        if tree.body and isinstance(tree.body[-1], ast.Expr):
            tail = ast.Expression(body=tree.body.pop().value)

        with search_path(self.paths):
            try:
                exec(compile(tree, name, 'exec'), namespace)
                if tail is not None:
                    return eval(compile(tail, name, 'eval'), namespace)
                return None
            except GenerationError:
                raise
            except Exception as e:
                raise _script_error(e, script, name) from e


def to_value(value: Any) -> Any:
    """Convert a script result into the universal value type.

    Raises:
        TypeError: The value holds something other than mappings,
            sequences and scalars
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, dict):
        return {to_value(key): to_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_value(item) for item in value]
    raise TypeError(f"Cannot convert value of type {type(value).__name__}")


@contextmanager
def search_path(paths: Sequence[Path]) -> Iterator[None]:
    """Make ``paths`` importable for the duration of one evaluation.

    Modules imported from these directories are dropped afterwards so the
    next evaluation imports them afresh.
    """
    entries = [str(Path(p).resolve()) for p in paths]
    if not entries:
        yield
        return

    before = set(sys.modules)
    sys.path[:0] = entries
    importlib.invalidate_caches()
    try:
        yield
    finally:
        for entry in entries:
            try:
                sys.path.remove(entry)
            except ValueError:
                pass
        for module_name in set(sys.modules) - before:
            module_file = getattr(sys.modules[module_name], '__file__', None) or ''
            if any(module_file.startswith(entry + os.sep) for entry in entries):
                del sys.modules[module_name]


def describe_error(error: BaseException, name: str) -> Optional[SourceError]:
    """Locate a failure inside the source compiled under ``name``.

    Returns:
        SourceError for syntax errors and for failures with a traceback frame
        in the evaluated source, otherwise None
    """
    message = f"{type(error).__name__}: {error}"

    if isinstance(error, SyntaxError):
        return SourceError(
            location=error.filename or name,
            line=error.lineno or 0,
            message=f"{type(error).__name__}: {error.msg}",
        )

    frames = [frame for frame in traceback.extract_tb(error.__traceback__) if frame.filename == name]
    if not frames:
        return None
    return SourceError(location=name, line=frames[-1].lineno or 0, message=message)


def source_window(
    script: str,
    source_error: SourceError,
    context: int = 1,
) -> List[Tuple[int, str, bool]]:
    """Lines around the failing line.

    Returns:
        List of (1-based line number, text, is_failing_line)
    """
    lines = script.splitlines()
    if not lines or source_error.line < 1:
        return []
    failing = min(source_error.line, len(lines))
    lower = max(1, failing - context)
    upper = min(len(lines), failing + context)
    return [(number, lines[number - 1], number == failing) for number in range(lower, upper + 1)]


def _script_error(error: BaseException, script: str, name: str) -> ScriptError:
    source_error = describe_error(error, name)
    if source_error is None:
        logger.debug(f"Could not locate failure of {name} in its source")
    return ScriptError(
        f"Error evaluating {name}: {type(error).__name__}: {error}",
        source_error=source_error,
        script=script,
    )
