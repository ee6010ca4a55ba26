"""Action runner: standalone scripts invoked with command-line arguments."""
import re
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from scrollsmith.core.engine import ScrollEngine
from scrollsmith.core.errors import UsageError
from scrollsmith.core.generator import Generator
from scrollsmith.core.logger import get_logger
from scrollsmith.core.package_loader import PackageContext
from scrollsmith.core.resolver import ActionRef, PackageResolver
from scrollsmith.core.storage import read_text, resolve_search_locations
from scrollsmith.models.package import ActionEntry
from scrollsmith.scripting.runtime import EvaluatorBuilder

logger = get_logger(__name__)

_WORD_BOUNDARY = re.compile(r'(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])')
_SEPARATORS = re.compile(r'[^A-Za-z0-9]+')


def to_snake_case(name: str) -> str:
    """Convert ``target-path``, ``targetPath`` or ``TargetPath`` to ``target_path``."""
    spaced = _WORD_BOUNDARY.sub('_', name)
    words = [word for word in _SEPARATORS.split(spaced) if word]
    return '_'.join(word.lower() for word in words)


def build_args(action: ActionEntry, given: Mapping[str, Union[str, bool, None]]) -> Dict[str, Any]:
    """Validate command-line values against the declared arguments.

    Args:
        action: Action entry declaring the accepted arguments
        given: Values by declared argument name (flags as booleans)

    Returns:
        The ``args`` mapping, keyed by snake_case names

    Raises:
        UsageError: Unknown argument, or a required argument is missing
    """
    declared = {arg.name: arg for arg in action.args}
    unknown = [name for name in given if name not in declared]
    if unknown:
        raise UsageError(f"Invalid usage. Unknown option: {', '.join(sorted(unknown))}")

    args: Dict[str, Any] = {}
    for arg in action.args:
        value = given.get(arg.name)
        if arg.kind == 'flag':
            args[to_snake_case(arg.name)] = bool(value)
            continue
        if value is None:
            if arg.required:
                raise UsageError(f"Invalid usage. Option {arg.name} is required")
            continue
        args[to_snake_case(arg.name)] = value
    return args


def parse_cli_args(action: ActionEntry, tokens: Sequence[str]) -> Dict[str, Union[str, bool]]:
    """Parse ``--name value``, ``--name=value`` and ``--flag`` tokens.

    Raises:
        UsageError: Stray positional value, or an option without its value
    """
    kinds = {arg.name: arg.kind for arg in action.args}
    given: Dict[str, Union[str, bool]] = {}
    position = 0

    while position < len(tokens):
        token = tokens[position]
        position += 1
        if not token.startswith('--') or token == '--':
            raise UsageError(f"Invalid usage. Unexpected argument: {token}")

        name, separator, value = token[2:].partition('=')
        if kinds.get(name) == 'flag':
            if separator:
                raise UsageError(f"Invalid usage. Option {name} does not take a value")
            given[name] = True
            continue

        if not separator:
            if position >= len(tokens) or tokens[position].startswith('--'):
                raise UsageError(f"Invalid usage. Option {name} requires a value")
            value = tokens[position]
            position += 1
        given[name] = value

    return given


class ActionRunner:
    """Resolves and runs actions of one package."""

    def __init__(self, context: PackageContext, generator: Optional[Generator] = None):
        self.context = context
        self.generator = generator or Generator(context)
        self.resolver = PackageResolver(context)

    def resolve(self, full_name: str) -> ActionRef:
        return self.resolver.find_action_by_full_name(full_name)

    def run(self, full_name: str, given: Optional[Mapping[str, Union[str, bool, None]]] = None) -> Any:
        """Run an action script.

        Args:
            full_name: Qualified action name
            given: Argument values by declared name

        Returns:
            Value of the script's final expression

        Raises:
            ResolutionError: Unknown action
            UsageError: Invalid arguments
            ScriptError: The script failed
        """
        action = self.resolve(full_name)
        args = build_args(action.entry, given or {})

        builder = (
            EvaluatorBuilder()
            .with_global('args', args)
            .enable_shell()
            .enable_engine(ScrollEngine(self.generator))
        )
        for entry in resolve_search_locations(self.context):
            builder.with_path_entry(entry)

        script_path = action.script_path
        logger.debug(f"Running action {action.full_name} from {script_path}")
        return builder.build().eval_value(read_text(script_path), name=str(script_path))
