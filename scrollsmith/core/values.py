"""Universal value tree, deep merge and the tagged-value DSL.

Variable files are plain YAML documents extended with five local tags::

    base: !TransparentSequence [1, 2]    # inserted as-is
    extra: !MergeMapping {x: 1}          # keys spliced into the parent mapping
    list: [0, !MergeSequence [1, 2], 3]  # elements spliced into the parent list
    user: !Shell whoami                  # replaced by the command output

Evaluation walks the tree bottom-up. Every node yields either an
:class:`Insert` (the value takes its own slot) or a :class:`Merge` (the
value is spliced into the enclosing collection).
"""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from scrollsmith.core.errors import VariablesError
from scrollsmith.scripting.shell import shell_exec


class TagKind(Enum):
    """The closed set of DSL tags."""
    TRANSPARENT_SEQUENCE = "TransparentSequence"
    TRANSPARENT_MAPPING = "TransparentMapping"
    MERGE_SEQUENCE = "MergeSequence"
    MERGE_MAPPING = "MergeMapping"
    SHELL = "Shell"


_EXPECTED_SHAPE = {
    TagKind.TRANSPARENT_SEQUENCE: list,
    TagKind.TRANSPARENT_MAPPING: dict,
    TagKind.MERGE_SEQUENCE: list,
    TagKind.MERGE_MAPPING: dict,
    TagKind.SHELL: str,
}


@dataclass
class Tagged:
    """A DSL node: a tag applied to an inner value."""
    tag: TagKind
    value: Any


@dataclass
class Insert:
    value: Any


@dataclass
class Merge:
    value: Any


def decode_tag(name: str, value: Any) -> Tagged:
    """Build a :class:`Tagged` node from a tag name and its inner value.

    Raises:
        VariablesError: Unknown tag, or inner value of the wrong shape
    """
    try:
        tag = TagKind(name)
    except ValueError:
        known = ', '.join(f"!{kind.value}" for kind in TagKind)
        raise VariablesError(f"Unknown tag: !{name}. Expected one of: {known}") from None

    expected = _EXPECTED_SHAPE[tag]
    if not isinstance(value, expected):
        raise VariablesError(
            f"Tag !{name} expects a {expected.__name__}, got {type(value).__name__}"
        )
    return Tagged(tag, value)


class VariablesLoader(yaml.SafeLoader):
    """SafeLoader that decodes local ``!Tag`` nodes into :class:`Tagged` values."""


def _construct_tagged(loader: VariablesLoader, suffix: str, node: yaml.Node) -> Tagged:
    if isinstance(node, yaml.MappingNode):
        value = loader.construct_mapping(node, deep=True)
    elif isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node, deep=True)
    else:
        value = loader.construct_scalar(node)
    return decode_tag(suffix, value)


VariablesLoader.add_multi_constructor('!', _construct_tagged)


def load_yaml_value(text: str) -> Any:
    """Parse a YAML document, keeping DSL tags.

    Raises:
        VariablesError: Invalid YAML or invalid tag usage
    """
    try:
        return yaml.load(text, Loader=VariablesLoader)
    except yaml.YAMLError as e:
        raise VariablesError(f"Invalid YAML: {e}") from e


def merge_yaml(target: Any, incoming: Any) -> Any:
    """Deep-merge ``incoming`` into ``target``.

    Two mappings merge key by key: absent keys are inserted, present keys
    recurse. Any other pairing is won by ``incoming``; sequences are not
    concatenated. ``target`` is updated in place when it is a mapping.

    Returns:
        The merged value
    """
    if isinstance(target, dict) and isinstance(incoming, dict):
        for key, value in incoming.items():
            if key in target:
                target[key] = merge_yaml(target[key], value)
            else:
                target[key] = value
        return target
    return incoming


def evaluate(value: Any, workdir: Optional[Path] = None) -> Union[Insert, Merge]:
    """Evaluate the DSL over a value tree.

    Args:
        value: Value tree, possibly holding :class:`Tagged` nodes
        workdir: Working directory for ``!Shell`` commands

    Returns:
        Insert or Merge wrapping the evaluated value
    """
    if isinstance(value, Tagged):
        return _evaluate_tagged(value, workdir)
    if isinstance(value, list):
        return Insert(_evaluate_sequence(value, workdir))
    if isinstance(value, dict):
        return Insert(_evaluate_mapping(value, workdir))
    return Insert(value)


def evaluate_value(value: Any, workdir: Optional[Path] = None) -> Any:
    """Evaluate a value tree and unwrap the result."""
    return evaluate(value, workdir).value


def _evaluate_tagged(node: Tagged, workdir: Optional[Path]) -> Union[Insert, Merge]:
    if node.tag is TagKind.SHELL:
        return Insert(shell_exec(node.value, workdir))

    if isinstance(node.value, list):
        inner = _evaluate_sequence(node.value, workdir)
    else:
        inner = _evaluate_mapping(node.value, workdir)

    if node.tag in (TagKind.MERGE_SEQUENCE, TagKind.MERGE_MAPPING):
        return Merge(inner)
    return Insert(inner)


def _evaluate_sequence(items: list, workdir: Optional[Path]) -> list:
    result = []
    for item in items:
        outcome = evaluate(item, workdir)
        if isinstance(outcome, Merge):
            if not isinstance(outcome.value, list):
                raise VariablesError("Cannot merge a mapping into a sequence")
            result.extend(outcome.value)
        else:
            result.append(outcome.value)
    return result


def _evaluate_mapping(mapping: dict, workdir: Optional[Path]) -> dict:
    result: dict = {}
    for key, item in mapping.items():
        outcome = evaluate(item, workdir)
        if isinstance(outcome, Merge):
            if not isinstance(outcome.value, dict):
                raise VariablesError(f"Cannot merge a sequence into a mapping (key '{key}')")
            result = merge_yaml(result, outcome.value)
        elif key in result:
            # A key spliced in by an earlier merge combines with this one
            result[key] = merge_yaml(result[key], outcome.value)
        else:
            result[key] = outcome.value
    return result
