"""Helper objects injected into every script namespace."""
import json
import uuid
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from scrollsmith.scripting.shell import shell_exec


class JsonHelper:
    """``json`` global: JSON conversion."""

    def stringify(self, value: Any) -> str:
        return json.dumps(value)

    def parse(self, text: str) -> Any:
        return json.loads(text)


class YamlHelper:
    """``yaml`` global: YAML conversion."""

    def stringify(self, value: Any) -> str:
        return yaml.safe_dump(value, sort_keys=False, default_flow_style=False)

    def parse(self, text: str) -> Any:
        return yaml.safe_load(text)


class UuidHelper:
    """``uuid`` global: random identifiers."""

    def v4(self) -> str:
        return str(uuid.uuid4())


class ShellHelper:
    """``shell`` global: run commands and capture their escaped output."""

    def exec(self, workdir: Union[str, Path], command: str) -> str:
        return shell_exec(command, workdir)


class OutputBuffer:
    """``template`` global of script templates; collects the rendered body."""

    def __init__(self):
        self._parts = []

    def print(self, value: Any = '') -> None:
        self._parts.append(str(value))

    def println(self, value: Any = '') -> None:
        self._parts.append(f"{value}\n")

    def getvalue(self) -> str:
        return ''.join(self._parts)

    def __str__(self) -> str:
        return self.getvalue()


def helper_globals(shell: Optional[ShellHelper] = None, engine: Optional[Any] = None) -> dict:
    """Globals shared by every evaluation."""
    helpers = {
        'null': None,
        'json': JsonHelper(),
        'yaml': YamlHelper(),
        'uuid': UuidHelper(),
    }
    if shell is not None:
        helpers['shell'] = shell
    if engine is not None:
        helpers['engine'] = engine
    return helpers
