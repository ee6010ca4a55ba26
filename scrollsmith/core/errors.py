"""Error taxonomy shared by the resolver, evaluator, renderers and generator."""
from dataclasses import dataclass
from typing import Optional


class ScrollsmithError(Exception):
    """Base class for every error raised by scrollsmith."""


class ResolutionError(ScrollsmithError):
    """Raised when a qualified scroll, action or target name cannot be resolved."""


class ConfigError(ScrollsmithError):
    """Raised when a package descriptor is missing or malformed."""


class VariablesError(ScrollsmithError):
    """Raised when variable files cannot be loaded or evaluated."""


class RenderError(ScrollsmithError):
    """Raised when a template cannot be rendered."""


class GenerationError(ScrollsmithError):
    """Raised when a generation call cannot proceed."""


class UsageError(ScrollsmithError):
    """Raised when an action is invoked with invalid arguments."""


@dataclass(frozen=True)
class SourceError:
    """Location of a scripting failure inside the evaluated source.

    Attributes:
        location: Name the source was compiled under (template name or file path)
        line: 1-based line number of the failing statement
        message: Exception type and message
    """
    location: str
    line: int
    message: str


class ScriptError(RenderError):
    """Raised when the embedded scripting runtime fails.

    When the failure could be located in the evaluated source, ``source_error``
    carries the location and ``script`` the source text, which is enough for a
    line-pointer display.
    """

    def __init__(
        self,
        message: str,
        source_error: Optional[SourceError] = None,
        script: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.source_error = source_error
        self.script = script

    def __str__(self) -> str:
        if self.source_error is None:
            return self.message
        return (
            f"{self.message} ({self.source_error.location}, "
            f"line {self.source_error.line}: {self.source_error.message})"
        )
