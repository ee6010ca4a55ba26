"""Package descriptor models (scrollsmith.yaml)."""
import re
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_SAFE_DIRECTORY_NAME = re.compile(r'^[A-Za-z0-9][A-Za-z0-9._\-]*$')


class RepositoryEntry(BaseModel):
    """A named git source fetched into the module cache."""

    model_config = ConfigDict(extra='forbid', frozen=True)

    name: str = Field(..., description="Module directory name and namespace prefix")
    uri: str = Field(..., description="Git clone URI")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Repository names become directory names under the module cache."""
        if not _SAFE_DIRECTORY_NAME.match(v) or v in {'.', '..'}:
            raise ValueError(
                f"Repository name '{v}' is not a valid directory name. "
                "Use letters, numbers, dots, hyphens and underscores."
            )
        return v


class ScrollEntry(BaseModel):
    """A template package at a path relative to its owning package."""

    model_config = ConfigDict(extra='forbid', frozen=True)

    name: str
    path: str
    about: Optional[str] = None


class ActionArg(BaseModel):
    """A command-line argument accepted by an action."""

    model_config = ConfigDict(extra='forbid', frozen=True)

    name: str
    kind: Literal["string", "flag"] = "string"
    about: Optional[str] = None
    required: Optional[bool] = None


class ActionEntry(BaseModel):
    """A standalone script package."""

    model_config = ConfigDict(extra='forbid', frozen=True)

    name: str
    path: str
    about: Optional[str] = None
    args: List[ActionArg] = Field(default_factory=list)


class TargetEntry(BaseModel):
    """A well-known output directory."""

    model_config = ConfigDict(extra='forbid', frozen=True)

    name: str
    path: str


class PackageConfig(BaseModel):
    """Root of a package, loaded from one descriptor file."""

    model_config = ConfigDict(extra='forbid', frozen=True)

    name: str
    scrolls: List[ScrollEntry] = Field(default_factory=list)
    actions: List[ActionEntry] = Field(default_factory=list)
    repositories: List[RepositoryEntry] = Field(default_factory=list)
    targets: List[TargetEntry] = Field(default_factory=list)

    @field_validator('scrolls', 'actions', 'targets', 'repositories')
    @classmethod
    def validate_unique_names(cls, v):
        """Entry names must be unique within one list."""
        seen = set()
        for entry in v:
            if entry.name in seen:
                raise ValueError(f"Duplicate entry name: '{entry.name}'")
            seen.add(entry.name)
        return v
