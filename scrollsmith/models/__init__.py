"""Data models for scrollsmith."""
from scrollsmith.models.package import (
    ActionArg,
    ActionEntry,
    PackageConfig,
    RepositoryEntry,
    ScrollEntry,
    TargetEntry,
)

__all__ = [
    'ActionArg',
    'ActionEntry',
    'PackageConfig',
    'RepositoryEntry',
    'ScrollEntry',
    'TargetEntry',
]
