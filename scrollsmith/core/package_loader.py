"""Package descriptor loading and saving."""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from scrollsmith.core.config import ScrollsmithConfig, get_config
from scrollsmith.core.errors import ConfigError
from scrollsmith.core.logger import get_logger
from scrollsmith.models.package import PackageConfig

logger = get_logger(__name__)


@dataclass(frozen=True)
class PackageContext:
    """The current package: its root directory and loaded descriptor."""
    root: Path
    config: PackageConfig
    settings: ScrollsmithConfig = field(default_factory=get_config)

    @property
    def descriptor_path(self) -> Path:
        return self.root / self.settings.descriptor_name

    @property
    def modules_dir(self) -> Path:
        return self.root / self.settings.modules_dir

    def module_root(self, repository_name: str) -> Path:
        """Directory a declared repository is fetched into."""
        return self.modules_dir / repository_name


class PackageLoader:
    """Loads and saves package descriptors."""

    def __init__(self, settings: Optional[ScrollsmithConfig] = None):
        self.settings = settings or get_config()

    def descriptor_path(self, root: Path) -> Path:
        return Path(root) / self.settings.descriptor_name

    def load(self, descriptor: Path) -> PackageConfig:
        """Load a package descriptor.

        Args:
            descriptor: Path to the descriptor file

        Returns:
            PackageConfig object

        Raises:
            ConfigError: Descriptor missing, unreadable or invalid
        """
        descriptor = Path(descriptor)
        if not descriptor.is_file():
            raise ConfigError(f"Package descriptor not found: {descriptor}")

        try:
            with open(descriptor, 'r') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {descriptor}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Package descriptor must be a mapping: {descriptor}")

        try:
            return PackageConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid package descriptor {descriptor}: {e}") from e

    def save(self, descriptor: Path, config: PackageConfig) -> None:
        """Write a package descriptor, omitting empty lists and unset fields."""
        data = config.model_dump(exclude_none=True)
        data = {key: value for key, value in data.items() if value != []}
        for entries in data.values():
            if isinstance(entries, list):
                for entry in entries:
                    if entry.get('args') == []:
                        del entry['args']

        descriptor = Path(descriptor)
        descriptor.parent.mkdir(parents=True, exist_ok=True)
        with open(descriptor, 'w') as f:
            yaml.safe_dump(data, f, sort_keys=False, default_flow_style=False)
        logger.debug(f"Saved package descriptor: {descriptor}")

    def load_context(self, root: Path) -> PackageContext:
        """Load the package rooted at ``root``.

        Raises:
            ConfigError: The root holds no valid descriptor
        """
        root = Path(root).resolve()
        config = self.load(self.descriptor_path(root))
        return PackageContext(root=root, config=config, settings=self.settings)

    def find_root(self, start: Optional[Path] = None) -> Optional[Path]:
        """Find the nearest directory holding a descriptor, walking up from ``start``."""
        current = Path(start or Path.cwd()).resolve()
        for candidate in [current, *current.parents]:
            if self.descriptor_path(candidate).is_file():
                return candidate
        return None
