"""Scrollsmith runtime configuration and settings."""
import os
from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass
class ScrollsmithConfig:
    """Runtime configuration for scrollsmith operations.

    Attributes:
        descriptor_name: File name of the package descriptor (default: scrollsmith.yaml)
        modules_dir: Directory holding fetched dependency modules (default: scroll_modules)
        lib_dir: Script library directory inside a package (default: lib)
        structured_extensions: Template extensions rendered with Jinja2
        script_extensions: Template extensions rendered as Python scripts
        declarative_extensions: Variable file extensions loaded as YAML
        executable_extensions: Variable file extensions evaluated as Python
    """

    descriptor_name: str = "scrollsmith.yaml"
    modules_dir: str = "scroll_modules"
    lib_dir: str = "lib"

    # Template dispatch
    structured_extensions: Tuple[str, ...] = (".jinja", ".j2")
    script_extensions: Tuple[str, ...] = (".pyt",)

    # Variable loading
    declarative_extensions: Tuple[str, ...] = (".yaml", ".yml")
    executable_extensions: Tuple[str, ...] = (".py",)

    # Environment forced onto shell commands so tools keep emitting colors
    shell_env: dict = field(default_factory=lambda: {
        "CLICOLOR_FORCE": "1",
        "CLICOLOR": "1",
        "COLORTERM": "truecolor",
        "TERM": "xterm-256color",
    })

    @classmethod
    def from_env(cls) -> "ScrollsmithConfig":
        """Create config from environment variables.

        Environment variables:
            SCROLLSMITH_DESCRIPTOR: Package descriptor file name
            SCROLLSMITH_MODULES_DIR: Dependency module cache directory
            SCROLLSMITH_LIB_DIR: Script library directory name

        Returns:
            ScrollsmithConfig instance with values from environment or defaults
        """
        return cls(
            descriptor_name=os.getenv("SCROLLSMITH_DESCRIPTOR", cls.descriptor_name),
            modules_dir=os.getenv("SCROLLSMITH_MODULES_DIR", cls.modules_dir),
            lib_dir=os.getenv("SCROLLSMITH_LIB_DIR", cls.lib_dir),
        )


# Global config instance (can be overridden)
_config: Optional[ScrollsmithConfig] = None


def get_config() -> ScrollsmithConfig:
    """Get the global scrollsmith configuration.

    Returns:
        ScrollsmithConfig instance (creates from environment if not set)
    """
    global _config
    if _config is None:
        _config = ScrollsmithConfig.from_env()
    return _config


def set_config(config: Optional[ScrollsmithConfig]):
    """Set the global scrollsmith configuration.

    Args:
        config: ScrollsmithConfig instance to use globally, or None to
                re-read the environment on next access
    """
    global _config
    _config = config
