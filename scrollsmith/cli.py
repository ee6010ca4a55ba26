#!/usr/bin/env python3
"""Scrollsmith CLI - scaffolding from parametrized template packages."""

import typer
from rich.console import Console

from scrollsmith.cli_generate_commands import register_generate_commands
from scrollsmith.cli_manage_commands import register_manage_commands
from scrollsmith.cli_package_commands import register_package_commands

app = typer.Typer(
    name="scrollsmith",
    help="""Scrollsmith - render scrolls of templates into your projects

Quick start:
  scrollsmith init                          # Create scrollsmith.yaml
  scrollsmith scroll add -n readme -p scrolls/readme
  scrollsmith list scrolls                  # Browse local and fetched scrolls
  scrollsmith generate @/readme -t @        # Render into the working directory

More commands: scrollsmith --help
""",
    add_completion=False,
)

console = Console()

# Attach modular subcommands
register_package_commands(app, console)
register_generate_commands(app, console)
register_manage_commands(app, console)

if __name__ == "__main__":
    app()
