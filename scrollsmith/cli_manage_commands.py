"""Descriptor editing CLI commands - add and remove scrolls, targets, repositories."""
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from scrollsmith.cli_support import handle_cli_error, load_package, print_info, print_success, print_warning
from scrollsmith.core.errors import ResolutionError
from scrollsmith.core.package_loader import PackageContext, PackageLoader
from scrollsmith.core.storage import remove_tree, resolve_inner_path, write_file
from scrollsmith.models.package import PackageConfig, RepositoryEntry, ScrollEntry, TargetEntry

# Module-level console instance (will be set by register function)
console: Console = Console()

SAMPLE_TEMPLATE = """# Generated content

Author: {{ scroll.author }}
Scroll: {{ scroll.name }}
Date: {{ now().date() }}
"""

SAMPLE_VARIABLES = """author: "Developer"
name: "{name}"
"""


def _save(context: PackageContext, config: PackageConfig, message: str) -> None:
    PackageLoader(context.settings).save(context.descriptor_path, config)
    print_success(console, message)


def scroll_add(
    name: str = typer.Option(..., "--name", "-n", help="Name of the scroll"),
    path: str = typer.Option(..., "--path", "-p", help="Path to the scroll directory"),
    about: Optional[str] = typer.Option(None, "--about", help="Short description"),
):
    """Add a scroll and scaffold a sample template for it."""
    context = load_package(console)

    try:
        inner = resolve_inner_path(path)
    except ResolutionError as e:
        handle_cli_error(e, console)

    if any(entry.name == name for entry in context.config.scrolls):
        print_warning(console, f"Skipped! Scroll {escape(name)} already exists")
        return

    directory = context.root / inner
    template = directory / "templates" / "README.md.jinja"
    variables = directory / "variables" / "scroll.yaml"
    if not template.exists():
        write_file(template, SAMPLE_TEMPLATE)
    if not variables.exists():
        write_file(variables, SAMPLE_VARIABLES.format(name=name))

    entry = ScrollEntry(name=name, path=inner.as_posix(), about=about)
    config = context.config.model_copy(update={'scrolls': [*context.config.scrolls, entry]})
    _save(context, config, f"Added scroll @/{escape(name)} at {escape(inner.as_posix())}")


def scroll_remove(
    name: str = typer.Option(..., "--name", "-n", help="Name of the scroll"),
    purge: bool = typer.Option(False, "--purge", help="Also delete the scroll directory"),
):
    """Remove a scroll entry. Its files are kept unless --purge is given."""
    context = load_package(console)
    removed = [entry for entry in context.config.scrolls if entry.name == name]
    remaining = [entry for entry in context.config.scrolls if entry.name != name]
    if not removed:
        print_info(console, f"No scroll with name: {escape(name)}")
        return

    if purge:
        try:
            directory = context.root / resolve_inner_path(removed[0].path)
        except ResolutionError as e:
            handle_cli_error(e, console)
        if directory.is_dir():
            remove_tree(directory)
            print_info(console, f"Deleted {escape(str(directory))}")

    _save(context, context.config.model_copy(update={'scrolls': remaining}), f"Removed scroll @/{escape(name)}")


def target_add(
    name: str = typer.Option(..., "--name", "-n", help="Name of the target"),
    path: str = typer.Option(..., "--path", "-p", help="Target directory path"),
):
    """Add a well-known target."""
    context = load_package(console)
    if any(entry.name == name for entry in context.config.targets):
        print_warning(console, f"Skipped! Target {escape(name)} already exists")
        return
    entry = TargetEntry(name=name, path=path)
    config = context.config.model_copy(update={'targets': [*context.config.targets, entry]})
    _save(context, config, f"Added target {escape(name)} → {escape(path)}")


def target_remove(name: str = typer.Option(..., "--name", "-n", help="Name of the target")):
    """Remove a well-known target."""
    context = load_package(console)
    remaining = [entry for entry in context.config.targets if entry.name != name]
    if len(remaining) == len(context.config.targets):
        print_info(console, f"No target with name: {escape(name)}")
        return
    _save(context, context.config.model_copy(update={'targets': remaining}), f"Removed target {escape(name)}")


def repository_add(
    name: str = typer.Option(..., "--name", "-n", help="Name of the repository"),
    uri: str = typer.Option(..., "--uri", "-u", help="URI of the repository"),
):
    """Declare a dependency repository."""
    context = load_package(console)
    if any(entry.name == name for entry in context.config.repositories):
        print_warning(console, f"Skipped! Repository {escape(name)} already exists")
        return
    try:
        entry = RepositoryEntry(name=name, uri=uri)
    except ValueError as e:
        handle_cli_error(e, console)
    config = context.config.model_copy(update={'repositories': [*context.config.repositories, entry]})
    _save(context, config, f"Added repository {escape(name)}")
    print_info(console, "Run 'scrollsmith install' to fetch it")


def repository_remove(
    name: str = typer.Option(..., "--name", "-n", help="Name of the repository"),
    purge: bool = typer.Option(False, "--purge", help="Also delete the fetched module"),
):
    """Remove a dependency repository. Its module checkout is kept unless --purge is given."""
    context = load_package(console)
    remaining = [entry for entry in context.config.repositories if entry.name != name]
    if len(remaining) == len(context.config.repositories):
        print_info(console, f"No repository with name: {escape(name)}")
        return

    module_root = context.module_root(name)
    if purge and module_root.is_dir():
        remove_tree(module_root)
        print_info(console, f"Deleted {escape(str(module_root))}")
    config = context.config.model_copy(update={'repositories': remaining})
    _save(context, config, f"Removed repository {escape(name)}")


def register_manage_commands(app: typer.Typer, shared_console: Console):
    """Register descriptor editing commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    scroll_app = typer.Typer(help="Manage set of scrolls")
    scroll_app.command("add")(scroll_add)
    scroll_app.command("remove")(scroll_remove)
    app.add_typer(scroll_app, name="scroll")

    target_app = typer.Typer(help="Manage set of targets")
    target_app.command("add")(target_add)
    target_app.command("remove")(target_remove)
    app.add_typer(target_app, name="target")

    repository_app = typer.Typer(help="Manage set of repositories")
    repository_app.command("add")(repository_add)
    repository_app.command("remove")(repository_remove)
    app.add_typer(repository_app, name="repository")
