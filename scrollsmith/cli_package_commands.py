"""Package CLI commands - init, install, list."""
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from scrollsmith.cli_support import (
    handle_cli_error,
    is_mock,
    load_package,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from scrollsmith.core.errors import ConfigError
from scrollsmith.core.package_loader import PackageLoader
from scrollsmith.core.resolver import PackageResolver
from scrollsmith.models.package import PackageConfig, RepositoryEntry, TargetEntry
from scrollsmith.services.git_manager import GitManager

# Module-level console instance (will be set by register function)
console: Console = Console()

WORKDIR_TARGET_NAME = "@"
WORKDIR_TARGET_PATH = "."


def _parse_repository(value: str) -> RepositoryEntry:
    name, separator, uri = value.partition('=')
    if not separator or not name or not uri:
        raise typer.BadParameter(f"Expected NAME=URI, got '{value}'", param_hint="--repository")
    try:
        return RepositoryEntry(name=name, uri=uri)
    except ValidationError as e:
        raise typer.BadParameter(str(e.errors()[0]['msg']), param_hint="--repository") from e


def init(
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Package name (default: directory name)"),
    repository: List[str] = typer.Option(
        [], "--repository", "-r",
        help="Repository to depend on, as NAME=URI (repeatable)",
    ),
    path: Optional[str] = typer.Option(None, "--path", help="Package directory (default: current directory)"),
):
    """Create or update the package descriptor.

    An existing descriptor keeps its entries; new repositories are appended
    and the working-directory target '@' is added when missing.

    Examples:
        scrollsmith init
        scrollsmith init --name my-templates -r central=git@github.com:org/scrolls.git
    """
    root = Path(path).resolve() if path else Path.cwd()
    loader = PackageLoader()
    descriptor = loader.descriptor_path(root)
    additions = [_parse_repository(value) for value in repository]

    try:
        if descriptor.exists():
            current = loader.load(descriptor)
            print_info(console, f"Updating existing {escape(descriptor.name)}")
        else:
            current = PackageConfig(name=name or root.name)

        known = {entry.name for entry in current.repositories}
        repositories = list(current.repositories)
        for entry in additions:
            if entry.name in known:
                print_warning(console, f"Repository {escape(entry.name)} already declared, skipping")
                continue
            repositories.append(entry)
            known.add(entry.name)

        targets = list(current.targets)
        if not any(target.name == WORKDIR_TARGET_NAME for target in targets):
            targets.append(TargetEntry(name=WORKDIR_TARGET_NAME, path=WORKDIR_TARGET_PATH))

        config = current.model_copy(update={
            'name': name or current.name,
            'repositories': repositories,
            'targets': targets,
        })
        loader.save(descriptor, config)
    except (ConfigError, OSError) as e:
        handle_cli_error(e, console)

    print_success(console, f"Saved {escape(str(descriptor))}")
    if config.repositories:
        print_info(console, "Run 'scrollsmith install' to fetch repositories")


def install(
    update: bool = typer.Option(False, "--update", "-u", help="Pull repositories that are already installed"),
):
    """Recursively fetch dependent repositories into the module cache."""
    context = load_package(console)

    if not context.config.repositories:
        print_info(console, "No repositories declared")
        return

    results = GitManager(mock=is_mock()).install(context, update=update)

    failed = [name for name, ok in results.items() if not ok]
    for name, ok in results.items():
        if ok:
            print_success(console, f"{escape(name)} → {escape(str(context.module_root(name)))}")
        else:
            print_error(console, f"{escape(name)} could not be fetched")

    if failed:
        raise typer.Exit(1)


def scrolls(
    condensed: bool = typer.Option(False, "--condensed", help="Do not print table borders in output"),
):
    """List scrolls of the package and its repositories."""
    context = load_package(console)
    table = _table("Scrolls", ["Name", "About", "Path"], condensed)
    for ref in PackageResolver(context).list_scrolls():
        table.add_row(ref.full_name, escape(ref.entry.about or ""), escape(str(ref.directory)))
    console.print(table)


def actions(
    condensed: bool = typer.Option(False, "--condensed", help="Do not print table borders in output"),
):
    """List actions of the package and its repositories."""
    context = load_package(console)
    table = _table("Actions", ["Name", "About", "Options"], condensed)
    for ref in PackageResolver(context).list_actions():
        options = ", ".join(
            f"--{arg.name}{'' if arg.kind == 'flag' else ' <value>'}{' (required)' if arg.required else ''}"
            for arg in ref.entry.args
        )
        table.add_row(ref.full_name, escape(ref.entry.about or ""), escape(options))
    console.print(table)


def targets(
    condensed: bool = typer.Option(False, "--condensed", help="Do not print table borders in output"),
):
    """List well-known targets."""
    context = load_package(console)
    table = _table("Targets", ["Name", "Path"], condensed)
    for target in context.config.targets:
        table.add_row(escape(target.name), escape(target.path))
    console.print(table)


def repositories(
    condensed: bool = typer.Option(False, "--condensed", help="Do not print table borders in output"),
):
    """List declared repositories and whether they are installed."""
    context = load_package(console)
    table = _table("Repositories", ["Name", "URI", "Installed"], condensed)
    for repository in context.config.repositories:
        installed = context.module_root(repository.name).is_dir()
        table.add_row(
            escape(repository.name),
            escape(repository.uri),
            "[green]yes[/green]" if installed else "[yellow]no[/yellow]",
        )
    console.print(table)


def _table(title: str, columns: List[str], condensed: bool) -> Table:
    table = Table(title=None if condensed else title, show_header=True, header_style="bold cyan")
    if condensed:
        table.box = None
    for column in columns:
        table.add_column(column)
    return table


def register_package_commands(app: typer.Typer, shared_console: Console):
    """Register package commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    app.command()(init)
    app.command()(install)

    list_app = typer.Typer(help="List scrolls, actions, targets and repositories")
    list_app.command("scrolls")(scrolls)
    list_app.command("actions")(actions)
    list_app.command("targets")(targets)
    list_app.command("repositories")(repositories)
    app.add_typer(list_app, name="list")
