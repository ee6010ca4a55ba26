"""Generation CLI commands - generate scrolls, run actions."""
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from scrollsmith.cli_support import (
    console_observer,
    fan_out,
    handle_cli_error,
    load_package,
    print_info,
    print_success,
    setup_file_logging,
)
from scrollsmith.core.actions import ActionRunner, parse_cli_args
from scrollsmith.core.errors import ScrollsmithError
from scrollsmith.core.generator import Generator, render_summary
from scrollsmith.core.logger import get_logger, set_verbose
from scrollsmith.core.storage import resolve_search_locations, resolve_target
from scrollsmith.core.variables import load_overrides

logger = get_logger(__name__)

# Module-level console instance (will be set by register function)
console: Console = Console()


def generate(
    scroll: str = typer.Argument(..., help="Qualified scroll name (@/name or repository/name)"),
    target: Optional[str] = typer.Option(None, "--target", "-t", help="The name of a well-known target"),
    target_path: Optional[str] = typer.Option(None, "--target-path", "-p", help="The path to output directory"),
    variables: Optional[str] = typer.Option(
        None, "--variables", "-v",
        help="Path to a file or directory containing variable overrides",
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-d",
        help="Do not generate files; simply test the ability to render templates",
    ),
    max_depth: Optional[int] = typer.Option(
        None, "--max-depth",
        help="Maximum nesting of generation triggered from scripts",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Show every template as it renders"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Write a log file"),
):
    """Render a scroll into a target directory.

    Examples:
        scrollsmith generate @/readme -t docs
        scrollsmith generate central/service -p ./out -v overrides.yaml
        scrollsmith generate @/readme -p . --dry-run
    """
    set_verbose(verbose)
    if log_file or verbose:
        setup_file_logging(log_file=log_file, verbose=verbose)

    if not target and not target_path:
        console.print("[red]Error:[/red] Either --target or --target-path is required")
        raise typer.Exit(2)

    context = load_package(console)

    try:
        destination = resolve_target(context, target, target_path)
        overrides = None
        if variables:
            overrides = load_overrides(variables, resolve_search_locations(context))

        generator = Generator(
            context,
            on_event=fan_out(console_observer(console, verbose), _log_event),
            max_depth=max_depth,
        )
        outcomes = generator.generate(scroll, destination, dry_run=dry_run, overrides=overrides)
    except (ScrollsmithError, OSError) as e:
        handle_cli_error(e, console, verbose)

    summary = render_summary(outcomes)
    if dry_run:
        print_info(console, f"Dry run: {summary['dry_run']} template(s) rendered, nothing written")
    else:
        print_success(
            console,
            f"Generated {summary['written']} file(s) into {escape(str(destination))} "
            f"({summary['kept']} kept, {summary['skipped']} skipped)",
        )


def run(
    ctx: typer.Context,
    action: str = typer.Argument(..., help="Qualified action name (@/name or repository/name)"),
    verbose: bool = typer.Option(False, "--verbose", help="Show generator progress"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Write a log file"),
):
    """Run an action script.

    Options declared by the action follow its name.

    Examples:
        scrollsmith run @/release --version 1.2.0
        scrollsmith run @/bootstrap --with-ci
    """
    set_verbose(verbose)
    if log_file or verbose:
        setup_file_logging(log_file=log_file, verbose=verbose)

    context = load_package(console)

    try:
        observer = fan_out(console_observer(console, verbose), _log_event)
        runner = ActionRunner(context, Generator(context, on_event=observer))
        ref = runner.resolve(action)
        result = runner.run(action, parse_cli_args(ref.entry, ctx.args))
    except (ScrollsmithError, OSError) as e:
        handle_cli_error(e, console, verbose)

    if result is not None:
        console.print(escape(str(result)))


def _log_event(event) -> None:
    logger.debug(f"{event.kind.value}: {event.message}")


def register_generate_commands(app: typer.Typer, shared_console: Console):
    """Register generation commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    app.command()(generate)
    app.command(
        context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
    )(run)
