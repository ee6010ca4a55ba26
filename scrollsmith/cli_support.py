"""Shared utilities for scrollsmith CLI modules."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Optional

import typer
from rich.console import Console
from rich.markup import escape

from scrollsmith.core.errors import ScriptError, ScrollsmithError
from scrollsmith.core.generator import EventKind, GeneratorEvent
from scrollsmith.core.package_loader import PackageContext, PackageLoader
from scrollsmith.scripting.runtime import source_window

EventObserver = Callable[[GeneratorEvent], None]


def is_mock() -> bool:
    """Return True when CLI runs in mock mode."""
    return os.environ.get("SCROLLSMITH_MOCK") == "1"


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> None:
    """Set up file logging for CLI commands.

    Args:
        log_file: Path to log file (optional)
        verbose: Enable verbose logging
    """
    from scrollsmith.core.logger import setup_file_logging as _setup_file_logging
    _setup_file_logging(log_file=log_file, verbose=verbose)


def load_package(console: Console, start: Optional[Path] = None) -> PackageContext:
    """Load the package enclosing the current directory.

    Raises:
        typer.Exit: No descriptor found, or the descriptor is invalid
    """
    loader = PackageLoader()
    root = loader.find_root(start)
    if root is None:
        print_error(console, f"No {loader.settings.descriptor_name} found in current directory or parents")
        print_info(console, "Run 'scrollsmith init' to create one")
        raise typer.Exit(1)

    try:
        return loader.load_context(root)
    except ScrollsmithError as e:
        handle_cli_error(e, console)


def handle_cli_error(
    e: Exception,
    console: Console,
    verbose: bool = False,
    exit_code: int = 1
) -> None:
    """Handle CLI errors with consistent formatting.

    Script failures that could be located are shown with the lines around
    the failing one.

    Args:
        e: Exception to handle
        console: Rich console for output
        verbose: Show exception traceback if True
        exit_code: Exit code to use
    """
    console.print(f"[red]Error:[/red] {escape(str(e))}")

    if isinstance(e, ScriptError) and e.source_error is not None and e.script:
        console.print(f"[dim]  --> {escape(e.source_error.location)}:{e.source_error.line}[/dim]")
        for number, text, failing in source_window(e.script, e.source_error):
            marker = "[red]>[/red]" if failing else " "
            console.print(f"{marker} {number:>4} | {escape(text)}")

    if verbose:
        console.print_exception()
    raise typer.Exit(exit_code)


def fan_out(*observers: Optional[EventObserver]) -> EventObserver:
    """Combine several observers into the single one the generator accepts."""
    active = [observer for observer in observers if observer is not None]

    def notify(event: GeneratorEvent) -> None:
        for observer in active:
            observer(event)

    return notify


def console_observer(console: Console, verbose: bool = False) -> EventObserver:
    """Print generator progress to the console."""
    def notify(event: GeneratorEvent) -> None:
        if event.kind is EventKind.START:
            if verbose:
                console.print(f"[dim]{escape(event.message)}[/dim]")
        elif event.kind is EventKind.MESSAGE:
            print_warning(console, escape(event.message))
        else:
            message = escape(event.message)
            for tag, color in (("[DONE]", "green"), ("[SKIP]", "dim"), ("[KEEP]", "yellow")):
                escaped_tag = escape(tag)
                if message.startswith(escaped_tag):
                    message = f"[{color}]{escaped_tag}[/{color}]{message[len(escaped_tag):]}"
                    break
            console.print(message)

    return notify


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    """Print success message with consistent formatting.

    Args:
        console: Rich console for output
        message: Success message
        prefix: Prefix symbol (default: ✓)
    """
    console.print(f"[green]{prefix}[/green] {message}")


def print_error(console: Console, message: str, prefix: str = "✗") -> None:
    """Print error message with consistent formatting."""
    console.print(f"[red]{prefix}[/red] {message}")


def print_warning(console: Console, message: str, prefix: str = "⚠") -> None:
    """Print warning message with consistent formatting."""
    console.print(f"[yellow]{prefix}[/yellow] {message}")


def print_info(console: Console, message: str, prefix: str = "ℹ") -> None:
    """Print info message with consistent formatting."""
    console.print(f"[cyan]{prefix}[/cyan] {message}")
