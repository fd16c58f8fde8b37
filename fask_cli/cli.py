"""Typer-based CLI for fask: find TODOs in your codebase."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import __version__, config, config_manager
from .errors import FaskError, GitError
from .git_history import blame_lines, diffs_since, parse_since_date
from .models import Report, ScanOptions
from .render import render_errors, render_report, report_to_dict
from .scanner import scan_current, scan_history
from .sources import list_files

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

# Option defaults: built-in values overlaid with ~/.fask/config.toml
defaults = config_manager.resolve_scan_defaults()

app = typer.Typer(
    help="🔎 fask: find and search for TODOs in your codebase.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(
    help="⚙️  Configuration: default pattern, context and workers.",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"fask v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    package_logger = logging.getLogger("fask_cli")
    package_logger.handlers = [RichHandler(console=err_console, show_path=False)]
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable debug logging."),
):
    """fask: locate TODO-style markers in the working tree or in recent history."""
    _configure_logging(verbose)


def _fail(exc: Exception) -> NoReturn:
    err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
    raise typer.Exit(code=1)


def _interrupted() -> NoReturn:
    err_console.print("[yellow]Interrupted.[/yellow]")
    raise typer.Exit(code=130)


def _emit_json(report: Report) -> None:
    typer.echo(json.dumps(report_to_dict(report), indent=2))


@app.command("current")
def current(
    pattern: str = typer.Option(defaults["pattern"], "--pattern", "-p", help="Pattern to search for."),
    context: int = typer.Option(defaults["context"], "--context", "-C", min=0, help="Number of context lines to show."),
    file_type: Optional[str] = typer.Option(None, "--file-type", "-t", help='File pattern to include (e.g. "*.rs", "*.js").'),
    directory: Path = typer.Option(Path("."), "--directory", "-d", help="Directory to search in."),
    ignore_case: bool = typer.Option(defaults["ignore_case"], "--ignore-case/--case-sensitive", "-i", help="Match case-insensitively."),
    workers: Optional[int] = typer.Option(defaults["workers"], "--workers", "-j", min=1, help="Worker threads (default: CPU count)."),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
):
    """Search for TODOs in current files (like ripgrep).

    Example:
      fask current
      fask current -p FIXME -C 4 -t "*.py" -d ./src
    """
    try:
        options = ScanOptions(pattern=pattern, radius=context, ignore_case=ignore_case, workers=workers)
        files = list_files(directory, file_type, exclude=defaults["exclude"])
        if not as_json:
            console.print(f"Searching for '{escape(pattern)}' in current files...\n")
        report = scan_current(files, options)
    except FaskError as exc:
        _fail(exc)
    except KeyboardInterrupt:
        _interrupted()

    if as_json:
        _emit_json(report)
    elif report.is_empty:
        console.print("No matches found.")
    else:
        render_report(report, console, pattern, ignore_case)
        console.print(f"\nFound {report.match_count} match(es) in {report.file_count} file(s).")
    render_errors(report.errors, err_console)


def _attach_origins(report: Report, directory: Path) -> None:
    for file_report in report.files:
        lines = [m.line_number for m in file_report.matches]
        try:
            file_report.origins = blame_lines(directory, file_report.path, lines)
        except GitError as exc:
            logger.warning("Could not blame %s: %s", file_report.path, exc)


@app.command("since")
def since(
    date: str = typer.Option(..., "--date", "-d", help='Date in YYYY-MM-DD format (e.g. "2025-12-01").'),
    pattern: str = typer.Option(defaults["pattern"], "--pattern", "-p", help="Pattern to search for."),
    context: int = typer.Option(defaults["context"], "--context", "-C", min=0, help="Number of context lines to show."),
    directory: Path = typer.Option(Path("."), "--directory", "-D", help="Directory to search in."),
    ignore_case: bool = typer.Option(defaults["ignore_case"], "--ignore-case/--case-sensitive", "-i", help="Match case-insensitively."),
    workers: Optional[int] = typer.Option(defaults["workers"], "--workers", "-j", min=1, help="Worker threads (default: CPU count)."),
    blame: bool = typer.Option(True, "--blame/--no-blame", help="Show the commit that added each match."),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
):
    """Search for TODOs added after a specific date in git history.

    Only lines that were themselves added since the date count; older
    markers next to new edits are not reported.

    Example:
      fask since --date 2025-12-01
      fask since -d 2025-12-01 -p FIXME -D ./backend
    """
    try:
        since_date = parse_since_date(date)
        options = ScanOptions(pattern=pattern, radius=context, ignore_case=ignore_case, workers=workers)
        if not as_json:
            console.print(f"Searching for '{escape(pattern)}' in lines added since {since_date}...\n")
        diffs, errors = diffs_since(directory, since_date, pattern=pattern, ignore_case=ignore_case)
        report = scan_history(diffs, options, errors)
        if blame:
            _attach_origins(report, directory)
    except FaskError as exc:
        _fail(exc)
    except KeyboardInterrupt:
        _interrupted()

    if as_json:
        _emit_json(report)
    elif report.is_empty:
        console.print(f"No '{escape(pattern)}' additions found since {since_date}.")
    else:
        console.print(f"Found {report.match_count} match(es):\n")
        render_report(report, console, pattern, ignore_case, show_counts=True)
    render_errors(report.errors, err_console)


@config_app.command("show")
def show_config():
    """Show scan defaults and where they come from."""
    saved = config_manager.load_scan_config()

    table = Table(title=f"Scan defaults ({config.CONFIG_FILE})", show_lines=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_column("Source", style="dim")
    for key in config_manager.SCAN_KEYS:
        if key in saved:
            table.add_row(key, escape(str(saved[key])), "config")
        else:
            builtin = config.DEFAULT_SCAN[key]
            shown = "cpu count" if key == "workers" and builtin is None else builtin
            table.add_row(key, escape(str(shown)), "default")
    console.print(table)


@config_app.command("set")
def set_config(
    pattern: Optional[str] = typer.Option(None, "--pattern", "-p", help="Default pattern."),
    context: Optional[int] = typer.Option(None, "--context", "-C", min=0, help="Default context lines."),
    workers: Optional[int] = typer.Option(None, "--workers", "-j", min=1, help="Default worker threads."),
    ignore_case: Optional[bool] = typer.Option(None, "--ignore-case/--case-sensitive", "-i", help="Default case sensitivity."),
    exclude: Optional[List[str]] = typer.Option(None, "--exclude", "-x", help="Directory name to skip (repeatable)."),
):
    """Save scan defaults to the config file.

    Example:
      fask config set --pattern FIXME --context 3
      fask config set --exclude vendor --exclude third_party
    """
    if pattern == "":
        _fail(ValueError("Pattern must not be empty"))
    values = {
        "pattern": pattern,
        "context": context,
        "workers": workers,
        "ignore_case": ignore_case,
        "exclude": list(exclude) if exclude else None,
    }
    if all(v is None for v in values.values()):
        raise typer.BadParameter("Nothing to set. Pass at least one option.")

    if not config_manager.save_scan_config(**values):
        _fail(OSError(f"Could not write {config.CONFIG_FILE}"))
    console.print(f"[green]✓[/green] Saved scan defaults to {escape(str(config.CONFIG_FILE))}")


@config_app.command("reset")
def reset_config():
    """Remove saved scan defaults."""
    if not config_manager.clear_scan_config():
        _fail(OSError(f"Could not write {config.CONFIG_FILE}"))
    console.print("[green]✓[/green] Scan defaults reset.")


if __name__ == "__main__":
    app()
