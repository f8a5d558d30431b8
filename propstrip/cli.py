"""Typer-based CLI for propstrip."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from . import __version__
from .config_manager import find_config_file, load_config, merge_overrides, resolve
from .diff_engine import DiffEngine
from .filters import discover_files
from .models import RewriteStatus
from .options import ConfigurationError
from .transform import rewrite

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="✂️  propstrip — remove or wrap React propTypes for production builds.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)

_STATUS_STYLE = {
    RewriteStatus.CHANGED: "[green]changed[/green]",
    RewriteStatus.UNCHANGED: "[dim]unchanged[/dim]",
    RewriteStatus.PARSE_FAILED: "[yellow]parse failed[/yellow]",
}
_ERROR_STYLE = "[red]error[/red]"


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"propstrip v{__version__}")
        raise typer.Exit()


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
    verbose: bool = typer.Option(False, "--verbose", help="Log every classification decision."),
):
    """propstrip: strip type-declaration metadata from component modules."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _fail(message: str, code: int = 2) -> None:
    err_console.print(f"[red]✗[/red] {message}")
    raise typer.Exit(code)


@app.command("strip")
def strip(
    paths: List[Path] = typer.Argument(..., help="Files or directories to process; '-' reads stdin."),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="remove, wrap or unsafe-wrap."),
    remove_import: Optional[bool] = typer.Option(
        None, "--remove-import/--keep-import", help="Also drop imports left unused (remove mode only).",
    ),
    library: Optional[List[str]] = typer.Option(
        None, "--library", "-l", help="Extra tracked library; '/regex/' for a pattern.",
    ),
    class_matcher: Optional[List[str]] = typer.Option(
        None, "--class-matcher", "-c", help="Extra base-class name pattern marking components.",
    ),
    include: Optional[List[str]] = typer.Option(None, "--include", help="Only process matching paths."),
    exclude: Optional[List[str]] = typer.Option(None, "--exclude", help="Skip matching paths."),
    ignore: Optional[List[str]] = typer.Option(None, "--ignore", help="Skip filenames matching this regex."),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to a propstrip TOML file."),
    stdin_filename: str = typer.Option("stdin.jsx", "--stdin-filename", help="Name used to parse stdin."),
    write: bool = typer.Option(False, "--write", "-w", help="Rewrite files in place."),
    show_diff: bool = typer.Option(False, "--diff", "-d", help="Print a unified diff per changed file."),
    check: bool = typer.Option(False, "--check", help="Exit 1 if any file would change."),
    source_map: bool = typer.Option(False, "--source-map", help="With --write, emit <file>.map too."),
):
    """✂️  Remove or wrap propTypes in the given files.

    Example:
      propstrip strip src --mode wrap --diff
      propstrip strip src --remove-import --write
      cat Foo.jsx | propstrip strip -
    """
    try:
        settings = merge_overrides(load_config(config_path), {
            "mode": mode,
            "remove_import": remove_import,
            "additional_libraries": library,
            "class_name_matchers": class_matcher,
            "include": include,
            "exclude": exclude,
            "ignore_filenames": ignore,
        })
        options, file_filter = resolve(settings)
        options.validate()
    except ConfigurationError as e:
        _fail(str(e))

    if [str(p) for p in paths] == ["-"]:
        source = sys.stdin.read()
        result = rewrite(source, stdin_filename, options)
        sys.stdout.write(result.code if result.changed else source)
        if check and result.changed:
            raise typer.Exit(1)
        return

    missing = [p for p in paths if not p.exists()]
    if missing:
        _fail(f"Path not found: {missing[0]}")

    engine = DiffEngine()
    table = Table(title="propstrip", show_lines=False)
    table.add_column("File", style="cyan")
    table.add_column("Status")
    table.add_column("Sites", justify="right")
    table.add_column("Imports removed", justify="right")

    changed = errors = 0
    for file_path in discover_files(paths):
        if not file_filter(file_path.as_posix()):
            logger.debug("Filtered out %s", file_path)
            continue
        try:
            original = file_path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            table.add_row(str(file_path), _ERROR_STYLE, "-", "-")
            err_console.print(f"[red]✗[/red] {file_path}: {e}")
            errors += 1
            continue

        result = rewrite(original, str(file_path), options)
        status = _STATUS_STYLE[result.status]
        if result.status is RewriteStatus.PARSE_FAILED:
            logger.warning("Could not parse %s; left untouched", file_path)

        if result.changed:
            if show_diff:
                diff = engine.create_diff(result, original)
                console.print(Syntax(diff, "diff", theme="ansi_dark", background_color="default"))
            if write:
                try:
                    engine.write_result(file_path, result, original, source_map=source_map)
                except OSError as e:
                    err_console.print(f"[red]✗[/red] {file_path}: {e}")
                    status = _ERROR_STYLE
                    errors += 1
                else:
                    changed += 1
            else:
                changed += 1

        table.add_row(
            str(file_path),
            status,
            str(len(result.sites)),
            str(len(result.removed_imports)),
        )

    console.print(table)
    verb = "Rewrote" if write else "Would rewrite"
    console.print(f"{verb} {changed} file(s).")
    if not write and changed and not check:
        console.print("[dim]Run with --write to apply.[/dim]")

    if errors or (check and changed and not write):
        raise typer.Exit(1)


@app.command("show-config")
def show_config(
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to a propstrip TOML file."),
):
    """⚙️  Show the options resolved from the configuration file."""
    try:
        settings = load_config(config_path)
        options, file_filter = resolve(settings)
    except ConfigurationError as e:
        _fail(str(e))

    source = config_path or find_config_file()
    console.print(f"[bold]Config file:[/bold] {source or '[dim]none (defaults)[/dim]'}")

    table = Table(show_header=True)
    table.add_column("Option", style="cyan")
    table.add_column("Value")
    for key, value in options.describe().items():
        table.add_row(key, ", ".join(value) if isinstance(value, list) else str(value))
    table.add_row("include", ", ".join(p.pattern for p in file_filter.include) or "-")
    table.add_row("exclude", ", ".join(p.pattern for p in file_filter.exclude) or "-")
    table.add_row("ignore_filenames", file_filter.ignore.pattern if file_filter.ignore else "-")
    console.print(table)
