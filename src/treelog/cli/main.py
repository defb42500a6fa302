"""
treelog CLI - Main entry point
"""

import json
import sys
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

import treelog
from treelog.configuration import command_line
from treelog.core import levels
from treelog.core.exceptions.custom_exceptions import TreelogError
from treelog.core.logging.logger import get_logger

app = typer.Typer(
    name="treelog",
    help="Hierarchical logging with pipelines",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)

PRESENTERS = ["text", "json", "color", "message"]


def _parse_custom_levels(custom: List[str]) -> dict:
    parsed = {}
    for item in custom:
        name, sep, value = item.partition("=")
        if not sep or not value.strip().lstrip("-").isdigit():
            raise typer.BadParameter(f"expected NAME=VALUE, got '{item}'", param_hint="--custom")
        parsed[name.strip()] = int(value)
    return parsed


def _verbosity_flag(verbose: int, quiet: bool, silent: bool) -> Optional[str]:
    """Translate counted -v and the quiet switches into a command line flag."""
    if silent:
        return "--silent"
    if quiet:
        return "--quiet"
    if verbose:
        return "-" + "v" * min(verbose, 3)
    return None


@app.command()
def version() -> None:
    """Show treelog version information"""
    table = Table(title="treelog Version Information")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("treelog", treelog.__version__)
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


@app.command(name="levels")
def list_levels(
    custom: List[str] = typer.Option(
        [], "--custom", "-c", help="Register a custom level first (NAME=VALUE)"
    ),
) -> None:
    """List builtin and custom levels"""
    try:
        if custom:
            treelog.set_levels(_parse_custom_levels(custom))
    except TreelogError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title="Levels")
    table.add_column("Name", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_column("Kind", style="yellow")

    custom_names = {name.upper() for name in levels.get_custom_levels()}
    for name, value in sorted(treelog.get_levels().items(), key=lambda item: item[1]):
        table.add_row(name, str(value), "custom" if name in custom_names else "builtin")

    console.print(table)


@app.command()
def emit(
    message: str = typer.Argument(..., help="Message to log"),
    logger_name: str = typer.Option("cli", "--logger", "-l", help="Logger to log on"),
    level: str = typer.Option("warning", "--level", help="Level of the record"),
    presenter: str = typer.Option(
        "text", "--presenter", "-p", help=f"Presenter: {', '.join(PRESENTERS)}"
    ),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Lower the root level"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only errors and above"),
    silent: bool = typer.Option(False, "--silent", help="Only critical records"),
) -> None:
    """
    Emit one record through a pipeline on LOGGER writing to stdout.

    The root level follows the verbosity flags through the default command
    line mapping (-v warning, -vv info, -vvv debug, --quiet error,
    --silent critical); without flags it stays at warning.
    """
    if presenter not in PRESENTERS:
        raise typer.BadParameter(
            f"must be one of: {', '.join(PRESENTERS)}", param_hint="--presenter"
        )

    flag = _verbosity_flag(verbose, quiet, silent)
    root_level = command_line.detect_verbosity_from_cli(argv=[flag] if flag else [])

    try:
        treelog.config(level=root_level if root_level is not None else "warning", pipelines=[])
        log = treelog.logger(
            logger_name,
            {"pipelines": [{"presenter": presenter, "outputs": [{"type": "console", "stream": sys.stdout}]}]},
        )
        level_no = levels.value_of(level)
    except TreelogError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not log.is_enabled_for(level_no):
        err_console.print(
            f"[dim]filtered: {levels.name_of(level_no)} is below "
            f"{levels.name_of(log.effective_level())}[/dim]"
        )
        return

    logger.debug("emitting record", logger_name=logger_name, level=level_no, presenter=presenter)
    log.log(level_no, message)
    treelog.flush()


@app.command(name="config")
def show_config() -> None:
    """Show the current root configuration"""
    current = treelog.get_config()
    console.print_json(json.dumps(current, default=str))


if __name__ == "__main__":
    app()
