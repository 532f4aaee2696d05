"""Main CLI entry point for bintext."""

import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from bintext import __version__
from bintext.config import Settings, get_settings
from bintext.exceptions import BinTextError
from bintext.logging_config import get_logger, setup_logging

app = typer.Typer(
    name="bintext",
    help="bintext - Render binary files as chunked binary-digit text",
    add_completion=True,
    rich_markup_mode="rich",
    no_args_is_help=False,
)

console = Console()
console_err = Console(stderr=True)
logger = get_logger(__name__)


class CLIState:
    """Global CLI state."""

    output_format: str = "table"
    verbose: bool = False
    quiet: bool = False
    settings: Optional[Settings] = None


state = CLIState()


def version_callback(value: bool) -> None:
    """Callback for --version flag."""
    if value:
        console.print(f"bintext version: {__version__}")
        console.print(f"Python: {sys.version.split()[0]}")
        raise typer.Exit(0)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version information and exit",
        callback=version_callback,
        is_eager=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file path",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    output: str = typer.Option(
        "table",
        "--output",
        "-o",
        help="Output format: table, json",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output",
    ),
) -> None:
    """
    bintext - Binary file to binary-digit text converter

    Reads a file in fixed-size chunks and writes every byte as 8 binary digits,
    with an optional delimiter after each full chunk.
    """
    if output not in ["table", "json"]:
        console_err.print(f"[red]Error:[/red] Invalid output format: {output}")
        console_err.print("Valid formats: table, json")
        raise typer.Exit(1)

    state.output_format = output
    state.verbose = verbose
    state.quiet = quiet

    if config:
        if not quiet:
            console_err.print(f"[yellow]Loading config from: {config}[/yellow]")
        state.settings = get_settings(config_path=config, reload=True)
    else:
        state.settings = get_settings()

    if verbose:
        state.settings.log_level = "DEBUG"

    setup_logging()

    ctx.obj = state


def handle_error(error: Exception) -> None:
    """Handle CLI errors with user-friendly messages.

    Args:
        error: Exception to handle
    """
    if isinstance(error, BinTextError):
        console_err.print(f"\n[red]Error:[/red] {escape(error.message)}")

        if state.verbose and error.context:
            console_err.print("\n[yellow]Context:[/yellow]")
            for key, value in error.context.items():
                console_err.print(f"  {key}: {value}")
    else:
        console_err.print(f"\n[red]Unexpected Error:[/red] {escape(str(error))}")

        if state.verbose:
            import traceback

            console_err.print("\n[yellow]Traceback:[/yellow]")
            console_err.print(traceback.format_exc())

    raise typer.Exit(1)


from bintext.cli import config, convert, delimiters  # noqa: E402

app.command("convert")(convert.convert)
app.command("delimiters")(delimiters.list_delimiters)
app.add_typer(config.app, name="config", help="Configuration management")


def main_cli() -> None:
    """Entry point for CLI application with error handling."""
    try:
        app()
    except BinTextError as e:
        handle_error(e)
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        handle_error(e)


if __name__ == "__main__":
    main_cli()
