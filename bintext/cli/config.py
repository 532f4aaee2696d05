"""Configuration management CLI commands."""

import json
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from bintext.cli.delimiters import describe_delimiter
from bintext.cli.output import print_error, print_info, print_panel
from bintext.config import Settings, get_settings
from bintext.logging_config import get_logger

app = typer.Typer(help="Configuration management")
console = Console()
logger = get_logger(__name__)

SECTIONS = ["conversion", "logging"]


@app.command("show")
def show_config(
    section: Optional[str] = typer.Option(
        None,
        "--section",
        "-s",
        help="Show specific section: conversion, logging",
    ),
    format: str = typer.Option(
        "table",
        "--format",
        "-f",
        help="Output format: table, yaml, json",
    ),
) -> None:
    """
    Show current configuration.

    Displays the effective settings after merging defaults, the YAML config
    file and BINTEXT_* environment variables.
    """
    if section and section not in SECTIONS:
        print_error(f"Unknown section: {section}")
        print_info(f"Available sections: {', '.join(SECTIONS)}")
        raise typer.Exit(1)

    try:
        settings = get_settings()
    except Exception as e:
        logger.exception("Failed to load configuration")
        print_error(f"Failed to load configuration: {str(e)}")
        raise typer.Exit(1)

    if format == "yaml":
        _show_config_yaml(settings, section)
    elif format == "json":
        _show_config_json(settings, section)
    else:
        _show_config_table(settings, section)


def _show_config_table(settings: Settings, section: Optional[str] = None) -> None:
    """Display configuration in table format."""
    console.print()
    print_panel("bintext Configuration", border_style="cyan")
    console.print()

    sections = {
        "conversion": _get_conversion_config,
        "logging": _get_logging_config,
    }
    if section:
        sections = {section: sections[section]}

    for get_config_func in sections.values():
        console.print(get_config_func(settings))
        console.print()


def _show_config_yaml(settings: Settings, section: Optional[str] = None) -> None:
    """Display configuration in YAML format."""
    config_dict = _settings_to_dict(settings)
    if section:
        config_dict = {section: config_dict[section]}

    config_yaml = yaml.dump(config_dict, default_flow_style=False, sort_keys=False)
    syntax = Syntax(config_yaml, "yaml", theme="monokai", line_numbers=True)
    console.print(syntax)


def _show_config_json(settings: Settings, section: Optional[str] = None) -> None:
    """Display configuration in JSON format."""
    config_dict = _settings_to_dict(settings)
    if section:
        config_dict = {section: config_dict[section]}

    console.print_json(json.dumps(config_dict, indent=2))


def _get_conversion_config(settings: Settings) -> Table:
    """Get conversion configuration table."""
    table = Table(title="Conversion Settings", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    table.add_row("Chunk Size", f"{settings.chunk_size} bytes")
    table.add_row("Delimiter", describe_delimiter(settings.delimiter))
    table.add_row("Output Encoding", settings.output_encoding)

    return table


def _get_logging_config(settings: Settings) -> Table:
    """Get logging configuration table."""
    table = Table(title="Logging Settings", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    table.add_row("Log Level", settings.log_level)
    table.add_row("Log Format", settings.log_format)

    return table


def _settings_to_dict(settings: Settings) -> dict:
    """Convert settings object to the nested layout used by config.yaml."""
    return {
        "conversion": {
            "chunk_size": settings.chunk_size,
            "delimiter": settings.delimiter,
            "output_encoding": settings.output_encoding,
        },
        "logging": {
            "level": settings.log_level,
            "format": settings.log_format,
        },
    }
