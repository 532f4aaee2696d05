"""CLI module for bintext."""

from bintext.cli import config, convert, delimiters
from bintext.cli.main import app, main_cli

__all__ = [
    "app",
    "main_cli",
    "config",
    "convert",
    "delimiters",
]
