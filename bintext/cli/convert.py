"""Conversion command for bintext.

Runs the chunked conversion on the converter's worker thread while the main
thread renders progress and turns Ctrl-C into a cooperative cancellation.
"""

from concurrent.futures import Future, wait
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
)

from bintext.cli.delimiters import DelimiterName, describe_delimiter, resolve_delimiter
from bintext.cli.output import (
    print_dict,
    print_error,
    print_json,
    print_success,
    print_warning,
)
from bintext.config import get_settings
from bintext.conversion import (
    CancellationToken,
    ChunkedBinaryConverter,
    ConversionConfig,
    ConversionRequest,
    ConversionResult,
    InvalidArgumentError,
)
from bintext.logging_config import get_logger

console = Console()
logger = get_logger(__name__)

EXIT_CANCELLED = 130


def _format_bytes(bytes_value: float) -> str:
    """Format bytes as human-readable string."""
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if bytes_value < 1024.0:
            return f"{bytes_value:.2f} {unit}"
        bytes_value /= 1024.0
    return f"{bytes_value:.2f} PB"


def _format_duration(seconds: float) -> str:
    """Format duration in seconds as human-readable string."""
    if seconds < 1:
        return f"{seconds * 1000:.2f}ms"
    elif seconds < 60:
        return f"{seconds:.2f}s"
    minutes = int(seconds // 60)
    secs = seconds % 60
    return f"{minutes}m {secs:.1f}s"


def _wait_for_result(
    future: "Future[ConversionResult]", token: CancellationToken
) -> ConversionResult:
    """Block until the worker finishes, cancelling on Ctrl-C."""
    while True:
        try:
            done, _ = wait([future], timeout=0.1)
        except KeyboardInterrupt:
            if not token.cancelled:
                token.cancel()
                print_warning("Cancelling after the current chunk...")
            continue
        if done:
            return future.result()


def _run_conversion(
    converter: ChunkedBinaryConverter,
    request: ConversionRequest,
    token: CancellationToken,
    show_progress: bool,
) -> ConversionResult:
    if not show_progress:
        return _wait_for_result(converter.submit(request, is_cancelled=token), token)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Converting...", total=None)

        def _on_progress(chunk_index: int, total_chunks: int) -> None:
            progress.update(
                task,
                completed=chunk_index,
                total=total_chunks,
                description=f"Processing chunk {chunk_index} out of {total_chunks}",
            )

        future = converter.submit(request, is_cancelled=token, on_progress=_on_progress)
        return _wait_for_result(future, token)


def convert(
    ctx: typer.Context,
    source: Path = typer.Argument(..., help="Binary file to read"),
    destination: Path = typer.Argument(
        ..., help="Text file to write (created or truncated)"
    ),
    chunk_size: Optional[str] = typer.Option(
        None,
        "--chunk-size",
        "-b",
        help="Chunk size in bytes (default from settings)",
    ),
    delimiter: Optional[str] = typer.Option(
        None,
        "--delimiter",
        "-d",
        help="Literal string written after every full chunk",
    ),
    delimiter_name: Optional[DelimiterName] = typer.Option(
        None,
        "--delimiter-name",
        "-n",
        case_sensitive=False,
        help="Named delimiter (see 'bintext delimiters')",
    ),
    show_progress: bool = typer.Option(
        True,
        "--progress/--no-progress",
        help="Show a progress bar",
    ),
) -> None:
    """
    Convert a binary file into binary-digit text.

    Every byte becomes 8 characters of '0'/'1'. Bytes are processed in chunks
    and the delimiter is written after each chunk read at full size.
    """
    if delimiter is not None and delimiter_name is not None:
        raise typer.BadParameter(
            "Use either --delimiter or --delimiter-name, not both",
            param_hint="'--delimiter' / '--delimiter-name'",
        )

    state = ctx.obj
    output_format = getattr(state, "output_format", "table")
    quiet = getattr(state, "quiet", False)

    settings = get_settings()

    if delimiter_name is not None:
        delimiter = resolve_delimiter(delimiter_name)
    elif delimiter is None:
        delimiter = settings.delimiter

    try:
        request = ConversionRequest(
            source_path=source,
            dest_path=destination,
            chunk_size=chunk_size if chunk_size is not None else settings.chunk_size,
            delimiter=delimiter,
        )
    except InvalidArgumentError as e:
        logger.debug("Rejected conversion request", error=e.message)
        print_error(escape(e.message))
        raise typer.Exit(1)

    token = CancellationToken()
    converter = ChunkedBinaryConverter(ConversionConfig.from_settings(settings))
    try:
        result = _run_conversion(
            converter,
            request,
            token,
            show_progress=show_progress and not quiet and output_format != "json",
        )
    finally:
        converter.shutdown()

    if output_format == "json":
        print_json(result.to_dict())
    elif not quiet and not result.failed:
        print_dict(
            {
                "Source": str(result.source_path),
                "Destination": str(result.dest_path),
                "Chunk Size": f"{result.chunk_size:,} bytes",
                "Delimiter": describe_delimiter(request.delimiter),
                "Chunks": f"{result.chunks_written:,} / {result.total_chunks:,}",
                "Bytes Read": _format_bytes(result.bytes_read),
                "Duration": _format_duration(result.duration_seconds),
            },
            title="Conversion Summary",
        )

    if result.failed:
        print_error(f"An error occurred: {escape(result.error_message or '')}")
        raise typer.Exit(1)

    if result.cancelled:
        print_warning("The process was cancelled before completing.")
        raise typer.Exit(EXIT_CANCELLED)

    if not quiet and output_format != "json":
        print_success("Process completed.")
