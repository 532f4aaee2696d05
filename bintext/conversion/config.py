"""Configuration and request types for file conversion operations."""

from __future__ import annotations

import codecs
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from bintext.conversion.exceptions import InvalidChunkSizeError, InvalidRequestError

if TYPE_CHECKING:
    from bintext.config import Settings


def parse_chunk_size(value: int | str) -> int:
    """Parse and validate a caller-supplied chunk size.

    Args:
        value: Chunk size as an integer or a decimal string

    Returns:
        The chunk size as a positive int

    Raises:
        InvalidChunkSizeError: If the value is not a positive integer
    """
    if isinstance(value, bool):
        raise InvalidChunkSizeError(value)

    if isinstance(value, str):
        try:
            parsed = int(value.strip(), 10)
        except ValueError:
            raise InvalidChunkSizeError(value) from None
    elif isinstance(value, int):
        parsed = value
    else:
        raise InvalidChunkSizeError(value)

    if parsed < 1:
        raise InvalidChunkSizeError(value)
    return parsed


def count_chunks(size_bytes: int, chunk_size: int) -> int:
    """Number of chunks needed to cover size_bytes, rounding up."""
    return (size_bytes + chunk_size - 1) // chunk_size


@dataclass
class ConversionConfig:
    """Configuration for chunked binary-text conversion."""

    output_encoding: str = "utf-8"

    def __post_init__(self):
        """Validate configuration."""
        try:
            codecs.lookup(self.output_encoding)
        except LookupError:
            raise ValueError(f"Unknown output encoding: {self.output_encoding}")

    @classmethod
    def from_settings(cls, settings: Settings) -> ConversionConfig:
        """Build a conversion config from application settings."""
        return cls(output_encoding=settings.output_encoding)


@dataclass(frozen=True)
class ConversionRequest:
    """A single conversion run: where to read, where to write and how to chunk.

    The chunk size is validated on construction, so an invalid request never
    reaches the point of opening a file.
    """

    source_path: Path
    dest_path: Path
    chunk_size: int
    delimiter: str = ""

    def __post_init__(self):
        object.__setattr__(self, "source_path", Path(self.source_path))
        object.__setattr__(self, "dest_path", Path(self.dest_path))
        object.__setattr__(self, "chunk_size", parse_chunk_size(self.chunk_size))

        if not isinstance(self.delimiter, str):
            raise InvalidRequestError(
                f"Delimiter must be a string, got {type(self.delimiter).__name__}",
                delimiter=self.delimiter,
            )

        if self.source_path.resolve() == self.dest_path.resolve():
            raise InvalidRequestError(
                f"Source and destination must be different files: {self.source_path}",
                source_path=str(self.source_path),
                dest_path=str(self.dest_path),
            )
