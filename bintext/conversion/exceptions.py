"""Exceptions for file conversion operations."""

from bintext.exceptions import BinTextError


class ConversionError(BinTextError):
    """Base exception for conversion operations."""


class InvalidArgumentError(ConversionError, ValueError):
    """Conversion request rejected before any file was opened."""


class InvalidChunkSizeError(InvalidArgumentError):
    """Chunk size is not a positive integer."""

    def __init__(self, value: object) -> None:
        super().__init__(
            f"Chunk size must be a positive integer, got {value!r}",
            chunk_size=value,
        )


class InvalidRequestError(InvalidArgumentError):
    """Conversion request is inconsistent."""


class ConversionInProgressError(ConversionError):
    """A conversion is already running on this converter."""

    def __init__(self) -> None:
        super().__init__("A conversion is already running on this converter")
