"""File conversion module for bintext.

This module converts arbitrary binary files into text where every byte is
rendered as 8 binary digits, processed in fixed-size chunks with an optional
delimiter after each full chunk.
"""

from bintext.conversion.cancellation import CancellationToken
from bintext.conversion.config import (
    ConversionConfig,
    ConversionRequest,
    count_chunks,
    parse_chunk_size,
)
from bintext.conversion.converter import ChunkedBinaryConverter
from bintext.conversion.encoding import byte_to_bits, render_chunk
from bintext.conversion.exceptions import (
    ConversionError,
    ConversionInProgressError,
    InvalidArgumentError,
    InvalidChunkSizeError,
    InvalidRequestError,
)
from bintext.conversion.result import ConversionOutcome, ConversionResult

__all__ = [
    "CancellationToken",
    "ChunkedBinaryConverter",
    "ConversionConfig",
    "ConversionError",
    "ConversionInProgressError",
    "ConversionOutcome",
    "ConversionRequest",
    "ConversionResult",
    "InvalidArgumentError",
    "InvalidChunkSizeError",
    "InvalidRequestError",
    "byte_to_bits",
    "count_chunks",
    "parse_chunk_size",
    "render_chunk",
]
