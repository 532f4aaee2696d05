"""Chunked binary-text converter with background execution."""

import asyncio
import os
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from bintext.conversion.config import ConversionConfig, ConversionRequest, count_chunks
from bintext.conversion.encoding import render_chunk
from bintext.conversion.exceptions import ConversionInProgressError
from bintext.conversion.result import ConversionOutcome, ConversionResult
from bintext.logging_config import (
    conversion_context,
    get_logger,
    log_error,
    log_operation,
)

logger = get_logger(__name__)

CancelCheck = Callable[[], bool]
ProgressCallback = Callable[[int, int], None]


class ChunkedBinaryConverter:
    """Streams a file into its binary-digit text form, one chunk at a time.

    Only one conversion may run per instance. Background runs use a single
    dedicated worker thread owned by the converter.
    """

    def __init__(self, config: Optional[ConversionConfig] = None):
        """Initialize the converter.

        Args:
            config: Conversion configuration (defaults to ConversionConfig())
        """
        self.config = config or ConversionConfig()
        self.executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="bintext-convert"
        )
        self._active = threading.Lock()

    @property
    def busy(self) -> bool:
        """Whether a conversion is currently running."""
        return self._active.locked()

    def convert(
        self,
        request: ConversionRequest,
        is_cancelled: Optional[CancelCheck] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ConversionResult:
        """Run a conversion on the calling thread.

        Args:
            request: Validated conversion request
            is_cancelled: Predicate polled after each chunk is written
            on_progress: Called with (chunk_index, total_chunks) for each chunk,
                before the chunk is written

        Returns:
            ConversionResult with outcome COMPLETED, CANCELLED or FAILED

        Raises:
            ConversionInProgressError: If another conversion is running
        """
        if not self._active.acquire(blocking=False):
            raise ConversionInProgressError()
        try:
            return self._run(request, is_cancelled, on_progress)
        finally:
            self._active.release()

    def submit(
        self,
        request: ConversionRequest,
        is_cancelled: Optional[CancelCheck] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> "Future[ConversionResult]":
        """Start a conversion on the worker thread.

        Progress callbacks are invoked on the worker thread.

        Returns:
            Future resolving to the ConversionResult

        Raises:
            ConversionInProgressError: If another conversion is running
        """
        if not self._active.acquire(blocking=False):
            raise ConversionInProgressError()

        def _locked_run() -> ConversionResult:
            try:
                return self._run(request, is_cancelled, on_progress)
            finally:
                self._active.release()

        try:
            future = self.executor.submit(_locked_run)
        except RuntimeError:
            self._active.release()
            raise

        future.add_done_callback(self._release_if_cancelled)
        return future

    def _release_if_cancelled(self, future: "Future[ConversionResult]") -> None:
        """Free the converter when a queued run is cancelled before it starts."""
        if future.cancelled():
            self._active.release()

    async def convert_async(
        self,
        request: ConversionRequest,
        is_cancelled: Optional[CancelCheck] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ConversionResult:
        """Await a conversion running on the worker thread."""
        future = self.submit(request, is_cancelled, on_progress)
        return await asyncio.wrap_future(future)

    def _run(
        self,
        request: ConversionRequest,
        is_cancelled: Optional[CancelCheck],
        on_progress: Optional[ProgressCallback],
    ) -> ConversionResult:
        """Blocking conversion loop."""
        with conversion_context(
            request.source_path, request.dest_path, request.chunk_size
        ):
            return self._stream(request, is_cancelled, on_progress)

    def _stream(
        self,
        request: ConversionRequest,
        is_cancelled: Optional[CancelCheck],
        on_progress: Optional[ProgressCallback],
    ) -> ConversionResult:
        start_time = time.time()
        chunk_size = request.chunk_size
        delimiter = request.delimiter

        result = ConversionResult(
            outcome=ConversionOutcome.COMPLETED,
            source_path=request.source_path,
            dest_path=request.dest_path,
            chunk_size=chunk_size,
        )

        log_operation(logger, "conversion_started")

        try:
            with open(request.source_path, "rb") as source, open(
                request.dest_path,
                "w",
                encoding=self.config.output_encoding,
                newline="",
            ) as dest:
                result.total_chunks = count_chunks(
                    os.fstat(source.fileno()).st_size, chunk_size
                )

                while True:
                    chunk = source.read(chunk_size)
                    if not chunk:
                        break

                    chunk_index = result.chunks_written + 1
                    if on_progress is not None:
                        on_progress(chunk_index, result.total_chunks)

                    text = render_chunk(chunk)
                    if len(chunk) == chunk_size and delimiter:
                        text += delimiter
                    dest.write(text)
                    dest.flush()

                    result.chunks_written = chunk_index
                    result.bytes_read += len(chunk)
                    result.chars_written += len(text)

                    if is_cancelled is not None and is_cancelled():
                        result.outcome = ConversionOutcome.CANCELLED
                        break

        except (OSError, UnicodeEncodeError) as e:
            result.outcome = ConversionOutcome.FAILED
            result.error_message = str(e)
            result.duration_seconds = time.time() - start_time
            log_error(logger, e, "convert", chunks_written=result.chunks_written)
            return result

        result.duration_seconds = time.time() - start_time

        log_operation(
            logger,
            f"conversion_{result.outcome.value}",
            chunks_written=result.chunks_written,
            total_chunks=result.total_chunks,
            duration_seconds=result.duration_seconds,
        )

        return result

    def shutdown(self, wait: bool = True):
        """Shutdown the worker thread."""
        self.executor.shutdown(wait=wait)

    def __enter__(self) -> "ChunkedBinaryConverter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()
