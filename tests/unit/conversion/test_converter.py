"""Tests for ChunkedBinaryConverter."""

import asyncio
import os
import threading
from pathlib import Path

import pytest
from structlog.contextvars import get_contextvars

from bintext.conversion import (
    CancellationToken,
    ChunkedBinaryConverter,
    ConversionConfig,
    ConversionInProgressError,
    ConversionOutcome,
    ConversionRequest,
    InvalidChunkSizeError,
)
from bintext.conversion.encoding import render_chunk


def bits(data: bytes) -> str:
    return "".join(format(b, "08b") for b in data)


class TestChunkedBinaryConverter:
    """Tests for the blocking conversion loop."""

    @pytest.fixture
    def converter(self):
        converter = ChunkedBinaryConverter()
        yield converter
        converter.shutdown()

    @pytest.fixture
    def ten_bytes(self, tmp_path):
        source = tmp_path / "ten.bin"
        source.write_bytes(bytes(range(10)))
        return source

    def test_delimiter_after_full_chunks_only(self, converter, ten_bytes, tmp_path):
        """10 bytes with chunk size 4 gives chunks 4, 4, 2 and no trailing delimiter."""
        dest = tmp_path / "out.txt"
        data = ten_bytes.read_bytes()

        result = converter.convert(ConversionRequest(ten_bytes, dest, 4, "|"))

        assert result.outcome is ConversionOutcome.COMPLETED
        assert dest.read_text() == (
            bits(data[0:4]) + "|" + bits(data[4:8]) + "|" + bits(data[8:10])
        )
        assert result.total_chunks == 3
        assert result.chunks_written == 3
        assert result.bytes_read == 10
        assert result.chars_written == 80 + 2
        assert result.error_message is None

    def test_delimiter_after_last_chunk_when_size_is_exact_multiple(
        self, converter, tmp_path
    ):
        source = tmp_path / "eight.bin"
        source.write_bytes(b"\x00\x01\x02\x03\xfc\xfd\xfe\xff")
        dest = tmp_path / "out.txt"

        converter.convert(ConversionRequest(source, dest, 4, ","))

        assert dest.read_text() == (
            "00000000000000010000001000000011,"
            "11111100111111011111111011111111,"
        )

    def test_no_delimiter(self, converter, ten_bytes, tmp_path):
        dest = tmp_path / "out.txt"

        converter.convert(ConversionRequest(ten_bytes, dest, 3))

        assert dest.read_text() == bits(ten_bytes.read_bytes())

    def test_multi_character_delimiter_written_verbatim(self, converter, tmp_path):
        source = tmp_path / "in.bin"
        source.write_bytes(b"ab")
        dest = tmp_path / "out.txt"

        converter.convert(ConversionRequest(source, dest, 1, "\r\n"))

        assert dest.read_bytes() == b"01100001\r\n01100010\r\n"

    def test_non_ascii_delimiter(self, converter, tmp_path):
        source = tmp_path / "in.bin"
        source.write_bytes(b"\x01")
        dest = tmp_path / "out.txt"

        converter.convert(ConversionRequest(source, dest, 1, "·"))

        assert dest.read_text(encoding="utf-8") == "00000001·"

    def test_progress_reported_for_each_chunk(self, converter, ten_bytes, tmp_path):
        calls = []

        converter.convert(
            ConversionRequest(ten_bytes, tmp_path / "out.txt", 3),
            on_progress=lambda index, total: calls.append((index, total)),
        )

        assert calls == [(1, 4), (2, 4), (3, 4), (4, 4)]

    def test_progress_reported_before_chunk_is_written(self, converter, ten_bytes, tmp_path):
        dest = tmp_path / "out.txt"
        sizes = []

        converter.convert(
            ConversionRequest(ten_bytes, dest, 5),
            on_progress=lambda index, total: sizes.append(dest.stat().st_size),
        )

        assert sizes == [0, 40]

    def test_empty_source(self, converter, tmp_path):
        source = tmp_path / "empty.bin"
        source.write_bytes(b"")
        dest = tmp_path / "out.txt"
        calls = []

        result = converter.convert(
            ConversionRequest(source, dest, 4, "|"),
            on_progress=lambda index, total: calls.append((index, total)),
        )

        assert result.completed
        assert result.total_chunks == 0
        assert calls == []
        assert dest.exists()
        assert dest.read_text() == ""

    def test_destination_is_truncated(self, converter, ten_bytes, tmp_path):
        dest = tmp_path / "out.txt"
        dest.write_text("stale content that is longer than the new output" * 10)

        converter.convert(ConversionRequest(ten_bytes, dest, 10))

        assert dest.read_text() == bits(ten_bytes.read_bytes())

    def test_round_trip(self, converter, tmp_path):
        data = os.urandom(1000)
        source = tmp_path / "random.bin"
        source.write_bytes(data)
        dest = tmp_path / "out.txt"

        converter.convert(ConversionRequest(source, dest, 7, "\n"))

        digits = dest.read_text().replace("\n", "")
        rebuilt = bytes(int(digits[i : i + 8], 2) for i in range(0, len(digits), 8))
        assert rebuilt == data

    def test_idempotent(self, converter, tmp_path):
        source = tmp_path / "random.bin"
        source.write_bytes(os.urandom(333))
        first = tmp_path / "first.txt"
        second = tmp_path / "second.txt"

        converter.convert(ConversionRequest(source, first, 16, " "))
        converter.convert(ConversionRequest(source, second, 16, " "))

        assert first.read_bytes() == second.read_bytes()

    def test_cancellation_after_chunk(self, converter, ten_bytes, tmp_path):
        """Cancelling while chunk k is processed leaves exactly chunks 1..k."""
        dest = tmp_path / "out.txt"
        data = ten_bytes.read_bytes()
        token = CancellationToken()
        calls = []

        def on_progress(index, total):
            calls.append(index)
            if index == 2:
                token.cancel()

        result = converter.convert(
            ConversionRequest(ten_bytes, dest, 2, "|"),
            is_cancelled=token,
            on_progress=on_progress,
        )

        assert result.outcome is ConversionOutcome.CANCELLED
        assert result.cancelled
        assert calls == [1, 2]
        assert result.chunks_written == 2
        assert result.total_chunks == 5
        assert dest.read_text() == bits(data[0:2]) + "|" + bits(data[2:4]) + "|"

    def test_cancelled_before_start_still_writes_first_chunk(
        self, converter, ten_bytes, tmp_path
    ):
        """Cancellation is only observed at chunk boundaries."""
        dest = tmp_path / "out.txt"

        result = converter.convert(
            ConversionRequest(ten_bytes, dest, 4), is_cancelled=lambda: True
        )

        assert result.cancelled
        assert result.chunks_written == 1
        assert dest.read_text() == bits(ten_bytes.read_bytes()[:4])

    def test_missing_source_fails_without_touching_destination(self, converter, tmp_path):
        dest = tmp_path / "out.txt"
        dest.write_text("keep me")

        result = converter.convert(ConversionRequest(tmp_path / "missing.bin", dest, 4))

        assert result.outcome is ConversionOutcome.FAILED
        assert "missing.bin" in result.error_message
        assert result.chunks_written == 0
        assert dest.read_text() == "keep me"

    def test_unwritable_destination_fails(self, converter, ten_bytes, tmp_path):
        dest = tmp_path / "no-such-dir" / "out.txt"

        result = converter.convert(ConversionRequest(ten_bytes, dest, 4))

        assert result.failed
        assert result.error_message
        assert not dest.exists()

    @pytest.mark.skipif(not Path("/dev/full").exists(), reason="requires /dev/full")
    def test_write_failure_is_reported_as_failed(self, converter, ten_bytes):
        result = converter.convert(ConversionRequest(ten_bytes, Path("/dev/full"), 4))

        assert result.failed
        assert not result.cancelled
        assert result.error_message

    def test_unencodable_delimiter_fails(self, ten_bytes, tmp_path):
        converter = ChunkedBinaryConverter(ConversionConfig(output_encoding="ascii"))
        try:
            result = converter.convert(ConversionRequest(ten_bytes, tmp_path / "out.txt", 4, "é"))
        finally:
            converter.shutdown()

        assert result.failed
        assert "ascii" in result.error_message

    def test_invalid_chunk_size_rejected_before_opening_files(self, tmp_path):
        source = tmp_path / "in.bin"
        source.write_bytes(b"data")
        dest = tmp_path / "out.txt"

        with pytest.raises(InvalidChunkSizeError):
            ConversionRequest(source, dest, 0)

        assert not dest.exists()

    def test_callback_errors_propagate(self, converter, ten_bytes, tmp_path):
        def on_progress(index, total):
            raise RuntimeError("sink broke")

        with pytest.raises(RuntimeError, match="sink broke"):
            converter.convert(
                ConversionRequest(ten_bytes, tmp_path / "out.txt", 4),
                on_progress=on_progress,
            )

        assert converter.busy is False
        result = converter.convert(ConversionRequest(ten_bytes, tmp_path / "again.txt", 4))
        assert result.completed

    def test_log_context_bound_during_run(self, converter, ten_bytes, tmp_path):
        dest = tmp_path / "out.txt"
        seen = []

        converter.convert(
            ConversionRequest(ten_bytes, dest, 5),
            on_progress=lambda index, total: seen.append(get_contextvars()),
        )

        assert seen == [{"source": str(ten_bytes), "dest": str(dest), "chunk_size": 5}] * 2
        assert "source" not in get_contextvars()


class TestBackgroundConversion:
    """Tests for worker-thread execution."""

    @pytest.fixture
    def source(self, tmp_path):
        path = tmp_path / "in.bin"
        path.write_bytes(bytes(range(64)))
        return path

    def test_submit_runs_on_worker_thread(self, source, tmp_path):
        threads = []

        with ChunkedBinaryConverter() as converter:
            future = converter.submit(
                ConversionRequest(source, tmp_path / "out.txt", 16),
                on_progress=lambda index, total: threads.append(threading.current_thread()),
            )
            result = future.result(timeout=10)

        assert result.completed
        assert len(threads) == 4
        assert all(t is not threading.main_thread() for t in threads)
        assert (tmp_path / "out.txt").read_text() == render_chunk(source.read_bytes())

    def test_cancel_from_caller_thread(self, source, tmp_path):
        started = threading.Event()
        resume = threading.Event()
        token = CancellationToken()

        def on_progress(index, total):
            if index == 1:
                started.set()
                resume.wait(timeout=10)

        with ChunkedBinaryConverter() as converter:
            future = converter.submit(
                ConversionRequest(source, tmp_path / "out.txt", 8),
                is_cancelled=token,
                on_progress=on_progress,
            )
            assert started.wait(timeout=10)
            token.cancel()
            resume.set()
            result = future.result(timeout=10)

        assert result.cancelled
        assert result.chunks_written == 1
        assert (tmp_path / "out.txt").read_text() == render_chunk(source.read_bytes()[:8])

    def test_second_conversion_is_rejected_while_running(self, source, tmp_path):
        started = threading.Event()
        resume = threading.Event()

        def on_progress(index, total):
            started.set()
            resume.wait(timeout=10)

        with ChunkedBinaryConverter() as converter:
            future = converter.submit(
                ConversionRequest(source, tmp_path / "first.txt", 64),
                on_progress=on_progress,
            )
            assert started.wait(timeout=10)
            assert converter.busy is True

            with pytest.raises(ConversionInProgressError):
                converter.convert(ConversionRequest(source, tmp_path / "second.txt", 64))
            with pytest.raises(ConversionInProgressError):
                converter.submit(ConversionRequest(source, tmp_path / "third.txt", 64))

            resume.set()
            assert future.result(timeout=10).completed

            assert converter.busy is False
            assert converter.convert(
                ConversionRequest(source, tmp_path / "second.txt", 64)
            ).completed

    def test_submit_after_shutdown(self, source, tmp_path):
        converter = ChunkedBinaryConverter()
        converter.shutdown()

        with pytest.raises(RuntimeError):
            converter.submit(ConversionRequest(source, tmp_path / "out.txt", 4))
        assert converter.busy is False

    @pytest.mark.asyncio
    async def test_convert_async(self, source, tmp_path):
        calls = []

        with ChunkedBinaryConverter() as converter:
            result = await converter.convert_async(
                ConversionRequest(source, tmp_path / "out.txt", 10, "\n"),
                on_progress=lambda index, total: calls.append((index, total)),
            )

        assert result.completed
        assert calls[-1] == (7, 7)
        assert len(calls) == 7

    def test_cancelled_queued_run_releases_converter(self, source, tmp_path):
        worker_free = threading.Event()

        with ChunkedBinaryConverter() as converter:
            converter.executor.submit(worker_free.wait, 10)
            future = converter.submit(ConversionRequest(source, tmp_path / "queued.txt", 8))

            assert future.cancel()
            assert converter.busy is False

            worker_free.set()
            result = converter.convert(ConversionRequest(source, tmp_path / "out.txt", 8))

        assert result.completed
        assert not (tmp_path / "queued.txt").exists()

    @pytest.mark.asyncio
    async def test_timed_out_async_run_releases_converter(self, source, tmp_path):
        worker_free = threading.Event()

        with ChunkedBinaryConverter() as converter:
            converter.executor.submit(worker_free.wait, 10)

            with pytest.raises(asyncio.TimeoutError):
                await asyncio.wait_for(
                    converter.convert_async(
                        ConversionRequest(source, tmp_path / "queued.txt", 8)
                    ),
                    timeout=0.05,
                )
            await asyncio.sleep(0)

            assert converter.busy is False
            worker_free.set()
            result = await converter.convert_async(
                ConversionRequest(source, tmp_path / "out.txt", 8)
            )

        assert result.completed
        assert not (tmp_path / "queued.txt").exists()
