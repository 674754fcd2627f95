"""Tests for byte sources."""

import io
from unittest.mock import Mock

import pytest

from robust_codepoints.character.decoder import CodePointDecoder
from robust_codepoints.character.source import (
    BytesSource,
    ReadResult,
    SourceReadError,
    SourceStatus,
    StreamByteSource,
)


class TestReadResult:
    """Test the read result container."""

    def test_defaults(self):
        result = ReadResult()

        assert result.data == b""
        assert result.status is SourceStatus.MORE
        assert result.error is None
        assert not result.is_terminal

    def test_terminal_statuses(self):
        assert ReadResult(status=SourceStatus.END).is_terminal
        assert ReadResult(status=SourceStatus.ERROR).is_terminal


class TestBytesSource:
    """Test the in-memory source."""

    def test_data_and_end_in_one_read(self):
        """Test that the last bytes come together with the end status."""
        source = BytesSource(b"abc")

        assert source.read(2) == ReadResult(b"ab", SourceStatus.MORE)
        assert source.read(2) == ReadResult(b"c", SourceStatus.END)

    def test_error_replaces_end(self):
        error = SourceReadError("broken")
        source = BytesSource(b"a", error=error)

        result = source.read(4)

        assert result.data == b"a"
        assert result.status is SourceStatus.ERROR
        assert result.error is error

    def test_max_chunk_limits_reads(self):
        source = BytesSource(b"abcd", max_chunk=1)

        assert source.read(4).data == b"a"
        assert source.position == 1

    def test_empty_reads_alternate_with_data(self):
        source = BytesSource(b"ab", empty_reads=True)

        assert source.read(1) == ReadResult(b"", SourceStatus.MORE)
        assert source.read(1) == ReadResult(b"a", SourceStatus.MORE)
        assert source.read(1) == ReadResult(b"", SourceStatus.MORE)
        assert source.read(1) == ReadResult(b"b", SourceStatus.END)
        assert source.read_count == 4

    def test_invalid_arguments(self):
        with pytest.raises(ValueError, match="max_chunk"):
            BytesSource(b"", max_chunk=0)
        with pytest.raises(ValueError, match="size"):
            BytesSource(b"").read(-1)


class TestStreamByteSource:
    """Test the file object adapter."""

    def test_reads_until_end(self):
        source = StreamByteSource(io.BytesIO(b"xy"))

        assert source.read(2) == ReadResult(b"xy", SourceStatus.MORE)
        assert source.read(2) == ReadResult(b"", SourceStatus.END)

    def test_none_is_a_zero_byte_read(self):
        """Test that a non-blocking stream without data is retried, not ended."""
        stream = Mock()
        stream.read.return_value = None

        assert StreamByteSource(stream).read(1) == ReadResult(b"", SourceStatus.MORE)

    def test_blocking_io_error_is_a_zero_byte_read(self):
        stream = Mock()
        stream.read.side_effect = BlockingIOError(11, "no data yet")

        assert StreamByteSource(stream).read(1) == ReadResult(b"", SourceStatus.MORE)

    def test_decoding_resumes_after_blocking_io_error(self):
        stream = Mock()
        stream.read.side_effect = [BlockingIOError(11, "no data yet"), b"a", b""]

        assert list(CodePointDecoder.from_stream(stream)) == [ord("a")]

    def test_os_error_becomes_error_status(self):
        error = OSError("device gone")
        stream = Mock()
        stream.read.side_effect = error

        result = StreamByteSource(stream).read(1)

        assert result.status is SourceStatus.ERROR
        assert result.error is error

    def test_other_exceptions_propagate(self):
        stream = Mock()
        stream.read.side_effect = TypeError("not a stream")

        with pytest.raises(TypeError):
            StreamByteSource(stream).read(1)
