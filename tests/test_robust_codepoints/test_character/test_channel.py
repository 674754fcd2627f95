"""Tests for the retained-byte buffer and deferred terminal condition."""

import logging

import pytest

from robust_codepoints.character.channel import MAX_RETAINED_BYTES, ByteChannel
from robust_codepoints.character.constants import EOF, GARBAGE, UNSPECIFIC_IO_ERROR
from robust_codepoints.character.source import BytesSource, SourceReadError


class TestFill:
    """Test reading into the retained buffer."""

    def test_fill_reads_only_missing_bytes(self):
        source = BytesSource(b"abcdef")
        channel = ByteChannel(source)

        assert channel.fill(1)
        assert channel.fill(3)

        assert source.position == 3
        assert channel.retained == 3

    def test_fill_retries_zero_byte_reads(self):
        channel = ByteChannel(BytesSource(b"ab", empty_reads=True))

        assert channel.fill(2)
        assert channel.retained == 2

    def test_fill_latches_end(self):
        channel = ByteChannel(BytesSource(b"a"))

        assert not channel.fill(2)
        assert channel.retained == 1
        assert channel.latched == EOF

    def test_fill_latches_error(self):
        error = SourceReadError("boom")
        channel = ByteChannel(BytesSource(b"", error=error))

        assert not channel.fill(1)
        assert channel.latched == UNSPECIFIC_IO_ERROR
        assert channel.last_error is error

    def test_fill_beyond_capacity_is_rejected(self):
        channel = ByteChannel(BytesSource(b"abcdef"))

        with pytest.raises(ValueError, match="retain"):
            channel.fill(MAX_RETAINED_BYTES + 1)

    def test_read_failure_is_logged(self, caplog):
        channel = ByteChannel(BytesSource(b"", error=SourceReadError("boom")))

        with caplog.at_level(logging.WARNING):
            channel.fill(1)

        assert "Read failure latched" in caplog.text


class TestDelivery:
    """Test consumption, garbage and terminal delivery."""

    def test_consume_counts_bytes(self):
        channel = ByteChannel(BytesSource(b"abc"))
        channel.fill(3)

        channel.consume(2)

        assert channel.bytes_consumed == 2
        assert channel.peek(0) == ord("c")

    def test_emit_garbage_gives_up_oldest_byte(self):
        channel = ByteChannel(BytesSource(b"\xe2\x82"))
        channel.fill(2)

        assert channel.emit_garbage() == GARBAGE + 0xE2
        assert channel.retained == 1
        assert channel.bytes_consumed == 1

    def test_drain_delivers_retained_bytes_before_terminal(self):
        channel = ByteChannel(BytesSource(b"\xf0\x90", error=SourceReadError("x")))
        channel.fill(4)

        values = [channel.drain() for _ in range(5)]

        assert values == [GARBAGE + 0xF0, GARBAGE + 0x90, UNSPECIFIC_IO_ERROR, EOF, EOF]
        assert channel.terminated

    def test_no_reads_after_latch(self):
        source = BytesSource(b"a")
        channel = ByteChannel(source)
        channel.fill(2)
        reads = source.read_count

        assert not channel.fill(3)
        assert source.read_count == reads
