"""Tests for whole-stream decoding and text rendering."""

import io

import pytest

from robust_codepoints.character.constants import (
    GARBAGE,
    OVERLONG_0,
    UNSPECIFIC_IO_ERROR,
    EOF,
    Encoding,
)
from robust_codepoints.character.source import BytesSource, SourceReadError
from robust_codepoints.character.stream import (
    PROGRESS_INTERVAL,
    CodePointStreamProcessor,
    DecodeResult,
    code_points_to_text,
    decode,
    decode_to_text,
)
from robust_codepoints.shared.config import DecoderConfig, GarbageHandling
from robust_codepoints.shared.result import DiagnosticSeverity


class TestCodePointsToText:
    """Test rendering of decoder output."""

    def test_plain_code_points(self):
        assert code_points_to_text([0x48, 0x69, 0x10348]) == "Hi\U00010348"

    def test_replace_garbage(self):
        values = [ord("a"), GARBAGE + 0xFF, ord("b")]

        assert code_points_to_text(values) == "a\ufffdb"

    def test_skip_garbage(self):
        values = [ord("a"), GARBAGE + 0xFF, ord("b")]

        assert code_points_to_text(values, GarbageHandling.SKIP) == "ab"

    def test_escape_round_trips_utf8(self):
        """Test that escaped text encodes back to the original bytes."""
        data = b"caf\xc3\xa9 \xff\xc0\x80 \xe2\x82 ok"
        result = decode(data)

        text = code_points_to_text(result.code_points, GarbageHandling.ESCAPE)

        assert text.encode("utf-8", "surrogateescape") == data

    def test_encoded_surrogate_treated_as_garbage(self):
        assert code_points_to_text([0xD800]) == "\ufffd"
        assert code_points_to_text([0xD800], GarbageHandling.ESCAPE) == "\udced\udca0\udc80"

    def test_overlong_nul(self):
        values = [ord("a"), *OVERLONG_0, ord("b")]

        assert code_points_to_text(values, decode_overlong_nul=True) == "a\x00b"
        assert code_points_to_text(values) == "a\ufffd\ufffdb"

    def test_terminal_sentinels_ignored(self):
        assert code_points_to_text([ord("a"), UNSPECIFIC_IO_ERROR, EOF]) == "a"


class TestCodePointStreamProcessor:
    """Test whole-stream processing."""

    def test_clean_utf8(self):
        result = CodePointStreamProcessor().process("grüße".encode("utf-8"))

        assert result.text == "grüße"
        assert result.encoding is Encoding.UTF8
        assert result.terminal == EOF
        assert result.clean
        assert result.statistics.code_points == 5
        assert result.statistics.bytes_consumed == 7
        assert result.diagnostics == []

    def test_utf16_with_bom(self):
        result = decode("\ufeffok".encode("utf-16-be"))

        assert result.encoding is Encoding.UTF16BE
        assert result.code_points == [0xFEFF, ord("o"), ord("k")]

    def test_garbage_diagnostics_carry_offsets(self):
        result = decode(b"ab\xffc\xc0\x80")

        assert not result.clean
        assert result.statistics.garbage_bytes == 3
        assert result.statistics.overlong_nul_pairs == 1
        assert [entry.position for entry in result.diagnostics] == [2, 4, 5]
        assert all(
            entry.severity is DiagnosticSeverity.WARNING for entry in result.diagnostics
        )
        assert result.diagnostics[0].details == {"byte": 0xFF}

    def test_diagnostics_can_be_disabled(self):
        config = DecoderConfig(record_garbage_diagnostics=False)

        result = decode(b"\x80\x81\x82", config)

        assert result.statistics.garbage_bytes == 3
        assert result.diagnostics == []

    def test_diagnostics_are_capped(self):
        config = DecoderConfig(max_diagnostics=2)

        result = decode(b"\x80" * 10, config)

        assert len(result.diagnostics) == 2
        assert result.statistics.garbage_bytes == 10

    def test_io_error_is_reported(self):
        error = SourceReadError("disk on fire")

        result = decode(BytesSource(b"abc", error=error))

        assert result.code_points == [ord("a"), ord("b"), ord("c")]
        assert result.terminal == UNSPECIFIC_IO_ERROR
        assert result.io_error is error
        assert not result.clean
        assert result.diagnostics[-1].severity is DiagnosticSeverity.ERROR
        assert result.diagnostics[-1].position == 3

    def test_configured_charset(self):
        result = decode(b"\xff\xfe", DecoderConfig.latin1())

        assert result.encoding is Encoding.EIGHT_BIT
        assert result.text == "ÿþ"

    def test_file_object_input(self):
        result = decode(io.BytesIO(b"\xef\xbb\xbfx"))

        assert result.code_points == [0xFEFF, ord("x")]

    def test_unsupported_input_type(self):
        with pytest.raises(TypeError, match="Unsupported input type"):
            CodePointStreamProcessor().process(12345)

    def test_progress_callback_can_cancel(self):
        calls = []

        def progress(consumed):
            calls.append(consumed)
            return False

        result = CodePointStreamProcessor().process(
            b"a" * (PROGRESS_INTERVAL * 2), progress_callback=progress
        )

        assert calls == [PROGRESS_INTERVAL]
        assert result.cancelled
        assert not result.clean
        assert len(result.code_points) == PROGRESS_INTERVAL

    def test_to_dict(self):
        result = decode(b"a\xff")

        report = result.to_dict()

        assert report["encoding"] == "UTF8"
        assert report["terminal"] == "EOF"
        assert report["statistics"]["garbage_bytes"] == 1
        assert report["diagnostics"][0]["severity"] == "WARNING"

    def test_decode_to_text_with_round_trip_preset(self):
        data = b"ok\xfe"

        text = decode_to_text(data, DecoderConfig.round_trip())

        assert text.encode("utf-8", "surrogateescape") == data

    def test_result_defaults(self):
        result = DecodeResult(code_points=[], encoding=Encoding.UNKNOWN)

        assert result.clean
        assert result.text == ""
