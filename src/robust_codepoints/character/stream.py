"""Whole-stream decoding API with never-fail guarantee.

CodePointStreamProcessor runs a CodePointDecoder over a complete input and
collects the code points together with statistics and diagnostics. Problems in
the input never raise; they are reported in the result.
"""

import time
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Iterable, List, Optional, Union

from ..shared.config import DecoderConfig, GarbageHandling
from ..shared.logging import get_logger
from ..shared.result import DecodeStatistics, DiagnosticEntry, DiagnosticSeverity
from .constants import (
    EOF,
    GARBAGE,
    REPLACEMENT_CHARACTER,
    UNSPECIFIC_IO_ERROR,
    Encoding,
    describe_code_point,
    is_garbage,
    is_legal_code_point,
    is_overlong_nul,
)
from .decoder import CodePointDecoder
from .source import ByteSource, BytesSource, StreamByteSource
from .tables import make_8bit_table

InputType = Union[bytes, bytearray, BinaryIO, ByteSource]
ProgressCallback = Callable[[int], bool]  # (bytes_consumed) -> continue

# Values decoded between two progress callback invocations
PROGRESS_INTERVAL = 4096

# First code point of the surrogateescape range
ESCAPE_BASE = 0xDC00


@dataclass
class DecodeResult:
    """Result of decoding a complete stream.

    Attributes:
        code_points: Decoded values, garbage sentinels included, terminal
            sentinel excluded
        encoding: Encoding the decoder ended up in
        terminal: EOF or UNSPECIFIC_IO_ERROR
        io_error: Read error that ended the stream, if any
        statistics: Decoding counters
        diagnostics: Garbage and I/O diagnostics
        config: Configuration used for rendering text
        cancelled: True if a progress callback stopped decoding early
    """
    code_points: List[int]
    encoding: Encoding
    terminal: int = EOF
    io_error: Optional[BaseException] = None
    statistics: DecodeStatistics = field(default_factory=DecodeStatistics)
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    config: DecoderConfig = field(default_factory=DecoderConfig)
    cancelled: bool = False

    @property
    def clean(self) -> bool:
        """True if the stream ended normally without a single garbage byte."""
        return (
            self.terminal == EOF
            and not self.cancelled
            and self.statistics.garbage_bytes == 0
        )

    @property
    def text(self) -> str:
        return code_points_to_text(
            self.code_points,
            self.config.garbage_handling,
            self.config.decode_overlong_nul,
        )

    def to_dict(self) -> dict:
        return {
            "encoding": self.encoding.name,
            "terminal": describe_code_point(self.terminal),
            "io_error": repr(self.io_error) if self.io_error is not None else None,
            "clean": self.clean,
            "cancelled": self.cancelled,
            "statistics": self.statistics.to_dict(),
            "diagnostics": [entry.to_dict() for entry in self.diagnostics],
        }


def _escape_bytes(data: Iterable[int]) -> str:
    return "".join(chr(ESCAPE_BASE + b) for b in data)


def _utf8_bytes_of_surrogate(code_point: int) -> List[int]:
    return [
        0xE0 | (code_point >> 12),
        0x80 | ((code_point >> 6) & 0x3F),
        0x80 | (code_point & 0x3F),
    ]


def code_points_to_text(
    code_points: Iterable[int],
    garbage_handling: GarbageHandling = GarbageHandling.REPLACE,
    decode_overlong_nul: bool = False,
) -> str:
    """Render decoder output as a Python string.

    Garbage bytes are rendered per ``garbage_handling``. With ESCAPE, a garbage
    byte b becomes U+DC00+b, so for UTF-8 input
    ``text.encode("utf-8", "surrogateescape")`` gives back the original bytes.
    Surrogate code points that arrived UTF-8 encoded are not legal in a
    ``str`` meant for interchange and are treated like their three garbage
    bytes. Terminal sentinels are ignored.

    Args:
        code_points: Values returned by CodePointDecoder
        garbage_handling: Rendering of undecodable bytes
        decode_overlong_nul: Render the overlong NUL pair as U+0000
    """
    values = list(code_points)
    parts: List[str] = []
    index = 0
    while index < len(values):
        code_point = values[index]
        if (
            decode_overlong_nul
            and index + 1 < len(values)
            and is_overlong_nul(code_point, values[index + 1])
        ):
            parts.append("\x00")
            index += 2
            continue
        index += 1

        if is_legal_code_point(code_point):
            parts.append(chr(code_point))
            continue

        if is_garbage(code_point):
            bad_bytes = [code_point - GARBAGE]
        elif code_point > 0:
            bad_bytes = _utf8_bytes_of_surrogate(code_point)
        else:
            continue

        if garbage_handling is GarbageHandling.REPLACE:
            parts.append(chr(REPLACEMENT_CHARACTER))
        elif garbage_handling is GarbageHandling.ESCAPE:
            parts.append(_escape_bytes(bad_bytes))
    return "".join(parts)


class CodePointStreamProcessor:
    """Decode complete inputs into DecodeResult objects.

    Accepts bytes, binary file objects and ByteSource instances.
    """

    def __init__(self, config: Optional[DecoderConfig] = None) -> None:
        """Initialize the stream processor.

        Args:
            config: Decoder configuration
        """
        self.config = config or DecoderConfig()
        self.logger = get_logger(__name__, self.config.correlation_id, "stream_processor")

    def _make_source(self, input_data: InputType) -> ByteSource:
        if isinstance(input_data, ByteSource):
            return input_data
        if isinstance(input_data, (bytes, bytearray)):
            return BytesSource(bytes(input_data))
        if hasattr(input_data, "read"):
            return StreamByteSource(input_data)
        raise TypeError(
            f"Unsupported input type: {type(input_data).__name__}"
        )

    def decoder_for(self, input_data: InputType) -> CodePointDecoder:
        """Create a decoder for ``input_data`` honouring the configured charset."""
        decoder = CodePointDecoder(
            self._make_source(input_data), self.config.correlation_id
        )
        if self.config.charset is not None:
            decoder.set_8bit_table(make_8bit_table(self.config.charset))
        return decoder

    def process(
        self,
        input_data: InputType,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> DecodeResult:
        """Decode ``input_data`` to the end of the stream.

        Args:
            input_data: Bytes, binary file object or ByteSource
            progress_callback: Called every PROGRESS_INTERVAL values with the
                number of bytes consumed; returning False stops decoding

        Returns:
            DecodeResult with code points, statistics and diagnostics

        Raises:
            TypeError: If ``input_data`` is none of the supported input types
        """
        decoder = self.decoder_for(input_data)
        statistics = DecodeStatistics()
        diagnostics: List[DiagnosticEntry] = []
        code_points: List[int] = []
        cancelled = False
        start_time = time.perf_counter()

        while True:
            offset = decoder.bytes_consumed
            code_point = decoder.read_code_point()
            if code_point in (EOF, UNSPECIFIC_IO_ERROR):
                terminal = code_point
                break

            code_points.append(code_point)
            if is_garbage(code_point):
                statistics.garbage_bytes += 1
                if (
                    len(code_points) >= 2
                    and is_overlong_nul(code_points[-2], code_point)
                ):
                    statistics.overlong_nul_pairs += 1
                if self.config.record_garbage_diagnostics:
                    self._add_diagnostic(
                        diagnostics,
                        DiagnosticSeverity.WARNING,
                        f"Undecodable byte 0x{code_point - GARBAGE:02X}",
                        offset,
                        {"byte": code_point - GARBAGE},
                    )
            else:
                statistics.code_points += 1

            if (
                progress_callback is not None
                and len(code_points) % PROGRESS_INTERVAL == 0
                and not progress_callback(decoder.bytes_consumed)
            ):
                cancelled = True
                terminal = EOF
                break

        if terminal == UNSPECIFIC_IO_ERROR:
            self._add_diagnostic(
                diagnostics,
                DiagnosticSeverity.ERROR,
                "Read failure ended the stream",
                decoder.bytes_consumed,
                {"error": repr(decoder.last_error)},
            )

        statistics.bytes_consumed = decoder.bytes_consumed
        statistics.processing_time_ms = (time.perf_counter() - start_time) * 1000.0

        self.logger.debug(
            "Stream decoded",
            extra={
                "encoding": decoder.encoding.name,
                "bytes_consumed": statistics.bytes_consumed,
                "garbage_bytes": statistics.garbage_bytes,
                "cancelled": cancelled,
            },
        )

        return DecodeResult(
            code_points=code_points,
            encoding=decoder.encoding,
            terminal=terminal,
            io_error=decoder.last_error if terminal == UNSPECIFIC_IO_ERROR else None,
            statistics=statistics,
            diagnostics=diagnostics,
            config=self.config,
            cancelled=cancelled,
        )

    def _add_diagnostic(
        self,
        diagnostics: List[DiagnosticEntry],
        severity: DiagnosticSeverity,
        message: str,
        position: int,
        details: dict,
    ) -> None:
        # Garbage warnings are capped; the read failure is always recorded
        if (
            severity is DiagnosticSeverity.WARNING
            and len(diagnostics) >= self.config.max_diagnostics
        ):
            return
        diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component="decoder",
                position=position,
                details=details,
                correlation_id=self.config.correlation_id,
            )
        )


def decode(data: InputType, config: Optional[DecoderConfig] = None) -> DecodeResult:
    """Decode ``data`` with a default or given configuration."""
    return CodePointStreamProcessor(config).process(data)


def decode_to_text(data: InputType, config: Optional[DecoderConfig] = None) -> str:
    """Decode ``data`` and render it as a string."""
    return decode(data, config).text
