"""Incremental, fault-tolerant decoder from bytes to code points.

CodePointDecoder pulls bytes from a ByteSource on demand and returns one value
per call: a code point, a GARBAGE sentinel for a single undecodable byte, or a
terminal sentinel. It never stops on malformed input and never loses a byte:
every byte read ends up in exactly one code point or one garbage sentinel.

Typical use::

    decoder = CodePointDecoder.from_bytes(data)
    while True:
        cp = decoder.read_code_point()
        if cp == EOF:
            break
        ...
"""

from typing import BinaryIO, Iterator, Optional, Union

from ..shared.logging import get_logger
from .channel import ByteChannel
from .constants import EOF, Encoding
from .engines import EightBitEngine, EncodingSniffer, UTF16Engine, UTF8Engine
from .source import ByteSource, BytesSource, StreamByteSource
from .tables import TranslationTable

Engine = Union[UTF8Engine, UTF16Engine, EightBitEngine]


class CodePointDecoder:
    """Decode a byte stream of UTF-8, UTF-16LE/BE or an 8-bit charset.

    Unless set_8bit_table() is called first, the first read_code_point() call
    sniffs the encoding from the first two bytes. set_8bit_table() may be
    called at any time to switch to a legacy charset for the rest of the
    stream.
    """

    def __init__(self, source: ByteSource, correlation_id: Optional[str] = None) -> None:
        """Initialize decoder.

        Args:
            source: Byte source to decode
            correlation_id: Optional correlation ID attached to log records
        """
        self._channel = ByteChannel(source, correlation_id)
        self._encoding = Encoding.UNKNOWN
        self._engine: Optional[Engine] = None
        self._sniffer = EncodingSniffer()
        self.logger = get_logger(__name__, correlation_id, "decoder")

    @classmethod
    def from_bytes(cls, data: bytes, correlation_id: Optional[str] = None) -> "CodePointDecoder":
        return cls(BytesSource(data), correlation_id)

    @classmethod
    def from_stream(
        cls, stream: BinaryIO, correlation_id: Optional[str] = None
    ) -> "CodePointDecoder":
        return cls(StreamByteSource(stream), correlation_id)

    @property
    def encoding(self) -> Encoding:
        """Encoding in use; UNKNOWN until the first read or table switch."""
        return self._encoding

    @property
    def last_error(self) -> Optional[BaseException]:
        """Most recent read error of the source.

        The error may show up here before UNSPECIFIC_IO_ERROR is returned by
        read_code_point(), because retained bytes are delivered first. Do not
        use it to drive read loops.
        """
        return self._channel.last_error

    @property
    def bytes_consumed(self) -> int:
        """Number of source bytes accounted for by values returned so far."""
        return self._channel.bytes_consumed

    def set_8bit_table(self, table: TranslationTable) -> None:
        """Switch to direct table lookup for the rest of the stream.

        Bytes already read but not yet delivered are looked up in ``table``.

        Raises:
            ValueError: If ``table`` is None or does not have 256 entries
        """
        self._engine = EightBitEngine(table)
        previous = self._encoding
        self._encoding = Encoding.EIGHT_BIT
        self.logger.info(
            "Switched to 8-bit table",
            extra={
                "previous_encoding": previous.name,
                "offset": self._channel.bytes_consumed,
            },
        )

    def read_code_point(self) -> int:
        """Return the next code point or sentinel.

        Once EOF or UNSPECIFIC_IO_ERROR has been returned, every further call
        returns EOF.
        """
        if self._channel.terminated:
            return EOF

        if self._engine is None:
            self._detect_encoding()

        return self._engine.decode(self._channel)

    def _detect_encoding(self) -> None:
        self._encoding = self._sniffer.sniff(self._channel)
        if self._encoding is Encoding.UTF8:
            self._engine = UTF8Engine()
        else:
            self._engine = UTF16Engine(big_endian=self._encoding is Encoding.UTF16BE)
        self.logger.debug(
            "Detected encoding",
            extra={"encoding": self._encoding.name, "retained": self._channel.retained},
        )

    def __iter__(self) -> Iterator[int]:
        """Yield values up to the end of the stream.

        EOF ends the iteration without being yielded; UNSPECIFIC_IO_ERROR is
        yielded before the iteration ends.
        """
        while True:
            code_point = self.read_code_point()
            if code_point == EOF:
                return
            yield code_point
