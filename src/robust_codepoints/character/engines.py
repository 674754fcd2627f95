"""Encoding sniffer and the per-encoding decoding engines.

Engines keep no state between calls: everything that is not yet delivered lives
in the ByteChannel as retained bytes. A rejected sequence therefore only ever
gives up its first byte, and the remaining retained bytes are examined again
from scratch on the next call.
"""

from typing import ClassVar, Dict

from .channel import ByteChannel
from .constants import MAX_CODE_POINT, Encoding
from .tables import TranslationTable, validate_table

# UTF-8 lead byte classes
UTF8_ASCII_MAX = 0x80
UTF8_LEAD_MIN = 0xC2          # 0x80..0xC1 never start a valid sequence
UTF8_3BYTE_LEAD_MIN = 0xE0
UTF8_4BYTE_LEAD_MIN = 0xF0
UTF8_LEAD_MAX = 0xF4          # 0xF5.. would exceed U+10FFFF
UTF8_CONTINUATION_MASK = 0xC0
UTF8_CONTINUATION_TAG = 0x80
UTF8_PAYLOAD_MASK = 0x3F

# UTF-16 surrogate ranges
HIGH_SURROGATE_MIN = 0xD800
HIGH_SURROGATE_MAX = 0xDBFF
LOW_SURROGATE_MIN = 0xDC00
LOW_SURROGATE_MAX = 0xDFFF
SUPPLEMENTARY_BASE = 0x10000


class EncodingSniffer:
    """Pick UTF-16BE, UTF-16LE or UTF-8 from the first two bytes.

    The sniffed bytes stay retained so the selected engine decodes them like
    any other input; a byte order mark simply comes out as U+FEFF.
    """

    def sniff(self, channel: ByteChannel) -> Encoding:
        if not channel.fill(2):
            # Empty, one-byte or failing stream: UTF-8 drains whatever is there
            return Encoding.UTF8

        first, second = channel.peek(0), channel.peek(1)
        if first == 0 and second != 0:
            return Encoding.UTF16BE
        if second == 0 and first != 0:
            return Encoding.UTF16LE
        if (first, second) == (0xFE, 0xFF):
            return Encoding.UTF16BE
        if (first, second) == (0xFF, 0xFE):
            return Encoding.UTF16LE
        return Encoding.UTF8


class UTF8Engine:
    """UTF-8 decoding with overlong and range rejection."""

    # Smallest code point that really needs a sequence of the given length
    MINIMUM_CODE_POINT: ClassVar[Dict[int, int]] = {2: 0x80, 3: 0x800, 4: 0x10000}

    def decode(self, channel: ByteChannel) -> int:
        if not channel.fill(1):
            return channel.drain()

        lead = channel.peek(0)
        if lead < UTF8_ASCII_MAX:
            channel.consume(1)
            return lead
        if lead < UTF8_LEAD_MIN or lead > UTF8_LEAD_MAX:
            return channel.emit_garbage()

        if lead < UTF8_3BYTE_LEAD_MIN:
            length = 2
        elif lead < UTF8_4BYTE_LEAD_MIN:
            length = 3
        else:
            length = 4

        # Continuation bytes are read one at a time so a broken sequence
        # never pulls bytes past the point where it fails.
        for index in range(1, length):
            if not channel.fill(index + 1):
                return channel.emit_garbage()
            if channel.peek(index) & UTF8_CONTINUATION_MASK != UTF8_CONTINUATION_TAG:
                return channel.emit_garbage()

        code_point = lead & (0x7F >> length)
        for index in range(1, length):
            code_point = (code_point << 6) | (channel.peek(index) & UTF8_PAYLOAD_MASK)

        if code_point < self.MINIMUM_CODE_POINT[length] or code_point > MAX_CODE_POINT:
            return channel.emit_garbage()

        channel.consume(length)
        return code_point


class UTF16Engine:
    """UTF-16 decoding with surrogate pair assembly.

    Units are read two bytes at a time. After a unit has been rejected its
    second byte is left on its own; it is given up as garbage too so that
    decoding continues on the original unit boundaries.
    """

    def __init__(self, big_endian: bool) -> None:
        self.big_endian = big_endian

    def _unit(self, channel: ByteChannel, offset: int) -> int:
        first, second = channel.peek(offset), channel.peek(offset + 1)
        if self.big_endian:
            return (first << 8) | second
        return (second << 8) | first

    def decode(self, channel: ByteChannel) -> int:
        if channel.retained % 2:
            return channel.emit_garbage()
        if not channel.fill(2):
            return channel.drain()

        unit = self._unit(channel, 0)
        if unit < HIGH_SURROGATE_MIN or unit > LOW_SURROGATE_MAX:
            channel.consume(2)
            return unit
        if unit >= LOW_SURROGATE_MIN:
            return channel.emit_garbage()

        if not channel.fill(4):
            return channel.drain()

        low = self._unit(channel, 2)
        if not LOW_SURROGATE_MIN <= low <= LOW_SURROGATE_MAX:
            return channel.emit_garbage()

        channel.consume(4)
        return SUPPLEMENTARY_BASE + (low - LOW_SURROGATE_MIN) + (
            (unit - HIGH_SURROGATE_MIN) << 10
        )


class EightBitEngine:
    """Direct byte to code point lookup through a translation table."""

    def __init__(self, table: TranslationTable) -> None:
        self.table = validate_table(table)

    def decode(self, channel: ByteChannel) -> int:
        if not channel.fill(1):
            return channel.drain()
        byte_value = channel.peek(0)
        channel.consume(1)
        return self.table[byte_value]
