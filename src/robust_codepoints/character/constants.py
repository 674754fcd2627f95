"""Code point sentinels, encoding identifiers and code point predicates.

Every value produced by the decoder is a plain ``int``. Non-negative values are
Unicode code points, negative values are sentinels that report stream
conditions in-band:

    EOF                  -512          stream exhausted
    UNSPECIFIC_IO_ERROR  -511          read failure, reported once
    GARBAGE + b          -256 .. -1    undecodable byte ``b`` (0..255)

Simple range tests are enough to classify a value::

    if cp < 0:
        if cp >= GARBAGE:
            bad_byte = cp - GARBAGE
        elif cp == UNSPECIFIC_IO_ERROR:
            ...
"""

from enum import IntEnum
from typing import Tuple

EOF = -512
UNSPECIFIC_IO_ERROR = EOF + 1
GARBAGE = -256

# Two-byte overlong encoding of U+0000 ("modified UTF-8") as the decoder reports it
OVERLONG_0: Tuple[int, int] = (GARBAGE + 0xC0, GARBAGE + 0x80)

REPLACEMENT_CHARACTER = 0xFFFD
MAX_CODE_POINT = 0x10FFFF

SURROGATE_MIN = 0xD800
SURROGATE_MAX = 0xDFFF

# Bit masks for coarse classification of Encoding values
ENCODING_8BIT_FAMILY = 1
ENCODING_16BIT_FAMILY = 4


class Encoding(IntEnum):
    """Encoding a decoder operates in.

    Values are chosen so that ``encoding & ENCODING_8BIT_FAMILY`` is true for
    UTF-8 and table encodings and ``encoding & ENCODING_16BIT_FAMILY`` is true
    for both UTF-16 byte orders.
    """

    UNKNOWN = 0
    EIGHT_BIT = 1
    UTF8 = 3
    UTF16LE = 4
    UTF16BE = 12

    @property
    def is_8bit_family(self) -> bool:
        return bool(self & ENCODING_8BIT_FAMILY)

    @property
    def is_16bit_family(self) -> bool:
        return bool(self & ENCODING_16BIT_FAMILY)


def is_legal_code_point(code_point: int) -> bool:
    """Return True if ``code_point`` can be encoded in both UTF-8 and UTF-16.

    That is 0..0xD7FF and 0xE000..0x10FFFF; sentinels, surrogates and values
    above the UTF-16 ceiling are rejected.
    """
    # The ceiling is the whole UTF-16 range, so 0x11000 is legal
    # (DESIGN.md, decision 4).
    if code_point < 0 or code_point > MAX_CODE_POINT:
        return False
    return not SURROGATE_MIN <= code_point <= SURROGATE_MAX


def is_garbage(code_point: int) -> bool:
    """Return True if ``code_point`` reports a single undecodable byte."""
    return GARBAGE <= code_point < 0


def garbage_byte(code_point: int) -> int:
    """Recover the original byte from a garbage sentinel."""
    if not is_garbage(code_point):
        raise ValueError(f"Not a garbage sentinel: {code_point}")
    return code_point - GARBAGE


def is_terminal(code_point: int) -> bool:
    """Return True for the end-of-stream and I/O error sentinels."""
    return code_point in (EOF, UNSPECIFIC_IO_ERROR)


def is_overlong_nul(first: int, second: int) -> bool:
    return (first, second) == OVERLONG_0


def describe_code_point(code_point: int) -> str:
    """Render a decoder value for logs and reports."""
    if code_point == EOF:
        return "EOF"
    if code_point == UNSPECIFIC_IO_ERROR:
        return "UNSPECIFIC_IO_ERROR"
    if is_garbage(code_point):
        return f"GARBAGE(0x{code_point - GARBAGE:02X})"
    if code_point < 0:
        return f"SENTINEL({code_point})"
    return f"U+{code_point:04X}"
