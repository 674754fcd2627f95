"""Robust code point decoding.

A never-fail decoder that turns a byte stream of unknown or mixed encoding
into Unicode code points, auto-detecting UTF-8, UTF-16LE and UTF-16BE, with a
switch to 8-bit translation tables for legacy charsets. Malformed bytes are
reported in-band and decoding resumes on the very next byte.

Progressive API Disclosure:
- Level 1: Simple functions - decode(), decode_to_text()
- Level 2: Configured processing - CodePointStreamProcessor with DecoderConfig
- Level 3: Pull decoding - CodePointDecoder.read_code_point()
"""

__version__ = "0.1.0"
__author__ = "Robust Codepoints Team"

from .character import (
    EOF,
    GARBAGE,
    OVERLONG_0,
    UNSPECIFIC_IO_ERROR,
    ByteSource,
    BytesSource,
    CodePointDecoder,
    CodePointStreamProcessor,
    DecodeResult,
    Encoding,
    StreamByteSource,
    decode,
    decode_to_text,
    is_legal_code_point,
    make_8bit_table,
)
from .shared.config import DecoderConfig, GarbageHandling

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "decode",
    "decode_to_text",

    # Level 2: Configured processing
    "CodePointStreamProcessor",
    "DecodeResult",
    "DecoderConfig",
    "GarbageHandling",

    # Level 3: Pull decoding
    "CodePointDecoder",
    "ByteSource",
    "BytesSource",
    "StreamByteSource",
    "Encoding",
    "make_8bit_table",
    "is_legal_code_point",

    # Sentinels
    "EOF",
    "GARBAGE",
    "OVERLONG_0",
    "UNSPECIFIC_IO_ERROR",
]
