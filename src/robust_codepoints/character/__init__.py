"""Character layer: byte sources, encoding engines and the code point decoder.

The decoder turns a byte stream of unknown encoding into code points and
reports every problem in-band, following the never-fail philosophy.
"""

from .constants import (
    EOF,
    GARBAGE,
    OVERLONG_0,
    UNSPECIFIC_IO_ERROR,
    Encoding,
    is_legal_code_point,
)
from .tables import make_8bit_table, normalize_charset_name
from .source import ByteSource, BytesSource, ReadResult, SourceStatus, StreamByteSource
from .decoder import CodePointDecoder
from .stream import (
    CodePointStreamProcessor,
    DecodeResult,
    code_points_to_text,
    decode,
    decode_to_text,
)

__all__ = [
    # Modules
    "constants",
    "tables",
    "source",
    "channel",
    "engines",
    "decoder",
    "stream",
    # Sentinels and encodings
    "EOF",
    "GARBAGE",
    "OVERLONG_0",
    "UNSPECIFIC_IO_ERROR",
    "Encoding",
    "is_legal_code_point",
    # Translation tables
    "make_8bit_table",
    "normalize_charset_name",
    # Byte sources
    "ByteSource",
    "BytesSource",
    "ReadResult",
    "SourceStatus",
    "StreamByteSource",
    # Decoding
    "CodePointDecoder",
    "CodePointStreamProcessor",
    "DecodeResult",
    "code_points_to_text",
    "decode",
    "decode_to_text",
]
