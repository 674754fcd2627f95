"""Translation tables for legacy 8-bit charsets.

A translation table maps each of the 256 byte values to a code point. Tables
are immutable tuples built on demand; bytes 0..127 always map to themselves.
"""

import re
from typing import Callable, Dict, List, Optional, Tuple

from .constants import REPLACEMENT_CHARACTER

TranslationTable = Tuple[int, ...]

TABLE_SIZE = 256
ASCII_CORE_SIZE = 128

_NAME_FILTER = re.compile(r"[^0-9A-Z]")


def _ascii_upper(byte_value: int) -> int:
    return REPLACEMENT_CHARACTER


def _latin1_upper(byte_value: int) -> int:
    return byte_value


# Normalized charset name -> mapping for bytes 128..255
_UPPER_HALF: Dict[str, Callable[[int], int]] = {
    "ASCII": _ascii_upper,
    "LATIN1": _latin1_upper,
    "ISO88591": _latin1_upper,
}


def normalize_charset_name(charset: str) -> str:
    """Upper-case ``charset`` and strip everything except ``[0-9A-Z]``.

    Only ASCII letters are folded; non-ASCII characters are dropped first.

    ``"iso-8859-1"`` and ``"ISO88591"`` normalize to the same name.
    """
    ascii_only = charset.encode("ascii", "ignore").decode("ascii")
    return _NAME_FILTER.sub("", ascii_only.upper())


def supported_charsets() -> List[str]:
    return sorted(_UPPER_HALF)


def make_8bit_table(charset: str) -> Optional[TranslationTable]:
    """Build the translation table for ``charset``.

    Supported charsets:

        ASCII             bytes >= 128 map to U+FFFD
        LATIN1, ISO88591  ISO-8859-1

    Args:
        charset: Charset name, matched after normalize_charset_name()

    Returns:
        256-entry table, or None if the charset is not supported
    """
    upper_half = _UPPER_HALF.get(normalize_charset_name(charset))
    if upper_half is None:
        return None

    table = list(range(ASCII_CORE_SIZE))
    table.extend(upper_half(b) for b in range(ASCII_CORE_SIZE, TABLE_SIZE))
    return tuple(table)


def validate_table(table: Optional[TranslationTable]) -> TranslationTable:
    """Check that ``table`` can drive the 8-bit engine.

    Raises:
        ValueError: If the table is missing or does not have 256 entries
    """
    if table is None:
        raise ValueError("A translation table is required, got None")
    if len(table) != TABLE_SIZE:
        raise ValueError(
            f"Translation table must have {TABLE_SIZE} entries, got {len(table)}"
        )
    return tuple(table)
