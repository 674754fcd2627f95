"""Tests for 8-bit translation tables."""

import pytest

from robust_codepoints.character.constants import REPLACEMENT_CHARACTER
from robust_codepoints.character.tables import (
    make_8bit_table,
    normalize_charset_name,
    supported_charsets,
    validate_table,
)


class TestNormalizeCharsetName:
    """Test charset name normalization."""

    @pytest.mark.parametrize(
        "name,normalized",
        [
            ("iso-8859-1", "ISO88591"),
            ("Latin-1", "LATIN1"),
            ("A-s-C-i-i", "ASCII"),
            ("  utf_8 ", "UTF8"),
            ("", ""),
            ("asc\u0131\u0131", "ASC"),
            ("l\u00e4tin-1", "LTIN1"),
        ],
    )
    def test_normalization(self, name, normalized):
        assert normalize_charset_name(name) == normalized


class TestMake8BitTable:
    """Test table construction."""

    def test_ascii_table(self):
        table = make_8bit_table("ASCII")

        assert len(table) == 256
        assert list(table[:128]) == list(range(128))
        assert set(table[128:]) == {REPLACEMENT_CHARACTER}

    @pytest.mark.parametrize("name", ["LATIN1", "latin-1", "ISO-8859-1", "iso88591"])
    def test_latin1_table(self, name):
        table = make_8bit_table(name)

        assert table == tuple(range(256))

    @pytest.mark.parametrize("name", ["cp1252", "UTF-8", "", "latin2", "asc\u0131\u0131"])
    def test_unsupported_charset_returns_none(self, name):
        assert make_8bit_table(name) is None

    def test_tables_are_immutable(self):
        table = make_8bit_table("ascii")

        with pytest.raises(TypeError):
            table[0] = 1

    def test_supported_charsets(self):
        assert supported_charsets() == ["ASCII", "ISO88591", "LATIN1"]


class TestValidateTable:
    """Test table validation used by the 8-bit engine."""

    def test_accepts_lists(self):
        assert validate_table(list(range(256))) == tuple(range(256))

    def test_rejects_none(self):
        with pytest.raises(ValueError, match="required"):
            validate_table(None)

    def test_rejects_wrong_length(self):
        with pytest.raises(ValueError, match="256 entries, got 255"):
            validate_table(tuple(range(255)))
