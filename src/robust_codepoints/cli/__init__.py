"""Command-line interface module for robust code point decoding.

Provides the robust-codepoints tool for decoding files of unknown encoding and
reporting detected encodings.
"""

from .main import main

__all__ = ["main"]
